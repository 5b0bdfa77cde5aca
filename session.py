"""Per-user songwriting session.

A ``SongSession`` owns the lyrics in view, the derived style descriptor and the
song history, and sequences the generation calls that change them. All
methods run on one event loop; the only background work is the style
derivation that follows a successful generation.
"""

import asyncio
import logging
from enum import Enum

from history import SongHistory, make_label, strip_label_suffix
from llm_backends import GenerationError, StaleResult, ValidationError
from lyrics_llm import (
    analyze_music_style, enhance_lyrics, generate_hook_remix, generate_lyrics, generate_music_style,
)
from prompt_templates import GenerationMode, GenerationRequest

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    NEW_SONG = "new_song"
    REMIX = "remix"
    HOOK_REMIX = "hook_remix"
    ENHANCE = "enhance"
    STYLE = "style"
    ANALYSIS = "analysis"


# Actions that replace the lyrics in view; at most one runs at a time.
PRIMARY_ACTIONS = (ActionKind.NEW_SONG, ActionKind.REMIX, ActionKind.HOOK_REMIX, ActionKind.ENHANCE)


def _blank(value):
    return not value or not value.strip()


class SongSession:
    """Current lyrics/style state and history for one user."""

    def __init__(self, client):
        self.client = client
        self.artist = ""
        self.topic = ""
        self.lyrics = ""
        self.style = ""
        self.style_analysis = None
        self.error = None
        self.busy = {kind: False for kind in ActionKind}
        self.history = SongHistory()
        # Bumped by every action that replaces the lyrics in view. Style
        # results are applied only if they were started in the current epoch.
        self._epoch = 0
        self._style_task = None
        self._background = set()

    @property
    def is_busy(self):
        return any(self.busy[kind] for kind in PRIMARY_ACTIONS)

    def _reject(self, message):
        self.error = message
        raise ValidationError(message)

    def _check_idle(self):
        if self.is_busy:
            self._reject("Another generation is already in progress.")

    def _new_epoch(self, clear_style=True):
        self._epoch += 1
        self.busy[ActionKind.STYLE] = False
        if clear_style:
            self.style = ""

    # --- primary actions ---

    async def request_new_song(self, request: GenerationRequest):
        if _blank(request.artist) or _blank(request.topic):
            self._reject("Please provide both an artist and a topic.")
        self._check_idle()
        fresh = GenerationRequest(
            mode=GenerationMode.NEW_SONG,
            artist=request.artist,
            topic=request.topic,
            structure_source=request.structure_source,
            inspiration_lyrics=request.inspiration_lyrics,
            include_production_cues=request.include_production_cues,
        )
        return await self._run_primary(
            ActionKind.NEW_SONG, generate_lyrics(self.client, fresh),
            request.artist, request.topic, derive_style=True,
        )

    async def request_remix(self, request: GenerationRequest):
        """Reimagine the lyrics in view for the artist/topic in *request*."""
        if _blank(request.artist) or _blank(request.topic) or _blank(self.lyrics):
            self._reject("Cannot remix without an existing song.")
        self._check_idle()
        remix = GenerationRequest(
            mode=GenerationMode.REMIX,
            artist=request.artist,
            topic=request.topic,
            structure_source=request.structure_source,
            existing_lyrics=self.lyrics,
            include_production_cues=request.include_production_cues,
        )
        return await self._run_primary(
            ActionKind.REMIX, generate_lyrics(self.client, remix),
            request.artist, request.topic, derive_style=True,
        )

    async def request_hook_remix(self, lyrics=None, include_cues=True):
        lyrics = self.lyrics if lyrics is None else lyrics
        if _blank(lyrics):
            self._reject("Cannot create a remix without an existing song.")
        self._check_idle()
        return await self._run_primary(
            ActionKind.HOOK_REMIX, generate_hook_remix(self.client, lyrics, include_cues),
            self.artist, self.topic, derive_style=True,
        )

    async def request_enhance(self, lyrics=None):
        """Annotate lyrics with production cues; the style descriptor is kept."""
        lyrics = self.lyrics if lyrics is None else lyrics
        if _blank(lyrics):
            self._reject("Cannot enhance without existing lyrics.")
        self._check_idle()
        return await self._run_primary(
            ActionKind.ENHANCE, enhance_lyrics(self.client, lyrics),
            self.artist, self.topic, derive_style=False,
        )

    async def _run_primary(self, kind, call, artist, topic, derive_style):
        # artist and topic are fixed when the action starts; the epoch, the
        # style slot and the form fields change only once new lyrics arrive
        self.busy[kind] = True
        self.error = None
        try:
            result = await call
        except GenerationError as e:
            logger.error("%s failed: %s", kind.value, e)
            self.error = str(e)
            raise
        finally:
            self.busy[kind] = False

        self._new_epoch(clear_style=derive_style)
        self.artist = artist
        self.topic = topic
        self.lyrics = result.text
        self.history.add(make_label(artist, result.mode), topic, result.text)
        if derive_style:
            self._start_style_derivation(result.text, artist)
        return result

    def replace_lyrics(self, lyrics):
        """Take hand-edited lyrics; the style derived for the old text is dropped."""
        if lyrics == self.lyrics:
            return
        self.lyrics = lyrics
        self._new_epoch(clear_style=True)

    # --- style descriptor ---

    def _start_style_derivation(self, lyrics, artist):
        epoch = self._epoch
        self.busy[ActionKind.STYLE] = True
        task = asyncio.create_task(self._derive_style(lyrics, artist, epoch))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        self._style_task = task

    async def _derive_style(self, lyrics, artist, epoch):
        try:
            style = await generate_music_style(self.client, lyrics, artist)
            self._apply_style(style, epoch)
        except StaleResult as e:
            logger.debug("Discarding style result: %s", e)
        except Exception as e:
            # optional enrichment, never surfaced to the user
            logger.warning("Failed to generate music style: %s", e)
        finally:
            if epoch == self._epoch:
                self.busy[ActionKind.STYLE] = False

    def _apply_style(self, style, epoch):
        if epoch != self._epoch:
            raise StaleResult(f"style from generation {epoch} superseded by generation {self._epoch}")
        self.style = style

    async def wait_for_style(self):
        """Wait for the pending style derivation, if any, and return the style in view."""
        task = self._style_task
        if task is not None and not task.done():
            await task
        return self.style

    # --- style analyzer ---

    async def request_style_analysis(self, name):
        if _blank(name):
            self._reject("Please enter an artist or song name.")
        if self.busy[ActionKind.ANALYSIS]:
            self._reject("A style analysis is already in progress.")
        self.busy[ActionKind.ANALYSIS] = True
        self.error = None
        try:
            self.style_analysis = await analyze_music_style(self.client, name.strip())
        except GenerationError as e:
            logger.error("Style analysis failed: %s", e)
            self.error = str(e)
            self.style_analysis = None
            raise
        finally:
            self.busy[ActionKind.ANALYSIS] = False
        return self.style_analysis

    # --- history ---

    def load_from_history(self, entry_id):
        entry = self.history.get(entry_id)
        if entry is None:
            self._reject("That song is no longer in the history.")
        self.artist = strip_label_suffix(entry.label)
        self.topic = entry.topic
        self.lyrics = entry.lyrics
        self._new_epoch(clear_style=True)
        return entry

    def clear_history(self):
        self.history.clear()
