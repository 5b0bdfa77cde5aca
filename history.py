import itertools
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from prompt_templates import GenerationMode

logger = logging.getLogger(__name__)

# Suffixes appended to the artist name to mark derived songs in the history.
LABEL_SUFFIXES = {
    GenerationMode.REMIX: "(Reimagined)",
    GenerationMode.HOOK_REMIX: "(Hook Remix)",
    GenerationMode.ENHANCE: "(Enhanced)",
}

_SUFFIX_RE = re.compile(r' \((?:Reimagined|Hook Remix|Enhanced)\)$')


def make_label(artist, mode):
    """Build the history label for a song produced by *mode*."""
    suffix = LABEL_SUFFIXES.get(mode)
    return f"{artist} {suffix}" if suffix else artist


def strip_label_suffix(label):
    """Recover the bare artist name from a history label."""
    return _SUFFIX_RE.sub("", label)


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    label: str
    topic: str
    lyrics: str
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))


class SongHistory:
    """In-memory list of generated songs, newest first."""

    def __init__(self):
        self._entries = []
        self._ids = itertools.count(1)

    def add(self, label, topic, lyrics):
        entry = HistoryEntry(id=next(self._ids), label=label, topic=topic, lyrics=lyrics)
        self._entries.insert(0, entry)
        logger.debug("History entry %d added: %s", entry.id, label)
        return entry

    def get(self, entry_id):
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def clear(self):
        self._entries.clear()

    def entries(self):
        """Snapshot of all entries, newest first."""
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def __getitem__(self, index):
        return self._entries[index]

    def __iter__(self):
        return iter(list(self._entries))
