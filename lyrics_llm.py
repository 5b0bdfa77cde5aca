import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from llm_backends import EmptyResponse
from prompt_templates import GenerationMode, GenerationRequest, PromptBuilder, PromptTemplates

logger = logging.getLogger(__name__)


def _now():
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class GenerationResult:
    text: str
    mode: GenerationMode
    timestamp: str = field(default_factory=_now)


@dataclass
class StyleAnalysis:
    """Sonic breakdown of an artist or song."""

    style: str
    production_style: str
    bass_element: str
    studio_production: str

    def combined(self):
        """Single comma-separated style prompt built from all four fields."""
        return ", ".join([self.style, self.production_style, self.bass_element, self.studio_production])


_ANALYSIS_ATTRS = {
    "STYLE": "style",
    "PRODUCTION_STYLE": "production_style",
    "BASS_ELEMENT": "bass_element",
    "STUDIO_PRODUCTION": "studio_production",
}

_FIELD_PATTERNS = {
    marker: rf'==={marker}===\s*(.*?)\s*===END_{marker}==='
    for marker, _hint in PromptTemplates.ANALYSIS_FIELDS
}


async def _complete(client, prompt, mode):
    text = await client.generate(prompt)
    return GenerationResult(text=text, mode=mode)


async def generate_lyrics(client, request: GenerationRequest) -> GenerationResult:
    """Generate a new song, or reimagine ``request.existing_lyrics`` when given."""
    mode = GenerationMode.REMIX if request.existing_lyrics else GenerationMode.NEW_SONG
    prompt = PromptBuilder.build_lyrics_prompt(request)
    logger.info("Generating lyrics (mode=%s, artist=%r, cues=%s)", mode.value, request.artist,
                request.include_production_cues)
    return await _complete(client, prompt, mode)


async def generate_hook_remix(client, lyrics, include_production_cues=True) -> GenerationResult:
    prompt = PromptBuilder.build_hook_remix_prompt(lyrics, include_production_cues)
    logger.info("Generating hook remix (cues=%s)", include_production_cues)
    return await _complete(client, prompt, GenerationMode.HOOK_REMIX)


async def enhance_lyrics(client, lyrics) -> GenerationResult:
    prompt = PromptBuilder.build_enhance_prompt(lyrics)
    logger.info("Enhancing lyrics (%d lines)", len(lyrics.splitlines()))
    return await _complete(client, prompt, GenerationMode.ENHANCE)


async def generate_music_style(client, lyrics, artist) -> str:
    """Derive a single-line, comma-separated style descriptor for the lyrics."""
    text = await client.generate(PromptBuilder.build_style_prompt(lyrics, artist))
    # the descriptor must be one line; keep the first non-empty one
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise EmptyResponse("The AI model returned an empty style prompt.")
    return lines[0]


def parse_style_analysis(response: str) -> StyleAnalysis:
    """Extract the four analysis fields from a marker-formatted response.

    Raises EmptyResponse if any field is missing or blank.
    """
    values = {}
    missing = []
    for marker, pattern in _FIELD_PATTERNS.items():
        m = re.search(pattern, response, re.DOTALL)
        value = " ".join(m.group(1).split()) if m else ""
        if not value:
            missing.append(marker.lower())
        values[_ANALYSIS_ATTRS[marker]] = value
    if missing:
        logger.warning("Failed to parse %s from LLM response (markers not found)", ", ".join(missing))
        raise EmptyResponse(f"The AI model did not return: {', '.join(missing)}.")
    return StyleAnalysis(**values)


async def analyze_music_style(client, name) -> StyleAnalysis:
    logger.info("Analyzing music style of %r", name)
    response = await client.generate(PromptBuilder.build_style_analysis_prompt(name))
    return parse_style_analysis(response)
