"""Prompt template system for lyric generation.

Every prompt the assistant sends is assembled here from reusable components.
Builders are pure: the same request always yields the same prompt string, and
they never validate input (callers enforce required fields before building).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class GenerationMode(str, Enum):
    NEW_SONG = "new_song"
    REMIX = "remix"
    HOOK_REMIX = "hook_remix"
    ENHANCE = "enhance"
    STYLE_ANALYSIS = "style_analysis"


@dataclass
class GenerationRequest:
    """User input for one generation call."""

    mode: GenerationMode = GenerationMode.NEW_SONG
    artist: str = ""
    topic: str = ""
    structure_source: str = ""
    existing_lyrics: str = ""
    inspiration_lyrics: str = ""
    include_production_cues: bool = True

    @property
    def structural_inspiration(self) -> str:
        """The song or artist whose structure to follow; defaults to the artist."""
        if self.structure_source and self.structure_source.strip():
            return self.structure_source
        return self.artist


class PromptTemplates:
    """Container for prompt template components."""

    DETAILED_ROLE = """You are a creative songwriter and music producer AI.
Your task is to write a complete song based on the user's request.
The song should include lyrics and production cues in [brackets] to guide the musical arrangement.
The vocal delivery, harmonies, and ad-libs should be noted in (parentheses)."""

    LYRICS_ONLY_ROLE = """You are a creative songwriter AI.
Your task is to write the lyrics for a complete song based on the user's request."""

    DETAILED_OUTPUT = """**Output Format:**
- Start directly with the song. Do not add a title, introduction, or closing remarks.
- Put every production cue on its own line or at the end of a line, in [brackets].
- Put vocal delivery notes, harmonies, and ad-libs in (parentheses) next to the words they accompany."""

    # Appended to every prompt that must come back as bare lyrics.
    LYRICS_ONLY_RULES = """**CRITICAL OUTPUT RULES:**
1.  **LYRICS ONLY:** Your entire response must be ONLY the raw song lyrics.
2.  **NO LABELS:** Do NOT include any structural labels like [Verse], [Chorus], [Intro], [Outro], etc.
3.  **NO PRODUCTION NOTES:** Do NOT include any bracketed text.
4.  **NO HARMONIES/AD-LIBS:** Do NOT include any parenthetical text.
5.  **NO EXTRA TEXT:** Do not add any introductory sentences, titles, or concluding remarks."""

    REMIX_DIRECTIVE = """- **Task:** Radically remix and reimagine the following song to give it a completely different feel. You can change the perspective, mood, or narrative, but keep the core topic. Here are the original lyrics to transform:"""

    INSPIRATION_DIRECTIVE = """- **Inspiration:** Draw inspiration from the themes, mood, and lyrical style of the following lyrics. Do not copy any of its lines:"""

    HOOK_REMIX_ROLE = {
        "cues": """You are a master DJ and music producer AI.
Your task is to take the following song and create a 5-6 minute extended remix. The remix must heavily focus on the hook/chorus.""",
        "lyrics_only": """You are a master DJ and music producer AI.
Your task is to take the following song and create the lyrics for a 5-6 minute extended remix. The remix must heavily focus on the hook/chorus.""",
    }

    HOOK_REMIX_STEPS = {
        "cues": """**Instructions:**
1.  **Identify the Hook:** First, analyze the provided lyrics and identify the main hook or chorus.
2.  **Extend and Rebuild:** Create a full 5-6 minute song structure around that hook. Use repetition, build-ups, breakdowns, beat switches, and vocal chops of the hook.
3.  **Add New Elements:** Introduce new instrumental sections (like long intros/outros, bridges), and add new, complementary ad-libs that fit the original theme and style.
4.  **Formatting:** Include structural and production cues in [brackets] and ad-libs in (parentheses).""",

        "lyrics_only": """**Instructions:**
1.  **Identify the Hook:** Analyze the provided lyrics and identify the main hook or chorus.
2.  **Extend and Rebuild:** Create a full 5-6 minute song structure around that hook using lyrical repetition, variations, and new complementary bridges or verses.""",
    }

    ENHANCE_BODY = """You are a versatile music production AI. Your task is to enhance the provided lyrics with production cues and vocal suggestions without altering the original lyrics.

1. **Structure**: Preserve every original line exactly, word for word, in its original order. Do NOT add section tags like [Verse 1], [Chorus], or [Bridge]. Insert ONLY inline production instructions in [brackets] after relevant lines to suggest instrumental transitions or effects (e.g., [rising synth build], [acoustic guitar enters softly], [808 drops]). Use these sparingly to enhance the song's flow.

2. **Harmonies/Background**: Strategically add background vocals, echoes, or ad-libs in (parentheses) after selected phrases. **Do not add them to every line.** Focus on placement where it serves the song best, such as emphasizing a key phrase or building energy. Examples: (oohs fading), (echo: go!), (harmony swells).

3. **Flow**: Infer the genre from the lyrics and tailor your suggestions accordingly.

**CRITICAL OUTPUT RULES:**
- Your entire response MUST be ONLY the enhanced lyrics.
- Do NOT add any introductory sentences, explanations, titles, or concluding remarks.
- Do NOT change, reorder, or remove any of the original lyrics. Only insert the production cues and background vocals."""

    STYLE_BODY = """You are an expert music producer AI. Based on the provided lyrics and artist style, generate a single-line, comma-separated style prompt suitable for a music generation AI.

**CRITICAL RULES:**
1.  The prompt must be a comma-separated list of tags covering, in this order: genre/style, instrumentation, vocal style, production/sound design.
2.  The entire output must be a single line of text.
3.  Do not add any other text, explanations, or formatting.

**Example Output:**
Indie Pop, Rhythmic acoustic guitar, Warm male vocals, Lo-fi tape saturation"""

    # Field markers for the structured style analysis, parsed by lyrics_llm.
    ANALYSIS_FIELDS = [
        ("STYLE", "genre and subgenre, mood, era (a few comma-separated words)"),
        ("PRODUCTION_STYLE", "arrangement and mixing approach (a few comma-separated words)"),
        ("BASS_ELEMENT", "the character of the bass or low end (a short phrase)"),
        ("STUDIO_PRODUCTION", "signature studio techniques and effects (a few comma-separated words)"),
    ]


def _lyrics_block(lyrics: str) -> str:
    return f"---\n{lyrics}\n---"


class PromptBuilder:
    """Builds finished prompts for each generation mode."""

    @staticmethod
    def build_lyrics_prompt(request: GenerationRequest) -> str:
        """Build the prompt for a new song or a full reimagining.

        Args:
            request: Artist, topic, references and flags. A non-empty
                ``existing_lyrics`` switches to remix semantics.

        Returns:
            Complete prompt string
        """
        parts = []
        cues = request.include_production_cues

        parts.append(PromptTemplates.DETAILED_ROLE if cues else PromptTemplates.LYRICS_ONLY_ROLE)
        parts.append("")

        context = [
            "**User Request:**",
            f"- **Artist Style:** {request.artist}",
            f"- **Topic:** {request.topic}",
            f"- **Structural Inspiration:** {request.structural_inspiration}",
        ]
        if request.existing_lyrics:
            context.append(PromptTemplates.REMIX_DIRECTIVE + "\n" + _lyrics_block(request.existing_lyrics))
        elif request.inspiration_lyrics and request.inspiration_lyrics.strip():
            context.append(PromptTemplates.INSPIRATION_DIRECTIVE + "\n" + _lyrics_block(request.inspiration_lyrics))
        parts.append("\n".join(context))
        parts.append("")

        if cues:
            parts.append(PromptTemplates.DETAILED_OUTPUT)
            parts.append("")
            parts.append("Generate the song now, including clear production cues.")
        else:
            parts.append(PromptTemplates.LYRICS_ONLY_RULES)
            parts.append("")
            parts.append("Generate the lyrics now.")

        return "\n".join(parts)

    @staticmethod
    def build_hook_remix_prompt(lyrics: str, include_production_cues: bool = True) -> str:
        parts = []
        if include_production_cues:
            parts.append(PromptTemplates.HOOK_REMIX_ROLE["cues"])
            parts.append("")
            parts.append(PromptTemplates.HOOK_REMIX_STEPS["cues"])
        else:
            parts.append(PromptTemplates.HOOK_REMIX_ROLE["lyrics_only"])
            parts.append("")
            parts.append(PromptTemplates.HOOK_REMIX_STEPS["lyrics_only"])
            parts.append("")
            parts.append(PromptTemplates.LYRICS_ONLY_RULES)
        parts.append("")
        parts.append("**Original Song Lyrics:**")
        parts.append(_lyrics_block(lyrics))
        parts.append("")
        if include_production_cues:
            parts.append("Generate the 5-6 minute extended hook remix now.")
        else:
            parts.append("Generate the lyrics for the extended hook remix now.")
        return "\n".join(parts)

    @staticmethod
    def build_enhance_prompt(lyrics: str) -> str:
        return "\n".join([
            PromptTemplates.ENHANCE_BODY,
            "",
            "Here are the lyrics to enhance:",
            _lyrics_block(lyrics),
            "",
            "Enhance them now.",
        ])

    @staticmethod
    def build_style_prompt(lyrics: str, artist: str) -> str:
        return "\n".join([
            PromptTemplates.STYLE_BODY,
            "",
            f"**Artist Style:** {artist}",
            "**Lyrics:**",
            _lyrics_block(lyrics),
            "",
            "Generate the music style prompt now.",
        ])

    @staticmethod
    def build_style_analysis_prompt(name: str) -> str:
        """Build a prompt asking for a four-field sonic breakdown of an artist or song.

        The answer is requested in ``===FIELD===`` markers so each field can be
        extracted independently.
        """
        parts: List[str] = [
            "You are an expert music producer and sound engineer AI.",
            f"Break down the signature sound of the following artist or song: {name}",
            "",
            "You MUST output EXACTLY these four fields in the marker format below and nothing else:",
            "",
        ]
        for marker, hint in PromptTemplates.ANALYSIS_FIELDS:
            parts.append(f"==={marker}===")
            parts.append(hint)
            parts.append(f"===END_{marker}===")
            parts.append("")
        parts.append("Keep each field to a single line. Describe how the music SOUNDS, not what it is about.")
        return "\n".join(parts)
