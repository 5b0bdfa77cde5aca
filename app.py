import logging
import sys
import html as html_mod
import gradio as gr
from config import LOG_LEVEL, SERVER_HOST, SERVER_PORT
from llm_backends import GenerationError, build_client
from prompt_templates import GenerationRequest
from session import SongSession

logger = logging.getLogger(__name__)


def _status_html(message, style="info"):
    """Return styled HTML for status messages with optional progress bar."""
    message = html_mod.escape(str(message))
    colors = {
        "info": ("#1a3a5c", "#3b82f6"),
        "success": ("#14532d", "#22c55e"),
        "error": ("#7f1d1d", "#ef4444"),
        "progress": ("#1a3a5c", "#3b82f6"),
    }
    bg, border = colors.get(style, colors["info"])

    progress_bar = ""
    if style == "progress":
        progress_bar = """
        <div style="width:100%;height:4px;background:#1e293b;border-radius:2px;overflow:hidden;margin-top:8px;">
          <div style="width:30%;height:100%;background:linear-gradient(90deg,#d946ef,#22d3ee);border-radius:2px;animation:progress-slide 1.5s ease-in-out infinite;"></div>
        </div>
        <style>
          @keyframes progress-slide {
            0% { margin-left: 0%; width: 30%; }
            50% { margin-left: 35%; width: 40%; }
            100% { margin-left: 70%; width: 30%; }
          }
        </style>"""

    return f"""<div style="padding:12px 16px;border-left:4px solid {border};background:{bg};border-radius:8px;font-size:1.05em;color:#e2e8f0;">
  {message}{progress_bar}
</div>"""


def _ensure_session(session):
    """Return the browser session's SongSession, creating it on first use."""
    if session is None:
        session = SongSession(build_client())
    return session


def _history_choices(session):
    return [(f"{e.label} - {e.topic}", e.id) for e in session.history]


def _result(session, status):
    """Outputs shared by all lyric actions: state, lyrics, style, status, history."""
    return (
        session,
        session.lyrics,
        session.style,
        status,
        gr.update(choices=_history_choices(session), value=None),
    )


async def _run_action(session, start, busy_message, done_message):
    """Run one lyric action, yielding a progress update then the final state."""
    try:
        session = _ensure_session(session)
    except ValueError as e:
        yield session, gr.skip(), gr.skip(), _status_html(f"Error: {e}", "error"), gr.skip()
        return

    yield session, gr.skip(), gr.skip(), _status_html(busy_message, "progress"), gr.skip()
    try:
        await start(session)
    except GenerationError as e:
        yield _result(session, _status_html(f"Error: {e}", "error"))
        return
    except Exception as e:
        logger.error("Lyric action failed: %s", e)
        yield _result(session, _status_html(f"Error: {e}", "error"))
        return
    yield _result(session, _status_html(done_message, "success"))


def _form_request(artist, structure, topic, inspiration, cues):
    return GenerationRequest(
        artist=artist.strip(),
        topic=topic.strip(),
        structure_source=structure,
        inspiration_lyrics=inspiration,
        include_production_cues=cues,
    )


async def on_generate(session, artist, structure, topic, inspiration, cues):
    request = _form_request(artist, structure, topic, inspiration, cues)
    async for update in _run_action(
        session, lambda s: s.request_new_song(request),
        "Crafting your masterpiece... analyzing rhythm and rhyme...", "Song generated.",
    ):
        yield update


async def on_remix(session, artist, structure, topic, cues):
    request = _form_request(artist, structure, topic, "", cues)
    async for update in _run_action(
        session, lambda s: s.request_remix(request),
        "Reimagining the song...", "Song reimagined.",
    ):
        yield update


async def on_hook_remix(session, lyrics, cues):
    async for update in _run_action(
        session, lambda s: s.request_hook_remix(lyrics, include_cues=cues),
        "Brewing an extended remix... focusing on the hook...", "Hook remix ready.",
    ):
        yield update


async def on_enhance(session, lyrics):
    async for update in _run_action(
        session, lambda s: s.request_enhance(lyrics),
        "Adding production cues...", "Lyrics enhanced.",
    ):
        yield update


async def on_style_ready(session):
    """Wait for the background style derivation and show its result."""
    if session is None:
        return gr.skip()
    return await session.wait_for_style()


def on_lyrics_edited(session, lyrics):
    """Keep hand edits to the lyrics box in the session."""
    if session is not None:
        session.replace_lyrics(lyrics)
    return session


def on_load_history(session, entry_id):
    if session is None or entry_id is None:
        return session, gr.skip(), gr.skip(), gr.skip(), gr.skip(), _status_html("No entry selected.", "error")
    try:
        entry = session.load_from_history(int(entry_id))
    except GenerationError as e:
        return session, gr.skip(), gr.skip(), gr.skip(), gr.skip(), _status_html(str(e), "error")
    return (
        session, session.artist, session.topic, session.lyrics, session.style,
        _status_html(f"Loaded '{entry.label}'.", "success"),
    )


def on_clear_history(session):
    if session is not None:
        session.clear_history()
    return session, gr.update(choices=[], value=None), _status_html("History cleared.", "info")


async def on_analyze(session, name):
    try:
        session = _ensure_session(session)
        analysis = await session.request_style_analysis(name)
    except (GenerationError, ValueError) as e:
        return session, "", "", "", "", "", _status_html(f"Error: {e}", "error")
    return (
        session,
        analysis.style,
        analysis.production_style,
        analysis.bass_element,
        analysis.studio_production,
        analysis.combined(),
        _status_html("Style analyzed.", "success"),
    )


# ─── UI ───

CUSTOM_CSS = """
#song-form-group {
    border: 2px solid #d946ef;
    border-radius: 12px;
    padding: 12px;
    background: linear-gradient(135deg, rgba(217,70,239,0.08), rgba(34,211,238,0.02));
}
"""

with gr.Blocks(title="LyricForge", css=CUSTOM_CSS) as app:
    gr.Markdown("# LyricForge\nYour personal AI lyricist for any style.")
    session_state = gr.State(value=None)

    with gr.Tab("Write"):
        with gr.Group(elem_id="song-form-group"):
            artist_box = gr.Textbox(label="Artist's Name (for lyrical style)", placeholder="e.g., Taylor Swift, Drake")
            structure_box = gr.Textbox(label="Artist or Song for Structure (Optional)",
                                       placeholder="e.g., Bohemian Rhapsody, The Beatles")
            topic_box = gr.Textbox(label="Song Topic", placeholder="e.g., Summer romance, a long road trip", lines=2)
            inspiration_box = gr.Textbox(label="Inspirational Lyrics (Optional)", lines=4,
                                         placeholder="Paste lyrics here to inspire the new song's theme and mood...")
            cues_cb = gr.Checkbox(value=True, label="Include Production Cues")

        gen_btn = gr.Button("Generate Song", variant="primary", size="lg")
        status_box = gr.HTML(value="")

        lyrics_box = gr.Textbox(label="Lyrics", lines=18, show_copy_button=True)
        with gr.Row():
            remix_btn = gr.Button("Reimagine", size="sm")
            hook_btn = gr.Button("Hook Remix", size="sm")
            enhance_btn = gr.Button("Enhance", size="sm")
        style_box = gr.Textbox(label="Music Style Prompt", interactive=False, show_copy_button=True)

        with gr.Accordion("Song History", open=False):
            history_dd = gr.Dropdown(label="Previous songs", choices=[], value=None)
            with gr.Row():
                load_btn = gr.Button("Load", size="sm", variant="primary")
                clear_history_btn = gr.Button("Clear History", size="sm", variant="stop")

        action_outputs = [session_state, lyrics_box, style_box, status_box, history_dd]

        gen_btn.click(
            on_generate,
            [session_state, artist_box, structure_box, topic_box, inspiration_box, cues_cb],
            action_outputs,
        ).then(on_style_ready, [session_state], [style_box])
        remix_btn.click(
            on_remix,
            [session_state, artist_box, structure_box, topic_box, cues_cb],
            action_outputs,
        ).then(on_style_ready, [session_state], [style_box])
        hook_btn.click(on_hook_remix, [session_state, lyrics_box, cues_cb], action_outputs).then(
            on_style_ready, [session_state], [style_box])
        enhance_btn.click(on_enhance, [session_state, lyrics_box], action_outputs)

        lyrics_box.input(on_lyrics_edited, [session_state, lyrics_box], [session_state])

        load_btn.click(
            on_load_history,
            [session_state, history_dd],
            [session_state, artist_box, topic_box, lyrics_box, style_box, status_box],
        )
        clear_history_btn.click(on_clear_history, [session_state], [session_state, history_dd, status_box])

    with gr.Tab("Style Analyzer"):
        gr.Markdown("Enter an artist or song to break down its sonic signature.")
        analyze_input = gr.Textbox(label="Artist or Song Name", placeholder="e.g., Tame Impala, Blinding Lights")
        analyze_btn = gr.Button("Analyze Style", variant="primary")
        analyze_status = gr.HTML(value="")
        with gr.Row():
            style_out = gr.Textbox(label="Style", interactive=False)
            production_out = gr.Textbox(label="Production Style", interactive=False)
        with gr.Row():
            bass_out = gr.Textbox(label="Bass Element", interactive=False)
            studio_out = gr.Textbox(label="Studio Production", interactive=False)
        combined_out = gr.Textbox(label="Combined Style Prompt", interactive=False, show_copy_button=True)

        analyze_btn.click(
            on_analyze,
            [session_state, analyze_input],
            [session_state, style_out, production_out, bass_out, studio_out, combined_out, analyze_status],
        )


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    share = "--share" in sys.argv
    app.launch(share=share, server_name=SERVER_HOST, server_port=SERVER_PORT)


if __name__ == "__main__":
    main()
