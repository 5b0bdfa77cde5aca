import asyncio
import inspect
import re

import pytest

STYLE_MARKER = "Generate the music style prompt now."


def is_style_prompt(prompt):
    return STYLE_MARKER in prompt


def lyrics_in_prompt(prompt):
    """Return the lyrics embedded between the first pair of --- rules."""
    m = re.search(r"---\n(.*?)\n---", prompt, re.DOTALL)
    return m.group(1) if m else ""


class FakeClient:
    """Generation client double.

    ``reply`` maps a prompt to the text to return, an exception to raise, or
    an awaitable of either. Every prompt is recorded in ``prompts``.
    """

    def __init__(self, reply=None):
        self.prompts = []
        self.reply = reply or (lambda prompt: "Generic lyrics")

    async def generate(self, prompt):
        self.prompts.append(prompt)
        result = self.reply(prompt)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return result

    def non_style_prompts(self):
        return [p for p in self.prompts if not is_style_prompt(p)]


@pytest.fixture
def run():
    """Run a coroutine function to completion on a fresh event loop."""
    def _run(coro_fn, *args, **kwargs):
        return asyncio.run(coro_fn(*args, **kwargs))
    return _run
