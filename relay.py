"""Backend relay: holds the provider credential and forwards prompts.

The browser only ever talks to ``POST /api/generate``; the API key stays in
the server environment and provider errors are logged, never echoed back.
"""

import argparse
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from llm_backends import OpenAIBackend

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"


def _error(status_code, message):
    return JSONResponse(status_code=status_code, content={"error": message})


def _default_backend(api_key):
    return OpenAIBackend(
        api_key=api_key,
        base_url=config.DEFAULT_OPENAI_URL,
        model=config.DEFAULT_OPENAI_MODEL,
        temperature=config.DEFAULT_LLM_TEMPERATURE,
        timeout=config.DEFAULT_LLM_TIMEOUT,
    )


def create_app(backend_factory=_default_backend):
    """Create the relay app.

    Args:
        backend_factory: Callable taking the API key and returning an object
            with a blocking ``generate(prompt) -> str``.
    """
    app = FastAPI(title="LyricForge Relay", docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.RELAY_CORS_ORIGINS,
        allow_methods=["POST"],
        allow_headers=["Content-Type"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post(GENERATE_PATH)
    async def generate(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = None
        prompt = body.get("prompt") if isinstance(body, dict) else None
        if not isinstance(prompt, str) or not prompt.strip():
            return _error(400, "Prompt is required")

        api_key = config.get_api_key()
        if not api_key:
            logger.error("OPENAI_API_KEY is not set in the relay environment")
            return _error(500, "Server configuration error: API key is missing.")

        try:
            backend = backend_factory(api_key)
            # the provider client blocks; keep it off the event loop
            text = await run_in_threadpool(backend.generate, prompt)
        except Exception:
            logger.exception("Error calling the AI provider")
            return _error(500, "Failed to generate content from the AI model.")

        return {"text": text.strip()}

    return app


app = create_app()


def main():
    parser = argparse.ArgumentParser(description="LyricForge backend relay")
    parser.add_argument("--host", default=config.RELAY_HOST)
    parser.add_argument("--port", type=int, default=config.RELAY_PORT)
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if not config.get_api_key():
        logger.warning("OPENAI_API_KEY is not set; every request will fail with a configuration error")
    uvicorn.run(app, host=args.host, port=args.port, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
