"""LLM backend and generation clients for lyrics/style generation."""

import asyncio
import logging

import requests
from openai import OpenAI

import config

logger = logging.getLogger(__name__)

FENCE = "```"


class GenerationError(Exception):
    """Base class for failures of a generation action."""
    pass


class ValidationError(GenerationError):
    """Raised when a required field is missing; no request is sent."""
    pass


class EmptyResponse(GenerationError):
    """Raised when the backend answered successfully but without usable text."""
    pass


class TransportError(GenerationError):
    """Raised on network failure, error status, or a malformed response body."""
    pass


class StaleResult(GenerationError):
    """Raised internally when a finished style derivation no longer matches the lyrics in view."""
    pass


def clean_llm_response(text):
    """Strip whitespace and remove one markdown code fence wrapper if present."""
    if not text:
        return ""
    text = text.strip()
    if len(text) >= 2 * len(FENCE) and text.startswith(FENCE) and text.endswith(FENCE):
        text = text[len(FENCE):-len(FENCE)].strip()
    return text


class OpenAIBackend:
    """OpenAI-compatible API backend."""

    def __init__(self, api_key, base_url, model, temperature=0.9, timeout=120):
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model
        self.temperature = temperature

    def generate(self, prompt):
        """Send the prompt as the whole input and return normalized text."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        text = clean_llm_response(response.choices[0].message.content if response.choices else None)
        if not text:
            raise EmptyResponse("The AI model returned an empty response.")
        return text


class RelayClient:
    """Generation client that goes through the backend relay."""

    def __init__(self, url, timeout=120):
        self.url = url
        self.timeout = timeout

    def _post(self, prompt):
        try:
            resp = requests.post(self.url, json={"prompt": prompt}, timeout=self.timeout)
        except requests.ConnectionError:
            raise TransportError(f"Cannot connect to the lyrics relay at {self.url}. Is it running?")
        except requests.Timeout:
            raise TransportError(f"The lyrics relay did not answer within {self.timeout}s.")
        except requests.RequestException as e:
            logger.error("Relay request failed: %s", e)
            raise TransportError("Failed to reach the lyrics relay.")

        if not resp.ok:
            logger.error("Relay failed with status %s: %s", resp.status_code, resp.text)
            try:
                message = resp.json().get("error")
            except (ValueError, AttributeError):
                message = None
            raise TransportError(message or "Failed to generate lyrics. The server returned an error.")

        try:
            data = resp.json()
        except ValueError:
            logger.error("Relay returned a non-JSON body: %r", resp.text[:200])
            raise TransportError("The API returned an invalid response.")
        if not isinstance(data, dict):
            raise TransportError("The API returned an invalid response.")
        return data.get("text")

    async def generate(self, prompt):
        text = await asyncio.to_thread(self._post, prompt)
        # the relay has already stripped code fences
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponse("The API returned an empty response.")
        return text.strip()


class DirectClient:
    """Generation client that calls the provider in-process (no relay)."""

    def __init__(self, backend):
        self.backend = backend

    async def generate(self, prompt):
        try:
            return await asyncio.to_thread(self.backend.generate, prompt)
        except EmptyResponse:
            raise
        except Exception:
            logger.exception("Provider call failed")
            raise TransportError("Failed to generate content from the AI model.")


def build_client():
    """Build the generation client configured for this deployment."""
    if config.RELAY_URL:
        logger.info("Using lyrics relay at %s", config.RELAY_URL)
        return RelayClient(config.RELAY_URL, timeout=config.DEFAULT_LLM_TIMEOUT)

    api_key = config.get_api_key()
    if not api_key:
        raise ValueError("OpenAI API key is not configured. Set OPENAI_API_KEY or RELAY_URL in your .env file.")
    logger.info("Calling %s at %s directly", config.DEFAULT_OPENAI_MODEL, config.DEFAULT_OPENAI_URL)
    return DirectClient(OpenAIBackend(
        api_key=api_key,
        base_url=config.DEFAULT_OPENAI_URL,
        model=config.DEFAULT_OPENAI_MODEL,
        temperature=config.DEFAULT_LLM_TEMPERATURE,
        timeout=config.DEFAULT_LLM_TIMEOUT,
    ))
