from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from llm_backends import EmptyResponse, OpenAIBackend
from relay import GENERATE_PATH, create_app


class FakeBackend:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def relay(monkeypatch):
    """Relay app wired to a fake backend; set ``relay.backend.reply``."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")
    state = SimpleNamespace(backend=FakeBackend("Verse one"), keys=[])

    def factory(api_key):
        state.keys.append(api_key)
        return state.backend

    state.client = TestClient(create_app(backend_factory=factory))
    return state


def test_generate(relay):
    resp = relay.client.post(GENERATE_PATH, json={"prompt": "write a song"})
    assert resp.status_code == 200
    assert resp.json() == {"text": "Verse one"}
    assert relay.backend.prompts == ["write a song"]
    assert relay.keys == ["sk-secret"]


def test_fences_stripped_at_provider_boundary(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

    def factory(api_key):
        backend = OpenAIBackend(api_key=api_key, base_url="http://localhost:9/v1", model="m")
        reply = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="```\nla la\n```"))])
        backend.client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=lambda **kwargs: reply)))
        return backend

    client = TestClient(create_app(backend_factory=factory))
    resp = client.post(GENERATE_PATH, json={"prompt": "p"})
    assert resp.json() == {"text": "la la"}


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_rejects_other_methods(relay, method):
    resp = getattr(relay.client, method)(GENERATE_PATH)
    assert resp.status_code == 405
    assert relay.backend.prompts == []


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   "}, {"prompt": 3}, ["prompt"]])
def test_missing_prompt(relay, body):
    resp = relay.client.post(GENERATE_PATH, json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Prompt is required"}
    assert relay.backend.prompts == []


def test_malformed_json(relay):
    resp = relay.client.post(GENERATE_PATH, content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Prompt is required"}


def test_missing_credential(relay, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")
    resp = relay.client.post(GENERATE_PATH, json={"prompt": "p"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Server configuration error: API key is missing."}
    assert relay.backend.prompts == []


@pytest.mark.parametrize("failure", [RuntimeError("401 invalid api key sk-secret"), EmptyResponse("empty")])
def test_provider_failure_is_not_echoed(relay, caplog, failure):
    relay.backend.reply = failure
    resp = relay.client.post(GENERATE_PATH, json={"prompt": "p"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to generate content from the AI model."}
    assert "sk-secret" not in resp.text
    assert "Error calling the AI provider" in caplog.text


def test_health(relay):
    assert relay.client.get("/health").json() == {"status": "ok"}
