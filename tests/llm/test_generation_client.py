"""Tests for the chat-completions generation client."""

from __future__ import annotations

import io
import json
import socket
from urllib.error import HTTPError, URLError

import pytest

from docbench.errors import ErrorClass, ProviderError, classify_error
from docbench.llm import GenerationClient, GenerationRequest


def _request(**overrides) -> GenerationRequest:
    values = dict(
        provider="groq",
        base_url="https://api.groq.com/openai/v1/",
        model="llama-3.1-8b-instant",
        prompt="Document this project.",
        max_tokens=512,
        api_key="gsk-test",
        system="Be precise.",
        temperature=0.2,
        timeout=12.0,
    )
    values.update(overrides)
    return GenerationRequest(**values)


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_generation_client_uses_injected_runner() -> None:
    captured = []

    def fake_runner(request):
        captured.append(request)
        return "# README"

    client = GenerationClient(runner=fake_runner)

    assert client.generate(_request()) == "# README"
    assert captured[0].model == "llama-3.1-8b-instant"


def test_http_runner_posts_chat_completion(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        payload = {"choices": [{"message": {"content": "  # Demo\n\nGenerated.  "}}]}
        return FakeResponse(json.dumps(payload).encode("utf-8"))

    monkeypatch.setattr("docbench.llm.client.urlopen", fake_urlopen)

    result = GenerationClient().generate(_request())

    assert result == "# Demo\n\nGenerated."
    assert captured["url"] == "https://api.groq.com/openai/v1/chat/completions"
    assert captured["headers"]["authorization"] == "Bearer gsk-test"
    assert captured["headers"]["content-type"] == "application/json"
    payload = captured["payload"]
    assert payload["model"] == "llama-3.1-8b-instant"
    assert payload["messages"] == [
        {"role": "system", "content": "Be precise."},
        {"role": "user", "content": "Document this project."},
    ]
    assert payload["max_tokens"] == 512
    assert payload["temperature"] == 0.2
    assert captured["timeout"] == 12.0


def test_http_error_carries_status_code(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(
            request.full_url,
            404,
            "Not Found",
            {},
            io.BytesIO(b'{"error": "model_not_found"}'),
        )

    monkeypatch.setattr("docbench.llm.client.urlopen", fake_urlopen)

    with pytest.raises(ProviderError) as excinfo:
        GenerationClient().generate(_request())

    assert excinfo.value.status_code == 404
    assert classify_error(excinfo.value) is ErrorClass.NOT_FOUND


def test_socket_timeout_becomes_timeout_error(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError(socket.timeout("timed out"))

    monkeypatch.setattr("docbench.llm.client.urlopen", fake_urlopen)

    with pytest.raises(TimeoutError):
        GenerationClient().generate(_request())


def test_connection_failure_is_provider_error(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError(ConnectionRefusedError("refused"))

    monkeypatch.setattr("docbench.llm.client.urlopen", fake_urlopen)

    with pytest.raises(ProviderError, match="connection failed"):
        GenerationClient().generate(_request())


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        json.dumps({"choices": []}).encode("utf-8"),
        json.dumps({"choices": [{"message": {"content": ""}}]}).encode("utf-8"),
    ],
)
def test_unusable_payloads_raise(monkeypatch, body: bytes) -> None:
    monkeypatch.setattr("docbench.llm.client.urlopen", lambda request, timeout=None: FakeResponse(body))

    with pytest.raises(ProviderError):
        GenerationClient().generate(_request())
