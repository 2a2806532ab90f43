"""OpenAI-compatible chat-completions client used for every provider."""

from __future__ import annotations

import json
import socket
from dataclasses import dataclass, field
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import ProviderError


@dataclass
class GenerationRequest:
    """Represents one documentation generation call."""

    provider: str
    base_url: str
    model: str
    prompt: str
    max_tokens: Optional[int]
    api_key: Optional[str] = field(default=None, repr=False)
    system: Optional[str] = None
    temperature: Optional[float] = 0.2
    timeout: Optional[float] = 50.0


class GenerationClient:
    """Executes generation requests; tests inject ``runner`` to avoid the network."""

    def __init__(self, runner: Callable[[GenerationRequest], str] | None = None) -> None:
        self._runner = runner or self._http_runner

    def generate(self, request: GenerationRequest) -> str:
        """Send the prompt and return the generated text."""
        return self._runner(request)

    @staticmethod
    def _http_runner(request: GenerationRequest) -> str:
        endpoint = f"{request.base_url.rstrip('/')}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": GenerationClient._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or str(exc.reason)
            raise ProviderError(
                f"{request.provider} returned status {exc.code}: {message}",
                status_code=exc.code,
            ) from exc
        except URLError as exc:
            if isinstance(exc.reason, (socket.timeout, TimeoutError)):
                raise TimeoutError(f"{request.provider} request timed out after {timeout}s") from exc
            raise ProviderError(f"{request.provider} connection failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise ProviderError(f"{request.provider} returned invalid JSON") from exc

        content = GenerationClient._extract_content(response_payload)
        if not content:
            raise ProviderError(f"{request.provider} returned an empty response")
        return content.strip()

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        text = first.get("text")
        if isinstance(text, str):
            return text
        return ""


__all__ = ["GenerationClient", "GenerationRequest"]
