"""Network-free stand-ins for the GitHub and LLM transports."""

from __future__ import annotations

import json
import threading
import time
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union
from urllib.request import Request

from docbench.ingestion import RemoteResponse
from docbench.llm import GenerationRequest

API = "https://api.github.com/repos/acme/widget/contents"


def json_response(
    payload: object,
    *,
    status: int = 200,
    headers: Optional[Mapping[str, str]] = None,
) -> RemoteResponse:
    return RemoteResponse(
        status=status,
        headers={key.lower(): value for key, value in (headers or {}).items()},
        body=json.dumps(payload).encode("utf-8"),
    )


def file_item(path: str, *, size: int = 10) -> Dict[str, object]:
    name = path.rsplit("/", 1)[-1]
    return {
        "name": name,
        "path": path,
        "type": "file",
        "size": size,
        "url": f"{API}/{path}",
        "download_url": f"https://raw.example/{path}",
    }


def dir_item(path: str) -> Dict[str, object]:
    name = path.rsplit("/", 1)[-1]
    return {
        "name": name,
        "path": path,
        "type": "dir",
        "size": 0,
        "url": f"{API}/{path}",
        "download_url": None,
    }


class FakeGitHub:
    """Transport that answers from a URL -> response table and records requests."""

    def __init__(self, routes: Mapping[str, Union[RemoteResponse, bytes]]) -> None:
        self.routes = dict(routes)
        self.requests: List[Request] = []

    def __call__(self, request: Request, timeout: float) -> RemoteResponse:
        self.requests.append(request)
        response = self.routes.get(request.full_url)
        if response is None:
            return RemoteResponse(status=404, headers={}, body=b'{"message": "Not Found"}')
        if isinstance(response, bytes):
            return RemoteResponse(status=200, headers={}, body=response)
        return response

    @property
    def urls(self) -> List[str]:
        return [request.full_url for request in self.requests]


Outcome = Union[str, BaseException, Callable[[GenerationRequest], str]]


class ScriptedRunner:
    """Generation runner that replays scripted outcomes per ``provider/model``.

    Each key maps to a sequence consumed one call at a time; the last entry
    repeats. Unscripted tasks return ``default``. ``peak_in_flight`` records the
    most calls that were running at once.
    """

    def __init__(
        self,
        script: Optional[Mapping[str, Sequence[Outcome]]] = None,
        *,
        default: str = "# Project\n\nGenerated documentation.",
        delay: float = 0.0,
    ) -> None:
        self.script = {key: list(values) for key, values in (script or {}).items()}
        self.default = default
        self.delay = delay
        self.calls: List[GenerationRequest] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()

    def __call__(self, request: GenerationRequest) -> str:
        key = f"{request.provider}/{request.model}"
        with self._lock:
            self.calls.append(request)
            outcomes = self.script.get(key)
            outcome: Outcome = self.default
            if outcomes:
                outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
        finally:
            with self._lock:
                self.in_flight -= 1
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(request)
        return outcome

    def calls_for(self, key: str) -> List[GenerationRequest]:
        return [call for call in self.calls if f"{call.provider}/{call.model}" == key]


__all__ = ["API", "FakeGitHub", "ScriptedRunner", "dir_item", "file_item", "json_response"]
