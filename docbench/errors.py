"""Error types and failure classification for docbench pipelines."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional


class DocBenchError(RuntimeError):
    """Base class for errors that abort a whole generation request."""


class IngestionError(DocBenchError):
    """Raised when a project source cannot be normalized."""


class NoSupportedFiles(IngestionError):
    """Raised when no eligible files remain after filtering."""

    def __init__(self, message: str = "No supported source files found in the project") -> None:
        super().__init__(message)


class EmptyArchive(IngestionError):
    """Raised when an archive cannot be decoded or contains no entries."""


class PayloadTooLarge(IngestionError):
    """Raised when an uploaded archive exceeds the configured byte limit."""


class InvalidRepositoryURL(IngestionError):
    """Raised when a repository URL does not match a supported host pattern."""


class RateLimited(IngestionError):
    """Raised when the repository host refuses requests due to rate limiting."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "GitHub API rate limit exceeded. Try again later or add a GITHUB_TOKEN environment variable."
        )


class RepositoryUnavailable(IngestionError):
    """Raised when the repository root listing fails and nothing was collected."""


class NoProvidersAvailable(DocBenchError):
    """Raised when no provider has a configured credential."""

    def __init__(self, message: str = "No API keys configured for any providers") -> None:
        super().__init__(message)


class ProviderError(DocBenchError):
    """Raised by the generation client when a provider call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors
    SERVER = "server"  # 5xx
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"  # unknown model or endpoint, never retried
    CLIENT = "client"  # 400, 401, 403, 422
    UNKNOWN = "unknown"


_NOT_FOUND_MARKERS = ("not found", "model_not_found", "does not exist", "no such model")


def classify_error(error: BaseException) -> ErrorClass:
    """Classify a generation failure to decide whether it is worth retrying.

    Structured ``status_code`` attributes win; message matching is the
    fallback for untyped exceptions.
    """
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorClass.TIMEOUT

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 404:
            return ErrorClass.NOT_FOUND
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    message = str(error).lower()
    if any(marker in message for marker in _NOT_FOUND_MARKERS) or "404" in message:
        return ErrorClass.NOT_FOUND
    if "timeout" in message or "timed out" in message:
        return ErrorClass.TIMEOUT
    if "429" in message or "rate limit" in message or "rate_limit" in message:
        return ErrorClass.TRANSIENT
    if any(code in message for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "connection" in message or "econnrefused" in message:
        return ErrorClass.TRANSIENT
    if any(code in message for code in ("400", "401", "403", "422")):
        return ErrorClass.CLIENT
    return ErrorClass.UNKNOWN


_TERMINAL = frozenset({ErrorClass.NOT_FOUND, ErrorClass.CLIENT})


def is_retryable(error: BaseException) -> bool:
    """Return True unless the failure is terminal (missing model, bad request, auth)."""
    return classify_error(error) not in _TERMINAL


__all__ = [
    "DocBenchError",
    "EmptyArchive",
    "ErrorClass",
    "IngestionError",
    "InvalidRepositoryURL",
    "NoProvidersAvailable",
    "NoSupportedFiles",
    "PayloadTooLarge",
    "ProviderError",
    "RateLimited",
    "RepositoryUnavailable",
    "classify_error",
    "is_retryable",
]
