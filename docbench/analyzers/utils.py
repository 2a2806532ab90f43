"""Shared helper utilities for the path heuristics."""

from __future__ import annotations

import posixpath
import re
from typing import Iterable, List

_SEPARATORS = re.compile(r"[/._\-\s]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def path_tokens(path: str) -> List[str]:
    """Split a path into lower-cased tokens on separators and camelCase humps.

    ``src/components/UserCard.tsx`` becomes
    ``["src", "components", "user", "card", "tsx"]``.
    """
    tokens: List[str] = []
    for chunk in _SEPARATORS.split(path):
        if not chunk:
            continue
        tokens.extend(part.lower() for part in _CAMEL_BOUNDARY.split(chunk) if part)
    return tokens


def has_token_prefix(tokens: Iterable[str], keywords: Iterable[str]) -> bool:
    """Return True when any token starts with any keyword."""
    keywords = tuple(keywords)
    return any(token.startswith(keywords) for token in tokens)


def basename(path: str) -> str:
    return posixpath.basename(path).lower()


def stem(path: str) -> str:
    name = basename(path)
    return name.split(".", 1)[0] if not name.startswith(".") else name


def has_suffix(path: str, suffixes: Iterable[str]) -> bool:
    return basename(path).endswith(tuple(suffixes))


__all__ = ["basename", "has_suffix", "has_token_prefix", "path_tokens", "stem"]
