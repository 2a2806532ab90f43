"""Best-effort HTTP route detection.

Regular expressions over file content cover the common registration shapes:
``app.get("/users")``, ``@Get("users")``, ``@GetMapping("/users")`` and
``route("/users", methods=["POST"])``. Anything else is missed, which is
acceptable for a documentation hint.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Sequence, Set, Tuple

from ..models import Endpoint, SourceFile

MAX_ENDPOINTS = 10

_VERBS = "get|post|put|delete|patch"

_METHOD_CALL = re.compile(
    rf"\b\w+\.({_VERBS})\s*\(\s*(['\"`])(/[^'\"`\s]*)\2",
    re.IGNORECASE,
)
_VERB_DECORATOR = re.compile(
    rf"@({_VERBS})\s*\(\s*(['\"])([^'\"\s]*)\2",
    re.IGNORECASE,
)
_MAPPING_ANNOTATION = re.compile(
    rf"@({_VERBS}|request)Mapping\s*\(\s*(?:(?:value|path)\s*=\s*)?(['\"])([^'\"\s]*)\2",
    re.IGNORECASE,
)
_ROUTE_CALL = re.compile(
    r"\broute\s*\(\s*(['\"])([^'\"\s]+)\1(?:[^)\n]*?methods\s*=\s*\[([^\]]*)\])?",
    re.IGNORECASE,
)

_PARAM_PATTERNS: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"/:([A-Za-z_][A-Za-z0-9_]*)"), r"/{\1}"),
    (
        re.compile(r"/<(?:(?:[A-Za-z_][A-Za-z0-9_]*):)?([A-Za-z_][A-Za-z0-9_]*)>"),
        r"/{\1}",
    ),
    (re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\s*:\s*[^}]+\}"), r"{\1}"),
]


def normalize_route(path: str) -> str:
    """Return a canonical representation for endpoint paths."""
    if not path:
        return "/"
    result = path.strip()
    if not result.startswith("/"):
        result = "/" + result
    for pattern, replacement in _PARAM_PATTERNS:
        result = pattern.sub(replacement, result)
    result = re.sub(r"/{2,}", "/", result)
    if len(result) > 1 and result.endswith("/"):
        result = result[:-1]
    return result or "/"


def line_of(text: str, index: int) -> int:
    """Return 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


def extract_endpoints(files: Sequence[SourceFile], limit: int = MAX_ENDPOINTS) -> List[Endpoint]:
    endpoints: List[Endpoint] = []
    seen: Set[Tuple[str, str]] = set()
    for source_file in files:
        for method, raw_path, index in _scan(source_file.content):
            if "://" in raw_path:
                continue
            path = normalize_route(raw_path)
            key = (method, path)
            if key in seen:
                continue
            seen.add(key)
            endpoints.append(
                Endpoint(
                    method=method,
                    path=path,
                    description=f"{method} endpoint",
                    file=source_file.path,
                    line=line_of(source_file.content, index),
                )
            )
            if len(endpoints) >= limit:
                return endpoints
    return endpoints


def _scan(content: str) -> Iterator[Tuple[str, str, int]]:
    matches: List[Tuple[int, str, str]] = []
    for match in _METHOD_CALL.finditer(content):
        matches.append((match.start(), match.group(1).upper(), match.group(3)))
    for match in _VERB_DECORATOR.finditer(content):
        matches.append((match.start(), match.group(1).upper(), match.group(3)))
    for match in _MAPPING_ANNOTATION.finditer(content):
        verb = match.group(1).upper()
        matches.append((match.start(), "GET" if verb == "REQUEST" else verb, match.group(3)))
    for match in _ROUTE_CALL.finditer(content):
        for method in _route_methods(match.group(3)):
            matches.append((match.start(), method, match.group(2)))

    # Report in source order regardless of which pattern matched.
    for index, method, path in sorted(matches, key=lambda item: item[0]):
        yield method, path, index


def _route_methods(raw: str | None) -> List[str]:
    if not raw:
        return ["GET"]
    methods = [item.strip().strip("'\"").upper() for item in raw.split(",")]
    return [method for method in methods if method] or ["GET"]


__all__ = ["MAX_ENDPOINTS", "extract_endpoints", "line_of", "normalize_route"]
