"""Key-file classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from ..models import KeyFile, SourceFile
from .utils import has_token_prefix, path_tokens, stem

MAX_KEY_FILES = 15

_ENTRY_POINT_STEMS = frozenset({"main", "index", "app"})


@dataclass(frozen=True)
class _Rule:
    type: str
    purpose: str
    matches: Callable[[str, List[str], List[str]], bool]


def _path_rule(*keywords: str) -> Callable[[str, List[str], List[str]], bool]:
    def _match(path: str, tokens: List[str], name_tokens: List[str]) -> bool:
        return has_token_prefix(tokens, keywords)

    return _match


def _name_rule(*keywords: str) -> Callable[[str, List[str], List[str]], bool]:
    def _match(path: str, tokens: List[str], name_tokens: List[str]) -> bool:
        return has_token_prefix(name_tokens, keywords)

    return _match


def _entry_point(path: str, tokens: List[str], name_tokens: List[str]) -> bool:
    return stem(path) in _ENTRY_POINT_STEMS


RULES: Tuple[_Rule, ...] = (
    _Rule("Entry Point", "Main application entry point", _entry_point),
    _Rule("Page/Route", "Application page or route handler", _path_rule("page", "route", "view")),
    _Rule("Component", "Reusable UI component", _path_rule("component")),
    _Rule("Model", "Data model or schema definition", _path_rule("model", "schema")),
    _Rule("Controller/Service", "Business logic and API handling", _path_rule("controller", "service")),
    _Rule("Configuration", "Application configuration", _name_rule("config", "setting")),
    _Rule("Utility", "Utility functions and helpers", _path_rule("util", "helper", "lib")),
    _Rule("Database", "Database operations and schema management", _path_rule("db", "database", "migration")),
    _Rule(
        "Security",
        "Authentication and security management",
        _path_rule("auth", "security", "permission", "role"),
    ),
)


def classify_key_file(path: str) -> KeyFile | None:
    """Return the first matching category for ``path`` or ``None``."""
    tokens = path_tokens(path)
    name_tokens = path_tokens(path.rsplit("/", 1)[-1])
    for rule in RULES:
        if rule.matches(path, tokens, name_tokens):
            return KeyFile(path=path, purpose=rule.purpose, type=rule.type)
    return None


def identify_key_files(files: Sequence[SourceFile], limit: int = MAX_KEY_FILES) -> List[KeyFile]:
    key_files: List[KeyFile] = []
    for source_file in files:
        if len(key_files) >= limit:
            break
        key_file = classify_key_file(source_file.path)
        if key_file is not None:
            key_files.append(key_file)
    return key_files


__all__ = ["MAX_KEY_FILES", "RULES", "classify_key_file", "identify_key_files"]
