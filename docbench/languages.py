"""Extension to language classification."""

from __future__ import annotations

import posixpath

_LANGUAGE_BY_SUFFIX = {
    ".js": "JavaScript",
    ".jsx": "React/JSX",
    ".ts": "TypeScript",
    ".tsx": "React/TypeScript",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".cs": "C#",
    ".php": "PHP",
    ".rb": "Ruby",
    ".go": "Go",
    ".rs": "Rust",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".vue": "Vue.js",
    ".svelte": "Svelte",
    ".md": "Markdown",
    ".json": "JSON",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".xml": "XML",
    ".sql": "SQL",
}

SUPPORTED_EXTENSIONS = frozenset(_LANGUAGE_BY_SUFFIX)


def extension_of(path: str) -> str:
    """Return the lower-cased suffix of ``path`` including the dot, or ``""``."""
    name = posixpath.basename(path.replace("\\", "/"))
    index = name.rfind(".")
    if index <= 0:
        return ""
    return name[index:].lower()


def is_supported(extension: str) -> bool:
    return extension.lower() in SUPPORTED_EXTENSIONS


def classify(extension: str) -> str:
    """Return the language label for ``extension``.

    Unknown extensions yield their upper-cased text without the dot so the
    function is total; use :func:`is_supported` to decide whether to keep a file.
    """
    normalized = extension.lower()
    if not normalized.startswith(".") and normalized:
        normalized = f".{normalized}"
    if normalized in _LANGUAGE_BY_SUFFIX:
        return _LANGUAGE_BY_SUFFIX[normalized]
    return normalized[1:].upper()


__all__ = ["SUPPORTED_EXTENSIONS", "classify", "extension_of", "is_supported"]
