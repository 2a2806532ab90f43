"""Opportunistic package manifest parsing."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..models import PackageInfo

MANIFEST_FILENAME = "package.json"


def parse_package_json(text: str) -> Optional[PackageInfo]:
    """Return the manifest fields or ``None`` when ``text`` is not a JSON object."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    return PackageInfo(
        name=_as_str(data.get("name")),
        version=_as_str(data.get("version")),
        description=_as_str(data.get("description")),
        scripts=_as_str_map(data.get("scripts")),
        dependencies=_as_str_map(data.get("dependencies")),
        dev_dependencies=_as_str_map(data.get("devDependencies")),
        author=_author(data.get("author")),
        license=_as_str(data.get("license")),
    )


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(item) for key, item in value.items() if isinstance(item, (str, int, float))}


def _author(value: Any) -> Optional[str]:
    # package.json allows either "Name <mail>" or {"name": ..., "email": ...}.
    if isinstance(value, dict):
        return _as_str(value.get("name"))
    return _as_str(value)


__all__ = ["MANIFEST_FILENAME", "parse_package_json"]
