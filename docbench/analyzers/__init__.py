"""Structural analysis of a normalized file set."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from ..models import PackageInfo, ProjectInfo, SourceFile
from .endpoints import extract_endpoints
from .framework import detect_framework
from .keyfiles import identify_key_files
from .layers import analyze_data_flow, categorize
from .structure import build_structure


def analyze_project(
    files: Sequence[SourceFile],
    *,
    name: str,
    directories: Iterable[str] = (),
    package_info: Optional[PackageInfo] = None,
) -> ProjectInfo:
    """Derive :class:`ProjectInfo` from the retained files. Never raises."""
    structure = build_structure(files, directories)
    structure.key_files = identify_key_files(files)

    framework = detect_framework(package_info, files)
    if package_info is not None:
        package_info = replace(package_info, framework=framework)

    categories = categorize(files)
    return ProjectInfo(
        name=name,
        file_count=len(files),
        languages=_distinct_languages(files),
        structure=structure,
        framework=framework,
        package_info=package_info,
        api_endpoints=extract_endpoints(files),
        data_flow=analyze_data_flow(files),
        test_files=categories["test_files"],
        config_files=categories["config_files"],
        ui_files=categories["ui_files"],
        security_files=categories["security_files"],
    )


def _distinct_languages(files: Sequence[SourceFile]) -> List[str]:
    seen: dict[str, None] = {}
    for source_file in files:
        seen.setdefault(source_file.language, None)
    return list(seen)


__all__ = ["analyze_project"]
