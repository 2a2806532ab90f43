"""Directory tree and file records for a retained file set."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..languages import extension_of
from ..models import FileEntry, ProjectStructure, SourceFile


def build_structure(files: Sequence[SourceFile], directories: Iterable[str] = ()) -> ProjectStructure:
    """Record the sorted directory set and one entry per retained file."""
    ordered: dict[str, None] = {}
    for directory in directories:
        if directory:
            ordered.setdefault(directory, None)
    for source_file in files:
        segments = source_file.path.split("/")[:-1]
        for index in range(1, len(segments) + 1):
            ordered.setdefault("/".join(segments[:index]), None)

    entries: List[FileEntry] = [
        FileEntry(
            path=source_file.path,
            type=extension_of(source_file.path) or "file",
            size=len(source_file.content),
        )
        for source_file in files
    ]
    directory_list = sorted(ordered)
    return ProjectStructure(
        directories=directory_list,
        files=entries,
        depth=directory_depth(directory_list),
    )


def directory_depth(directories: Iterable[str]) -> int:
    """Maximum segment count across ``directories``, never below 1."""
    depth = 1
    for directory in directories:
        depth = max(depth, len([segment for segment in directory.split("/") if segment]))
    return depth


__all__ = ["build_structure", "directory_depth"]
