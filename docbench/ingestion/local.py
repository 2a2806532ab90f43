"""Ingestion of uploaded file sets and local directories."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from ..config import IngestionLimits
from ..logging import get_logger
from ..models import IngestionResult
from .normalizer import EXCLUDED_DIRS, FileCollector, is_excluded, normalize_path

DEFAULT_UPLOAD_NAME = "Uploaded Project"

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

logger = get_logger("ingestion.local")


@dataclass(frozen=True)
class UploadedFile:
    """A relative path plus a lazy content accessor."""

    path: str
    read: Callable[[], bytes | str]
    size: Optional[int] = None

    @classmethod
    def from_bytes(cls, path: str, data: bytes | str) -> "UploadedFile":
        size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
        return cls(path=path, read=lambda: data, size=size)


def ingest_files(
    uploads: Iterable[UploadedFile],
    limits: IngestionLimits | None = None,
) -> IngestionResult:
    """Normalize a flat list of uploaded files."""
    collector = FileCollector(limits or IngestionLimits())
    project_name = DEFAULT_UPLOAD_NAME

    for upload in uploads:
        if collector.full:
            logger.info("Reached maximum file limit (%d), ignoring remaining uploads", collector.max_files)
            break
        path = normalize_path(upload.path)
        if path is None:
            continue
        if project_name == DEFAULT_UPLOAD_NAME and "/" in path and not is_excluded(path):
            project_name = path.split("/", 1)[0]
        collector.offer(path, upload.read, size=upload.size)

    return collector.finish(project_name, source="upload")


def ingest_directory(
    root: str | Path,
    limits: IngestionLimits | None = None,
) -> IngestionResult:
    """Normalize a project directory on the local file system."""
    limits = limits or IngestionLimits()
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")

    collector = FileCollector(limits)
    for rel_dir in _iter_directories(root_path, limits.max_depth):
        collector.register_directory(rel_dir)
    for path in _iter_files(root_path, limits.max_depth):
        if collector.full:
            logger.info("Reached maximum file limit (%d), stopping scan", collector.max_files)
            break
        rel_path = path.relative_to(root_path).as_posix()
        try:
            size = path.stat().st_size
        except OSError:
            continue
        collector.offer(rel_path, path.read_bytes, size=size)

    return collector.finish(root_path.name or "Project", source="directory")


def _walk(root: Path, max_depth: int) -> Iterator[tuple[Path, str, list[str], list[str]]]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
        depth = rel_dir.count("/") + 1 if rel_dir else 0

        dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRS)
        if depth >= max_depth:
            dirnames[:] = []
        yield current_dir, rel_dir, dirnames, sorted(filenames)


def _iter_directories(root: Path, max_depth: int) -> Iterator[str]:
    for _, rel_dir, _, _ in _walk(root, max_depth):
        if rel_dir:
            yield rel_dir


def _iter_files(root: Path, max_depth: int) -> Iterator[Path]:
    for current_dir, _, _, filenames in _walk(root, max_depth):
        for filename in filenames:
            if filename in _EXCLUDED_FILES:
                continue
            yield current_dir / filename


__all__ = ["DEFAULT_UPLOAD_NAME", "UploadedFile", "ingest_directory", "ingest_files"]
