"""Ingestion of ZIP archives."""

from __future__ import annotations

import io
import zipfile
from pathlib import PurePosixPath
from typing import Callable, List

from ..config import IngestionLimits
from ..errors import EmptyArchive, PayloadTooLarge
from ..logging import get_logger
from ..models import IngestionResult
from .normalizer import FileCollector, normalize_path

logger = get_logger("ingestion.archive")


def ingest_archive(
    data: bytes,
    filename: str = "project.zip",
    limits: IngestionLimits | None = None,
) -> IngestionResult:
    """Normalize the contents of a ZIP archive held in memory."""
    limits = limits or IngestionLimits()
    if len(data) > limits.max_archive_bytes:
        raise PayloadTooLarge(
            f"ZIP file is {len(data)} bytes; the limit is {limits.max_archive_bytes} bytes"
        )
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as exc:
        raise EmptyArchive(f"Failed to load ZIP file: {exc}") from exc

    with archive:
        entries = archive.infolist()
        if not entries:
            raise EmptyArchive("ZIP file appears to be empty")

        collector = FileCollector(limits)
        for info in entries:
            if collector.full:
                logger.info(
                    "Reached maximum file limit (%d), stopping further processing",
                    collector.max_files,
                )
                break
            if info.is_dir():
                collector.register_directory(info.filename)
                continue
            collector.offer(info.filename, _reader(archive, info), size=info.file_size)

        project_name = _project_name(filename, [info.filename for info in entries])
        return collector.finish(project_name, source="archive")


def _reader(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Callable[[], bytes]:
    def _read() -> bytes:
        try:
            return archive.read(info)
        except (zipfile.BadZipFile, NotImplementedError) as exc:
            # Corrupt member or unsupported compression: skip the entry only.
            raise ValueError(str(exc)) from exc

    return _read


def _project_name(filename: str, names: List[str]) -> str:
    stem = PurePosixPath(filename.replace("\\", "/")).name
    if stem.lower().endswith(".zip"):
        stem = stem[:-4]
    top_levels = set()
    for name in names:
        normalized = normalize_path(name)
        if normalized is None:
            continue
        if "/" not in normalized and not name.endswith("/"):
            # A file at the archive root means there is no wrapping folder.
            return stem or "Archive"
        top_levels.add(normalized.split("/", 1)[0])
    if len(top_levels) == 1:
        return top_levels.pop()
    return stem or "Archive"


__all__ = ["ingest_archive"]
