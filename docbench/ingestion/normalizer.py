"""Bounding policy shared by every ingestion source."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..analyzers import analyze_project
from ..config import IngestionLimits
from ..errors import NoSupportedFiles
from ..languages import classify, extension_of, is_supported
from ..logging import get_logger
from ..models import IngestionResult, PackageInfo, SourceFile
from .manifest import MANIFEST_FILENAME, parse_package_json

EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        "dist",
        "build",
        ".vscode",
        "__pycache__",
        ".venv",
        "venv",
        ".idea",
        "coverage",
        "target",
        "vendor",
    }
)

logger = get_logger("ingestion")


def normalize_path(raw: str) -> Optional[str]:
    """Return a forward-slash relative path, or ``None`` for unsafe/empty paths."""
    candidate = raw.replace("\\", "/").strip()
    parts: List[str] = []
    for part in candidate.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            return None
        parts.append(part)
    if not parts:
        return None
    return "/".join(parts)


def is_excluded(path: str) -> bool:
    """Return True when any directory segment of ``path`` is deny-listed."""
    segments = path.split("/")[:-1]
    return any(segment in EXCLUDED_DIRS for segment in segments)


@dataclass
class _ManifestCandidate:
    depth: int
    info: PackageInfo


@dataclass
class FileCollector:
    """Accumulates files from one source while enforcing the ingestion limits.

    ``max_files`` and ``max_file_bytes`` default to the local limits; remote
    sources pass their own ceilings.
    """

    limits: IngestionLimits
    max_files: Optional[int] = None
    max_file_bytes: Optional[int] = None
    files: List[SourceFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    _directories: Dict[str, None] = field(default_factory=dict, init=False, repr=False)
    _manifest: Optional[_ManifestCandidate] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_files is None:
            self.max_files = self.limits.max_files
        if self.max_file_bytes is None:
            self.max_file_bytes = self.limits.max_file_bytes

    @property
    def full(self) -> bool:
        return len(self.files) >= (self.max_files or 0)

    @property
    def directories(self) -> List[str]:
        return list(self._directories)

    @property
    def package_info(self) -> Optional[PackageInfo]:
        return self._manifest.info if self._manifest else None

    def register_directory(self, raw_path: str) -> None:
        path = normalize_path(raw_path)
        if path is None:
            return
        segments = path.split("/")
        if any(segment in EXCLUDED_DIRS for segment in segments):
            return
        for index in range(1, len(segments) + 1):
            self._directories.setdefault("/".join(segments[:index]), None)

    def offer(
        self,
        raw_path: str,
        read: Callable[[], bytes | str],
        *,
        size: Optional[int] = None,
    ) -> Optional[SourceFile]:
        """Apply the bounding policy to one candidate file.

        Returns the retained :class:`SourceFile`, or ``None`` when the file was
        skipped. Skips never raise.
        """
        path = normalize_path(raw_path)
        if path is None:
            logger.debug("Skipping unsafe path %r", raw_path)
            return None
        if is_excluded(path):
            logger.debug("Skipping %s inside excluded directory", path)
            return None

        parent = posixpath.dirname(path)
        if parent:
            self.register_directory(parent)

        extension = extension_of(path)
        if not is_supported(extension):
            return None
        if self.full:
            return None
        limit = self.max_file_bytes or 0
        if size is not None and size > limit:
            logger.debug("Skipping %s (%d bytes exceeds %d)", path, size, limit)
            return None

        try:
            raw = read()
        except (OSError, ValueError, RuntimeError) as exc:
            logger.debug("Could not read %s: %s", path, exc)
            return None
        if isinstance(raw, bytes):
            if len(raw) > limit:
                logger.debug("Skipping %s (%d bytes exceeds %d)", path, len(raw), limit)
                return None
            text = raw.decode("utf-8", errors="replace")
        else:
            text = raw
            if len(text.encode("utf-8")) > limit:
                return None

        if posixpath.basename(path) == MANIFEST_FILENAME:
            self._consider_manifest(path, text)

        source_file = SourceFile(
            path=path,
            content=text[: self.limits.max_content_chars],
            language=classify(extension),
        )
        self.files.append(source_file)
        return source_file

    def finish(self, name: str, *, source: str) -> IngestionResult:
        """Build the canonical result; raises :class:`NoSupportedFiles` when empty."""
        if not self.files:
            raise NoSupportedFiles()

        package_info = self.package_info
        project_name = name
        if package_info is not None and package_info.name:
            project_name = package_info.name

        project_info = analyze_project(
            self.files,
            name=project_name,
            directories=self.directories,
            package_info=package_info,
        )
        logger.info(
            "Ingested %d files from %s source '%s'", len(self.files), source, project_name
        )
        return IngestionResult(
            files=list(self.files),
            project_info=project_info,
            source=source,
            warnings=list(self.warnings),
        )

    def _consider_manifest(self, path: str, text: str) -> None:
        info = parse_package_json(text)
        if info is None:
            logger.debug("Ignoring invalid manifest %s", path)
            return
        depth = path.count("/")
        if self._manifest is None or depth < self._manifest.depth:
            self._manifest = _ManifestCandidate(depth=depth, info=info)


__all__ = ["EXCLUDED_DIRS", "FileCollector", "is_excluded", "normalize_path"]
