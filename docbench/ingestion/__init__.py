"""Ingestion of project sources into a bounded, canonical file set."""

from __future__ import annotations

from .archive import ingest_archive
from .local import DEFAULT_UPLOAD_NAME, UploadedFile, ingest_directory, ingest_files
from .normalizer import EXCLUDED_DIRS, FileCollector, normalize_path
from .remote import GitHubClient, RemoteResponse, ingest_repository, parse_repository_url

__all__ = [
    "DEFAULT_UPLOAD_NAME",
    "EXCLUDED_DIRS",
    "FileCollector",
    "GitHubClient",
    "RemoteResponse",
    "UploadedFile",
    "ingest_archive",
    "ingest_directory",
    "ingest_files",
    "ingest_repository",
    "normalize_path",
    "parse_repository_url",
]
