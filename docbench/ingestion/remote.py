"""Ingestion of public GitHub repositories through the contents API."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import IngestionLimits
from ..errors import InvalidRepositoryURL, RateLimited, RepositoryUnavailable
from ..languages import extension_of, is_supported
from ..logging import get_logger
from ..models import IngestionResult
from .normalizer import EXCLUDED_DIRS, FileCollector

API_ROOT = "https://api.github.com"
RATE_LIMIT_WARNING_THRESHOLD = 5
MAX_LISTING_PAGES = 10

_REPOSITORY_PATTERN = re.compile(
    r"^(?:https?://|ssh://git@|git@)?(?:www\.)?github\.com[/:]([^/\s]+)/([^/\s#?]+?)(?:\.git)?(?:[/#?]|$)"
)
_NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="?next"?')

logger = get_logger("ingestion.remote")


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    repo: str

    @property
    def contents_url(self) -> str:
        return f"{API_ROOT}/repos/{quote(self.owner)}/{quote(self.repo)}/contents"


@dataclass(frozen=True)
class RemoteEntry:
    """One item of a contents API listing."""

    name: str
    path: str
    type: str
    size: int = 0
    url: Optional[str] = None
    download_url: Optional[str] = None


@dataclass
class DirectoryListing:
    entries: List[RemoteEntry] = field(default_factory=list)
    rate_limit_remaining: Optional[int] = None


@dataclass(frozen=True)
class RemoteResponse:
    status: int
    headers: Mapping[str, str]
    body: bytes


Transport = Callable[[Request, float], RemoteResponse]


def parse_repository_url(url: str) -> RepositoryRef:
    """Extract ``owner/repo`` from a GitHub URL."""
    match = _REPOSITORY_PATTERN.search(url.strip())
    if not match:
        raise InvalidRepositoryURL(f"Invalid GitHub repository URL: {url}")
    return RepositoryRef(owner=match.group(1), repo=match.group(2))


def _urlopen_transport(request: Request, timeout: float) -> RemoteResponse:
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            return RemoteResponse(
                status=getattr(response, "status", 200),
                headers={key.lower(): value for key, value in response.headers.items()},
                body=response.read(),
            )
    except HTTPError as exc:
        headers = {key.lower(): value for key, value in (exc.headers or {}).items()}
        return RemoteResponse(status=exc.code, headers=headers, body=exc.read() or b"")
    except URLError as exc:
        raise RepositoryUnavailable(f"Failed to reach GitHub: {exc.reason}") from exc


class GitHubClient:
    """Thin wrapper over the GitHub contents API."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.token = token
        self.timeout = timeout
        self._transport = transport or _urlopen_transport

    def list_directory(self, url: str) -> DirectoryListing:
        """List a contents URL, following ``Link: rel=next`` pagination."""
        listing = DirectoryListing()
        next_url: Optional[str] = url
        pages = 0
        while next_url and pages < MAX_LISTING_PAGES:
            response = self._get(next_url, accept="application/vnd.github.v3+json")
            pages += 1
            remaining = _as_int(response.headers.get("x-ratelimit-remaining"))
            if remaining is not None:
                listing.rate_limit_remaining = remaining
            listing.entries.extend(_parse_entries(response.body))
            next_url = _next_link(response.headers.get("link"))
        return listing

    def download(self, url: str) -> bytes:
        return self._get(url).body

    def _get(self, url: str, *, accept: Optional[str] = None) -> RemoteResponse:
        headers = {"User-Agent": "docbench"}
        if accept:
            headers["Accept"] = accept
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        response = self._transport(Request(url, headers=headers, method="GET"), self.timeout)
        if response.status in (403, 429):
            raise RateLimited()
        if response.status == 404:
            raise RepositoryUnavailable(
                "Repository not found or not accessible. Make sure it's a public repository."
            )
        if response.status >= 400:
            raise RepositoryUnavailable(f"GitHub API error: {response.status}")
        return response


def ingest_repository(
    url: str,
    limits: IngestionLimits | None = None,
    *,
    client: GitHubClient | None = None,
    token: Optional[str] = None,
) -> IngestionResult:
    """Normalize a bounded subset of a public GitHub repository."""
    limits = limits or IngestionLimits()
    ref = parse_repository_url(url)
    client = client or GitHubClient(token)
    collector = FileCollector(
        limits,
        max_files=limits.remote_max_files,
        max_file_bytes=limits.remote_max_file_bytes,
    )
    logger.info("Fetching repository %s/%s", ref.owner, ref.repo)

    traversal = _Traversal(client=client, collector=collector, limits=limits)
    try:
        traversal.visit(ref.contents_url, "", depth=0)
    except RateLimited:
        if not collector.files:
            raise
        collector.warnings.append(
            "GitHub API rate limit reached; documentation is based on a partial file set."
        )
        logger.warning("Rate limit reached after %d files, continuing with partial set", len(collector.files))

    return collector.finish(ref.repo, source="repository")


@dataclass
class _Traversal:
    client: GitHubClient
    collector: FileCollector
    limits: IngestionLimits

    def visit(self, url: str, path: str, *, depth: int) -> None:
        if self.collector.full:
            return
        try:
            listing = self.client.list_directory(url)
        except RepositoryUnavailable as exc:
            if not path and not self.collector.files:
                raise
            message = f"Skipped directory '{path or '/'}': {exc}"
            self.collector.warnings.append(message)
            logger.warning(message)
            return

        if (
            listing.rate_limit_remaining is not None
            and listing.rate_limit_remaining < RATE_LIMIT_WARNING_THRESHOLD
        ):
            logger.warning(
                "GitHub API rate limit nearly exhausted (%d requests remaining)",
                listing.rate_limit_remaining,
            )

        if path:
            self.collector.register_directory(path)

        accepted_here = 0
        for entry in listing.entries:
            if self.collector.full:
                return
            if entry.type == "dir":
                if entry.name in EXCLUDED_DIRS or depth + 1 >= self.limits.max_depth:
                    continue
                self.visit(entry.url or f"{url}/{quote(entry.name)}", entry.path, depth=depth + 1)
                continue
            if entry.type != "file" or not entry.download_url:
                continue
            if accepted_here >= self.limits.remote_max_files_per_directory:
                continue
            if not is_supported(extension_of(entry.path)):
                continue
            if self.collector.offer(entry.path, self._reader(entry), size=entry.size) is not None:
                accepted_here += 1

    def _reader(self, entry: RemoteEntry) -> Callable[[], bytes]:
        def _read() -> bytes:
            try:
                return self.client.download(entry.download_url or "")
            except RepositoryUnavailable as exc:
                # Individual download failures only drop the file.
                raise ValueError(str(exc)) from exc

        return _read


def _parse_entries(body: bytes) -> List[RemoteEntry]:
    try:
        payload = json.loads(body.decode("utf-8", errors="replace") or "[]")
    except json.JSONDecodeError as exc:
        raise RepositoryUnavailable(f"Unexpected GitHub response: {exc}") from exc
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return []
    entries: List[RemoteEntry] = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("path"):
            continue
        entries.append(
            RemoteEntry(
                name=str(item.get("name") or item["path"].rsplit("/", 1)[-1]),
                path=str(item["path"]),
                type=str(item.get("type") or "file"),
                size=_as_int(item.get("size")) or 0,
                url=item.get("url") if isinstance(item.get("url"), str) else None,
                download_url=item.get("download_url") if isinstance(item.get("download_url"), str) else None,
            )
        )
    return entries


def _next_link(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    match = _NEXT_LINK_PATTERN.search(header)
    return match.group(1) if match else None


def _as_int(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


__all__ = [
    "DirectoryListing",
    "GitHubClient",
    "RemoteEntry",
    "RemoteResponse",
    "RepositoryRef",
    "ingest_repository",
    "parse_repository_url",
]
