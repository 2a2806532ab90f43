"""Pipeline orchestration: ingest, analyze, fan out, rank."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .config import DocBenchConfig, default_config
from .errors import DocBenchError, NoProvidersAvailable
from .fanout import FanoutOrchestrator
from .ingestion import (
    GitHubClient,
    UploadedFile,
    ingest_archive,
    ingest_directory,
    ingest_files,
    ingest_repository,
)
from .llm import GenerationClient, ProviderRegistry, discover_providers
from .logging import get_logger
from .models import DocumentationResult, IngestionResult, ProjectInfo
from .prompting import PromptBuilder
from .ranking import RunSummary, rank_results, summarize


@dataclass
class GenerationReport:
    """Outcome of a whole request, success or structured failure."""

    success: bool
    results: List[DocumentationResult] = field(default_factory=list)
    project_info: Optional[ProjectInfo] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    summary: Optional[RunSummary] = None
    source: Optional[str] = None
    skipped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "source": self.source,
            "results": [result.to_dict() for result in self.results],
            "project_info": self.project_info.to_dict() if self.project_info else None,
            "summary": self.summary.to_dict() if self.summary else None,
            "warnings": list(self.warnings),
            "skipped": self.skipped,
        }


class Orchestrator:
    """Coordinates one documentation run for any supported source."""

    def __init__(
        self,
        config: DocBenchConfig | None = None,
        *,
        client: GenerationClient | None = None,
        github_client: GitHubClient | None = None,
        prompt_builder: PromptBuilder | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config or default_config()
        self.client = client or GenerationClient()
        self.environ = os.environ if environ is None else environ
        self.github_client = github_client
        self.prompt_builder = prompt_builder or PromptBuilder(
            self.config.prompt.templates_dir,
            max_files=self.config.prompt.max_files,
        )
        self.logger = get_logger("orchestrator")

    def registry(self, provider: str | None = None) -> ProviderRegistry:
        return discover_providers(
            self.environ,
            enabled=self.config.providers.enabled or None,
            selected=provider,
        )

    def run_files(self, uploads: Iterable[UploadedFile], *, provider: str | None = None) -> GenerationReport:
        return self._generate(lambda: ingest_files(uploads, self.config.ingestion), provider)

    def run_directory(self, path: str | Path, *, provider: str | None = None) -> GenerationReport:
        return self._generate(lambda: ingest_directory(path, self.config.ingestion), provider)

    def run_archive(
        self,
        data: bytes,
        filename: str = "project.zip",
        *,
        provider: str | None = None,
    ) -> GenerationReport:
        return self._generate(lambda: ingest_archive(data, filename, self.config.ingestion), provider)

    def run_repository(self, url: str, *, provider: str | None = None) -> GenerationReport:
        def _ingest() -> IngestionResult:
            client = self.github_client or GitHubClient(self._github_token())
            return ingest_repository(url, self.config.ingestion, client=client)

        return self._generate(_ingest, provider)

    def _generate(
        self,
        ingest: Callable[[], IngestionResult],
        provider: str | None,
    ) -> GenerationReport:
        ingestion: Optional[IngestionResult] = None
        try:
            registry = self.registry(provider)
            if not len(registry):
                raise NoProvidersAvailable()
            ingestion = ingest()
            self.logger.info(
                "Analyzed '%s': %d files, %d key files, %d endpoints",
                ingestion.project_info.name,
                ingestion.project_info.file_count,
                len(ingestion.project_info.structure.key_files),
                len(ingestion.project_info.api_endpoints),
            )
            fanout = FanoutOrchestrator(
                registry,
                client=self.client,
                prompt_builder=self.prompt_builder,
                config=self.config.fanout,
            )
            outcome = fanout.run(ingestion.project_info, ingestion.files)
        except (DocBenchError, OSError) as exc:
            self.logger.error("Generation failed: %s", exc)
            return GenerationReport(
                success=False,
                error=str(exc),
                project_info=ingestion.project_info if ingestion else None,
                warnings=list(ingestion.warnings) if ingestion else [],
                source=ingestion.source if ingestion else None,
            )

        warnings = list(ingestion.warnings)
        if outcome.deadline_reached:
            warnings.append(
                f"Global deadline reached; {outcome.skipped} generation task(s) were not started."
            )
        ranked = rank_results(outcome.results)
        summary = summarize(ranked)
        self.logger.info(
            "Generation finished: %d succeeded, %d failed in %d ms",
            summary.succeeded,
            summary.failed,
            outcome.elapsed_ms,
        )
        return GenerationReport(
            success=True,
            results=ranked,
            project_info=ingestion.project_info,
            warnings=warnings,
            summary=summary,
            source=ingestion.source,
            skipped=outcome.skipped,
        )

    def _github_token(self) -> Optional[str]:
        token = self.config.providers.github_token or self.environ.get("GITHUB_TOKEN", "")
        return token.strip() or None


__all__ = ["GenerationReport", "Orchestrator"]
