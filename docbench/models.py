"""Core data models shared across docbench components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SourceFile:
    """A retained project file with truncated content."""

    path: str
    content: str
    language: str


@dataclass
class FileEntry:
    """Structural record of a retained file."""

    path: str
    type: str
    size: int


@dataclass
class KeyFile:
    """A file singled out as architecturally significant."""

    path: str
    purpose: str
    type: str


@dataclass
class ProjectStructure:
    """Directory layout and notable files of a project."""

    directories: List[str] = field(default_factory=list)
    files: List[FileEntry] = field(default_factory=list)
    depth: int = 1
    key_files: List[KeyFile] = field(default_factory=list)


@dataclass
class PackageInfo:
    """Fields read from a package manifest (package.json)."""

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    scripts: Dict[str, str] = field(default_factory=dict)
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    author: Optional[str] = None
    license: Optional[str] = None
    framework: Optional[str] = None


@dataclass(frozen=True)
class Endpoint:
    """HTTP route found by the endpoint heuristics."""

    method: str
    path: str
    description: str
    file: str
    line: Optional[int] = None


@dataclass
class DataFlowInfo:
    """Files grouped by architectural layer."""

    presentation_layer: List[str] = field(default_factory=list)
    application_layer: List[str] = field(default_factory=list)
    data_layer: List[str] = field(default_factory=list)


@dataclass
class ProjectInfo:
    """Aggregate project metadata derived from the retained files."""

    name: str
    file_count: int
    languages: List[str]
    structure: ProjectStructure
    framework: str = "Unknown"
    package_info: Optional[PackageInfo] = None
    api_endpoints: List[Endpoint] = field(default_factory=list)
    data_flow: DataFlowInfo = field(default_factory=DataFlowInfo)
    test_files: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    ui_files: List[str] = field(default_factory=list)
    security_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class IngestionResult:
    """Canonical output of every ingestion variant."""

    files: List[SourceFile]
    project_info: ProjectInfo
    source: str
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ModelSpec:
    """A provider model and its output token ceiling."""

    name: str
    max_tokens: int
    description: str = ""


@dataclass(frozen=True)
class GenerationTask:
    """One (provider, model) unit of fan-out work."""

    provider: str
    model: str
    max_tokens: int


@dataclass(frozen=True)
class DocumentationResult:
    """Outcome of a single generation task."""

    success: bool
    model_used: str
    provider_used: str
    generation_time_ms: int
    documentation: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    token_count: Optional[int] = None
    attempts: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "DataFlowInfo",
    "DocumentationResult",
    "Endpoint",
    "FileEntry",
    "GenerationTask",
    "IngestionResult",
    "KeyFile",
    "ModelSpec",
    "PackageInfo",
    "ProjectInfo",
    "ProjectStructure",
    "SourceFile",
]
