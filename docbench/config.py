"""Configuration loading for docbench (.docbench.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docbench.yml"

FANOUT_MODES = ("sequential", "parallel")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class IngestionLimits:
    """Hard bounds applied while normalizing an untrusted project source."""

    max_files: int = 100
    max_file_bytes: int = 20_000
    max_content_chars: int = 8_000
    remote_max_files: int = 50
    remote_max_files_per_directory: int = 15
    remote_max_file_bytes: int = 100_000
    max_depth: int = 8
    max_archive_bytes: int = 50_000_000


@dataclass(frozen=True)
class FanoutConfig:
    """Dispatch, timeout and retry policy for the provider fan-out."""

    mode: str = "sequential"
    concurrency: int = 4
    call_timeout: Optional[float] = 50.0
    max_attempts: int = 2
    retry_delay: float = 0.5
    deadline: Optional[float] = 300.0
    request_interval: float = 0.0


@dataclass(frozen=True)
class PromptConfig:
    """Prompt rendering settings."""

    max_files: int = 12
    templates_dir: Optional[Path] = None


@dataclass(frozen=True)
class ProviderConfig:
    """Provider selection and remote repository credentials."""

    enabled: List[str] = field(default_factory=list)
    github_token: Optional[str] = None


@dataclass(frozen=True)
class DocBenchConfig:
    """Represents the settings defined in .docbench.yml."""

    root: Path
    ingestion: IngestionLimits = field(default_factory=IngestionLimits)
    fanout: FanoutConfig = field(default_factory=FanoutConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    providers: ProviderConfig = field(default_factory=ProviderConfig)


def default_config(root: Path | None = None) -> DocBenchConfig:
    return DocBenchConfig(root=(root or Path.cwd()).resolve())


def load_config(config_path: Path) -> DocBenchConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocBenchConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    ingestion = _load_ingestion(_as_dict(data.get("ingestion")))
    fanout = _load_fanout(_as_dict(data.get("fanout")))

    prompt_data = _as_dict(data.get("prompt"))
    prompt = PromptConfig()
    if prompt_data:
        templates_dir_str = _as_str(prompt_data.get("templates_dir"))
        prompt = PromptConfig(
            max_files=_positive_int(prompt_data.get("max_files"), prompt.max_files),
            templates_dir=root / templates_dir_str if templates_dir_str else None,
        )

    providers_data = _as_dict(data.get("providers"))
    providers = ProviderConfig()
    if providers_data:
        providers = ProviderConfig(
            enabled=[name.lower() for name in _as_str_list(providers_data.get("enabled"))],
            github_token=_as_str(providers_data.get("github_token")),
        )

    return DocBenchConfig(
        root=root,
        ingestion=ingestion,
        fanout=fanout,
        prompt=prompt,
        providers=providers,
    )


def override_fanout(config: DocBenchConfig, **changes: Any) -> DocBenchConfig:
    """Return a copy of ``config`` with non-None fan-out fields replaced."""
    updates = {key: value for key, value in changes.items() if value is not None}
    if not updates:
        return config
    fanout = replace(config.fanout, **updates)
    _validate_fanout(fanout)
    return replace(config, fanout=fanout)


def _load_ingestion(data: Dict[str, Any]) -> IngestionLimits:
    defaults = IngestionLimits()
    if not data:
        return defaults
    values = {
        item.name: _positive_int(data.get(item.name), getattr(defaults, item.name))
        for item in fields(IngestionLimits)
    }
    return IngestionLimits(**values)


def _load_fanout(data: Dict[str, Any]) -> FanoutConfig:
    defaults = FanoutConfig()
    if not data:
        return defaults
    mode = (_as_str(data.get("mode")) or defaults.mode).lower()
    fanout = FanoutConfig(
        mode=mode,
        concurrency=_positive_int(data.get("concurrency"), defaults.concurrency),
        call_timeout=_optional_seconds(data, "call_timeout", defaults.call_timeout),
        max_attempts=_positive_int(data.get("max_attempts"), defaults.max_attempts),
        retry_delay=_non_negative_float(data.get("retry_delay"), defaults.retry_delay),
        deadline=_optional_seconds(data, "deadline", defaults.deadline),
        request_interval=_non_negative_float(
            data.get("request_interval"), defaults.request_interval
        ),
    )
    _validate_fanout(fanout)
    return fanout


def _validate_fanout(fanout: FanoutConfig) -> None:
    if fanout.mode not in FANOUT_MODES:
        raise ConfigError(
            f"fanout.mode must be one of {', '.join(FANOUT_MODES)} (got '{fanout.mode}')"
        )
    if fanout.concurrency < 1:
        raise ConfigError("fanout.concurrency must be at least 1")
    if fanout.max_attempts < 1:
        raise ConfigError("fanout.max_attempts must be at least 1")


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _optional_seconds(data: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
    # An explicit null disables the limit.
    if key in data and data[key] is None:
        return None
    value = _as_float(data.get(key))
    if value is None or value <= 0:
        return default
    return value


def _positive_int(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed < 1:
        return default
    return parsed


def _non_negative_float(value: Any, default: float) -> float:
    parsed = _as_float(value)
    if parsed is None or parsed < 0:
        return default
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DocBenchConfig",
    "FANOUT_MODES",
    "FanoutConfig",
    "IngestionLimits",
    "PromptConfig",
    "ProviderConfig",
    "default_config",
    "load_config",
    "override_fanout",
]
