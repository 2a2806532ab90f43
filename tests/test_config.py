"""Tests for docbench.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docbench.config import (
    ConfigError,
    DocBenchConfig,
    FanoutConfig,
    IngestionLimits,
    default_config,
    load_config,
    override_fanout,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocBenchConfig)
    assert config.root == tmp_path.resolve()
    assert config.ingestion == IngestionLimits()
    assert config.fanout == FanoutConfig()
    assert config.fanout.call_timeout == pytest.approx(50.0)
    assert config.fanout.deadline == pytest.approx(300.0)
    assert config.prompt.max_files == 12
    assert config.providers.enabled == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docbench.yml"
    config_file.write_text(
        """
fanout:
  mode: parallel
  concurrency: 3
  call_timeout: 20
  max_attempts: 4
  retry_delay: 1.5
  deadline: null
  request_interval: 0.25
ingestion:
  max_files: 40
  max_content_chars: 2000
  max_archive_bytes: 1048576
providers:
  enabled: [Groq, openai]
  github_token: "ghp_example"
prompt:
  max_files: 6
  templates_dir: "prompts"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.fanout.mode == "parallel"
    assert config.fanout.concurrency == 3
    assert config.fanout.call_timeout == pytest.approx(20.0)
    assert config.fanout.max_attempts == 4
    assert config.fanout.retry_delay == pytest.approx(1.5)
    assert config.fanout.deadline is None
    assert config.fanout.request_interval == pytest.approx(0.25)

    assert config.ingestion.max_files == 40
    assert config.ingestion.max_content_chars == 2000
    assert config.ingestion.max_archive_bytes == 1048576
    assert config.ingestion.max_file_bytes == IngestionLimits().max_file_bytes

    assert config.providers.enabled == ["groq", "openai"]
    assert config.providers.github_token == "ghp_example"
    assert config.prompt.max_files == 6
    assert config.prompt.templates_dir == tmp_path.resolve() / "prompts"


def test_invalid_scalars_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docbench.yml").write_text(
        "fanout:\n  concurrency: many\n  call_timeout: -3\ningestion:\n  max_files: 0\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.fanout.concurrency == FanoutConfig().concurrency
    assert config.fanout.call_timeout == FanoutConfig().call_timeout
    assert config.ingestion.max_files == IngestionLimits().max_files


def test_unknown_mode_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".docbench.yml").write_text("fanout:\n  mode: swarm\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".docbench.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_malformed_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".docbench.yml").write_text("fanout: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_override_fanout_ignores_none_and_validates(tmp_path: Path) -> None:
    config = default_config(tmp_path)

    unchanged = override_fanout(config, mode=None, concurrency=None)
    assert unchanged is config

    updated = override_fanout(config, mode="parallel", max_attempts=3)
    assert updated.fanout.mode == "parallel"
    assert updated.fanout.max_attempts == 3
    assert config.fanout.mode == "sequential"

    with pytest.raises(ConfigError):
        override_fanout(config, concurrency=0)
