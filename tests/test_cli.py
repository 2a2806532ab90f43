"""CLI behaviour tests."""

from __future__ import annotations

import json
import logging

import pytest

from docbench.cli import _build_parser, _load_generate_config, main
from docbench.errors import ProviderError
from docbench.llm import GenerationClient
from docbench.orchestrator import Orchestrator
from tests._fixtures.fakes import ScriptedRunner


@pytest.fixture
def scripted_cli(monkeypatch):
    """Route the CLI's orchestrator through a scripted runner with one xai key."""
    runner = ScriptedRunner(default="# CLI\n\nGenerated from the command line.")

    def factory(config):
        return Orchestrator(config, client=GenerationClient(runner=runner), environ={"XAI_API_KEY": "x-key"})

    monkeypatch.setattr("docbench.cli.Orchestrator", factory)
    return runner


def test_cli_accepts_verbose_before_and_after_command() -> None:
    parser = _build_parser()

    assert parser.parse_args(["--verbose", "providers"]).verbose is True
    assert parser.parse_args(["generate", "--verbose"]).verbose is True


def test_cli_source_flags_are_mutually_exclusive() -> None:
    parser = _build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "--zip", "a.zip", "--repo", "https://github.com/a/b"])


def test_generate_flags_override_config(tmp_path) -> None:
    (tmp_path / ".docbench.yml").write_text("fanout:\n  deadline: 120\n  max_attempts: 3\n", encoding="utf-8")
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "--config", str(tmp_path), "--parallel", "--concurrency", "3", "--timeout", "5", "--deadline", "0"]
    )

    config = _load_generate_config(args)

    assert config.fanout.mode == "parallel"
    assert config.fanout.concurrency == 3
    assert config.fanout.call_timeout == 5.0
    assert config.fanout.max_attempts == 3
    assert config.fanout.deadline is None


def test_generate_prints_ranked_table(tmp_path, project_builder, scripted_cli, capsys) -> None:
    root = project_builder.write({"main.py": "print('hi')\n"})

    main(["generate", str(root), "--config", str(tmp_path), "--show-best"])

    out = capsys.readouterr().out
    assert "Project: project" in out
    assert "xai" in out
    assert "Best balance: xai/" in out
    assert "Generated from the command line." in out


def test_generate_json_output(tmp_path, project_builder, scripted_cli, capsys) -> None:
    root = project_builder.write({"main.py": "print('hi')\n"})

    main(["generate", str(root), "--config", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert payload["source"] == "directory"
    assert {result["provider_used"] for result in payload["results"]} == {"xai"}
    assert logging.getLogger("docbench").level == logging.WARNING


def test_generate_writes_log_file(tmp_path, project_builder, scripted_cli) -> None:
    root = project_builder.write({"main.py": "print('hi')\n"})
    log_path = tmp_path / "run.log"

    main(["--log-file", str(log_path), "generate", str(root), "--config", str(tmp_path)])

    text = log_path.read_text(encoding="utf-8")
    assert "Dispatching" in text
    assert "[xai/grok-beta] Succeeded in" in text


def test_generate_reports_failed_tasks(tmp_path, project_builder, scripted_cli, capsys) -> None:
    scripted_cli.script = {"xai/grok-beta": [ProviderError("xai returned status 401", status_code=401)]}
    root = project_builder.write({"main.py": "print('hi')\n"})

    main(["generate", str(root), "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert "failed" in out
    assert "error: xai returned status 401" in out


def test_generate_exits_non_zero_on_request_failure(tmp_path, scripted_cli, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "--zip", str(tmp_path / "missing.zip"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "docbench generate failed" in capsys.readouterr().err


def test_providers_command_lists_availability(monkeypatch, capsys) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

    main(["providers"])

    lines = capsys.readouterr().out.splitlines()
    groq_line = next(line for line in lines if line.startswith("groq "))
    assert groq_line.endswith("available")
