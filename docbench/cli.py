"""CLI entrypoints for docbench commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .config import ConfigError, DocBenchConfig, load_config, override_fanout
from .llm import provider_statuses
from .logging import configure_logging
from .orchestrator import GenerationReport, Orchestrator
from .ranking import best_balance


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docbench",
        description="Generate project documentation with every configured LLM provider and compare the results.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, help="Also write detailed logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate documentation for a directory, ZIP archive or GitHub repository.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory (defaults to current directory).",
    )
    source = generate_parser.add_mutually_exclusive_group()
    source.add_argument("--zip", dest="zip_path", help="Read the project from a ZIP archive.")
    source.add_argument("--repo", dest="repo_url", help="Read the project from a public GitHub URL.")
    generate_parser.add_argument(
        "--provider",
        help="Use a single provider (falls back to all available providers when unavailable).",
    )
    generate_parser.add_argument(
        "--parallel",
        action="store_true",
        help="Dispatch generation tasks concurrently instead of one at a time.",
    )
    generate_parser.add_argument("--concurrency", type=int, help="Maximum concurrent tasks in parallel mode.")
    generate_parser.add_argument("--timeout", type=float, help="Per-call timeout in seconds.")
    generate_parser.add_argument(
        "--deadline",
        type=float,
        help="Global deadline in seconds; 0 disables it.",
    )
    generate_parser.add_argument("--retries", type=int, help="Maximum attempts per task.")
    generate_parser.add_argument("--config", type=Path, help="Path to a .docbench.yml file or its directory.")
    generate_parser.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    generate_parser.add_argument(
        "--show-best",
        action="store_true",
        help="Print the best-balanced documentation after the summary.",
    )

    providers_parser = subparsers.add_parser(
        "providers",
        help="List catalog providers and whether credentials are configured.",
    )
    _add_verbose_option(providers_parser, suppress_default=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docbench commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "json", False)),
        log_file=args.log_file,
    )

    if args.command == "generate":
        try:
            config = _load_generate_config(args)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        report = _run_generate(Orchestrator(config), args)
        if args.json:
            print(json.dumps(report.to_dict(), indent=2))
        else:
            _print_report(report, show_best=bool(args.show_best))
        if not report.success:
            parser.exit(1, f"docbench generate failed: {report.error}\n")
    elif args.command == "providers":
        _print_providers()
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_generate_config(args: argparse.Namespace) -> DocBenchConfig:
    config_path: Path = args.config or Path.cwd()
    config = load_config(config_path)
    config = override_fanout(
        config,
        mode="parallel" if args.parallel else None,
        concurrency=args.concurrency,
        call_timeout=args.timeout,
        max_attempts=args.retries,
    )
    if args.deadline is not None:
        deadline: Optional[float] = args.deadline if args.deadline > 0 else None
        config = replace(config, fanout=replace(config.fanout, deadline=deadline))
    return config


def _run_generate(orchestrator: Orchestrator, args: argparse.Namespace) -> GenerationReport:
    if args.zip_path:
        archive = Path(args.zip_path).expanduser()
        try:
            data = archive.read_bytes()
        except OSError as exc:
            return GenerationReport(success=False, error=f"Unable to read {archive}: {exc}")
        return orchestrator.run_archive(data, archive.name, provider=args.provider)
    if args.repo_url:
        return orchestrator.run_repository(args.repo_url, provider=args.provider)
    return orchestrator.run_directory(args.path, provider=args.provider)


def _print_report(report: GenerationReport, *, show_best: bool) -> None:
    if report.project_info is not None:
        info = report.project_info
        print(
            f"Project: {info.name} ({info.framework}) - {info.file_count} files, "
            f"languages: {', '.join(info.languages) or 'none'}"
        )
    for warning in report.warnings:
        print(f"Warning: {warning}")
    if not report.success:
        return

    print(f"{'#':>3}  {'Provider':<12} {'Model':<48} {'Status':<7} {'Time (ms)':>10} {'Tokens':>7}")
    for rank, result in enumerate(report.results, start=1):
        status = "ok" if result.success else "failed"
        tokens = str(result.token_count) if result.token_count is not None else "-"
        print(
            f"{rank:>3}  {result.provider_used:<12} {result.model_used:<48} {status:<7} "
            f"{result.generation_time_ms:>10} {tokens:>7}"
        )
        if not result.success and result.error:
            print(f"     error: {result.error}")

    summary = report.summary
    if summary is not None:
        print(f"Succeeded: {summary.succeeded}/{summary.total}")
        if summary.average_time_ms is not None:
            print(f"Average time: {summary.average_time_ms} ms")
        if summary.fastest:
            print(f"Fastest: {summary.fastest}")
        if summary.most_detailed:
            print(f"Most detailed: {summary.most_detailed}")
        if summary.best_balance:
            print(f"Best balance: {summary.best_balance}")
    if report.skipped:
        print(f"Skipped (deadline): {report.skipped}")

    if show_best:
        best = best_balance(report.results)
        if best is not None and best.documentation:
            print()
            print(best.documentation)


def _print_providers() -> None:
    for status in provider_statuses():
        marker = "available" if status.available else "missing key"
        print(f"{status.name:<12} {status.display_name:<16} {status.model_count:>2} models  {marker}")


if __name__ == "__main__":
    main(sys.argv[1:])
