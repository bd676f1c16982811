# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line front end for workspace analysis and change tracking."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from docdrift.config import DEFAULT_EXCLUDED_DIRS, AnalysisSettings
from docdrift.errors import NoWorkspaceError
from docdrift.generation import BatchProgress
from docdrift.llm import OPENAI_DEFAULT_MODEL, OllamaDrafter, OpenAIDrafter, StubDrafter
from docdrift.llm_client import DocumentationDrafter
from docdrift.messages import (
    AnalyzeWorkspace,
    ApplyChange,
    ClearAllChanges,
    FilterChanges,
    GenerateMissingDocs,
    GetActivities,
    GetChangeStats,
    InboundMessage,
    Response,
    RevertChange,
    ViewDiff,
)
from docdrift.session import Session

logger = logging.getLogger(__name__)

PROVIDERS: tuple[str, ...] = ("stub", "ollama", "openai")
DEFAULT_OLLAMA_URL: str = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL: str = "llama3.1"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="docdrift")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze the workspace.")
    _add_common_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Scan paths matched by .gitignore files.",
    )

    generate_parser = subparsers.add_parser(
        "generate", help="Generate missing documentation files."
    )
    _add_common_arguments(generate_parser)
    generate_parser.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Scan paths matched by .gitignore files.",
    )
    generate_parser.add_argument(
        "--provider", choices=PROVIDERS, default="stub", help="Drafting provider."
    )
    generate_parser.add_argument(
        "--provider-url", required=False, help="Provider API endpoint URL."
    )
    generate_parser.add_argument("--model", required=False, help="Provider model name.")

    changes_parser = subparsers.add_parser("changes", help="List tracked changes.")
    _add_common_arguments(changes_parser)
    changes_parser.add_argument(
        "--status", choices=("pending", "applied", "reverted"), required=False
    )
    changes_parser.add_argument(
        "--origin", choices=("automatic", "manual"), required=False
    )

    stats_parser = subparsers.add_parser("stats", help="Show change counts.")
    _add_common_arguments(stats_parser)

    for name, help_text in (
        ("diff", "Show the diff document of a change."),
        ("apply", "Apply a pending or reverted change."),
        ("revert", "Revert an applied change."),
    ):
        change_parser = subparsers.add_parser(name, help=help_text)
        change_parser.add_argument("change_id", help="Change id.")
        _add_common_arguments(change_parser)

    clear_parser = subparsers.add_parser("clear", help="Remove all tracked changes.")
    _add_common_arguments(clear_parser)
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    try:
        drafter = build_drafter(
            getattr(args, "provider", "stub"),
            getattr(args, "provider_url", None),
            getattr(args, "model", None),
        )
    except ValueError as exc:
        stderr.write(f"{exc}\n")
        return 2

    settings = AnalysisSettings(
        excluded_dirs=DEFAULT_EXCLUDED_DIRS,
        respect_gitignore=not getattr(args, "no_gitignore", False),
    )
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    try:
        session = Session.open(
            Path(args.path),
            db_path=Path(args.db) if args.db else None,
            drafter=drafter,
            settings=settings,
            on_progress=(
                (lambda progress: _write_progress(progress, console))
                if args.format == "table"
                else None
            ),
        )
    except NoWorkspaceError as exc:
        logger.warning(f"Workspace could not be opened (path={args.path} error={exc})")
        stderr.write(f"No workspace folder found: {exc}\n")
        return 2

    response = session.handle(build_message(args))
    if args.format == "json":
        _write_json(response, console)
    else:
        _write_response(response, console)
    return 0 if response.success else 1


def build_message(args: argparse.Namespace) -> InboundMessage:
    """Map parsed CLI arguments onto an inbound session message.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Inbound message for the selected command.

    Raises:
        ValueError: If the command is not supported.
    """
    if args.command == "analyze":
        return AnalyzeWorkspace()
    if args.command == "generate":
        return GenerateMissingDocs()
    if args.command == "changes":
        if args.status is None and args.origin is None:
            return GetActivities()
        return FilterChanges(status=args.status, origin=args.origin)
    if args.command == "stats":
        return GetChangeStats()
    if args.command == "diff":
        return ViewDiff(change_id=args.change_id)
    if args.command == "apply":
        return ApplyChange(change_id=args.change_id)
    if args.command == "revert":
        return RevertChange(change_id=args.change_id)
    if args.command == "clear":
        return ClearAllChanges()
    raise ValueError(f"Unsupported command: {args.command}")


def build_drafter(
    provider: str, provider_url: str | None, model: str | None
) -> DocumentationDrafter:
    """Create the configured documentation drafter.

    Args:
        provider: Provider name, one of ``stub``, ``ollama`` or ``openai``.
        provider_url: Provider endpoint URL.
        model: Model name.

    Returns:
        Configured drafter.

    Raises:
        ValueError: If the provider is unknown.
    """
    if provider == "stub":
        return StubDrafter()
    if provider == "ollama":
        return OllamaDrafter(
            provider_url=provider_url or DEFAULT_OLLAMA_URL,
            model=model or DEFAULT_OLLAMA_MODEL,
        )
    if provider == "openai":
        return OpenAIDrafter(
            provider_url=provider_url or "openai", model=model or OPENAI_DEFAULT_MODEL
        )
    raise ValueError(f"Unsupported provider: {provider}")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--path", default=".", help="Workspace root path.")
    parser.add_argument(
        "--db",
        required=False,
        help="Change database path (default: <path>/.docdrift/changes.sqlite).",
    )
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )


def _write_progress(progress: BatchProgress, console: Console) -> None:
    state = "ok" if progress.success else "failed"
    console.print(
        f"[{progress.completed}/{progress.total}] {progress.file_path}: {state}",
        markup=False,
        highlight=False,
    )


def _write_json(response: Response, console: Console) -> None:
    payload = {
        "command": response.command.value,
        "success": response.success,
        "message": response.message,
        "payload": response.payload,
    }
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_response(response: Response, console: Console) -> None:
    console.print(response.message, markup=False, highlight=False)
    payload = response.payload
    if "project_structure" in payload:
        _write_analysis_tables(payload, console)
    elif "activities" in payload:
        _write_change_table(
            [
                {**entry["change_record"], "when": entry["when"]}
                for entry in payload["activities"]
            ],
            console,
        )
    elif "changes" in payload:
        _write_change_table(payload["changes"], console)
    elif "document" in payload:
        console.print(payload["document"], markup=False, highlight=False, soft_wrap=True)
    elif "total" in payload:
        columns = ("total", "applied", "pending", "reverted")
        table = Table(show_header=True, expand=False)
        for column in columns:
            table.add_column(column, justify="right")
        table.add_row(*(str(payload[column]) for column in columns))
        console.print(table)
    elif "planned" in payload:
        console.print(
            f"estimated_time={payload['estimated_time']} cancelled={payload['cancelled']}",
            markup=False,
            highlight=False,
        )
        for file_path, error in sorted(payload["failed"].items()):
            console.print(f"failed: {file_path}: {error}", markup=False, highlight=False)


def _write_analysis_tables(payload: dict[str, Any], console: Console) -> None:
    structure = payload["project_structure"]
    console.rule("project", style=Style(color="cyan"), characters="-")
    summary = Table(show_header=True, expand=False)
    for column in ("framework", "architecture", "files", "code", "docs", "coverage"):
        summary.add_column(column)
    summary.add_row(
        str(structure["framework"]),
        str(structure["architecture"]),
        str(payload["total_files"]),
        str(payload["code_files"]),
        str(payload["doc_files"]),
        f"{payload['doc_coverage']}%",
    )
    console.print(summary)

    console.rule("domains", style=Style(color="cyan"), characters="-")
    domains = Table(show_header=True, show_lines=True, expand=True)
    for column in ("name", "type", "priority", "files", "endpoints", "classes", "functions"):
        domains.add_column(column, overflow="fold")
    for domain in structure["domains"]:
        domains.add_row(
            domain["name"],
            domain["type"],
            domain["priority"],
            str(len(domain["files"])),
            str(len(domain["endpoints"])),
            str(len(domain["classes"])),
            str(len(domain["functions"])),
        )
    console.print(domains)

    console.rule("tasks", style=Style(color="cyan"), characters="-")
    tasks = Table(show_header=True, show_lines=True, expand=True)
    for column in ("priority", "type", "title", "file_path", "suggested_action"):
        tasks.add_column(column, overflow="fold")
    for task in payload["doc_tasks"]:
        tasks.add_row(
            task["priority"],
            task["type"],
            task["title"],
            task["file_path"],
            task["suggested_action"],
        )
    console.print(tasks)
    for error in payload["errors"]:
        console.print(
            f"analyzer_error: {error['file_path']}: {error['message']}",
            markup=False,
            highlight=False,
        )


def _write_change_table(changes: list[dict[str, Any]], console: Console) -> None:
    table = Table(show_header=True, show_lines=True, expand=True)
    for column in ("id", "status", "origin", "type", "title", "file_path", "when"):
        table.add_column(column, overflow="fold")
    for change in changes:
        table.add_row(
            change["id"],
            change["status"],
            change["origin"],
            change["type"],
            change["title"],
            change["file_path"],
            change.get("when", change["timestamp"]),
        )
    console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
