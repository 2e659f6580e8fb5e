"""claw-context CLI - build a context document from files and directories."""

import logging
import sys
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape

from .console import console
from .engine import collect_context
from .engine import complete_context
from .errors import ContextAbortedError
from .errors import ContextStrictError
from .errors import SettingsError
from .logging_setup import init_json_logging
from .models import ContextRequest
from .models import ErrorHandlingMode
from .policy import auto_approve
from .settings import ContextSettingsManager
from .ui import ConsoleApprover
from .ui import display_context_failure
from .ui import display_context_report

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_DECLINED = 2


@click.group()
@click.option("--log-file", envvar="CLAW_LOG_PATH", type=click.Path(dir_okay=False), help="JSONL log file path")
@click.option("--verbose", "-v", is_flag=True, help="Also log to the terminal")
def cli(log_file: str | None, verbose: bool):
    """Embed files and directories as context for LLM prompts."""
    init_json_logging(path=log_file)
    if verbose:
        root = logging.getLogger()
        if not any(isinstance(h, RichHandler) for h in root.handlers):
            root.addHandler(RichHandler(console=console, show_path=False, level=logging.DEBUG))
        root.setLevel(logging.DEBUG)


@cli.command("build")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--recurse-depth",
    "-d",
    type=click.IntRange(min=0),
    default=None,
    help="Deepest subdirectory level to include (0 = only files directly in each directory)",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the document to a file")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ErrorHandlingMode]),
    default=None,
    help="Override error_handling_mode from claw.yaml",
)
@click.option("--yes", "-y", is_flag=True, help="Continue past errors without asking (flexible mode)")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Validate files with N threads")
@click.option("--max-file-size-kb", type=click.IntRange(min=0), default=None, help="Override max_file_size_kb")
@click.option(
    "--max-files-per-directory", type=click.IntRange(min=1), default=None, help="Override max_files_per_directory"
)
@click.option("--no-gitignore", is_flag=True, help="Do not honor .gitignore/.ignore files")
def build_cmd(
    paths: tuple[Path, ...],
    recurse_depth: int | None,
    output: Path | None,
    mode: str | None,
    yes: bool,
    workers: int | None,
    max_file_size_kb: int | None,
    max_files_per_directory: int | None,
    no_gitignore: bool,
):
    """Build the context document for PATHS and print it (or write it with -o)."""
    try:
        limits = ContextSettingsManager().load_limits(
            error_handling_mode=mode,
            max_file_size_kb=max_file_size_kb,
            max_files_per_directory=max_files_per_directory,
            respect_gitignore=False if no_gitignore else None,
        )
    except SettingsError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(EXIT_FAILED)

    request = ContextRequest(paths=paths, recurse_depth=recurse_depth, limits=limits)
    outcome = collect_context(request, max_workers=workers)

    asks_approval = limits.error_handling_mode == ErrorHandlingMode.FLEXIBLE and outcome.has_errors and not yes
    approver = auto_approve if yes else ConsoleApprover(console, accepted_count=len(outcome.files))

    try:
        result = complete_context(request, outcome, approver)
    except (ContextStrictError, ContextAbortedError) as e:
        display_context_failure(console, e)
        sys.exit(EXIT_DECLINED if isinstance(e, ContextAbortedError) else EXIT_FAILED)

    if not asks_approval:
        display_context_report(console, outcome.errors, outcome.warnings, len(outcome.files))

    if output is None:
        click.echo(result.document, nl=False)
        return

    try:
        output.write_text(result.document, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write context to {escape(str(output))}: {escape(str(e))}")
        sys.exit(EXIT_FAILED)
    console.print(f"Context written to {escape(str(output))} ({result.file_count} file(s))")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
