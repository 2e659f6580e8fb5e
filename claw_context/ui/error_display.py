"""Rich display of context validation problems."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..errors import ContextAbortedError
from ..errors import ContextError
from ..errors import ContextErrorKind
from ..errors import ContextFailure
from ..errors import ContextStrictError

_KIND_LABELS = {
    ContextErrorKind.NOT_FOUND: "not found",
    ContextErrorKind.PERMISSION_DENIED: "permission denied",
    ContextErrorKind.TOO_LARGE: "too large",
    ContextErrorKind.TOO_MANY_FILES: "too many files",
    ContextErrorKind.BINARY_FILE: "binary",
    ContextErrorKind.ENCODING_ERROR: "not UTF-8",
    ContextErrorKind.IO_ERROR: "I/O error",
}


def _threshold(error: ContextError) -> str:
    if error.kind == ContextErrorKind.TOO_LARGE:
        return f"{(error.size or 0) / 1024:.1f} KB > {error.limit} KB"
    if error.kind == ContextErrorKind.TOO_MANY_FILES:
        return f"{error.count} skipped, limit {error.limit}"
    if error.kind == ContextErrorKind.IO_ERROR:
        return error.detail or ""
    return ""


def _problem_table(title: str, problems: list[ContextError], style: str) -> Table:
    table = Table(title=title, title_justify="left", show_header=True, header_style=f"bold {style}", box=None)
    table.add_column("Kind", style=style, no_wrap=True)
    table.add_column("Path")
    table.add_column("Detail", style="dim")
    for problem in problems:
        # Text() keeps brackets in paths from being read as markup
        table.add_row(_KIND_LABELS[problem.kind], Text(str(problem.path)), Text(_threshold(problem)))
    return table


def display_context_report(
    console: Console,
    errors: list[ContextError],
    warnings: list[ContextError],
    accepted_count: int | None = None,
) -> None:
    """Print errors and warnings from a context build.

    Args:
        console: Rich console for output
        errors: Hard errors
        warnings: Soft warnings (directory truncation)
        accepted_count: Files that passed validation, if known
    """
    if not errors and not warnings:
        return

    console.print()
    console.print(
        Panel(
            Text(f"{len(errors)} error(s), {len(warnings)} warning(s)"),
            title="[bold yellow]Context Processing Issues Detected[/bold yellow]",
            border_style="yellow",
            padding=(0, 2),
        )
    )
    if errors:
        console.print(_problem_table(f"Errors ({len(errors)})", errors, "red"))
        console.print()
    if warnings:
        console.print(_problem_table(f"Warnings ({len(warnings)})", warnings, "yellow"))
        console.print()
    if accepted_count is not None:
        console.print(f"Successfully processed {accepted_count} file(s).")


def display_context_failure(console: Console, failure: ContextFailure) -> None:
    """Print an aborted build with every hard error."""
    if isinstance(failure, ContextStrictError):
        title = "[bold red]Context Processing Failed[/bold red]"
        summary = f"Strict mode: {len(failure.errors)} error(s) must be fixed before the context can be built."
    elif isinstance(failure, ContextAbortedError):
        title = "[bold red]Context Processing Aborted[/bold red]"
        summary = str(failure)
    else:
        title = "[bold red]Context Processing Error[/bold red]"
        summary = str(failure)

    console.print()
    console.print(Panel(Text(summary), title=title, border_style="red", padding=(1, 2)))
    if failure.errors:
        console.print(_problem_table(f"Errors ({len(failure.errors)})", failure.errors, "red"))
        console.print()
    if isinstance(failure, ContextStrictError):
        console.print("[dim]Tip: fix or exclude the files above, or set error_handling_mode in claw.yaml.[/dim]")
