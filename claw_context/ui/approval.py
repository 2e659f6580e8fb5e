"""Interactive approval for the Flexible error handling mode."""

from rich.console import Console
from rich.prompt import Confirm

from ..errors import ContextError
from .error_display import display_context_report


class ConsoleApprover:
    """Shows the problem report and asks whether to continue.

    Satisfies the policy's Approver protocol. ``accepted_count`` is shown
    in the report when the caller knows it.
    """

    def __init__(self, console: Console, accepted_count: int | None = None):
        self.console = console
        self.accepted_count = accepted_count

    def __call__(self, errors: list[ContextError], warnings: list[ContextError]) -> bool:
        display_context_report(self.console, errors, warnings, self.accepted_count)
        return Confirm.ask(
            "Do you want to continue with the available files?",
            console=self.console,
            default=False,
        )
