"""UI implementations for the CLI environment."""

from .approval import ConsoleApprover
from .error_display import display_context_failure
from .error_display import display_context_report

__all__ = ["ConsoleApprover", "display_context_failure", "display_context_report"]
