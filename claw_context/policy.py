"""Error policy for context builds.

Decides once, over the complete ValidationOutcome, whether a build may
continue. Interactivity is not built in: the Flexible mode asks an injected
Approver, which may be a terminal prompt, an auto-yes flag or a test stub.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .errors import ContextAbortedError
from .errors import ContextError
from .errors import ContextStrictError
from .models import ErrorHandlingMode
from .models import ValidationOutcome

logger = logging.getLogger(__name__)


class Approver(Protocol):
    """Decides whether to continue after validation problems."""

    def __call__(self, errors: list[ContextError], warnings: list[ContextError]) -> bool:
        """Return True to continue with the accepted files only."""
        ...


def auto_approve(errors: list[ContextError], warnings: list[ContextError]) -> bool:
    return True


def auto_decline(errors: list[ContextError], warnings: list[ContextError]) -> bool:
    return False


def apply_policy(
    outcome: ValidationOutcome,
    mode: ErrorHandlingMode,
    approver: Approver | None = None,
) -> None:
    """Apply the configured error handling mode.

    Warnings never block a build. Hard errors block it only when the mode
    says so.

    Args:
        outcome: Complete validation outcome
        mode: Configured ErrorHandlingMode
        approver: Consulted in FLEXIBLE mode when hard errors exist.
            A missing approver counts as a decline.

    Raises:
        ContextStrictError: STRICT mode with at least one hard error
        ContextAbortedError: FLEXIBLE mode and the approver declined
    """
    errors = list(outcome.errors)
    warnings = list(outcome.warnings)

    for warning in warnings:
        logger.warning(str(warning), extra={"event": "context.warning", "kind": warning.kind.value})

    if not errors:
        return

    if mode == ErrorHandlingMode.STRICT:
        logger.error(f"Strict mode: {len(errors)} context error(s), aborting")
        raise ContextStrictError(errors, warnings)

    if mode == ErrorHandlingMode.FLEXIBLE:
        if approver is None:
            logger.info("Flexible mode without an approver, declining")
            raise ContextAbortedError(errors, warnings, reason="Context processing aborted: no approver available.")
        if not approver(errors, warnings):
            logger.info(f"Approver declined to continue with {len(outcome.files)} accepted file(s)")
            raise ContextAbortedError(errors, warnings)
        logger.info(f"Approver accepted {len(outcome.files)} file(s), {len(errors)} error(s) omitted")
        return

    for error in errors:
        logger.warning(f"Ignored: {error}", extra={"event": "context.error_ignored", "kind": error.kind.value})
