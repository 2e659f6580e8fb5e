"""Context build orchestration.

Sequences discovery -> validation -> error policy -> formatting. Nothing is
formatted until the policy has allowed the build to continue, and nothing is
written anywhere: the document is returned as a string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .discovery import discover
from .formatter import format_context
from .models import ContextRequest
from .models import ValidationOutcome
from .policy import Approver
from .policy import apply_policy
from .validation import validate_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextBuild:
    """Result of a successful build: the document and the report behind it."""

    document: str
    outcome: ValidationOutcome

    @property
    def file_count(self) -> int:
        return len(self.outcome.files)


def collect_context(request: ContextRequest, max_workers: int | None = None) -> ValidationOutcome:
    """Discover and validate without applying the error policy.

    Discovery errors (missing roots, unreadable directories) are merged with
    validation errors; discovery warnings become outcome warnings.
    """
    discovery = discover(request)
    outcome = validate_all(discovery, request.limits, max_workers=max_workers)
    outcome.errors.extend(discovery.errors)
    outcome.warnings.extend(discovery.warnings)
    outcome.sort()
    return outcome


def build_context(
    request: ContextRequest,
    approver: Approver | None = None,
    max_workers: int | None = None,
) -> ContextBuild:
    """Build the context document for a request.

    Args:
        request: Roots, recursion depth and limits
        approver: Consulted in FLEXIBLE mode when hard errors exist
        max_workers: Validate with a thread pool of this size

    Returns:
        ContextBuild with the rendered document

    Raises:
        ContextStrictError: STRICT mode found hard errors
        ContextAbortedError: FLEXIBLE mode and the approver declined
    """
    outcome = collect_context(request, max_workers=max_workers)
    return complete_context(request, outcome, approver)


def complete_context(
    request: ContextRequest,
    outcome: ValidationOutcome,
    approver: Approver | None = None,
) -> ContextBuild:
    """Apply the error policy to a collected outcome, then format it.

    Raises the policy's ContextFailure before any formatting happens.
    """
    apply_policy(outcome, request.limits.error_handling_mode, approver)

    document = format_context(outcome.files, request)
    logger.info(
        f"Built context document with {len(outcome.files)} file(s), {len(document)} characters",
        extra={"event": "context.built", "files": len(outcome.files)},
    )
    return ContextBuild(document=document, outcome=outcome)


def render_context(
    request: ContextRequest,
    approver: Approver | None = None,
    max_workers: int | None = None,
) -> str:
    """Build the context document and return only its text."""
    return build_context(request, approver=approver, max_workers=max_workers).document
