"""Tests for the error handling policy."""

import logging
from pathlib import Path

import pytest

from claw_context.errors import ContextAbortedError
from claw_context.errors import ContextError
from claw_context.errors import ContextStrictError
from claw_context.models import ErrorHandlingMode
from claw_context.models import FileContent
from claw_context.models import ValidationOutcome
from claw_context.policy import apply_policy
from claw_context.policy import auto_approve
from claw_context.policy import auto_decline


class RecordingApprover:
    def __init__(self, answer: bool):
        self.answer = answer
        self.calls: list[tuple[list[ContextError], list[ContextError]]] = []

    def __call__(self, errors, warnings):
        self.calls.append((errors, warnings))
        return self.answer


@pytest.fixture
def outcome_with_errors():
    return ValidationOutcome(
        files=[FileContent(path=Path("/r/ok.txt"), relative_path="ok.txt", content="ok")],
        errors=[ContextError.binary_file(Path("/r/a.bin")), ContextError.encoding_error(Path("/r/b.txt"))],
        warnings=[ContextError.too_many_files(Path("/r"), 4, 50)],
    )


@pytest.fixture
def outcome_with_warnings_only():
    return ValidationOutcome(warnings=[ContextError.too_many_files(Path("/r"), 4, 50)])


class TestStrict:
    def test_aggregates_every_hard_error(self, outcome_with_errors):
        with pytest.raises(ContextStrictError) as exc_info:
            apply_policy(outcome_with_errors, ErrorHandlingMode.STRICT)

        assert exc_info.value.errors == outcome_with_errors.errors
        assert "a.bin" in str(exc_info.value)
        assert "b.txt" in str(exc_info.value)

    def test_warnings_never_abort(self, outcome_with_warnings_only):
        apply_policy(outcome_with_warnings_only, ErrorHandlingMode.STRICT)

    def test_clean_outcome_passes(self):
        apply_policy(ValidationOutcome(), ErrorHandlingMode.STRICT)


class TestFlexible:
    def test_approver_sees_errors_and_warnings(self, outcome_with_errors):
        approver = RecordingApprover(True)
        apply_policy(outcome_with_errors, ErrorHandlingMode.FLEXIBLE, approver)

        assert approver.calls == [(outcome_with_errors.errors, outcome_with_errors.warnings)]

    def test_decline_aborts(self, outcome_with_errors):
        with pytest.raises(ContextAbortedError) as exc_info:
            apply_policy(outcome_with_errors, ErrorHandlingMode.FLEXIBLE, RecordingApprover(False))
        assert exc_info.value.errors == outcome_with_errors.errors

    def test_missing_approver_declines(self, outcome_with_errors):
        with pytest.raises(ContextAbortedError, match="no approver"):
            apply_policy(outcome_with_errors, ErrorHandlingMode.FLEXIBLE)

    def test_warnings_alone_do_not_ask(self, outcome_with_warnings_only):
        approver = RecordingApprover(False)
        apply_policy(outcome_with_warnings_only, ErrorHandlingMode.FLEXIBLE, approver)
        assert approver.calls == []

    def test_helpers(self, outcome_with_errors):
        apply_policy(outcome_with_errors, ErrorHandlingMode.FLEXIBLE, auto_approve)
        with pytest.raises(ContextAbortedError):
            apply_policy(outcome_with_errors, ErrorHandlingMode.FLEXIBLE, auto_decline)


class TestIgnore:
    def test_never_blocks(self, outcome_with_errors):
        apply_policy(outcome_with_errors, ErrorHandlingMode.IGNORE, RecordingApprover(False))

    def test_empty_accepted_set_is_fine(self):
        outcome = ValidationOutcome(errors=[ContextError.not_found(Path("/missing"))])
        apply_policy(outcome, ErrorHandlingMode.IGNORE)

    def test_errors_logged(self, outcome_with_errors, caplog):
        with caplog.at_level(logging.WARNING, logger="claw_context.policy"):
            apply_policy(outcome_with_errors, ErrorHandlingMode.IGNORE)

        messages = [r.getMessage() for r in caplog.records]
        assert any("Ignored: Binary file skipped: /r/a.bin" in m for m in messages)
        assert any("Too many files in directory" in m for m in messages)
