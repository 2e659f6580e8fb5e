"""Context embedding engine for claw.

Discovers files under user-supplied paths, validates them against safety
limits, applies the configured error policy and renders a deterministic
Markdown document for inclusion in an LLM prompt.
"""

from .discovery import Discovery
from .discovery import discover
from .engine import ContextBuild
from .engine import build_context
from .engine import collect_context
from .engine import complete_context
from .engine import render_context
from .errors import ContextAbortedError
from .errors import ContextError
from .errors import ContextErrorKind
from .errors import ContextFailure
from .errors import ContextStrictError
from .errors import SettingsError
from .formatter import format_context
from .models import CandidateFile
from .models import ContextLimits
from .models import ContextRequest
from .models import ErrorHandlingMode
from .models import FileContent
from .models import ValidationOutcome
from .policy import Approver
from .policy import apply_policy
from .policy import auto_approve
from .policy import auto_decline
from .validation import validate
from .validation import validate_all

__all__ = [
    "Approver",
    "CandidateFile",
    "ContextAbortedError",
    "ContextBuild",
    "ContextError",
    "ContextErrorKind",
    "ContextFailure",
    "ContextLimits",
    "ContextRequest",
    "ContextStrictError",
    "Discovery",
    "ErrorHandlingMode",
    "FileContent",
    "SettingsError",
    "ValidationOutcome",
    "apply_policy",
    "auto_approve",
    "auto_decline",
    "build_context",
    "collect_context",
    "complete_context",
    "discover",
    "format_context",
    "render_context",
    "validate",
    "validate_all",
]
