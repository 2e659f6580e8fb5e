"""File validation for context embedding.

Turns each CandidateFile into either FileContent or a ContextError. Each call
touches only its own file, so validate_all can fan out across a thread pool;
results are re-sorted by relative path before they are returned.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from .errors import ContextError
from .models import CandidateFile
from .models import ContextLimits
from .models import FileContent
from .models import ValidationOutcome

logger = logging.getLogger(__name__)

SNIFF_BYTES = 8192
BINARY_CONTROL_RATIO = 0.3

# UTF-16/32 text legitimately contains NUL bytes
_TEXT_BOMS = (
    b"\xff\xfe\x00\x00",
    b"\x00\x00\xfe\xff",
    b"\xff\xfe",
    b"\xfe\xff",
)

# Control bytes that still occur in ordinary text: BS, TAB, LF, VT, FF, CR, ESC
_TEXT_CONTROLS = frozenset({0x08, 0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x1B})


def looks_binary(prefix: bytes) -> bool:
    """Classify a content prefix as binary.

    Binary when it holds a NUL byte (unless it starts with a UTF-16/32 BOM)
    or when more than 30% of its bytes are non-text control characters.
    Bytes >= 0x80 count as text so UTF-8 passes.
    """
    if not prefix:
        return False
    if prefix.startswith(_TEXT_BOMS):
        return False
    if b"\x00" in prefix:
        return True
    controls = sum(1 for byte in prefix if (byte < 0x20 and byte not in _TEXT_CONTROLS) or byte == 0x7F)
    return controls / len(prefix) > BINARY_CONTROL_RATIO


def validate(candidate: CandidateFile, limits: ContextLimits) -> FileContent | ContextError:
    """Check limits, sniff for binary content and read one candidate.

    Args:
        candidate: File produced by discovery
        limits: Size limit to enforce

    Returns:
        FileContent with the text exactly as stored, or the ContextError
        describing why the file was rejected
    """
    path = candidate.path
    limit_bytes = limits.max_file_size_bytes

    try:
        size = os.stat(path).st_size
        if size > limit_bytes:
            return ContextError.too_large(path, size, limits.max_file_size_kb)

        with open(path, "rb") as f:
            prefix = f.read(SNIFF_BYTES)
            if looks_binary(prefix):
                return ContextError.binary_file(path)
            # Bounded read: the file may have grown since it was stat'ed
            rest = f.read(max(limit_bytes + 1 - len(prefix), 0))
    except OSError as e:
        return ContextError.from_os_error(path, e)

    data = prefix + rest
    if len(data) > limit_bytes:
        return ContextError.too_large(path, len(data), limits.max_file_size_kb)

    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError:
        return ContextError.encoding_error(path)

    return FileContent(path=path, relative_path=candidate.relative_path, content=content)


def validate_all(
    candidates: Iterable[CandidateFile],
    limits: ContextLimits,
    max_workers: int | None = None,
) -> ValidationOutcome:
    """Validate every candidate and collect a sorted outcome.

    Args:
        candidates: Candidate stream, typically a Discovery
        limits: Limits to enforce
        max_workers: Thread count; None or 1 validates sequentially

    Returns:
        ValidationOutcome with accepted files and hard errors, sorted

    Raises:
        ValueError: Two candidates share a relative path
    """
    results: dict[str, FileContent | ContextError] = {}

    if max_workers is None or max_workers <= 1:
        for candidate in candidates:
            _check_unique(results, candidate)
            results[candidate.relative_path] = validate(candidate, limits)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {}
            for candidate in candidates:
                _check_unique(futures, candidate)
                futures[candidate.relative_path] = executor.submit(validate, candidate, limits)
            for relative_path, future in futures.items():
                results[relative_path] = future.result()

    outcome = ValidationOutcome()
    for relative_path in sorted(results):
        result = results[relative_path]
        if isinstance(result, FileContent):
            outcome.files.append(result)
        elif result.is_warning:
            outcome.warnings.append(result)
        else:
            outcome.errors.append(result)

    outcome.sort()
    logger.debug(f"Validated {len(results)} file(s): {len(outcome.files)} accepted, {len(outcome.errors)} rejected")
    return outcome


def _check_unique(seen: dict, candidate: CandidateFile) -> None:
    if candidate.relative_path in seen:
        raise ValueError(f"Duplicate relative path from discovery: {candidate.relative_path} ({candidate.path})")
