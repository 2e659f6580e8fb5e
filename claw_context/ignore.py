"""Ignore-file rules for context discovery.

Each walked directory may carry a .gitignore or .ignore file. Its rules apply
to everything below that directory, so the discoverer keeps an IgnoreRules
value per pending directory and extends it on the way down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from gitignore_parser import parse_gitignore

logger = logging.getLogger(__name__)

IGNORE_FILE_NAMES = (".gitignore", ".ignore")

Matcher = Callable[[str], bool]


class IgnoreRules:
    """Immutable stack of ignore matchers inherited from ancestor directories."""

    def __init__(self, matchers: tuple[tuple[Path, Matcher], ...] = ()):
        self._matchers = matchers

    def __bool__(self) -> bool:
        return bool(self._matchers)

    def __len__(self) -> int:
        return len(self._matchers)

    def extended_for(self, directory: Path) -> IgnoreRules:
        """Return rules with the ignore files found directly in ``directory`` added.

        Args:
            directory: Directory about to be listed

        Returns:
            Self when the directory has no ignore files, otherwise a new stack
        """
        added: list[tuple[Path, Matcher]] = []
        for name in IGNORE_FILE_NAMES:
            ignore_file = directory / name
            if not ignore_file.is_file():
                continue
            try:
                added.append((directory, parse_gitignore(ignore_file, base_dir=directory)))
                logger.debug(f"Loaded ignore rules from {ignore_file}")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read ignore file {ignore_file}: {e}")

        if not added:
            return self
        return IgnoreRules(self._matchers + tuple(added))

    def is_ignored(self, path: Path) -> bool:
        """Check whether any inherited rule matches ``path``."""
        for base, matcher in self._matchers:
            if not path.is_relative_to(base):
                continue
            try:
                if matcher(str(path)):
                    return True
            except ValueError:
                # Matcher resolved a symlink to somewhere outside its base
                logger.debug(f"Ignore rules from {base} cannot evaluate {path}")
        return False
