"""Candidate discovery for context embedding.

Walks the requested roots and streams CandidateFile values without holding
the whole tree in memory. Directory traversal uses an explicit work stack
that carries each pending directory's depth and inherited ignore rules.

Rules applied while walking:
- File roots are emitted directly (extension exclusion still applies)
- Excluded, hidden, ignored and symlinked directories are pruned
- Subdirectories deeper than the requested recursion depth are not entered
- At most max_files_per_directory regular files per directory, first by name
- Relative paths are unique across roots; collisions are qualified by root
- Each resolved file is emitted once across all roots
"""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from collections.abc import Iterator
from pathlib import Path

from .errors import ContextError
from .ignore import IgnoreRules
from .models import CandidateFile
from .models import ContextRequest

logger = logging.getLogger(__name__)


def discover(request: ContextRequest) -> Discovery:
    """Create a lazy, restartable discovery over the request's roots."""
    return Discovery(request)


class Discovery:
    """Iterable of candidate files for one request.

    Every iteration re-walks the filesystem. ``errors`` and ``warnings`` are
    reset when an iteration starts and filled while it is consumed, so they
    are complete once the iterator is exhausted.
    """

    def __init__(self, request: ContextRequest):
        self.request = request
        self.errors: list[ContextError] = []
        self.warnings: list[ContextError] = []

    def __iter__(self) -> Iterator[CandidateFile]:
        walk = _Walk(self.request)
        self.errors = walk.errors
        self.warnings = walk.warnings
        return walk.candidates()


class _Walk:
    """State for a single pass over the roots."""

    def __init__(self, request: ContextRequest):
        self.request = request
        self.limits = request.limits
        self.errors: list[ContextError] = []
        self.warnings: list[ContextError] = []
        self._seen_files: set[str] = set()
        self._relative_owners: dict[str, str] = {}
        self._warned_directories: set[Path] = set()

    def candidates(self) -> Iterator[CandidateFile]:
        seen_roots: set[Path] = set()
        emitted = 0

        for root in self.request.paths:
            try:
                resolved = root.resolve(strict=True)
            except OSError as e:
                self.errors.append(ContextError.from_os_error(root.absolute(), e))
                logger.debug(f"Context root not usable: {root} ({e})")
                continue

            if resolved in seen_roots:
                continue
            seen_roots.add(resolved)

            label = _root_label(root, resolved)
            if resolved.is_dir():
                walker = self._walk_directory(resolved, label)
            else:
                walker = self._emit_root_file(resolved, label)

            for candidate in walker:
                emitted += 1
                yield candidate

        logger.info(
            f"Discovered {emitted} candidate file(s) from {len(seen_roots)} root(s) "
            f"({len(self.errors)} error(s), {len(self.warnings)} warning(s))"
        )

    def _emit_root_file(self, path: Path, label: str) -> Iterator[CandidateFile]:
        if self.limits.is_excluded_extension(path):
            logger.debug(f"Skipping excluded extension: {path}")
            return
        try:
            st = path.stat()
        except OSError as e:
            self.errors.append(ContextError.from_os_error(path, e))
            return
        if not stat.S_ISREG(st.st_mode):
            self.errors.append(ContextError.io_error(path, "not a regular file"))
            return
        real = os.path.realpath(path)
        if real in self._seen_files:
            return
        prefix = posixpath.dirname(label) or path.parent.name
        yield self._candidate(path, real, path.name, prefix, 0, st.st_size, path.parent)

    def _walk_directory(self, root: Path, label: str) -> Iterator[CandidateFile]:
        max_depth = self.request.recurse_depth
        stack: list[tuple[Path, int, IgnoreRules]] = [(root, 0, IgnoreRules())]

        while stack:
            directory, depth, rules = stack.pop()
            if self.limits.respect_gitignore:
                rules = rules.extended_for(directory)

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                self.errors.append(ContextError.from_os_error(directory, e))
                continue

            files: list[os.DirEntry] = []
            subdirectories: list[Path] = []
            for entry in entries:
                path = Path(entry.path)
                hidden = entry.name.startswith(".")
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_link = entry.is_symlink()
                except OSError as e:
                    self.errors.append(ContextError.from_os_error(path, e))
                    continue

                if is_dir:
                    if self._prune_directory(path, entry.name, hidden, rules):
                        continue
                    if max_depth is not None and depth + 1 > max_depth:
                        logger.debug(f"Depth limit reached, not descending: {path}")
                        continue
                    subdirectories.append(path)
                    continue

                if is_link and _points_to_directory(entry):
                    logger.debug(f"Not following symlinked directory: {path}")
                    continue

                if hidden and not self.limits.include_hidden:
                    continue
                if self.limits.is_excluded_extension(path):
                    continue
                if rules and rules.is_ignored(path):
                    logger.debug(f"Ignored by ignore rules: {path}")
                    continue
                files.append(entry)

            # Only regular, not yet emitted files take a quota slot
            limit = self.limits.max_files_per_directory
            accepted = 0
            overflow: set[str] = set()
            for entry in files:
                path = Path(entry.path)
                try:
                    st = entry.stat()
                except OSError as e:
                    if accepted < limit:
                        self.errors.append(ContextError.from_os_error(path, e))
                    continue
                if not stat.S_ISREG(st.st_mode):
                    logger.debug(f"Skipping non-regular file: {path}")
                    continue
                real = os.path.realpath(path)
                if real in self._seen_files:
                    continue
                if accepted >= limit:
                    overflow.add(real)
                    continue
                accepted += 1
                relative = path.relative_to(root).as_posix()
                yield self._candidate(path, real, relative, label, depth + 1, st.st_size, directory)

            if overflow:
                self._warn_truncated(directory, len(overflow), limit)

            # Reversed so the stack pops subdirectories in name order
            for subdirectory in reversed(subdirectories):
                stack.append((subdirectory, depth + 1, rules))

    def _prune_directory(self, path: Path, name: str, hidden: bool, rules: IgnoreRules) -> bool:
        if name in self.limits.excluded_directories:
            logger.debug(f"Pruning excluded directory: {path}")
            return True
        if hidden and not self.limits.include_hidden:
            return True
        if rules and rules.is_ignored(path):
            logger.debug(f"Pruning ignored directory: {path}")
            return True
        return False

    def _warn_truncated(self, directory: Path, skipped: int, limit: int) -> None:
        if directory in self._warned_directories:
            return
        self._warned_directories.add(directory)
        self.warnings.append(ContextError.too_many_files(directory, skipped, limit))
        logger.debug(f"Directory {directory} over limit of {limit}, skipped {skipped} file(s)")

    def _candidate(
        self,
        path: Path,
        real: str,
        relative: str,
        prefix: str,
        depth: int,
        size: int,
        directory: Path,
    ) -> CandidateFile:
        """Record ``real`` as emitted and build its candidate.

        When an earlier root already owns ``relative`` for a different file,
        the path is qualified as ``prefix/relative``, then ``prefix~2/relative``
        and so on until the name is free.
        """
        self._seen_files.add(real)

        name = relative
        attempt = 1
        while self._relative_owners.get(name, real) != real:
            name = f"{prefix}/{relative}" if attempt == 1 else f"{prefix}~{attempt}/{relative}"
            attempt += 1
        self._relative_owners[name] = real

        return CandidateFile(
            path=path,
            relative_path=name,
            depth=depth,
            size=size,
            directory=directory,
        )


def _points_to_directory(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _root_label(root: Path, resolved: Path) -> str:
    """Root as the user typed it, used to qualify colliding relative paths."""
    label = root.as_posix()
    while label.startswith("./"):
        label = label[2:]
    label = label.rstrip("/")
    if label in ("", "."):
        return resolved.name or resolved.as_posix()
    return label
