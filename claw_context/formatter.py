"""Markdown rendering of the context document.

format_context is a pure function of the accepted files and the request:
the same inputs always produce byte-identical output. Files are ordered by
relative path, and every fenced block gets a backtick fence longer than any
backtick run inside it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import ContextRequest
from .models import FileContent

CONTEXT_HEADER = """# Context Files

The files below were collected from the paths supplied with this request and \
are included verbatim as reference material. The directory structure lists \
every included file; each file then follows in its own section, headed by its \
path relative to the directory it was collected from. Files that were too \
large, binary, unreadable, or beyond the per-directory limit are not included."""

NO_FILES = "(no files)"

GLYPH_CHILD = "├── "
GLYPH_LAST = "└── "
GLYPH_PIPE = "│   "
GLYPH_SPACE = "    "

_BACKTICK_RUN = re.compile(r"`+")

_Tree = dict[str, "_Tree | None"]


def fence_for(text: str) -> str:
    """Return a backtick fence that cannot be closed by anything in ``text``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    if fence in text:
        raise ValueError("fence collides with block content")
    return fence


def fenced(text: str) -> str:
    """Wrap ``text`` in a collision-free fenced block, ending with a newline."""
    fence = fence_for(text)
    body = text if text.endswith("\n") else text + "\n"
    return f"{fence}\n{body}{fence}\n"


def render_notes(request: ContextRequest) -> str:
    limits = request.limits
    depth = "unlimited" if request.recurse_depth is None else str(request.recurse_depth)
    return (
        "## Notes\n"
        f"- Maximum file size: {limits.max_file_size_kb} KB\n"
        f"- Maximum files per directory: {limits.max_files_per_directory}\n"
        f"- Excluded directories: {', '.join(limits.excluded_directories)}\n"
        f"- Excluded extensions: {', '.join(limits.excluded_extensions)}\n"
        f"- Recursion depth: {depth}\n"
    )


def render_tree(relative_paths: Iterable[str]) -> str:
    """Render relative paths as an indented tree with shared parents collapsed.

    Directories are labelled with a trailing slash and siblings are sorted
    by label. Returns "(no files)" for an empty input.
    """
    root: _Tree = {}
    for relative_path in relative_paths:
        parts = [p for p in relative_path.split("/") if p]
        node = root
        for part in parts[:-1]:
            child = node.get(part)
            if child is None:
                child = {}
                node[part] = child
            node = child
        if parts:
            node.setdefault(parts[-1], None)

    if not root:
        return NO_FILES + "\n"

    lines: list[str] = []
    for label, children in _sorted_children(root):
        lines.append(label)
        if children:
            _render_children(children, "", lines)
    return "\n".join(lines) + "\n"


def _sorted_children(node: _Tree) -> list[tuple[str, _Tree | None]]:
    labelled = [(f"{name}/" if children is not None else name, children) for name, children in node.items()]
    return sorted(labelled, key=lambda item: item[0])


def _render_children(node: _Tree, prefix: str, lines: list[str]) -> None:
    children = _sorted_children(node)
    for index, (label, grandchildren) in enumerate(children):
        last = index == len(children) - 1
        lines.append(f"{prefix}{GLYPH_LAST if last else GLYPH_CHILD}{label}")
        if grandchildren:
            _render_children(grandchildren, prefix + (GLYPH_SPACE if last else GLYPH_PIPE), lines)


def format_context(files: Iterable[FileContent], request: ContextRequest) -> str:
    """Render the context document.

    Args:
        files: Accepted files, in any order
        request: Request whose limits are described in the notes section

    Returns:
        Markdown document: header, notes, directory structure, file sections
    """
    ordered = sorted(files, key=lambda f: f.relative_path)

    parts = [
        CONTEXT_HEADER,
        "\n\n",
        render_notes(request),
        "\n---\n\n",
        "## Directory Structure\n\n",
        fenced(render_tree(f.relative_path for f in ordered)),
        "\n---\n\n",
        "## Files\n\n",
    ]
    for file in ordered:
        parts.append(f"### {file.relative_path}\n\n")
        parts.append(fenced(file.content))
        parts.append("\n")

    return "".join(parts)
