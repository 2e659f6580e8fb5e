"""Tests for context document rendering."""

import re
from pathlib import Path

import pytest

from claw_context import formatter
from claw_context.formatter import CONTEXT_HEADER
from claw_context.formatter import fence_for
from claw_context.formatter import format_context
from claw_context.formatter import render_tree
from claw_context.models import ContextLimits
from claw_context.models import ContextRequest
from claw_context.models import FileContent


def _file(relative: str, content: str) -> FileContent:
    return FileContent(path=Path("/repo") / relative, relative_path=relative, content=content)


def _request(**kwargs) -> ContextRequest:
    depth = kwargs.pop("recurse_depth", None)
    return ContextRequest(paths=(Path("/repo"),), recurse_depth=depth, limits=ContextLimits(**kwargs))


class TestRenderTree:
    def test_nested_paths_share_parents(self):
        tree = render_tree(["src/util/net.py", "README.md", "src/main.py", "src/util/io.py"])
        assert tree == ("README.md\nsrc/\n├── main.py\n└── util/\n    ├── io.py\n    └── net.py\n")

    def test_pipe_continues_under_non_last_directory(self):
        tree = render_tree(["a/b/c.txt", "a/z.txt"])
        assert tree == "a/\n├── b/\n│   └── c.txt\n└── z.txt\n"

    def test_empty(self):
        assert render_tree([]) == "(no files)\n"


class TestFence:
    def test_default_fence(self):
        assert fence_for("plain text") == "```"

    def test_longer_than_any_backtick_run(self):
        content = "Example:\n```python\nprint('hi')\n```\nand ````` five"
        fence = fence_for(content)
        assert fence == "``````"
        assert fence not in content

    @pytest.mark.parametrize("run", [1, 3, 4, 9])
    def test_never_inside_content(self, run):
        content = "`" * run + "x" + "`" * run
        assert fence_for(content) not in content

    def test_collision_raises(self, monkeypatch):
        monkeypatch.setattr(formatter, "_BACKTICK_RUN", re.compile(r"(?!)"))

        with pytest.raises(ValueError, match="fence collides"):
            fence_for("```")


class TestFormatContext:
    def test_exact_layout(self):
        document = format_context([_file("b/c.txt", "C\n"), _file("a.txt", "A")], _request())

        expected = (
            CONTEXT_HEADER
            + "\n\n"
            + "## Notes\n"
            + "- Maximum file size: 1024 KB\n"
            + "- Maximum files per directory: 50\n"
            + "- Excluded directories: .git, node_modules, target\n"
            + "- Excluded extensions: exe, bin, so\n"
            + "- Recursion depth: unlimited\n"
            + "\n---\n\n"
            + "## Directory Structure\n\n"
            + "```\na.txt\nb/\n└── c.txt\n```\n"
            + "\n---\n\n"
            + "## Files\n\n"
            + "### a.txt\n\n```\nA\n```\n\n"
            + "### b/c.txt\n\n```\nC\n```\n\n"
        )
        assert document == expected

    def test_notes_reflect_limits(self):
        document = format_context(
            [],
            _request(
                max_file_size_kb=64,
                max_files_per_directory=7,
                excluded_directories=["dist"],
                excluded_extensions=["png", "jpg"],
                recurse_depth=2,
            ),
        )
        assert "- Maximum file size: 64 KB\n" in document
        assert "- Maximum files per directory: 7\n" in document
        assert "- Excluded directories: dist\n" in document
        assert "- Excluded extensions: png, jpg\n" in document
        assert "- Recursion depth: 2\n" in document

    def test_no_files(self):
        document = format_context([], _request())
        assert "```\n(no files)\n```\n" in document
        assert document.endswith("## Files\n\n")

    def test_independent_of_input_order(self):
        files = [_file("z.txt", "z"), _file("a/b.txt", "b"), _file("m.txt", "m")]
        assert format_context(files, _request()) == format_context(list(reversed(files)), _request())

    def test_content_with_fence_gets_longer_fence(self):
        content = "# Readme\n\n```bash\nmake\n```\n"
        document = format_context([_file("README.md", content)], _request())

        assert "### README.md\n\n````\n" + content + "````\n" in document

    def test_content_not_truncated(self):
        content = "x" * 200_000
        assert content in format_context([_file("big.txt", content)], _request())
