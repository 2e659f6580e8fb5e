"""Pytest configuration for claw-context tests."""

from pathlib import Path

import pytest


@pytest.fixture
def write_tree(tmp_path):
    """Create files from a {relative_path: str | bytes} mapping under a base directory."""

    def _write(files: dict[str, str | bytes], base: Path | None = None) -> Path:
        base = base or tmp_path
        for relative, content in files.items():
            path = base / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return base

    return _write
