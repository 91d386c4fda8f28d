"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest


@pytest.fixture
def write_file(tmp_path: Path):
    """Return a helper that writes ``content`` to ``tmp_path / name``."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def patterns_dir(tmp_path: Path) -> Path:
    """A patterns directory defining ``client`` as a dotted-quad address."""
    directory = tmp_path / "patterns"
    directory.mkdir()
    (directory / "custom").write_text("client \\d+\\.\\d+\\.\\d+\\.\\d+\n", encoding="utf-8")
    return directory
