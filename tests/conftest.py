"""Shared fixtures: small source and destination trees."""

from pathlib import Path

import pytest


def _write_tree(root: Path, files: dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def make_tree():
    """Build a directory tree from {relative path: text content}."""
    return _write_tree


@pytest.fixture
def source_tree(tmp_path):
    """source/a.txt ("hi") and source/sub/b.txt ("bye")."""
    return _write_tree(tmp_path / "source", {"a.txt": "hi", "sub/b.txt": "bye"})


@pytest.fixture
def destination(tmp_path):
    """A destination path that does not exist yet."""
    return tmp_path / "dest"


@pytest.fixture
def no_env_overrides(monkeypatch):
    monkeypatch.delenv("DIRTOOL_POOL_SIZE", raising=False)
    monkeypatch.delenv("DIRTOOL_TASK_TIMEOUT", raising=False)
