from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest


class MemoryStore:
    """In-memory content store; values that are exceptions are raised on read."""

    def __init__(self, files: dict[str, str | Exception], *, undeletable: tuple[str, ...] = ()) -> None:
        self.files = dict(files)
        self.undeletable = set(undeletable)
        self.reads: list[str] = []

    def exists(self, path: str) -> bool:
        return path in self.files

    def read(self, path: str) -> bytes:
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        value = self.files[path]
        if isinstance(value, Exception):
            raise value
        return value.encode()

    def delete(self, path: str) -> bool:
        if path in self.undeletable:
            raise PermissionError(f"Permission denied: '{path}'")
        return self.files.pop(path, None) is not None


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def memory_store() -> type[MemoryStore]:
    return MemoryStore


@pytest.fixture
def project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """An empty project root; the working directory is moved next to it."""

    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(tmp_path)
    return root


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """The CLI reconfigures the root logger; undo that after each test."""

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
