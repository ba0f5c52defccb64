"""Filesystem-backed file discovery and content access."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from .categories import Category

log = getLogger(__name__)


class FileSetProvider(Protocol):
    """Lists the vendor and local files of a category."""

    def list_vendor_files(self, category: Category) -> Sequence[str]: ...

    def list_local_files(self, category: Category) -> Sequence[str]: ...


class ContentStore(Protocol):
    """Reads and deletes files by path."""

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> bytes: ...

    def delete(self, path: str) -> bool: ...


class FilesystemProvider:
    """Discovers category files on the local disk with ``pathlib`` globs."""

    def list_vendor_files(self, category: Category) -> list[str]:
        files = [
            path
            for path in _glob_files(category.vendor_root, category.vendor_patterns)
            if not category.excludes(path)
        ]
        log.debug("Discovered %d vendor %s under %s", len(files), category.label, category.vendor_root)
        return [path.as_posix() for path in files]

    def list_local_files(self, category: Category) -> list[str]:
        files = _glob_files(category.local_root, category.local_patterns)
        log.debug("Discovered %d local %s under %s", len(files), category.label, category.local_root)
        return [path.as_posix() for path in files]


class FilesystemStore:
    """Content store operating directly on the local disk."""

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def delete(self, path: str) -> bool:
        target = Path(path)
        if not target.exists() and not target.is_symlink():
            return False
        target.unlink()
        return True


def _glob_files(root: Path, patterns: Sequence[str]) -> list[Path]:
    """Return the sorted, de-duplicated files under ``root`` matching ``patterns``."""

    if not root.is_dir():
        return []

    found: set[Path] = set()
    for pattern in patterns:
        found.update(path for path in root.glob(pattern) if path.is_file())
    return sorted(found)
