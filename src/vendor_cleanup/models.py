"""Shared models and enums for vendor-cleanup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

LogicalKey = str


class FileRole(str, Enum):
    """Which side of a reconciliation a file belongs to."""

    VENDOR = "vendor"
    LOCAL = "local"


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A single file from either the vendor or the local set."""

    path: str
    role: FileRole

    @classmethod
    def vendor(cls, path: str) -> "FileEntry":
        return cls(path.replace("\\", "/"), FileRole.VENDOR)

    @classmethod
    def local(cls, path: str) -> "FileEntry":
        return cls(path.replace("\\", "/"), FileRole.LOCAL)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class ComparisonStatus(str, Enum):
    """Outcome of comparing one vendor/local pair."""

    UNCHANGED = "unchanged"
    MODIFIED = "modified"


class SeverityTier(str, Enum):
    """Presentation bands for a difference percentage."""

    MINOR = "minor"
    SMALL = "small"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


_SEVERITY_BANDS: tuple[tuple[float, SeverityTier], ...] = (
    (5.0, SeverityTier.MINOR),
    (15.0, SeverityTier.SMALL),
    (30.0, SeverityTier.MODERATE),
)


def severity_tier(percentage: float) -> SeverityTier:
    """Map a difference percentage onto its presentation band."""

    for upper, tier in _SEVERITY_BANDS:
        if percentage < upper:
            return tier
    return SeverityTier.SIGNIFICANT


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """Result of comparing a local file against one vendor variant."""

    status: ComparisonStatus
    difference: float

    @property
    def unchanged(self) -> bool:
        return self.status is ComparisonStatus.UNCHANGED


@dataclass(frozen=True, slots=True)
class ModifiedFile:
    """A local file that differs from its closest vendor counterpart."""

    entry: FileEntry
    vendor: FileEntry
    difference: float

    @property
    def path(self) -> str:
        return self.entry.path

    @property
    def severity(self) -> SeverityTier:
        return severity_tier(self.difference)


@dataclass(frozen=True, slots=True)
class ReadFailure:
    """A file whose content could not be read during a run."""

    entry: FileEntry
    reason: str


@dataclass(frozen=True, slots=True)
class ClassificationBuckets:
    """The four disjoint result buckets of a reconciliation run."""

    unchanged: tuple[FileEntry, ...] = ()
    modified: tuple[ModifiedFile, ...] = ()
    missing: tuple[FileEntry, ...] = ()
    orphaned: tuple[FileEntry, ...] = ()
    read_failures: tuple[ReadFailure, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.unchanged or self.modified or self.missing or self.orphaned)

    def modified_by_difference(self) -> list[ModifiedFile]:
        """Return modified files with the most changed first."""

        return sorted(self.modified, key=lambda item: item.difference, reverse=True)


@dataclass(frozen=True, slots=True)
class DeletionReport:
    """Outcome of deleting the unchanged bucket."""

    deleted: tuple[FileEntry, ...] = ()
    failed: tuple[tuple[FileEntry, str], ...] = ()

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)
