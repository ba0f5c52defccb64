"""High level orchestration for vendor-cleanup runs."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Iterable

from .categories import Category, build_categories
from .config import Config
from .engine import NormalizationPolicy, Reconciler, apply_deletions
from .filesystem import ContentStore, FileSetProvider, FilesystemProvider, FilesystemStore
from .models import ClassificationBuckets, DeletionReport, FileEntry

log = getLogger(__name__)


class VendorCleanupError(RuntimeError):
    """Raised when vendor-cleanup encounters an unrecoverable state."""


@dataclass(frozen=True, slots=True)
class CategoryReport:
    """Reconciliation result for a single category."""

    category: Category
    buckets: ClassificationBuckets
    vendor_count: int

    @property
    def no_vendor_files(self) -> bool:
        return self.vendor_count == 0


class VendorCleanupManager:
    """Runs reconciliations for the configured categories."""

    def __init__(
        self,
        config: Config,
        *,
        provider: FileSetProvider | None = None,
        store: ContentStore | None = None,
    ) -> None:
        if not config.paths.base.is_dir():
            raise VendorCleanupError(f"Base path '{config.paths.base}' is not a directory")
        self.config = config
        self.provider = provider or FilesystemProvider()
        self.store = store or FilesystemStore()
        self.categories = build_categories(config)

    def category(self, name: str) -> Category:
        try:
            return self.categories[name]
        except KeyError as exc:
            raise VendorCleanupError(f"Unknown category '{name}'") from exc

    def scan(self, name: str, *, normalize: bool | None = None) -> CategoryReport:
        """Classify the published files of category ``name``."""

        category = self.category(name)
        apply_whitespace = self.config.settings.normalize if normalize is None else normalize

        vendor_files = list(self.provider.list_vendor_files(category))
        if not vendor_files:
            log.info("No vendor %s found", category.label)
            return CategoryReport(category=category, buckets=ClassificationBuckets(), vendor_count=0)

        local_files = list(self.provider.list_local_files(category))
        reconciler = Reconciler(
            category.resolver,
            self.store,
            policy=NormalizationPolicy(apply_whitespace=apply_whitespace, structural=category.structural),
        )
        buckets = reconciler.reconcile(vendor_files, local_files)
        log.info(
            "%s: %d unchanged, %d modified, %d missing, %d orphaned",
            category.name,
            len(buckets.unchanged),
            len(buckets.modified),
            len(buckets.missing),
            len(buckets.orphaned),
        )
        return CategoryReport(category=category, buckets=buckets, vendor_count=len(vendor_files))

    def scan_all(self, *, normalize: bool | None = None) -> list[CategoryReport]:
        return [self.scan(name, normalize=normalize) for name in self.categories]

    def delete_unchanged(self, unchanged: Iterable[FileEntry], *, confirmed: bool) -> DeletionReport:
        """Delete unchanged local files once the caller has confirmed."""

        return apply_deletions(unchanged, self.store, confirmed=confirmed)

    def relative_path(self, path: str) -> str:
        """Return ``path`` relative to the base path when it lies below it."""

        base = self.config.paths.base.as_posix().rstrip("/")
        normalized = path.replace("\\", "/")
        if normalized.startswith(base + "/"):
            return normalized[len(base) + 1 :]
        return normalized
