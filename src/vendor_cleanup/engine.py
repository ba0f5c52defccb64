"""Reconciliation of vendor files against their published local copies."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import Iterable, Sequence

from .filesystem import ContentStore
from .identity import IdentityResolver, KeyFunction
from .models import (
    ClassificationBuckets,
    ComparisonResult,
    ComparisonStatus,
    DeletionReport,
    FileEntry,
    LogicalKey,
    ModifiedFile,
    ReadFailure,
)
from .normalize import normalize, syntax_for_path
from .similarity import diff_percentage
from .structural import structurally_equal

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NormalizationPolicy:
    """How contents are prepared before they are compared."""

    apply_whitespace: bool = False
    structural: bool = False


def compare_contents(
    vendor_raw: str,
    local_raw: str,
    *,
    path: str = "",
    policy: NormalizationPolicy = NormalizationPolicy(),
) -> ComparisonResult:
    """Compare one vendor/local pair of raw contents.

    ``path`` selects the comment syntax and structural format; it is usually
    the local file's path.
    """

    syntax = syntax_for_path(path)
    vendor_text = normalize(vendor_raw, policy.apply_whitespace, syntax)
    local_text = normalize(local_raw, policy.apply_whitespace, syntax)
    return _compare_normalized(vendor_raw, vendor_text, local_raw, local_text, path=path, policy=policy)


def _compare_normalized(
    vendor_raw: str,
    vendor_text: str,
    local_raw: str,
    local_text: str,
    *,
    path: str,
    policy: NormalizationPolicy,
) -> ComparisonResult:
    if vendor_text == local_text:
        return ComparisonResult(ComparisonStatus.UNCHANGED, 0.0)
    if policy.structural and structurally_equal(vendor_raw, local_raw, path=path):
        return ComparisonResult(ComparisonStatus.UNCHANGED, 0.0)
    return ComparisonResult(ComparisonStatus.MODIFIED, diff_percentage(vendor_text, local_text))


def best_result(current: ComparisonResult | None, candidate: ComparisonResult) -> ComparisonResult:
    """Fold step choosing the classification that stands for a local file.

    An unchanged result always wins; otherwise the smaller difference wins and
    the earlier result is kept on ties.
    """

    if current is None:
        return candidate
    if current.unchanged:
        return current
    if candidate.unchanged:
        return candidate
    if candidate.difference < current.difference:
        return candidate
    return current


class _ContentCache:
    """Run-scoped cache of raw and normalized file contents."""

    def __init__(self, store: ContentStore, policy: NormalizationPolicy) -> None:
        self.store = store
        self.policy = policy
        self._contents: dict[str, tuple[str, str] | None] = {}
        self.failures: list[ReadFailure] = []

    def get(self, entry: FileEntry) -> tuple[str, str] | None:
        """Return ``(raw, normalized)`` for ``entry`` or ``None`` if unreadable."""

        if entry.path in self._contents:
            return self._contents[entry.path]

        try:
            raw = self.store.read(entry.path).decode("utf-8", errors="surrogateescape")
        except OSError as exc:
            log.warning("Unable to read %s file '%s': %s", entry.role.value, entry.path, exc)
            self.failures.append(ReadFailure(entry, str(exc)))
            self._contents[entry.path] = None
            return None

        text = normalize(raw, self.policy.apply_whitespace, syntax_for_path(entry.path))
        self._contents[entry.path] = (raw, text)
        return raw, text


class Reconciler:
    """Classifies local files against vendor files paired by logical key."""

    def __init__(
        self,
        resolver: IdentityResolver,
        store: ContentStore,
        *,
        policy: NormalizationPolicy = NormalizationPolicy(),
    ) -> None:
        self.resolver = resolver
        self.store = store
        self.policy = policy

    def reconcile(self, vendor_paths: Iterable[str], local_paths: Iterable[str]) -> ClassificationBuckets:
        vendor_entries = [FileEntry.vendor(path) for path in vendor_paths]
        if not vendor_entries:
            return ClassificationBuckets()

        local_entries = [FileEntry.local(path) for path in local_paths]
        cache = _ContentCache(self.store, self.policy)

        vendor_index = self._index(vendor_entries, self.resolver.vendor_key)
        local_index = self._index(local_entries, self.resolver.local_key)

        unchanged: list[FileEntry] = []
        modified: list[ModifiedFile] = []
        orphaned: list[FileEntry] = []
        missing: list[FileEntry] = []

        paired_keys: set[LogicalKey] = set()
        for key, locals_for_key in local_index.items():
            variants = vendor_index.get(key)
            if variants is None:
                orphaned.extend(locals_for_key)
                continue

            for local in locals_for_key:
                classified = self._classify(local, variants, cache)
                if classified is None:
                    orphaned.append(local)
                    continue
                paired_keys.add(key)
                result, vendor = classified
                if result.unchanged:
                    unchanged.append(local)
                else:
                    modified.append(ModifiedFile(local, vendor, result.difference))

        unreadable = {failure.entry.path for failure in cache.failures}
        for key, variants in vendor_index.items():
            if key not in paired_keys:
                missing.extend(variants)
            else:
                missing.extend(entry for entry in variants if entry.path in unreadable)

        order = {entry.path: position for position, entry in enumerate(local_entries)}
        vendor_order = {entry.path: position for position, entry in enumerate(vendor_entries)}
        return ClassificationBuckets(
            unchanged=tuple(sorted(unchanged, key=lambda entry: order[entry.path])),
            modified=tuple(sorted(modified, key=lambda item: order[item.entry.path])),
            missing=tuple(sorted(missing, key=lambda entry: vendor_order[entry.path])),
            orphaned=tuple(sorted(orphaned, key=lambda entry: order[entry.path])),
            read_failures=tuple(cache.failures),
        )

    def _index(self, entries: Sequence[FileEntry], key_function: KeyFunction) -> dict[LogicalKey, list[FileEntry]]:
        index: dict[LogicalKey, list[FileEntry]] = {}
        for entry in entries:
            try:
                key = key_function(entry.path)
            except (ValueError, IndexError) as exc:
                log.warning("Falling back to file name as key for '%s': %s", entry.path, exc)
                key = entry.name
            index.setdefault(key, []).append(entry)
        return index

    def _classify(
        self,
        local: FileEntry,
        variants: Sequence[FileEntry],
        cache: _ContentCache,
    ) -> tuple[ComparisonResult, FileEntry] | None:
        """Return the standing result for ``local`` and the vendor file it came from."""

        local_content = cache.get(local)
        if local_content is None:
            return None
        local_raw, local_text = local_content

        best: tuple[ComparisonResult, FileEntry] | None = None
        for vendor in variants:
            vendor_content = cache.get(vendor)
            if vendor_content is None:
                continue
            vendor_raw, vendor_text = vendor_content
            result = _compare_normalized(
                vendor_raw,
                vendor_text,
                local_raw,
                local_text,
                path=local.path,
                policy=self.policy,
            )
            log.debug(
                "Compared '%s' with '%s': %s %.1f%%", local.path, vendor.path, result.status.value, result.difference
            )
            if best is None or best_result(best[0], result) is result:
                best = (result, vendor)
            if result.unchanged:
                break

        return best


def apply_deletions(
    unchanged: Iterable[FileEntry],
    store: ContentStore,
    *,
    confirmed: bool,
) -> DeletionReport:
    """Delete every unchanged local file, one at a time.

    Nothing happens unless ``confirmed`` is set. A failure on one file is
    recorded and does not stop the remaining deletions.
    """

    if not confirmed:
        return DeletionReport()

    deleted: list[FileEntry] = []
    failed: list[tuple[FileEntry, str]] = []
    for entry in unchanged:
        try:
            removed = store.delete(entry.path)
        except OSError as exc:
            log.warning("Unable to delete '%s': %s", entry.path, exc)
            failed.append((entry, str(exc)))
            continue
        if removed:
            deleted.append(entry)
        else:
            log.warning("Unable to delete '%s': file no longer exists", entry.path)
            failed.append((entry, "file no longer exists"))

    return DeletionReport(deleted=tuple(deleted), failed=tuple(failed))
