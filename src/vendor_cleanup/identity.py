"""Logical-key strategies used to pair vendor files with their local copies."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import LogicalKey

KeyFunction = Callable[[str], LogicalKey]

UNKNOWN_PACKAGE = "unknown"

_TIMESTAMP_PREFIX_RE = re.compile(r"^\d{4}_\d{2}_\d{2}_\d{6}_(.+)$")
_PACKAGE_RE = re.compile(r"vendor/[^/]+/([^/]+)/")
_STUB_SUFFIX = ".php.stub"


@dataclass(frozen=True, slots=True)
class IdentityResolver:
    """Pair of pure functions mapping vendor and local paths to logical keys."""

    vendor_key: KeyFunction
    local_key: KeyFunction


def normalize_separators(path: str) -> str:
    """Return ``path`` using ``/`` as the only separator."""

    return path.replace("\\", "/")


def basename(path: str) -> str:
    normalized = normalize_separators(path).rstrip("/")
    return normalized.rsplit("/", 1)[-1]


def strip_timestamp(filename: str) -> str:
    """Strip a ``YYYY_MM_DD_HHMMSS_`` prefix, collapsing ``.php.stub`` first.

    ``2024_01_15_123456_create_users_table.php.stub`` -> ``create_users_table.php``
    """

    if filename.endswith(_STUB_SUFFIX):
        filename = filename[: -len(".stub")]
    match = _TIMESTAMP_PREFIX_RE.match(filename)
    if match:
        return match.group(1)
    return filename


def path_after_segment(path: str, segment: str) -> str:
    """Return everything after the last ``/<segment>/`` in ``path``.

    Falls back to the basename when the segment does not occur.
    """

    normalized = normalize_separators(path)
    marker = f"/{segment.strip('/')}/"
    position = normalized.rfind(marker)
    if position == -1:
        if normalized.startswith(marker[1:]):
            remainder = normalized[len(marker) - 1 :]
            return remainder or basename(path)
        return basename(path)
    remainder = normalized[position + len(marker) :]
    return remainder or basename(path)


def path_relative_to(path: str, root: str) -> str | None:
    """Return ``path`` relative to ``root`` or ``None`` if it lies outside."""

    normalized = normalize_separators(path)
    prefix = normalize_separators(root).rstrip("/") + "/"
    if normalized.startswith(prefix) and len(normalized) > len(prefix):
        return normalized[len(prefix) :]
    return None


def package_name(path: str) -> str:
    """Extract ``<package>`` from a ``vendor/<vendor>/<package>/`` path."""

    match = _PACKAGE_RE.search(normalize_separators(path))
    if match:
        return match.group(1)
    return UNKNOWN_PACKAGE


def flat_resolver() -> IdentityResolver:
    """Key both sides by basename only."""

    return IdentityResolver(vendor_key=basename, local_key=basename)


def timestamp_resolver() -> IdentityResolver:
    """Key both sides by basename with any migration timestamp removed."""

    def key(path: str) -> LogicalKey:
        return strip_timestamp(basename(path))

    return IdentityResolver(vendor_key=key, local_key=key)


def rooted_resolver(root_segment: str, local_root: str) -> IdentityResolver:
    """Key files by their path below a well-known directory.

    Vendor files use the part after the last ``root_segment`` directory;
    local files use their path relative to ``local_root``.
    """

    def vendor_key(path: str) -> LogicalKey:
        return path_after_segment(path, root_segment)

    def local_key(path: str) -> LogicalKey:
        relative = path_relative_to(path, local_root)
        if relative is not None:
            return relative
        return path_after_segment(path, root_segment)

    return IdentityResolver(vendor_key=vendor_key, local_key=local_key)


def package_rooted_resolver(root_segment: str, local_root: str) -> IdentityResolver:
    """Like :func:`rooted_resolver` but namespaced by the owning package.

    ``vendor/laravel/horizon/resources/views/layout.blade.php`` resolves to
    ``horizon/layout.blade.php``, matching a local copy published at
    ``<local_root>/horizon/layout.blade.php``.
    """

    def vendor_key(path: str) -> LogicalKey:
        return f"{package_name(path)}/{path_after_segment(path, root_segment)}"

    def local_key(path: str) -> LogicalKey:
        relative = path_relative_to(path, local_root)
        if relative is not None:
            return relative
        return basename(path)

    return IdentityResolver(vendor_key=vendor_key, local_key=local_key)
