"""File categories reconciled by vendor-cleanup.

A category is a configuration value: where its vendor and published files
live, how their paths map to logical keys, and whether the structural check
applies. There is no per-category code path in the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .identity import (
    IdentityResolver,
    flat_resolver,
    normalize_separators,
    package_rooted_resolver,
    rooted_resolver,
    timestamp_resolver,
)

CATEGORY_ORDER = ("config", "migration", "lang", "view")


@dataclass(frozen=True, slots=True)
class Category:
    """Discovery and identity settings for one kind of published file."""

    name: str
    label: str
    vendor_root: Path
    vendor_patterns: tuple[str, ...]
    local_root: Path
    local_patterns: tuple[str, ...]
    resolver: IdentityResolver
    structural: bool = False
    exclude_dirs: tuple[str, ...] = ()
    exclude_names: tuple[str, ...] = ()

    def excludes(self, path: Path) -> bool:
        """Return ``True`` if a discovered vendor file should be ignored."""

        if not self.exclude_dirs and not self.exclude_names:
            return False

        try:
            relative = path.relative_to(self.vendor_root)
        except ValueError:
            relative = path
        parts = normalize_separators(relative.as_posix()).split("/")
        if any(part in self.exclude_dirs for part in parts[:-1]):
            return True
        return any(marker in parts[-1] for marker in self.exclude_names)


def build_categories(config: Config) -> dict[str, Category]:
    """Return the categories for ``config`` keyed by name, in display order."""

    paths = config.paths
    vendor = paths.vendor
    views_published = paths.views / "vendor"

    categories = [
        Category(
            name="config",
            label="config file(s)",
            vendor_root=vendor,
            vendor_patterns=("*/*/config/*.php",),
            local_root=paths.config,
            local_patterns=("*.php",),
            resolver=flat_resolver(),
            structural=True,
        ),
        Category(
            name="migration",
            label="migration file(s)",
            vendor_root=vendor,
            vendor_patterns=("*/*/database/migrations/*.php", "*/*/database/migrations/*.php.stub"),
            local_root=paths.migrations,
            local_patterns=("*.php",),
            resolver=timestamp_resolver(),
            exclude_dirs=config.migrations.exclude_dirs,
            exclude_names=config.migrations.exclude_names,
        ),
        Category(
            name="lang",
            label="lang file(s)",
            vendor_root=vendor,
            vendor_patterns=("*/*/lang/**/*.php", "*/*/lang/**/*.json"),
            local_root=paths.lang,
            local_patterns=("**/*.php", "**/*.json"),
            resolver=rooted_resolver("lang", paths.lang.as_posix()),
            structural=True,
        ),
        Category(
            name="view",
            label="view file(s)",
            vendor_root=vendor,
            vendor_patterns=("*/*/resources/views/**/*.php",),
            local_root=views_published,
            local_patterns=("**/*.php",),
            resolver=package_rooted_resolver("resources/views", views_published.as_posix()),
        ),
    ]
    return {category.name: category for category in categories}
