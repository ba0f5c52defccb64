"""Core package for the vendor-cleanup project."""

from .categories import Category, build_categories
from .cli import app, run
from .config import Config, ConfigError, load_config
from .engine import NormalizationPolicy, Reconciler, apply_deletions, best_result, compare_contents
from .identity import IdentityResolver
from .manager import CategoryReport, VendorCleanupError, VendorCleanupManager
from .models import (
    ClassificationBuckets,
    ComparisonResult,
    ComparisonStatus,
    DeletionReport,
    FileEntry,
    ModifiedFile,
    SeverityTier,
    severity_tier,
)
from .normalize import normalize
from .similarity import diff_percentage

__all__ = [
    "Category",
    "build_categories",
    "Config",
    "ConfigError",
    "load_config",
    "NormalizationPolicy",
    "Reconciler",
    "apply_deletions",
    "best_result",
    "compare_contents",
    "IdentityResolver",
    "CategoryReport",
    "VendorCleanupError",
    "VendorCleanupManager",
    "ClassificationBuckets",
    "ComparisonResult",
    "ComparisonStatus",
    "DeletionReport",
    "FileEntry",
    "ModifiedFile",
    "SeverityTier",
    "normalize",
    "diff_percentage",
    "severity_tier",
    "app",
    "run",
]
