from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pytest

from vendor_cleanup.config import load_config
from vendor_cleanup.manager import VendorCleanupError, VendorCleanupManager
from vendor_cleanup.models import FileEntry, ModifiedFile


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _names(entries: Iterable[FileEntry | ModifiedFile]) -> list[str]:
    return [Path(entry.path).name for entry in entries]


@pytest.fixture
def manager(project: Path) -> VendorCleanupManager:
    return VendorCleanupManager(load_config(base_path=project))


def test_reordered_config_is_unchanged(project: Path, manager: VendorCleanupManager) -> None:
    _write(
        project / "vendor/acme/pkg/config/acme.php",
        "<?php\n\nreturn [\n    'driver' => env('ACME_DRIVER', 'file'),\n    'ttl' => 60,\n];\n",
    )
    _write(
        project / "config/acme.php",
        "<?php\n\n// Published copy\nreturn [\n    'ttl' => 60,\n    'driver' => env('ACME_DRIVER', 'file'),\n];\n",
    )
    _write(project / "config/app.php", "<?php return [];\n")

    report = manager.scan("config")

    assert report.vendor_count == 1
    assert _names(report.buckets.unchanged) == ["acme.php"]
    assert report.buckets.modified == ()
    assert _names(report.buckets.orphaned) == ["app.php"]


def test_migrations_pair_across_timestamps(project: Path, manager: VendorCleanupManager) -> None:
    vendor = project / "vendor/acme/jobs/database/migrations"
    _write(vendor / "create_jobs_table.php.stub", "<?php\nSchema::create('jobs');\n")
    _write(vendor / "2024_01_01_000000_create_batches_table.php", "<?php\nSchema::create('batches');\n")
    _write(vendor / "2024_01_01_000000_create_failed_table.php", "<?php\nSchema::create('failed');\n")
    local = project / "database/migrations"
    _write(local / "2025_02_02_000000_create_jobs_table.php", "<?php\nSchema::create('jobs');\n")
    _write(local / "2025_02_02_000001_create_batches_table.php", "<?php\nSchema::create('batch');\n")

    report = manager.scan("migration")

    assert _names(report.buckets.unchanged) == ["2025_02_02_000000_create_jobs_table.php"]
    assert [Path(item.path).name for item in report.buckets.modified] == [
        "2025_02_02_000001_create_batches_table.php"
    ]
    assert _names(report.buckets.missing) == ["2024_01_01_000000_create_failed_table.php"]


def test_json_translations_compare_structurally(project: Path, manager: VendorCleanupManager) -> None:
    _write(project / "vendor/acme/pkg/lang/de.json", '{"Save": "Speichern", "Back": "Zurück"}')
    _write(project / "vendor/acme/pkg/lang/en/messages.php", "<?php return ['hi' => 'Hello'];\n")
    _write(project / "lang/de.json", '{\n    "Back": "Zurück",\n    "Save": "Speichern"\n}\n')

    report = manager.scan("lang")

    assert _names(report.buckets.unchanged) == ["de.json"]
    assert _names(report.buckets.missing) == ["messages.php"]


def test_views_are_paired_by_package(project: Path, manager: VendorCleanupManager) -> None:
    _write(project / "vendor/laravel/horizon/resources/views/layout.blade.php", "{{-- Layout --}}\n<div></div>\n")
    _write(project / "vendor/laravel/pulse/resources/views/layout.blade.php", "<section></section>\n")
    _write(project / "resources/views/vendor/horizon/layout.blade.php", "<div></div>\n")
    _write(project / "resources/views/vendor/telescope/layout.blade.php", "<div></div>\n")

    report = manager.scan("view")

    assert [manager.relative_path(entry.path) for entry in report.buckets.unchanged] == [
        "resources/views/vendor/horizon/layout.blade.php"
    ]
    assert [manager.relative_path(entry.path) for entry in report.buckets.missing] == [
        "vendor/laravel/pulse/resources/views/layout.blade.php"
    ]
    assert [manager.relative_path(entry.path) for entry in report.buckets.orphaned] == [
        "resources/views/vendor/telescope/layout.blade.php"
    ]


def test_no_vendor_files_is_reported(project: Path, manager: VendorCleanupManager) -> None:
    _write(project / "config/app.php", "<?php return [];\n")

    report = manager.scan("config")

    assert report.no_vendor_files
    assert report.buckets.is_empty


def test_normalize_defaults_to_settings(project: Path) -> None:
    (project / "vendor-cleanup.toml").write_text("[settings]\nnormalize = true\n")
    _write(project / "vendor/acme/pkg/database/migrations/create_a_table.php", "<?php\n$a  =  1;\n")
    _write(project / "database/migrations/2024_01_01_000000_create_a_table.php", "<?php\r\n$a = 1;\r\n")

    manager = VendorCleanupManager(load_config(project))

    assert _names(manager.scan("migration").buckets.unchanged) == ["2024_01_01_000000_create_a_table.php"]
    strict = manager.scan("migration", normalize=False)
    assert strict.buckets.unchanged == ()
    assert _names(strict.buckets.modified) == ["2024_01_01_000000_create_a_table.php"]


def test_scan_all_covers_every_category(manager: VendorCleanupManager) -> None:
    reports = manager.scan_all()

    assert [report.category.name for report in reports] == ["config", "migration", "lang", "view"]
    assert all(report.no_vendor_files for report in reports)


def test_delete_unchanged_removes_files(project: Path, manager: VendorCleanupManager) -> None:
    _write(project / "vendor/acme/pkg/config/acme.php", "<?php return ['a' => 1];\n")
    local = _write(project / "config/acme.php", "<?php return ['a' => 1];\n")
    report = manager.scan("config")

    skipped = manager.delete_unchanged(report.buckets.unchanged, confirmed=False)
    assert skipped.deleted_count == 0
    assert local.exists()

    result = manager.delete_unchanged(report.buckets.unchanged, confirmed=True)
    assert result.deleted_count == 1
    assert not local.exists()


def test_unknown_category_raises(manager: VendorCleanupManager) -> None:
    with pytest.raises(VendorCleanupError, match="Unknown category"):
        manager.scan("assets")


def test_missing_base_path_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(VendorCleanupError, match="not a directory"):
        VendorCleanupManager(load_config(base_path=tmp_path / "absent"))


def test_relative_path_leaves_outside_paths_alone(manager: VendorCleanupManager) -> None:
    base = manager.config.paths.base.as_posix()

    assert manager.relative_path(f"{base}/config/app.php") == "config/app.php"
    assert manager.relative_path("/elsewhere/app.php") == "/elsewhere/app.php"
