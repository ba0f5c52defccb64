from __future__ import annotations

from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from vendor_cleanup import cli
from vendor_cleanup.cli import app

runner = CliRunner()


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _build_laravel_project(root: Path) -> None:
    vendor = root / "vendor" / "acme" / "notify"
    _write(vendor / "config/notify.php", "<?php\n\nreturn [\n    'channel' => 'mail',\n    'queue' => null,\n];\n")
    _write(
        vendor / "database/migrations/2023_01_01_000000_create_notices_table.php",
        "<?php\n\nSchema::create('notices', function ($table) {\n    $table->id();\n});\n",
    )
    _write(vendor / "database/migrations/tests/2023_01_01_000000_create_fixture_table.php", "<?php\n")
    _write(vendor / "lang/en/notify.php", "<?php\n\nreturn ['sent' => 'Sent!'];\n")
    _write(vendor / "resources/views/mail.blade.php", "{{-- Mail layout --}}\n<h1>{{ $title }}</h1>\n")

    _write(
        root / "config/notify.php",
        "<?php\n\n/*\n * Notify settings.\n */\nreturn [\n    'queue' => null,\n    'channel' => 'mail',\n];\n",
    )
    _write(root / "config/removed.php", "<?php\n\nreturn [];\n")
    _write(
        root / "database/migrations/2024_05_05_120000_create_notices_table.php",
        "<?php\n\nSchema::create('notices', function ($table) {\n    $table->id();\n    $table->timestamps();\n});\n",
    )
    _write(root / "lang/en/notify.php", "<?php\n\nreturn ['sent' => 'Delivered!'];\n")
    _write(root / "resources/views/vendor/notify/mail.blade.php", "<h1>{{ $title }}</h1>\n")


def test_cli_full_cycle(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "console", Console(width=200))
    project = tmp_path / "project"
    _build_laravel_project(project)
    monkeypatch.chdir(project)

    init_result = runner.invoke(app, ["init"])
    assert init_result.exit_code == 0
    assert (project / "vendor-cleanup.toml").exists()

    report = runner.invoke(app, ["all"])
    assert report.exit_code == 0, report.stdout
    assert "config/notify.php" in report.stdout
    assert "config/removed.php" in report.stdout
    assert "2024_05_05_120000_create_notices_table.php" in report.stdout
    assert "create_fixture_table" not in report.stdout
    assert "lang/en/notify.php" in report.stdout
    assert "resources/views/vendor/notify/mail.blade.php" in report.stdout
    assert report.stdout.count("Done.") == 1

    delete_config = runner.invoke(app, ["config", "--delete", "--yes"])
    assert delete_config.exit_code == 0
    assert "deleted config/notify.php" in delete_config.stdout
    assert not (project / "config/notify.php").exists()
    assert (project / "config/removed.php").exists()

    delete_views = runner.invoke(app, ["view", "--delete"], input="y\n")
    assert delete_views.exit_code == 0
    assert not (project / "resources/views/vendor/notify/mail.blade.php").exists()

    rerun = runner.invoke(app, ["config"])
    assert rerun.exit_code == 0
    assert "MISSING (not published locally)" in rerun.stdout
    assert "vendor/acme/notify/config/notify.php" in rerun.stdout
    assert "UNCHANGED" not in rerun.stdout
