"""Command-line interface for vendor-cleanup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .categories import CATEGORY_ORDER
from .config import DEFAULT_CONFIG_FILENAME, ConfigError, load_config, render_default_config
from .logging import configure_logging
from .manager import CategoryReport, VendorCleanupError, VendorCleanupManager
from .models import FileEntry, ModifiedFile, SeverityTier

app = typer.Typer(help="Report published vendor files that differ from their originals")
console = Console()

SEVERITY_STYLES = {
    SeverityTier.MINOR: "green",
    SeverityTier.SMALL: "yellow",
    SeverityTier.MODERATE: "magenta",
    SeverityTier.SIGNIFICANT: "red",
}

ConfigOption = typer.Option(None, "--config", "-c", help=f"Path to {DEFAULT_CONFIG_FILENAME}")
BasePathOption = typer.Option(None, "--base-path", "-b", help="Project root (overrides [paths].base)")
NormalizeOption = typer.Option(
    None,
    "--normalize/--no-normalize",
    help="Also normalize whitespace and line endings (comments are always ignored)",
)
DeleteOption = typer.Option(False, "--delete", help="Delete files that are identical to their vendor version")
YesOption = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation before deleting")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log discovery and comparison details")


def _load_manager(config: Path | None, base_path: Path | None) -> VendorCleanupManager:
    config_obj = load_config(config, base_path=base_path)
    return VendorCleanupManager(config_obj)


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Re-run the command with elevated privileges (e.g. `sudo`).")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        message = str(exc)
        console.print(f"[red]{escape(message)}[/red]")
        if "does not exist" in message:
            console.print("[yellow]Use 'vendor-cleanup init' to create a configuration file.[/yellow]")
        elif "Expected to find" in message:
            console.print(
                "[yellow]Make sure you pointed to the directory containing the config file, or to the file itself.[/yellow]"
            )
        raise typer.Exit(code=1)
    if isinstance(exc, VendorCleanupError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    raise exc


def _two_column_rows(paths: Sequence[str]) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = []
    for index in range(0, len(paths), 2):
        chunk = paths[index : index + 2]
        rows.append((chunk[0], chunk[1] if len(chunk) > 1 else ""))
    return rows


def _format_file_table(title: str, entries: Iterable[FileEntry], manager: VendorCleanupManager) -> None:
    paths = [escape(manager.relative_path(entry.path)) for entry in entries]
    if not paths:
        return

    console.print()
    console.print(title)
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File", overflow="fold")
    table.add_column("File", overflow="fold")
    for left, right in _two_column_rows(paths):
        table.add_row(left, right)
    console.print(table)


def _format_modified(modified: Sequence[ModifiedFile], manager: VendorCleanupManager) -> None:
    if not modified:
        return

    console.print()
    console.print("[bold]MODIFIED[/bold]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File", overflow="fold")
    table.add_column("Difference", justify="right")

    for item in modified:
        style = SEVERITY_STYLES[item.severity]
        table.add_row(
            escape(manager.relative_path(item.path)),
            f"[{style}]{item.difference}%[/{style}]",
        )

    console.print(table)


def _format_report(report: CategoryReport, manager: VendorCleanupManager) -> None:
    buckets = report.buckets
    _format_modified(buckets.modified_by_difference(), manager)
    _format_file_table("[yellow]UNCHANGED (matches vendor)[/yellow]", buckets.unchanged, manager)
    _format_file_table(
        "[red]ORPHANED (no vendor counterpart - likely from uninstalled packages)[/red]",
        buckets.orphaned,
        manager,
    )
    _format_file_table("[bright_black]MISSING (not published locally)[/bright_black]", buckets.missing, manager)

    for failure in buckets.read_failures:
        console.print(
            f"[yellow]Could not read {escape(manager.relative_path(failure.entry.path))}: "
            f"{escape(failure.reason)}[/yellow]"
        )


def _handle_deletions(report: CategoryReport, manager: VendorCleanupManager, *, delete: bool, yes: bool) -> None:
    unchanged = report.buckets.unchanged
    if not delete or not unchanged:
        return

    label = report.category.label
    confirmed = yes or typer.confirm(f"Delete {len(unchanged)} unchanged {label}?", default=False)
    result = manager.delete_unchanged(unchanged, confirmed=confirmed)

    for entry in result.deleted:
        console.print(f"  ✖ deleted {escape(manager.relative_path(entry.path))}")
    for entry, reason in result.failed:
        console.print(f"[red]  failed to delete {escape(manager.relative_path(entry.path))}: {escape(reason)}[/red]")


def _run_categories(
    names: Sequence[str],
    *,
    config: Path | None,
    base_path: Path | None,
    normalize: bool | None,
    delete: bool,
    yes: bool,
    verbose: bool,
) -> None:
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING, force=True)
    try:
        manager = _load_manager(config, base_path)
        for name in names:
            report = manager.scan(name, normalize=normalize)
            if report.no_vendor_files:
                console.print(f"[green]No vendor {report.category.label} found.[/green]")
                continue
            _format_report(report, manager)
            _handle_deletions(report, manager, delete=delete, yes=yes)
        console.print()
        console.print("Done.")
    except typer.Abort:
        raise
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command("config")
def config_command(
    config: Path | None = ConfigOption,
    base_path: Path | None = BasePathOption,
    normalize: bool | None = NormalizeOption,
    delete: bool = DeleteOption,
    yes: bool = YesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Report which published config files differ from their vendor originals."""

    _run_categories(
        ["config"], config=config, base_path=base_path, normalize=normalize, delete=delete, yes=yes, verbose=verbose
    )


@app.command()
def migration(
    config: Path | None = ConfigOption,
    base_path: Path | None = BasePathOption,
    normalize: bool | None = NormalizeOption,
    delete: bool = DeleteOption,
    yes: bool = YesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Report which published migrations differ from their vendor originals."""

    _run_categories(
        ["migration"], config=config, base_path=base_path, normalize=normalize, delete=delete, yes=yes, verbose=verbose
    )


@app.command()
def lang(
    config: Path | None = ConfigOption,
    base_path: Path | None = BasePathOption,
    normalize: bool | None = NormalizeOption,
    delete: bool = DeleteOption,
    yes: bool = YesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Report which published lang files differ from their vendor originals."""

    _run_categories(
        ["lang"], config=config, base_path=base_path, normalize=normalize, delete=delete, yes=yes, verbose=verbose
    )


@app.command()
def view(
    config: Path | None = ConfigOption,
    base_path: Path | None = BasePathOption,
    normalize: bool | None = NormalizeOption,
    delete: bool = DeleteOption,
    yes: bool = YesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Report which published views differ from their vendor originals."""

    _run_categories(
        ["view"], config=config, base_path=base_path, normalize=normalize, delete=delete, yes=yes, verbose=verbose
    )


@app.command("all")
def all_command(
    config: Path | None = ConfigOption,
    base_path: Path | None = BasePathOption,
    normalize: bool | None = NormalizeOption,
    delete: bool = DeleteOption,
    yes: bool = YesOption,
    verbose: bool = VerboseOption,
) -> None:
    """Run the config, migration, lang and view reports in turn."""

    _run_categories(
        list(CATEGORY_ORDER),
        config=config,
        base_path=base_path,
        normalize=normalize,
        delete=delete,
        yes=yes,
        verbose=verbose,
    )


@app.command()
def init(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_FILENAME),
        "--config",
        "-c",
        help="Path to write the configuration file",
        dir_okay=False,
        writable=True,
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config if present"),
) -> None:
    """Create a starter vendor-cleanup configuration file."""

    if config.exists() and not force:
        console.print(f"[red]Configuration '{escape(str(config))}' already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(code=1)

    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text(render_default_config())
    console.print(f"[green]Created '{escape(str(config))}'.[/green]")


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
