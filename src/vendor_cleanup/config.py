"""TOML configuration loading for vendor-cleanup."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_CONFIG_FILENAME = "vendor-cleanup.toml"

DEFAULT_PATHS: dict[str, str] = {
    "base": ".",
    "vendor": "vendor",
    "config": "config",
    "migrations": "database/migrations",
    "lang": "lang",
    "views": "resources/views",
}
DEFAULT_EXCLUDE_DIRS = ("tests", "test", "stubs", "examples")
DEFAULT_EXCLUDE_NAMES = ("testbench",)


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed or validated."""


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


class PathsConfig(BaseModel):
    """Project root and the vendor/published directories below it."""

    model_config = ConfigDict(frozen=True)

    base: Path
    vendor: Path
    config: Path
    migrations: Path
    lang: Path
    views: Path

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, config_dir: Path, base_override: Path | None = None) -> "PathsConfig":
        unknown = set(raw) - set(DEFAULT_PATHS)
        if unknown:
            raise ConfigError(f"Unknown [paths] setting(s): {', '.join(sorted(unknown))}")

        values = {**DEFAULT_PATHS, **{key: str(value) for key, value in raw.items()}}
        if base_override is not None:
            base = _expand_path(base_override, base_dir=Path.cwd())
        else:
            base = _expand_path(values["base"], base_dir=config_dir)

        resolved = {name: _expand_path(values[name], base_dir=base) for name in DEFAULT_PATHS if name != "base"}
        return cls(base=base, **resolved)


class Settings(BaseModel):
    """Global behaviour switches."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    normalize: bool = False


class MigrationSettings(BaseModel):
    """Rules for ignoring vendor migrations that are never published."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude_dirs: tuple[str, ...] = Field(default=DEFAULT_EXCLUDE_DIRS)
    exclude_names: tuple[str, ...] = Field(default=DEFAULT_EXCLUDE_NAMES)


class Config(BaseModel):
    """Fully resolved configuration."""

    model_config = ConfigDict(frozen=True)

    config_path: Path | None
    paths: PathsConfig
    settings: Settings = Field(default_factory=Settings)
    migrations: MigrationSettings = Field(default_factory=MigrationSettings)


def load_config(path: Path | None = None, *, base_path: Path | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        path: Optional path to the TOML file or to the directory holding it.
            Defaults to ``vendor-cleanup.toml`` in the current working directory;
            when that file does not exist the built-in defaults are used.
        base_path: Overrides ``[paths].base`` (the project root).
    """

    config_path = _resolve_config_path(path)
    if config_path is None:
        data: dict[str, Any] = {}
        config_dir = Path.cwd()
    else:
        config_dir = config_path.parent
        try:
            with config_path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Configuration file '{config_path}' is not valid TOML: {exc}") from exc

    paths_section = data.get("paths") or {}
    if not isinstance(paths_section, Mapping):
        raise ConfigError("[paths] must be a table")

    try:
        paths = PathsConfig.from_raw(paths_section, config_dir=config_dir, base_override=base_path)
        settings = Settings(**(data.get("settings") or {}))
        migrations = MigrationSettings(**(data.get("migrations") or {}))
    except (TypeError, ValidationError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    return Config(config_path=config_path, paths=paths, settings=settings, migrations=migrations)


def render_default_config() -> str:
    """Return the text of a starter configuration file."""

    data = {
        "paths": dict(DEFAULT_PATHS),
        "settings": {"normalize": False},
        "migrations": {
            "exclude_dirs": list(DEFAULT_EXCLUDE_DIRS),
            "exclude_names": list(DEFAULT_EXCLUDE_NAMES),
        },
    }
    return "# vendor-cleanup configuration\n\n" + tomli_w.dumps(data)


def _resolve_config_path(path: Path | None) -> Path | None:
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
        return candidate.resolve(strict=False) if candidate.is_file() else None

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigError(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)
