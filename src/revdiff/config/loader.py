"""Load and merge configuration from .revdiff.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from revdiff.config.schema import (
    LOG_LEVELS,
    ApiConfig,
    GitConfig,
    LoggingConfig,
    MappingsConfig,
    OutputConfig,
    RevdiffConfig,
)

CONFIG_FILENAME = ".revdiff.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: RevdiffConfig) -> None:
    """Apply REVDIFF_* environment variable overrides."""
    if val := os.environ.get("REVDIFF_API_URL"):
        cfg.api.base_url = val
    if val := os.environ.get("REVDIFF_API_TOKEN"):
        cfg.api.token = val
    if val := os.environ.get("REVDIFF_API_TIMEOUT"):
        try:
            cfg.api.timeout = float(val)
        except ValueError:
            pass
    if val := os.environ.get("REVDIFF_GIT_TIMEOUT"):
        try:
            cfg.git.timeout = int(val)
        except ValueError:
            pass
    if val := os.environ.get("REVDIFF_MAPPINGS_FILE"):
        cfg.mappings.file = val
    if val := os.environ.get("REVDIFF_FORMAT"):
        if val in ("terminal", "json"):
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("REVDIFF_LOG_LEVEL"):
        if val.upper() in LOG_LEVELS:
            cfg.logging.level = val.upper()


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    return cls(**filtered)


def _build_repositories(data: Dict[str, Any]) -> Dict[str, str]:
    repos = data.get("repositories", {})
    if not isinstance(repos, dict):
        raise ConfigError("[repositories] must map repo ids to paths")
    return {str(k): str(v) for k, v in repos.items()}


def load_config(
    root: Optional[Path] = None,
    config_override: Optional[str] = None,
) -> RevdiffConfig:
    """Load, validate, and return a RevdiffConfig."""
    config_path = find_config_file(root or Path.cwd(), config_override)

    if config_path is None:
        cfg = RevdiffConfig()
    else:
        raw = _parse_toml(config_path)
        try:
            cfg = RevdiffConfig(
                version=raw.get("version", "1.0"),
                api=_build_section(raw, ApiConfig, "api"),
                git=_build_section(raw, GitConfig, "git"),
                repositories=_build_repositories(raw),
                mappings=_build_section(raw, MappingsConfig, "mappings"),
                output=_build_section(raw, OutputConfig, "output"),
                logging=_build_section(raw, LoggingConfig, "logging"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    if cfg.output.format not in ("terminal", "json"):
        raise ConfigError(f"Invalid output format: {cfg.output.format}")
    if cfg.logging.level.upper() not in LOG_LEVELS:
        raise ConfigError(f"Invalid log level: {cfg.logging.level}")
    cfg.logging.level = cfg.logging.level.upper()

    _merge_env_overrides(cfg)
    return cfg
