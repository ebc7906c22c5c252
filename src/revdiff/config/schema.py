"""Configuration dataclasses, one per config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional

OutputFormat = Literal["terminal", "json"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_MAPPINGS_FILE = "~/.revdiff/repo-mappings.yml"


@dataclass
class ApiConfig:
    base_url: str = ""
    token: Optional[str] = None
    timeout: float = 10.0  # seconds per request


@dataclass
class GitConfig:
    timeout: int = 30
    fetch_timeout: int = 120
    fetch_on_missing_commit: bool = True  # one `git fetch --all` before reporting a missing commit


@dataclass
class MappingsConfig:
    file: str = DEFAULT_MAPPINGS_FILE


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class RevdiffConfig:
    version: str = "1.0"
    api: ApiConfig = field(default_factory=ApiConfig)
    git: GitConfig = field(default_factory=GitConfig)
    repositories: Dict[str, str] = field(default_factory=dict)  # repo id -> open checkout
    mappings: MappingsConfig = field(default_factory=MappingsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
