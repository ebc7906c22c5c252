"""Configuration loading, schema, and defaults."""

from revdiff.config.loader import ConfigError, load_config
from revdiff.config.schema import OutputFormat, RevdiffConfig

__all__ = [
    "ConfigError",
    "OutputFormat",
    "RevdiffConfig",
    "load_config",
]
