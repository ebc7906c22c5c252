"""Local repository registry."""

from revdiff.repos.registry import (
    MappingsError,
    Repository,
    RepositoryMappings,
    RepositoryRegistry,
)

__all__ = ["MappingsError", "Repository", "RepositoryMappings", "RepositoryRegistry"]
