"""Local repository lookup — open repositories plus remembered mappings.

Remembered mappings live in a YAML file of ``repo_id: /local/path``
entries so a repository can be found even when it is not configured as
open.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)


class MappingsError(Exception):
    """Raised when the mappings file cannot be read or written."""


@dataclass(frozen=True)
class Repository:
    id: str
    path: Path


class RepositoryMappings:
    """YAML-backed repo id → local path store."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._mappings: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._mappings is not None:
            return self._mappings
        if self.path is None or not self.path.is_file():
            self._mappings = {}
            return self._mappings
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise MappingsError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise MappingsError(f"{self.path} must contain a mapping of repo ids to paths")
        self._mappings = {str(k): str(v) for k, v in data.items()}
        return self._mappings

    def get_by_repo_id(self, repo_id: str) -> Optional[Path]:
        value = self._load().get(repo_id)
        return Path(value).expanduser() if value else None

    def set(self, repo_id: str, local_path: Path) -> None:
        """Remember *local_path* for *repo_id* and persist the file."""
        mappings = self._load()
        mappings[repo_id] = str(local_path)
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(mappings, f, default_flow_style=False, sort_keys=True)
        except OSError as exc:
            raise MappingsError(f"Failed to write {self.path}: {exc}") from exc


class RepositoryRegistry:
    """Resolves review repository ids to local checkouts."""

    def __init__(
        self,
        open_repositories: Optional[Mapping[str, Union[str, Path]]] = None,
        mappings: Optional[RepositoryMappings] = None,
    ) -> None:
        self._open = {
            repo_id: Path(p).expanduser() for repo_id, p in (open_repositories or {}).items()
        }
        self.mappings = mappings or RepositoryMappings()

    def get_repository_by_id(self, repo_id: str) -> Optional[Repository]:
        """Return the repository if it is open."""
        path = self._open.get(repo_id)
        return Repository(repo_id, path) if path is not None else None

    def local_path(self, repo_id: str) -> Optional[Path]:
        """Path of an open repository, else a remembered one, else None."""
        repo = self.get_repository_by_id(repo_id)
        if repo is not None:
            return repo.path
        path = self.mappings.get_by_repo_id(repo_id)
        if path is not None:
            logger.debug("repo %s resolved through remembered mapping %s", repo_id, path)
        return path
