"""Git subprocess wrapper for revision contents and commit lookups."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from revdiff.git.models import Commit

logger = logging.getLogger(__name__)

_COMMIT_FORMAT = "%H%x00%an%x00%ae%x00%at%x00%s"


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _run_git(args: list[str], cwd: Path, timeout: int = 30) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except NotADirectoryError:
        raise GitError(f"not a directory: {cwd}")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitError(f"git error: {stderr or f'exit status {result.returncode}'}")
    return result.stdout


def _existing_dir(path: Path) -> Path:
    """Walk up from *path* to the nearest directory that exists."""
    for candidate in (path, *path.parents):
        if candidate.is_dir():
            return candidate
    return Path.cwd()


def get_repo_root(cwd: Optional[Path] = None, timeout: int = 30) -> Path:
    """Return the root of the git repository containing *cwd*."""
    cwd = _existing_dir(cwd or Path.cwd())
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd, timeout=timeout)
    return Path(out.strip())


def _repo_relative(abs_path: Path, timeout: int) -> tuple[Path, str]:
    root = get_repo_root(abs_path.parent, timeout=timeout)
    try:
        rel = abs_path.resolve().relative_to(root.resolve())
    except ValueError:
        raise GitError(f"{abs_path} is not inside repository {root}")
    return root, rel.as_posix()


def get_file_content_for_revision(
    abs_path: Path, sha: str, timeout: int = 30
) -> Optional[str]:
    """Return the contents of *abs_path* at revision *sha*.

    An empty *sha* reads the staged (index) version. Returns None when the
    revision or the path at that revision cannot be found.
    """
    try:
        root, rel = _repo_relative(abs_path, timeout)
        return _run_git(["show", f"{sha}:{rel}"], cwd=root, timeout=timeout)
    except GitError as exc:
        logger.debug("no content for %s at %r: %s", abs_path, sha, exc)
        return None


def get_file_current_revision(abs_path: Path, timeout: int = 30) -> Optional[str]:
    """Return the sha of the last commit that touched *abs_path*."""
    try:
        root, rel = _repo_relative(abs_path, timeout)
        out = _run_git(["log", "-1", "--format=%H", "--", rel], cwd=root, timeout=timeout)
    except GitError as exc:
        logger.debug("no current revision for %s: %s", abs_path, exc)
        return None
    return out.strip() or None


def get_commit(repo_path: Path, sha: str, timeout: int = 30) -> Optional[Commit]:
    """Return the commit *sha* if it exists in the repository at *repo_path*."""
    if not sha:
        return None
    try:
        out = _run_git(
            ["show", "-s", f"--format={_COMMIT_FORMAT}", f"{sha}^{{commit}}", "--"],
            cwd=repo_path,
            timeout=timeout,
        )
    except GitError as exc:
        logger.debug("commit %s not found in %s: %s", sha, repo_path, exc)
        return None

    fields = out.rstrip("\n").split("\x00")
    if len(fields) < 5:
        return None
    full_sha, author, email, timestamp, message = fields[:5]
    return Commit(
        sha=full_sha,
        author=author,
        email=email,
        timestamp=int(timestamp) if timestamp.isdigit() else 0,
        message=message,
    )


def fetch_all_remotes(repo_path: Path, timeout: int = 120) -> bool:
    """Run ``git fetch --all``. Returns True if the fetch succeeded."""
    try:
        _run_git(["fetch", "--all", "--quiet"], cwd=repo_path, timeout=timeout)
    except GitError as exc:
        logger.warning("fetching remotes for %s failed: %s", repo_path, exc)
        return False
    return True


class GitAccessor:
    """Version-control accessor bound to a configured command timeout."""

    def __init__(self, timeout: int = 30, fetch_timeout: int = 120) -> None:
        self.timeout = timeout
        self.fetch_timeout = fetch_timeout

    def get_file_content_for_revision(self, abs_path: Path, sha: str) -> Optional[str]:
        return get_file_content_for_revision(abs_path, sha, timeout=self.timeout)

    def get_file_current_revision(self, abs_path: Path) -> Optional[str]:
        return get_file_current_revision(abs_path, timeout=self.timeout)

    def get_commit(self, repo_path: Path, sha: str) -> Optional[Commit]:
        return get_commit(repo_path, sha, timeout=self.timeout)

    def fetch_all_remotes(self, repo_path: Path) -> bool:
        return fetch_all_remotes(repo_path, timeout=self.fetch_timeout)
