"""Git access, diff parsing and patch application."""

from revdiff.git.adapter import (
    GitAccessor,
    GitError,
    fetch_all_remotes,
    get_commit,
    get_file_content_for_revision,
    get_file_current_revision,
    get_repo_root,
)
from revdiff.git.diff_parser import DiffParseError, DiffParser
from revdiff.git.models import Commit, FilePatch, FileStatus, Hunk, HunkLine, LineType
from revdiff.git.patch import (
    PatchApplyError,
    apply_or_passthrough,
    apply_patch,
    find_file_patch,
    normalize_file_contents,
)

__all__ = [
    "Commit",
    "DiffParseError",
    "DiffParser",
    "FilePatch",
    "FileStatus",
    "GitAccessor",
    "GitError",
    "Hunk",
    "HunkLine",
    "LineType",
    "PatchApplyError",
    "apply_or_passthrough",
    "apply_patch",
    "fetch_all_remotes",
    "find_file_patch",
    "get_commit",
    "get_file_content_for_revision",
    "get_file_current_revision",
    "get_repo_root",
    "normalize_file_contents",
]
