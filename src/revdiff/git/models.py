"""Data models for diffs, patches and commits."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LineType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"
    UNTRACKED = "untracked"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FileStatus":
        """Map a status tag (``"A"``, ``"added"``, ``"?"`` ...) to a FileStatus."""
        if value is None:
            return cls.UNKNOWN
        tag = str(value).strip().lower()
        if tag in _STATUS_ALIASES:
            return _STATUS_ALIASES[tag]
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


_STATUS_ALIASES = {
    "a": FileStatus.ADDED,
    "m": FileStatus.MODIFIED,
    "d": FileStatus.DELETED,
    "r": FileStatus.RENAMED,
    "c": FileStatus.COPIED,
    "?": FileStatus.UNTRACKED,
    "u": FileStatus.UNTRACKED,
}


@dataclass(frozen=True)
class HunkLine:
    """One body line of a hunk.

    ``no_eol`` is set when a ``\\ No newline at end of file`` marker
    follows the line.
    """

    line_type: LineType
    content: str
    no_eol: bool = False


@dataclass(frozen=True)
class Hunk:
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[HunkLine] = field(default_factory=list)

    @property
    def old_content(self) -> List[str]:
        """Lines the hunk expects to find in the base (context + removed)."""
        return [l.content for l in self.lines if l.line_type != LineType.ADDED]

    @property
    def new_content(self) -> List[str]:
        """Lines the hunk leaves behind (context + added)."""
        return [l.content for l in self.lines if l.line_type != LineType.REMOVED]


@dataclass(frozen=True)
class FilePatch:
    """Per-file unified diff record, as stored for a checkpoint."""

    old_file_name: Optional[str]
    new_file_name: Optional[str]
    hunks: List[Hunk] = field(default_factory=list)
    status: FileStatus = FileStatus.MODIFIED
    is_binary: bool = False


@dataclass(frozen=True)
class Commit:
    """A commit that exists in a local repository."""

    sha: str
    author: str
    email: str
    timestamp: int
    message: str

    @property
    def short_sha(self) -> str:
        return self.sha[:8]
