"""Review data models and their decoding from review API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from revdiff.git.diff_parser import DiffParser, parse_hunk_lines, strip_path_prefixes
from revdiff.git.models import FilePatch, FileStatus, Hunk
from revdiff.review.errors import PayloadError

NEW_FILE_STATUSES = frozenset({FileStatus.ADDED, FileStatus.UNTRACKED})


def require_field(data: Any, key: str, what: str) -> Any:
    """Return data[key], raising PayloadError if *data* lacks it."""
    try:
        return data[key]
    except (KeyError, TypeError):
        raise PayloadError(f"{what} is missing '{key}'") from None


@dataclass(frozen=True)
class ModifiedFile:
    """A file touched by a changeset."""

    file: str
    old_file: str
    status: FileStatus = FileStatus.MODIFIED
    additions: int = 0
    deletions: int = 0

    @property
    def is_new(self) -> bool:
        return self.status in NEW_FILE_STATUSES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModifiedFile":
        path = require_field(data, "file", "modified file")
        return cls(
            file=path,
            old_file=data.get("oldFile") or path,
            status=FileStatus.parse(data.get("statusX") or data.get("status")),
            additions=int(data.get("linesAdded") or 0),
            deletions=int(data.get("linesRemoved") or 0),
        )


@dataclass(frozen=True)
class Changeset:
    """Files modified in one repository at one checkpoint of a review.

    ``checkpoint`` and ``modified_files_in_checkpoint`` are None only on
    legacy data that has not been through ``normalize_review``.
    """

    repo_id: str
    checkpoint: Optional[int]
    modified_files: List[ModifiedFile] = field(default_factory=list)
    modified_files_in_checkpoint: Optional[List[ModifiedFile]] = None
    branch: Optional[str] = None

    def touches(self, path: str) -> bool:
        """True if *path* was modified at this checkpoint."""
        return any(f.file == path for f in self.modified_files_in_checkpoint or ())

    def file_info(self, path: str) -> Optional[ModifiedFile]:
        for f in self.modified_files_in_checkpoint or ():
            if f.file == path:
                return f
        for f in self.modified_files:
            if f.file == path:
                return f
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Changeset":
        in_checkpoint = data.get("modifiedFilesInCheckpoint")
        return cls(
            repo_id=require_field(data, "repoId", "changeset"),
            checkpoint=data.get("checkpoint"),
            modified_files=[ModifiedFile.from_dict(f) for f in data.get("modifiedFiles") or []],
            modified_files_in_checkpoint=(
                [ModifiedFile.from_dict(f) for f in in_checkpoint]
                if in_checkpoint is not None
                else None
            ),
            branch=data.get("branch"),
        )


@dataclass(frozen=True)
class Review:
    id: str
    title: str = ""
    text: str = ""
    approved_by: Dict[str, Any] = field(default_factory=dict)
    approved_at: Optional[int] = None
    permalink: Optional[str] = None
    changesets: List[Changeset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        return cls(
            id=require_field(data, "id", "review"),
            title=data.get("title") or "",
            text=data.get("text") or "",
            approved_by=dict(data.get("approvedBy") or {}),
            approved_at=data.get("approvedAt"),
            permalink=data.get("permalink"),
            changesets=[Changeset.from_dict(c) for c in data.get("reviewChangesets") or []],
        )


def _decode_hunk(data: Dict[str, Any]) -> Hunk:
    try:
        return Hunk(
            old_start=int(data["oldStart"]),
            old_lines=int(data["oldLines"]),
            new_start=int(data["newStart"]),
            new_lines=int(data["newLines"]),
            lines=parse_hunk_lines(data.get("lines") or []),
        )
    except KeyError as exc:
        raise PayloadError(f"hunk is missing {exc}") from None
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"malformed hunk: {exc}") from exc


def file_patch_from_dict(data: Dict[str, Any]) -> FilePatch:
    """Decode one stored per-file diff.

    Accepts structured hunks (``oldStart``/``oldLines``/``newStart``/
    ``newLines``/``lines``) or a unified diff string under ``patch``.
    Names beside a patch string follow git's ``/dev/null`` + ``b/x``
    convention; names of structured hunks lose their ``a/``/``b/`` prefixes
    only when both carry them.
    """
    is_patch_text = isinstance(data.get("patch"), str)
    old_name, new_name = strip_path_prefixes(
        data.get("oldFileName"), data.get("newFileName"), require_both=not is_patch_text
    )
    if is_patch_text:
        parsed = list(DiffParser(data["patch"]).parse())
        if parsed:
            patch = parsed[0]
            return FilePatch(
                old_file_name=old_name or patch.old_file_name,
                new_file_name=new_name or patch.new_file_name,
                hunks=patch.hunks,
                status=patch.status,
                is_binary=patch.is_binary,
            )

    return FilePatch(
        old_file_name=old_name,
        new_file_name=new_name,
        hunks=[_decode_hunk(h) for h in data.get("hunks") or []],
    )


@dataclass(frozen=True)
class CheckpointDiff:
    """Stored left/right diffs for one repository at one checkpoint."""

    left_base_sha: str
    right_base_sha: str
    left_base_author: str = ""
    right_base_author: str = ""
    left_diffs: List[FilePatch] = field(default_factory=list)
    right_diffs: List[FilePatch] = field(default_factory=list)

    @property
    def shares_base(self) -> bool:
        return self.left_base_sha == self.right_base_sha

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckpointDiff":
        return cls(
            left_base_sha=data.get("leftBaseSha") or "",
            right_base_sha=data.get("rightBaseSha") or "",
            left_base_author=data.get("leftBaseAuthor") or "",
            right_base_author=data.get("rightBaseAuthor") or "",
            left_diffs=[file_patch_from_dict(d) for d in data.get("leftDiffs") or []],
            right_diffs=[file_patch_from_dict(d) for d in data.get("rightDiffs") or []],
        )


@dataclass(frozen=True)
class RepoCheckpointDiff:
    checkpoint: int
    diff: CheckpointDiff


@dataclass(frozen=True)
class ContentPair:
    """Left/right text for one file, or the not-in-review sentinel."""

    left: str = ""
    right: str = ""
    file_not_included_in_review: bool = False

    @classmethod
    def not_included(cls) -> "ContentPair":
        return cls(file_not_included_in_review=True)

    def to_dict(self) -> Dict[str, Any]:
        if self.file_not_included_in_review:
            return {"fileNotIncludedInReview": True}
        return {"left": self.left, "right": self.right}


@dataclass
class FileContents:
    path: str
    left_path: str
    right_path: str
    left: str = ""
    right: str = ""
    error: Optional[str] = None


@dataclass
class RepoContents:
    repo_id: str
    files: List[FileContents] = field(default_factory=list)
