"""Review models, caching, and checkpoint content resolution."""

from revdiff.review.cache import ReviewCache
from revdiff.review.changesets import ChangesetIndex
from revdiff.review.diffs import fetch_checkpoint_diffs
from revdiff.review.errors import (
    ChangesetNotFound,
    CheckpointDiffNotFound,
    CommitNotFound,
    FileInfoNotFound,
    NotFoundError,
    RepoNotFound,
    ReviewDiffsNotFound,
    ReviewNotFound,
)
from revdiff.review.models import (
    Changeset,
    CheckpointDiff,
    ContentPair,
    FileContents,
    ModifiedFile,
    RepoCheckpointDiff,
    RepoContents,
    Review,
)
from revdiff.review.normalize import normalize_review
from revdiff.review.preconditions import PreconditionResult, PreconditionValidator
from revdiff.review.resolver import ContentResolver

__all__ = [
    "Changeset",
    "ChangesetIndex",
    "ChangesetNotFound",
    "CheckpointDiff",
    "CheckpointDiffNotFound",
    "CommitNotFound",
    "ContentPair",
    "ContentResolver",
    "FileContents",
    "FileInfoNotFound",
    "ModifiedFile",
    "NotFoundError",
    "PreconditionResult",
    "PreconditionValidator",
    "RepoCheckpointDiff",
    "RepoContents",
    "RepoNotFound",
    "Review",
    "ReviewCache",
    "ReviewDiffsNotFound",
    "ReviewNotFound",
    "fetch_checkpoint_diffs",
    "normalize_review",
]
