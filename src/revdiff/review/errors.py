"""Errors raised while loading and resolving reviews."""

from __future__ import annotations

from typing import Optional


class NotFoundError(Exception):
    """A requested entity or relationship does not exist."""

    error_type = "NOT_FOUND"


class ReviewNotFound(NotFoundError):
    error_type = "REVIEW_NOT_FOUND"

    def __init__(self, review_id: str) -> None:
        super().__init__(f"Could not find review {review_id}")
        self.review_id = review_id


class ReviewDiffsNotFound(NotFoundError):
    error_type = "REVIEW_DIFFS_NOT_FOUND"

    def __init__(self, review_id: str) -> None:
        super().__init__(f"Cannot find diffs for review {review_id}")
        self.review_id = review_id


class RepoNotFound(NotFoundError):
    error_type = "REPO_NOT_FOUND"

    def __init__(self, repo_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Could not load repo with ID {repo_id}")
        self.repo_id = repo_id


class ChangesetNotFound(NotFoundError):
    error_type = "CHANGESET_NOT_FOUND"

    def __init__(self, repo_id: str, checkpoint: int) -> None:
        super().__init__(
            f"Could not find changeset with repoId {repo_id} at checkpoint {checkpoint}"
        )
        self.repo_id = repo_id
        self.checkpoint = checkpoint


class FileInfoNotFound(NotFoundError):
    error_type = "FILE_INFO_NOT_FOUND"

    def __init__(self, path: str, checkpoint: int) -> None:
        super().__init__(
            f"Could not find changeset file information for {path} at checkpoint {checkpoint}"
        )
        self.path = path
        self.checkpoint = checkpoint


class CheckpointDiffNotFound(NotFoundError):
    error_type = "CHECKPOINT_DIFF_NOT_FOUND"

    def __init__(self, repo_id: str, checkpoint: int) -> None:
        super().__init__(f"No stored diff for repo {repo_id} at checkpoint {checkpoint}")
        self.repo_id = repo_id
        self.checkpoint = checkpoint


class CommitNotFound(Exception):
    """A base commit referenced by a review is missing from the local repository."""

    error_type = "COMMIT_NOT_FOUND"

    def __init__(self, sha: str, author: str) -> None:
        self.sha = sha
        self.author = author
        self.short_sha = sha[:8]
        super().__init__(
            f"A commit required to perform this review ({self.short_sha}, authored by "
            f"{author or 'unknown'}) was not found in the local git repository. "
            "Fetch all remotes and try again."
        )


class PayloadError(Exception):
    """A review API payload is missing a field or holds a malformed value."""

    error_type = "INVALID_PAYLOAD"
