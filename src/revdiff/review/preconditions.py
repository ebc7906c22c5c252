"""Checks that every base commit of a review exists locally."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from revdiff.review.diffs import DiffSource, fetch_checkpoint_diffs
from revdiff.review.errors import CommitNotFound, RepoNotFound
from revdiff.review.resolver import RepositoryLookup, ReviewSource, VersionControl

logger = logging.getLogger(__name__)

REPO_NOT_OPEN_MESSAGE = "The git repository for this review is not currently open"


@dataclass(frozen=True)
class PreconditionResult:
    success: bool
    error_type: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": {"type": self.error_type, "message": self.message}}


class PreconditionValidator:
    """Checks that a review's base revisions can be read from local repositories.

    A missing commit triggers at most one ``fetch --all`` per repository
    before it is reported.
    """

    def __init__(
        self,
        reviews: ReviewSource,
        diff_source: DiffSource,
        repositories: RepositoryLookup,
        git: VersionControl,
        *,
        fetch_on_missing_commit: bool = True,
    ) -> None:
        self.reviews = reviews
        self.diff_source = diff_source
        self.repositories = repositories
        self.git = git
        self.fetch_on_missing_commit = fetch_on_missing_commit

    def check(self, review_id: str) -> PreconditionResult:
        try:
            self.validate(review_id)
        except RepoNotFound as exc:
            return PreconditionResult(False, exc.error_type, str(exc))
        except CommitNotFound as exc:
            return PreconditionResult(False, exc.error_type, str(exc))
        return PreconditionResult(True)

    def validate(self, review_id: str) -> None:
        """Raise RepoNotFound or CommitNotFound if the review cannot be resolved locally."""
        review = self.reviews.get(review_id)
        diffs_by_repo = fetch_checkpoint_diffs(self.diff_source, review.id)

        for repo_id, diffs in diffs_by_repo.items():
            repo_path = self.repositories.local_path(repo_id)
            if repo_path is None:
                raise RepoNotFound(repo_id, REPO_NOT_OPEN_MESSAGE)

            fetched = False
            for entry in diffs:
                diff = entry.diff
                left = self._has_commit(repo_path, diff.left_base_sha)
                right = left if diff.shares_base else self._has_commit(repo_path, diff.right_base_sha)

                if (not left or not right) and self.fetch_on_missing_commit and not fetched:
                    fetched = True
                    logger.info("repo %s is missing base commits; fetching all remotes", repo_id)
                    if self.git.fetch_all_remotes(repo_path):
                        left = left or self._has_commit(repo_path, diff.left_base_sha)
                        right = right or self._has_commit(repo_path, diff.right_base_sha)

                if not left:
                    raise CommitNotFound(diff.left_base_sha, diff.left_base_author)
                if not right:
                    raise CommitNotFound(diff.right_base_sha, diff.right_base_author)

    def _has_commit(self, repo_path: Path, sha: str) -> bool:
        return self.git.get_commit(repo_path, sha) is not None
