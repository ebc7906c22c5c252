"""Left and right text of a review file at a checkpoint.

Three request shapes:

* no checkpoint: left side at the first checkpoint that touched the file,
  right side at the last one (the whole review's change);
* checkpoint 0: both sides reconstructed at checkpoint 0;
* checkpoint N > 0: left is the file as the most recent earlier touch left
  it (or checkpoint N's own left side if there is none), right is N's
  right side.

A side is reconstructed by fetching the base revision recorded in the
checkpoint diff and applying that side's stored patch to it. When left and
right share a base sha the base is fetched once.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from revdiff.git.models import Commit
from revdiff.git.patch import apply_or_passthrough, find_file_patch, normalize_file_contents
from revdiff.review.changesets import ChangesetIndex
from revdiff.review.diffs import DiffSource, DiffsByRepo, diff_for_checkpoint, fetch_checkpoint_diffs
from revdiff.review.errors import (
    ChangesetNotFound,
    CheckpointDiffNotFound,
    FileInfoNotFound,
    NotFoundError,
    RepoNotFound,
)
from revdiff.review.models import (
    Changeset,
    ContentPair,
    FileContents,
    RepoContents,
    Review,
)

logger = logging.getLogger(__name__)

RIGHT_VERSIONS = ("head", "staged", "saved")


class ReviewSource(Protocol):
    def get(self, review_id: str) -> Review: ...


class RepositoryLookup(Protocol):
    def local_path(self, repo_id: str) -> Optional[Path]: ...


class VersionControl(Protocol):
    def get_file_content_for_revision(self, abs_path: Path, sha: str) -> Optional[str]: ...

    def get_file_current_revision(self, abs_path: Path) -> Optional[str]: ...

    def get_commit(self, repo_path: Path, sha: str) -> Optional[Commit]: ...

    def fetch_all_remotes(self, repo_path: Path) -> bool: ...


class ContentResolver:
    """Rebuilds file contents of a review from stored diffs and base revisions."""

    def __init__(
        self,
        reviews: ReviewSource,
        diff_source: DiffSource,
        repositories: RepositoryLookup,
        git: VersionControl,
    ) -> None:
        self.reviews = reviews
        self.diff_source = diff_source
        self.repositories = repositories
        self.git = git

    # ---- public operations ----

    def resolve_contents(
        self,
        review_id: str,
        repo_id: str,
        checkpoint: Optional[int],
        path: str,
        *,
        diffs_by_repo: Optional[DiffsByRepo] = None,
    ) -> ContentPair:
        """Return the left/right pair for *path*, or the not-in-review sentinel."""
        review = self.reviews.get(review_id)
        index = ChangesetIndex(review, repo_id)

        if checkpoint is None:
            first = index.first_touching(path)
            last = index.last_touching(path)
            if first is None or last is None:
                return ContentPair.not_included()
            if diffs_by_repo is None:
                diffs_by_repo = fetch_checkpoint_diffs(self.diff_source, review_id)
            first_pair = self.contents_for_checkpoint(
                review, index, diffs_by_repo, first.checkpoint or 0, path
            )
            if last is first:
                return first_pair
            last_pair = self.contents_for_checkpoint(
                review, index, diffs_by_repo, last.checkpoint or 0, path
            )
            return ContentPair(left=first_pair.left, right=last_pair.right)

        if diffs_by_repo is None:
            diffs_by_repo = fetch_checkpoint_diffs(self.diff_source, review_id)
        if checkpoint == 0:
            return self.contents_for_checkpoint(review, index, diffs_by_repo, 0, path)

        at_checkpoint = self.contents_for_checkpoint(review, index, diffs_by_repo, checkpoint, path)
        previous = index.last_touching_before(path, checkpoint)
        if previous is None:
            return at_checkpoint

        try:
            prior = self.contents_for_checkpoint(
                review, index, diffs_by_repo, previous.checkpoint or 0, path
            )
        except NotFoundError as exc:
            logger.warning(
                "review %s: could not rebuild %s at earlier checkpoint %s (%s); "
                "using checkpoint %d's own base",
                review_id,
                path,
                previous.checkpoint,
                exc,
                checkpoint,
            )
            return at_checkpoint
        return ContentPair(left=prior.right, right=at_checkpoint.right)

    def resolve_all_contents(
        self, review_id: str, checkpoint: Optional[int]
    ) -> List[RepoContents]:
        """Resolve every file of the review (or of one checkpoint), per repository.

        A failure on one file is recorded on that file and does not stop
        the others.
        """
        review = self.reviews.get(review_id)

        changeset_by_repo: Dict[str, Changeset] = {}
        for changeset in sorted(review.changesets, key=lambda c: c.checkpoint or 0):
            if checkpoint is None or changeset.checkpoint == checkpoint:
                changeset_by_repo[changeset.repo_id] = changeset

        diffs_by_repo: DiffsByRepo = {}
        diffs_error: Optional[str] = None
        if changeset_by_repo:
            try:
                diffs_by_repo = fetch_checkpoint_diffs(self.diff_source, review_id)
            except Exception as exc:
                logger.warning("review %s: failed to load stored diffs: %s", review_id, exc)
                diffs_error = f"{type(exc).__name__}: {exc}"

        repos: List[RepoContents] = []
        for repo_id, changeset in changeset_by_repo.items():
            modified = (
                changeset.modified_files_in_checkpoint or []
                if checkpoint is not None
                else changeset.modified_files
            )
            files: List[FileContents] = []
            for info in modified:
                entry = FileContents(path=info.file, left_path=info.old_file, right_path=info.file)
                files.append(entry)
                if diffs_error is not None:
                    entry.error = diffs_error
                    continue
                try:
                    pair = self.resolve_contents(
                        review_id, repo_id, checkpoint, info.file, diffs_by_repo=diffs_by_repo
                    )
                    entry.left = pair.left
                    entry.right = pair.right
                except Exception as exc:
                    logger.warning(
                        "review %s: failed to resolve %s in repo %s: %s",
                        review_id,
                        info.file,
                        repo_id,
                        exc,
                    )
                    entry.error = f"{type(exc).__name__}: {exc}"
            repos.append(RepoContents(repo_id=repo_id, files=files))
        return repos

    def resolve_local_contents(
        self,
        repo_id: str,
        path: str,
        base_sha: str,
        right_version: str,
        *,
        editing_review_id: Optional[str] = None,
    ) -> ContentPair:
        """Compare a local file against *base_sha* (or the review being amended).

        *right_version* selects the right side: ``head`` (last committed
        revision of the file), ``staged`` (index) or ``saved`` (working tree).
        """
        if right_version not in RIGHT_VERSIONS:
            raise ValueError(f"right_version must be one of {', '.join(RIGHT_VERSIONS)}")
        repo_path = self._repo_path(repo_id)
        abs_path = repo_path / path

        left: Optional[str] = None
        if editing_review_id:
            latest = self.resolve_contents(editing_review_id, repo_id, None, path)
            if not latest.file_not_included_in_review:
                left = latest.right
        if left is None:
            left = self.git.get_file_content_for_revision(abs_path, base_sha) or ""

        right: Optional[str] = ""
        if right_version == "head":
            revision = self.git.get_file_current_revision(abs_path)
            if revision:
                right = self.git.get_file_content_for_revision(abs_path, revision)
        elif right_version == "staged":
            right = self.git.get_file_content_for_revision(abs_path, "")
        else:
            try:
                right = abs_path.read_text(encoding="utf-8", errors="replace")
            except FileNotFoundError:
                right = ""

        return ContentPair(
            left=normalize_file_contents(left),
            right=normalize_file_contents(right or ""),
        )

    # ---- per-checkpoint reconstruction ----

    def contents_for_checkpoint(
        self,
        review: Review,
        index: ChangesetIndex,
        diffs_by_repo: DiffsByRepo,
        checkpoint: int,
        path: str,
    ) -> ContentPair:
        """Reconstruct both sides of *path* at exactly *checkpoint*."""
        changeset = index.at(checkpoint)
        if changeset is None:
            raise ChangesetNotFound(index.repo_id, checkpoint)
        file_info = changeset.file_info(path)
        if file_info is None:
            raise FileInfoNotFound(path, checkpoint)

        diff = diff_for_checkpoint(diffs_by_repo.get(index.repo_id) or [], checkpoint)
        if diff is None:
            raise CheckpointDiffNotFound(index.repo_id, checkpoint)

        left_patch = find_file_patch(diff.left_diffs, file_info.old_file)
        right_patch = find_file_patch(diff.right_diffs, file_info.file)

        if file_info.is_new:
            left_base = right_base = ""
        else:
            left_rel = (left_patch and left_patch.old_file_name) or file_info.old_file
            left_base = self._base_contents(index.repo_id, left_rel, diff.left_base_sha)
            if diff.shares_base:
                logger.debug("%s@%d: left and right share base %s", path, checkpoint, diff.left_base_sha[:8])
                right_base = left_base
            else:
                right_rel = (right_patch and right_patch.old_file_name) or file_info.file
                right_base = self._base_contents(index.repo_id, right_rel, diff.right_base_sha)

        return ContentPair(
            left=apply_or_passthrough(left_base, left_patch),
            right=apply_or_passthrough(right_base, right_patch),
        )

    def _repo_path(self, repo_id: str) -> Path:
        repo_path = self.repositories.local_path(repo_id)
        if repo_path is None:
            raise RepoNotFound(repo_id)
        return repo_path

    def _base_contents(self, repo_id: str, relative_path: str, sha: str) -> str:
        abs_path = self._repo_path(repo_id) / relative_path
        contents = self.git.get_file_content_for_revision(abs_path, sha)
        if contents is None:
            logger.debug("no base for %s at %s; using empty base", relative_path, sha[:8] or "index")
            return ""
        return contents
