"""Which checkpoints of a review touched a file."""

from __future__ import annotations

from typing import List, Optional

from revdiff.review.models import Changeset, Review


class ChangesetIndex:
    """Checkpoint-ordered view of one repository's changesets in a review.

    Only ``modified_files_in_checkpoint`` is consulted, so "touched at
    checkpoint N" means modified by that checkpoint itself. Expects a
    normalised review (no missing checkpoints).
    """

    def __init__(self, review: Review, repo_id: str) -> None:
        self.repo_id = repo_id
        self._changesets: List[Changeset] = sorted(
            (c for c in review.changesets if c.repo_id == repo_id),
            key=lambda c: c.checkpoint or 0,
        )

    @property
    def changesets(self) -> List[Changeset]:
        return list(self._changesets)

    def at(self, checkpoint: int) -> Optional[Changeset]:
        for changeset in self._changesets:
            if changeset.checkpoint == checkpoint:
                return changeset
        return None

    def first_touching(self, path: str) -> Optional[Changeset]:
        return next((c for c in self._changesets if c.touches(path)), None)

    def last_touching(self, path: str) -> Optional[Changeset]:
        return next((c for c in reversed(self._changesets) if c.touches(path)), None)

    def last_touching_before(self, path: str, checkpoint: int) -> Optional[Changeset]:
        return next(
            (
                c
                for c in reversed(self._changesets)
                if (c.checkpoint or 0) < checkpoint and c.touches(path)
            ),
            None,
        )
