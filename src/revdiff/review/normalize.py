"""Backfill of legacy review fields, applied once when a review is loaded."""

from __future__ import annotations

from dataclasses import replace

from revdiff.review.models import Changeset, Review


def normalize_changeset(changeset: Changeset) -> Changeset:
    """Default a missing checkpoint to 0 and per-checkpoint files to the cumulative list."""
    if changeset.checkpoint is not None and changeset.modified_files_in_checkpoint is not None:
        return changeset
    return replace(
        changeset,
        checkpoint=changeset.checkpoint if changeset.checkpoint is not None else 0,
        modified_files_in_checkpoint=(
            changeset.modified_files_in_checkpoint
            if changeset.modified_files_in_checkpoint is not None
            else list(changeset.modified_files)
        ),
    )


def normalize_review(review: Review) -> Review:
    """Return *review* with every changeset normalised. Pure; safe to call twice."""
    return replace(review, changesets=[normalize_changeset(c) for c in review.changesets])
