"""Stored checkpoint diffs of a review, grouped by repository."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol

from revdiff.review.errors import ReviewDiffsNotFound
from revdiff.review.models import CheckpointDiff, RepoCheckpointDiff, require_field

logger = logging.getLogger(__name__)

DiffsByRepo = Dict[str, List[RepoCheckpointDiff]]


class DiffSource(Protocol):
    def fetch_review_checkpoint_diffs(self, review_id: str) -> List[Dict[str, Any]]: ...


def fetch_checkpoint_diffs(source: DiffSource, review_id: str) -> DiffsByRepo:
    """Fetch and partition the stored diffs of *review_id*.

    Each repository's list is ordered by checkpoint. A lone record without
    a checkpoint is legacy single-checkpoint data and counts as checkpoint 0;
    among several records, one without a checkpoint is skipped.
    Raises ReviewDiffsNotFound if the review has no diffs at all.
    """
    records = source.fetch_review_checkpoint_diffs(review_id)
    if not records:
        raise ReviewDiffsNotFound(review_id)

    result: DiffsByRepo = {}
    for record in records:
        repo_id = require_field(record, "repoId", "checkpoint diff")
        checkpoint = record.get("checkpoint")
        if checkpoint is None:
            if len(records) > 1:
                logger.warning(
                    "review %s: skipping diff record for repo %s without a checkpoint",
                    review_id,
                    repo_id,
                )
                continue
            checkpoint = 0
        result.setdefault(repo_id, []).append(
            RepoCheckpointDiff(
                checkpoint=int(checkpoint),
                diff=CheckpointDiff.from_dict(record.get("diffs") or {}),
            )
        )

    for diffs in result.values():
        diffs.sort(key=lambda d: d.checkpoint)

    logger.debug(
        "review %s: %d diff records across %d repos", review_id, len(records), len(result)
    )
    return result


def diff_for_checkpoint(
    diffs: List[RepoCheckpointDiff], checkpoint: int
) -> CheckpointDiff | None:
    for entry in diffs:
        if entry.checkpoint == checkpoint:
            return entry.diff
    return None
