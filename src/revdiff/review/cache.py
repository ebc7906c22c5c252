"""Review cache holding one settled snapshot or one pending fetch per review id.

Concurrent ``get`` calls for an id that is already being fetched wait on
the same Future instead of issuing another fetch. A failed fetch is not
cached; the next caller retries.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Iterable, Union

from revdiff.review.models import Review
from revdiff.review.normalize import normalize_review

logger = logging.getLogger(__name__)

_Entry = Union[Review, "Future[Review]"]


class ReviewCache:
    """Keyed, thread-safe cache in front of a review fetch function."""

    def __init__(self, fetch: Callable[[str], Review]) -> None:
        self._fetch = fetch
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, review_id: str) -> Review:
        with self._lock:
            entry = self._entries.get(review_id)
            if isinstance(entry, Review):
                logger.debug("review %s served from cache", review_id)
                return entry
            owner = entry is None
            if owner:
                entry = Future()
                self._entries[review_id] = entry

        if not owner:
            logger.debug("review %s already being fetched; waiting", review_id)
            return entry.result()

        try:
            review = normalize_review(self._fetch(review_id))
        except BaseException as exc:
            with self._lock:
                if self._entries.get(review_id) is entry:
                    del self._entries[review_id]
            entry.set_exception(exc)
            raise

        with self._lock:
            # An invalidate() during the fetch leaves the slot empty
            if self._entries.get(review_id) is entry:
                self._entries[review_id] = review
        entry.set_result(review)
        return review

    def invalidate(self, review_id: str) -> None:
        """Drop the cached snapshot so the next ``get`` refetches."""
        with self._lock:
            self._entries.pop(review_id, None)

    def reset(self, reviews: Iterable[Review]) -> None:
        """Replace the cache contents with *reviews*."""
        with self._lock:
            self._entries = {r.id: normalize_review(r) for r in reviews}

    def __contains__(self, review_id: str) -> bool:
        with self._lock:
            return isinstance(self._entries.get(review_id), Review)
