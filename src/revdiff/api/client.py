"""HTTP client for the review API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from revdiff.review.errors import ReviewNotFound
from revdiff.review.models import Review

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the review API is unreachable or answers with an error."""


class ReviewApiClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not base_url:
            raise ApiError("review API base URL is not configured (set [api] base_url)")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str) -> Optional[Any]:
        """GET *path* and return the decoded JSON body, or None on 404."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s", url)
        try:
            with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
                response = client.get(url, headers=self._get_headers())
        except httpx.HTTPError as exc:
            raise ApiError(f"request to {url} failed: {exc}") from exc

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ApiError(f"{url} returned HTTP {response.status_code}") from exc
        except ValueError as exc:
            raise ApiError(f"{url} returned invalid JSON") from exc

    def get_review(self, review_id: str) -> Review:
        data = self._get(f"reviews/{review_id}")
        if not data or not data.get("review"):
            raise ReviewNotFound(review_id)
        return Review.from_dict(data["review"])

    def fetch_review_checkpoint_diffs(self, review_id: str) -> List[Dict[str, Any]]:
        """Return the flat list of ``{repoId, checkpoint, diffs}`` records for a review."""
        data = self._get(f"reviews/{review_id}/checkpoint-diffs")
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("diffs") or []
        return list(data)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        data = self._get(f"users/{user_id}")
        if not data:
            return None
        return data.get("user")
