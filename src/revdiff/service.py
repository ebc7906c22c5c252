"""Request boundary — wires collaborators and returns structured results.

Everything below this layer raises; everything returned from here is a
plain dict suitable for JSON output, with failures reported as
``{"success": False, "error": {"type": ..., "message": ...}}``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from revdiff.api.client import ApiError, ReviewApiClient
from revdiff.config.schema import RevdiffConfig
from revdiff.git.adapter import GitAccessor, GitError
from revdiff.git.patch import PatchApplyError
from revdiff.repos.registry import MappingsError, RepositoryMappings, RepositoryRegistry
from revdiff.review.cache import ReviewCache
from revdiff.review.errors import CommitNotFound, NotFoundError, PayloadError
from revdiff.review.preconditions import PreconditionValidator
from revdiff.review.resolver import ContentResolver
from revdiff.review.uri import parse_uri

logger = logging.getLogger(__name__)

_HANDLED = (
    NotFoundError,
    CommitNotFound,
    PayloadError,
    PatchApplyError,
    ApiError,
    GitError,
    MappingsError,
    ValueError,
)


def _failure(exc: Exception) -> Dict[str, Any]:
    error_type = getattr(exc, "error_type", None)
    if error_type is None:
        error_type = {
            PatchApplyError: "PATCH_APPLY_ERROR",
            ApiError: "API_ERROR",
            GitError: "GIT_ERROR",
            MappingsError: "MAPPINGS_ERROR",
        }.get(type(exc), "INVALID_REQUEST")
    return {"success": False, "error": {"type": error_type, "message": str(exc)}}


class ReviewService:
    def __init__(
        self,
        api: ReviewApiClient,
        cache: ReviewCache,
        resolver: ContentResolver,
        validator: PreconditionValidator,
        registry: RepositoryRegistry,
    ) -> None:
        self.api = api
        self.cache = cache
        self.resolver = resolver
        self.validator = validator
        self.registry = registry

    def get_contents(
        self, review_id: str, repo_id: str, checkpoint: Optional[int], path: str
    ) -> Dict[str, Any]:
        try:
            pair = self.resolver.resolve_contents(review_id, repo_id, checkpoint, path)
        except _HANDLED as exc:
            return _failure(exc)
        return {"success": True, **pair.to_dict()}

    def get_uri_contents(self, uri: str) -> Dict[str, Any]:
        """Resolve the side of a file named by a ``revdiff://`` URI."""
        try:
            parsed = parse_uri(uri)
        except ValueError as exc:
            return _failure(exc)
        result = self.get_contents(parsed.review_id, parsed.repo_id, parsed.checkpoint, parsed.path)
        if result["success"] and not result.get("fileNotIncludedInReview"):
            result["contents"] = result[parsed.version]
        return result

    def get_all_contents(self, review_id: str, checkpoint: Optional[int]) -> Dict[str, Any]:
        try:
            repos = self.resolver.resolve_all_contents(review_id, checkpoint)
        except _HANDLED as exc:
            return _failure(exc)
        return {"success": True, "repos": [asdict(r) for r in repos]}

    def get_local_contents(
        self,
        repo_id: str,
        path: str,
        base_sha: str,
        right_version: str,
        editing_review_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            pair = self.resolver.resolve_local_contents(
                repo_id, path, base_sha, right_version, editing_review_id=editing_review_id
            )
        except _HANDLED as exc:
            return _failure(exc)
        return {"success": True, **pair.to_dict()}

    def check_preconditions(self, review_id: str) -> Dict[str, Any]:
        try:
            return self.validator.check(review_id).to_dict()
        except _HANDLED as exc:
            return _failure(exc)

    def remember_repository(self, repo_id: str, local_path: Path) -> Dict[str, Any]:
        try:
            self.registry.mappings.set(repo_id, local_path.resolve())
        except MappingsError as exc:
            return _failure(exc)
        return {"success": True}

    def review_approvers(self, review_id: str) -> List[str]:
        """Best-effort user names of a review's approvers."""
        review = self.cache.get(review_id)
        names: List[str] = []
        for user_id in review.approved_by:
            try:
                user = self.api.get_user(user_id)
            except Exception as exc:
                logger.debug("could not resolve approver %s: %s", user_id, exc)
                continue
            if user and user.get("username"):
                names.append(user["username"])
        return names

    def invalidate(self, review_id: str) -> None:
        """Forget a cached review, e.g. after it was amended elsewhere."""
        self.cache.invalidate(review_id)


def build_service(config: RevdiffConfig, *, api: Optional[ReviewApiClient] = None) -> ReviewService:
    """Create a ReviewService from configuration."""
    api = api or ReviewApiClient(config.api.base_url, config.api.token, config.api.timeout)
    git = GitAccessor(timeout=config.git.timeout, fetch_timeout=config.git.fetch_timeout)
    registry = RepositoryRegistry(
        config.repositories,
        RepositoryMappings(Path(config.mappings.file).expanduser()),
    )
    cache = ReviewCache(api.get_review)
    resolver = ContentResolver(cache, api, registry, git)
    validator = PreconditionValidator(
        cache,
        api,
        registry,
        git,
        fetch_on_missing_commit=config.git.fetch_on_missing_commit,
    )
    return ReviewService(api, cache, resolver, validator, registry)
