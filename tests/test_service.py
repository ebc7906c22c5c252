"""Tests for the request boundary and its structured results."""

import pytest

from conftest import REPO_ID, changeset, diff_record, file_entry
from revdiff.api.client import ApiError
from revdiff.config.schema import RevdiffConfig
from revdiff.repos.registry import RepositoryMappings, RepositoryRegistry
from revdiff.review.cache import ReviewCache
from revdiff.review.preconditions import PreconditionValidator
from revdiff.review.resolver import ContentResolver
from revdiff.service import ReviewService, build_service


@pytest.fixture
def service(api, repos, fake_git, tmp_path) -> ReviewService:
    cache = ReviewCache(api.get_review)
    registry = RepositoryRegistry({}, RepositoryMappings(tmp_path / "mappings.yml"))
    return ReviewService(
        api,
        cache,
        ContentResolver(cache, api, repos, fake_git),
        PreconditionValidator(cache, api, repos, fake_git),
        registry,
    )


class TestContents:
    def test_success(self, service, two_checkpoint_review):
        result = service.get_contents(two_checkpoint_review, REPO_ID, 1, "a.txt")
        assert result == {"success": True, "left": "hello", "right": "hello world"}

    def test_not_included(self, service, two_checkpoint_review):
        result = service.get_contents(two_checkpoint_review, REPO_ID, None, "other.txt")
        assert result == {"success": True, "fileNotIncludedInReview": True}

    def test_review_not_found(self, service):
        result = service.get_contents("missing", REPO_ID, None, "a.txt")
        assert result["success"] is False
        assert result["error"]["type"] == "REVIEW_NOT_FOUND"

    def test_patch_failure_is_reported(self, service, api, fake_git):
        api.reviews["r"] = {"id": "r", "reviewChangesets": [changeset(0, [file_entry("f")], [file_entry("f")])]}
        api.diffs["r"] = [
            diff_record(
                0,
                right_diffs=[{"oldFileName": "f", "newFileName": "f", "patch": "--- f\n+++ f\n@@ -1 +1 @@\n-x\n+y\n"}],
            )
        ]
        fake_git.add_file("f", "base0", "not x\n")
        result = service.get_contents("r", REPO_ID, 0, "f")
        assert result["error"]["type"] == "PATCH_APPLY_ERROR"

    def test_malformed_hunk_is_reported(self, service, api):
        api.reviews["r"] = {"id": "r", "reviewChangesets": [changeset(0, [file_entry("f")], [file_entry("f")])]}
        hunk = {"oldLines": 1, "newStart": 1, "newLines": 1, "lines": ["-x", "+y"]}
        api.diffs["r"] = [
            diff_record(0, right_diffs=[{"oldFileName": "f", "newFileName": "f", "hunks": [hunk]}])
        ]
        result = service.get_contents("r", REPO_ID, 0, "f")
        assert result["success"] is False
        assert result["error"]["type"] == "INVALID_PAYLOAD"
        assert "oldStart" in result["error"]["message"]

    def test_changeset_without_repo_id_is_reported(self, service, api):
        api.reviews["r"] = {"id": "r", "reviewChangesets": [{"checkpoint": 0, "modifiedFiles": []}]}
        result = service.get_contents("r", REPO_ID, 0, "f")
        assert result["error"]["type"] == "INVALID_PAYLOAD"


class TestUriContents:
    def test_picks_requested_side(self, service, two_checkpoint_review):
        result = service.get_uri_contents(f"revdiff://{two_checkpoint_review}/1/{REPO_ID}/left/a.txt")
        assert result["contents"] == "hello"

    def test_bad_uri(self, service):
        result = service.get_uri_contents("nope://x")
        assert result["success"] is False
        assert result["error"]["type"] == "INVALID_REQUEST"


class TestAllContents:
    def test_serialisable_repos(self, service, two_checkpoint_review):
        result = service.get_all_contents(two_checkpoint_review, None)
        assert result["success"] is True
        [repo] = result["repos"]
        assert repo["repo_id"] == REPO_ID
        assert repo["files"][0]["right"] == "hello world"
        assert repo["files"][0]["error"] is None


class TestPreconditions:
    def test_structured_failure(self, service, api, fake_git):
        api.reviews["r"] = {"id": "r", "reviewChangesets": []}
        api.diffs["r"] = [diff_record(0, left_sha="deadbeefcafe")]
        result = service.check_preconditions("r")
        assert result["success"] is False
        assert result["error"]["type"] == "COMMIT_NOT_FOUND"

    def test_no_diffs_is_structured(self, service, api):
        api.reviews["r"] = {"id": "r", "reviewChangesets": []}
        result = service.check_preconditions("r")
        assert result["error"]["type"] == "REVIEW_DIFFS_NOT_FOUND"

    def test_diff_record_without_repo_id_is_structured(self, service, api):
        api.reviews["r"] = {"id": "r", "reviewChangesets": []}
        record = diff_record(0)
        del record["repoId"]
        api.diffs["r"] = [record]
        result = service.check_preconditions("r")
        assert result["success"] is False
        assert result["error"]["type"] == "INVALID_PAYLOAD"


class TestApprovers:
    def test_skips_unresolvable_users(self, service, api):
        api.reviews["r"] = {"id": "r", "approvedBy": {"u1": True, "u2": True, "u3": True}}
        api.users["u1"] = {"username": "ada"}
        api.users["u2"] = ApiError("boom")
        assert service.review_approvers("r") == ["ada"]


class TestRemember:
    def test_remember_repository(self, service, tmp_path):
        assert service.remember_repository("repo9", tmp_path) == {"success": True}
        assert service.registry.local_path("repo9") == tmp_path.resolve()


class TestBuildService:
    def test_wires_configured_repositories(self, api, tmp_path):
        config = RevdiffConfig()
        config.repositories = {REPO_ID: str(tmp_path)}
        config.mappings.file = str(tmp_path / "m.yml")
        svc = build_service(config, api=api)
        assert svc.registry.local_path(REPO_ID) == tmp_path
        assert svc.api is api
