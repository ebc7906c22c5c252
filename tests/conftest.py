"""Shared test fixtures: sample diffs, payload builders and in-memory fakes."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from revdiff.git.models import Commit
from revdiff.review.cache import ReviewCache
from revdiff.review.models import Review
from revdiff.review.preconditions import PreconditionValidator
from revdiff.review.resolver import ContentResolver

REPO_ID = "repo1"
REPO_PATH = Path("/work/repo1")


# ── record builders ───────────────────────────────────────────────────────────


def new_file_diff(path: str, text: str) -> dict:
    """Stored diff record creating *path* with *text* (no trailing newline)."""
    return {
        "oldFileName": "/dev/null",
        "newFileName": path,
        "hunks": [
            {
                "oldStart": 0,
                "oldLines": 0,
                "newStart": 1,
                "newLines": 1,
                "lines": [f"+{text}", "\\ No newline at end of file"],
            }
        ],
    }


def patch_diff(old_path: str, new_path: str, patch: str) -> dict:
    """Stored diff record carrying a unified diff string."""
    return {"oldFileName": old_path, "newFileName": new_path, "patch": textwrap.dedent(patch)}


def file_entry(path: str, status: str = "M", old_file: Optional[str] = None) -> dict:
    return {"file": path, "oldFile": old_file or path, "statusX": status}


def changeset(checkpoint, files, in_checkpoint=None, repo_id: str = REPO_ID) -> dict:
    data = {"repoId": repo_id, "modifiedFiles": files}
    if checkpoint is not None:
        data["checkpoint"] = checkpoint
    if in_checkpoint is not None:
        data["modifiedFilesInCheckpoint"] = in_checkpoint
    return data


def diff_record(
    checkpoint,
    left_diffs=(),
    right_diffs=(),
    left_sha: str = "base0",
    right_sha: Optional[str] = None,
    repo_id: str = REPO_ID,
) -> dict:
    return {
        "repoId": repo_id,
        "checkpoint": checkpoint,
        "diffs": {
            "leftBaseSha": left_sha,
            "rightBaseSha": right_sha if right_sha is not None else left_sha,
            "leftBaseAuthor": "Ada",
            "rightBaseAuthor": "Grace",
            "leftDiffs": list(left_diffs),
            "rightDiffs": list(right_diffs),
        },
    }


# ── fake collaborators ────────────────────────────────────────────────────────


class FakeApi:
    """In-memory review API recording every call."""

    def __init__(self) -> None:
        self.reviews: Dict[str, dict] = {}
        self.diffs: Dict[str, List[dict]] = {}
        self.users: Dict[str, dict] = {}
        self.review_calls: List[str] = []
        self.diff_calls: List[str] = []

    def get_review(self, review_id: str) -> Review:
        from revdiff.review.errors import ReviewNotFound

        self.review_calls.append(review_id)
        if review_id not in self.reviews:
            raise ReviewNotFound(review_id)
        return Review.from_dict(self.reviews[review_id])

    def fetch_review_checkpoint_diffs(self, review_id: str) -> List[dict]:
        self.diff_calls.append(review_id)
        return list(self.diffs.get(review_id, []))

    def get_user(self, user_id: str) -> Optional[dict]:
        user = self.users.get(user_id)
        if isinstance(user, Exception):
            raise user
        return user


class FakeRepos:
    def __init__(self, paths: Optional[Dict[str, Path]] = None) -> None:
        self.paths = dict(paths if paths is not None else {REPO_ID: REPO_PATH})

    def local_path(self, repo_id: str) -> Optional[Path]:
        return self.paths.get(repo_id)


class FakeGit:
    """Version-control accessor backed by dicts, counting content fetches."""

    def __init__(self) -> None:
        self.files: Dict[Tuple[str, str], str] = {}
        self.commits: Set[str] = set()
        self.remote_commits: Set[str] = set()
        self.content_calls: List[Tuple[str, str]] = []
        self.fetch_calls = 0
        self.head_revisions: Dict[str, str] = {}

    def add_file(self, rel_path: str, sha: str, text: str) -> None:
        self.files[(str(REPO_PATH / rel_path), sha)] = text

    def get_file_content_for_revision(self, abs_path: Path, sha: str) -> Optional[str]:
        self.content_calls.append((str(abs_path), sha))
        return self.files.get((str(abs_path), sha))

    def get_file_current_revision(self, abs_path: Path) -> Optional[str]:
        return self.head_revisions.get(str(abs_path))

    def get_commit(self, repo_path: Path, sha: str) -> Optional[Commit]:
        if sha in self.commits:
            return Commit(sha=sha, author="Ada", email="ada@example.com", timestamp=0, message="m")
        return None

    def fetch_all_remotes(self, repo_path: Path) -> bool:
        self.fetch_calls += 1
        self.commits |= self.remote_commits
        return True


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def repos() -> FakeRepos:
    return FakeRepos()


@pytest.fixture
def resolver(api: FakeApi, repos: FakeRepos, fake_git: FakeGit) -> ContentResolver:
    return ContentResolver(ReviewCache(api.get_review), api, repos, fake_git)


@pytest.fixture
def validator(api: FakeApi, repos: FakeRepos, fake_git: FakeGit) -> PreconditionValidator:
    return PreconditionValidator(ReviewCache(api.get_review), api, repos, fake_git)


@pytest.fixture
def two_checkpoint_review(api: FakeApi) -> str:
    """``a.txt`` added at checkpoint 0 as "hello", rewritten at 1 as "hello world"."""
    api.reviews["r1"] = {
        "id": "r1",
        "title": "Greeting",
        "reviewChangesets": [
            changeset(0, [file_entry("a.txt", "A")], [file_entry("a.txt", "A")]),
            changeset(1, [file_entry("a.txt", "A")], [file_entry("a.txt", "A")]),
        ],
    }
    api.diffs["r1"] = [
        diff_record(0, right_diffs=[new_file_diff("a.txt", "hello")]),
        diff_record(1, right_diffs=[new_file_diff("a.txt", "hello world")]),
    ]
    return "r1"


# ── sample unified diffs ──────────────────────────────────────────────────────


@pytest.fixture
def sample_diff_modify() -> str:
    return textwrap.dedent("""\
        diff --git a/app.py b/app.py
        index 1234567..abcdef0 100644
        --- a/app.py
        +++ b/app.py
        @@ -1,3 +1,3 @@
         import os
        -DEBUG = False
        +DEBUG = True
         print(os.name)
    """)


@pytest.fixture
def sample_diff_new_file() -> str:
    return textwrap.dedent("""\
        diff --git a/hello.py b/hello.py
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/hello.py
        @@ -0,0 +1,2 @@
        +def greet(name):
        +    return f"Hello, {name}!"
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 97%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1,1 +1,2 @@
         x = 1
        +# New line added after rename
    """)


@pytest.fixture
def sample_diff_binary() -> str:
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_no_newline() -> str:
    return textwrap.dedent("""\
        diff --git a/data.txt b/data.txt
        index abc1234..def5678 100644
        --- a/data.txt
        +++ b/data.txt
        @@ -1,2 +1,2 @@
         first
        -second
        \\ No newline at end of file
        +second changed
        \\ No newline at end of file
    """)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    # Initial commit
    readme = tmp_path / "README.md"
    readme.write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    return tmp_path
