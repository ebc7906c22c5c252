"""``revdiff://`` URIs naming one side of a review file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_URI_RE = re.compile(r"^revdiff://(\w+)/(\w+)/(\w+)/(\w+)/(.+)$")

VERSIONS = ("left", "right")


@dataclass(frozen=True)
class ReviewDiffUri:
    review_id: str
    checkpoint: Optional[int]
    repo_id: str
    version: str
    path: str


def parse_uri(uri: str) -> ReviewDiffUri:
    """Parse ``revdiff://<review>/<checkpoint|undefined>/<repo>/<version>/<path>``."""
    m = _URI_RE.match(uri)
    if m is None:
        raise ValueError(f"URI {uri} doesn't match revdiff format")
    review_id, checkpoint, repo_id, version, path = m.groups()
    if version not in VERSIONS:
        raise ValueError(f"URI {uri} has unknown version {version!r}")
    if checkpoint == "undefined":
        parsed_checkpoint = None
    elif checkpoint.isdigit():
        parsed_checkpoint = int(checkpoint)
    else:
        raise ValueError(f"URI {uri} has invalid checkpoint {checkpoint!r}")
    return ReviewDiffUri(review_id, parsed_checkpoint, repo_id, version, path)


def build_uri(
    review_id: str, checkpoint: Optional[int], repo_id: str, version: str, path: str
) -> str:
    cp = "undefined" if checkpoint is None else str(checkpoint)
    return f"revdiff://{review_id}/{cp}/{repo_id}/{version}/{path}"
