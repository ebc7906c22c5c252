"""Patch application — apply a stored FilePatch to base text.

Stored diffs were computed against normalised text (LF line endings, no
BOM), so the base is normalised before any hunk is matched. Hunks must
match exactly; a hunk whose context is not at its declared position is
searched for outward from there, but never fuzzily.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from revdiff.git.models import FilePatch, Hunk, LineType

logger = logging.getLogger(__name__)


class PatchApplyError(Exception):
    """Raised when a patch does not match the base it is applied to."""


def normalize_file_contents(text: Optional[str]) -> str:
    """Normalise line endings to LF and drop a leading UTF-8 BOM."""
    if not text:
        return ""
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def find_file_patch(patches: Iterable[FilePatch], path: Optional[str]) -> Optional[FilePatch]:
    """Return the patch for *path*, matching new file names before old ones.

    Names are compared as stored; prefixes were dropped when the diff was decoded.
    """
    if path is None:
        return None
    candidates = list(patches)
    for patch in candidates:
        if patch.new_file_name == path:
            return patch
    for patch in candidates:
        if patch.old_file_name == path:
            return patch
    return None


def _split_lines(text: str) -> Tuple[List[str], bool]:
    """Split *text* into lines. Returns (lines, ends_with_newline)."""
    if text == "":
        return [], True
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
        return lines, True
    return lines, False


def _declared_position(hunk: Hunk) -> int:
    # A pure insertion (-N,0) goes after line N; otherwise line N is index N-1
    if hunk.old_lines == 0:
        return hunk.old_start
    return max(hunk.old_start - 1, 0)


def _matches_at(lines: List[str], expected: List[str], pos: int) -> bool:
    return lines[pos : pos + len(expected)] == expected


def _locate(lines: List[str], expected: List[str], start: int, floor: int) -> Optional[int]:
    """Find where *expected* occurs, nearest to *start* and not before *floor*."""
    last = len(lines) - len(expected)
    if last < floor:
        return None
    start = min(max(start, floor), last)
    if not expected:
        return start
    distance = 0
    while True:
        forward, backward = start + distance, start - distance
        in_range = False
        if forward <= last:
            in_range = True
            if _matches_at(lines, expected, forward):
                return forward
        if distance and backward >= floor:
            in_range = True
            if _matches_at(lines, expected, backward):
                return backward
        if not in_range:
            return None
        distance += 1


def apply_patch(base_text: str, patch: FilePatch) -> str:
    """Apply every hunk of *patch* to *base_text* and return the result.

    Raises PatchApplyError when a hunk's context cannot be found.
    """
    if patch.is_binary:
        raise PatchApplyError(
            f"cannot apply binary patch for {patch.new_file_name or patch.old_file_name}"
        )

    lines, ends_with_newline = _split_lines(base_text)
    offset = 0
    floor = 0

    for hunk in patch.hunks:
        old = hunk.old_content
        new = hunk.new_content
        expected = _declared_position(hunk) + offset
        pos = _locate(lines, old, expected, floor)
        if pos is None:
            raise PatchApplyError(
                f"hunk @@ -{hunk.old_start},{hunk.old_lines} "
                f"+{hunk.new_start},{hunk.new_lines} @@ does not apply to "
                f"{patch.old_file_name or patch.new_file_name or '<unknown>'}"
            )
        if pos != expected:
            logger.debug("hunk at line %d applied with offset %d", hunk.old_start, pos - expected)
        lines[pos : pos + len(old)] = new
        offset += (pos - expected) + len(new) - len(old)
        floor = pos + len(new)

        for line in hunk.lines:
            if not line.no_eol:
                continue
            if line.line_type != LineType.REMOVED:
                ends_with_newline = False
            elif not any(
                l.no_eol and l.line_type != LineType.REMOVED for l in hunk.lines
            ):
                ends_with_newline = True

    if not lines:
        return ""
    return "\n".join(lines) + ("\n" if ends_with_newline else "")


def apply_or_passthrough(base_text: Optional[str], patch: Optional[FilePatch]) -> str:
    """Normalise *base_text*, then apply *patch* if there is one."""
    normalized = normalize_file_contents(base_text)
    if patch is None:
        return normalized
    return apply_patch(normalized, patch)
