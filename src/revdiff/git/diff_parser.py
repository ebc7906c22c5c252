"""Unified diff parser — turns diff text into per-file patch records.

Handles ``git diff`` output (extended headers, renames, new/deleted files,
binary markers, mode-only changes) as well as bare ``---``/``+++`` patches.
Hunk bodies are consumed by their declared line counts so that removed lines
beginning with ``--`` are never mistaken for file headers.
"""

from __future__ import annotations

import re
from typing import Generator, Iterable, List, Optional, Tuple

from revdiff.git.models import FilePatch, FileStatus, Hunk, HunkLine, LineType

# --- Regex patterns for diff parsing ---

_DIFF_HEADER_RE = re.compile(r"^diff --git a/(.*) b/(.*)$")
_HUNK_HEADER_RE = re.compile(
    r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@"
)
_BINARY_RE = re.compile(r"^Binary files .* and .* differ$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_COPY_FROM_RE = re.compile(r"^copy from (.+)$")
_COPY_TO_RE = re.compile(r"^copy to (.+)$")
_NO_NEWLINE_RE = re.compile(r"^\\ No newline at end of file$")
_FILE_HEADER_OLD = re.compile(r"^--- (.+?)(?:\t.*)?$")
_FILE_HEADER_NEW = re.compile(r"^\+\+\+ (.+?)(?:\t.*)?$")
_SIMILARITY_RE = re.compile(r"^(?:dis)?similarity index \d+%$")
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_NEW_MODE_RE = re.compile(r"^new mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_NEW_FILE_RE = re.compile(r"^new file mode \d+$")
_INDEX_RE = re.compile(r"^index [0-9a-f]+\.\.[0-9a-f]+")

DEV_NULL = "/dev/null"


class DiffParseError(ValueError):
    """Raised when a hunk header or body is malformed."""


def _real_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    name = name.strip()
    if name == DEV_NULL or not name:
        return None
    return name


def strip_path_prefixes(
    old_name: Optional[str], new_name: Optional[str], *, require_both: bool = False
) -> Tuple[Optional[str], Optional[str]]:
    """Drop git's ``a/``/``b/`` prefixes from an old/new name pair.

    The prefixes are removed only when every present name carries its own
    side's prefix (``a/`` old, ``b/`` new), so a path under a top-level
    ``a/`` or ``b/`` directory survives. With *require_both* a lone name
    beside ``/dev/null`` is never stripped. ``/dev/null`` becomes None.
    """
    old, new = _real_name(old_name), _real_name(new_name)
    present = [(n, p) for n, p in ((old, "a/"), (new, "b/")) if n is not None]
    if not present or (require_both and len(present) < 2):
        return old, new
    if all(n.startswith(p) for n, p in present):
        old = old[2:] if old is not None else None
        new = new[2:] if new is not None else None
    return old, new


def parse_hunk_lines(raw_lines: Iterable[str]) -> List[HunkLine]:
    """Convert prefixed body lines (``+x``, ``-y``, `` z``, ``\\ ...``) to HunkLines."""
    lines: List[HunkLine] = []
    for raw in raw_lines:
        if _NO_NEWLINE_RE.match(raw) or raw.startswith("\\"):
            if lines:
                last = lines[-1]
                lines[-1] = HunkLine(last.line_type, last.content, no_eol=True)
            continue
        if raw.startswith("+"):
            lines.append(HunkLine(LineType.ADDED, raw[1:]))
        elif raw.startswith("-"):
            lines.append(HunkLine(LineType.REMOVED, raw[1:]))
        elif raw.startswith(" "):
            lines.append(HunkLine(LineType.CONTEXT, raw[1:]))
        elif raw == "":
            # Some tools strip the leading space from blank context lines
            lines.append(HunkLine(LineType.CONTEXT, ""))
        else:
            raise DiffParseError(f"unexpected hunk line: {raw!r}")
    return lines


class DiffParser:
    """Parse unified diff text and yield one FilePatch per file.

    Usage::

        for patch in DiffParser(diff_text).parse():
            print(patch.new_file_name, len(patch.hunks))
    """

    def __init__(self, diff_text: str) -> None:
        self._lines = diff_text.splitlines()

    def parse(self) -> Generator[FilePatch, None, None]:
        idx = 0
        total = len(self._lines)

        while idx < total:
            raw_line = self._lines[idx]
            m = _DIFF_HEADER_RE.match(raw_line)
            if m is None and not _FILE_HEADER_OLD.match(raw_line):
                # Preamble (commit message, "Index:" lines, "====" rulers)
                idx += 1
                continue

            old_file: Optional[str] = None
            new_file: Optional[str] = None
            status = FileStatus.MODIFIED
            is_binary = False

            if m:
                old_file, new_file = m.group(1), m.group(2)
                idx += 1

                # Parse sub-headers (index, mode changes, renames, new/deleted file)
                while idx < total:
                    sub = self._lines[idx]
                    if _INDEX_RE.match(sub) or _SIMILARITY_RE.match(sub):
                        idx += 1
                        continue
                    if _OLD_MODE_RE.match(sub) or _NEW_MODE_RE.match(sub):
                        idx += 1
                        continue
                    if _DELETED_FILE_RE.match(sub):
                        status = FileStatus.DELETED
                        idx += 1
                        continue
                    if _NEW_FILE_RE.match(sub):
                        status = FileStatus.ADDED
                        idx += 1
                        continue
                    if (rm := _RENAME_FROM_RE.match(sub)):
                        old_file = rm.group(1)
                        status = FileStatus.RENAMED
                        idx += 1
                        continue
                    if (rt := _RENAME_TO_RE.match(sub)):
                        new_file = rt.group(1)
                        idx += 1
                        continue
                    if (cm := _COPY_FROM_RE.match(sub)):
                        old_file = cm.group(1)
                        status = FileStatus.COPIED
                        idx += 1
                        continue
                    if (ct := _COPY_TO_RE.match(sub)):
                        new_file = ct.group(1)
                        idx += 1
                        continue
                    if _BINARY_RE.match(sub):
                        is_binary = True
                        idx += 1
                        continue
                    break  # not a sub-header → stop

                if status == FileStatus.ADDED:
                    old_file = None
                elif status == FileStatus.DELETED:
                    new_file = None

            # --- File headers (--- a/ and +++ b/) ---
            if idx < total and (fo := _FILE_HEADER_OLD.match(self._lines[idx])):
                if idx + 1 < total and (fn := _FILE_HEADER_NEW.match(self._lines[idx + 1])):
                    old_file, new_file = strip_path_prefixes(fo.group(1), fn.group(1))
                    if old_file is None:
                        status = FileStatus.ADDED
                    elif new_file is None:
                        status = FileStatus.DELETED
                    idx += 2
                elif m is None:
                    idx += 1
                    continue

            hunks: List[Hunk] = []
            while idx < total:
                hm = _HUNK_HEADER_RE.match(self._lines[idx])
                if hm is None:
                    break
                hunk, idx = self._read_hunk(hm, idx + 1, total)
                hunks.append(hunk)

            yield FilePatch(
                old_file_name=old_file,
                new_file_name=new_file,
                hunks=hunks,
                status=status,
                is_binary=is_binary,
            )

    def _read_hunk(self, hm: re.Match[str], idx: int, total: int) -> tuple[Hunk, int]:
        """Consume one hunk body starting at *idx*. Returns (hunk, next_idx)."""
        old_start = int(hm.group(1))
        old_count = int(hm.group(2)) if hm.group(2) is not None else 1
        new_start = int(hm.group(3))
        new_count = int(hm.group(4)) if hm.group(4) is not None else 1

        old_left, new_left = old_count, new_count
        body: List[str] = []
        while idx < total and (old_left > 0 or new_left > 0):
            line = self._lines[idx]
            if line.startswith("+"):
                new_left -= 1
            elif line.startswith("-"):
                old_left -= 1
            elif line.startswith(" ") or line == "":
                old_left -= 1
                new_left -= 1
            elif not line.startswith("\\"):
                break
            body.append(line)
            idx += 1

        if old_left > 0 or new_left > 0:
            raise DiffParseError(
                f"hunk @@ -{old_start},{old_count} +{new_start},{new_count} @@ is truncated"
            )

        # Trailing "\ No newline at end of file" belongs to this hunk
        if idx < total and _NO_NEWLINE_RE.match(self._lines[idx]):
            body.append(self._lines[idx])
            idx += 1

        hunk = Hunk(
            old_start=old_start,
            old_lines=old_count,
            new_start=new_start,
            new_lines=new_count,
            lines=parse_hunk_lines(body),
        )
        return hunk, idx
