"""
Hunk Normalizer - Recompute unified diff hunk header counts from hunk bodies

LLM-authored patches routinely get the ``,count`` parts of ``@@`` headers
wrong. The counts are fully determined by the body, so they are rebuilt
rather than trusted.
"""

from __future__ import annotations

import re

from ..models.diff import DiffHunk

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
NO_NEWLINE_MARKER = "\\"


def split_patch_lines(patch: str) -> list[str]:
    """Split patch text into lines; a final newline ends the last line"""
    lines = patch.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def count_hunk_body(body: list[str]) -> tuple[int, int]:
    """Return (old_count, new_count) for a hunk body.

    A zero-length line counts as context on both sides. Lines that carry no
    recognised tag (e.g. ``\\ No newline at end of file``) are not counted.
    """
    old_count = new_count = 0
    for line in body:
        tag = line[:1]
        if tag in (" ", ""):
            old_count += 1
            new_count += 1
        elif tag == "-":
            old_count += 1
        elif tag == "+":
            new_count += 1
    return old_count, new_count


def parse_hunks(patch: str) -> list[DiffHunk]:
    """Parse every hunk in a patch. Text before the first header is ignored."""
    hunks: list[DiffHunk] = []
    current: DiffHunk | None = None

    for line in split_patch_lines(patch):
        match = HUNK_HEADER_RE.match(line)
        if match:
            old_start, old_count, new_start, new_count, suffix = match.groups()
            current = DiffHunk(
                old_start=int(old_start),
                old_count=int(old_count) if old_count is not None else 1,
                new_start=int(new_start),
                new_count=int(new_count) if new_count is not None else 1,
                header_suffix=suffix,
            )
            hunks.append(current)
        elif current is not None:
            current.lines.append(line)

    return hunks


def fix_patch_headers(patch: str) -> str:
    """Rewrite every hunk header with counts derived from its body.

    Pure, total and idempotent: non-header lines are copied through as-is and
    the header suffix (e.g. a function name annotation) is preserved.
    """
    lines = split_patch_lines(patch)
    trailing_newline = len(lines) < len(patch.split("\n"))
    output = list(lines)

    header_indices = [i for i, line in enumerate(lines) if HUNK_HEADER_RE.match(line)]
    for position, index in enumerate(header_indices):
        end = header_indices[position + 1] if position + 1 < len(header_indices) else len(lines)
        old_start, _, new_start, _, suffix = HUNK_HEADER_RE.match(lines[index]).groups()
        old_count, new_count = count_hunk_body(lines[index + 1 : end])
        output[index] = f"@@ -{old_start},{old_count} +{new_start},{new_count} @@{suffix}"

    fixed = "\n".join(output)
    return fixed + "\n" if trailing_newline else fixed
