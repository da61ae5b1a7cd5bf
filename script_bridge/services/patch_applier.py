"""
Patch Applier - Apply (possibly sloppy) unified diffs to script text

Fuzz semantics: ``fuzz_factor`` is the number of old-side lines (context or
removed) in a hunk that may differ from the script at the chosen position.
Candidate positions are tried nearest-first around the header's line number,
after the end of the previous hunk. An exact match anywhere wins over a fuzzy
one. Where a context line mismatched, the script's own line is kept.
"""

from __future__ import annotations

import logging

from ..models.diff import DiffHunk
from ..models.edit import EditErrorKind, PatchResult
from .hunk_normalizer import NO_NEWLINE_MARKER, fix_patch_headers, parse_hunks

logger = logging.getLogger(__name__)

DEFAULT_FUZZ_FACTOR = 0


class PatchFormatError(Exception):
    """Raised when a hunk body contains a line the applier cannot interpret"""


class HunkMismatchError(Exception):
    """Raised when a hunk cannot be located in the script"""

    def __init__(self, index: int, hunk: DiffHunk):
        super().__init__(f"Hunk {index + 1} ({hunk.header}) does not match the script")
        self.index = index
        self.hunk = hunk


def _split_hunk(hunk: DiffHunk) -> tuple[list[tuple[str, str]], list[str]]:
    """Return (old-side tagged lines, full tagged body) without markers"""
    body: list[tuple[str, str]] = []
    for line in hunk.lines:
        tag = line[:1]
        if tag == "":
            body.append((" ", ""))
        elif tag in (" ", "-", "+"):
            body.append((tag, line[1:]))
        elif tag == NO_NEWLINE_MARKER:
            continue
        else:
            raise PatchFormatError(f"Unknown line in hunk {hunk.header}: {line!r}")
    old_side = [(tag, text) for tag, text in body if tag != "+"]
    return old_side, body


def _mismatches(lines: list[str], position: int, old_side: list[tuple[str, str]], limit: int) -> int | None:
    """Count differing lines at position, or None once the limit is exceeded"""
    errors = 0
    for offset, (_, text) in enumerate(old_side):
        if lines[position + offset] != text:
            errors += 1
            if errors > limit:
                return None
    return errors


def _candidate_positions(expected: int, low: int, high: int):
    """Positions in [low, high] ordered by distance from expected"""
    if high < low:
        return
    expected = min(max(expected, low), high)
    yield expected
    distance = 1
    while expected - distance >= low or expected + distance <= high:
        if expected + distance <= high:
            yield expected + distance
        if expected - distance >= low:
            yield expected - distance
        distance += 1


def _locate(lines: list[str], expected: int, low: int, old_side: list[tuple[str, str]], fuzz_factor: int) -> int | None:
    high = len(lines) - len(old_side)
    for limit in sorted({0, fuzz_factor}):
        for position in _candidate_positions(expected, low, high):
            if _mismatches(lines, position, old_side, limit) is not None:
                return position
    return None


def apply_hunks(script: str, hunks: list[DiffHunk], fuzz_factor: int = DEFAULT_FUZZ_FACTOR) -> str:
    """Apply parsed hunks in order and return the new script text"""
    lines = script.split("\n")
    offset = 0  # Net lines added by hunks applied so far
    floor = 0  # First index a later hunk may touch

    for index, hunk in enumerate(hunks):
        old_side, body = _split_hunk(hunk)

        if not old_side:
            position = min(max(hunk.old_start + offset, floor), len(lines))
        else:
            expected = hunk.old_start - 1 + offset
            position = _locate(lines, expected, floor, old_side, fuzz_factor)
            if position is None:
                raise HunkMismatchError(index, hunk)
            if position != expected:
                logger.debug("[PatchApplier] Hunk %d applied at offset %+d", index + 1, position - expected)

        replacement: list[str] = []
        cursor = position
        for tag, text in body:
            if tag == " ":
                replacement.append(lines[cursor])
                cursor += 1
            elif tag == "-":
                cursor += 1
            else:
                replacement.append(text)

        lines[position:cursor] = replacement
        offset += len(replacement) - (cursor - position)
        floor = position + len(replacement)

    return "\n".join(lines)


class PatchApplier:
    """Validate, normalize and apply unified diff patches"""

    def __init__(self, default_fuzz_factor: int = DEFAULT_FUZZ_FACTOR):
        if default_fuzz_factor < 0:
            raise ValueError("fuzz factor must be >= 0")
        self.default_fuzz_factor = default_fuzz_factor

    def apply(self, script: str, patch: str, fuzz_factor: int | None = None) -> PatchResult:
        """Apply a patch to a script; never raises for bad input"""
        fuzz = self.default_fuzz_factor if fuzz_factor is None else fuzz_factor

        if not patch or not patch.strip():
            return PatchResult.fail(
                EditErrorKind.FORMAT_ERROR,
                "Empty patch provided",
                "The patch string is empty",
                "Provide a valid unified diff patch",
            )

        if "@@" not in patch:
            return PatchResult.fail(
                EditErrorKind.FORMAT_ERROR,
                "Invalid patch format",
                "Patch does not contain unified diff hunk headers (@@)",
                "Ensure the patch is in unified diff format with @@ markers",
            )

        if fuzz < 0:
            return PatchResult.fail(
                EditErrorKind.FORMAT_ERROR,
                "Invalid fuzz factor",
                f"fuzz_factor must be >= 0 (got {fuzz})",
            )

        normalized = fix_patch_headers(patch)
        hunks = parse_hunks(normalized)
        if not hunks:
            return PatchResult.fail(
                EditErrorKind.FORMAT_ERROR,
                "Invalid patch format",
                "No parsable hunk header of the form @@ -a,b +c,d @@ was found",
                "Ensure the patch is in unified diff format with @@ markers",
            )

        try:
            new_script = apply_hunks(script, hunks, fuzz)
        except HunkMismatchError as e:
            return PatchResult.fail(
                EditErrorKind.CONTEXT_MISMATCH,
                "Patch failed to apply",
                f"Context mismatch - {e}",
                "Re-read the script with get_script and regenerate the patch, or increase fuzz_factor",
                normalized_patch=normalized,
            )
        except Exception as e:
            logger.warning("[PatchApplier] Unexpected error applying patch: %s", e)
            return PatchResult.fail(
                EditErrorKind.PATCH_ERROR,
                f"Patch error: {e}",
                "An exception occurred while applying the patch",
                "Check the patch format and try again",
                normalized_patch=normalized,
            )

        return PatchResult.ok(new_script, normalized_patch=normalized)


def apply_patch_to_script(script: str, patch: str, fuzz_factor: int = DEFAULT_FUZZ_FACTOR) -> PatchResult:
    """Apply a patch with an explicit fuzz factor"""
    return PatchApplier().apply(script, patch, fuzz_factor)
