"""
Line Editor - Bounds-checked line operations over a script

All line numbers are 1-based. Every operation returns an EditResult; an
out-of-range line is a RANGE_ERROR value naming the valid range.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..models.edit import EditErrorKind, EditResult, LineOperation

RANGE_SUGGESTION = "Re-read the script with get_script to check current line numbers"


def _range_error(error: str, reason: str) -> EditResult:
    return EditResult.fail(EditErrorKind.RANGE_ERROR, error, reason, RANGE_SUGGESTION)


def _as_lines(script: str | Iterable[str]) -> list[str]:
    if isinstance(script, str):
        return script.split("\n")
    return list(script)


def fix_line_in_script(script: str | Iterable[str], line: int, content: str) -> EditResult:
    """Replace exactly one line; the line count is unchanged"""
    lines = _as_lines(script)
    if line < 1 or line > len(lines):
        return _range_error(
            f"Line {line} out of range (valid: 1-{len(lines)})",
            f"The script has {len(lines)} lines",
        )

    lines[line - 1] = content
    return EditResult.ok("\n".join(lines))


def replace_line_range(script: str | Iterable[str], start_line: int, end_line: int, content: str) -> EditResult:
    """Replace lines start_line..end_line (inclusive) with content split on newlines"""
    lines = _as_lines(script)
    if not 1 <= start_line <= end_line <= len(lines):
        return _range_error(
            f"Invalid range {start_line}-{end_line} (valid: 1-{len(lines)})",
            "start_line must be >= 1, end_line must be >= start_line and <= the line count",
        )

    lines[start_line - 1 : end_line] = content.split("\n")
    return EditResult.ok("\n".join(lines))


def insert_after_line(script: str | Iterable[str], line: int, content: str) -> EditResult:
    """Insert content after a line; line 0 inserts at the top"""
    lines = _as_lines(script)
    if line < 0 or line > len(lines):
        return _range_error(
            f"Insert position {line} out of range (valid: 0-{len(lines)})",
            "Use 0 to insert before the first line",
        )

    lines[line:line] = content.split("\n")
    return EditResult.ok("\n".join(lines))


def delete_lines(script: str | Iterable[str], line_numbers: Iterable[int]) -> EditResult:
    """Delete a set of lines"""
    lines = _as_lines(script)
    targets = sorted(set(line_numbers), reverse=True)
    if not targets:
        return EditResult.fail(
            EditErrorKind.FORMAT_ERROR,
            "No lines to delete",
            "delete_lines must list at least one line number",
        )

    invalid = [n for n in targets if n < 1 or n > len(lines)]
    if invalid:
        listed = ", ".join(str(n) for n in sorted(invalid))
        noun = "Line" if len(invalid) == 1 else "Lines"
        return _range_error(
            f"{noun} {listed} out of range (valid: 1-{len(lines)})",
            f"The script has {len(lines)} lines",
        )

    # Highest first so earlier deletions never shift later indices
    for number in targets:
        del lines[number - 1]
    return EditResult.ok("\n".join(lines))


def apply_line_operation(script: str | Iterable[str], operation: LineOperation) -> EditResult:
    """Dispatch a LineOperation; exactly one kind must be requested"""
    requested = operation.requested()
    if len(requested) != 1:
        return EditResult.fail(
            EditErrorKind.FORMAT_ERROR,
            f"Expected exactly one line operation, got {len(requested)}",
            "Provide exactly one of replace_line, replace_range, insert_after or delete_lines",
        )

    if operation.replace_line is not None:
        op = operation.replace_line
        return fix_line_in_script(script, op.line, op.content)
    if operation.replace_range is not None:
        op = operation.replace_range
        return replace_line_range(script, op.start_line, op.end_line, op.content)
    if operation.insert_after is not None:
        op = operation.insert_after
        return insert_after_line(script, op.line, op.content)
    return delete_lines(script, operation.delete_lines)
