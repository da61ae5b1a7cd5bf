"""String Editor - Exact substring replacement with a uniqueness check"""

from __future__ import annotations

from ..models.edit import EditErrorKind, EditResult


def edit_string_in_script(
    script: str,
    old_string: str,
    new_string: str,
    replace_all: bool = False,
) -> EditResult:
    """Replace old_string with new_string.

    Fails when old_string is absent, or when it occurs more than once and
    replace_all is not set.
    """
    if not old_string:
        return EditResult.fail(
            EditErrorKind.FORMAT_ERROR,
            "old_string must not be empty",
            "An empty search string matches everywhere",
        )

    if old_string not in script:
        return EditResult.fail(
            EditErrorKind.NOT_FOUND,
            "old_string not found in script",
            "The exact text was not found (whitespace and indentation must match)",
            "Re-read the script with get_script and copy the text exactly",
        )

    occurrences = len(script.split(old_string)) - 1
    if occurrences > 1 and not replace_all:
        return EditResult.fail(
            EditErrorKind.AMBIGUITY_ERROR,
            f"old_string found {occurrences} times in script",
            "The replacement target is ambiguous",
            "Set replace_all=true to replace every occurrence, or include more surrounding context to make it unique",
        )

    if replace_all:
        return EditResult.ok(script.replace(old_string, new_string))
    return EditResult.ok(script.replace(old_string, new_string, 1))
