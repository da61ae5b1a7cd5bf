"""Edit outcome and line operation models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EditErrorKind(str, Enum):
    """Categories of expected edit failures"""

    FORMAT_ERROR = "format_error"
    CONTEXT_MISMATCH = "context_mismatch"
    RANGE_ERROR = "range_error"
    AMBIGUITY_ERROR = "ambiguity_error"
    NOT_FOUND = "not_found"
    PATCH_ERROR = "patch_error"
    SIZE_LIMIT = "size_limit"


class EditFailure(BaseModel):
    """Why an edit failed and what the caller can do about it"""

    kind: EditErrorKind
    reason: str
    suggestion: str | None = None


class EditResult(BaseModel):
    """Outcome of a patch, string or line edit"""

    success: bool
    script: str | None = None
    error: str | None = None
    details: EditFailure | None = None
    normalized_patch: str | None = None  # Patch actually applied (patch edits only)

    @classmethod
    def ok(cls, script: str, normalized_patch: str | None = None) -> "EditResult":
        return cls(success=True, script=script, normalized_patch=normalized_patch)

    @classmethod
    def fail(
        cls,
        kind: EditErrorKind,
        error: str,
        reason: str,
        suggestion: str | None = None,
        normalized_patch: str | None = None,
    ) -> "EditResult":
        return cls(
            success=False,
            error=error,
            details=EditFailure(kind=kind, reason=reason, suggestion=suggestion),
            normalized_patch=normalized_patch,
        )


PatchResult = EditResult


class LineReplace(BaseModel):
    """Replace one line (1-based)"""

    line: int
    content: str


class RangeReplace(BaseModel):
    """Replace an inclusive 1-based line range with one or more lines"""

    start_line: int
    end_line: int
    content: str


class LineInsert(BaseModel):
    """Insert lines after a line (0 inserts at the top)"""

    line: int
    content: str


class LineOperation(BaseModel):
    """A line-level edit request. Exactly one field must be set."""

    replace_line: LineReplace | None = None
    replace_range: RangeReplace | None = None
    insert_after: LineInsert | None = None
    delete_lines: list[int] | None = None

    def requested(self) -> list[str]:
        """Names of the operation kinds present in this request"""
        return [
            name
            for name in ("replace_line", "replace_range", "insert_after", "delete_lines")
            if getattr(self, name) is not None
        ]
