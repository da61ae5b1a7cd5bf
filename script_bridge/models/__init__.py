"""Models module - Pydantic data models"""

from .diff import DiffHunk
from .edit import (
    EditErrorKind,
    EditFailure,
    EditResult,
    LineInsert,
    LineOperation,
    LineReplace,
    PatchResult,
    RangeReplace,
)
from .script import (
    CachedScript,
    CallstackLocation,
    ErrorCodeContext,
    LineRange,
    ScriptError,
    ScriptFetchResult,
    ScriptUpdateResult,
    ScriptView,
    ScriptWriteResult,
    content_hash,
)

__all__ = [
    # Diff models
    "DiffHunk",
    # Edit models
    "EditErrorKind",
    "EditFailure",
    "EditResult",
    "PatchResult",
    "LineOperation",
    "LineReplace",
    "RangeReplace",
    "LineInsert",
    # Script models
    "CachedScript",
    "CallstackLocation",
    "ErrorCodeContext",
    "LineRange",
    "ScriptError",
    "ScriptFetchResult",
    "ScriptUpdateResult",
    "ScriptView",
    "ScriptWriteResult",
    "content_hash",
]
