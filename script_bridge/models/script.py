"""Script, store response and error context models"""

from __future__ import annotations

import hashlib
import time

from pydantic import BaseModel, ConfigDict

from .edit import EditResult

HASH_LENGTH = 16


def content_hash(content: str) -> str:
    """Short fixed-length digest of script content"""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:HASH_LENGTH]


class CachedScript(BaseModel):
    """Last known content of one script section"""

    model_config = ConfigDict(frozen=True)

    content: str
    lines: tuple[str, ...]
    hash: str
    timestamp: float

    @classmethod
    def from_content(cls, content: str) -> "CachedScript":
        return cls(
            content=content,
            lines=tuple(content.split("\n")),
            hash=content_hash(content),
            timestamp=time.time(),
        )


class CallstackLocation(BaseModel):
    """Location parsed from a runtime callstack entry"""

    callback: str
    module_id: str
    line: int
    column: int


class ErrorCodeContext(BaseModel):
    """Numbered source excerpt around an error location"""

    callback: str
    line: int
    column: int
    code: str


class ScriptError(BaseModel):
    """Error reported by the script runtime"""

    error_message: str
    callstack: list[str] = []
    code_context: ErrorCodeContext | None = None
    suggestion: str | None = None


class ScriptFetchResult(BaseModel):
    """Response from fetching a script"""

    success: bool
    module_id: str
    callback: str | None = None
    script: str = ""
    logs: list[str] = []
    errors: list[ScriptError] = []


class ScriptWriteResult(BaseModel):
    """Response from writing or recompiling a script"""

    success: bool
    result: str | None = None
    logs: list[str] = []
    errors: list[ScriptError] = []


class LineRange(BaseModel):
    """1-based inclusive line window of a partial read"""

    start: int
    end: int
    total: int


class ScriptView(BaseModel):
    """Script content returned to a caller, possibly sliced"""

    module_id: str
    callback: str | None = None
    script: str
    hash: str
    line_count: int
    line_range: LineRange | None = None


class ScriptUpdateResult(BaseModel):
    """Outcome of a mutation routed through the script editor"""

    success: bool
    module_id: str
    callback: str | None = None
    edit: EditResult
    compiled: bool = False
    hash: str | None = None
    line_count: int | None = None
    diff: str | None = None
    logs: list[str] = []
    errors: list[ScriptError] = []
