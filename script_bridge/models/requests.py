"""Scripts API request models"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .edit import LineOperation


class ScriptTarget(BaseModel):
    """Which script a request addresses"""

    module_id: str
    callback: str | None = None


class GetScriptRequest(ScriptTarget):
    start_line: int | None = Field(None, ge=1)
    end_line: int | None = Field(None, ge=1)


class SetScriptRequest(ScriptTarget):
    script: str
    compile: bool = True


class PatchScriptRequest(ScriptTarget):
    patch: str
    fuzz_factor: int | None = Field(None, ge=0)  # None uses editing.fuzzFactor
    compile: bool = True
    refresh: bool = False


class EditScriptRequest(ScriptTarget):
    old_string: str
    new_string: str
    replace_all: bool = False
    compile: bool = True
    refresh: bool = False


class FixScriptLinesRequest(ScriptTarget):
    operation: LineOperation
    compile: bool = True
    refresh: bool = False


class RecompileRequest(BaseModel):
    module_id: str
