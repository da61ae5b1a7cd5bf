"""Script editing API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ..models.requests import (
    EditScriptRequest,
    FixScriptLinesRequest,
    GetScriptRequest,
    PatchScriptRequest,
    RecompileRequest,
    SetScriptRequest,
)
from ..models.script import ScriptUpdateResult, ScriptView, ScriptWriteResult
from ..services.script_editor import ScriptEditor
from ..services.script_store import ScriptStoreError

router = APIRouter()


def get_script_editor(request: Request) -> ScriptEditor:
    """The editor created at startup"""
    editor = getattr(request.app.state, "script_editor", None)
    if editor is None:
        raise HTTPException(status_code=503, detail="Script editor not initialized")
    return editor


def store_unavailable(error: ScriptStoreError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(error))


@router.post("/get", response_model=ScriptView)
async def get_script(request: GetScriptRequest, editor: ScriptEditor = Depends(get_script_editor)) -> ScriptView:
    """Read a script, optionally a line range of it"""
    try:
        return await editor.get_script(
            request.module_id,
            request.callback,
            start_line=request.start_line,
            end_line=request.end_line,
        )
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.post("/set", response_model=ScriptUpdateResult)
async def set_script(
    request: SetScriptRequest, editor: ScriptEditor = Depends(get_script_editor)
) -> ScriptUpdateResult:
    """Replace a whole script (small or empty scripts only)"""
    try:
        return await editor.set_script(request.module_id, request.script, request.callback, request.compile)
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.post("/patch", response_model=ScriptUpdateResult)
async def patch_script(
    request: PatchScriptRequest, editor: ScriptEditor = Depends(get_script_editor)
) -> ScriptUpdateResult:
    """Apply a unified diff to a script"""
    try:
        return await editor.patch_script(
            request.module_id,
            request.patch,
            request.callback,
            fuzz_factor=request.fuzz_factor,
            compile=request.compile,
            refresh=request.refresh,
        )
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.post("/edit", response_model=ScriptUpdateResult)
async def edit_script(
    request: EditScriptRequest, editor: ScriptEditor = Depends(get_script_editor)
) -> ScriptUpdateResult:
    """Replace an exact substring in a script"""
    try:
        return await editor.edit_script(
            request.module_id,
            request.old_string,
            request.new_string,
            request.callback,
            replace_all=request.replace_all,
            compile=request.compile,
            refresh=request.refresh,
        )
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.post("/fix-lines", response_model=ScriptUpdateResult)
async def fix_script_lines(
    request: FixScriptLinesRequest, editor: ScriptEditor = Depends(get_script_editor)
) -> ScriptUpdateResult:
    """Apply one line-level operation"""
    try:
        return await editor.fix_script_lines(
            request.module_id,
            request.operation,
            request.callback,
            compile=request.compile,
            refresh=request.refresh,
        )
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.post("/recompile", response_model=ScriptWriteResult)
async def recompile(
    request: RecompileRequest, editor: ScriptEditor = Depends(get_script_editor)
) -> ScriptWriteResult:
    """Recompile a module without changing it"""
    try:
        return await editor.recompile(request.module_id)
    except ScriptStoreError as e:
        raise store_unavailable(e)


@router.delete("/cache/{module_id}")
async def invalidate_cache(module_id: str, editor: ScriptEditor = Depends(get_script_editor)) -> dict:
    """Forget cached content of every section of a module"""
    removed = editor.invalidate(module_id)
    return {"status": "success", "module_id": module_id, "removed": removed}
