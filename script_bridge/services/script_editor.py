"""
Script Editor Service - Read, edit and write scripts through a ScriptStore

Every mutation follows the same path: compute the new text with the pure
editors, write it through the store, refresh the cache with what was
written, then enrich any compile errors with source context.
"""

from __future__ import annotations

import logging

from ..models.edit import EditErrorKind, EditResult, LineOperation
from ..models.script import CachedScript, LineRange, ScriptUpdateResult, ScriptView, ScriptWriteResult
from .config_manager import EditingSettings
from .diff_generator import DiffGenerator
from .error_context import ErrorContextExtractor
from .line_editor import apply_line_operation
from .patch_applier import PatchApplier
from .script_cache import ScriptCache
from .script_store import ScriptStore, ScriptStoreError
from .size_gate import should_allow_set_script
from .string_editor import edit_string_in_script

logger = logging.getLogger(__name__)


def script_label(module_id: str, callback: str | None = None) -> str:
    return f"{module_id}.{callback}" if callback else module_id


class ScriptEditor:
    """Edit scripts of one runtime session"""

    def __init__(
        self,
        store: ScriptStore,
        settings: EditingSettings | None = None,
        cache: ScriptCache | None = None,
    ):
        self.store = store
        self.settings = settings or EditingSettings()
        self.cache = cache if cache is not None else ScriptCache()
        self.patch_applier = PatchApplier(self.settings.fuzz_factor)
        self.error_context = ErrorContextExtractor(store, self.cache, self.settings.normalize_line_endings)
        self.diff_generator = DiffGenerator()

    def apply_settings(self, settings: EditingSettings):
        """Switch to new editing settings; the cache is kept"""
        self.settings = settings
        self.patch_applier = PatchApplier(settings.fuzz_factor)
        self.error_context.normalize_line_endings = settings.normalize_line_endings

    def use_store(self, store: ScriptStore):
        """Talk to a different store; cached content from the old one is dropped"""
        self.store = store
        self.error_context.store = store
        self.cache.clear()

    def _normalize(self, content: str) -> str:
        if self.settings.normalize_line_endings:
            return content.replace("\r\n", "\n")
        return content

    async def load(self, module_id: str, callback: str | None = None, refresh: bool = False) -> CachedScript:
        """Cached script, fetched from the store on a miss or when refresh is set"""
        if not refresh:
            entry = self.cache.get(module_id, callback)
            if entry is not None:
                return entry

        fetched = await self.store.fetch(module_id, callback)
        if not fetched.success:
            message = "; ".join(e.error_message for e in fetched.errors) or "unknown error"
            raise ScriptStoreError(f"Failed to fetch {script_label(module_id, callback)}: {message}")
        return self.cache.put(module_id, callback, self._normalize(fetched.script))

    # ========== Reads ==========

    async def get_script(
        self,
        module_id: str,
        callback: str | None = None,
        start_line: int | None = None,
        end_line: int | None = None,
        refresh: bool = True,
    ) -> ScriptView:
        """Fetch a script, optionally only lines start_line..end_line"""
        entry = await self.load(module_id, callback, refresh=refresh)
        view = ScriptView(
            module_id=module_id,
            callback=callback,
            script=entry.content,
            hash=entry.hash,
            line_count=len(entry.lines),
        )

        if start_line is not None:
            total = len(entry.lines)
            start_idx = max(0, min(start_line - 1, total - 1))
            end_idx = min(total, end_line) if end_line is not None else total
            end_idx = max(start_idx + 1, end_idx)
            view.script = "\n".join(entry.lines[start_idx:end_idx])
            view.line_range = LineRange(start=start_idx + 1, end=end_idx, total=total)

        return view

    # ========== Mutations ==========

    async def set_script(
        self,
        module_id: str,
        script: str,
        callback: str | None = None,
        compile: bool = True,
    ) -> ScriptUpdateResult:
        """Replace a whole script, unless the existing one is too large"""
        existing = await self.load(module_id, callback, refresh=True)
        max_lines = self.settings.set_script_max_lines

        if not should_allow_set_script(existing.content, max_lines):
            logger.info(
                "[ScriptEditor] Blocked full replace of %s (%d lines > %d)",
                script_label(module_id, callback),
                len(existing.lines),
                max_lines,
            )
            return self._rejected(
                module_id,
                callback,
                EditResult.fail(
                    EditErrorKind.SIZE_LIMIT,
                    f"Script has {len(existing.lines)} lines (limit {max_lines} for full replacement)",
                    "Replacing a large existing script wholesale risks corrupting it",
                    "Use patch_script, edit_script or fix_script_lines for incremental changes",
                ),
            )

        return await self._commit(module_id, callback, existing.content, EditResult.ok(script), compile)

    async def patch_script(
        self,
        module_id: str,
        patch: str,
        callback: str | None = None,
        fuzz_factor: int | None = None,
        compile: bool = True,
        refresh: bool = False,
    ) -> ScriptUpdateResult:
        """Apply a unified diff"""
        current = await self.load(module_id, callback, refresh=refresh)
        result = self.patch_applier.apply(current.content, patch, fuzz_factor)
        if not result.success:
            return self._rejected(module_id, callback, result)
        return await self._commit(module_id, callback, current.content, result, compile)

    async def edit_script(
        self,
        module_id: str,
        old_string: str,
        new_string: str,
        callback: str | None = None,
        replace_all: bool = False,
        compile: bool = True,
        refresh: bool = False,
    ) -> ScriptUpdateResult:
        """Replace an exact substring"""
        current = await self.load(module_id, callback, refresh=refresh)
        result = edit_string_in_script(current.content, old_string, new_string, replace_all)
        if not result.success:
            return self._rejected(module_id, callback, result)
        return await self._commit(module_id, callback, current.content, result, compile)

    async def fix_script_lines(
        self,
        module_id: str,
        operation: LineOperation,
        callback: str | None = None,
        compile: bool = True,
        refresh: bool = False,
    ) -> ScriptUpdateResult:
        """Apply one line operation against the cached line array"""
        current = await self.load(module_id, callback, refresh=refresh)
        result = apply_line_operation(current.lines, operation)
        if not result.success:
            return self._rejected(module_id, callback, result)
        return await self._commit(module_id, callback, current.content, result, compile)

    async def recompile(self, module_id: str) -> ScriptWriteResult:
        """Recompile without changing any script"""
        result = await self.store.recompile(module_id)
        if not result.success and result.errors:
            await self.error_context.enrich_errors(module_id, result.errors, self.settings.error_context_lines)
        return result

    def invalidate(self, module_id: str) -> int:
        removed = self.cache.invalidate(module_id)
        logger.debug("[ScriptEditor] Invalidated %d cache entries for %s", removed, module_id)
        return removed

    # ========== Helpers ==========

    def _rejected(self, module_id: str, callback: str | None, edit: EditResult) -> ScriptUpdateResult:
        return ScriptUpdateResult(success=False, module_id=module_id, callback=callback, edit=edit)

    async def _commit(
        self,
        module_id: str,
        callback: str | None,
        before: str,
        edit: EditResult,
        compile: bool,
    ) -> ScriptUpdateResult:
        new_script = edit.script
        label = script_label(module_id, callback)
        # The caller already knows the script; only the diff goes back
        summary = edit.model_copy(update={"script": None})

        if not compile and self.cache.is_unchanged(module_id, callback, new_script):
            entry = self.cache.get(module_id, callback)
            logger.info("[ScriptEditor] %s unchanged, skipping write", label)
            return ScriptUpdateResult(
                success=True,
                module_id=module_id,
                callback=callback,
                edit=summary,
                hash=entry.hash,
                line_count=len(entry.lines),
                diff="",
            )

        write = await self.store.write(module_id, new_script, callback, compile)

        # Any other cached section of this module (or the merged script) may now be stale
        self.cache.invalidate(module_id)
        entry = self.cache.put(module_id, callback, new_script)

        errors = write.errors
        if not write.success and errors:
            logger.info("[ScriptEditor] %s failed to compile with %d error(s)", label, len(errors))
            await self.error_context.enrich_errors(module_id, errors, self.settings.error_context_lines)

        return ScriptUpdateResult(
            success=write.success,
            module_id=module_id,
            callback=callback,
            edit=summary,
            compiled=compile and write.success,
            hash=entry.hash,
            line_count=len(entry.lines),
            diff=self.diff_generator.generate_patch(before, new_script, label),
            logs=write.logs,
            errors=errors,
        )
