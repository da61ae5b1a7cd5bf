"""End-to-end editing flows against an in-memory store"""

import pytest

from script_bridge.models.edit import EditErrorKind, LineInsert, LineOperation, LineReplace
from script_bridge.models.script import ScriptError
from script_bridge.services.config_manager import EditingSettings
from script_bridge.services.script_editor import ScriptEditor, script_label
from script_bridge.services.script_store import ScriptStoreError

from .fixtures import (
    PATCH_REPLACE_SINGLE_LINE,
    PATCH_WRONG_CONTEXT,
    SIMPLE_SCRIPT,
    BrokenFetchStore,
    FakeScriptStore,
    numbered_script,
)


@pytest.fixture
def editor(store):
    return ScriptEditor(store)


def test_script_label():
    assert script_label("Interface", "onInit") == "Interface.onInit"
    assert script_label("Interface") == "Interface"


class TestGetScript:
    @pytest.mark.asyncio
    async def test_whole_script(self, editor):
        view = await editor.get_script("Interface", "onInit")
        assert view.script == SIMPLE_SCRIPT
        assert view.line_count == 5
        assert view.line_range is None
        assert len(view.hash) == 16

    @pytest.mark.asyncio
    async def test_line_range(self, editor):
        view = await editor.get_script("Interface", "onInit", start_line=2, end_line=3)
        assert view.script == 'const value = 123;\nconst name = "test";'
        assert (view.line_range.start, view.line_range.end, view.line_range.total) == (2, 3, 5)
        assert view.line_count == 5

    @pytest.mark.asyncio
    async def test_range_is_clamped(self, editor):
        view = await editor.get_script("Interface", "onInit", start_line=10)
        assert view.script == "Component.repaint();"
        assert view.line_range.start == 5

        view = await editor.get_script("Interface", "onInit", start_line=4, end_line=2)
        assert view.script == "Component.setValue(value);"

    @pytest.mark.asyncio
    async def test_always_refetches_by_default(self, editor, store):
        await editor.get_script("Interface", "onInit")
        await editor.get_script("Interface", "onInit")
        assert len(store.fetches) == 2

    @pytest.mark.asyncio
    async def test_missing_module(self, editor):
        with pytest.raises(ScriptStoreError, match="Module Nope not found"):
            await editor.get_script("Nope")

    @pytest.mark.asyncio
    async def test_crlf_is_normalized(self):
        editor = ScriptEditor(FakeScriptStore({("Interface", None): "a\r\nb\r\n"}))
        view = await editor.get_script("Interface")
        assert view.script == "a\nb\n"
        assert view.line_count == 3

    @pytest.mark.asyncio
    async def test_crlf_kept_when_normalization_is_off(self):
        settings = EditingSettings(normalize_line_endings=False)
        editor = ScriptEditor(FakeScriptStore({("Interface", None): "a\r\nb"}), settings)
        assert (await editor.get_script("Interface")).script == "a\r\nb"


class TestSetScript:
    @pytest.mark.asyncio
    async def test_small_script_is_replaced(self, editor, store):
        result = await editor.set_script("Interface", "Console.print(1);", "onInit")
        assert result.success
        assert result.compiled
        assert store.scripts[("Interface", "onInit")] == "Console.print(1);"
        assert result.line_count == 1

    @pytest.mark.asyncio
    async def test_large_script_is_refused(self):
        store = FakeScriptStore({("Interface", "onInit"): numbered_script(31)})
        result = await ScriptEditor(store).set_script("Interface", "x", "onInit")
        assert not result.success
        assert result.edit.details.kind == EditErrorKind.SIZE_LIMIT
        assert result.edit.error == "Script has 31 lines (limit 30 for full replacement)"
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_limit_comes_from_settings(self):
        store = FakeScriptStore({("Interface", "onInit"): numbered_script(31)})
        editor = ScriptEditor(store, EditingSettings(set_script_max_lines=50))
        assert (await editor.set_script("Interface", "x", "onInit")).success

    @pytest.mark.asyncio
    async def test_empty_script_can_always_be_filled(self):
        store = FakeScriptStore({("Interface", "onInit"): ""})
        editor = ScriptEditor(store, EditingSettings(set_script_max_lines=0))
        result = await editor.set_script("Interface", numbered_script(100), "onInit")
        assert result.success
        assert result.line_count == 100


class TestPatchScript:
    @pytest.mark.asyncio
    async def test_patch_is_written_and_cached(self, editor, store):
        result = await editor.patch_script("Interface", PATCH_REPLACE_SINGLE_LINE, "onInit")

        assert result.success
        assert result.edit.success
        assert result.edit.script is None
        assert result.logs == ["Compiled OK"]
        assert "const value = 456;" in store.scripts[("Interface", "onInit")]
        assert editor.cache.get("Interface", "onInit").content == store.scripts[("Interface", "onInit")]
        assert "--- a/Interface.onInit" in result.diff
        assert "+const value = 456;" in result.diff

    @pytest.mark.asyncio
    async def test_second_edit_uses_cache(self, editor, store):
        await editor.patch_script("Interface", PATCH_REPLACE_SINGLE_LINE, "onInit")
        await editor.edit_script("Interface", "const value = 456;", "const value = 789;", "onInit")
        assert store.fetches == [("Interface", "onInit")]
        assert "const value = 789;" in store.scripts[("Interface", "onInit")]

    @pytest.mark.asyncio
    async def test_refresh_refetches(self, editor, store):
        await editor.get_script("Interface", "onInit")
        store.scripts[("Interface", "onInit")] = SIMPLE_SCRIPT.replace("123", "321")

        result = await editor.edit_script("Interface", "321", "4", "onInit", refresh=True)
        assert result.success
        assert "const value = 4;" in store.scripts[("Interface", "onInit")]

    @pytest.mark.asyncio
    async def test_failed_patch_is_not_written(self, editor, store):
        result = await editor.patch_script("Interface", PATCH_WRONG_CONTEXT, "onInit")
        assert not result.success
        assert result.edit.details.kind == EditErrorKind.CONTEXT_MISMATCH
        assert result.edit.normalized_patch is not None
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_fuzz_factor_from_settings(self, store):
        editor = ScriptEditor(store, EditingSettings(fuzz_factor=1))
        assert (await editor.patch_script("Interface", PATCH_WRONG_CONTEXT, "onInit")).success

    @pytest.mark.asyncio
    async def test_writing_one_section_invalidates_the_merged_script(self, editor, store):
        store.scripts[("Interface", None)] = "merged"
        await editor.get_script("Interface")
        await editor.patch_script("Interface", PATCH_REPLACE_SINGLE_LINE, "onInit")
        assert editor.cache.get("Interface") is None


class TestEditAndFixLines:
    @pytest.mark.asyncio
    async def test_ambiguous_edit(self, editor, store):
        result = await editor.edit_script("Interface", "value", "amount", "onInit")
        assert result.edit.details.kind == EditErrorKind.AMBIGUITY_ERROR
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_replace_all(self, editor, store):
        result = await editor.edit_script("Interface", "value", "amount", "onInit", replace_all=True)
        assert result.success
        assert "value" not in store.scripts[("Interface", "onInit")]

    @pytest.mark.asyncio
    async def test_fix_line(self, editor, store):
        operation = LineOperation(replace_line=LineReplace(line=5, content="Component.repaintImmediately();"))
        result = await editor.fix_script_lines("Interface", operation, "onInit")
        assert result.success
        assert store.scripts[("Interface", "onInit")].endswith("Component.repaintImmediately();")

    @pytest.mark.asyncio
    async def test_insert_line(self, editor, store):
        operation = LineOperation(insert_after=LineInsert(line=0, content="// header"))
        result = await editor.fix_script_lines("Interface", operation, "onInit")
        assert result.line_count == 6

    @pytest.mark.asyncio
    async def test_out_of_range_line(self, editor, store):
        operation = LineOperation(replace_line=LineReplace(line=6, content="x"))
        result = await editor.fix_script_lines("Interface", operation, "onInit")
        assert result.edit.error == "Line 6 out of range (valid: 1-5)"
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_unchanged_content_skips_write_without_compile(self, editor, store):
        result = await editor.edit_script("Interface", "value", "value", "onInit", replace_all=True, compile=False)
        assert result.success
        assert result.diff == ""
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_unchanged_content_still_compiles(self, editor, store):
        result = await editor.edit_script("Interface", "value", "value", "onInit", replace_all=True)
        assert result.success
        assert result.compiled
        assert len(store.writes) == 1


class TestCompileErrors:
    @pytest.mark.asyncio
    async def test_errors_get_context_from_written_script(self, editor, store):
        store.compile_errors = [
            ScriptError(
                error_message="Can't declare var statement in inline function",
                callstack=["onInit() at Interface.js:2:1"],
            )
        ]

        result = await editor.patch_script("Interface", PATCH_REPLACE_SINGLE_LINE, "onInit")

        assert not result.success
        assert result.edit.success
        assert not result.compiled
        error = result.errors[0]
        assert "2: const value = 456;" in error.code_context.code
        assert "'local'" in error.suggestion
        # The write happened, so the cache reflects it
        assert editor.cache.get("Interface", "onInit").content == store.scripts[("Interface", "onInit")]

    @pytest.mark.asyncio
    async def test_context_fetch_failure_does_not_hide_the_write(self):
        store = BrokenFetchStore()
        store.scripts[("Interface", "onInit")] = SIMPLE_SCRIPT
        editor = ScriptEditor(store)
        editor.cache.put("Interface", "onInit", SIMPLE_SCRIPT)
        store.compile_errors = [ScriptError(error_message="boom", callstack=["onNoteOn() at Interface.js:1:1"])]

        result = await editor.edit_script("Interface", "123", "456", "onInit")

        assert not result.success
        assert result.errors[0].code_context is None
        assert store.fetches == [("Interface", "onNoteOn")]
        assert "const value = 456;" in store.scripts[("Interface", "onInit")]

    @pytest.mark.asyncio
    async def test_context_lines_setting(self, store):
        store.compile_errors = [ScriptError(error_message="boom", callstack=["onInit() at Interface.js:3:1"])]
        editor = ScriptEditor(store, EditingSettings(error_context_lines=0))

        result = await editor.edit_script("Interface", "123", "124", "onInit")

        assert result.errors[0].code_context is None

    @pytest.mark.asyncio
    async def test_recompile_enriches_errors(self, editor, store):
        store.compile_errors = [ScriptError(error_message="boom", callstack=["onInit() at Interface.js:1:1"])]
        result = await editor.recompile("Interface")
        assert not result.success
        assert result.errors[0].code_context.code.startswith("1: const Component")

    @pytest.mark.asyncio
    async def test_recompile_success(self, editor):
        assert (await editor.recompile("Interface")).success


class TestSettingsAndCache:
    @pytest.mark.asyncio
    async def test_invalidate(self, editor, store):
        await editor.get_script("Interface", "onInit")
        assert editor.invalidate("Interface") == 1
        assert editor.invalidate("Interface") == 0

    @pytest.mark.asyncio
    async def test_apply_settings(self, editor, store):
        editor.apply_settings(EditingSettings(fuzz_factor=1))
        assert (await editor.patch_script("Interface", PATCH_WRONG_CONTEXT, "onInit")).success
