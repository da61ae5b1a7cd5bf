"""Services module - Script editing logic"""

from .config_manager import ConfigManager, EditingSettings
from .diff_generator import DiffGenerator
from .error_context import ErrorContextExtractor, format_code_with_line_numbers, parse_callstack_entry
from .hunk_normalizer import fix_patch_headers
from .line_editor import (
    apply_line_operation,
    delete_lines,
    fix_line_in_script,
    insert_after_line,
    replace_line_range,
)
from .patch_applier import PatchApplier, apply_patch_to_script
from .script_cache import ScriptCache
from .script_editor import ScriptEditor
from .script_store import HiseScriptStore, ScriptStore, ScriptStoreError
from .size_gate import get_set_script_max_lines, should_allow_set_script
from .string_editor import edit_string_in_script

__all__ = [
    "ConfigManager",
    "EditingSettings",
    "DiffGenerator",
    "ErrorContextExtractor",
    "format_code_with_line_numbers",
    "parse_callstack_entry",
    "fix_patch_headers",
    "apply_line_operation",
    "delete_lines",
    "fix_line_in_script",
    "insert_after_line",
    "replace_line_range",
    "PatchApplier",
    "apply_patch_to_script",
    "ScriptCache",
    "ScriptEditor",
    "HiseScriptStore",
    "ScriptStore",
    "ScriptStoreError",
    "get_set_script_max_lines",
    "should_allow_set_script",
    "edit_string_in_script",
]
