"""
Error Context - Map runtime callstack entries back to numbered source lines

Callstack entries look like ``onInit() at Interface.js:57:16``. Native frames
and other shapes simply do not parse.
"""

from __future__ import annotations

import logging
import re

from ..models.script import CallstackLocation, ErrorCodeContext, ScriptError
from .error_patterns import find_pattern_match
from .script_cache import ScriptCache
from .script_store import ScriptStore

logger = logging.getLogger(__name__)

CALLSTACK_RE = re.compile(r"^(\w+)\(\) at (\w+)\.js:(\d+):(\d+)$")
ANONYMOUS_CALLBACK = "function"


def parse_callstack_entry(entry: str) -> CallstackLocation | None:
    """Parse one callstack entry, or return None if it has another shape"""
    match = CALLSTACK_RE.match(entry.strip())
    if not match:
        return None
    callback, module_id, line, column = match.groups()
    return CallstackLocation(callback=callback, module_id=module_id, line=int(line), column=int(column))


def format_code_with_line_numbers(code: str, start_line: int) -> str:
    """Prefix each line with its 1-based line number"""
    return "\n".join(f"{start_line + i}: {line}" for i, line in enumerate(code.split("\n")))


def excerpt(lines: list[str] | tuple[str, ...], line: int, context_lines: int) -> str | None:
    """Numbered excerpt of lines around a 1-based line, or None if it is out of range"""
    if line < 1 or line > len(lines):
        return None
    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    return format_code_with_line_numbers("\n".join(lines[start - 1 : end]), start)


class ErrorContextExtractor:
    """Attach source excerpts and fix hints to runtime errors"""

    def __init__(self, store: ScriptStore, cache: ScriptCache, normalize_line_endings: bool = True):
        self.store = store
        self.cache = cache
        self.normalize_line_endings = normalize_line_endings

    async def _lines_for(self, module_id: str, callback: str | None) -> tuple[str, ...] | None:
        entry = self.cache.get(module_id, callback)
        if entry is None:
            fetched = await self.store.fetch(module_id, callback)
            if not fetched.success:
                return None
            script = fetched.script
            if self.normalize_line_endings:
                script = script.replace("\r\n", "\n")
            entry = self.cache.put(module_id, callback, script)
        return entry.lines

    async def build_context(
        self,
        module_id: str,
        location: CallstackLocation,
        context_lines: int = 1,
    ) -> ErrorCodeContext | None:
        """Build a numbered excerpt around the error; None when it cannot be had"""
        # Anonymous functions only have line numbers in the merged module script
        callback = None if location.callback == ANONYMOUS_CALLBACK else location.callback
        try:
            lines = await self._lines_for(module_id, callback)
        except Exception as e:
            # Best effort
            logger.debug("[ErrorContext] Could not fetch %s for context: %s", module_id, e)
            return None
        if lines is None:
            return None

        code = excerpt(lines, location.line, context_lines)
        if code is None:
            return None
        return ErrorCodeContext(
            callback=location.callback,
            line=location.line,
            column=location.column,
            code=code,
        )

    async def enrich_errors(
        self,
        module_id: str,
        errors: list[ScriptError],
        context_lines: int = 1,
    ) -> list[ScriptError]:
        """Add code context and suggestions to errors raised in module_id"""
        for error in errors:
            if context_lines > 0 and error.callstack:
                location = parse_callstack_entry(error.callstack[0])
                if location and location.module_id == module_id:
                    error.code_context = await self.build_context(module_id, location, context_lines)

            code = error.code_context.code if error.code_context else None
            error.suggestion = find_pattern_match(error.error_message, code)
        return errors
