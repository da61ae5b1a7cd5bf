"""Size Gate - Decide whether a whole-script overwrite is allowed"""

from __future__ import annotations

import os

DEFAULT_SET_SCRIPT_MAX_LINES = 30
MAX_LINES_ENV = "HISE_SET_SCRIPT_MAX_LINES"


def should_allow_set_script(existing_script: str, max_lines: int) -> bool:
    """Allow a full replace of an empty script, or one with at most max_lines lines"""
    if not existing_script or not existing_script.strip():
        return True
    return len(existing_script.split("\n")) <= max_lines


def get_set_script_max_lines(configured: int | None = None) -> int:
    """Threshold from the environment, else the configured value, else the default"""
    env_value = os.environ.get(MAX_LINES_ENV)
    if env_value:
        try:
            parsed = int(env_value)
        except ValueError:
            parsed = -1
        if parsed >= 0:
            return parsed
    if configured is not None and configured >= 0:
        return configured
    return DEFAULT_SET_SCRIPT_MAX_LINES
