"""
Known runtime compile errors and how to fix them

Models trained on JavaScript regularly trip over the same HiseScript rules;
each pattern maps an error message (and optionally the offending code) to a
short suggestion.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorPattern:
    id: str
    pattern: re.Pattern
    code_pattern: re.Pattern | None
    suggestion: str


ERROR_PATTERNS: list[ErrorPattern] = [
    ErrorPattern(
        id="graphics-array-args",
        pattern=re.compile(r"argument amount mismatch.*Expected:\s*1", re.IGNORECASE),
        code_pattern=re.compile(
            r"\.(fillRect|drawRect|drawRoundedRectangle|fillRoundedRectangle|drawEllipse|fillEllipse"
            r"|drawLine|drawHorizontalLine|drawDropShadow)\s*\(\s*[\d.-]+\s*,"
        ),
        suggestion="Graphics methods expect arrays: g.fillRect([x, y, w, h]) not g.fillRect(x, y, w, h)",
    ),
    ErrorPattern(
        id="assert-with-message",
        pattern=re.compile(r"Too many arguments in API call Console\.assertTrue\(\)\. Expected: 1", re.IGNORECASE),
        code_pattern=re.compile(r"Console\.assertTrue\s*\([^,]+,"),
        suggestion=(
            "Console.assertTrue(condition) only takes one argument. "
            'Use Console.assertWithMessage(condition, "message") for a custom error message'
        ),
    ),
    ErrorPattern(
        id="var-in-inline",
        pattern=re.compile(r"Can't declare var statement in inline function", re.IGNORECASE),
        code_pattern=None,
        suggestion="Use 'local' instead of 'var' inside inline functions: local x = 90;",
    ),
    ErrorPattern(
        id="const-in-inline",
        pattern=re.compile(r"const var declaration must be on global level", re.IGNORECASE),
        code_pattern=None,
        suggestion="const/reg/global can only be declared at the top level. Inside inline functions, use 'local' instead",
    ),
    ErrorPattern(
        id="var-in-for-loop",
        pattern=re.compile(r"Can't use var initialiser inside inline function", re.IGNORECASE),
        code_pattern=re.compile(r"for\s*\(\s*var\s+"),
        suggestion="Omit 'var' in for loops inside inline functions: for(i = 0; i < 100; i++) not for(var i = 0; ...)",
    ),
]


def find_pattern_match(error_message: str, code: str | None = None) -> str | None:
    """Return the suggestion of the first matching pattern, if any"""
    for pattern in ERROR_PATTERNS:
        if not pattern.pattern.search(error_message):
            continue
        if pattern.code_pattern and code and not pattern.code_pattern.search(code):
            continue
        return pattern.suggestion
    return None
