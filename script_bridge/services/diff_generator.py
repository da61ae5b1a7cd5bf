"""
Diff Generator Service - Generate unified diffs between script versions
"""

from __future__ import annotations

from difflib import unified_diff


class DiffGenerator:
    """Generate unified diffs for script modifications"""

    def generate_patch(
        self,
        original_content: str,
        new_content: str,
        script_id: str | None = None,
        context_lines: int = 3,
    ) -> str:
        """Unified diff between two scripts, empty when they are equal.

        Lines are split on ``\\n`` exactly like the patch applier splits them,
        so the result applies back onto original_content unchanged.
        """
        original_lines = original_content.split("\n")
        new_lines = new_content.split("\n")

        fromfile = f"a/{script_id}" if script_id else ""
        tofile = f"b/{script_id}" if script_id else ""
        diff = unified_diff(
            original_lines,
            new_lines,
            fromfile=fromfile,
            tofile=tofile,
            n=context_lines,
            lineterm="",
        )

        if not script_id:
            # Drop the ---/+++ file header lines
            diff = (line for i, line in enumerate(diff) if i >= 2)

        return "\n".join(diff)
