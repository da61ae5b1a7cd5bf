"""Unified diff data models"""

from __future__ import annotations

from pydantic import BaseModel


class DiffHunk(BaseModel):
    """A single hunk of a unified diff"""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header_suffix: str = ""
    lines: list[str] = []  # Raw body lines, tag character included

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@{self.header_suffix}"
