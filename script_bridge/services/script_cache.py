"""
Script Cache - Last known content per (module, callback)

Entries are never revalidated against the runtime; callers that need fresh
content for line-indexed edits re-fetch and put() again.
"""

from __future__ import annotations

from ..models.script import CachedScript, content_hash

KEY_SEPARATOR = ":"


def cache_key(module_id: str, callback: str | None = None) -> str:
    return f"{module_id}{KEY_SEPARATOR}{callback}" if callback else module_id


class ScriptCache:
    """In-memory script cache owned by one editor session"""

    def __init__(self):
        self._entries: dict[str, CachedScript] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, module_id: str, callback: str | None, content: str) -> CachedScript:
        """Store content with its derived lines, hash and timestamp"""
        entry = CachedScript.from_content(content)
        self._entries[cache_key(module_id, callback)] = entry
        return entry

    def get(self, module_id: str, callback: str | None = None) -> CachedScript | None:
        return self._entries.get(cache_key(module_id, callback))

    def is_unchanged(self, module_id: str, callback: str | None, content: str) -> bool:
        """True if content hashes the same as the cached entry"""
        entry = self.get(module_id, callback)
        return entry is not None and entry.hash == content_hash(content)

    def invalidate(self, module_id: str) -> int:
        """Drop every entry of a module, all callbacks included. Returns the count removed."""
        prefix = module_id + KEY_SEPARATOR
        doomed = [key for key in self._entries if key == module_id or key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self):
        self._entries.clear()
