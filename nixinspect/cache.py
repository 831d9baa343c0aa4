"""In-memory value cache keyed by attribute path.

Entries are created by a loading placeholder when a request is dispatched
and replaced by evaluation responses. Nothing is ever evicted.
"""

from __future__ import annotations

from collections.abc import Iterator

from .path import BrowserPath
from .path_data import ListData, PathData


class PathDataMap:
    def __init__(self) -> None:
        self._entries: dict[BrowserPath, PathData] = {}
        # Lists replaced by a refresh, kept until the reload arrives.
        self._refreshed: dict[BrowserPath, ListData] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[BrowserPath]:
        return iter(self._entries)

    def get(self, path: BrowserPath) -> PathData | None:
        return self._entries.get(path)

    def current_list(self, path: BrowserPath) -> ListData | None:
        entry = self._entries.get(path)
        if entry is None:
            return None
        return entry.list_data

    def mark_loading(self, path: BrowserPath) -> bool:
        """Insert a loading placeholder unless ``path`` already has an entry."""
        if path in self._entries:
            return False
        self._entries[path] = PathData.loading()
        return True

    def insert(self, path: BrowserPath, data: PathData) -> None:
        """Store an evaluation response, replacing any previous entry.

        A list that arrives with the same child names as the cached list, or as
        the list it replaced on refresh, keeps that cursor.
        """
        stale = self._refreshed.pop(path, None)
        previous = self.current_list(path)
        if previous is None:
            previous = stale
        incoming = data.list_data
        if previous is not None and incoming is not None and previous.items == incoming.items:
            incoming.selected = previous.selected
        self._entries[path] = data

    def refresh(self, path: BrowserPath) -> None:
        """Return ``path`` to loading ahead of a re-evaluation."""
        previous = self.current_list(path)
        if previous is not None:
            self._refreshed[path] = previous
        self._entries[path] = PathData.loading()


__all__ = ["PathDataMap"]
