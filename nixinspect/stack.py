"""Breadcrumb stack of visited views, root first and current view last."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Union

from .path import BrowserPath


class StackMarker:
    """Non-path stack item: the root menu or one of its fixed lists."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"StackMarker({self.name!r})"


ROOT_ITEM = StackMarker("root")
BOOKMARKS = StackMarker("bookmarks")
RECENTS = StackMarker("recents")

StackItem = Union[StackMarker, BrowserPath]


class BrowserStack:
    def __init__(self, items: Iterable[StackItem] | None = None) -> None:
        self._items: list[StackItem] = list(items) if items is not None else [ROOT_ITEM]
        if not self._items:
            self._items = [ROOT_ITEM]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[StackItem]:
        return iter(self._items)

    def __getitem__(self, index: int) -> StackItem:
        return self._items[index]

    def __repr__(self) -> str:
        return f"BrowserStack({self._items!r})"

    @property
    def items(self) -> list[StackItem]:
        return list(self._items)

    @property
    def top(self) -> StackItem:
        return self._items[-1]

    def push(self, item: StackItem) -> None:
        self._items.append(item)

    def push_path(self, path: BrowserPath) -> None:
        self._items.append(path)

    def truncate(self) -> bool:
        """Drop the current view; the bottom item is never removed."""
        if len(self._items) <= 1:
            return False
        self._items.pop()
        return True

    def replace(self, items: Iterable[StackItem]) -> None:
        new_items = list(items)
        if not new_items:
            raise ValueError("visit stack cannot be empty")
        self._items = new_items

    def prev_item(self) -> StackItem | None:
        if len(self._items) < 2:
            return None
        return self._items[-2]

    def current(self) -> BrowserPath | None:
        top = self._items[-1]
        return top if isinstance(top, BrowserPath) else None

    def current_force(self) -> BrowserPath:
        top = self._items[-1]
        if not isinstance(top, BrowserPath):
            raise RuntimeError("current visit stack item is not a path")
        return top

    def concrete_suffix(self) -> list[BrowserPath]:
        """Trailing run of path items, oldest first."""
        out: list[BrowserPath] = []
        for item in reversed(self._items):
            if not isinstance(item, BrowserPath):
                break
            out.append(item)
        out.reverse()
        return out


__all__ = [
    "BOOKMARKS",
    "BrowserStack",
    "RECENTS",
    "ROOT_ITEM",
    "StackItem",
    "StackMarker",
]
