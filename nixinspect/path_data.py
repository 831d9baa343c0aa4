"""Evaluated node shapes stored in the value cache.

``PathData`` is a closed tagged variant; ``kind`` is always one of
``PATH_DATA_KINDS``. The ``loading`` kind marks a dispatched request whose
response has not arrived yet and is never produced by the evaluator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .path import BrowserPath

if TYPE_CHECKING:
    from .workers import NixValue

LIST_TYPE_LIST = "list"
LIST_TYPE_ATTRSET = "attrset"

PATH_DATA_KINDS = frozenset(
    {
        "list",
        "thunk",
        "int",
        "float",
        "bool",
        "string",
        "path",
        "null",
        "function",
        "external",
        "loading",
        "error",
    }
)

_TYPE_NAMES = {
    "thunk": "Thunk",
    "int": "Int",
    "float": "Float",
    "bool": "Bool",
    "string": "String",
    "path": "Path",
    "null": "Null",
    "function": "Function",
    "external": "External",
    "loading": "Loading",
    "error": "Error",
}

@dataclass
class ListData:
    list_type: str
    items: list[str]
    selected: int | None = 0

    def selected_name(self) -> str | None:
        if self.selected is None or not (0 <= self.selected < len(self.items)):
            return None
        return self.items[self.selected]

    def selected_path(self, parent: BrowserPath) -> BrowserPath | None:
        name = self.selected_name()
        return None if name is None else parent.child(name)

    def select_name(self, name: str) -> bool:
        try:
            self.selected = self.items.index(name)
        except ValueError:
            return False
        return True


@dataclass(frozen=True)
class PathData:
    kind: str
    value: object = None

    def __post_init__(self) -> None:
        if self.kind not in PATH_DATA_KINDS:
            raise ValueError(f"unknown path data kind: {self.kind!r}")

    @classmethod
    def loading(cls) -> PathData:
        return cls("loading")

    @classmethod
    def error(cls, message: str) -> PathData:
        return cls("error", message)

    @classmethod
    def list_of(cls, list_type: str, items: list[str]) -> PathData:
        return cls("list", ListData(list_type=list_type, items=list(items)))

    @classmethod
    def from_value(cls, value: NixValue) -> PathData:
        """Convert one evaluation response into a cache entry."""
        if value.kind == "attrs":
            return cls.list_of(LIST_TYPE_ATTRSET, list(value.value or []))
        if value.kind == "list":
            return cls.list_of(LIST_TYPE_LIST, [str(i) for i in range(int(value.value or 0))])
        if value.kind == "error":
            return cls.error(str(value.value))
        return cls(value.kind, value.value)

    @property
    def list_data(self) -> ListData | None:
        return self.value if self.kind == "list" else None  # type: ignore[return-value]

    @property
    def is_loading(self) -> bool:
        return self.kind == "loading"

    def get_type(self) -> str:
        if self.kind == "list":
            data = self.list_data
            return "Attrset" if data is not None and data.list_type == LIST_TYPE_ATTRSET else "List"
        return _TYPE_NAMES[self.kind]

    def __str__(self) -> str:
        if self.kind == "list":
            data = self.list_data
            count = len(data.items) if data is not None else 0
            return f"{self.get_type()} ({count} items)"
        if self.kind == "string":
            return f'"{self.value}"'
        if self.kind == "path":
            return f'Path("{self.value}")'
        if self.kind == "bool":
            return "true" if self.value else "false"
        if self.kind in {"int", "float"}:
            return str(self.value)
        if self.kind == "error":
            return str(self.value)
        return self.get_type()



__all__ = [
    "LIST_TYPE_ATTRSET",
    "LIST_TYPE_LIST",
    "ListData",
    "PATH_DATA_KINDS",
    "PathData",
]
