"""Messages consumed by the browser state machine.

Every user action, terminal event, and evaluation response reaches the
model as one ``Message``. ``kind`` selects the transition; the optional
fields carry its payload.
"""

from __future__ import annotations

from dataclasses import dataclass

from .path import BrowserPath
from .path_data import PathData

TERM_EVENT = "term_event"
DATA = "data"
CURRENT_PATH = "current_path"
REFRESH = "refresh"
PAGE_DOWN = "page_down"
PAGE_UP = "page_up"
SEARCH_ENTER = "search_enter"
SEARCH_EXIT = "search_exit"
SEARCH_INPUT = "search_input"
SEARCH_NEXT = "search_next"
SEARCH_PREV = "search_prev"
NAVIGATOR_ENTER = "navigator_enter"
NAVIGATOR_EXIT = "navigator_exit"
NAVIGATOR_INPUT = "navigator_input"
NAVIGATOR_NEXT = "navigator_next"
NAVIGATOR_PREV = "navigator_prev"
BOOKMARK_INPUT_ENTER = "bookmark_input_enter"
BOOKMARK_INPUT_EXIT = "bookmark_input_exit"
BOOKMARK_INPUT = "bookmark_input"
CREATE_BOOKMARK = "create_bookmark"
DELETE_BOOKMARK = "delete_bookmark"
BACK = "back"
ENTER_ITEM = "enter_item"
LIST_UP = "list_up"
LIST_DOWN = "list_down"
QUIT = "quit"

MESSAGE_KINDS = frozenset(
    {
        TERM_EVENT,
        DATA,
        CURRENT_PATH,
        REFRESH,
        PAGE_DOWN,
        PAGE_UP,
        SEARCH_ENTER,
        SEARCH_EXIT,
        SEARCH_INPUT,
        SEARCH_NEXT,
        SEARCH_PREV,
        NAVIGATOR_ENTER,
        NAVIGATOR_EXIT,
        NAVIGATOR_INPUT,
        NAVIGATOR_NEXT,
        NAVIGATOR_PREV,
        BOOKMARK_INPUT_ENTER,
        BOOKMARK_INPUT_EXIT,
        BOOKMARK_INPUT,
        CREATE_BOOKMARK,
        DELETE_BOOKMARK,
        BACK,
        ENTER_ITEM,
        LIST_UP,
        LIST_DOWN,
        QUIT,
    }
)


@dataclass(frozen=True)
class Message:
    kind: str
    path: BrowserPath | None = None
    data: PathData | None = None
    key: str | None = None
    commit: bool = False

    def __post_init__(self) -> None:
        if self.kind not in MESSAGE_KINDS:
            raise ValueError(f"unknown message kind: {self.kind!r}")

    @classmethod
    def simple(cls, kind: str) -> Message:
        return cls(kind)

    @classmethod
    def term_event(cls, key: str) -> Message:
        return cls(TERM_EVENT, key=key)

    @classmethod
    def data_for(cls, path: BrowserPath, data: PathData) -> Message:
        return cls(DATA, path=path, data=data)

    @classmethod
    def current_path(cls, path: BrowserPath) -> Message:
        return cls(CURRENT_PATH, path=path)

    @classmethod
    def input_key(cls, kind: str, key: str) -> Message:
        return cls(kind, key=key)

    @classmethod
    def exit_input(cls, kind: str, commit: bool) -> Message:
        return cls(kind, commit=commit)

    def __repr__(self) -> str:
        parts = [self.kind]
        if self.path is not None:
            parts.append(str(self.path))
        if self.data is not None:
            parts.append(self.data.get_type())
        if self.key is not None:
            parts.append(repr(self.key))
        if self.commit:
            parts.append("commit")
        return f"Message({', '.join(parts)})"

