"""Browser session state: bookmarks, text inputs, recents, and the model.

The model is owned by the UI thread and mutated one message at a time.
Cursor helpers wrap around at both ends of a list.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .cache import PathDataMap
from .path import BrowserPath
from .stack import ROOT_ITEM, BrowserStack, StackItem

ROOT_MENU_ITEMS: tuple[str, ...] = ("Bookmarks", "Recents", "Root")
ROOT_MENU_ROOT_INDEX = 2
MAX_RECENTS = 64

RUNNING = "running"
STOPPED = "stopped"


def next_index(i: int, length: int) -> int:
    """Index after ``i``, wrapping to 0 past the end."""
    if i >= length - 1:
        return 0
    return i + 1


def prev_index(i: int, length: int) -> int:
    """Index before ``i``, wrapping to the end below 0."""
    if i <= 0:
        return length - 1
    return i - 1


def select_next(selected: int | None, length: int) -> int | None:
    if length <= 0:
        return None
    return 0 if selected is None else next_index(selected, length)


def select_prev(selected: int | None, length: int) -> int | None:
    if length <= 0:
        return None
    return 0 if selected is None else prev_index(selected, length)


@dataclass(frozen=True)
class Bookmark:
    display: str
    path: BrowserPath

    def to_json(self) -> dict[str, str]:
        return {"display": self.display, "path": self.path.to_expr()}


@dataclass
class Config:
    bookmarks: list[Bookmark] = field(default_factory=list)


class InputState:
    """One single-line text box: inactive, or active with text and cursor."""

    def __init__(self) -> None:
        self.active = False
        self.text = ""
        self.cursor = 0

    def activate(self, text: str = "") -> None:
        self.active = True
        self.text = text
        self.cursor = len(text)

    def deactivate(self) -> str:
        text = self.text
        self.active = False
        self.text = ""
        self.cursor = 0
        return text

    def set_text(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return whether the text changed."""
        if key == "BACKSPACE":
            return self.backspace()
        if key == "LEFT":
            self.cursor = max(0, self.cursor - 1)
            return False
        if key == "RIGHT":
            self.cursor = min(len(self.text), self.cursor + 1)
            return False
        if key == "CTRL_U":
            changed = bool(self.text)
            self.set_text("")
            return changed
        if len(key) == 1 and key.isprintable():
            self.insert(key)
            return True
        return False

    def insert(self, ch: str) -> None:
        self.text = self.text[: self.cursor] + ch + self.text[self.cursor :]
        self.cursor += len(ch)

    def backspace(self) -> bool:
        if self.cursor == 0:
            return False
        self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
        self.cursor -= 1
        return True


@dataclass
class TabCompletion:
    """Navigator completion cycle: candidates for one typed prefix."""

    base: str
    candidates: list[str]
    index: int = 0


@dataclass
class Model:
    config: Config = field(default_factory=Config)
    running_state: str = RUNNING
    path_data: PathDataMap = field(default_factory=PathDataMap)
    recents: list[BrowserPath] = field(default_factory=list)
    visit_stack: BrowserStack = field(default_factory=BrowserStack)
    search_input: InputState = field(default_factory=InputState)
    path_navigator_input: InputState = field(default_factory=InputState)
    new_bookmark_input: InputState = field(default_factory=InputState)
    tab_completion: TabCompletion | None = None
    search_origin: int | None = None
    root_selected: int | None = 0
    bookmark_selected: int | None = 0
    recents_selected: int | None = 0
    status_message: str = ""

    @property
    def running(self) -> bool:
        return self.running_state != STOPPED

    def active_input(self) -> InputState | None:
        for state in (self.search_input, self.path_navigator_input, self.new_bookmark_input):
            if state.active:
                return state
        return None

    def selected_bookmark(self) -> Bookmark | None:
        if self.bookmark_selected is None:
            return None
        if 0 <= self.bookmark_selected < len(self.config.bookmarks):
            return self.config.bookmarks[self.bookmark_selected]
        return None

    def selected_recent(self) -> BrowserPath | None:
        if self.recents_selected is None:
            return None
        if 0 <= self.recents_selected < len(self.recents):
            return self.recents[self.recents_selected]
        return None

    def record_recent(self, path: BrowserPath) -> None:
        """Move ``path`` to the front of the recents list."""
        self.recents = [path] + [p for p in self.recents if p != path]
        del self.recents[MAX_RECENTS:]

    def update_parent_selection(self, current_path: BrowserPath) -> None:
        """Rebuild the stack from the root down to ``current_path``.

        Every cached ancestor list gets its cursor moved onto the route.
        """
        chain: list[StackItem] = [current_path]
        path = current_path
        while True:
            parent = path.parent()
            if parent is None:
                break
            chain.append(parent)
            parent_list = self.path_data.current_list(parent)
            if parent_list is not None and path.last is not None:
                parent_list.select_name(path.last)
            path = parent
        chain.append(ROOT_ITEM)
        chain.reverse()
        self.root_selected = ROOT_MENU_ROOT_INDEX
        self.visit_stack.replace(chain)


__all__ = [
    "Bookmark",
    "Config",
    "InputState",
    "MAX_RECENTS",
    "Model",
    "ROOT_MENU_ITEMS",
    "ROOT_MENU_ROOT_INDEX",
    "RUNNING",
    "STOPPED",
    "TabCompletion",
    "next_index",
    "prev_index",
    "select_next",
    "select_prev",
]
