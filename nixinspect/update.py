"""Browser state machine: applies one message to the model.

``UpdateContext.update`` returns an optional follow-up message that the UI
loop applies before the next frame. Evaluation requests leave through the
injected request sink and come back later as ``data`` messages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from . import messages as msg
from .config import save_config
from .errors import InvalidPathError, PersistenceError
from .key_handlers import message_for_key
from .messages import Message
from .model import (
    ROOT_MENU_ITEMS,
    STOPPED,
    Bookmark,
    Model,
    TabCompletion,
    select_next,
    select_prev,
)
from .path import ROOT, BrowserPath, parse_navigator_input
from .path_data import ListData
from .stack import BOOKMARKS, RECENTS, ROOT_ITEM

if TYPE_CHECKING:
    from .render import ViewData

logger = logging.getLogger(__name__)

RequestSink = Callable[[BrowserPath], None]


def _shift(selected: int | None, length: int, delta: int) -> int | None:
    """Move a cursor by ``delta`` rows, clamped to the list bounds."""
    if length <= 0:
        return None
    start = 0 if selected is None else selected
    return max(0, min(length - 1, start + delta))


def split_navigator_text(text: str) -> tuple[str, str]:
    """Split typed navigator text at its last unquoted dot.

    Returns ``(parent_text, partial_segment)``; quotes are removed from the
    partial segment.
    """
    in_quote = False
    split_at = -1
    for idx, ch in enumerate(text):
        if ch == '"':
            in_quote = not in_quote
        elif ch == "." and not in_quote:
            split_at = idx
    if split_at < 0:
        return "", text.replace('"', "")
    return text[:split_at], text[split_at + 1 :].replace('"', "")


def _quote_segment(name: str) -> str:
    return f'"{name}"' if "." in name else name


class UpdateContext:
    def __init__(self, request_sink: RequestSink, config_path: Path | None = None) -> None:
        self.request_sink = request_sink
        self.config_path = config_path
        self._handlers: dict[str, Callable[[ViewData, Model, Message], Message | None]] = {
            msg.TERM_EVENT: self._term_event,
            msg.DATA: self._data,
            msg.CURRENT_PATH: self._current_path,
            msg.REFRESH: self._refresh,
            msg.LIST_UP: self._list_up,
            msg.LIST_DOWN: self._list_down,
            msg.PAGE_UP: self._page_up,
            msg.PAGE_DOWN: self._page_down,
            msg.ENTER_ITEM: self._enter_item,
            msg.BACK: self._back,
            msg.SEARCH_ENTER: self._search_enter,
            msg.SEARCH_INPUT: self._search_input,
            msg.SEARCH_NEXT: self._search_next,
            msg.SEARCH_PREV: self._search_prev,
            msg.SEARCH_EXIT: self._search_exit,
            msg.NAVIGATOR_ENTER: self._navigator_enter,
            msg.NAVIGATOR_INPUT: self._navigator_input,
            msg.NAVIGATOR_NEXT: self._navigator_next,
            msg.NAVIGATOR_PREV: self._navigator_prev,
            msg.NAVIGATOR_EXIT: self._navigator_exit,
            msg.BOOKMARK_INPUT_ENTER: self._bookmark_input_enter,
            msg.BOOKMARK_INPUT: self._bookmark_input,
            msg.BOOKMARK_INPUT_EXIT: self._bookmark_input_exit,
            msg.CREATE_BOOKMARK: self._create_bookmark,
            msg.DELETE_BOOKMARK: self._delete_bookmark,
            msg.QUIT: self._quit,
        }

    def update(self, view: ViewData, model: Model, message: Message) -> Message | None:
        """Apply ``message`` to ``model`` and return the chained message, if any.

        Raises ``BrowserError`` subclasses for recoverable failures; the caller
        drops the rest of the chain.
        """
        return self._handlers[message.kind](view, model, message)

    # Evaluation requests

    def request(self, model: Model, path: BrowserPath) -> bool:
        """Dispatch evaluation of ``path`` unless it is cached or pending."""
        if not model.path_data.mark_loading(path):
            return False
        self.request_sink(path)
        return True

    def request_children(self, model: Model, path: BrowserPath) -> int:
        children = model.path_data.current_list(path)
        if children is None:
            return 0
        return sum(1 for name in children.items if self.request(model, path.child(name)))

    def visit(self, model: Model, path: BrowserPath) -> None:
        """Make sure ``path`` and, for lists, its children are evaluated."""
        entry = model.path_data.get(path)
        if entry is None:
            self.request(model, path)
        elif entry.kind == "thunk":
            self.request_sink(path)
        elif entry.kind == "list":
            self.request_children(model, path)

    def jump(self, model: Model, path: BrowserPath) -> Message | None:
        """Replace the stack with the route to ``path`` and record it as recent."""
        model.update_parent_selection(path)
        model.record_recent(path)
        ancestor = path.parent()
        while ancestor is not None:
            self.request(model, ancestor)
            ancestor = ancestor.parent()
        self.visit(model, path)
        return None

    # Data flow

    def _term_event(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        return message_for_key(model, message.key or "")

    def _data(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        assert message.path is not None and message.data is not None
        model.path_data.insert(message.path, message.data)
        if message.path == model.visit_stack.current() and message.data.kind == "list":
            self.request_children(model, message.path)
        return None

    def _current_path(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        assert message.path is not None
        self.request(model, message.path)
        return None

    def _refresh(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        current = model.visit_stack.current()
        if current is None:
            return None
        model.path_data.refresh(current)
        self.request_sink(current)
        return None

    # Normal browsing

    def _move_cursor(self, model: Model, move: Callable[[int | None, int], int | None]) -> Message | None:
        top = model.visit_stack.top
        if top is ROOT_ITEM:
            model.root_selected = move(model.root_selected, len(ROOT_MENU_ITEMS))
            return None
        if top is BOOKMARKS:
            model.bookmark_selected = move(model.bookmark_selected, len(model.config.bookmarks))
            return None
        if top is RECENTS:
            model.recents_selected = move(model.recents_selected, len(model.recents))
            return None
        current = model.visit_stack.current_force()
        children = model.path_data.current_list(current)
        if children is None:
            return None
        children.selected = move(children.selected, len(children.items))
        selected = children.selected_path(current)
        return None if selected is None else Message.current_path(selected)

    def _list_up(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._move_cursor(model, select_prev)

    def _list_down(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._move_cursor(model, select_next)

    def _page_up(self, view: ViewData, model: Model, _message: Message) -> Message | None:
        rows = max(1, view.list_height)
        return self._move_cursor(model, lambda selected, length: _shift(selected, length, -rows))

    def _page_down(self, view: ViewData, model: Model, _message: Message) -> Message | None:
        rows = max(1, view.list_height)
        return self._move_cursor(model, lambda selected, length: _shift(selected, length, rows))

    def _enter_item(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        stack = model.visit_stack
        top = stack.top
        if top is ROOT_ITEM:
            choice = model.root_selected
            if choice == 0:
                stack.push(BOOKMARKS)
            elif choice == 1:
                stack.push(RECENTS)
            elif choice == 2:
                stack.push_path(ROOT)
                self.visit(model, ROOT)
            return None
        if top is BOOKMARKS:
            bookmark = model.selected_bookmark()
            return None if bookmark is None else self.jump(model, bookmark.path)
        if top is RECENTS:
            recent = model.selected_recent()
            return None if recent is None else self.jump(model, recent)

        current = stack.current_force()
        children = model.path_data.current_list(current)
        if children is None:
            return None
        selected = children.selected_path(current)
        if selected is None:
            return None
        stack.push_path(selected)
        self.visit(model, selected)
        return None

    def _back(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        model.visit_stack.truncate()
        return None

    # Search

    def _search_matches(self, model: Model) -> list[int]:
        current = model.visit_stack.current()
        children = None if current is None else model.path_data.current_list(current)
        query = model.search_input.text.casefold()
        if children is None or not query:
            return []
        return [idx for idx, name in enumerate(children.items) if query in name.casefold()]

    def _current_children(self, model: Model) -> ListData | None:
        current = model.visit_stack.current()
        return None if current is None else model.path_data.current_list(current)

    def _search_enter(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        children = self._current_children(model)
        if children is None:
            return None
        model.search_input.activate()
        model.search_origin = children.selected
        return None

    def _search_input(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        if not model.search_input.handle_key(message.key or ""):
            return None
        children = self._current_children(model)
        matches = self._search_matches(model)
        if children is None or not matches:
            return None
        origin = model.search_origin or 0
        children.selected = next((idx for idx in matches if idx >= origin), matches[0])
        return None

    def _cycle_match(self, model: Model, forward: bool) -> Message | None:
        children = self._current_children(model)
        matches = self._search_matches(model)
        if children is None or not matches:
            return None
        selected = -1 if children.selected is None else children.selected
        if forward:
            children.selected = next((idx for idx in matches if idx > selected), matches[0])
        else:
            children.selected = next((idx for idx in reversed(matches) if idx < selected), matches[-1])
        return None

    def _search_next(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._cycle_match(model, forward=True)

    def _search_prev(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._cycle_match(model, forward=False)

    def _search_exit(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        model.search_input.deactivate()
        origin = model.search_origin
        model.search_origin = None
        current = model.visit_stack.current()
        children = self._current_children(model)
        if current is None or children is None:
            return None
        if not message.commit:
            children.selected = origin
            return None
        selected = children.selected_path(current)
        return None if selected is None else Message.current_path(selected)

    # Path navigator

    def _navigator_enter(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        current = model.visit_stack.current()
        text = "." if current is None else "." + current.to_expr()
        model.path_navigator_input.activate(text)
        model.tab_completion = None
        return None

    def _navigator_input(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        if model.path_navigator_input.handle_key(message.key or ""):
            model.tab_completion = None
        return None

    def _complete(self, model: Model, delta: int) -> Message | None:
        completion = model.tab_completion
        if completion is None:
            parent_text, partial = split_navigator_text(model.path_navigator_input.text)
            try:
                parent = parse_navigator_input(parent_text)
            except InvalidPathError:
                return None
            children = model.path_data.current_list(parent)
            if children is None:
                self.request(model, parent)
                return None
            folded = partial.casefold()
            candidates = [name for name in children.items if name.casefold().startswith(folded)]
            if not candidates:
                return None
            completion = TabCompletion(
                base=parent_text if parent_text != "." else "",
                candidates=candidates,
                index=0 if delta > 0 else len(candidates) - 1,
            )
            model.tab_completion = completion
        else:
            completion.index = (completion.index + delta) % len(completion.candidates)
        name = completion.candidates[completion.index]
        model.path_navigator_input.set_text(f"{completion.base}.{_quote_segment(name)}")
        return None

    def _navigator_next(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._complete(model, 1)

    def _navigator_prev(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        return self._complete(model, -1)

    def _navigator_exit(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        text = model.path_navigator_input.deactivate()
        model.tab_completion = None
        if not message.commit:
            return None
        return self.jump(model, parse_navigator_input(text))

    # Bookmarks

    def _bookmark_input_enter(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        if model.visit_stack.current() is None:
            return None
        model.new_bookmark_input.activate()
        return None

    def _bookmark_input(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        model.new_bookmark_input.handle_key(message.key or "")
        return None

    def _bookmark_input_exit(self, _view: ViewData, model: Model, message: Message) -> Message | None:
        if message.commit:
            return Message.simple(msg.CREATE_BOOKMARK)
        model.new_bookmark_input.deactivate()
        return None

    def _persist(self, model: Model) -> None:
        save_config(model.config, self.config_path)

    def _create_bookmark(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        label = model.new_bookmark_input.deactivate().strip()
        current = model.visit_stack.current()
        if current is None:
            return None
        bookmark = Bookmark(display=label or current.to_expr() or ".", path=current)
        model.config.bookmarks.append(bookmark)
        try:
            self._persist(model)
        except PersistenceError:
            model.config.bookmarks.pop()
            raise
        logger.info("added bookmark %r -> %s", bookmark.display, bookmark.path)
        model.status_message = f"Bookmarked {bookmark.display}"
        return None

    def _delete_bookmark(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        if model.visit_stack.top is not BOOKMARKS:
            return None
        bookmark = model.selected_bookmark()
        if bookmark is None:
            return None
        index = model.bookmark_selected
        assert index is not None
        del model.config.bookmarks[index]
        try:
            self._persist(model)
        except PersistenceError:
            model.config.bookmarks.insert(index, bookmark)
            raise
        logger.info("removed bookmark %r", bookmark.display)
        remaining = len(model.config.bookmarks)
        model.bookmark_selected = min(index, remaining - 1) if remaining else 0
        return None

    def _quit(self, _view: ViewData, model: Model, _message: Message) -> Message | None:
        model.running_state = STOPPED
        return None


__all__ = ["RequestSink", "UpdateContext", "split_navigator_text"]
