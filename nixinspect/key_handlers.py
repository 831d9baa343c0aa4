"""Translate normalized key tokens into browser messages.

The active text input decides the mode; with no input active the normal
browsing bindings apply. Returns ``None`` for keys with no binding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import messages as msg
from .messages import Message

if TYPE_CHECKING:
    from .model import Model

QUIT_KEYS = frozenset({"q", "CTRL_C"})
UP_KEYS = frozenset({"UP", "k"})
DOWN_KEYS = frozenset({"DOWN", "j"})
ENTER_KEYS = frozenset({"ENTER", "RIGHT", "l"})
BACK_KEYS = frozenset({"LEFT", "h", "BACKSPACE"})
PAGE_UP_KEYS = frozenset({"PAGE_UP", "CTRL_U"})
PAGE_DOWN_KEYS = frozenset({"PAGE_DOWN", "CTRL_D"})
NAVIGATOR_KEYS = frozenset({".", ":"})

_NORMAL_BINDINGS: dict[str, str] = {
    "/": msg.SEARCH_ENTER,
    "s": msg.BOOKMARK_INPUT_ENTER,
    "d": msg.DELETE_BOOKMARK,
    "r": msg.REFRESH,
}
for _keys, _kind in (
    (QUIT_KEYS, msg.QUIT),
    (UP_KEYS, msg.LIST_UP),
    (DOWN_KEYS, msg.LIST_DOWN),
    (ENTER_KEYS, msg.ENTER_ITEM),
    (BACK_KEYS, msg.BACK),
    (PAGE_UP_KEYS, msg.PAGE_UP),
    (PAGE_DOWN_KEYS, msg.PAGE_DOWN),
    (NAVIGATOR_KEYS, msg.NAVIGATOR_ENTER),
):
    for _key in _keys:
        _NORMAL_BINDINGS[_key] = _kind


def _search_key(key: str) -> Message:
    if key == "ESC":
        return Message.exit_input(msg.SEARCH_EXIT, commit=False)
    if key == "ENTER":
        return Message.exit_input(msg.SEARCH_EXIT, commit=True)
    if key in {"DOWN", "CTRL_N", "TAB"}:
        return Message.simple(msg.SEARCH_NEXT)
    if key in {"UP", "CTRL_P", "SHIFT_TAB"}:
        return Message.simple(msg.SEARCH_PREV)
    return Message.input_key(msg.SEARCH_INPUT, key)


def _navigator_key(key: str) -> Message:
    if key == "ESC":
        return Message.exit_input(msg.NAVIGATOR_EXIT, commit=False)
    if key == "ENTER":
        return Message.exit_input(msg.NAVIGATOR_EXIT, commit=True)
    if key in {"TAB", "DOWN"}:
        return Message.simple(msg.NAVIGATOR_NEXT)
    if key in {"SHIFT_TAB", "UP"}:
        return Message.simple(msg.NAVIGATOR_PREV)
    return Message.input_key(msg.NAVIGATOR_INPUT, key)


def _bookmark_key(key: str) -> Message:
    if key == "ESC":
        return Message.exit_input(msg.BOOKMARK_INPUT_EXIT, commit=False)
    if key == "ENTER":
        return Message.exit_input(msg.BOOKMARK_INPUT_EXIT, commit=True)
    return Message.input_key(msg.BOOKMARK_INPUT, key)


def message_for_key(model: Model, key: str) -> Message | None:
    if not key or key == "RESIZE":
        return None
    if model.search_input.active:
        return _search_key(key)
    if model.path_navigator_input.active:
        return _navigator_key(key)
    if model.new_bookmark_input.active:
        return _bookmark_key(key)
    kind = _NORMAL_BINDINGS.get(key)
    return None if kind is None else Message.simple(kind)


__all__ = ["message_for_key"]
