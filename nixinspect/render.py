"""Frame composition for the three-column browser view.

The renderer only reads the model; the UI loop calls it under the read side
of the session lock and writes the returned frame in one ``os.write``.

Layout, top to bottom: breadcrumb header, ``list_height`` rows of
parent/current/preview columns, the input or status-message row, and the
reverse-video status bar.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass

from .ansi import RESET, pad_ansi_line, selected_with_ansi
from .highlight import highlight_nix, nix_literal
from .model import ROOT_MENU_ITEMS, Model
from .path import ROOT, BrowserPath
from .path_data import PathData
from .stack import BOOKMARKS, RECENTS, ROOT_ITEM, StackItem

COLUMN_SEPARATOR = "\033[2m│\033[0m"
DIM = "\033[2m"
BOLD = "\033[1m"
LIST_STYLE = "\033[1;34m"
ERROR_STYLE = "\033[31m"
CHROME_ROWS = 3

NORMAL_HINTS = "j/k move  l enter  h back  / search  . goto  s mark  r refresh  q quit"
BOOKMARKS_HINTS = "j/k move  l open  d delete  h back  q quit"
SEARCH_HINTS = "enter accept  esc cancel  tab next"
NAVIGATOR_HINTS = "enter go  esc cancel  tab complete"
BOOKMARK_INPUT_HINTS = "enter save  esc cancel"


@dataclass
class ViewData:
    """Geometry of the last rendered frame, consumed by paging."""

    list_height: int = 10


@dataclass
class Column:
    rows: list[str]
    selected: int | None = None


def build_status_line(left_text: str, width: int, right_text: str) -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def scroll_start(selected: int | None, count: int, height: int) -> int:
    """First visible row so that ``selected`` stays roughly centered."""
    if selected is None or count <= height or height <= 0:
        return 0
    return max(0, min(selected - height // 2, count - height))


def _stack_item_label(item: StackItem) -> str:
    if item is ROOT_ITEM:
        return "nix-inspect"
    if item is BOOKMARKS:
        return "Bookmarks"
    if item is RECENTS:
        return "Recents"
    assert isinstance(item, BrowserPath)
    return str(item)


def _child_row(model: Model, parent: BrowserPath, name: str) -> str:
    entry = model.path_data.get(parent.child(name))
    if entry is not None and entry.kind == "list":
        return f"{LIST_STYLE}{name}{RESET}"
    if entry is not None and entry.kind == "error":
        return f"{ERROR_STYLE}{name}{RESET}"
    return name


def value_lines(model: Model, path: BrowserPath, width: int) -> list[str]:
    """Rows describing the cached value at ``path``."""
    entry = model.path_data.get(path)
    if entry is None:
        return [f"{DIM}Not evaluated{RESET}"]
    if entry.is_loading:
        return [f"{DIM}Loading...{RESET}"]
    children = entry.list_data
    if children is not None:
        if not children.items:
            return [f"{DIM}Empty {entry.get_type().lower()}{RESET}"]
        return [_child_row(model, path, name) for name in children.items]
    if entry.kind == "error":
        wrapped = textwrap.wrap(str(entry.value), max(10, width)) or [""]
        return [f"{ERROR_STYLE}Error{RESET}"] + [f"{ERROR_STYLE}{line}{RESET}" for line in wrapped]
    return _leaf_lines(entry)


def _leaf_lines(entry: PathData) -> list[str]:
    lines = [f"{DIM}{entry.get_type()}{RESET}"]
    literal = nix_literal(entry)
    if literal is not None:
        lines.extend(highlight_nix(literal).splitlines() or [""])
    return lines


def _level_column(model: Model, item: StackItem | None, width: int) -> Column:
    if item is None:
        return Column([])
    if item is ROOT_ITEM:
        return Column(list(ROOT_MENU_ITEMS), model.root_selected)
    if item is BOOKMARKS:
        if not model.config.bookmarks:
            return Column([f"{DIM}No bookmarks{RESET}"])
        return Column([bookmark.display for bookmark in model.config.bookmarks], model.bookmark_selected)
    if item is RECENTS:
        if not model.recents:
            return Column([f"{DIM}No recent paths{RESET}"])
        return Column([str(path) for path in model.recents], model.recents_selected)
    assert isinstance(item, BrowserPath)
    children = model.path_data.current_list(item)
    rows = value_lines(model, item, width)
    if children is None or not children.items:
        return Column(rows)
    return Column(rows, children.selected)


def _preview_column(model: Model, width: int) -> Column:
    top = model.visit_stack.top
    if top is ROOT_ITEM:
        choice = model.root_selected
        if choice == 0:
            return _level_column(model, BOOKMARKS, width)
        if choice == 1:
            return _level_column(model, RECENTS, width)
        if choice == 2:
            return Column(value_lines(model, ROOT, width))
        return Column([])
    if top is BOOKMARKS:
        bookmark = model.selected_bookmark()
        if bookmark is None:
            return Column([])
        return Column([highlight_nix(str(bookmark.path))] + value_lines(model, bookmark.path, width))
    if top is RECENTS:
        recent = model.selected_recent()
        return Column([]) if recent is None else Column(value_lines(model, recent, width))

    assert isinstance(top, BrowserPath)
    children = model.path_data.current_list(top)
    if children is None:
        return Column([])
    selected = children.selected_path(top)
    return Column([]) if selected is None else Column(value_lines(model, selected, width))


def _column_cells(column: Column, width: int, height: int) -> list[str]:
    start = scroll_start(column.selected, len(column.rows), height)
    cells: list[str] = []
    for row in range(height):
        idx = start + row
        if idx >= len(column.rows):
            cells.append(" " * width)
            continue
        cell = pad_ansi_line(" " + column.rows[idx], width)
        if idx == column.selected:
            cell = selected_with_ansi(cell)
        cells.append(cell)
    return cells


def _input_row(model: Model) -> str:
    if model.search_input.active:
        prompt, state = "/", model.search_input
    elif model.path_navigator_input.active:
        prompt, state = "Go to: ", model.path_navigator_input
    elif model.new_bookmark_input.active:
        prompt, state = "Bookmark name: ", model.new_bookmark_input
    else:
        return f"{DIM}{model.status_message}{RESET}" if model.status_message else ""

    text = state.text
    cursor = min(state.cursor, len(text))
    under = text[cursor] if cursor < len(text) else " "
    line = f"{BOLD}{prompt}{RESET}{text[:cursor]}\033[7m{under}{RESET}{text[cursor + 1:]}"
    completion = model.tab_completion
    if completion is not None and model.path_navigator_input.active:
        line += f"{DIM}  ({completion.index + 1}/{len(completion.candidates)}){RESET}"
    return line


def _hints(model: Model) -> str:
    if model.search_input.active:
        return SEARCH_HINTS
    if model.path_navigator_input.active:
        return NAVIGATOR_HINTS
    if model.new_bookmark_input.active:
        return BOOKMARK_INPUT_HINTS
    if model.visit_stack.top is BOOKMARKS:
        return BOOKMARKS_HINTS
    return NORMAL_HINTS


def _header(model: Model) -> str:
    current = model.visit_stack.current()
    if current is None:
        trail = " / ".join(_stack_item_label(item) for item in model.visit_stack)
        return f"{BOLD}{trail}{RESET}"
    return f"{BOLD}nix-inspect{RESET} {highlight_nix(str(current))}"


def render_frame(model: Model, width: int, height: int) -> tuple[str, ViewData]:
    """Compose one full-screen frame for ``model``."""
    width = max(20, width)
    list_height = max(1, height - CHROME_ROWS)
    inner = width - 2
    parent_width = max(1, inner // 5)
    current_width = max(1, (inner * 2) // 5)
    preview_width = max(1, inner - parent_width - current_width)

    parent = _level_column(model, model.visit_stack.prev_item(), parent_width)
    current = _level_column(model, model.visit_stack.top, current_width)
    preview = _preview_column(model, preview_width)
    columns = zip(
        _column_cells(parent, parent_width, list_height),
        _column_cells(current, current_width, list_height),
        _column_cells(preview, preview_width, list_height),
    )

    out: list[str] = ["\033[H\033[J"]
    out.append(pad_ansi_line(_header(model), width))
    out.append("\r\n")
    for left, middle, right in columns:
        out.append(left)
        out.append(COLUMN_SEPARATOR)
        out.append(middle)
        out.append(COLUMN_SEPARATOR)
        out.append(right)
        out.append("\r\n")
    out.append(pad_ansi_line(_input_row(model), width))
    out.append("\r\n")
    top = model.visit_stack.top
    status = build_status_line(_stack_item_label(top), width, _hints(model))
    out.append("\033[7m")
    out.append(status)
    out.append("\033[0m")
    return "".join(out), ViewData(list_height=list_height)


__all__ = ["ViewData", "build_status_line", "render_frame", "scroll_start", "value_lines"]
