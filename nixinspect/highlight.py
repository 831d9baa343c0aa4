"""Nix syntax highlighting for the breadcrumb and value previews.

Pygments is imported lazily on first use. Unknown style names fall back to
``monokai`` and any highlighting failure falls back to plain text.
"""

from __future__ import annotations

from .evaluator import nix_string_literal
from .path_data import PathData

DEFAULT_STYLE = "monokai"

_PYGMENTS_READY = False
_PYGMENTS_AVAILABLE = False
_PYGMENTS_HIGHLIGHT = None
_PYGMENTS_NIX_LEXER = None
_PYGMENTS_TERMINAL_FORMATTER = None
_PYGMENTS_GET_STYLE_BY_NAME = None
_PYGMENTS_VALID_STYLES: set[str] = set()
_PYGMENTS_INVALID_STYLES: set[str] = set()
_PYGMENTS_FORMATTERS: dict[str, object] = {}


def _ensure_pygments_loaded() -> bool:
    global _PYGMENTS_READY
    global _PYGMENTS_AVAILABLE
    global _PYGMENTS_HIGHLIGHT
    global _PYGMENTS_NIX_LEXER
    global _PYGMENTS_TERMINAL_FORMATTER
    global _PYGMENTS_GET_STYLE_BY_NAME

    if _PYGMENTS_READY:
        return _PYGMENTS_AVAILABLE

    _PYGMENTS_READY = True
    try:
        from pygments import highlight as pygments_highlight
        from pygments.formatters import TerminalFormatter
        from pygments.lexers import NixLexer
        from pygments.styles import get_style_by_name
    except ImportError:
        _PYGMENTS_AVAILABLE = False
        return False

    _PYGMENTS_HIGHLIGHT = pygments_highlight
    _PYGMENTS_NIX_LEXER = NixLexer()
    _PYGMENTS_TERMINAL_FORMATTER = TerminalFormatter
    _PYGMENTS_GET_STYLE_BY_NAME = get_style_by_name
    _PYGMENTS_AVAILABLE = True
    return True


def _normalize_style(style: str) -> str:
    if style in _PYGMENTS_VALID_STYLES:
        return style
    if style in _PYGMENTS_INVALID_STYLES:
        return DEFAULT_STYLE

    try:
        assert _PYGMENTS_GET_STYLE_BY_NAME is not None
        _PYGMENTS_GET_STYLE_BY_NAME(style)
        _PYGMENTS_VALID_STYLES.add(style)
        return style
    except Exception:
        _PYGMENTS_INVALID_STYLES.add(style)
        return DEFAULT_STYLE


def _formatter_for_style(style: str):
    formatter = _PYGMENTS_FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    assert _PYGMENTS_TERMINAL_FORMATTER is not None
    formatter = _PYGMENTS_TERMINAL_FORMATTER(style=style)
    _PYGMENTS_FORMATTERS[style] = formatter
    return formatter


def highlight_nix(source: str, style: str = DEFAULT_STYLE) -> str:
    """Colorize Nix ``source`` for the terminal, or return it unchanged."""
    if not source or not _ensure_pygments_loaded():
        return source

    formatter = _formatter_for_style(_normalize_style(style))
    try:
        assert _PYGMENTS_HIGHLIGHT is not None
        rendered = _PYGMENTS_HIGHLIGHT(source, _PYGMENTS_NIX_LEXER, formatter)
    except Exception:
        return source
    return rendered[:-1] if rendered.endswith("\n") and not source.endswith("\n") else rendered


def nix_literal(data: PathData) -> str | None:
    """Nix source text for a scalar value, or ``None`` for non-scalars."""
    if data.kind == "string":
        return nix_string_literal(str(data.value))
    if data.kind == "path":
        return str(data.value)
    if data.kind == "bool":
        return "true" if data.value else "false"
    if data.kind == "null":
        return "null"
    if data.kind in {"int", "float"}:
        return str(data.value)
    return None


__all__ = ["DEFAULT_STYLE", "highlight_nix", "nix_literal"]
