"""Attribute-path addressing for nodes of the evaluated tree.

A ``BrowserPath`` is an immutable sequence of segments. The tree root is the
single empty segment; it is dropped when a path is rendered as text.
The text form is also the on-disk bookmark format and navigator input.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidPathError


@dataclass(frozen=True)
class BrowserPath:
    segments: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def last(self) -> str | None:
        return self.segments[-1] if self.segments else None

    def parent(self) -> BrowserPath | None:
        """Return the enclosing path, or ``None`` for zero/one-segment paths."""
        if len(self.segments) > 1:
            return BrowserPath(self.segments[:-1])
        return None

    def child(self, name: str) -> BrowserPath:
        return BrowserPath(self.segments + (str(name),))

    def extend(self, other: BrowserPath) -> BrowserPath:
        return BrowserPath(self.segments + other.segments)

    def to_expr(self) -> str:
        """Render the canonical dotted form.

        Segments containing ``.`` are double-quoted. A leading empty segment
        (the root) contributes nothing, so the root renders as ``""``.
        """
        items = list(self.segments)
        if items and items[0] == "":
            items = items[1:]
        return ".".join(f'"{item}"' if "." in item else item for item in items)

    @classmethod
    def from_expr(cls, text: str) -> BrowserPath:
        """Parse the dotted form produced by ``to_expr``.

        Splits on unquoted dots. A quoted run is part of the current segment
        with its dots preserved; an unterminated quote runs to end of text.
        """
        segments: list[str] = []
        current: list[str] = []
        chars = iter(text)
        for ch in chars:
            if ch == ".":
                segments.append("".join(current))
                current = []
            elif ch == '"':
                for inner in chars:
                    if inner == '"':
                        break
                    current.append(inner)
            else:
                current.append(ch)
        segments.append("".join(current))
        return cls(tuple(segments))

    @classmethod
    def rooted(cls, text: str) -> BrowserPath:
        """Parse ``text`` and anchor it at the tree root."""
        parsed = cls.from_expr(text)
        if parsed.segments[0] == "":
            return parsed
        return ROOT.extend(parsed)

    def __str__(self) -> str:
        return "." + self.to_expr()


ROOT = BrowserPath(("",))


def parse_navigator_input(text: str) -> BrowserPath:
    """Strictly parse an attribute path typed by the user.

    ``""`` and ``"."`` both mean the root; a leading dot is optional.
    Unterminated quotes and empty segments are rejected.
    """
    stripped = text.strip()
    if stripped in {"", "."}:
        return ROOT
    if stripped.count('"') % 2:
        raise InvalidPathError(f"unterminated quote in {stripped!r}")
    path = BrowserPath.rooted(stripped)
    if any(segment == "" for segment in path.segments[1:]):
        raise InvalidPathError(f"empty attribute name in {stripped!r}")
    return path


__all__ = ["BrowserPath", "ROOT", "parse_navigator_input"]
