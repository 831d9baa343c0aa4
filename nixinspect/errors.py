"""Exception hierarchy shared by the browser, pipeline, and startup code.

Node evaluation failures are data (an error-kind cache entry), not exceptions.
Only session-level and startup-level failures travel as exceptions.
"""

from __future__ import annotations


class NixInspectError(Exception):
    """Base class for all nix-inspect errors."""


class StartupError(NixInspectError):
    """Fatal failure before the interactive loop exists."""


class BrowserError(NixInspectError):
    """Recoverable failure that aborts the current message chain."""


class PersistenceError(BrowserError):
    """Bookmark config could not be written."""


class InvalidPathError(BrowserError):
    """Free-text attribute path could not be parsed."""


class WorkerChannelClosed(NixInspectError):
    """The evaluation pipeline will never produce another response."""
