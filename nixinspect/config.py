"""Persistent JSON config: the user's bookmarks.

The file lives in the platform config directory and is rewritten wholesale
on every change. Loading is defensive: malformed entries are dropped and an
unreadable file reads as missing. Saving raises ``PersistenceError``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_config_dir

from .errors import PersistenceError
from .model import Bookmark, Config
from .path import BrowserPath

APP_NAME = "nix-inspect"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

WORKERS_ENV = "NIX_INSPECT_WORKERS"
EVAL_TIMEOUT_ENV = "NIX_INSPECT_EVAL_TIMEOUT"
DEFAULT_WORKERS = 1
DEFAULT_EVAL_TIMEOUT_SECONDS = 120.0


def _config_path(path: Path | None) -> Path:
    return CONFIG_PATH if path is None else path


def _parse_bookmarks(value: object) -> list[Bookmark]:
    """Validate raw bookmark entries; entries without a string path are skipped."""
    if not isinstance(value, list):
        return []
    bookmarks: list[Bookmark] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        raw_path = raw.get("path")
        if not isinstance(raw_path, str):
            continue
        path = BrowserPath.rooted(raw_path)
        display = raw.get("display")
        if not isinstance(display, str) or not display.strip():
            display = path.to_expr() or "."
        bookmarks.append(Bookmark(display=display, path=path))
    return bookmarks


def load_config(path: Path | None = None) -> Config | None:
    """Load persisted config, or ``None`` when missing or unreadable."""
    config_path = _config_path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return Config(bookmarks=_parse_bookmarks(data.get("bookmarks")))


def serialize_config(config: Config) -> str:
    payload = {"bookmarks": [bookmark.to_json() for bookmark in config.bookmarks]}
    return json.dumps(payload, indent=2) + "\n"


def save_config(config: Config, path: Path | None = None) -> None:
    """Write ``config`` as pretty-printed JSON, creating parent directories."""
    config_path = _config_path(path)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(serialize_config(config), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"could not save bookmarks to {config_path}: {exc}") from exc


def worker_count_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Number of evaluation workers; invalid or non-positive values use the default."""
    env = os.environ if environ is None else environ
    try:
        parsed = int(env.get(WORKERS_ENV, ""))
    except ValueError:
        return DEFAULT_WORKERS
    return parsed if parsed > 0 else DEFAULT_WORKERS


def eval_timeout_from_env(environ: Mapping[str, str] | None = None) -> float:
    env = os.environ if environ is None else environ
    try:
        parsed = float(env.get(EVAL_TIMEOUT_ENV, ""))
    except ValueError:
        return DEFAULT_EVAL_TIMEOUT_SECONDS
    return parsed if parsed > 0 else DEFAULT_EVAL_TIMEOUT_SECONDS

__all__ = [
    "APP_NAME",
    "CONFIG_FILENAME",
    "CONFIG_PATH",
    "DEFAULT_CONFIG_PATH",
    "eval_timeout_from_env",
    "load_config",
    "save_config",
    "serialize_config",
    "worker_count_from_env",
]
