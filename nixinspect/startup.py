"""Startup helpers: root expression resolution and first-run config seeding.

Everything here runs before the terminal UI takes over, so failures are
reported as ``StartupError`` and end the process.
"""

from __future__ import annotations

import getpass
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from .config import load_config, save_config
from .errors import PersistenceError, StartupError
from .model import Bookmark, Config
from .path import BrowserPath

logger = logging.getLogger(__name__)

ETC_NIXOS = Path("/etc/nixos")
HOSTNAME_FILE = Path("/proc/sys/kernel/hostname")


def flake_expr(path: str) -> str:
    return f'builtins.getFlake "{path}"'


def nixos_module_expr(path: str) -> str:
    return (
        "(import <nixpkgs/nixos>) "
        f"{{ system = builtins.currentSystem; configuration = import {path}; }}"
    )


def is_flake(path: Path) -> bool:
    """Whether ``path`` is a ``flake.nix`` file or a directory holding one."""
    if path.is_file() and path.name == "flake.nix":
        return True
    return (path / "flake.nix").exists()


def find_in_nix_path(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the ``nixos-config=`` entry of ``NIX_PATH`` if present."""
    env = os.environ if environ is None else environ
    raw = env.get("NIX_PATH")
    if not raw:
        return None
    for entry in raw.split(":"):
        name, sep, value = entry.partition("=")
        if sep and name == "nixos-config":
            return value
    return None


def resolve_root_expr(
    path: str | None = None,
    expr: str | None = None,
    *,
    etc_nixos: Path = ETC_NIXOS,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the top-level expression every node is evaluated under.

    Priority: explicit expression, explicit path (flake or plain import),
    the system flake in ``/etc/nixos``, ``nixos-config`` from ``NIX_PATH``,
    and finally plain ``/etc/nixos``.
    """
    if expr is not None:
        return expr
    if path is not None:
        target = Path(path)
        if is_flake(target):
            flake_dir = target.parent if target.is_file() else target
            return flake_expr(str(flake_dir.resolve()))
        return nixos_module_expr(path)
    if (etc_nixos / "flake.nix").exists():
        return flake_expr(str(etc_nixos))
    nix_path_config = find_in_nix_path(environ)
    return nixos_module_expr(nix_path_config or str(etc_nixos))


def read_hostname(hostname_file: Path = HOSTNAME_FILE) -> str:
    try:
        hostname = hostname_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise StartupError(f"could not read hostname from {hostname_file}: {exc}") from exc
    if not hostname:
        raise StartupError(f"empty hostname in {hostname_file}")
    return hostname


def read_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError) as exc:
        raise StartupError(f"could not determine user name: {exc}") from exc


def default_config(hostname: str, user: str) -> Config:
    """First-run bookmarks: the host's NixOS config and its home-manager user."""
    hostname_path = BrowserPath.from_expr(".nixosConfigurations").child(hostname)
    user_path = hostname_path.extend(BrowserPath.from_expr("config.home-manager.users")).child(user)
    return Config(
        bookmarks=[
            Bookmark(display=hostname, path=hostname_path),
            Bookmark(display=user, path=user_path),
        ]
    )


def load_or_seed_config(
    config_path: Path,
    *,
    hostname_file: Path = HOSTNAME_FILE,
) -> Config:
    """Load the config at ``config_path``, writing the seeded default if absent."""
    config = load_config(config_path)
    if config is not None:
        return config

    config = default_config(read_hostname(hostname_file), read_user())
    try:
        save_config(config, config_path)
    except PersistenceError as exc:
        raise StartupError(str(exc)) from exc
    logger.info("seeded config at %s", config_path)
    return config


__all__ = [
    "default_config",
    "find_in_nix_path",
    "flake_expr",
    "is_flake",
    "load_or_seed_config",
    "nixos_module_expr",
    "read_hostname",
    "read_user",
    "resolve_root_expr",
]
