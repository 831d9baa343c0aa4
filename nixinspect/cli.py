"""Command-line front door for nix-inspect.

Parses CLI options, sets up logging, loads or seeds the bookmark config and
resolves the root expression. Then hands over to the interactive browser.
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import config
from .app import run_browser
from .errors import StartupError
from .logs import initialize_logging
from .model import Model
from .startup import load_or_seed_config, resolve_root_expr

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nix-inspect",
        description="Browse a NixOS configuration or any Nix expression interactively.",
    )
    parser.add_argument(
        "-p",
        "--path",
        default=None,
        help="Flake or NixOS configuration to inspect (default: /etc/nixos or nixos-config from NIX_PATH).",
    )
    parser.add_argument(
        "-e",
        "--expr",
        default=None,
        help="Nix expression to inspect; takes precedence over --path.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the browser; startup failures exit with status 1."""
    args = build_parser().parse_args(argv)

    try:
        log_path = initialize_logging()
        model = Model(config=load_or_seed_config(config.CONFIG_PATH))
        root_expr = resolve_root_expr(args.path, args.expr)
        logger.info("logging to %s, root expression %s", log_path, root_expr)
        run_browser(
            model,
            root_expr,
            config_path=config.CONFIG_PATH,
            num_workers=config.worker_count_from_env(),
            eval_timeout=config.eval_timeout_from_env(),
        )
    except StartupError as exc:
        logger.error("startup failed: %s", exc)
        print(f"nix-inspect: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
