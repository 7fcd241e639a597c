#!/usr/bin/env python3
"""Command line entry point: parse flags, set up logging and run the TUI."""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from typing import List, Optional

from application.keymap import DEFAULT_KEYBINDINGS, build_keymaps
from config import (
    get_data_dir,
    get_frame_rate,
    get_highlight_ticks,
    get_keybinding_overrides,
    get_log_level,
    get_theme,
    get_tick_rate,
)
from core.errors import ConfigError, StorageError
from infrastructure.yaml_store import YamlRecordStore
from util.log_setup import setup_logging

from .tui_app import DomeTUI
from .tui_themes import DEFAULT_THEME, THEMES

logger = logging.getLogger("dome.app")


def _version() -> str:
    try:
        return pkg_version("dome")
    except PackageNotFoundError:
        return "0.0.0"


def _positive(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dome", description="To-do lists grouped into workspaces, in the terminal.")
    parser.add_argument("--data-dir", type=Path, help="directory holding dome.yaml and dome.log")
    parser.add_argument("--tick-rate", type=_positive, metavar="HZ", help="ticks per second (key chord timeout, highlights)")
    parser.add_argument("--frame-rate", type=_positive, metavar="HZ", help="redraws per second")
    parser.add_argument("--theme", choices=sorted(THEMES), help="color palette")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    data_dir = args.data_dir or get_data_dir()
    log_path = setup_logging(data_dir, get_log_level())
    logger.info("dome %s, data in %s", _version(), data_dir)

    try:
        keymaps = build_keymaps(DEFAULT_KEYBINDINGS, get_keybinding_overrides())
    except ConfigError as exc:
        logger.error("Invalid keybindings: %s", exc)
        print(f"dome: invalid keybindings: {exc}", file=sys.stderr)
        return 2

    try:
        store = YamlRecordStore.in_data_dir(data_dir)
    except StorageError as exc:
        logger.error("%s", exc)
        print(f"dome: {exc}", file=sys.stderr)
        return 1

    theme = args.theme or get_theme() or DEFAULT_THEME
    tui = DomeTUI(
        store,
        keymaps=keymaps,
        tick_rate=args.tick_rate or get_tick_rate(),
        frame_rate=args.frame_rate or get_frame_rate(),
        theme=theme,
        config={"highlight_ticks": get_highlight_ticks()},
    )
    try:
        tui.run()
    except StorageError as exc:
        logger.exception("Storage failure")
        print(f"dome: {exc} (see {log_path})", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
