"""Entry point for the command-line interface."""

from __future__ import annotations

import argparse
import logging

from ghost_assistant.confirm import console_confirm, set_confirm
from ghost_assistant.log import configure_logging, install_exception_hooks
from ghost_assistant.settings import load_or_default

from .commands import COMMANDS


def build_parser() -> argparse.ArgumentParser:
    """Construct argument parser for CLI commands."""
    parser = argparse.ArgumentParser(
        prog="ghost-assistant",
        description="Ghost Assistant: chat with an LLM that can use local tools",
    )
    parser.add_argument(
        "--settings",
        help="path to JSON/TOML settings (default: ~/.ghost_assistant/settings.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="print informational log messages to the console",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    for name, cmd in COMMANDS.items():
        p = sub.add_parser(name, help=cmd.help)
        cmd.add_arguments(p)
        p.set_defaults(func=cmd.func)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.INFO if args.verbose else logging.WARNING)
    install_exception_hooks()
    set_confirm(console_confirm)
    try:
        args.app_settings = load_or_default(args.settings)
    except (OSError, ValueError) as exc:
        parser.error(f"cannot load settings: {exc}")
    status = args.func(args)
    return int(status or 0)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
