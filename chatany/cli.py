"""Command-line front door for chat-any.

Parses the subcommand and optional explicit selection paths, configures
logging, then dispatches into ``chatany.commands``.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .commands import build_writer, run_aggregate, run_link
from .host import desktop_host
from .writer import MODE_APPEND, MODE_WRITE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chat-any",
        description="Collect selected files, highlighted text, or the clipboard into one document and open it.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        (MODE_WRITE, "Replace the context document with the resolved content."),
        (MODE_APPEND, "Append the resolved content to the context document."),
        ("link", "Symlink selected items into the context directory."),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument(
            "paths",
            nargs="*",
            type=Path,
            help="Items to use as the selection. Defaults to the Finder selection on macOS.",
        )
        if name != "link":
            command.add_argument("--editor", default=None, help="Editor to open, overriding the saved preference.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run one command."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    host = desktop_host(args.paths)
    if args.command == "link":
        run_link(host)
        return
    run_aggregate(args.command, host, build_writer(editor=args.editor))


if __name__ == "__main__":
    main()
