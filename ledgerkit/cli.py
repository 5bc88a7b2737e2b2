"""CLI entrypoint for LedgerKit."""

from __future__ import annotations

import logging
import os
import sys
from typing import Sequence

from rich.console import Console
from rich.logging import RichHandler

from .client import LedgerClient, RunnerClient
from .errors import ConfigError, GrammarError
from .grammar import root_command
from .matcher import CommandMatcher
from .printer import Printer
from .processor import run_invocation
from .session import SessionConfig, load_session


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def execute(
    matcher: CommandMatcher,
    argv: Sequence[str],
    session: SessionConfig,
    client: LedgerClient,
    printer: Printer,
) -> int:
    """Match, resolve, and dispatch one command line; returns an exit status."""
    try:
        matched = matcher.match(argv)
    except GrammarError as exc:
        printer.eprintln(str(exc), session.color)
        return 2

    configure_logging(bool(matched.innermost("debug")) or session.debug)
    result = run_invocation(
        matched,
        session,
        client,
        printer,
        usage=matcher.usage(matched.command_path),
    )
    if not result.success:
        color = session.color and not matched.innermost("no-color")
        printer.eprintln(result.message, color)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    printer = Printer()
    try:
        session = load_session()
    except ConfigError as exc:
        printer.eprintln(str(exc), False)
        return 1

    matcher = CommandMatcher(root_command(), prog=os.path.basename(sys.argv[0]) or None)
    client = RunnerClient()
    if not argv:
        from .interactive import run_shell

        configure_logging(session.debug)
        return run_shell(matcher, session, client, printer)
    return execute(matcher, argv, session, client, printer)


if __name__ == "__main__":
    raise SystemExit(main())
