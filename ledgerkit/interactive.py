"""Interactive shell with command-path completion."""

from __future__ import annotations

import argparse
import shlex
from typing import Sequence

from rich.markup import escape
from rich.prompt import Prompt

from .client import LedgerClient
from .errors import GrammarError, ParseError
from .grammar import flatten
from .matcher import CommandMatcher, GrammarParser
from .parse import parse_algorithm
from .printer import Printer
from .session import SessionConfig, save_session

try:
    import readline
except ImportError:  # pragma: no cover - Windows
    readline = None

BUILTINS = (("switch",), ("help",), ("exit",), ("quit",))


def complete(buffer: str, paths: Sequence[tuple[str, ...]]) -> list[str]:
    """Candidates for the next word of ``buffer``."""
    tokens = buffer.split()
    if not buffer or buffer.endswith(" "):
        done, partial = tokens, ""
    else:
        done, partial = tokens[:-1], tokens[-1]
    depth = len(done)
    candidates: list[str] = []
    for path in paths:
        if len(path) <= depth or list(path[:depth]) != done:
            continue
        word = path[depth]
        if word.startswith(partial) and word not in candidates:
            candidates.append(word)
    return candidates


def _switch_parser() -> GrammarParser:
    parser = GrammarParser(prog="switch", description="Change session settings", allow_abbrev=False)
    parser.add_argument("--url", help="JSON-RPC endpoint of the ledger node")
    parser.add_argument("--algorithm", help="Default signing scheme (secp256k1|ed25519|sm2)")
    parser.add_argument("--color", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--save", action="store_true", help="Persist settings to the session file")
    return parser


def switch(args: Sequence[str], session: SessionConfig) -> str:
    """Apply ``switch`` options to the session and describe the result."""
    opts = _switch_parser().parse_args(list(args))
    if opts.algorithm is not None:
        try:
            algorithm = parse_algorithm(opts.algorithm)
        except ParseError as exc:
            raise GrammarError(str(exc)) from exc
        session.algorithm = algorithm
    if opts.url:
        session.url = opts.url
    if opts.color is not None:
        session.color = opts.color
    if opts.debug is not None:
        session.debug = opts.debug
    summary = (
        f"url={session.url} algorithm={session.algorithm} "
        f"color={session.color} debug={session.debug}"
    )
    if opts.save:
        path = save_session(session)
        summary += f" (saved to {path})"
    return summary


def _install_completer(paths: Sequence[tuple[str, ...]]) -> None:
    if readline is None:
        return

    def completer(text: str, state: int) -> str | None:
        matches = complete(readline.get_line_buffer(), paths)
        return matches[state] if state < len(matches) else None

    readline.set_completer(completer)
    readline.set_completer_delims(" ")
    readline.parse_and_bind("tab: complete")


def run_shell(
    matcher: CommandMatcher,
    session: SessionConfig,
    client: LedgerClient,
    printer: Printer,
) -> int:
    from .cli import execute

    command_paths = flatten(matcher.root)
    paths = [*command_paths, *BUILTINS]
    _install_completer(paths)

    while True:
        try:
            line = Prompt.ask(f"[bold green]{escape(session.url)}[/]", console=printer.console)
        except (EOFError, KeyboardInterrupt):
            printer.console.print()
            return 0
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            printer.eprintln(str(exc), session.color)
            continue
        if not tokens:
            continue

        head = tokens[0]
        if head in ("exit", "quit"):
            return 0
        if head == "help":
            for path in command_paths:
                printer.console.print(" ".join(path), highlight=False, markup=False)
            continue
        if head == "switch":
            try:
                printer.console.print(switch(tokens[1:], session), highlight=False, markup=False)
            except GrammarError as exc:
                printer.eprintln(str(exc), session.color)
            except SystemExit:
                pass
            continue

        try:
            execute(matcher, tokens, session, client, printer)
        except SystemExit:
            # --help output already printed
            continue
