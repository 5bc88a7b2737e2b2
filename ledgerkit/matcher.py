"""Compile a command tree into argparse and match user input against it."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from .errors import GrammarError, ParseError
from .grammar import ArgumentDeclaration, CommandNode

_COMMAND = "<command>"


class GrammarParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise GrammarError(message, usage=self.format_usage())


@dataclass(frozen=True)
class InvocationLevel:
    """Raw values supplied at one level of the command path."""

    name: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def is_present(self, name: str) -> bool:
        return self.values.get(name) is not None

    def value_of(self, name: str) -> str | None:
        value = self.values.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            raise TypeError(f"argument {name!r} holds multiple values")
        return value

    def values_of(self, name: str) -> list[str]:
        """All values of a repeatable argument, flattened in input order."""
        value = self.values.get(name)
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        out: list[str] = []
        for occurrence in value:
            if isinstance(occurrence, str):
                out.append(occurrence)
            else:
                out.extend(occurrence)
        return out


@dataclass(frozen=True)
class MatchedInvocation:
    """Path of matched levels from the root to the selected leaf."""

    levels: tuple[InvocationLevel, ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise ValueError("matched invocation must contain at least one level")

    @property
    def leaf(self) -> InvocationLevel:
        return self.levels[-1]

    @property
    def command_path(self) -> tuple[str, ...]:
        return tuple(level.name for level in self.levels[1:])

    def innermost(self, name: str) -> Any:
        """Value of ``name`` from the deepest level that supplies it."""
        for level in reversed(self.levels):
            if level.is_present(name):
                return level.values[name]
        return None


def _dest(key: str, name: str) -> str:
    return f"{key}:{name}"


def _type_hook(arg: ArgumentDeclaration):
    validator = arg.validator

    def check(raw: str) -> str:
        try:
            validator(raw)
        except ParseError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc
        return raw

    check.__name__ = arg.name
    return check


def _argument_kwargs(key: str, arg: ArgumentDeclaration, grouped: bool) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"dest": _dest(key, arg.name), "help": arg.help}
    if not arg.takes_value:
        kwargs.update(action="store_const", const=True, default=None)
        return kwargs
    metavar = arg.name.upper().replace("-", "_")
    if arg.number_of_values > 1:
        kwargs["nargs"] = arg.number_of_values
        metavar = tuple([metavar] * arg.number_of_values)
    kwargs["metavar"] = metavar
    if arg.multiple:
        kwargs["action"] = "append"
    if arg.validator is not None:
        kwargs["type"] = _type_hook(arg)
    if arg.default is not None:
        kwargs["default"] = arg.default
    if arg.required and not grouped:
        kwargs["required"] = True
    return kwargs


def _build(
    parser: argparse.ArgumentParser,
    node: CommandNode,
    path: tuple[str, ...],
    parsers: dict[tuple[str, ...], argparse.ArgumentParser],
) -> None:
    key = "/".join(path)
    parsers[path] = parser

    grouped: dict[str, Any] = {}
    for group in node.groups:
        target = parser.add_mutually_exclusive_group(required=group.required)
        for member in group.members:
            grouped[member] = target

    for arg in node.all_args():
        target = grouped.get(arg.name, parser)
        target.add_argument(f"--{arg.name}", **_argument_kwargs(key, arg, arg.name in grouped))

    if node.children:
        sub = parser.add_subparsers(dest=_dest(key, _COMMAND), required=True, metavar="<command>")
        for child in node.children:
            child_parser = sub.add_parser(
                child.name,
                help=child.about,
                description=child.about,
                allow_abbrev=False,
            )
            _build(child_parser, child, path + (child.name,), parsers)


class CommandMatcher:
    """Matches argv lists against a command tree."""

    def __init__(self, root: CommandNode, prog: str | None = None) -> None:
        self.root = root
        self._parsers: dict[tuple[str, ...], argparse.ArgumentParser] = {}
        self.parser = GrammarParser(prog=prog or root.name, description=root.about, allow_abbrev=False)
        _build(self.parser, root, (), self._parsers)

    def usage(self, command_path: Sequence[str] = ()) -> str:
        parser = self._parsers.get(tuple(command_path), self.parser)
        return parser.format_usage().rstrip()

    def match(self, argv: Sequence[str]) -> MatchedInvocation:
        namespace = vars(self.parser.parse_args(list(argv)))
        levels: list[InvocationLevel] = []
        node: CommandNode | None = self.root
        path: tuple[str, ...] = ()
        while node is not None:
            key = "/".join(path)
            values = {}
            for arg in node.all_args():
                value = namespace.get(_dest(key, arg.name))
                if value is not None:
                    values[arg.name] = value
            levels.append(InvocationLevel(name=node.name, values=values))
            if node.is_leaf:
                break
            chosen = namespace.get(_dest(key, _COMMAND))
            node = node.child(chosen) if chosen else None
            if node is None:
                raise GrammarError("a subcommand is required", usage=self.usage(path))
            path = path + (node.name,)
        return MatchedInvocation(levels=tuple(levels))
