"""Declarative command grammar for ledger administration commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator

from .constants import DEFAULT_HEIGHT, DEFAULT_QUOTA
from .parse import (
    h256_validator,
    parse_address,
    parse_algorithm,
    parse_height,
    parse_u32,
    parse_u64,
    parse_u256,
    privkey_validator,
)

Validator = Callable[[str], object]


@dataclass(frozen=True)
class ArgumentDeclaration:
    """A single ``--name`` option on a command node."""

    name: str
    help: str
    takes_value: bool = True
    required: bool = False
    multiple: bool = False
    number_of_values: int = 1
    default: str | None = None
    validator: Validator | None = None


@dataclass(frozen=True)
class SharedArgs:
    """A named argument group referenced by several nodes."""

    name: str
    args: tuple[ArgumentDeclaration, ...]


@dataclass(frozen=True)
class ExclusiveGroup:
    """Exactly one member must be supplied (at most one when not required)."""

    name: str
    members: tuple[str, ...]
    required: bool = True


@dataclass(frozen=True)
class CommandNode:
    name: str
    about: str
    args: tuple[ArgumentDeclaration, ...] = ()
    shared: tuple[SharedArgs, ...] = ()
    children: tuple["CommandNode", ...] = ()
    groups: tuple[ExclusiveGroup, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for child in self.children:
            if child.name in seen:
                raise ValueError(f"duplicate subcommand {child.name!r} under {self.name!r}")
            seen.add(child.name)
        names = [arg.name for arg in self.all_args()]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate argument names on {self.name!r}")
        for group in self.groups:
            missing = [member for member in group.members if member not in names]
            if missing:
                raise ValueError(f"group {group.name!r} references unknown arguments: {missing}")

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def all_args(self) -> Iterator[ArgumentDeclaration]:
        yield from self.args
        for shared in self.shared:
            yield from shared.args

    def argument(self, name: str) -> ArgumentDeclaration | None:
        for arg in self.all_args():
            if arg.name == name:
                return arg
        return None

    def child(self, name: str) -> CommandNode | None:
        for child in self.children:
            if child.name == name:
                return child
        return None


# ── Shared argument groups ─────────────────────────────────────────

AMBIENT_ARGS = SharedArgs(
    name="ambient",
    args=(
        ArgumentDeclaration("url", help="JSON-RPC endpoint of the ledger node"),
        ArgumentDeclaration(
            "algorithm",
            help="Signing scheme of private keys (secp256k1|ed25519|sm2)",
            validator=parse_algorithm,
        ),
        ArgumentDeclaration("debug", help="Show request details", takes_value=False),
        ArgumentDeclaration("no-color", help="Disable colored output", takes_value=False),
    ),
)

COMMON_ARGS = SharedArgs(
    name="common",
    args=(
        ArgumentDeclaration(
            "chain-id",
            help="The chain_id of transaction",
            validator=parse_u32,
        ),
        ArgumentDeclaration(
            "admin-private",
            help="The private key of super admin",
            required=True,
            validator=privkey_validator,
        ),
        ArgumentDeclaration(
            "quota",
            help=f"Transaction quota costs, default is {DEFAULT_QUOTA:_}",
            validator=parse_u64,
        ),
    ),
)


def _address(help_text: str) -> ArgumentDeclaration:
    return ArgumentDeclaration("address", help=help_text, required=True, validator=parse_address)


def amend_command() -> CommandNode:
    """Amend (update) ABI, contract code, H256 key/value pairs, and balances."""
    return CommandNode(
        name="amend",
        about="Amend(update) ABI/contract code/H256KV",
        children=(
            CommandNode(
                name="code",
                about="Amend contract code",
                args=(
                    _address("The contract address of the code"),
                    ArgumentDeclaration("content", help="The contract code to amend", required=True),
                ),
                shared=(COMMON_ARGS, AMBIENT_ARGS),
            ),
            CommandNode(
                name="abi",
                about="Amend contract ABI data",
                args=(
                    _address("The contract address of the ABI"),
                    ArgumentDeclaration("content", help="The content of ABI data to amend (json)"),
                    ArgumentDeclaration("path", help="The path of ABI json file to amend (.json)"),
                ),
                shared=(COMMON_ARGS, AMBIENT_ARGS),
                groups=(ExclusiveGroup("the-abi", ("content", "path")),),
            ),
            CommandNode(
                name="set-h256",
                about="Amend H256 Key,Value pair",
                args=(
                    _address("The account address"),
                    ArgumentDeclaration(
                        "kv",
                        help="The key value pair",
                        required=True,
                        multiple=True,
                        number_of_values=2,
                        validator=h256_validator,
                    ),
                ),
                shared=(COMMON_ARGS, AMBIENT_ARGS),
            ),
            CommandNode(
                name="get-h256",
                about="Get H256 Value",
                args=(
                    _address("The account address"),
                    ArgumentDeclaration(
                        "key",
                        help="The key of pair",
                        required=True,
                        validator=h256_validator,
                    ),
                    ArgumentDeclaration(
                        "height",
                        help="The height of chain, hex string or tag 'latest'/'earliest'",
                        default=DEFAULT_HEIGHT,
                        validator=parse_height,
                    ),
                ),
                shared=(AMBIENT_ARGS,),
            ),
            CommandNode(
                name="balance",
                about="Amend account balance",
                args=(
                    _address("The account address"),
                    ArgumentDeclaration(
                        "balance",
                        help="Account balance",
                        required=True,
                        validator=parse_u256,
                    ),
                ),
                shared=(COMMON_ARGS, AMBIENT_ARGS),
            ),
        ),
    )


def root_command() -> CommandNode:
    return CommandNode(
        name="ledgerkit",
        about="Administrative client for a ledger node",
        shared=(AMBIENT_ARGS,),
        children=(amend_command(),),
    )


# ── Command tree flattening ────────────────────────────────────────


def _search(node: CommandNode, prefix: tuple[str, ...], commands: list[tuple[str, ...]]) -> None:
    for child in node.children:
        path = prefix + (child.name,)
        if child.is_leaf:
            commands.append(path)
        else:
            _search(child, path, commands)


def flatten(root: CommandNode) -> list[tuple[str, ...]]:
    """Return every leaf command path below ``root`` in declaration order."""
    commands: list[tuple[str, ...]] = []
    _search(root, (), commands)
    return commands
