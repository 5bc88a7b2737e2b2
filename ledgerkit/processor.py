"""Map a matched, resolved invocation to exactly one ledger client operation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Sequence, Union

from .client import LedgerClient
from .constants import DEFAULT_HEIGHT
from .context import ResolvedContext, resolve
from .errors import ContentError, DispatchError, LedgerKitError
from .matcher import InvocationLevel, MatchedInvocation
from .parse import parse_address, parse_h256, parse_height, parse_u256, reparse
from .printer import Printer
from .session import SessionConfig
from .util import remove_0x

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one invocation: a response payload or a failure message."""

    success: bool
    message: str
    data: Any = None


def read_content(content: str | None, path: str | None) -> str:
    """Prefer inline content; otherwise read the whole file verbatim."""
    if content is not None:
        return content
    if path is None:
        raise ContentError("either content or path is required")
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentError(f"cannot read {path}: {exc}") from exc


def join_h256_kv(values: Sequence[str]) -> str:
    """Concatenate hex-stripped key/value words in input order."""
    return "".join(remove_0x(value) for value in values)


def _address(level: InvocationLevel) -> bytes:
    return reparse(parse_address, level.value_of("address"), "address")


# ── Leaf commands ──────────────────────────────────────────────────


@dataclass(frozen=True)
class AmendCode:
    path: ClassVar[tuple[str, ...]] = ("amend", "code")

    address: bytes
    content: str

    @classmethod
    def from_level(cls, level: InvocationLevel) -> AmendCode:
        return cls(address=_address(level), content=level.value_of("content"))

    def execute(self, client: LedgerClient, context: ResolvedContext) -> Any:
        return client.amend_code(self.address, self.content, context.quota)


@dataclass(frozen=True)
class AmendAbi:
    path: ClassVar[tuple[str, ...]] = ("amend", "abi")

    address: bytes
    content: str | None
    file_path: str | None

    @classmethod
    def from_level(cls, level: InvocationLevel) -> AmendAbi:
        return cls(
            address=_address(level),
            content=level.value_of("content"),
            file_path=level.value_of("path"),
        )

    def execute(self, client: LedgerClient, context: ResolvedContext) -> Any:
        content = read_content(self.content, self.file_path)
        return client.amend_abi(self.address, content, context.quota)


@dataclass(frozen=True)
class SetH256:
    path: ClassVar[tuple[str, ...]] = ("amend", "set-h256")

    address: bytes
    kv: tuple[str, ...]

    @classmethod
    def from_level(cls, level: InvocationLevel) -> SetH256:
        kv = tuple(level.values_of("kv"))
        for value in kv:
            reparse(parse_h256, value, "kv")
        return cls(address=_address(level), kv=kv)

    def execute(self, client: LedgerClient, context: ResolvedContext) -> Any:
        return client.amend_set_h256kv(self.address, join_h256_kv(self.kv), context.quota)


@dataclass(frozen=True)
class GetH256:
    path: ClassVar[tuple[str, ...]] = ("amend", "get-h256")

    address: bytes
    key: bytes
    height: str | int

    @classmethod
    def from_level(cls, level: InvocationLevel) -> GetH256:
        return cls(
            address=_address(level),
            key=reparse(parse_h256, level.value_of("key"), "key"),
            height=reparse(parse_height, level.value_of("height") or DEFAULT_HEIGHT, "height"),
        )

    def execute(self, client: LedgerClient, context: ResolvedContext) -> Any:
        return client.amend_get_h256kv(self.address, self.key, self.height)


@dataclass(frozen=True)
class AmendBalance:
    path: ClassVar[tuple[str, ...]] = ("amend", "balance")

    address: bytes
    balance: int

    @classmethod
    def from_level(cls, level: InvocationLevel) -> AmendBalance:
        return cls(
            address=_address(level),
            balance=reparse(parse_u256, level.value_of("balance"), "balance"),
        )

    def execute(self, client: LedgerClient, context: ResolvedContext) -> Any:
        return client.amend_balance(self.address, self.balance, context.quota)


AmendCommand = Union[AmendCode, AmendAbi, SetH256, GetH256, AmendBalance]

AMEND_COMMANDS = (AmendCode, AmendAbi, SetH256, GetH256, AmendBalance)
LEAF_COMMANDS = {command.path: command for command in AMEND_COMMANDS}


def build_command(matched: MatchedInvocation, usage: str | None = None) -> AmendCommand:
    """Turn the matched leaf into its command variant."""
    command_cls = LEAF_COMMANDS.get(matched.command_path)
    if command_cls is None:
        raise DispatchError(usage or f"unknown command: {' '.join(matched.command_path)}")
    return command_cls.from_level(matched.leaf)


def configure_client(client: LedgerClient, context: ResolvedContext) -> None:
    client.set_debug(context.debug)
    client.set_uri(context.url)
    # None clears whatever an earlier invocation left on a shared client.
    client.set_chain_id(context.chain_id)
    client.set_private_key(context.private_key)


def process(
    matched: MatchedInvocation,
    context: ResolvedContext,
    client: LedgerClient,
    usage: str | None = None,
) -> CommandResult:
    """Dispatch one invocation; failures come back as a message, never partial."""
    try:
        command = build_command(matched, usage)
        configure_client(client, context)
        logger.debug("dispatching %s", " ".join(command.path))
        response = command.execute(client, context)
    except LedgerKitError as exc:
        return CommandResult(success=False, message=str(exc))
    return CommandResult(success=True, message="ok", data=response)


def run_invocation(
    matched: MatchedInvocation,
    session: SessionConfig,
    client: LedgerClient,
    printer: Printer,
    usage: str | None = None,
) -> CommandResult:
    """Resolve, process, and on success print and cache the response."""
    try:
        context = resolve(matched, session)
    except LedgerKitError as exc:
        return CommandResult(success=False, message=str(exc))
    result = process(matched, context, client, usage)
    if result.success:
        printer.println(result.data, context.color)
        session.record_response(result.data)
    return result
