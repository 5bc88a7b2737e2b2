"""Primitive validators for ledger command arguments.

Every parser here is a pure function from the raw command-line string to a
parsed value, raising :class:`ParseError` on bad input. The grammar layer only
needs to know whether a value is acceptable; the processor calls the same
functions again to obtain the parsed value, so both layers report identical
errors for identical input.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .constants import (
    ADDRESS_BYTES,
    ALLOWED_ALGORITHMS,
    H256_BYTES,
    HEIGHT_TAGS,
    HEX_PREFIXES,
    PRIVKEY_BYTES,
    U32_MAX,
    U64_MAX,
    U256_MAX,
)
from .errors import ParseError
from .util import decode_fixed_hex

T = TypeVar("T")

_DEC_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_hex(raw: str) -> None:
    """Check the ``0x``/``0X`` marker only; the body is not inspected."""
    if len(raw) < 2:
        raise ParseError("Must be a hexadecimal string")
    if raw[:2] not in HEX_PREFIXES:
        raise ParseError("Must be a hex string starting with 0x")


def hex_body(raw: str) -> str:
    """Body after exactly one marker; a second marker is not stripped."""
    is_hex(raw)
    return raw[2:]


def _has_hex_prefix(raw: str) -> bool:
    try:
        is_hex(raw)
    except ParseError:
        return False
    return True


def _parse_uint(digits: str, radix: int, bound: int) -> int:
    if not digits:
        raise ParseError("cannot parse integer from empty string")
    allowed = _HEX_DIGITS if radix == 16 else _DEC_DIGITS
    if any(char not in allowed for char in digits):
        raise ParseError("invalid digit found in string")
    value = int(digits, radix)
    if value > bound:
        raise ParseError("number too large to fit in target type")
    return value


def parse_u32(raw: str) -> int:
    """Chain ids are plain decimal."""
    return _parse_uint(raw, 10, U32_MAX)


def parse_u64(raw: str) -> int:
    if _has_hex_prefix(raw):
        return _parse_uint(raw[2:], 16, U64_MAX)
    return _parse_uint(raw, 10, U64_MAX)


def parse_u256(raw: str) -> int:
    try:
        if _has_hex_prefix(raw):
            return _parse_uint(raw[2:], 16, U256_MAX)
        return _parse_uint(raw, 10, U256_MAX)
    except ParseError as exc:
        raise ParseError("Value can't parse into u256") from exc


def parse_height(raw: str) -> str | int:
    if raw in HEIGHT_TAGS:
        return raw
    return parse_u64(raw)


def parse_h256(raw: str) -> bytes:
    body = hex_body(raw)
    try:
        return decode_fixed_hex(body, H256_BYTES)
    except ValueError as exc:
        raise ParseError(f"Invalid H256: {exc}") from exc


def h256_validator(raw: str) -> None:
    parse_h256(raw)


def parse_address(raw: str) -> bytes:
    body = hex_body(raw)
    try:
        return decode_fixed_hex(body, ADDRESS_BYTES)
    except ValueError as exc:
        raise ParseError(f"Invalid address: {exc}") from exc


def privkey_validator(raw: str) -> None:
    """Accept a key any supported scheme could decode.

    The signing scheme is only known once the invocation is resolved, so the
    grammar checks the marker and that the body has a width some scheme uses.
    """
    body = hex_body(raw)
    widths = sorted(set(PRIVKEY_BYTES.values()))
    for width in widths:
        if len(body) == width * 2:
            try:
                decode_fixed_hex(body, width)
            except ValueError as exc:
                raise ParseError(f"Invalid private key: {exc}") from exc
            return
    expected = " or ".join(str(width * 2) for width in widths)
    raise ParseError(
        f"Invalid private key: invalid input length {len(body)}, expected {expected} hex digits"
    )


def parse_algorithm(raw: str) -> str:
    value = raw.strip().lower()
    if value not in ALLOWED_ALGORITHMS:
        raise ParseError(f"Unsupported algorithm {raw!r} (expected {'|'.join(ALLOWED_ALGORITHMS)})")
    return value


def reparse(parser: Callable[[str], T], raw: str, name: str) -> T:
    """Parse a value the grammar already accepted; failure is a programming error."""
    try:
        return parser(raw)
    except ParseError as exc:
        raise RuntimeError(f"{name} passed validation but failed to parse: {exc}") from exc
