"""Utility helpers for LedgerKit."""

from .constants import HEX_PREFIXES


def remove_0x(value: str) -> str:
    # Repeated markers are all stripped so the result never starts with one.
    while value[:2] in HEX_PREFIXES:
        value = value[2:]
    return value


def decode_fixed_hex(body: str, width: int) -> bytes:
    """Decode a hex body (no prefix) into exactly ``width`` bytes."""
    if len(body) != width * 2:
        raise ValueError(f"invalid input length {len(body)}, expected {width * 2} hex digits")
    for index, char in enumerate(body):
        if char not in "0123456789abcdefABCDEF":
            raise ValueError(f"invalid character {char!r} at position {index}")
    return bytes.fromhex(body)
