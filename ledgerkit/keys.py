"""Private key decoding for the supported signing schemes."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ec
from solders.keypair import Keypair

from .constants import (
    ALGORITHM_ED25519,
    ALGORITHM_SECP256K1,
    ALGORITHM_SM2,
    PRIVKEY_BYTES,
    SM2_ORDER,
)
from .errors import ParseError
from .parse import hex_body, parse_algorithm
from .util import decode_fixed_hex

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass(frozen=True)
class PrivateKey:
    """Decoded signing key material bound to its scheme."""

    algorithm: str
    secret: bytes

    def hex(self) -> str:
        return "0x" + self.secret.hex()

    def __repr__(self) -> str:
        return f"PrivateKey(algorithm={self.algorithm!r}, secret=<redacted>)"


def _check_scalar(secret: bytes, order: int) -> None:
    scalar = int.from_bytes(secret, "big")
    if scalar <= 0 or scalar >= order:
        raise ValueError("scalar out of range for curve order")


def _decode_secp256k1(secret: bytes) -> None:
    _check_scalar(secret, SECP256K1_ORDER)
    ec.derive_private_key(int.from_bytes(secret, "big"), ec.SECP256K1())


def _decode_ed25519(secret: bytes) -> None:
    # 32-byte seed followed by the 32-byte public key; rejects mismatched halves.
    Keypair.from_bytes(secret)


def _decode_sm2(secret: bytes) -> None:
    # d must lie in [1, n - 2] for SM2.
    _check_scalar(secret, SM2_ORDER - 1)


_DECODERS = {
    ALGORITHM_SECP256K1: _decode_secp256k1,
    ALGORITHM_ED25519: _decode_ed25519,
    ALGORITHM_SM2: _decode_sm2,
}


def parse_privkey(raw: str, algorithm: str) -> PrivateKey:
    """Decode ``raw`` as key material for ``algorithm``."""
    algorithm = parse_algorithm(algorithm)
    body = hex_body(raw)
    try:
        secret = decode_fixed_hex(body, PRIVKEY_BYTES[algorithm])
        _DECODERS[algorithm](secret)
    except ValueError as exc:
        raise ParseError(f"Invalid {algorithm} private key: {exc}") from exc
    return PrivateKey(algorithm=algorithm, secret=secret)
