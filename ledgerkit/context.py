"""Resolve ambient values for one invocation from command levels and session defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ParseError, ResolutionError
from .keys import PrivateKey, parse_privkey
from .matcher import MatchedInvocation
from .parse import parse_algorithm, parse_u32, parse_u64, reparse
from .session import SessionConfig


@dataclass(frozen=True)
class ResolvedContext:
    """Per-invocation snapshot of ambient configuration."""

    url: str
    algorithm: str
    debug: bool
    color: bool
    chain_id: int | None = None
    private_key: PrivateKey | None = None
    quota: int | None = None


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _optional(parser, raw, name):
    return None if raw is None else reparse(parser, raw, name)


def resolve(matched: MatchedInvocation, session: SessionConfig) -> ResolvedContext:
    """Deepest explicit value wins, then outer levels, then the session."""
    url = _clean(matched.innermost("url")) or session.url

    algorithm = _optional(parse_algorithm, matched.innermost("algorithm"), "algorithm")
    algorithm = algorithm or session.algorithm

    debug = True if matched.innermost("debug") else session.debug
    color = False if matched.innermost("no-color") else session.color

    leaf = matched.leaf
    chain_id = _optional(parse_u32, leaf.value_of("chain-id"), "chain-id")
    quota = _optional(parse_u64, leaf.value_of("quota"), "quota")

    private_key = None
    raw_key = matched.innermost("admin-private")
    if raw_key is not None:
        try:
            private_key = parse_privkey(raw_key, algorithm)
        except ParseError as exc:
            raise ResolutionError(str(exc)) from exc

    return ResolvedContext(
        url=url,
        algorithm=algorithm,
        debug=debug,
        color=color,
        chain_id=chain_id,
        private_key=private_key,
        quota=quota,
    )
