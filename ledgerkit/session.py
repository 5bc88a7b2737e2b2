"""Session configuration persisted at ~/.ledgerkit/session.toml."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from .constants import (
    ALLOWED_ALGORITHMS,
    DEFAULT_ALGORITHM,
    DEFAULT_URL,
    ENV_ALGORITHM,
    ENV_SESSION,
    ENV_URL,
)
from .errors import ConfigError

SESSION_DIR = Path.home() / ".ledgerkit"
SESSION_PATH = SESSION_DIR / "session.toml"


@dataclass
class SessionConfig:
    """Last-known-good ambient values for one process."""

    url: str = DEFAULT_URL
    debug: bool = False
    color: bool = True
    algorithm: str = DEFAULT_ALGORITHM
    last_response: Any = None

    def record_response(self, response: Any) -> None:
        self.last_response = response


def session_path() -> Path:
    env_path = os.environ.get(ENV_SESSION)
    if env_path:
        return Path(env_path).expanduser()
    return SESSION_PATH


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _expect(table: dict[str, Any], key: str, kind: type) -> Any:
    value = table.get(key)
    if value is not None and not isinstance(value, kind):
        raise ConfigError(f"session.{key} must be a {kind.__name__}")
    return value


def load_session(path: Path | None = None) -> SessionConfig:
    """Load session defaults from TOML, then apply environment overrides."""
    path = path or session_path()
    table: dict[str, Any] = {}
    if path.exists():
        try:
            data = tomllib.loads(path.read_text())
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid session file {path}: {exc}") from exc
        raw = data.get("session", {})
        if not isinstance(raw, dict):
            raise ConfigError("[session] must be a table")
        table = raw

    config = SessionConfig()
    url = _clean(_expect(table, "url", str))
    if url:
        config.url = url
    algorithm = _clean(_expect(table, "algorithm", str))
    if algorithm:
        config.algorithm = algorithm.lower()
    color = _expect(table, "color", bool)
    if color is not None:
        config.color = color
    debug = _expect(table, "debug", bool)
    if debug is not None:
        config.debug = debug

    env_url = _clean(os.environ.get(ENV_URL))
    if env_url:
        config.url = env_url
    env_algorithm = _clean(os.environ.get(ENV_ALGORITHM))
    if env_algorithm:
        config.algorithm = env_algorithm.lower()

    if config.algorithm not in ALLOWED_ALGORITHMS:
        raise ConfigError(
            f"unsupported algorithm {config.algorithm!r} (expected {'|'.join(ALLOWED_ALGORITHMS)})"
        )
    return config


def save_session(config: SessionConfig, path: Path | None = None) -> Path:
    """Write the persistable session fields; the cached response is not saved."""
    path = path or session_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "session": {
            "url": config.url,
            "algorithm": config.algorithm,
            "color": config.color,
            "debug": config.debug,
        }
    }
    path.write_bytes(tomli_w.dumps(data).encode())
    return path
