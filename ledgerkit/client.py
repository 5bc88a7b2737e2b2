"""Ledger client wrapping an external RPC runner.

The wire protocol and transaction signing live in the runner executable; this
module only hands it already-validated values. The signing key travels through
the child environment so it never shows up in process listings.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import subprocess
from pathlib import Path
from typing import Any, Protocol

from .constants import (
    DEFAULT_QUOTA,
    DEFAULT_URL,
    ENV_ALGORITHM,
    ENV_PRIVATE_KEY,
    ENV_RUNNER,
    RUNNER_NAME,
)
from .errors import ClientError
from .keys import PrivateKey

logger = logging.getLogger(__name__)


class LedgerClient(Protocol):
    """Operations and configuration setters the processor relies on."""

    def set_uri(self, uri: str) -> None: ...

    def set_debug(self, debug: bool) -> None: ...

    def set_chain_id(self, chain_id: int | None) -> None: ...

    def set_private_key(self, private_key: PrivateKey | None) -> None: ...

    def amend_code(self, address: bytes, content: str, quota: int | None) -> Any: ...

    def amend_abi(self, address: bytes, content: str, quota: int | None) -> Any: ...

    def amend_set_h256kv(self, address: bytes, h256_kv: str, quota: int | None) -> Any: ...

    def amend_get_h256kv(self, address: bytes, key: bytes, height: str | int) -> Any: ...

    def amend_balance(self, address: bytes, balance: int, quota: int | None) -> Any: ...


# ── Runner resolution ──────────────────────────────────────────────


_ARCH_TAGS = {"x86_64": "x64", "amd64": "x64", "arm64": "arm64", "aarch64": "arm64"}
_SUPPORTED_TAGS = {"darwin-x64", "darwin-arm64", "linux-x64", "linux-arm64", "windows-x64"}


def platform_tag() -> str | None:
    """Directory name of the bundled runner for this host, if one is shipped."""
    arch = _ARCH_TAGS.get(platform.machine().lower())
    tag = f"{platform.system().lower()}-{arch}"
    return tag if tag in _SUPPORTED_TAGS else None


def runner_filename() -> str:
    if platform.system().lower() == "windows":
        return f"{RUNNER_NAME}.exe"
    return RUNNER_NAME


def resolve_runner() -> str:
    env_path = os.environ.get(ENV_RUNNER)
    if env_path:
        return env_path
    package_dir = Path(__file__).resolve().parent
    runner = runner_filename()
    tag = platform_tag()
    if tag:
        bundled = package_dir / "bin" / tag / runner
        if bundled.exists():
            return str(bundled)
    bundled = package_dir / "bin" / runner
    if bundled.exists():
        return str(bundled)
    return RUNNER_NAME


def _hex(data: bytes) -> str:
    return "0x" + data.hex()


class RunnerClient:
    """Stateful client; setters configure the next operation."""

    def __init__(self, runner: str | None = None) -> None:
        self.runner = runner or resolve_runner()
        self.uri = DEFAULT_URL
        self.debug = False
        self.chain_id: int | None = None
        self.private_key: PrivateKey | None = None

    def set_uri(self, uri: str) -> None:
        self.uri = uri

    def set_debug(self, debug: bool) -> None:
        self.debug = debug

    def set_chain_id(self, chain_id: int | None) -> None:
        self.chain_id = chain_id

    def set_private_key(self, private_key: PrivateKey | None) -> None:
        self.private_key = private_key

    def amend_code(self, address: bytes, content: str, quota: int | None) -> Any:
        return self._send("amend-code", address, ["--content", content], quota)

    def amend_abi(self, address: bytes, content: str, quota: int | None) -> Any:
        return self._send("amend-abi", address, ["--content", content], quota)

    def amend_set_h256kv(self, address: bytes, h256_kv: str, quota: int | None) -> Any:
        return self._send("amend-set-h256", address, ["--kv", "0x" + h256_kv], quota)

    def amend_get_h256kv(self, address: bytes, key: bytes, height: str | int) -> Any:
        height_arg = height if isinstance(height, str) else hex(height)
        return self._run(
            "amend-get-h256",
            ["--address", _hex(address), "--key", _hex(key), "--height", height_arg],
        )

    def amend_balance(self, address: bytes, balance: int, quota: int | None) -> Any:
        return self._send("amend-balance", address, ["--balance", str(balance)], quota)

    def _send(self, operation: str, address: bytes, args: list[str], quota: int | None) -> Any:
        if self.private_key is None:
            raise ClientError(f"{operation} requires a signing key")
        quota = DEFAULT_QUOTA if quota is None else quota
        return self._run(operation, ["--address", _hex(address), *args, "--quota", str(quota)])

    def _run(self, operation: str, args: list[str]) -> Any:
        cmd = [self.runner, operation, "--url", self.uri]
        if self.chain_id is not None:
            cmd.extend(["--chain-id", str(self.chain_id)])
        if self.debug:
            cmd.append("--debug")
        cmd.extend(args)

        env = os.environ.copy()
        env.pop(ENV_PRIVATE_KEY, None)
        if self.private_key is not None:
            env[ENV_PRIVATE_KEY] = self.private_key.hex()
            env[ENV_ALGORITHM] = self.private_key.algorithm

        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        except OSError as exc:
            raise ClientError(f"failed to start {self.runner}: {exc}") from exc
        if result.returncode != 0:
            msg = result.stderr.strip() or result.stdout.strip()
            raise ClientError(msg or f"{operation} failed with code {result.returncode}")

        output = result.stdout.strip()
        try:
            return json.loads(output)
        except json.JSONDecodeError:
            return output
