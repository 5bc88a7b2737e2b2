"""Error taxonomy for command matching, resolution, and dispatch."""


class LedgerKitError(Exception):
    """Base class for user-facing LedgerKit failures."""


class ParseError(LedgerKitError, ValueError):
    """Raised when a raw argument fails its validator."""


class GrammarError(LedgerKitError):
    """Raised when input does not match the command grammar."""

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(message)
        self.usage = usage

    def __str__(self) -> str:
        message = super().__str__()
        if self.usage:
            return f"{self.usage.rstrip()}\nerror: {message}"
        return message


class ResolutionError(LedgerKitError):
    """Raised when an ambient value cannot be decoded for this invocation."""


class ContentError(LedgerKitError):
    """Raised when command content cannot be read from disk."""


class ClientError(LedgerKitError):
    """Raised by the ledger client when the backing operation fails."""


class DispatchError(LedgerKitError):
    """Raised when an invocation does not name a known leaf command."""


class ConfigError(LedgerKitError):
    """Raised when the session configuration file is malformed."""
