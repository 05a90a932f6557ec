"""Exception hierarchy for the SendToVault client.

Each failure mode gets its own class so callers can present a tailored
message: registration errors are shown to the user, poll errors only drive
backoff, and note write errors are reported per note.
"""

from __future__ import annotations


class SendToVaultError(Exception):
    """Base class for every error raised by :mod:`sendtovault`."""


class NetworkError(SendToVaultError):
    """The service could not be reached (DNS, connect, timeout, TLS …)."""


class ServerError(SendToVaultError):
    """The service answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"server returned status {status_code}")


class InvalidResponse(SendToVaultError):
    """The payload was not JSON or did not match the expected schema."""


class NoteWriteError(SendToVaultError):
    """A note could not be written to the vault."""

    def __init__(self, title: str, path: str, cause: OSError | UnicodeError) -> None:
        self.title = title
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path!r} for note {title!r}: {cause}")


class NotRegisteredError(SendToVaultError):
    """A sync was attempted before credentials were obtained."""


class ConfigError(SendToVaultError):
    """Configuration file or environment contains an invalid value."""
