"""One-shot registration exchange that bootstraps credentials."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from sendtovault.errors import InvalidResponse, NetworkError, ServerError
from sendtovault.state import Credentials

if TYPE_CHECKING:
    from sendtovault.client import SendToVaultClient

_REQUIRED_FIELDS = ("email_address", "passkey", "vault_id")


def register(client: "SendToVaultClient", vault_identifier: str, *, rotate: bool = False) -> Credentials:
    """Register this installation (or rotate its alias) and return the new credentials.

    Nothing is persisted here; the caller stores the result.  Raises
    :class:`NetworkError`, :class:`ServerError` or :class:`InvalidResponse`.
    """
    logger.info("Registering vault {} (rotate={})", vault_identifier, rotate)
    data = client.register(vault_identifier, rotate=rotate)

    missing = [k for k in _REQUIRED_FIELDS if not isinstance(data.get(k), str) or not data[k]]
    if missing:
        raise InvalidResponse(f"registration response is missing {', '.join(missing)}")

    logger.info("Registration successful, alias {}", data["email_address"])
    return Credentials(identity=data["vault_id"], secret=data["passkey"], alias=data["email_address"])


def describe_registration_error(exc: Exception) -> str:
    """Return a user-facing explanation for a failed registration."""
    message = "Failed to register with SendToVault."
    if isinstance(exc, NetworkError):
        return f"{message} Network connection failed. Check your internet connection."
    if isinstance(exc, InvalidResponse):
        return f"{message} Server returned invalid data."
    if isinstance(exc, ServerError):
        return f"{message} Server error: status {exc.status_code}."
    return f"{message} Error: {exc}"
