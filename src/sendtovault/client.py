"""HTTP client for the SendToVault service.

Routes
------
POST /register[?rotate=true]   – obtain (or rotate) an email alias + passkey
POST /download                 – fetch notes created after ``since``

All endpoints accept/return JSON.  Transport problems, non-2xx statuses and
malformed payloads are mapped onto :class:`~sendtovault.errors.NetworkError`,
:class:`~sendtovault.errors.ServerError` and
:class:`~sendtovault.errors.InvalidResponse` respectively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx
from loguru import logger

from sendtovault import __version__
from sendtovault.config import DEFAULT_API_URL
from sendtovault.errors import InvalidResponse, NetworkError, ServerError
from sendtovault.note import format_timestamp


@dataclass(frozen=True)
class DownloadResponse:
    #: Raw note entries; each is parsed on its own so one bad entry cannot sink the batch
    notes: list[dict[str, Any]] = field(default_factory=list)
    over_quota: bool = False
    quota_used: int | None = None
    quota_limit: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DownloadResponse":
        notes = data.get("notes")
        if not isinstance(notes, list):
            notes = []
        return cls(
            notes=notes,
            over_quota=_optional_bool(data, "over_quota"),
            quota_used=_optional_int(data, "quota_used"),
            quota_limit=_optional_int(data, "quota_limit"),
        )


def _optional_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidResponse(f"{key} must be a boolean, got {value!r}")
    return value


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidResponse(f"{key} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidResponse(f"{key} must be an integer, got {value!r}")
    return int(value)


class SendToVaultClient:
    """Thin JSON-over-HTTPS client for the SendToVault API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        client_version: str = __version__,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.client_version = client_version
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def register(self, vault_identifier: str, *, rotate: bool = False) -> dict[str, Any]:
        """Request a new alias, or a replacement for the current one when *rotate*."""
        params = {"rotate": "true"} if rotate else None
        return self._post(
            "/register",
            {"client_version": self.client_version, "vault_identifier": vault_identifier},
            params=params,
        )

    def download(self, vault_identifier: str, passkey: str, since: datetime) -> DownloadResponse:
        data = self._post(
            "/download",
            {"vault_identifier": vault_identifier, "passkey": passkey, "since": format_timestamp(since)},
        )
        return DownloadResponse.from_dict(data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _post(self, path: str, payload: dict[str, Any], params: dict[str, str] | None = None) -> dict[str, Any]:
        logger.debug("POST {} (params={})", path, params)
        try:
            r = self._client.post(path, json=payload, params=params)
        except httpx.TransportError as exc:
            raise NetworkError(f"could not reach {path}: {exc}") from exc
        logger.debug("POST {} -> {}", path, r.status_code)
        if not r.is_success:
            raise ServerError(r.status_code, f"{path} returned status {r.status_code}: {r.text[:200]}")
        try:
            data = r.json()
        except ValueError as exc:
            raise InvalidResponse(f"{path} returned non-JSON body") from exc
        if not isinstance(data, dict):
            raise InvalidResponse(f"{path} returned {type(data).__name__}, expected an object")
        return data

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SendToVaultClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
