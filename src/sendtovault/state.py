"""Sync state owned by the engine: credentials, cursor, quota and backoff.

``SyncState`` is the single mutable object the engine works on.  It is
loaded from and saved to a :class:`~sendtovault.store.StateBackend` through
:class:`~sendtovault.store.CredentialStore`; nothing else holds a copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

from sendtovault.note import format_timestamp, parse_timestamp

#: Look-back window used when no cursor has been recorded yet
DEFAULT_LOOKBACK = timedelta(hours=24)

DEFAULT_MIN_DELAY = 120.0
DEFAULT_MAX_DELAY = 30 * 60.0


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    """Identity material issued by the service at registration."""

    identity: str  # server-side vault id
    secret: str  # passkey sent with every download
    alias: str  # email address notes are sent to


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


@dataclass
class SyncCursor:
    last_sync: datetime | None = None

    def since(self, now: datetime) -> datetime:
        """Return the watermark to send with the next download."""
        return self.last_sync if self.last_sync is not None else now - DEFAULT_LOOKBACK

    def advance(self, ts: datetime) -> bool:
        """Move the cursor to *ts* if that is later; return whether it moved."""
        if self.last_sync is not None and ts <= self.last_sync:
            return False
        self.last_sync = ts
        return True


# ---------------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuotaState:
    used: int = 0
    limit: int = 100
    #: Counted locally, never overwritten by the server
    imports_this_period: int = 0


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------


@dataclass
class BackoffState:
    """Poll delay in seconds, doubled on failure and reset on success."""

    min_delay: float = DEFAULT_MIN_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    current_delay: float = field(default=0.0)

    def __post_init__(self) -> None:
        if self.min_delay <= 0:
            raise ValueError(f"min_delay must be positive, got {self.min_delay}")
        if self.max_delay < self.min_delay:
            raise ValueError(f"max_delay ({self.max_delay}) is below min_delay ({self.min_delay})")
        self.current_delay = min(max(self.current_delay, self.min_delay), self.max_delay)

    def record_success(self) -> float:
        self.current_delay = self.min_delay
        return self.current_delay

    def record_failure(self) -> float:
        self.current_delay = min(self.current_delay * 2, self.max_delay)
        return self.current_delay


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass
class SyncState:
    vault_identifier: str = ""
    credentials: Credentials | None = None
    cursor: SyncCursor = field(default_factory=SyncCursor)
    quota: QuotaState = field(default_factory=QuotaState)
    auto_open_imported: bool = True

    @property
    def registered(self) -> bool:
        return self.credentials is not None

    def to_dict(self) -> dict[str, Any]:
        creds = self.credentials
        last_sync = self.cursor.last_sync
        return {
            "vault_identifier": self.vault_identifier,
            "uid": creds.identity if creds else "",
            "passkey": creds.secret if creds else "",
            "alias": creds.alias if creds else "",
            "last_sync_iso": format_timestamp(last_sync) if last_sync else "",
            "quota_used": self.quota.used,
            "quota_limit": self.quota.limit,
            "imports_this_period": self.quota.imports_this_period,
            "auto_open_imported": self.auto_open_imported,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SyncState":
        """Build state from a persisted mapping; missing keys fall back to defaults."""
        data = data or {}
        uid = data.get("uid") or ""
        passkey = data.get("passkey") or ""
        credentials = (
            Credentials(identity=uid, secret=passkey, alias=data.get("alias") or "")
            if uid and passkey
            else None
        )
        defaults = QuotaState()
        return cls(
            vault_identifier=data.get("vault_identifier") or "",
            credentials=credentials,
            cursor=SyncCursor(_stored_timestamp(data.get("last_sync_iso"))),
            quota=QuotaState(
                used=_stored_int(data, "quota_used", defaults.used),
                limit=_stored_int(data, "quota_limit", defaults.limit),
                imports_this_period=_stored_int(data, "imports_this_period", defaults.imports_this_period),
            ),
            auto_open_imported=bool(data.get("auto_open_imported", True)),
        )


def _stored_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        if isinstance(value, bool):
            raise TypeError(value)
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid {} in saved state: {!r}", key, value)
        return default


def _stored_timestamp(value: Any) -> datetime | None:
    """Parse the saved cursor; hand-edited or corrupt values reset it."""
    if not value:
        return None
    if isinstance(value, datetime):
        # YAML loads unquoted timestamps as datetime objects
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        return parse_timestamp(str(value))
    except ValueError:
        logger.warning("Ignoring invalid last_sync_iso in saved state: {!r}", value)
        return None
