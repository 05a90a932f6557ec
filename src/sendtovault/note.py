"""Core NoteRecord dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sendtovault.errors import InvalidResponse


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_timestamp(ts: datetime) -> str:
    """Render *ts* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class NoteRecord:
    """A single note delivered by the service, ready to be written to the vault."""

    id: str
    title: str
    markdown: str
    created: datetime

    @classmethod
    def from_dict(cls, data: Any) -> "NoteRecord":
        if not isinstance(data, dict):
            raise InvalidResponse(f"note entry is not an object: {data!r}")
        title = data.get("title")
        created_iso = data.get("created_iso")
        if not isinstance(title, str):
            raise InvalidResponse(f"note {data.get('id')!r} has no title")
        if not isinstance(created_iso, str):
            raise InvalidResponse(f"note {data.get('id')!r} has no created_iso")
        try:
            created = parse_timestamp(created_iso)
        except ValueError as exc:
            raise InvalidResponse(f"note {data.get('id')!r} has a bad timestamp: {created_iso!r}") from exc
        markdown = data.get("markdown")
        return cls(
            id=str(data.get("id", "")),
            title=title,
            markdown=markdown if isinstance(markdown, str) else "",
            created=created,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "markdown": self.markdown,
            "created_iso": format_timestamp(self.created),
        }
