"""Quota tracking derived from download responses."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from sendtovault.state import QuotaState

if TYPE_CHECKING:
    from sendtovault.client import DownloadResponse

NEAR_LIMIT_FRACTION = 0.9


def apply_response(current: QuotaState, response: "DownloadResponse", imported: int = 0) -> QuotaState:
    """Return the quota after *response*, with *imported* notes written this cycle.

    ``used``/``limit`` are taken from the response when present and kept
    otherwise; ``imports_this_period`` only ever grows locally.
    """
    if imported < 0:
        raise ValueError(f"imported must be non-negative, got {imported}")
    return replace(
        current,
        used=current.used if response.quota_used is None else response.quota_used,
        limit=current.limit if response.quota_limit is None else response.quota_limit,
        imports_this_period=current.imports_this_period + imported,
    )


def usage_fraction(quota: QuotaState) -> float:
    """``used / limit`` clamped to ``[0, 1]``; a non-positive limit counts as full."""
    if quota.limit <= 0:
        return 1.0
    return min(max(quota.used / quota.limit, 0.0), 1.0)


def is_near_limit(quota: QuotaState) -> bool:
    return usage_fraction(quota) > NEAR_LIMIT_FRACTION
