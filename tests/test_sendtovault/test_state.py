"""Unit tests for sendtovault.state (cursor, backoff, serialization)."""

from datetime import datetime, timedelta, timezone

import pytest

from sendtovault.state import BackoffState, Credentials, QuotaState, SyncCursor, SyncState

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# SyncCursor
# ---------------------------------------------------------------------------


class TestSyncCursor:
    def test_unset_cursor_looks_back_one_day(self):
        assert SyncCursor().since(NOW) == NOW - timedelta(hours=24)

    def test_set_cursor_is_returned(self):
        ts = NOW - timedelta(hours=3)
        assert SyncCursor(ts).since(NOW) == ts

    def test_advance_moves_forward(self):
        cursor = SyncCursor(NOW)
        assert cursor.advance(NOW + timedelta(minutes=1))
        assert cursor.last_sync == NOW + timedelta(minutes=1)

    def test_advance_never_regresses(self):
        cursor = SyncCursor(NOW)
        assert not cursor.advance(NOW - timedelta(days=1))
        assert not cursor.advance(NOW)
        assert cursor.last_sync == NOW

    def test_monotonic_over_sequence(self):
        cursor = SyncCursor()
        seen = []
        for offset in (5, 2, 9, 1, 9, 12):
            cursor.advance(NOW + timedelta(minutes=offset))
            seen.append(cursor.last_sync)
        assert seen == sorted(seen)
        assert cursor.last_sync == NOW + timedelta(minutes=12)


# ---------------------------------------------------------------------------
# BackoffState
# ---------------------------------------------------------------------------


class TestBackoffState:
    def test_starts_at_min(self):
        assert BackoffState(5, 60).current_delay == 5

    def test_failure_doubles(self):
        b = BackoffState(5, 60)
        assert b.record_failure() == 10
        assert b.record_failure() == 20

    def test_failure_capped(self):
        b = BackoffState(5, 12)
        b.record_failure()
        assert b.record_failure() == 12
        assert b.record_failure() == 12

    def test_success_resets(self):
        b = BackoffState(5, 60)
        b.record_failure()
        b.record_failure()
        assert b.record_success() == 5

    def test_delay_always_in_range(self):
        b = BackoffState(3, 50)
        for outcome in [False, False, True, False, False, False, False, False, True, False]:
            b.record_success() if outcome else b.record_failure()
            assert b.min_delay <= b.current_delay <= b.max_delay

    def test_explicit_delay_clamped(self):
        assert BackoffState(5, 60, current_delay=1000).current_delay == 60

    @pytest.mark.parametrize("lo, hi", [(0, 10), (-1, 10), (20, 10)])
    def test_invalid_bounds(self, lo, hi):
        with pytest.raises(ValueError):
            BackoffState(lo, hi)

    def test_defaults(self):
        b = BackoffState()
        assert b.min_delay == 120
        assert b.max_delay == 1800


# ---------------------------------------------------------------------------
# SyncState serialization
# ---------------------------------------------------------------------------


class TestSyncState:
    def test_defaults_from_empty(self):
        state = SyncState.from_dict(None)
        assert state.credentials is None
        assert not state.registered
        assert state.cursor.last_sync is None
        assert state.quota == QuotaState(0, 100, 0)
        assert state.auto_open_imported is True

    def test_round_trip(self):
        state = SyncState(
            vault_identifier="notes-abc",
            credentials=Credentials("v-1", "pk", "me@x.com"),
            quota=QuotaState(4, 50, 2),
            auto_open_imported=False,
        )
        state.cursor.advance(NOW)
        restored = SyncState.from_dict(state.to_dict())
        assert restored == state

    def test_persisted_keys(self):
        data = SyncState(credentials=Credentials("v-1", "pk", "me@x.com")).to_dict()
        assert data["uid"] == "v-1"
        assert data["passkey"] == "pk"
        assert data["alias"] == "me@x.com"
        assert data["last_sync_iso"] == ""

    def test_partial_credentials_are_not_registered(self):
        state = SyncState.from_dict({"uid": "v-1", "passkey": ""})
        assert state.credentials is None

    def test_unknown_keys_ignored(self):
        state = SyncState.from_dict({"vault_identifier": "x", "legacy_field": 1})
        assert state.vault_identifier == "x"

    @pytest.mark.parametrize("key", ["quota_used", "quota_limit", "imports_this_period"])
    @pytest.mark.parametrize("value", ["abc", None, [1], True])
    def test_bad_quota_field_falls_back(self, key, value):
        state = SyncState.from_dict({key: value})
        assert getattr(state.quota, key.removeprefix("quota_")) == getattr(QuotaState(), key.removeprefix("quota_"))

    def test_numeric_string_quota_accepted(self):
        assert SyncState.from_dict({"quota_used": "7"}).quota.used == 7

    def test_bad_timestamp_resets_cursor(self):
        state = SyncState.from_dict({"last_sync_iso": "last tuesday", "quota_used": 3})
        assert state.cursor.last_sync is None
        assert state.quota.used == 3

    def test_datetime_timestamp_accepted(self):
        state = SyncState.from_dict({"last_sync_iso": datetime(2024, 5, 1, 12, 0)})
        assert state.cursor.last_sync == NOW
