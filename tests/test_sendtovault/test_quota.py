"""Unit tests for sendtovault.quota."""

import pytest

from sendtovault.client import DownloadResponse
from sendtovault.quota import apply_response, is_near_limit, usage_fraction
from sendtovault.state import QuotaState


class TestApplyResponse:
    def test_overwrites_used_and_limit(self):
        new = apply_response(QuotaState(1, 10, 0), DownloadResponse(quota_used=7, quota_limit=200))
        assert new == QuotaState(7, 200, 0)

    def test_partial_response_keeps_missing_fields(self):
        new = apply_response(QuotaState(1, 10, 0), DownloadResponse(quota_used=4))
        assert new == QuotaState(4, 10, 0)

    def test_imports_incremented(self):
        new = apply_response(QuotaState(1, 10, 3), DownloadResponse(), imported=2)
        assert new.imports_this_period == 5

    def test_does_not_mutate_input(self):
        current = QuotaState(1, 10, 3)
        apply_response(current, DownloadResponse(quota_used=9), imported=1)
        assert current == QuotaState(1, 10, 3)

    def test_negative_import_rejected(self):
        with pytest.raises(ValueError):
            apply_response(QuotaState(), DownloadResponse(), imported=-1)


class TestUsage:
    @pytest.mark.parametrize(
        "used, limit, expected",
        [(0, 100, 0.0), (50, 100, 0.5), (150, 100, 1.0), (5, 0, 1.0), (-3, 10, 0.0)],
    )
    def test_usage_fraction(self, used, limit, expected):
        assert usage_fraction(QuotaState(used, limit)) == expected

    def test_near_limit_threshold(self):
        assert not is_near_limit(QuotaState(90, 100))
        assert is_near_limit(QuotaState(91, 100))
