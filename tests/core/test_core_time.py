"""
Tests for core.time — injected ledger clocks.
"""

import pytest
from datetime import datetime, timezone, timedelta

from core.time.clock import Clock, FixedClock, SystemClock


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        clock = SystemClock()
        dt = clock.now_utc()
        assert dt.tzinfo is not None
        assert dt.tzinfo == timezone.utc

    def test_time_advances(self):
        clock = SystemClock()
        t1 = clock.now_utc()
        t2 = clock.now_utc()
        assert t2 >= t1


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.now_utc() == fixed  # Same every time

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 1, 1))

    def test_advance(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance(60)
        assert clock.now_utc() == fixed + timedelta(seconds=60)

    def test_set(self):
        clock = FixedClock(datetime(2025, 6, 15, tzinfo=timezone.utc))
        later = datetime(2026, 1, 1, tzinfo=timezone.utc)
        clock.set(later)
        assert clock.now_utc() == later

    def test_set_rejects_naive_datetime(self):
        clock = FixedClock(datetime(2025, 6, 15, tzinfo=timezone.utc))
        with pytest.raises(ValueError, match="timezone-aware"):
            clock.set(datetime(2026, 1, 1))


class TestClockProtocol:
    def test_implementations_satisfy_protocol(self):
        def read(clock: Clock) -> datetime:
            return clock.now_utc()

        assert read(SystemClock()).tzinfo is not None
        assert read(FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))).year == 2025
