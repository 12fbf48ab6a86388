from datetime import UTC, datetime, timedelta

from axotl.adapters.clock import FixedClock, SystemClock


def test_system_clock_is_utc():
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_fixed_clock_advances():
    start = datetime(2026, 1, 1, tzinfo=UTC)
    clock = FixedClock(start)
    assert clock.now() == start
    assert clock.advance(minutes=5) == start + timedelta(minutes=5)
    assert clock.now() == start + timedelta(minutes=5)
