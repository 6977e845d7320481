"""Tests for the Clock protocol and implementations."""

import time

from poisson_party.state.clock import FrozenClock
from poisson_party.state.clock import SystemClock
from poisson_party.state.clock import get_clock
from poisson_party.state.clock import reset_clock
from poisson_party.state.clock import set_clock


class TestSystemClock:
    """Tests for SystemClock."""

    def test_now_returns_current_time(self) -> None:
        """Test that now() returns approximately current time."""
        clock = SystemClock()
        before = time.time()
        result = clock.now()
        after = time.time()
        assert before <= result <= after

    def test_monotonic_never_goes_back(self) -> None:
        """Test that successive monotonic() values do not decrease."""
        clock = SystemClock()
        first = clock.monotonic()
        assert clock.monotonic() >= first


class TestFrozenClock:
    """Tests for FrozenClock."""

    def test_frozen_at_specific_time(self) -> None:
        """Test clock frozen at a specific time."""
        clock = FrozenClock(1700000000.0)
        assert clock.now() == 1700000000.0

    def test_monotonic_default_is_zero(self) -> None:
        """Test monotonic defaults to 0."""
        assert FrozenClock(1700000000.0).monotonic() == 0.0

    def test_advance_moves_both_values(self) -> None:
        """Test advance() moves wall and monotonic time together."""
        clock = FrozenClock(frozen_time=1000.0, frozen_monotonic=50.0)
        clock.advance(25.0)
        assert clock.now() == 1025.0
        assert clock.monotonic() == 75.0

    def test_advance_minutes(self) -> None:
        """Test advancing by minutes."""
        clock = FrozenClock(frozen_time=0.0, frozen_monotonic=0.0)
        clock.advance_minutes(1.5)
        assert clock.monotonic() == 90.0
        assert clock.now() == 90.0


class TestGlobalClock:
    """Tests for global clock functions."""

    def test_default_clock_is_system_clock(self) -> None:
        """Test that default clock is SystemClock."""
        reset_clock()
        assert isinstance(get_clock(), SystemClock)

    def test_set_clock(self) -> None:
        """Test setting a custom clock."""
        set_clock(FrozenClock(12345.0))
        assert get_clock().now() == 12345.0

    def test_reset_clock(self) -> None:
        """Test resetting clock to default."""
        set_clock(FrozenClock(12345.0))
        reset_clock()
        assert isinstance(get_clock(), SystemClock)
