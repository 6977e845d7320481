"""Injectable clock for testable time handling.

The party session measures elapsed party time against a Clock so that
tests can step time forward deterministically instead of sleeping.

Example usage:
    # Production code
    from poisson_party.state.session import PartySession

    session = PartySession()  # uses get_clock()
    session.start()
    session.tick()

    # Test code
    from poisson_party.state import FrozenClock

    def test_ticks():
        clock = FrozenClock(frozen_monotonic=0.0)
        session = PartySession(clock=clock)
        session.start()

        clock.advance_minutes(10.0)
        session.tick()
        assert session.elapsed_minutes == 10.0
"""

import time as _time
from typing import Protocol


class Clock(Protocol):
    """Protocol for injectable time sources.

    This enables deterministic testing by allowing tests to provide
    a controlled time source instead of using real wall-clock time.
    """

    def now(self) -> float:
        """Return current time as Unix timestamp (seconds since epoch)."""
        ...

    def monotonic(self) -> float:
        """Return monotonic clock value for measuring durations.

        Elapsed party time is always measured with this value, so system
        clock adjustments during a party do not move the session.
        """
        ...


class SystemClock:
    """Default clock implementation using system time."""

    def now(self) -> float:
        """Return current time as Unix timestamp."""
        return _time.time()

    def monotonic(self) -> float:
        """Return monotonic clock value."""
        return _time.monotonic()


class FrozenClock:
    """Clock frozen at a specific time for testing.

    Attributes:
        frozen_time: The frozen Unix timestamp.
        frozen_monotonic: The frozen monotonic value.

    Example:
        clock = FrozenClock(1700000000.0)
        clock.advance_minutes(30.0)
        assert clock.now() == 1700001800.0
    """

    def __init__(
        self,
        frozen_time: float | None = None,
        frozen_monotonic: float | None = None,
    ) -> None:
        """Initialize with specific frozen times.

        Args:
            frozen_time: Unix timestamp to freeze at. Defaults to current time.
            frozen_monotonic: Monotonic value to freeze at. Defaults to 0.0.
        """
        self._time = frozen_time if frozen_time is not None else _time.time()
        self._monotonic = frozen_monotonic if frozen_monotonic is not None else 0.0

    def now(self) -> float:
        """Return the frozen time."""
        return self._time

    def monotonic(self) -> float:
        """Return the frozen monotonic value."""
        return self._monotonic

    def advance(self, seconds: float) -> None:
        """Advance both frozen values by the given number of seconds.

        Args:
            seconds: Number of seconds to advance (can be negative).
        """
        self._time += seconds
        self._monotonic += seconds

    def advance_minutes(self, minutes: float) -> None:
        """Advance both frozen values by the given number of minutes."""
        self.advance(minutes * 60.0)


# Default global clock instance
_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    """Get the current default clock.

    Returns:
        The currently configured clock instance.
    """
    return _default_clock


def set_clock(clock: Clock) -> None:
    """Set the default clock (primarily for testing).

    Args:
        clock: Clock instance to use as default.
    """
    global _default_clock
    _default_clock = clock


def reset_clock() -> None:
    """Reset the default clock to SystemClock."""
    global _default_clock
    _default_clock = SystemClock()
