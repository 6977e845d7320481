"""Shared test fixtures for poisson-party tests."""

from collections.abc import Generator

import pytest

from poisson_party.models import PartySnapshot
from poisson_party.state.clock import FrozenClock
from poisson_party.state.clock import reset_clock
from poisson_party.state.session import PartySession


def make_snapshot(
    expected_total: int = 20,
    party_duration_minutes: float = 180.0,
    elapsed_minutes: float = 0.0,
    arrived_count: int = 0,
) -> PartySnapshot:
    """Build a snapshot with the default party settings."""
    return PartySnapshot(
        expected_total=expected_total,
        party_duration_minutes=party_duration_minutes,
        elapsed_minutes=elapsed_minutes,
        arrived_count=arrived_count,
    )


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """A clock frozen at a fixed time with monotonic starting at zero."""
    return FrozenClock(frozen_time=1700000000.0, frozen_monotonic=0.0)


@pytest.fixture
def session(frozen_clock: FrozenClock) -> PartySession:
    """A not-yet-started party of 20 guests over 3 hours on a frozen clock."""
    return PartySession(expected_total=20, party_duration_minutes=180.0, clock=frozen_clock)


@pytest.fixture
def running_session(session: PartySession) -> PartySession:
    """The default party, started."""
    session.start()
    return session


@pytest.fixture(autouse=True)
def cleanup_clock() -> Generator[None, None, None]:
    """Reset the global clock after each test."""
    yield
    reset_clock()
