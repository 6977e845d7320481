"""Stateful party session that feeds the estimator.

The session owns the mutable party state (settings, elapsed time, arrivals)
and the lifecycle around it. Every query builds a fresh immutable
:class:`~poisson_party.models.PartySnapshot` and hands it to the pure
estimator functions.

Lifecycle::

    NOT_STARTED --start--> RUNNING <--pause/resume--> PAUSED
         ^                    |                          |
         |                    +---- duration reached ----+--> ENDED
         +-------------------------- reset ---------------------+
"""

from __future__ import annotations

import logging
from enum import Enum

from poisson_party.constants import DEFAULT_EXPECTED_TOTAL
from poisson_party.constants import DEFAULT_PARTY_DURATION
from poisson_party.constants import DEFAULT_TIME_SCALE
from poisson_party.estimator import estimate
from poisson_party.exceptions import ConfigurationError
from poisson_party.exceptions import InvalidInputError
from poisson_party.exceptions import SessionStateError
from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction
from poisson_party.state.clock import Clock
from poisson_party.state.clock import get_clock
from poisson_party.state.config import DEFAULT_CONFIG
from poisson_party.state.config import EstimatorConfig
from poisson_party.validation import clamp_elapsed
from poisson_party.validation import validate_arrived_count
from poisson_party.validation import validate_expected_total
from poisson_party.validation import validate_party_duration

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    """Lifecycle state of a party session."""

    NOT_STARTED = "not started"
    RUNNING = "running"
    PAUSED = "paused"
    ENDED = "ended"


class PartySession:
    """
    One party being tracked from start to finish.

    Elapsed time advances with the clock while the session is running, and
    can also be edited by hand. Arrivals are stamped with the elapsed minute
    at which they were recorded.

    Attributes:
        expected_total: Guests the host expects in total.
        party_duration_minutes: Planned length of the party.
        time_scale: Party minutes that pass per wall-clock minute.
        config: Estimator configuration used by :meth:`predict`.
        status: Current lifecycle state.
    """

    def __init__(
        self,
        expected_total: int = DEFAULT_EXPECTED_TOTAL,
        party_duration_minutes: float = DEFAULT_PARTY_DURATION,
        clock: Clock | None = None,
        time_scale: float = DEFAULT_TIME_SCALE,
        config: EstimatorConfig | None = None,
    ) -> None:
        """
        Initialize a session that has not started yet.

        Args:
            expected_total: Guests the host expects (0..1000).
            party_duration_minutes: Party length (60..360 in 30 minute steps).
            clock: Time source. Defaults to the global clock.
            time_scale: Party minutes per wall-clock minute; above 1 fast-forwards.
            config: Estimator configuration. Defaults to DEFAULT_CONFIG.

        Raises:
            InvalidInputError: If the expected total or duration is out of range.
            ConfigurationError: If the time scale is not positive.
        """
        if time_scale <= 0:
            raise ConfigurationError("time_scale", f"time_scale must be positive, got {time_scale}")
        self.expected_total = validate_expected_total(expected_total)
        self.party_duration_minutes = validate_party_duration(party_duration_minutes)
        self.time_scale = time_scale
        self.config = config if config is not None else DEFAULT_CONFIG
        self._clock = clock if clock is not None else get_clock()

        self.status = SessionStatus.NOT_STARTED
        self._elapsed_minutes: float = 0.0
        self._arrival_times: list[float] = []
        self._last_tick: float | None = None

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def elapsed_minutes(self) -> float:
        """Minutes since the party started."""
        return self._elapsed_minutes

    @property
    def remaining_minutes(self) -> float:
        """Minutes left before the planned end."""
        return max(0.0, self.party_duration_minutes - self._elapsed_minutes)

    @property
    def arrived_count(self) -> int:
        """Number of guests recorded so far."""
        return len(self._arrival_times)

    @property
    def arrival_times(self) -> tuple[float, ...]:
        """Elapsed minute at which each guest was recorded, oldest first."""
        return tuple(self._arrival_times)

    @property
    def is_started(self) -> bool:
        """Whether the party has been started and not reset."""
        return self.status is not SessionStatus.NOT_STARTED

    def snapshot(self) -> PartySnapshot:
        """Freeze the current state for the estimator."""
        return PartySnapshot(
            expected_total=self.expected_total,
            party_duration_minutes=self.party_duration_minutes,
            elapsed_minutes=self._elapsed_minutes,
            arrived_count=len(self._arrival_times),
        )

    def predict(self) -> Prediction:
        """Run the estimator on the current state."""
        return estimate(self.snapshot(), self.config)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """
        Start (or restart) the party from minute zero.

        Raises:
            SessionStateError: If the party is already running or paused.
        """
        if self.status in (SessionStatus.RUNNING, SessionStatus.PAUSED):
            raise SessionStateError("start", self.status.value)
        self._elapsed_minutes = 0.0
        self._arrival_times.clear()
        self._last_tick = self._clock.monotonic()
        self.status = SessionStatus.RUNNING
        logger.debug(
            "Party started: expecting %d guests over %g minutes",
            self.expected_total,
            self.party_duration_minutes,
        )

    def pause(self) -> None:
        """
        Stop the clock without ending the party.

        Raises:
            SessionStateError: If the party is not running.
        """
        if self.status is not SessionStatus.RUNNING:
            raise SessionStateError("pause", self.status.value)
        self.tick()
        if self.status is SessionStatus.RUNNING:
            self.status = SessionStatus.PAUSED
            self._last_tick = None

    def resume(self) -> None:
        """
        Restart the clock after a pause.

        Raises:
            SessionStateError: If the party is not paused.
        """
        if self.status is not SessionStatus.PAUSED:
            raise SessionStateError("resume", self.status.value)
        self._last_tick = self._clock.monotonic()
        self.status = SessionStatus.RUNNING

    def toggle_pause(self) -> None:
        """Pause a running party or resume a paused one; otherwise do nothing."""
        if self.status is SessionStatus.RUNNING:
            self.pause()
        elif self.status is SessionStatus.PAUSED:
            self.resume()

    def reset(self) -> None:
        """Return to the not-started state, keeping the party settings."""
        self.status = SessionStatus.NOT_STARTED
        self._elapsed_minutes = 0.0
        self._arrival_times.clear()
        self._last_tick = None
        logger.debug("Party reset")

    def clear_all(self) -> None:
        """Reset and also clear the settings (no guests expected, default duration)."""
        self.reset()
        self.expected_total = 0
        self.party_duration_minutes = DEFAULT_PARTY_DURATION

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    def tick(self) -> float:
        """
        Advance elapsed time by the wall time since the previous tick.

        Only a running party moves. When the planned duration is reached the
        party ends.

        Returns:
            The elapsed minutes after the tick.
        """
        if self.status is not SessionStatus.RUNNING:
            return self._elapsed_minutes
        now = self._clock.monotonic()
        if self._last_tick is not None:
            delta_minutes = (now - self._last_tick) / 60.0 * self.time_scale
            self._set_elapsed(self._elapsed_minutes + delta_minutes)
        self._last_tick = now
        return self._elapsed_minutes

    def advance(self, minutes: float) -> float:
        """Move elapsed time by ``minutes`` (negative moves back), clamped to the party."""
        return self.set_elapsed(self._elapsed_minutes + minutes)

    def set_elapsed(self, minutes: float) -> float:
        """
        Set elapsed time directly, clamped to the party.

        Moving back from the end of a finished party resumes it in the paused
        state.

        Raises:
            SessionStateError: If the party has not started.
        """
        if self.status is SessionStatus.NOT_STARTED:
            raise SessionStateError("edit the elapsed time", self.status.value)
        if self.status is SessionStatus.RUNNING:
            self._last_tick = self._clock.monotonic()
        self._set_elapsed(minutes)
        if self.status is SessionStatus.ENDED and self.remaining_minutes > 0:
            self.status = SessionStatus.PAUSED
        return self._elapsed_minutes

    def _set_elapsed(self, minutes: float) -> None:
        self._elapsed_minutes = clamp_elapsed(minutes, self.party_duration_minutes)
        if self.remaining_minutes == 0 and self.status is not SessionStatus.ENDED:
            self.status = SessionStatus.ENDED
            self._last_tick = None
            logger.debug("Party ended with %d guests", self.arrived_count)

    # -------------------------------------------------------------------------
    # Guests
    # -------------------------------------------------------------------------

    def add_guests(self, count: int = 1) -> int:
        """
        Record ``count`` arrivals at the current elapsed minute.

        Args:
            count: Number of guests who just arrived.

        Returns:
            The new number of guests present.

        Raises:
            SessionStateError: If the party is not running or paused.
            InvalidInputError: If ``count`` is negative or the new total is
                above the maximum.
        """
        if self.status not in (SessionStatus.RUNNING, SessionStatus.PAUSED):
            raise SessionStateError("add guests", self.status.value)
        if count < 0:
            raise InvalidInputError("count", count, f"Guest count must be >= 0, got {count}")
        validate_arrived_count(self.arrived_count + count)
        self._arrival_times.extend([self._elapsed_minutes] * count)
        logger.debug(
            "%d guest(s) arrived at minute %.1f (%d total)",
            count,
            self._elapsed_minutes,
            self.arrived_count,
        )
        return self.arrived_count

    def remove_guest(self) -> int:
        """Undo the most recent arrival, if any. Returns the new count."""
        if self._arrival_times:
            self._arrival_times.pop()
        return self.arrived_count

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def set_expected_total(self, value: int) -> None:
        """
        Change the expected guest count before the party starts.

        Raises:
            SessionStateError: If the party has started.
            InvalidInputError: If the value is out of range.
        """
        if self.is_started:
            raise SessionStateError("change the expected guests", self.status.value)
        self.expected_total = validate_expected_total(value)

    def set_party_duration(self, minutes: float) -> None:
        """
        Change the planned duration before the party starts.

        Raises:
            SessionStateError: If the party has started.
            InvalidInputError: If the duration is out of range or off-step.
        """
        if self.is_started:
            raise SessionStateError("change the party duration", self.status.value)
        self.party_duration_minutes = validate_party_duration(minutes)
