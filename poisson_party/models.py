"""Data models for party arrival estimation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True)
class PartySnapshot:
    """
    State of one party session at one instant.

    Snapshots are immutable; the session rebuilds one after every change
    and hands it to the estimator.

    Attributes:
        expected_total: Number of guests the host expects in total.
        party_duration_minutes: Planned length of the party in minutes.
        elapsed_minutes: Minutes since the party started, within [0, duration].
        arrived_count: Number of guests that have arrived so far.
    """

    expected_total: int
    party_duration_minutes: float
    elapsed_minutes: float = 0.0
    arrived_count: int = 0


@dataclass(frozen=True)
class RateEstimate:
    """
    Arrival rates in guests per minute.

    Attributes:
        current_rate: Observed rate so far.
        expected_rate: A-priori rate from the expected total and duration.
        blended_rate: Weighted mix of the two, used for prediction.
    """

    current_rate: float
    expected_rate: float
    blended_rate: float


class PredictionPoint(NamedTuple):
    """Probability that exactly ``additional`` more guests arrive.

    Attributes:
        additional: Number of further arrivals.
        total_if_k_arrive: Party size if that many more arrive.
        probability_percent: Poisson probability as a percentage.
    """

    additional: int
    total_if_k_arrive: int
    probability_percent: float


@dataclass(frozen=True)
class Prediction:
    """
    Everything the estimator derives from one snapshot.

    Attributes:
        current_rate: Observed arrival rate (guests/minute).
        expected_rate: A-priori arrival rate (guests/minute).
        blended_rate: Rate used for the forecast (guests/minute).
        remaining_minutes: Minutes left in the party.
        predicted_additional: Expected number of further arrivals.
        distribution: Poisson probabilities for 0..max_k further arrivals.
    """

    current_rate: float
    expected_rate: float
    blended_rate: float
    remaining_minutes: float
    predicted_additional: float
    distribution: tuple[PredictionPoint, ...] = ()

    @property
    def max_k(self) -> int:
        """Largest number of further arrivals covered by the distribution."""
        return len(self.distribution) - 1

    @property
    def most_likely_additional(self) -> int:
        """Mode of the distribution (lowest k on ties)."""
        if not self.distribution:
            return 0
        best = max(self.distribution, key=lambda p: (p.probability_percent, -p.additional))
        return best.additional

    @property
    def rounded_additional(self) -> int:
        """Forecast of further arrivals rounded half up for display."""
        return math.floor(self.predicted_additional + 0.5)

    def projected_total(self, arrived_count: int) -> int:
        """Guests present plus the rounded forecast of further arrivals."""
        return arrived_count + self.rounded_additional

    def to_dict(self) -> dict[str, object]:
        """Plain-dict form for JSON output."""
        return {
            "current_rate": self.current_rate,
            "expected_rate": self.expected_rate,
            "blended_rate": self.blended_rate,
            "remaining_minutes": self.remaining_minutes,
            "predicted_additional": self.predicted_additional,
            "distribution": [point._asdict() for point in self.distribution],
        }


def format_rate(guests_per_minute: float) -> str:
    """Format an arrival rate for display.

    Args:
        guests_per_minute: Rate in guests per minute.

    Returns:
        The rate with two decimals, e.g. "0.33 guests/min".
    """
    return f"{guests_per_minute:.2f} guests/min"
