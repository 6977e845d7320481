"""Arrival rate estimation for a running party.

Predicts how many more guests will arrive by blending the observed arrival
rate with the rate implied by the host's expectations, then models the
remaining arrivals as a Poisson process with that rate.

Every function here is pure: it reads only its arguments, keeps no state
and never raises for a snapshot that satisfies the model's preconditions
(non-negative counts, positive duration, elapsed clamped to the duration).
Validation of user input happens before a snapshot is built; see
:mod:`poisson_party.validation`.
"""

import math

from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction
from poisson_party.models import PredictionPoint
from poisson_party.models import RateEstimate
from poisson_party.state.config import DEFAULT_CONFIG
from poisson_party.state.config import EstimatorConfig


def current_rate(snapshot: PartySnapshot) -> float:
    """Observed arrivals per minute, or 0.0 before any time has passed."""
    if snapshot.elapsed_minutes > 0:
        return snapshot.arrived_count / snapshot.elapsed_minutes
    return 0.0


def expected_rate(snapshot: PartySnapshot) -> float:
    """Arrivals per minute implied by the expected total over the whole party."""
    return snapshot.expected_total / snapshot.party_duration_minutes


def remaining_minutes(snapshot: PartySnapshot) -> float:
    """Minutes left in the party, never negative."""
    return max(0.0, snapshot.party_duration_minutes - snapshot.elapsed_minutes)


def blend_factor(snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG) -> float:
    """
    Weight given to the observed rate, between 0 and 1.

    Ramps linearly from 0 at the start of the party to 1 once
    ``config.blend_window_minutes`` have elapsed.
    """
    return min(snapshot.elapsed_minutes / config.blend_window_minutes, 1.0)


def blended_rate(snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG) -> float:
    """
    Arrival rate used for prediction.

    A convex combination of the observed and expected rates. Early on the
    observed rate rests on very few arrivals, so the expected rate dominates;
    after the blend window only observation counts.

    Args:
        snapshot: The party state.
        config: Estimator configuration.

    Returns:
        Guests per minute. Equal to the expected rate at the start and to
        the observed rate once the blend window has passed.
    """
    factor = blend_factor(snapshot, config)
    return current_rate(snapshot) * factor + expected_rate(snapshot) * (1.0 - factor)


def rate_estimate(
    snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG
) -> RateEstimate:
    """Bundle the observed, expected and blended rates."""
    return RateEstimate(
        current_rate=current_rate(snapshot),
        expected_rate=expected_rate(snapshot),
        blended_rate=blended_rate(snapshot, config),
    )


def predicted_additional(
    snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG
) -> float:
    """
    Expected number of guests still to arrive.

    This is also the rate parameter (lambda) of the Poisson distribution of
    further arrivals. It is 0 when the party is over or when nobody is
    expected and nobody has come.
    """
    return blended_rate(snapshot, config) * remaining_minutes(snapshot)


def poisson_pmf(k: int, lam: float) -> float:
    """
    Probability of exactly ``k`` events for a Poisson variable with mean ``lam``.

    Computed in log space as ``k*log(lam) - lam - lgamma(k+1)`` so that large
    ``k`` (thousands) does not overflow the way ``lam**k / k!`` would.

    Args:
        k: Number of events (non-negative).
        lam: Mean of the distribution (non-negative).

    Returns:
        The probability in [0, 1]. With ``lam == 0`` all mass sits at ``k == 0``,
        so ``poisson_pmf(0, 0.0) == 1.0`` and every other ``k`` gives 0.0.
    """
    if lam == 0:
        return 1.0 if k == 0 else 0.0
    if k == 0:
        return math.exp(-lam)
    log_pmf = k * math.log(lam) - lam - math.lgamma(k + 1)
    return math.exp(log_pmf)


def max_k(snapshot: PartySnapshot, lam: float, config: EstimatorConfig = DEFAULT_CONFIG) -> int:
    """
    Largest number of further arrivals to include in the distribution.

    The bound is the largest of three candidates: a multiple of the forecast
    (room for the right tail), a multiple of the expected total (so the axis
    matches what the host planned for) and a fixed margin above the guests
    already present.
    """
    return max(
        math.ceil(lam * config.lambda_spread_multiplier),
        math.ceil(snapshot.expected_total * config.expected_spread_multiplier),
        snapshot.arrived_count + config.arrival_margin,
    )


def build_prediction_distribution(
    snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG
) -> list[PredictionPoint]:
    """
    Poisson distribution over the number of further arrivals.

    The distribution is truncated at :func:`max_k` and not renormalised, so
    its percentages sum to at most 100. A new list is built on every call.

    Args:
        snapshot: The party state.
        config: Estimator configuration.

    Returns:
        One point for each ``k`` in ``0..max_k`` inclusive.
    """
    lam = predicted_additional(snapshot, config)
    upper = max_k(snapshot, lam, config)
    return [
        PredictionPoint(
            additional=k,
            total_if_k_arrive=k + snapshot.arrived_count,
            probability_percent=poisson_pmf(k, lam) * 100.0,
        )
        for k in range(upper + 1)
    ]


def estimate(snapshot: PartySnapshot, config: EstimatorConfig = DEFAULT_CONFIG) -> Prediction:
    """
    Run the whole estimator on one snapshot.

    Args:
        snapshot: The party state.
        config: Estimator configuration.

    Returns:
        Rates, remaining time, forecast and distribution for the snapshot.
    """
    rates = rate_estimate(snapshot, config)
    remaining = remaining_minutes(snapshot)
    return Prediction(
        current_rate=rates.current_rate,
        expected_rate=rates.expected_rate,
        blended_rate=rates.blended_rate,
        remaining_minutes=remaining,
        predicted_additional=rates.blended_rate * remaining,
        distribution=tuple(build_prediction_distribution(snapshot, config)),
    )
