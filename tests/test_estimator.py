"""Tests for the arrival rate estimator."""

import math

import pytest

from poisson_party.estimator import blend_factor
from poisson_party.estimator import blended_rate
from poisson_party.estimator import build_prediction_distribution
from poisson_party.estimator import current_rate
from poisson_party.estimator import estimate
from poisson_party.estimator import expected_rate
from poisson_party.estimator import max_k
from poisson_party.estimator import poisson_pmf
from poisson_party.estimator import predicted_additional
from poisson_party.estimator import rate_estimate
from poisson_party.estimator import remaining_minutes
from poisson_party.state.config import EstimatorConfig
from tests.conftest import make_snapshot


class TestRates:
    """Tests for the observed, expected and remaining-time helpers."""

    def test_current_rate_zero_at_start(self) -> None:
        """Test that no elapsed time means a zero observed rate."""
        assert current_rate(make_snapshot(elapsed_minutes=0.0, arrived_count=5)) == 0.0

    def test_current_rate(self) -> None:
        """Test observed rate is arrivals per elapsed minute."""
        assert current_rate(make_snapshot(elapsed_minutes=30.0, arrived_count=10)) == (
            pytest.approx(1 / 3)
        )

    def test_expected_rate(self) -> None:
        """Test expected rate spreads the expected total over the duration."""
        assert expected_rate(make_snapshot()) == pytest.approx(20 / 180)

    def test_expected_rate_no_guests(self) -> None:
        """Test expected rate is zero when nobody is expected."""
        assert expected_rate(make_snapshot(expected_total=0)) == 0.0

    def test_remaining_minutes(self) -> None:
        """Test remaining minutes count down from the duration."""
        assert remaining_minutes(make_snapshot(elapsed_minutes=30.0)) == 150.0

    def test_remaining_minutes_never_negative(self) -> None:
        """Test remaining minutes stop at zero."""
        assert remaining_minutes(make_snapshot(elapsed_minutes=180.0)) == 0.0
        assert remaining_minutes(make_snapshot(elapsed_minutes=200.0)) == 0.0


class TestBlendedRate:
    """Tests for blending observed and expected rates."""

    def test_blend_factor_ramps_linearly(self) -> None:
        """Test the blend factor over the first 30 minutes."""
        assert blend_factor(make_snapshot(elapsed_minutes=0.0)) == 0.0
        assert blend_factor(make_snapshot(elapsed_minutes=15.0)) == 0.5
        assert blend_factor(make_snapshot(elapsed_minutes=30.0)) == 1.0
        assert blend_factor(make_snapshot(elapsed_minutes=120.0)) == 1.0

    def test_equals_expected_rate_at_start(self) -> None:
        """Test the blend is exactly the expected rate at minute zero."""
        snapshot = make_snapshot(elapsed_minutes=0.0, arrived_count=3)
        assert blended_rate(snapshot) == expected_rate(snapshot)

    @pytest.mark.parametrize("elapsed", [30.0, 45.0, 179.0])
    def test_equals_current_rate_after_window(self, elapsed: float) -> None:
        """Test the blend is exactly the observed rate once the window has passed."""
        snapshot = make_snapshot(elapsed_minutes=elapsed, arrived_count=17)
        assert blended_rate(snapshot) == current_rate(snapshot)

    def test_linear_between(self) -> None:
        """Test the blend interpolates linearly inside the window."""
        snapshot = make_snapshot(elapsed_minutes=10.0, arrived_count=5)
        factor = 10.0 / 30.0
        expected = 0.5 * factor + (20 / 180) * (1 - factor)
        assert blended_rate(snapshot) == pytest.approx(expected)

    @pytest.mark.parametrize(
        ("elapsed", "arrived"),
        [(1.0, 0), (5.0, 2), (12.5, 9), (29.0, 1), (29.9, 40)],
    )
    def test_between_observed_and_expected(self, elapsed: float, arrived: int) -> None:
        """Test the blend never leaves the interval spanned by the two rates."""
        snapshot = make_snapshot(elapsed_minutes=elapsed, arrived_count=arrived)
        low = min(current_rate(snapshot), expected_rate(snapshot))
        high = max(current_rate(snapshot), expected_rate(snapshot))
        assert low - 1e-12 <= blended_rate(snapshot) <= high + 1e-12

    def test_custom_blend_window(self) -> None:
        """Test a longer blend window keeps trusting expectations for longer."""
        config = EstimatorConfig(blend_window_minutes=60.0)
        snapshot = make_snapshot(elapsed_minutes=30.0, arrived_count=10)
        assert blend_factor(snapshot, config) == 0.5
        assert blended_rate(snapshot, config) == pytest.approx(0.5 * (1 / 3) + 0.5 * (20 / 180))

    def test_rate_estimate_bundle(self) -> None:
        """Test rate_estimate agrees with the individual functions."""
        snapshot = make_snapshot(elapsed_minutes=20.0, arrived_count=4)
        rates = rate_estimate(snapshot)
        assert rates.current_rate == current_rate(snapshot)
        assert rates.expected_rate == expected_rate(snapshot)
        assert rates.blended_rate == blended_rate(snapshot)


class TestPoissonPMF:
    """Tests for the Poisson probability mass function."""

    def test_zero_lambda_zero_k_is_certain(self) -> None:
        """Test that no expected arrivals means certainly no arrivals."""
        assert poisson_pmf(0, 0.0) == 1.0

    def test_zero_lambda_positive_k(self) -> None:
        """Test that no expected arrivals gives zero probability elsewhere."""
        assert poisson_pmf(1, 0.0) == 0.0
        assert poisson_pmf(50, 0.0) == 0.0

    @pytest.mark.parametrize("lam", [0.0, 0.1, 1.0, 7.5, 20.0, 50.0])
    def test_k_zero_is_exp_minus_lambda(self, lam: float) -> None:
        """Test P(0) = e^-lambda."""
        assert poisson_pmf(0, lam) == pytest.approx(math.exp(-lam))

    def test_known_values(self) -> None:
        """Test against hand-computed probabilities."""
        assert poisson_pmf(1, 1.0) == pytest.approx(math.exp(-1))
        assert poisson_pmf(2, 3.0) == pytest.approx(9 / 2 * math.exp(-3))
        assert poisson_pmf(5, 2.5) == pytest.approx(2.5**5 / 120 * math.exp(-2.5))

    @pytest.mark.parametrize("lam", [0.0, 0.5, 3.0, 20.0, 50.0])
    def test_sums_to_one(self, lam: float) -> None:
        """Test that the mass over k=0..200 is within 1e-6 of one."""
        total = sum(poisson_pmf(k, lam) for k in range(201))
        assert total == pytest.approx(1.0, abs=1e-6)

    def test_large_k_does_not_overflow(self) -> None:
        """Test k in the thousands gives finite probabilities."""
        for k in (171, 500, 1000, 5000):
            value = poisson_pmf(k, float(k))
            assert math.isfinite(value)
            assert 0.0 < value < 1.0

    def test_large_k_near_mean(self) -> None:
        """Test the mode of a large Poisson matches the normal approximation."""
        lam = 2000.0
        approx = 1 / math.sqrt(2 * math.pi * lam)
        assert poisson_pmf(2000, lam) == pytest.approx(approx, rel=1e-3)

    def test_far_tail_underflows_to_zero(self) -> None:
        """Test extreme tails return 0.0 rather than raising."""
        assert poisson_pmf(5000, 1.0) == 0.0


class TestPredictedAdditional:
    """Tests for the forecast of further arrivals."""

    def test_at_start_matches_expected_total(self) -> None:
        """Test that at minute zero the forecast is the expected total."""
        assert predicted_additional(make_snapshot()) == pytest.approx(20.0)

    def test_zero_when_party_over(self) -> None:
        """Test no further arrivals are predicted once time is up."""
        snapshot = make_snapshot(elapsed_minutes=180.0, arrived_count=25)
        assert predicted_additional(snapshot) == 0.0

    def test_zero_when_nobody_expected_or_arrived(self) -> None:
        """Test no further arrivals with no expectation and no observations."""
        snapshot = make_snapshot(expected_total=0, elapsed_minutes=10.0)
        assert predicted_additional(snapshot) == 0.0


class TestDistribution:
    """Tests for build_prediction_distribution and max_k."""

    def test_max_k_from_lambda(self) -> None:
        """Test the lambda-based bound wins for a large forecast."""
        snapshot = make_snapshot(expected_total=10, arrived_count=0)
        assert max_k(snapshot, 40.0) == 80

    def test_max_k_from_expected_total(self) -> None:
        """Test the expected-total bound wins when the forecast is small."""
        snapshot = make_snapshot(expected_total=100, arrived_count=0)
        assert max_k(snapshot, 10.0) == 150

    def test_max_k_from_arrivals(self) -> None:
        """Test the arrival margin wins when everything else is small."""
        snapshot = make_snapshot(expected_total=2, arrived_count=50)
        assert max_k(snapshot, 1.0) == 70

    def test_max_k_rounds_up(self) -> None:
        """Test fractional bounds are rounded up."""
        snapshot = make_snapshot(expected_total=0, arrived_count=0)
        assert max_k(snapshot, 12.2) == 25

    def test_max_k_custom_config(self) -> None:
        """Test the bounds follow the configuration."""
        config = EstimatorConfig(arrival_margin=5, expected_spread_multiplier=1.0)
        snapshot = make_snapshot(expected_total=3, arrived_count=1)
        assert max_k(snapshot, 0.0, config) == 6

    @pytest.mark.parametrize(
        ("expected_total", "elapsed", "arrived"),
        [(20, 0.0, 0), (20, 30.0, 10), (0, 10.0, 0), (300, 90.0, 120), (5, 179.0, 3)],
    )
    def test_length_and_totals(self, expected_total: int, elapsed: float, arrived: int) -> None:
        """Test the distribution covers 0..max_k and totals step from arrivals."""
        snapshot = make_snapshot(
            expected_total=expected_total, elapsed_minutes=elapsed, arrived_count=arrived
        )
        points = build_prediction_distribution(snapshot)
        lam = predicted_additional(snapshot)
        assert len(points) == max_k(snapshot, lam) + 1
        assert [p.additional for p in points] == list(range(len(points)))
        assert points[0].total_if_k_arrive == arrived
        for before, after in zip(points, points[1:]):
            assert after.total_if_k_arrive == before.total_if_k_arrive + 1

    def test_probabilities_are_percentages(self) -> None:
        """Test each point holds the Poisson probability times 100."""
        snapshot = make_snapshot(elapsed_minutes=30.0, arrived_count=10)
        lam = predicted_additional(snapshot)
        for point in build_prediction_distribution(snapshot):
            expected = poisson_pmf(point.additional, lam) * 100
            assert point.probability_percent == pytest.approx(expected)
            assert 0.0 <= point.probability_percent <= 100.0

    def test_not_renormalised(self) -> None:
        """Test the truncated distribution sums to at most 100 percent."""
        snapshot = make_snapshot(elapsed_minutes=60.0, arrived_count=30)
        total = sum(p.probability_percent for p in build_prediction_distribution(snapshot))
        assert total <= 100.0 + 1e-9

    def test_fresh_list_each_call(self) -> None:
        """Test repeated calls give equal but independent results."""
        snapshot = make_snapshot(elapsed_minutes=12.0, arrived_count=4)
        first = build_prediction_distribution(snapshot)
        second = build_prediction_distribution(snapshot)
        assert first == second
        assert first is not second

    def test_large_party_distribution_is_finite(self) -> None:
        """Test a party with a thousand guests still gives finite values."""
        snapshot = make_snapshot(expected_total=1000, elapsed_minutes=5.0, arrived_count=200)
        points = build_prediction_distribution(snapshot)
        assert len(points) > 1000
        assert all(math.isfinite(p.probability_percent) for p in points)
        assert sum(p.probability_percent for p in points) == pytest.approx(100.0, abs=1e-4)


class TestScenarios:
    """End-to-end scenarios for estimate()."""

    def test_party_just_started(self) -> None:
        """Test 20 guests over 3 hours at minute zero."""
        prediction = estimate(make_snapshot())
        assert prediction.current_rate == 0.0
        assert prediction.expected_rate == pytest.approx(0.1111, abs=1e-4)
        assert prediction.blended_rate == prediction.expected_rate
        assert prediction.remaining_minutes == 180.0
        assert prediction.predicted_additional == pytest.approx(20.0)
        assert prediction.most_likely_additional in (19, 20)

    def test_busy_first_half_hour(self) -> None:
        """Test 10 arrivals in the first 30 minutes shifts fully to observation."""
        prediction = estimate(make_snapshot(elapsed_minutes=30.0, arrived_count=10))
        assert prediction.current_rate == pytest.approx(0.3333, abs=1e-4)
        assert prediction.blended_rate == prediction.current_rate
        assert prediction.remaining_minutes == 150.0
        assert prediction.predicted_additional == pytest.approx(50.0)
        assert len(prediction.distribution) == prediction.max_k + 1

    def test_nobody_expected(self) -> None:
        """Test all mass at zero when nobody is expected and nobody came."""
        prediction = estimate(make_snapshot(expected_total=0, elapsed_minutes=10.0))
        assert prediction.current_rate == 0.0
        assert prediction.expected_rate == 0.0
        assert prediction.blended_rate == 0.0
        assert prediction.predicted_additional == 0.0
        assert prediction.distribution[0].probability_percent == 100.0
        assert all(p.probability_percent == 0.0 for p in prediction.distribution[1:])
        assert len(prediction.distribution) == 21

    def test_estimate_is_deterministic(self) -> None:
        """Test the same snapshot always gives the same prediction."""
        snapshot = make_snapshot(elapsed_minutes=42.0, arrived_count=13)
        assert estimate(snapshot) == estimate(snapshot)

    def test_estimate_matches_parts(self) -> None:
        """Test the bundle agrees with the individual functions."""
        snapshot = make_snapshot(elapsed_minutes=20.0, arrived_count=7)
        prediction = estimate(snapshot)
        assert prediction.predicted_additional == pytest.approx(predicted_additional(snapshot))
        assert list(prediction.distribution) == build_prediction_distribution(snapshot)
