"""Tunable constants of the arrival estimator.

Every estimator function accepts an optional configuration and falls back
to :data:`DEFAULT_CONFIG`.
"""

from dataclasses import dataclass

from poisson_party.exceptions import ConfigurationError


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Configuration for the arrival rate estimator.

    Attributes:
        blend_window_minutes: Minutes of elapsed time over which trust shifts
            linearly from the expected rate to the observed rate.
        lambda_spread_multiplier: The distribution extends to at least this
            multiple of the predicted additional arrivals.
        expected_spread_multiplier: The distribution extends to at least this
            multiple of the expected total.
        arrival_margin: The distribution extends to at least this many
            points beyond the guests already present.
    """

    blend_window_minutes: float = 30.0
    lambda_spread_multiplier: float = 2.0
    expected_spread_multiplier: float = 1.5
    arrival_margin: int = 20

    def __post_init__(self) -> None:
        if self.blend_window_minutes <= 0:
            raise ConfigurationError(
                "blend_window_minutes",
                f"blend_window_minutes must be positive, got {self.blend_window_minutes}",
            )
        if self.lambda_spread_multiplier < 0:
            raise ConfigurationError(
                "lambda_spread_multiplier",
                f"lambda_spread_multiplier must be >= 0, got {self.lambda_spread_multiplier}",
            )
        if self.expected_spread_multiplier < 0:
            raise ConfigurationError(
                "expected_spread_multiplier",
                f"expected_spread_multiplier must be >= 0, got {self.expected_spread_multiplier}",
            )
        if self.arrival_margin < 0:
            raise ConfigurationError(
                "arrival_margin",
                f"arrival_margin must be >= 0, got {self.arrival_margin}",
            )


DEFAULT_CONFIG = EstimatorConfig()
