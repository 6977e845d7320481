"""Poisson Party: predict how many more guests will turn up to your party."""

from importlib.metadata import version

from poisson_party.estimator import build_prediction_distribution
from poisson_party.estimator import estimate
from poisson_party.estimator import poisson_pmf
from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction
from poisson_party.models import PredictionPoint
from poisson_party.models import RateEstimate
from poisson_party.state.config import DEFAULT_CONFIG
from poisson_party.state.config import EstimatorConfig
from poisson_party.state.session import PartySession
from poisson_party.state.session import SessionStatus

__version__ = version("poisson-party")

__all__ = [
    "DEFAULT_CONFIG",
    "EstimatorConfig",
    "PartySession",
    "PartySnapshot",
    "Prediction",
    "PredictionPoint",
    "RateEstimate",
    "SessionStatus",
    "build_prediction_distribution",
    "estimate",
    "poisson_pmf",
]
