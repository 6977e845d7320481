"""Time sources and estimator configuration.

The party session lives in :mod:`poisson_party.state.session`; it is not
re-exported here because it depends on the estimator, which itself imports
this package's configuration.
"""

from poisson_party.state.clock import Clock
from poisson_party.state.clock import FrozenClock
from poisson_party.state.clock import SystemClock
from poisson_party.state.clock import get_clock
from poisson_party.state.clock import reset_clock
from poisson_party.state.clock import set_clock
from poisson_party.state.config import DEFAULT_CONFIG
from poisson_party.state.config import EstimatorConfig

__all__ = [
    "Clock",
    "DEFAULT_CONFIG",
    "EstimatorConfig",
    "FrozenClock",
    "SystemClock",
    "get_clock",
    "reset_clock",
    "set_clock",
]
