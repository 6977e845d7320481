"""Turnout mood messages shown while a party is running."""

from __future__ import annotations

import math
from enum import Enum
from typing import NamedTuple

from poisson_party.constants import ON_TARGET_TURNOUT_RATIO
from poisson_party.constants import PICKING_UP_TURNOUT_RATIO
from poisson_party.constants import POPULAR_TURNOUT_RATIO
from poisson_party.constants import SMALL_TURNOUT_RATIO
from poisson_party.constants import TRICKLING_TURNOUT_RATIO
from poisson_party.constants import WARMUP_MINUTES
from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction


class TurnoutLevel(Enum):
    """How the projected turnout compares with the host's expectation."""

    WARMING_UP = "warming_up"
    INTIMATE = "intimate"
    TRICKLING = "trickling"
    PICKING_UP = "picking_up"
    ON_TARGET = "on_target"
    POPULAR = "popular"
    BLOWING_UP = "blowing_up"


class TurnoutStatus(NamedTuple):
    """A mood line for the header of the party display.

    Attributes:
        level: Which turnout band the party is in.
        message: Text shown to the host.
        style: Rich style for the message.
    """

    level: TurnoutLevel
    message: str
    style: str


_MESSAGES: dict[TurnoutLevel, tuple[str, str]] = {
    TurnoutLevel.WARMING_UP: ("Party's just getting started! Give it some time... 🎈", "blue"),
    TurnoutLevel.INTIMATE: (
        "Hey, it's okay! Some of the best parties are the intimate ones 💜",
        "medium_purple",
    ),
    TurnoutLevel.TRICKLING: ("People are trickling in! The night is still young ✨", "violet"),
    TurnoutLevel.PICKING_UP: ("Nice! The party's really picking up! 🎉", "magenta"),
    TurnoutLevel.ON_TARGET: ("Perfect turnout! You nailed it! 🎯", "green"),
    TurnoutLevel.POPULAR: ("Wow! More popular than expected! 🌟", "yellow"),
    TurnoutLevel.BLOWING_UP: ("This party is BLOWING UP! 🚀", "dark_orange"),
}

# Ordered (upper bound, level) bands; anything above the last is BLOWING_UP
_BANDS: tuple[tuple[float, TurnoutLevel], ...] = (
    (SMALL_TURNOUT_RATIO, TurnoutLevel.INTIMATE),
    (TRICKLING_TURNOUT_RATIO, TurnoutLevel.TRICKLING),
    (PICKING_UP_TURNOUT_RATIO, TurnoutLevel.PICKING_UP),
    (ON_TARGET_TURNOUT_RATIO, TurnoutLevel.ON_TARGET),
    (POPULAR_TURNOUT_RATIO, TurnoutLevel.POPULAR),
)


def turnout_ratio(snapshot: PartySnapshot, prediction: Prediction) -> float:
    """Projected final head count divided by the expected total.

    An expected total of zero gives an infinite ratio.
    """
    projected = prediction.projected_total(snapshot.arrived_count)
    if snapshot.expected_total == 0:
        return math.inf
    return projected / snapshot.expected_total


def classify_turnout(snapshot: PartySnapshot, prediction: Prediction) -> TurnoutLevel:
    """Place a running party in a turnout band."""
    if snapshot.elapsed_minutes < WARMUP_MINUTES:
        return TurnoutLevel.WARMING_UP
    ratio = turnout_ratio(snapshot, prediction)
    for upper, level in _BANDS:
        if ratio <= upper:
            return level
    return TurnoutLevel.BLOWING_UP


def turnout_status(
    snapshot: PartySnapshot, prediction: Prediction, started: bool = True
) -> TurnoutStatus | None:
    """
    Mood message for the current party state.

    Args:
        snapshot: The party state the prediction was made from.
        prediction: The estimator output for that snapshot.
        started: Whether the party has started; no message is shown before.

    Returns:
        The status line, or None before the party starts.
    """
    if not started:
        return None
    level = classify_turnout(snapshot, prediction)
    message, style = _MESSAGES[level]
    return TurnoutStatus(level=level, message=message, style=style)
