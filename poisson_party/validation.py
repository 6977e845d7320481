"""Validation and parsing of party inputs.

The estimator trusts its snapshot completely. This module is the layer in
front of it: it range-checks the host's settings, clamps elapsed time into
the party and converts between minutes and the ``HH:MM:SS`` text used when
the elapsed time is edited by hand.
"""

from __future__ import annotations

import logging
import math
import re

from poisson_party.constants import MAX_ARRIVED_COUNT
from poisson_party.constants import MAX_EXPECTED_TOTAL
from poisson_party.constants import MAX_PARTY_DURATION
from poisson_party.constants import MIN_EXPECTED_TOTAL
from poisson_party.constants import MIN_PARTY_DURATION
from poisson_party.constants import PARTY_DURATION_STEP
from poisson_party.exceptions import InvalidInputError
from poisson_party.exceptions import InvalidSnapshotError
from poisson_party.exceptions import TimeParseError
from poisson_party.models import PartySnapshot

logger = logging.getLogger(__name__)

# "1:05:30", "05:30", "00:00:00"
CLOCK_PATTERN = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2})$")

# Plain minutes, e.g. "45" or "12.5"
MINUTES_PATTERN = re.compile(r"^\d+(?:\.\d+)?$")

# Leading integer of a form field, e.g. "25 guests" -> "25"
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def validate_expected_total(value: int) -> int:
    """Check an expected guest count.

    Args:
        value: The count entered by the host.

    Returns:
        The count, unchanged.

    Raises:
        InvalidInputError: If the count is outside 0..1000.
    """
    if not MIN_EXPECTED_TOTAL <= value <= MAX_EXPECTED_TOTAL:
        raise InvalidInputError(
            "expected_total",
            value,
            f"Expected guests must be between {MIN_EXPECTED_TOTAL} and "
            f"{MAX_EXPECTED_TOTAL}, got {value}",
        )
    return value


def validate_party_duration(minutes: float) -> float:
    """Check a party duration.

    Durations run from 60 to 360 minutes in 30 minute steps.

    Args:
        minutes: Duration in minutes.

    Returns:
        The duration as a float.

    Raises:
        InvalidInputError: If the duration is out of range or off-step.
    """
    if not MIN_PARTY_DURATION <= minutes <= MAX_PARTY_DURATION:
        raise InvalidInputError(
            "party_duration",
            minutes,
            f"Party duration must be between {MIN_PARTY_DURATION:g} and "
            f"{MAX_PARTY_DURATION:g} minutes, got {minutes:g}",
        )
    if (minutes - MIN_PARTY_DURATION) % PARTY_DURATION_STEP != 0:
        raise InvalidInputError(
            "party_duration",
            minutes,
            f"Party duration must be a multiple of {PARTY_DURATION_STEP:g} minutes, "
            f"got {minutes:g}",
        )
    return float(minutes)


def validate_arrived_count(value: int) -> int:
    """Check the number of guests present.

    Raises:
        InvalidInputError: If the count is negative or above the maximum.
    """
    if not 0 <= value <= MAX_ARRIVED_COUNT:
        raise InvalidInputError(
            "arrived_count",
            value,
            f"Guests present must be between 0 and {MAX_ARRIVED_COUNT}, got {value}",
        )
    return value


def clamp_elapsed(elapsed_minutes: float, party_duration_minutes: float) -> float:
    """Clamp elapsed minutes into ``[0, party_duration_minutes]``."""
    return min(max(0.0, elapsed_minutes), party_duration_minutes)


def parse_expected_total(text: str) -> int:
    """Parse the expected-guests form field leniently.

    Text without a leading number counts as 0 and negative numbers are
    raised to 0, as a numeric form field would. The result is
    then range-checked.

    Args:
        text: Raw text from the input field.

    Returns:
        The expected guest count.

    Raises:
        InvalidInputError: If the parsed count is above the maximum.
    """
    match = LEADING_INT_PATTERN.match(text)
    if match is None:
        logger.debug("Could not parse expected guests from %r, using 0", text)
        return 0
    return validate_expected_total(max(0, int(match.group(1))))


def parse_clock(text: str) -> float:
    """Parse an elapsed time into minutes.

    Accepts ``HH:MM:SS``, ``MM:SS`` or a plain number of minutes.

    Args:
        text: The text to parse.

    Returns:
        Elapsed time in minutes.

    Raises:
        TimeParseError: If the text is not in one of the accepted forms or
            has minutes/seconds fields of 60 or more.
    """
    stripped = text.strip()
    if MINUTES_PATTERN.match(stripped):
        return float(stripped)

    match = CLOCK_PATTERN.match(stripped)
    if match is None:
        raise TimeParseError(text)

    hours_str, minutes_str, seconds_str = match.groups()
    hours = int(hours_str) if hours_str is not None else 0
    minutes = int(minutes_str)
    seconds = int(seconds_str)
    if seconds >= 60 or (hours_str is not None and minutes >= 60):
        raise TimeParseError(text, f"Minutes and seconds must be below 60 in {text!r}")
    return hours * 60.0 + minutes + seconds / 60.0


def format_clock(minutes: float) -> str:
    """Format minutes as ``HH:MM:SS``.

    Negative and non-finite values are shown as ``00:00:00``.
    """
    if not math.isfinite(minutes) or minutes <= 0:
        return "00:00:00"
    total_seconds = int(round(minutes * 60))
    hours, rest = divmod(total_seconds, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def validate_snapshot(snapshot: PartySnapshot) -> PartySnapshot:
    """Check that a snapshot satisfies the estimator's preconditions.

    Args:
        snapshot: The snapshot to check.

    Returns:
        The snapshot, unchanged.

    Raises:
        InvalidSnapshotError: Listing every violated precondition.
    """
    problems: list[str] = []
    if snapshot.expected_total < 0:
        problems.append(f"expected_total is negative ({snapshot.expected_total})")
    if snapshot.arrived_count < 0:
        problems.append(f"arrived_count is negative ({snapshot.arrived_count})")
    if not math.isfinite(snapshot.party_duration_minutes):
        problems.append(
            f"party_duration_minutes must be finite ({snapshot.party_duration_minutes})"
        )
    elif not snapshot.party_duration_minutes > 0:
        problems.append(
            f"party_duration_minutes must be positive ({snapshot.party_duration_minutes})"
        )
    if not math.isfinite(snapshot.elapsed_minutes):
        problems.append(f"elapsed_minutes must be finite ({snapshot.elapsed_minutes})")
    elif snapshot.elapsed_minutes < 0:
        problems.append(f"elapsed_minutes is negative ({snapshot.elapsed_minutes})")
    elif snapshot.elapsed_minutes > snapshot.party_duration_minutes > 0:
        problems.append(
            f"elapsed_minutes ({snapshot.elapsed_minutes}) exceeds the party duration "
            f"({snapshot.party_duration_minutes})"
        )
    if problems:
        raise InvalidSnapshotError(problems)
    return snapshot
