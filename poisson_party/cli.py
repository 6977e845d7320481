"""Command-line interface for poisson-party."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from poisson_party.constants import DEFAULT_EXPECTED_TOTAL
from poisson_party.constants import DEFAULT_PARTY_DURATION
from poisson_party.constants import DEFAULT_REFRESH_RATE
from poisson_party.constants import DEFAULT_TIME_SCALE
from poisson_party.constants import MAX_REFRESH_RATE
from poisson_party.constants import MIN_REFRESH_RATE
from poisson_party.estimator import estimate
from poisson_party.exceptions import InvalidInputError
from poisson_party.exceptions import PartyError
from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction
from poisson_party.models import PredictionPoint
from poisson_party.models import format_rate
from poisson_party.state.config import DEFAULT_CONFIG
from poisson_party.state.config import EstimatorConfig
from poisson_party.status import turnout_status
from poisson_party.validation import clamp_elapsed
from poisson_party.validation import format_clock
from poisson_party.validation import parse_clock
from poisson_party.validation import validate_arrived_count
from poisson_party.validation import validate_expected_total
from poisson_party.validation import validate_party_duration
from poisson_party.validation import validate_snapshot

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
    )


def _build_config(args: argparse.Namespace) -> EstimatorConfig:
    if args.blend_window is None:
        return DEFAULT_CONFIG
    return EstimatorConfig(blend_window_minutes=args.blend_window)


def _top_points(prediction: Prediction, top: int) -> list[PredictionPoint]:
    """The ``top`` most likely points, in order of ``additional``."""
    ranked = sorted(prediction.distribution, key=lambda p: p.probability_percent, reverse=True)
    return sorted(ranked[:top], key=lambda p: p.additional)


def _print_prediction(
    console: Console, snapshot: PartySnapshot, prediction: Prediction, top: int
) -> None:
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Statistic", style="bold")
    summary.add_column("Value")
    summary.add_row("Guests here", str(snapshot.arrived_count))
    summary.add_row("Expected total", str(snapshot.expected_total))
    summary.add_row("Elapsed", format_clock(snapshot.elapsed_minutes))
    summary.add_row("Remaining", format_clock(prediction.remaining_minutes))
    summary.add_row("Current rate", format_rate(prediction.current_rate))
    summary.add_row("Expected rate", format_rate(prediction.expected_rate))
    summary.add_row("Blended rate", format_rate(prediction.blended_rate))
    summary.add_row(
        "Predicted more",
        f"{prediction.rounded_additional} (λ = {prediction.predicted_additional:.2f})",
    )
    summary.add_row("Projected total", str(prediction.projected_total(snapshot.arrived_count)))
    console.print(summary)

    status = turnout_status(snapshot, prediction)
    if status is not None:
        console.print(f"\n[{status.style}]{status.message}[/{status.style}]")

    table = Table(title=f"Most likely outcomes (of {len(prediction.distribution)})")
    table.add_column("More guests", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Probability", justify="right")
    for point in _top_points(prediction, top):
        table.add_row(
            str(point.additional),
            str(point.total_if_k_arrive),
            f"{point.probability_percent:.2f}%",
        )
    console.print()
    console.print(table)


def _cmd_predict(args: argparse.Namespace, console: Console) -> int:
    expected_total = validate_expected_total(args.expected)
    arrived_count = validate_arrived_count(args.arrived)
    if args.top < 1:
        raise InvalidInputError("top", args.top, f"--top must be at least 1, got {args.top}")
    duration = float(args.duration)
    elapsed = parse_clock(args.elapsed)
    snapshot = validate_snapshot(
        PartySnapshot(
            expected_total=expected_total,
            party_duration_minutes=duration,
            elapsed_minutes=clamp_elapsed(elapsed, duration),
            arrived_count=arrived_count,
        )
    )
    if elapsed != snapshot.elapsed_minutes:
        logger.debug("Clamped elapsed time %.2f to %.2f", elapsed, snapshot.elapsed_minutes)

    prediction = estimate(snapshot, _build_config(args))
    if args.json:
        console.print_json(json.dumps(prediction.to_dict()))
    else:
        _print_prediction(console, snapshot, prediction, args.top)
    return 0


def _cmd_watch(args: argparse.Namespace, console: Console) -> int:
    from poisson_party.tui import PartyMonitorTUI

    refresh = min(MAX_REFRESH_RATE, max(MIN_REFRESH_RATE, args.refresh))
    tui = PartyMonitorTUI(
        expected_total=validate_expected_total(args.expected),
        party_duration_minutes=validate_party_duration(args.duration),
        refresh_rate=refresh,
        time_scale=args.time_scale,
        config=_build_config(args),
    )
    tui.run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poisson-party",
        description="Predict how many more guests will turn up to your party.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--expected",
        type=int,
        default=DEFAULT_EXPECTED_TOTAL,
        help="Number of guests you expect in total (0-1000)",
    )
    common.add_argument(
        "--duration",
        type=float,
        default=DEFAULT_PARTY_DURATION,
        help="Party duration in minutes",
    )
    common.add_argument(
        "--blend-window",
        type=float,
        default=None,
        help="Minutes over which trust shifts from expected to observed arrivals (default 30)",
    )

    watch = sub.add_parser("watch", parents=[common], help="Live party monitor (TUI)")
    watch.add_argument(
        "--refresh",
        type=float,
        default=DEFAULT_REFRESH_RATE,
        help=f"Refresh interval in seconds ({MIN_REFRESH_RATE}-{MAX_REFRESH_RATE})",
    )
    watch.add_argument(
        "--time-scale",
        type=float,
        default=DEFAULT_TIME_SCALE,
        help="Party minutes per real minute (e.g. 60 to replay an hour per minute)",
    )

    predict = sub.add_parser("predict", parents=[common], help="One-off prediction")
    predict.add_argument(
        "--elapsed",
        default="0",
        help="Time since the party started, as HH:MM:SS, MM:SS or minutes",
    )
    predict.add_argument("--arrived", type=int, default=0, help="Guests who have arrived")
    predict.add_argument("--json", action="store_true", help="Print the full result as JSON")
    predict.add_argument(
        "--top", type=int, default=10, help="Number of most likely outcomes to list"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "watch":
            return _cmd_watch(args, console)
        return _cmd_predict(args, console)
    except PartyError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
