"""Rich TUI for live party arrival prediction."""

from __future__ import annotations

import logging
import math
import sys
import time
from datetime import datetime
from enum import Enum

from rich.console import Console
from rich.console import Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from poisson_party.constants import DEFAULT_EXPECTED_TOTAL
from poisson_party.constants import DEFAULT_PARTY_DURATION
from poisson_party.constants import DEFAULT_REFRESH_RATE
from poisson_party.constants import DEFAULT_TIME_SCALE
from poisson_party.constants import MAX_REFRESH_RATE
from poisson_party.constants import MIN_REFRESH_RATE
from poisson_party.constants import PARTY_DURATION_STEP
from poisson_party.exceptions import PartyError
from poisson_party.models import PartySnapshot
from poisson_party.models import Prediction
from poisson_party.models import PredictionPoint
from poisson_party.models import format_rate
from poisson_party.state.clock import Clock
from poisson_party.state.config import EstimatorConfig
from poisson_party.state.session import PartySession
from poisson_party.state.session import SessionStatus
from poisson_party.status import turnout_status
from poisson_party.validation import format_clock
from poisson_party.validation import parse_clock

logger = logging.getLogger(__name__)

# Party palette
PARTY_VIOLET = "#8b5cf6"
PARTY_GREEN = "#4ade80"
PARTY_BLUE = "#60a5fa"

# Eighth-block glyphs for sub-character bar heights, index = eighths filled
BAR_GLYPHS = " ▁▂▃▄▅▆▇█"

# Keys that record guests: number of guests per press
ADD_GUEST_KEYS = {" ": 1, "+": 1, "a": 1, "A": 5}


class LayoutMode(Enum):
    """Available TUI layout modes."""

    FULL = "full"
    COMPACT = "compact"
    MINIMAL = "minimal"


def bin_distribution(
    points: list[PredictionPoint] | tuple[PredictionPoint, ...], max_bars: int
) -> list[tuple[int, float]]:
    """
    Merge adjacent distribution points so that at most ``max_bars`` remain.

    Args:
        points: Distribution points ordered by ``additional``.
        max_bars: Largest number of bars that fit on screen (at least 1).

    Returns:
        ``(first_additional, summed_percent)`` per bin, in order.
    """
    if not points:
        return []
    bin_size = max(1, math.ceil(len(points) / max(1, max_bars)))
    bins: list[tuple[int, float]] = []
    for start in range(0, len(points), bin_size):
        chunk = points[start : start + bin_size]
        bins.append((chunk[0].additional, sum(p.probability_percent for p in chunk)))
    return bins


def render_bar_chart(
    points: list[PredictionPoint] | tuple[PredictionPoint, ...],
    width: int,
    height: int,
    highlight: int | None = None,
) -> Text:
    """
    Draw a vertical bar chart of a distribution as styled text.

    Args:
        points: Distribution points ordered by ``additional``.
        width: Columns available for the chart.
        height: Rows available for bars (an axis row is added below).
        highlight: ``additional`` value whose bar is drawn in the accent color.

    Returns:
        The chart, ``height`` bar rows plus one axis-label row.
    """
    width = max(1, width)
    height = max(1, height)
    slot = 2 if len(points) * 2 <= width else 1
    bins = bin_distribution(points, width // slot)
    chart = Text()
    if not bins:
        return chart

    bin_size = bins[1][0] - bins[0][0] if len(bins) > 1 else 1
    peak = max(percent for _, percent in bins)
    heights = [
        round(percent / peak * height * 8) if peak > 0 else 0 for _, percent in bins
    ]

    for row in range(height, 0, -1):
        floor_eighths = (row - 1) * 8
        for (first, _), eighths in zip(bins, heights):
            filled = min(8, max(0, eighths - floor_eighths))
            is_highlight = highlight is not None and first <= highlight < first + bin_size
            style = f"bold {PARTY_GREEN}" if is_highlight else PARTY_VIOLET
            chart.append(BAR_GLYPHS[filled], style=style)
            if slot == 2:
                chart.append(" ")
        chart.append("\n")

    # Axis: label the first bin and then every ~10 columns
    axis = [" "] * (len(bins) * slot)
    column = 0
    for index, (first, _) in enumerate(bins):
        label = str(first)
        position = index * slot
        if position >= column and position + len(label) <= len(axis):
            axis[position : position + len(label)] = label
            column = position + len(label) + max(2, 10 - len(label))
    chart.append("".join(axis), style="dim")
    return chart


class PartyMonitorTUI:
    """
    Rich TUI for watching a party fill up.

    Provides a full-screen terminal interface with:
    - Elapsed and remaining party time
    - A turnout mood message
    - Guests present, expected total and predicted further arrivals
    - A bar chart of the probability of each number of further arrivals

    Keyboard Controls:
        q: Quit
        ?: Show help
        s: Start the party (or restart a finished one)
        Space / + / a: Guest arrived (+1)
        A: Five guests arrived (+5)
        -: Undo last arrival
        p: Pause/resume the party clock

        Elapsed time:
        [ / ]: Back / forward 1 minute
        { / }: Back / forward 5 minutes
        t: Type the elapsed time (HH:MM:SS)

        Setup (before the party starts):
        < / >: Expected guests -1 / +1
        , / .: Duration -30 / +30 minutes

        r: Reset the party
        c: Clear everything
        j / k: Refresh faster / slower
        0: Reset refresh rate
        Tab: Cycle layout mode (full/compact/minimal)

    Attributes:
        session: The party being watched.
        refresh_rate: How often to refresh the display (seconds).
    """

    def __init__(
        self,
        expected_total: int = DEFAULT_EXPECTED_TOTAL,
        party_duration_minutes: float = DEFAULT_PARTY_DURATION,
        refresh_rate: float = DEFAULT_REFRESH_RATE,
        time_scale: float = DEFAULT_TIME_SCALE,
        clock: Clock | None = None,
        config: EstimatorConfig | None = None,
        session: PartySession | None = None,
    ) -> None:
        """
        Initialize the TUI.

        Args:
            expected_total: Guests the host expects.
            party_duration_minutes: Planned party length in minutes.
            refresh_rate: Refresh interval in seconds.
            time_scale: Party minutes per wall-clock minute.
            clock: Time source for the session.
            config: Estimator configuration.
            session: An existing session to watch; overrides the party settings.
        """
        self.session = session or PartySession(
            expected_total=expected_total,
            party_duration_minutes=party_duration_minutes,
            clock=clock,
            time_scale=time_scale,
            config=config,
        )
        self.refresh_rate = refresh_rate
        self.console = Console()
        self._running = True
        self._force_refresh = False

        self._show_help: bool = False
        self._layout_mode: LayoutMode = LayoutMode.FULL

        # Elapsed time entry (t)
        self._time_input_mode: bool = False
        self._time_input = ""

        # Last error or notice shown in the footer
        self._notice: str | None = None

    # -------------------------------------------------------------------------
    # Key handling
    # -------------------------------------------------------------------------

    def _handle_key(self, key: str) -> bool:
        """
        Handle a keypress.

        Args:
            key: The key that was pressed.

        Returns:
            True if should quit, False otherwise.
        """
        if self._time_input_mode:
            return self._handle_time_input_key(key)

        if self._show_help:
            # Any key closes help
            self._show_help = False
            self._force_refresh = True
            return False

        if key.lower() == "q":
            return True

        self._notice = None
        try:
            if self._handle_guest_key(key):
                return False
            if self._handle_session_key(key):
                return False
            if self._handle_elapsed_key(key):
                return False
            if self._handle_setup_key(key):
                return False
            if self._handle_display_key(key):
                return False
        except PartyError as e:
            logger.debug("Key %r rejected: %s", key, e)
            self._notice = str(e)
            self._force_refresh = True

        return False

    def _handle_guest_key(self, key: str) -> bool:
        """Handle arrival keys (space, +, a, A, -). Returns True if handled."""
        if key in ADD_GUEST_KEYS:
            self.session.add_guests(ADD_GUEST_KEYS[key])
            self._force_refresh = True
            return True
        if key == "-":
            self.session.remove_guest()
            self._force_refresh = True
            return True
        return False

    def _handle_session_key(self, key: str) -> bool:
        """Handle lifecycle keys (s, p, r, c). Returns True if handled."""
        if key == "s":
            self.session.start()
            self._force_refresh = True
            return True
        if key == "p":
            self.session.toggle_pause()
            self._force_refresh = True
            return True
        if key == "r":
            self.session.reset()
            self._force_refresh = True
            return True
        if key == "c":
            self.session.clear_all()
            self._force_refresh = True
            return True
        return False

    def _handle_elapsed_key(self, key: str) -> bool:
        """Handle elapsed time keys ([, ], {, }, t). Returns True if handled."""
        steps = {"[": -1.0, "]": 1.0, "{": -5.0, "}": 5.0}
        if key in steps:
            self.session.advance(steps[key])
            self._force_refresh = True
            return True
        if key == "t":
            if self.session.is_started:
                self._time_input_mode = True
                self._time_input = ""
            else:
                self._notice = "Start the party before editing the elapsed time"
            self._force_refresh = True
            return True
        return False

    def _handle_setup_key(self, key: str) -> bool:
        """Handle setup keys (<, >, ',', '.'). Returns True if handled."""
        if key == "<":
            self.session.set_expected_total(max(0, self.session.expected_total - 1))
            self._force_refresh = True
            return True
        if key == ">":
            self.session.set_expected_total(self.session.expected_total + 1)
            self._force_refresh = True
            return True
        if key == ",":
            self.session.set_party_duration(
                self.session.party_duration_minutes - PARTY_DURATION_STEP
            )
            self._force_refresh = True
            return True
        if key == ".":
            self.session.set_party_duration(
                self.session.party_duration_minutes + PARTY_DURATION_STEP
            )
            self._force_refresh = True
            return True
        return False

    def _handle_display_key(self, key: str) -> bool:
        """Handle display keys (?, j, k, 0, Tab). Returns True if handled."""
        if key == "?":
            self._show_help = True
            self._force_refresh = True
            return True
        if key == "j":
            self.refresh_rate = max(MIN_REFRESH_RATE, self.refresh_rate - 0.5)
            self._force_refresh = True
            return True
        if key == "k":
            self.refresh_rate = min(MAX_REFRESH_RATE, self.refresh_rate + 0.5)
            self._force_refresh = True
            return True
        if key == "0":
            self.refresh_rate = DEFAULT_REFRESH_RATE
            self._force_refresh = True
            return True
        if key == "\t":
            modes = list(LayoutMode)
            current_idx = modes.index(self._layout_mode)
            self._layout_mode = modes[(current_idx + 1) % len(modes)]
            self._force_refresh = True
            return True
        return False

    def _handle_time_input_key(self, key: str) -> bool:
        """Handle keypress while typing an elapsed time."""
        if key == "\x1b":  # Escape
            self._time_input_mode = False
            self._time_input = ""
        elif key == "\r" or key == "\n":  # Enter
            self._time_input_mode = False
            try:
                self.session.set_elapsed(parse_clock(self._time_input))
            except PartyError as e:
                logger.debug("Elapsed time entry rejected: %s", e)
                self._notice = str(e)
            self._time_input = ""
        elif key == "\x7f" or key == "\b":  # Backspace
            self._time_input = self._time_input[:-1]
        elif key.isdigit() or key in ":.":
            self._time_input += key
        self._force_refresh = True
        return False

    # -------------------------------------------------------------------------
    # Panels
    # -------------------------------------------------------------------------

    def _make_help_panel(self) -> Panel:
        """Create the help overlay panel."""
        help_text = Table(show_header=False, box=None, padding=(0, 2))
        help_text.add_column("Key", style="bold cyan")
        help_text.add_column("Action")

        help_text.add_row("", "[bold]Party[/bold]")
        help_text.add_row("s", "Start the party")
        help_text.add_row("Space / + / a", "Guest arrived (+1)")
        help_text.add_row("A", "Five guests arrived (+5)")
        help_text.add_row("-", "Undo last arrival")
        help_text.add_row("p", "Pause/resume the party clock")
        help_text.add_row("r", "Reset the party")
        help_text.add_row("c", "Clear everything")
        help_text.add_row("", "")
        help_text.add_row("", "[bold]Elapsed Time[/bold]")
        help_text.add_row("[ / ]", "Back/forward 1 minute")
        help_text.add_row("{ / }", "Back/forward 5 minutes")
        help_text.add_row("t", "Type the elapsed time (HH:MM:SS)")
        help_text.add_row("", "")
        help_text.add_row("", "[bold]Setup (before starting)[/bold]")
        help_text.add_row("< / >", "Expected guests -1/+1")
        help_text.add_row(", / .", f"Duration -/+{PARTY_DURATION_STEP:g} minutes")
        help_text.add_row("", "")
        help_text.add_row("", "[bold]Display[/bold]")
        help_text.add_row("j / k", "Refresh faster/slower")
        help_text.add_row("0", f"Reset refresh rate ({DEFAULT_REFRESH_RATE}s)")
        help_text.add_row("Tab", "Cycle layout (full/compact/minimal)")
        help_text.add_row("?", "Toggle this help")
        help_text.add_row("q", "Quit")

        return Panel(
            help_text,
            title="[bold]Keyboard Shortcuts[/bold]",
            subtitle="Press any key to close",
            border_style="cyan",
        )

    def _make_header(self) -> Panel:
        """Create the header panel with party status and clock."""
        status_styles = {
            SessionStatus.NOT_STARTED: "bold white",
            SessionStatus.RUNNING: "bold green",
            SessionStatus.PAUSED: "bold yellow",
            SessionStatus.ENDED: "bold blue",
        }
        session = self.session

        header_text = Text()
        header_text.append("POISSON PARTY", style=f"bold {PARTY_VIOLET}")
        header_text.append(" │ ", style="dim")
        header_text.append("Predictor", style="bold white")
        header_text.append("  │  Status: ")
        header_text.append(session.status.value.upper(), style=status_styles[session.status])

        if session.is_started:
            header_text.append("  │  Elapsed: ")
            header_text.append(format_clock(session.elapsed_minutes), style=PARTY_VIOLET)
            if session.remaining_minutes > 0:
                header_text.append("  │  Remaining: ")
                header_text.append(format_clock(session.remaining_minutes), style=PARTY_VIOLET)
        else:
            header_text.append(
                f"  │  Expecting {session.expected_total} guests over "
                f"{session.party_duration_minutes:g} minutes",
                style="dim",
            )

        return Panel(header_text, style="white on grey23", border_style=PARTY_VIOLET, height=3)

    def _make_status_panel(self, snapshot: PartySnapshot, prediction: Prediction) -> Panel:
        """Create the turnout mood panel (or start hint before the party)."""
        status = turnout_status(snapshot, prediction, started=self.session.is_started)
        if status is None:
            text = Text("Set up the party, then press ", style="dim")
            text.append("s", style="bold cyan")
            text.append(" to start", style="dim")
        else:
            text = Text(status.message, style=f"bold {status.style}")
        return Panel(text, border_style=PARTY_VIOLET, padding=(0, 1))

    def _make_stat_box(self, label: str, value: str, subtext: str, accent: str) -> Panel:
        """Create one statistic box."""
        body = Text(justify="center")
        body.append(f"{value}\n", style=f"bold {accent}")
        body.append(subtext, style="dim")
        return Panel(body, title=label, border_style=accent)

    def _make_stats_panel(self, prediction: Prediction) -> Group:
        """Create the column of statistic boxes."""
        session = self.session
        return Group(
            self._make_stat_box(
                "Current Guests", str(session.arrived_count), "People here now", PARTY_GREEN
            ),
            self._make_stat_box(
                "Expected Total", str(session.expected_total), "Original estimate", PARTY_BLUE
            ),
            self._make_stat_box(
                "Predicted More",
                str(prediction.rounded_additional),
                format_rate(prediction.current_rate),
                PARTY_VIOLET,
            ),
        )

    def _chart_size(self) -> tuple[int, int]:
        """Width and bar height available to the chart in the current layout."""
        width = int(self.console.width)
        height = int(self.console.height)
        if self._layout_mode == LayoutMode.FULL:
            chart_width = width * 2 // 3 - 4
            chart_height = height - 3 - 3 - 3 - 4
        else:
            chart_width = width - 4
            chart_height = height - 3 - 3 - 4
        return max(10, chart_width), max(3, chart_height)

    def _make_chart_panel(self, prediction: Prediction) -> Panel:
        """Create the bar chart of further-arrival probabilities."""
        width, height = self._chart_size()
        chart = render_bar_chart(
            prediction.distribution,
            width=width,
            height=height,
            highlight=prediction.most_likely_additional,
        )
        peak = max((p.probability_percent for p in prediction.distribution), default=0.0)
        subtitle = (
            f"most likely +{prediction.most_likely_additional} ({peak:.1f}%)"
            f"  │  λ = {prediction.predicted_additional:.1f}"
        )
        return Panel(
            chart,
            title="Predicted Additional Arrivals",
            subtitle=subtitle,
            border_style=PARTY_VIOLET,
        )

    def _make_footer(self) -> Panel:
        """Create the footer with settings and key bindings."""
        footer = Text()
        now = datetime.now().strftime("%H:%M:%S")

        footer.append(f"Updated: {now}", style="dim")
        footer.append("  │  ", style="dim")
        footer.append(f"Refresh: {self.refresh_rate}s", style="dim")
        footer.append("  │  ", style="dim")
        footer.append(f"Speed: {self.session.time_scale:g}x", style="dim")
        footer.append("  │  ", style="dim")
        footer.append(f"Layout: {self._layout_mode.value}", style="dim")

        if self._time_input_mode:
            footer.append("  │  ", style="dim")
            footer.append(f"Elapsed: {self._time_input}_", style="bold yellow")
        elif self._notice:
            footer.append("  │  ", style="dim")
            footer.append(self._notice, style="bold red")

        footer.append("  │  ")
        footer.append("?", style="bold")
        footer.append("=help", style="dim")

        return Panel(footer, border_style=PARTY_VIOLET, padding=(0, 1))

    def _make_layout(self, snapshot: PartySnapshot, prediction: Prediction) -> Layout:
        """Create the complete TUI layout."""
        layout = Layout()

        if self._show_help:
            layout.split_column(
                Layout(name="header", size=3),
                Layout(name="help"),
                Layout(name="footer", size=3),
            )
            layout["header"].update(self._make_header())
            layout["help"].update(self._make_help_panel())
            layout["footer"].update(self._make_footer())
            return layout

        if self._layout_mode == LayoutMode.MINIMAL:
            # Minimal: header, stats, footer
            layout.split_column(
                Layout(name="header", size=3),
                Layout(name="stats"),
                Layout(name="footer", size=3),
            )
            layout["stats"].update(self._make_stats_panel(prediction))

        elif self._layout_mode == LayoutMode.COMPACT:
            # Compact: header, chart, footer
            layout.split_column(
                Layout(name="header", size=3),
                Layout(name="chart"),
                Layout(name="footer", size=3),
            )
            layout["chart"].update(self._make_chart_panel(prediction))

        else:  # FULL
            layout.split_column(
                Layout(name="header", size=3),
                Layout(name="status", size=3),
                Layout(name="body"),
                Layout(name="footer", size=3),
            )
            layout["body"].split_row(
                Layout(name="chart", ratio=2),
                Layout(name="stats", ratio=1),
            )
            layout["status"].update(self._make_status_panel(snapshot, prediction))
            layout["chart"].update(self._make_chart_panel(prediction))
            layout["stats"].update(self._make_stats_panel(prediction))

        layout["header"].update(self._make_header())
        layout["footer"].update(self._make_footer())
        return layout

    def _poll_state(self) -> tuple[PartySnapshot, Prediction]:
        """Advance the party clock and recompute the prediction."""
        self.session.tick()
        snapshot = self.session.snapshot()
        return snapshot, self.session.predict()

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    def run(self) -> None:
        """
        Run the TUI main loop.

        Continuously refreshes the display until the user presses 'q'.
        """
        if not self.console.is_terminal:
            self.console.print(
                "[yellow]Warning:[/yellow] Not running in an interactive terminal. "
                "Use 'poisson-party predict' for non-interactive output.",
            )
            return

        try:
            import select
            import termios
            import tty
        except ImportError:
            # termios/tty not available (Windows without WSL)
            self._run_simple()
            return

        # Save terminal settings and switch to cbreak mode for single-key input
        fd = sys.stdin.fileno()
        old_settings = termios.tcgetattr(fd)

        try:
            tty.setcbreak(fd)

            snapshot, prediction = self._poll_state()

            with Live(
                self._make_layout(snapshot, prediction),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                last_update = time.time()

                while self._running:
                    # Check for keyboard input (non-blocking)
                    if sys.stdin in select.select([sys.stdin], [], [], 0.1)[0]:
                        key = sys.stdin.read(1)

                        # Swallow escape sequences (arrow keys etc.), keep bare Esc
                        if key == "\x1b":
                            if sys.stdin in select.select([sys.stdin], [], [], 0.05)[0]:
                                sys.stdin.read(2)
                                continue

                        if self._handle_key(key):
                            break

                    now = time.time()
                    should_refresh = self._force_refresh or now - last_update >= self.refresh_rate

                    if should_refresh:
                        snapshot, prediction = self._poll_state()
                        live.update(self._make_layout(snapshot, prediction))
                        last_update = now
                        self._force_refresh = False

        except KeyboardInterrupt:
            pass  # Clean exit on Ctrl+C
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

    def _run_simple(self) -> None:
        """
        Simple run loop for environments without select().

        Starts the party and redraws until it ends; arrivals cannot be
        recorded in this mode.
        """
        self.console.print("[yellow]Running in simple mode (no keyboard input)[/yellow]")
        self.console.print("Press Ctrl+C to exit\n")

        if not self.session.is_started:
            self.session.start()

        try:
            while self._running:
                snapshot, prediction = self._poll_state()

                self.console.clear()
                self.console.print(self._make_layout(snapshot, prediction))

                if self.session.status is SessionStatus.ENDED:
                    self.console.print("\n[bold]Party's over.[/bold]")
                    break

                time.sleep(self.refresh_rate)

        except KeyboardInterrupt:
            pass
