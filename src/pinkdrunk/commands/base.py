"""Shared CLI utilities."""

import asyncio
from functools import wraps
from pathlib import Path

import click

from ..errors import PinkDrunkError
from ..models.prediction import RecommendedAction, SessionPrediction

ACTION_COLORS = {
    RecommendedAction.KEEP: "green",
    RecommendedAction.HYDRATE: "cyan",
    RecommendedAction.SLOW: "yellow",
    RecommendedAction.STOP: "red",
    RecommendedAction.ABORT: "magenta",
}


def async_command(f):
    """Decorator to run async Click commands.

    Domain errors are reported and turned into exit code 1.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except PinkDrunkError as e:
            echo_error(str(e))
            click.get_current_context().exit(1)

    return wrapper


def get_db_file(ctx: click.Context) -> Path:
    """Database path chosen by the root command."""
    return ctx.obj["db_path"]


def get_user(ctx: click.Context) -> str:
    """User id chosen by the root command."""
    return ctx.obj["user"]


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_file(ctx)
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'pinkdrunk init' first."
        )
        ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def echo_prediction(prediction: SessionPrediction) -> None:
    """Print a prediction block."""
    action = prediction.recommended_action
    click.echo(f"  Level:            {prediction.level_estimate:.2f} (target {prediction.target_level:g})")
    click.echo(f"  BAC:              {prediction.bac:.3f} (adjusted {prediction.adjusted_bac:.3f})")
    click.echo(f"  Absorbed alcohol: {prediction.absorbed_alcohol_grams:.1f} g")
    click.echo(f"  Drinks to target: {prediction.drinks_to_target}")
    click.echo(f"  Minutes to target: {prediction.minutes_to_target}")
    click.echo(
        "  Advice:           "
        + click.style(action.value.upper(), fg=ACTION_COLORS[action], bold=True)
    )


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = []

    header_line = ""
    for i, h in enumerate(headers):
        header_line += h.ljust(widths[i] + padding)
    lines.append(header_line)

    sep_line = ""
    for w in widths:
        sep_line += "-" * w + " " * padding
    lines.append(sep_line)

    for row in rows:
        row_line = ""
        for i, cell in enumerate(row):
            row_line += str(cell).ljust(widths[i] + padding)
        lines.append(row_line)

    return "\n".join(lines)
