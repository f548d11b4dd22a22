"""CLI entry point for pinkdrunk."""

from pathlib import Path

import click

from . import __version__
from .commands import init, profile, serve, session, thresholds
from .config import get_settings
from .db import get_db_path
from .logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="pinkdrunk")
@click.option("--user", "-u", default=None, help="User id (default: PINKDRUNK_DEFAULT_USER)")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the database (default: PINKDRUNK_DATA_DIR)",
)
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
@click.pass_context
def main(ctx: click.Context, user: str | None, data_dir: Path | None, log_level: str | None):
    """pinkdrunk: know where you are before the next round.

    Estimates how impaired you are from what you drank, when, and who
    you are, and learns from how you say you feel.

    Example usage:

        # Initialize the project
        pinkdrunk init

        # Describe yourself
        pinkdrunk profile setup

        # Track a night out
        pinkdrunk session start
        pinkdrunk session drink --category wine --abv 12 --volume 150
        pinkdrunk session report 4
        pinkdrunk session end
    """
    settings = get_settings()
    setup_logging(
        log_format=settings.log_format,
        log_level=log_level or settings.log_level,
        service_name=settings.service_name,
    )

    ctx.ensure_object(dict)
    ctx.obj["user"] = user or settings.default_user
    ctx.obj["db_path"] = get_db_path(data_dir)


# Register commands
main.add_command(init)
main.add_command(profile)
main.add_command(session)
main.add_command(thresholds)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
