"""Initialize project command."""

import click

from ..db import init_db
from .base import async_command, echo_info, echo_success, get_db_file


@click.command()
@click.pass_context
@async_command
async def init(ctx: click.Context):
    """Initialize the pinkdrunk database.

    Creates the data directory and the SQLite schema. Safe to run again;
    existing data is kept and older databases are migrated.
    """
    db_path = get_db_file(ctx)

    echo_info(f"Initializing pinkdrunk in {db_path.parent}")
    db_path.parent.mkdir(parents=True, exist_ok=True)

    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("pinkdrunk is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Tell us about yourself:")
    click.echo("     pinkdrunk profile setup          # Interactive questionnaire")
    click.echo()
    click.echo("  2. Start a night out:")
    click.echo("     pinkdrunk session start")
    click.echo("     pinkdrunk session drink --category beer --abv 5 --volume 355")
