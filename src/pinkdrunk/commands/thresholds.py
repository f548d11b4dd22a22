"""Threshold ladder commands."""

import click

from ..services import ProfileService
from .base import async_command, ensure_initialized, format_table, get_db_file, get_user
from .profile import threshold_rows


@click.group()
def thresholds():
    """Inspect your calibrated impairment thresholds."""
    pass


@thresholds.command("show")
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show grams absorbed per level and how sure we are of each."""
    ensure_initialized(ctx)

    service = ProfileService(get_db_file(ctx))
    user_id = get_user(ctx)
    profile = await service.get_required_profile(user_id)
    ladder = await service.thresholds.ensure_thresholds(user_id, profile)

    click.echo("\n" + click.style(f"Thresholds for {profile.name or user_id}", bold=True))
    click.echo(format_table(["Level", "Grams", "Confidence"], threshold_rows(ladder)))
