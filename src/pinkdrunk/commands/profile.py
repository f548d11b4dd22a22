"""Profile commands."""

import click

from ..clients.manual.client import ManualInputClient
from ..errors import ProfileNotFoundError
from ..models.profile import GenderIdentity
from ..models.prediction import ThresholdSnapshot
from ..services import ProfileService
from ..validation import ProfilePayload, parse_payload
from .base import (
    async_command,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_db_file,
    get_user,
)


def threshold_rows(thresholds: tuple[ThresholdSnapshot, ...]) -> list[list[str]]:
    """Table rows for a threshold ladder."""
    return [[str(t.level), f"{t.grams:.1f}", f"{t.confidence:.2f}"] for t in thresholds]


@click.group()
def profile():
    """Manage your drinker profile.

    Height, weight, age and gender drive the body-water estimate;
    tolerance and metabolism tune how fast you feel it and burn it off.
    """
    pass


@profile.command("show")
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show the stored profile."""
    ensure_initialized(ctx)

    service = ProfileService(get_db_file(ctx))
    user = await service.get_required_profile(get_user(ctx))

    click.echo("\n" + click.style("Profile", bold=True))
    click.echo("=" * 40)
    click.echo(user.get_summary())


@profile.command("set")
@click.option("--name", default="", help="Display name")
@click.option("--height", "height_cm", type=float, required=True, help="Height in cm")
@click.option("--weight", "weight_kg", type=float, required=True, help="Weight in kg")
@click.option("--age", type=int, required=True, help="Age in years")
@click.option(
    "--gender",
    "gender_identity",
    type=click.Choice([g.value for g in GenderIdentity]),
    required=True,
    help="Gender identity",
)
@click.option("--gender-label", "gender_custom_label", default="", help="Self-described gender")
@click.option("--tolerance", "tolerance_score", type=int, default=5, show_default=True, help="Tolerance, 1-10")
@click.option("--metabolism", "metabolism_score", type=int, default=5, show_default=True, help="Metabolism, 1-10")
@click.option("--target", "target_level", type=int, default=5, show_default=True, help="Target level, 0-10")
@click.option("--medications", is_flag=True, help="Taking medication that interacts with alcohol")
@click.pass_context
@async_command
async def set_profile(ctx: click.Context, **fields):
    """Create or replace your profile from options.

    Example:

        pinkdrunk profile set --height 170 --weight 65 --age 28 --gender female
    """
    ensure_initialized(ctx)

    payload = parse_payload(ProfilePayload, fields)
    await _save(ctx, payload)


@profile.command("setup")
@click.pass_context
@async_command
async def setup(ctx: click.Context):
    """Create or update your profile interactively."""
    ensure_initialized(ctx)

    service = ProfileService(get_db_file(ctx))
    try:
        existing = await service.get_required_profile(get_user(ctx))
    except ProfileNotFoundError:
        existing = None

    client = ManualInputClient()
    payload = await client.collect_profile(existing)
    await _save(ctx, payload, service)


async def _save(
    ctx: click.Context,
    payload: ProfilePayload,
    service: ProfileService | None = None,
) -> None:
    service = service or ProfileService(get_db_file(ctx))
    saved, thresholds = await service.save_profile(get_user(ctx), payload)

    echo_success(f"Profile saved for '{saved.user_id}'")
    click.echo()
    click.echo(saved.get_summary())
    echo_info("Starting threshold ladder (grams absorbed per level):")
    click.echo(format_table(["Level", "Grams", "Confidence"], threshold_rows(thresholds)))
