"""Drinking session commands."""

from datetime import datetime, timedelta

import click

from ..models.session import CareEventType, DrinkCategory, EndReason
from ..services import SessionService
from ..services.sessions import SessionView
from ..validation import CareEventPayload, DrinkPayload, ReportPayload, parse_payload
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_prediction,
    echo_success,
    ensure_initialized,
    format_table,
    get_db_file,
    get_user,
)


def _service(ctx: click.Context) -> SessionService:
    return SessionService(get_db_file(ctx))


async def _require_active(ctx: click.Context, service: SessionService) -> SessionView:
    view = await service.current(get_user(ctx))
    if view is None:
        echo_error("No active session. Run 'pinkdrunk session start' first.")
        ctx.exit(1)
    return view


def _echo_view(view: SessionView) -> None:
    session = view.session
    click.echo("\n" + click.style(f"Session #{session.id}", bold=True))
    click.echo("=" * 40)
    click.echo(f"  Started: {session.started_at.strftime('%Y-%m-%d %H:%M')}")
    click.echo(f"  Drinks:  {len(session.drinks)}")
    if session.reported_level is not None:
        click.echo(f"  Last report: level {session.reported_level:g}")
    click.echo()
    echo_prediction(view.prediction)


@click.group()
def session():
    """Track a drinking session.

    Log drinks and care events as you go; every change recomputes your
    estimated level and the advice that goes with it.
    """
    pass


@session.command("start")
@click.pass_context
@async_command
async def start(ctx: click.Context):
    """Start a session (or resume the active one)."""
    ensure_initialized(ctx)

    view = await _service(ctx).start_session(get_user(ctx))
    echo_success(f"Session #{view.session.id} is running")
    _echo_view(view)


@session.command("status")
@click.pass_context
@async_command
async def status(ctx: click.Context):
    """Show the active session and current estimate."""
    ensure_initialized(ctx)

    view = await _service(ctx).current(get_user(ctx))
    if view is None:
        echo_info("No active session.")
        return

    _echo_view(view)

    if view.session.drinks:
        click.echo()
        rows = [
            [
                str(d.id),
                d.consumed_at.strftime("%H:%M"),
                d.category.value,
                d.label or "-",
                f"{d.abv_percent:g}%",
                f"{d.volume_ml:g} ml",
            ]
            for d in view.session.drinks
        ]
        click.echo(format_table(["ID", "Time", "Category", "Label", "ABV", "Volume"], rows))


def _drink_options(f):
    f = click.option("--ingestion-mins", type=int, default=10, show_default=True, help="Minutes taken to finish it")(f)
    f = click.option("--minutes-ago", type=int, default=0, help="Started this many minutes ago")(f)
    f = click.option("--label", default=None, help="Free-text name, e.g. 'IPA'")(f)
    f = click.option("--volume", "volume_ml", type=float, required=True, help="Volume in ml")(f)
    f = click.option("--abv", "abv_percent", type=float, required=True, help="Alcohol by volume, percent")(f)
    f = click.option(
        "--category",
        type=click.Choice([c.value for c in DrinkCategory]),
        default=DrinkCategory.OTHER.value,
        show_default=True,
    )(f)
    return f


def _drink_payload(
    category: str,
    abv_percent: float,
    volume_ml: float,
    label: str | None,
    minutes_ago: int,
    ingestion_mins: int,
) -> DrinkPayload:
    consumed_at = datetime.now() - timedelta(minutes=minutes_ago) if minutes_ago else None
    return parse_payload(
        DrinkPayload,
        {
            "category": category,
            "abv_percent": abv_percent,
            "volume_ml": volume_ml,
            "label": label,
            "consumed_at": consumed_at,
            "ingestion_mins": ingestion_mins,
        },
    )


@session.command("drink")
@_drink_options
@click.pass_context
@async_command
async def drink(ctx: click.Context, **options):
    """Log a drink in the active session.

    Example:

        pinkdrunk session drink --category beer --abv 5 --volume 355
    """
    ensure_initialized(ctx)

    payload = _drink_payload(**options)
    service = _service(ctx)
    active = await _require_active(ctx, service)

    view = await service.log_drink(get_user(ctx), active.session.id, payload)
    echo_success("Drink logged")
    echo_prediction(view.prediction)


@session.command("edit-drink")
@click.argument("drink_id", type=int)
@_drink_options
@click.pass_context
@async_command
async def edit_drink(ctx: click.Context, drink_id: int, **options):
    """Correct a drink already logged in the active session."""
    ensure_initialized(ctx)

    payload = _drink_payload(**options)
    service = _service(ctx)
    active = await _require_active(ctx, service)

    view = await service.edit_drink(get_user(ctx), active.session.id, drink_id, payload)
    echo_success(f"Drink #{drink_id} updated")
    echo_prediction(view.prediction)


@session.command("care")
@click.argument("event_type", type=click.Choice([t.value for t in CareEventType]))
@click.option("--volume", "volume_ml", type=float, default=None, help="Volume in ml (water)")
@click.pass_context
@async_command
async def care(ctx: click.Context, event_type: str, volume_ml: float | None):
    """Log water, a snack or a meal."""
    ensure_initialized(ctx)

    payload = parse_payload(CareEventPayload, {"type": event_type, "volume_ml": volume_ml})
    service = _service(ctx)
    active = await _require_active(ctx, service)

    view = await service.add_care_event(get_user(ctx), active.session.id, payload)
    echo_success(f"Logged {event_type}")
    echo_prediction(view.prediction)


@session.command("report")
@click.argument("level", type=float)
@click.pass_context
@async_command
async def report(ctx: click.Context, level: float):
    """Report how drunk you feel (0-10).

    The report overrides the estimate for a while and teaches the
    threshold ladder how you respond to alcohol.
    """
    ensure_initialized(ctx)

    payload = parse_payload(ReportPayload, {"level": level})
    service = _service(ctx)
    active = await _require_active(ctx, service)

    view = await service.report_level(get_user(ctx), active.session.id, payload.level)
    echo_success(f"Reported level {payload.level:g}")
    echo_prediction(view.prediction)


@session.command("end")
@click.option(
    "--reason",
    type=click.Choice([r.value for r in EndReason]),
    default=EndReason.USER_END.value,
    show_default=True,
)
@click.pass_context
@async_command
async def end(ctx: click.Context, reason: str):
    """End the active session."""
    ensure_initialized(ctx)

    service = _service(ctx)
    active = await _require_active(ctx, service)

    ended = await service.end_session(get_user(ctx), active.session.id, EndReason(reason))
    echo_success(f"Session #{ended.id} ended")


@session.command("history")
@click.option("--limit", "-n", default=10, type=int, help="Number of sessions to show")
@click.pass_context
@async_command
async def history(ctx: click.Context, limit: int):
    """List ended sessions, newest first."""
    ensure_initialized(ctx)

    summaries = await _service(ctx).history(get_user(ctx), limit=limit)
    if not summaries:
        echo_info("No finished sessions yet.")
        return

    rows = []
    for summary in summaries:
        s = summary.session
        last = summary.latest_prediction
        rows.append(
            [
                str(s.id),
                s.started_at.strftime("%Y-%m-%d %H:%M"),
                s.ended_at.strftime("%H:%M") if s.ended_at else "-",
                str(len(s.drinks)),
                f"{last.level_estimate:.1f}" if last else "-",
                f"{s.reported_level:g}" if s.reported_level is not None else "-",
                s.ended_reason.value if s.ended_reason else "-",
            ]
        )

    click.echo(format_table(["ID", "Started", "Ended", "Drinks", "Est.", "Reported", "Reason"], rows))
