"""spacedrill CLI: root commands and subgroup registration."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from ulid import ULID

from spacedrill.application.config import resolve_config
from spacedrill.application.factory import get_item_store
from spacedrill.application.queue_builder import estimate_minutes
from spacedrill.application.review_service import ReviewService
from spacedrill.application.scheduler import apply_rating
from spacedrill.application.topic_schedule import TopicSchedule
from spacedrill.domain.constants import DEFAULT_EASE_FACTOR
from spacedrill.domain.errors import InvalidRating
from spacedrill.domain.models import Item, Rating
from spacedrill.interface._common import _as_date, _resolve_with_overrides, _run
from spacedrill.interface.review_commands import review

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="spacedrill: spaced-repetition scheduling and review sessions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

app.command("review")(review)

config_app = typer.Typer(help="Manage spacedrill configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for spacedrill."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.getLogger("spacedrill").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    as_of: Annotated[
        datetime | None,
        typer.Option("--as-of", formats=["%Y-%m-%d"], help="Review date (default: today)."),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List items due for review, in session order."""
    config = _resolve_with_overrides()
    day = _as_date(as_of)

    async def run():
        return await ReviewService(get_item_store(config)).due_queue(day)

    queue = _run(run())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": item.id,
                        "intervalDays": item.interval_days,
                        "nextReviewDate": item.next_review_date.isoformat(),
                        "new": item.is_new,
                    }
                    for item in queue
                ],
                indent=2,
            )
        )
        return

    if not queue:
        typer.secho("Nothing due.", fg="green")
        return

    typer.echo(f"{len(queue)} due (about {estimate_minutes(len(queue))} min)")
    for item in queue:
        tag = "new" if item.is_new else f"{item.interval_days}d"
        typer.echo(f"  {item.id}  {item.next_review_date.isoformat()}  {tag}")


@app.command()
def add(
    item_id: Annotated[
        str | None, typer.Option("--id", help="Item id (default: a fresh ULID).")
    ] = None,
    due_on: Annotated[
        datetime | None,
        typer.Option("--due", formats=["%Y-%m-%d"], help="First review date (default: today)."),
    ] = None,
):
    """Add a new item to the deck."""
    config = _resolve_with_overrides()
    item = Item(id=item_id or str(ULID()), next_review_date=_as_date(due_on))

    async def run():
        return await get_item_store(config).add_item(item)

    saved = _run(run())
    typer.secho(f"Added {saved.id} (due {saved.next_review_date.isoformat()})", fg="green")


@app.command()
def preview(
    rating: Annotated[int, typer.Argument(help="1=Again 2=Hard 3=Good 4=Easy.")],
    ease: Annotated[float, typer.Option(help="Current ease factor.")] = DEFAULT_EASE_FACTOR,
    interval: Annotated[int, typer.Option(help="Current interval in days.")] = 0,
    today: Annotated[
        datetime | None,
        typer.Option("--today", formats=["%Y-%m-%d"], help="Rating date (default: today)."),
    ] = None,
):
    """Show what a rating would do to an item's schedule."""
    day = _as_date(today)
    state = Item(id="preview", ease_factor=ease, interval_days=interval, next_review_date=day)
    try:
        result = apply_rating(state, rating, day)
    except InvalidRating as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(2) from e

    typer.echo(
        f"{Rating(rating).name}: ease {result.ease_factor}, interval {result.interval_days}d, "
        f"next review {result.next_review_date.isoformat()}"
    )


@app.command()
def project(
    days: Annotated[int | None, typer.Option(help="Days to project.")] = None,
    from_date: Annotated[
        datetime | None,
        typer.Option("--from", formats=["%Y-%m-%d"], help="First projected day (default: today)."),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Forecast mean retention if nothing else is reviewed."""
    config = _resolve_with_overrides()
    horizon = config.projection_days if days is None else days
    if horizon < 0:
        typer.secho("--days must be >= 0", fg="red", err=True)
        raise typer.Exit(2)

    async def run():
        return await ReviewService(get_item_store(config)).project_retention(
            _as_date(from_date), horizon
        )

    points = _run(run())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {"date": p.date.isoformat(), "retentionPct": round(p.retention_pct, 2)}
                    for p in points
                ],
                indent=2,
            )
        )
        return

    for p in points:
        bar = "#" * int(p.retention_pct / 5)
        typer.echo(f"{p.date.isoformat()}  {p.retention_pct:5.1f}%  {bar}")


@app.command()
def leeches(
    threshold: Annotated[int | None, typer.Option(help="Again ratings that make a leech.")] = None,
    reset: Annotated[
        str | None, typer.Option(help="Reset this leech to a new item due today, clearing its history.")
    ] = None,
):
    """List items failed repeatedly, or reset one."""
    config = _resolve_with_overrides(leech_threshold=threshold)

    async def run():
        service = ReviewService(get_item_store(config))
        if reset:
            await service.reset_leech(reset, _as_date(None))
            return None
        return await service.leeches(config.leech_threshold)

    result = _run(run())
    if reset:
        typer.secho(f"Reset {reset}.", fg="green")
        return
    if not result:
        typer.secho("No leeches.", fg="green")
        return
    for item, failures in result:
        typer.echo(f"  {item.id}  failed {failures}x  ease={item.ease_factor}")


@app.command()
def topic(
    completed_on: Annotated[
        datetime | None,
        typer.Argument(formats=["%Y-%m-%d"], help="Completion date (default: today)."),
    ] = None,
):
    """Print the fixed revision dates for a topic completed on a day."""
    schedule = TopicSchedule.complete(_as_date(completed_on))
    for n, when in enumerate(schedule.revision_dates, start=1):
        typer.echo(f"Revision {n}: {when.isoformat()}")


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP API server."""
    import uvicorn

    uvicorn.run("spacedrill.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
