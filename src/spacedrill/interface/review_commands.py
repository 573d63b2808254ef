"""Interactive review session command."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Annotated

import typer

from spacedrill.application.factory import get_item_store
from spacedrill.application.queue_builder import estimate_minutes
from spacedrill.application.review_service import ReviewService
from spacedrill.application.session import ReviewSessionEngine, SessionSummary, format_elapsed
from spacedrill.domain.models import Rating
from spacedrill.interface._common import _as_date, _resolve_with_overrides, _run

logger = logging.getLogger(__name__)

Prompt = Callable[[str], Awaitable[str]]

KEY_HELP = "1=Again 2=Hard 3=Good 4=Easy  [enter]=flip  u=undo  r=redo  d=delete  q=quit"


async def _stdin_prompt(text: str) -> str:
    # Blocking input runs in a thread so queued writes keep draining meanwhile.
    return await asyncio.to_thread(typer.prompt, text, default="", show_default=False)


def _render(engine: ReviewSessionEngine) -> None:
    st = engine.state
    item = engine.current_item
    side = "BACK" if st.flipped else "FRONT"
    typer.echo(
        f"\n[{st.index + 1}/{len(st.queue)}] {item.id}  ({side})"
        f"  ease={item.ease_factor}  interval={item.interval_days}d"
        f"  {format_elapsed(engine.elapsed_seconds)}"
    )
    if st.streak >= 3:
        typer.secho(f"Streak: {st.streak}", fg="yellow")


async def run_review_loop(engine: ReviewSessionEngine, prompt: Prompt = _stdin_prompt) -> bool:
    """
    Drive an already started engine from user keystrokes until it completes.

    Returns:
        True if the queue was exhausted, False if the user quit early.
    """
    while engine.is_active:
        _render(engine)
        key = (await prompt(KEY_HELP)).strip().lower()

        if key in ("", "f", " "):
            engine.flip()
        elif key in ("1", "2", "3", "4"):
            if not engine.state.flipped:
                typer.secho("Reveal the answer first.", fg="yellow")
                continue
            engine.rate(Rating(int(key)))
        elif key == "u":
            if engine.undo() is None:
                typer.secho("Nothing to undo.", fg="yellow")
        elif key == "r":
            if engine.redo() is None:
                typer.secho("Nothing to redo.", fg="yellow")
        elif key == "d":
            confirmed = (await prompt("Delete this item? This cannot be undone [y/N]")).strip()
            if confirmed.lower() == "y":
                engine.delete_current()
        elif key == "q":
            return False
        else:
            typer.secho(f"Unknown key '{key}'.", fg="yellow")

    return True


def _print_summary(summary: SessionSummary, due_tomorrow: int, finished: bool = True) -> None:
    counts = summary.rating_counts
    typer.secho("\nSession complete" if finished else "\nSession ended early", fg="green", bold=True)
    typer.echo(
        f"Again: {counts[Rating.AGAIN]}  Hard: {counts[Rating.HARD]}"
        f"  Good: {counts[Rating.GOOD]}  Easy: {counts[Rating.EASY]}"
    )
    typer.echo(f"Retention: {summary.retention_pct}%")
    typer.echo(f"Time: {format_elapsed(summary.elapsed_seconds)}")
    typer.echo(f"Tomorrow: {due_tomorrow} item{'s' if due_tomorrow != 1 else ''} due")


def review(
    ids: Annotated[
        str | None,
        typer.Option(help="Comma-separated item ids for a targeted session (ignores due dates)."),
    ] = None,
    as_of: Annotated[
        datetime | None,
        typer.Option("--as-of", formats=["%Y-%m-%d"], help="Review date (default: today)."),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--lenient", help="Reject invalid keystrokes loudly."),
    ] = None,
):
    """[bold green]Review[/bold green] due items (or a chosen subset) interactively."""
    config = _resolve_with_overrides(strict_session=strict)
    today = _as_date(as_of)

    async def run():
        store = get_item_store(config)
        service = ReviewService(store)

        if ids:
            queue = await service.practice_queue(i.strip() for i in ids.split(",") if i.strip())
        else:
            queue = await service.due_queue(today)

        if not queue:
            typer.secho("Nothing to review.", fg="yellow")
            return

        typer.echo(f"{len(queue)} items, about {estimate_minutes(len(queue))} min")

        def report(exc, job):
            logger.error(f"Could not save {job}: {exc}")
            typer.secho(f"Could not save {job.item_id}: {exc}", fg="red", err=True)

        engine = ReviewSessionEngine(
            store, on_error=report, today=lambda: today, strict=config.strict_session
        )
        engine.start(queue)
        finished = await run_review_loop(engine)

        summary = engine.end()
        await engine.outbox.flush()
        due_tomorrow = await service.due_count(today + timedelta(days=1))
        _print_summary(summary, due_tomorrow, finished)

    _run(run())
