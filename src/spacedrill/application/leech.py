"""Leech detection: items the learner keeps failing."""

from collections import Counter
from collections.abc import Iterable
from datetime import date

from spacedrill.domain.constants import DEFAULT_EASE_FACTOR, DEFAULT_LEECH_THRESHOLD
from spacedrill.domain.models import ItemState, Rating, RatingEvent


def count_failures(events: Iterable[RatingEvent]) -> Counter[str]:
    return Counter(e.item_id for e in events if e.rating == Rating.AGAIN)


def find_leeches(
    events: Iterable[RatingEvent], threshold: int = DEFAULT_LEECH_THRESHOLD
) -> list[tuple[str, int]]:
    """
    Items rated Again at least `threshold` times.

    Returns:
        (item_id, failure_count) pairs, most failures first.
    """
    failures = count_failures(events)
    leeches = [(item_id, n) for item_id, n in failures.items() if n >= threshold]
    leeches.sort(key=lambda pair: (-pair[1], pair[0]))
    return leeches


def reset_leech_state(today: date) -> ItemState:
    """Scheduling state that starts a leech over as a new item due today."""
    return ItemState(ease_factor=DEFAULT_EASE_FACTOR, interval_days=0, next_review_date=today)
