"""
Queue builder for review sessions.

Builds ordered review queues by:
1. Filtering to non-suspended items due on or before a date (or to explicit ids)
2. Placing due items (interval > 0) before new items (interval == 0)
3. Ordering each group by next review date, oldest first
"""

import logging
from collections.abc import Iterable
from datetime import date

from spacedrill.application.scheduler import round_half_up
from spacedrill.domain.constants import MINUTES_PER_ITEM
from spacedrill.domain.models import Item

logger = logging.getLogger(__name__)


def queue_sort_key(item: Item) -> tuple[bool, date, str]:
    """Due before new, then oldest due date, then id for determinism."""
    return (item.is_new, item.next_review_date, item.id)


def is_due(item: Item, as_of: date) -> bool:
    return not item.suspended and item.next_review_date <= as_of


def select_due(items: Iterable[Item], as_of: date) -> list[Item]:
    """
    Select and order the items to review on a given day.

    Args:
        items: Candidate items (typically everything the store returned).
        as_of: Review date; items due on or before it are included.

    Returns:
        Items ordered so every overdue/due item precedes every new item.
    """
    due = [item for item in items if is_due(item, as_of)]
    due.sort(key=queue_sort_key)
    logger.debug(f"Selected {len(due)} due items as of {as_of.isoformat()}")
    return due


def select_by_ids(items: Iterable[Item], ids: Iterable[str]) -> list[Item]:
    """
    Select an explicit subset for targeted practice.

    No due-date or suspension filtering is applied; ordering matches select_due.
    """
    wanted = set(ids)
    chosen = [item for item in items if item.id in wanted]
    chosen.sort(key=queue_sort_key)

    missing = wanted - {item.id for item in chosen}
    if missing:
        logger.warning(f"{len(missing)} requested ids were not found: {sorted(missing)}")
    return chosen


def count_due(items: Iterable[Item], as_of: date) -> int:
    """Count items that would be due on as_of (e.g. the 'due tomorrow' summary line)."""
    return sum(1 for item in items if is_due(item, as_of))


def estimate_minutes(count: int) -> int:
    """Rough session length estimate shown before starting."""
    return round_half_up(count * MINUTES_PER_ITEM)
