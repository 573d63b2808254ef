"""
Review Service: Application layer orchestrator.

Coordinates fetching items from the store with queue building, retention
projection and leech detection.
"""

import logging
from collections.abc import Iterable
from datetime import date

from spacedrill.application.leech import find_leeches, reset_leech_state
from spacedrill.application.queue_builder import count_due, select_by_ids, select_due
from spacedrill.application.retention import (
    RetentionPoint,
    RetentionProjector,
    build_decay_profiles,
)
from spacedrill.domain.constants import DEFAULT_LEECH_THRESHOLD
from spacedrill.domain.models import Item
from spacedrill.domain.ports import ItemStore

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for building review queues and analytics.

    Depends on the ItemStore abstraction, not concrete adapter implementations.
    """

    def __init__(self, store: ItemStore, projector: RetentionProjector | None = None):
        """
        Args:
            store: The repository (port) for items and review logs.
            projector: Optional custom projector; uses default if not provided.
        """
        self._store = store
        self._projector = projector or RetentionProjector()

    async def due_queue(self, as_of: date) -> list[Item]:
        """Ordered queue of everything due on or before as_of."""
        items = await self._store.fetch_due(as_of)
        return select_due(items, as_of)

    async def practice_queue(self, ids: Iterable[str]) -> list[Item]:
        """Ordered queue for an explicit subset, ignoring due dates."""
        ids = list(ids)
        if not ids:
            return []
        items = await self._store.fetch_by_ids(ids)
        return select_by_ids(items, ids)

    async def due_count(self, as_of: date) -> int:
        items = await self._store.fetch_due(as_of)
        return count_due(items, as_of)

    async def project_retention(self, from_date: date, days: int) -> list[RetentionPoint]:
        """
        Forecast mean retention assuming no further reviews.

        Items never rated are left out; an empty history gives a flat zero curve.
        """
        items = await self._store.fetch_all()
        events = await self._store.fetch_events()
        profiles = build_decay_profiles(items, events)
        return self._projector.project(profiles, from_date, days)

    async def leeches(
        self, threshold: int = DEFAULT_LEECH_THRESHOLD
    ) -> list[tuple[Item, int]]:
        """
        Items rated Again at least `threshold` times, most failures first.

        Deleted items that still appear in the log are skipped.
        """
        events = await self._store.fetch_events()
        ranked = find_leeches(events, threshold)
        if not ranked:
            return []

        items = {item.id: item for item in await self._store.fetch_by_ids(i for i, _ in ranked)}
        return [(items[item_id], n) for item_id, n in ranked if item_id in items]

    async def reset_leech(self, item_id: str, today: date) -> Item:
        """Start a leech over as an unsuspended new item due today, with no history."""
        await self._store.restore_state(item_id, reset_leech_state(today))
        await self._store.clear_events(item_id)
        item = await self._store.set_suspended(item_id, False)
        logger.info(f"Reset leech {item_id}")
        return item
