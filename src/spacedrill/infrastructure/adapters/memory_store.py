"""
In-memory ItemStore: process-local dictionaries.

Used for tests, demos and as the base of the YAML file store.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date, datetime, timezone

from spacedrill.domain.errors import ItemNotFound
from spacedrill.domain.models import Item, ItemState, Rating, RatingEvent
from spacedrill.domain.ports import ItemStore

logger = logging.getLogger(__name__)


class InMemoryItemStore(ItemStore):
    """Keeps items by id and the review log as an append-only list."""

    def __init__(
        self,
        items: Iterable[Item] = (),
        events: Iterable[RatingEvent] = (),
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._items: dict[str, Item] = {item.id: item for item in items}
        self._events: list[RatingEvent] = list(events)
        self._now = now

    async def fetch_due(self, as_of: date) -> list[Item]:
        return [
            item
            for item in self._items.values()
            if not item.suspended and item.next_review_date <= as_of
        ]

    async def fetch_by_ids(self, ids: Iterable[str]) -> list[Item]:
        return [self._items[i] for i in dict.fromkeys(ids) if i in self._items]

    async def fetch_all(self) -> list[Item]:
        return list(self._items.values())

    async def fetch_events(self, item_id: str | None = None) -> list[RatingEvent]:
        events = [e for e in self._events if item_id is None or e.item_id == item_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def add_item(self, item: Item) -> Item:
        self._items[item.id] = item
        self._changed()
        return item

    async def persist_rating(self, item_id: str, rating: Rating, new_state: ItemState) -> Item:
        item = self._require(item_id)
        updated = item.with_state(new_state)
        self._items[item_id] = updated
        self._events.append(RatingEvent.from_state(item_id, rating, new_state, self._now()))
        self._changed()
        return updated

    async def restore_state(self, item_id: str, prior_state: ItemState) -> Item:
        restored = self._require(item_id).with_state(prior_state)
        self._items[item_id] = restored
        self._changed()
        return restored

    async def set_suspended(self, item_id: str, suspended: bool) -> Item:
        updated = replace(self._require(item_id), suspended=suspended)
        self._items[item_id] = updated
        self._changed()
        return updated

    async def clear_events(self, item_id: str) -> None:
        self._events = [e for e in self._events if e.item_id != item_id]
        self._changed()

    async def delete_item(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is None:
            logger.debug(f"delete_item: {item_id} already absent")
            return
        self._changed()

    def _require(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFound(item_id) from None

    def _changed(self) -> None:
        """Hook for subclasses that persist after every mutation."""
