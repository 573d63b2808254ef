"""
Ports (interfaces) for item persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

from .models import Item, ItemState, Rating, RatingEvent


class ItemStore(ABC):
    """
    Port for fetching and persisting items and their review log.

    Writes must be idempotent per item (last write wins on item state) and
    order-independent on the review log, since the session engine does not
    wait for one write to finish before issuing the next.

    Implementations:
        - InMemoryItemStore: process-local dictionaries.
        - YamlItemStore: a single YAML deck file.
        - HttpItemStore: a remote item service over HTTP.
    """

    @abstractmethod
    async def fetch_due(self, as_of: date) -> list[Item]:
        """
        Fetch non-suspended items whose next review date is on or before as_of.
        """
        pass

    @abstractmethod
    async def fetch_by_ids(self, ids: Iterable[str]) -> list[Item]:
        """
        Fetch the items with the given ids. Unknown ids are skipped.
        """
        pass

    @abstractmethod
    async def fetch_all(self) -> list[Item]:
        """Fetch every item, suspended ones included."""
        pass

    @abstractmethod
    async def fetch_events(self, item_id: str | None = None) -> list[RatingEvent]:
        """
        Fetch review log entries, optionally for one item.

        Returns:
            RatingEvents sorted by timestamp ascending.
        """
        pass

    @abstractmethod
    async def add_item(self, item: Item) -> Item:
        """Insert (or overwrite) an item."""
        pass

    @abstractmethod
    async def persist_rating(self, item_id: str, rating: Rating, new_state: ItemState) -> Item:
        """
        Append one RatingEvent and update the item's scheduling state.

        Returns:
            The updated item.
        """
        pass

    @abstractmethod
    async def restore_state(self, item_id: str, prior_state: ItemState) -> Item:
        """
        Overwrite the item's scheduling state (used by undo).
        """
        pass

    @abstractmethod
    async def set_suspended(self, item_id: str, suspended: bool) -> Item:
        """Suspend or unsuspend an item. Suspended items are never due."""
        pass

    @abstractmethod
    async def clear_events(self, item_id: str) -> None:
        """Drop every review log entry of one item."""
        pass

    @abstractmethod
    async def delete_item(self, item_id: str) -> None:
        pass
