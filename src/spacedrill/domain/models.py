"""
Domain models for items, ratings and review sessions.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import IntEnum

from .constants import DEFAULT_EASE_FACTOR
from .errors import InvalidRating


class Rating(IntEnum):
    """Button pressed after revealing an item."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: object) -> "Rating":
        """
        Coerce an int-like value into a Rating.

        Raises:
            InvalidRating: if the value is not exactly one of 1, 2, 3, 4.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRating(value)
        try:
            return cls(value)
        except ValueError:
            raise InvalidRating(value) from None

    @property
    def is_success(self) -> bool:
        """Good and Easy extend the streak."""
        return self >= Rating.GOOD


@dataclass(frozen=True)
class ItemState:
    """
    Scheduling state of an item.

    Attributes:
        ease_factor: Interval growth multiplier, bounded [1.3, 3.0].
        interval_days: Days until the next review (0 means new / reset).
        next_review_date: Calendar date of the next review.
    """

    ease_factor: float
    interval_days: int
    next_review_date: date


@dataclass(frozen=True)
class Item:
    """
    A reviewable unit (flashcard or topic).

    Owned by the ItemStore; only replaced through scheduler outputs.
    """

    id: str
    next_review_date: date
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    suspended: bool = False

    @property
    def is_new(self) -> bool:
        return self.interval_days == 0

    @property
    def state(self) -> ItemState:
        return ItemState(
            ease_factor=self.ease_factor,
            interval_days=self.interval_days,
            next_review_date=self.next_review_date,
        )

    def with_state(self, state: ItemState) -> "Item":
        return replace(
            self,
            ease_factor=state.ease_factor,
            interval_days=state.interval_days,
            next_review_date=state.next_review_date,
        )


@dataclass(frozen=True)
class RatingEvent:
    """
    Append-only review log record.

    Attributes:
        item_id: The item that was rated.
        rating: Button pressed (1=Again, 2=Hard, 3=Good, 4=Easy).
        resulting_ease_factor: Ease after the transition.
        resulting_interval_days: Interval after the transition.
        resulting_next_review_date: Due date after the transition.
        timestamp: Aware UTC datetime of the rating.
    """

    item_id: str
    rating: Rating
    resulting_ease_factor: float
    resulting_interval_days: int
    resulting_next_review_date: date
    timestamp: datetime

    @classmethod
    def from_state(
        cls, item_id: str, rating: Rating, state: ItemState, timestamp: datetime
    ) -> "RatingEvent":
        return cls(
            item_id=item_id,
            rating=rating,
            resulting_ease_factor=state.ease_factor,
            resulting_interval_days=state.interval_days,
            resulting_next_review_date=state.next_review_date,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class ReviewQueueEntry:
    """An item reference inside a session queue."""

    item_id: str
    requeued: bool = False  # synthetic duplicate appended by an Again rating


@dataclass(frozen=True)
class DecayProfile:
    """Inputs to the retention model for one reviewed item."""

    item_id: str
    last_reviewed_on: date | None
    ease_factor: float = DEFAULT_EASE_FACTOR
    revision_count: int = 0
