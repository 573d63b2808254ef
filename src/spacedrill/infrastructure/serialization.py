"""
Wire codec for items and rating events.

Item:        {id, easeFactor, intervalDays, nextReviewDate, suspended}
RatingEvent: {itemId, rating, resultingEaseFactor, resultingIntervalDays,
              resultingNextReviewDate, timestamp}

Dates are ISO-8601 strings; timestamps are ISO-8601 datetimes in UTC.
"""

from datetime import date, datetime, timezone
from typing import Any

from spacedrill.domain.constants import DEFAULT_EASE_FACTOR
from spacedrill.domain.errors import InvalidRating, StoreError
from spacedrill.domain.models import Item, ItemState, Rating, RatingEvent


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def item_to_wire(item: Item) -> dict[str, Any]:
    return {
        "id": item.id,
        "easeFactor": item.ease_factor,
        "intervalDays": item.interval_days,
        "nextReviewDate": item.next_review_date.isoformat(),
        "suspended": item.suspended,
    }


def item_from_wire(data: dict[str, Any]) -> Item:
    try:
        return Item(
            id=str(data["id"]),
            ease_factor=float(data.get("easeFactor", DEFAULT_EASE_FACTOR)),
            interval_days=int(data.get("intervalDays", 0)),
            next_review_date=_parse_date(data["nextReviewDate"]),
            suspended=bool(data.get("suspended", False)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed item record {data!r}: {e}") from e


def state_to_wire(state: ItemState) -> dict[str, Any]:
    return {
        "easeFactor": state.ease_factor,
        "intervalDays": state.interval_days,
        "nextReviewDate": state.next_review_date.isoformat(),
    }


def state_from_wire(data: dict[str, Any]) -> ItemState:
    try:
        return ItemState(
            ease_factor=float(data["easeFactor"]),
            interval_days=int(data["intervalDays"]),
            next_review_date=_parse_date(data["nextReviewDate"]),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed state record {data!r}: {e}") from e


def event_to_wire(event: RatingEvent) -> dict[str, Any]:
    return {
        "itemId": event.item_id,
        "rating": int(event.rating),
        "resultingEaseFactor": event.resulting_ease_factor,
        "resultingIntervalDays": event.resulting_interval_days,
        "resultingNextReviewDate": event.resulting_next_review_date.isoformat(),
        "timestamp": event.timestamp.astimezone(timezone.utc).isoformat(),
    }


def event_from_wire(data: dict[str, Any]) -> RatingEvent:
    try:
        return RatingEvent(
            item_id=str(data["itemId"]),
            rating=Rating.parse(int(data["rating"])),
            resulting_ease_factor=float(data["resultingEaseFactor"]),
            resulting_interval_days=int(data["resultingIntervalDays"]),
            resulting_next_review_date=_parse_date(data["resultingNextReviewDate"]),
            timestamp=_parse_timestamp(data["timestamp"]),
        )
    except (AttributeError, KeyError, TypeError, ValueError, InvalidRating) as e:
        raise StoreError(f"Malformed rating event {data!r}: {e}") from e
