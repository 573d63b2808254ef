"""
SM-2 style scheduler turning a rating into a new review state.

This is a pure computation module with no I/O.
"""

import math
from datetime import date, timedelta

from spacedrill.domain.constants import (
    EASE_DECIMALS,
    EASY_EASE_BONUS,
    EASY_INTERVAL_BONUS,
    EASY_NEW_INTERVAL,
    GOOD_NEW_INTERVAL,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_MULTIPLIER,
    MAX_EASE_FACTOR,
    MIN_EASE_FACTOR,
)
from spacedrill.domain.models import Item, ItemState, Rating


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (12.5 -> 13), unlike round()."""
    return math.floor(value + 0.5)


def clamp_ease(ease_factor: float) -> float:
    return round(min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, ease_factor)), EASE_DECIMALS)


def apply_rating(state: ItemState | Item, rating: Rating | int, today: date) -> ItemState:
    """
    Compute the next scheduling state for an item.

    Rules:
        Again: interval 0, ease unchanged.
        Hard:  interval max(1, floor(interval * 1.2)), ease - 0.15.
        Good:  interval 1 if new else round(interval * ease), ease unchanged.
        Easy:  interval 4 if new else round(interval * ease * 1.3), ease + 0.1.

    Ease is clamped to [1.3, 3.0] and rounded to 4 decimals after every call,
    so repeated reviews never drift outside the domain.

    Args:
        state: Current ease factor and interval (an Item or ItemState).
        rating: 1=Again, 2=Hard, 3=Good, 4=Easy.
        today: Date the rating happens on.

    Returns:
        ItemState with next_review_date = today + interval days.

    Raises:
        InvalidRating: if rating is not one of 1, 2, 3, 4.
    """
    rating = Rating.parse(rating)
    ease = state.ease_factor
    interval = state.interval_days

    if rating == Rating.AGAIN:
        interval = 0
    elif rating == Rating.HARD:
        interval = max(1, math.floor(interval * HARD_INTERVAL_MULTIPLIER))
        ease = max(MIN_EASE_FACTOR, ease - HARD_EASE_PENALTY)
    elif rating == Rating.GOOD:
        interval = GOOD_NEW_INTERVAL if interval < 1 else round_half_up(interval * ease)
    else:
        if interval < 1:
            interval = EASY_NEW_INTERVAL
        else:
            interval = round_half_up(interval * ease * EASY_INTERVAL_BONUS)
        ease = min(MAX_EASE_FACTOR, ease + EASY_EASE_BONUS)

    return ItemState(
        ease_factor=clamp_ease(ease),
        interval_days=interval,
        next_review_date=today + timedelta(days=interval),
    )
