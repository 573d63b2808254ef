import random
from datetime import timedelta

import pytest

from spacedrill.application.scheduler import apply_rating, clamp_ease, round_half_up
from spacedrill.domain.errors import InvalidRating
from spacedrill.domain.models import Item, ItemState, Rating


def test_good_on_reviewed_item(today):
    result = apply_rating(ItemState(2.5, 6, today), Rating.GOOD, today)
    assert result == ItemState(2.5, 15, today + timedelta(days=15))


def test_easy_on_new_item(today):
    result = apply_rating(ItemState(2.5, 0, today), Rating.EASY, today)
    assert result.ease_factor == 2.6
    assert result.interval_days == 4
    assert result.next_review_date == today + timedelta(days=4)


def test_hard_hits_ease_floor(today):
    result = apply_rating(ItemState(1.35, 3, today), Rating.HARD, today)
    # floor(3 * 1.2) = 3
    assert result == ItemState(1.3, 3, today + timedelta(days=3))


def test_again_resets_interval_keeps_ease(today):
    result = apply_rating(ItemState(2.2, 30, today), Rating.AGAIN, today)
    assert result == ItemState(2.2, 0, today)


def test_good_on_new_item(today):
    result = apply_rating(ItemState(2.5, 0, today), Rating.GOOD, today)
    assert result.interval_days == 1
    assert result.ease_factor == 2.5


def test_hard_on_new_item_gives_one_day(today):
    result = apply_rating(ItemState(2.5, 0, today), Rating.HARD, today)
    assert result.interval_days == 1
    assert result.ease_factor == 2.35


def test_easy_on_reviewed_item(today):
    # 4 * 2.5 * 1.3 = 13
    result = apply_rating(ItemState(2.5, 4, today), Rating.EASY, today)
    assert result.interval_days == 13
    assert result.ease_factor == 2.6


def test_easy_at_ceiling(today):
    result = apply_rating(ItemState(3.0, 1, today), Rating.EASY, today)
    assert result.ease_factor == 3.0


def test_good_rounds_half_up(today):
    # 5 * 2.5 = 12.5; banker's rounding would give 12
    result = apply_rating(ItemState(2.5, 5, today), Rating.GOOD, today)
    assert result.interval_days == 13


def test_accepts_item_and_int_rating(today, make_item):
    item = make_item("a", ease=2.5, interval=6)
    result = apply_rating(item, 3, today)
    assert result.interval_days == 15


@pytest.mark.parametrize("rating", [0, 5, True, "3"])
def test_invalid_rating(today, rating):
    with pytest.raises(InvalidRating):
        apply_rating(ItemState(2.5, 1, today), rating, today)


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_clamp_ease():
    assert clamp_ease(1.0) == 1.3
    assert clamp_ease(3.7) == 3.0
    assert clamp_ease(2.123456) == 2.1235


def test_random_walks_stay_in_domain(today):
    rng = random.Random(42)

    for _ in range(200):
        state = ItemState(rng.choice([1.3, 2.5, 3.0]), 0, today)
        for _ in range(8):
            rating = rng.choice(list(Rating))
            state = apply_rating(state, rating, today)

            assert 1.3 <= state.ease_factor <= 3.0
            assert round(state.ease_factor, 4) == state.ease_factor
            assert state.interval_days >= 0
            assert state.next_review_date == today + timedelta(days=state.interval_days)
            if rating == Rating.AGAIN:
                assert state.interval_days == 0


def test_does_not_mutate_input(today):
    item = Item(id="a", next_review_date=today, ease_factor=2.5, interval_days=6)
    apply_rating(item, Rating.EASY, today)
    assert item.interval_days == 6
    assert item.ease_factor == 2.5
