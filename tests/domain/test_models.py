from datetime import date

import pytest

from spacedrill.domain.errors import InvalidOperation, InvalidRating
from spacedrill.domain.models import Item, ItemState, Rating


@pytest.mark.parametrize("value,expected", [(1, Rating.AGAIN), (4, Rating.EASY), (Rating.HARD, Rating.HARD)])
def test_rating_parse_valid(value, expected):
    assert Rating.parse(value) is expected


@pytest.mark.parametrize("value", [0, 5, -1, True, "3", 3.0, None])
def test_rating_parse_rejects(value):
    with pytest.raises(InvalidRating) as exc:
        Rating.parse(value)
    assert exc.value.rating == value
    # Invalid ratings are caller errors
    assert isinstance(exc.value, InvalidOperation)


def test_rating_success():
    assert not Rating.AGAIN.is_success
    assert not Rating.HARD.is_success
    assert Rating.GOOD.is_success
    assert Rating.EASY.is_success


def test_item_defaults_are_new():
    item = Item(id="a", next_review_date=date(2026, 1, 1))
    assert item.ease_factor == 2.5
    assert item.interval_days == 0
    assert item.is_new
    assert not item.suspended


def test_item_with_state_keeps_identity():
    item = Item(id="a", next_review_date=date(2026, 1, 1), suspended=True)
    updated = item.with_state(ItemState(2.6, 4, date(2026, 1, 5)))

    assert updated.id == "a"
    assert updated.suspended
    assert updated.state == ItemState(2.6, 4, date(2026, 1, 5))
    assert not updated.is_new
    # Original is untouched
    assert item.interval_days == 0
