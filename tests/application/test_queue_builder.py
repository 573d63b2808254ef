import logging

import pytest

from spacedrill.application.queue_builder import (
    count_due,
    estimate_minutes,
    select_by_ids,
    select_due,
)


@pytest.fixture
def deck(make_item):
    return [
        make_item("a", due_in=-1, interval=3),
        make_item("b", due_in=0, interval=0),  # new
        make_item("c", due_in=-5, interval=1),
        make_item("d", due_in=2, interval=6),  # future
        make_item("e", due_in=-2, interval=4, suspended=True),
        make_item("f", due_in=-10, interval=0),  # old but new
    ]


def test_select_due_orders_due_before_new(deck, today):
    queue = select_due(deck, today)
    assert [item.id for item in queue] == ["c", "a", "f", "b"]


def test_select_due_excludes_future_and_suspended(deck, today):
    ids = {item.id for item in select_due(deck, today)}
    assert "d" not in ids
    assert "e" not in ids


def test_select_due_ties_broken_by_id(make_item, today):
    deck = [make_item("z", interval=2), make_item("m", interval=2), make_item("q", interval=2)]
    assert [item.id for item in select_due(deck, today)] == ["m", "q", "z"]


def test_select_due_empty(today):
    assert select_due([], today) == []


def test_select_by_ids_ignores_due_dates(deck, caplog):
    with caplog.at_level(logging.WARNING):
        queue = select_by_ids(deck, ["d", "e", "b", "missing"])

    assert [item.id for item in queue] == ["e", "d", "b"]
    assert "missing" in caplog.text


def test_count_due(deck, today):
    assert count_due(deck, today) == 4


def test_estimate_minutes():
    assert estimate_minutes(0) == 0
    assert estimate_minutes(3) == 5  # 4.5 rounds up
    assert estimate_minutes(10) == 15
