import os
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from spacedrill.domain.models import Item, Rating, RatingEvent
from spacedrill.infrastructure.adapters import InMemoryItemStore

D = date(2026, 3, 10)
TS = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keeps real config files and SPACEDRILL_* variables out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("SPACEDRILL_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture(autouse=True)
def local_timezone():
    """Pins local time to UTC. Call the returned setter to switch zones."""
    original = os.environ.get("TZ")

    def _set(name):
        os.environ["TZ"] = name
        time.tzset()

    _set("UTC")
    yield _set
    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()

@pytest.fixture
def today():
    return D


@pytest.fixture
def make_item():
    def _make(item_id, *, due_in=0, ease=2.5, interval=0, suspended=False):
        return Item(
            id=item_id,
            next_review_date=D + timedelta(days=due_in),
            ease_factor=ease,
            interval_days=interval,
            suspended=suspended,
        )

    return _make


@pytest.fixture
def make_event():
    def _make(item_id, rating=Rating.GOOD, *, days_ago=0, ease=2.5, interval=1):
        ts = TS - timedelta(days=days_ago)
        return RatingEvent(
            item_id=item_id,
            rating=Rating(rating),
            resulting_ease_factor=ease,
            resulting_interval_days=interval,
            resulting_next_review_date=ts.date() + timedelta(days=interval),
            timestamp=ts,
        )

    return _make


@pytest.fixture
def now():
    return TS


@pytest.fixture
def memory_store(now):
    return InMemoryItemStore(now=lambda: now)
