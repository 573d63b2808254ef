import asyncio
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from spacedrill.application.config import resolve_config
from spacedrill.application.review_service import ReviewService
from spacedrill.consts import VERSION
from spacedrill.domain.errors import StoreError
from spacedrill.domain.models import Item, Rating, RatingEvent
from spacedrill.domain.ports import ItemStore
from spacedrill.infrastructure.adapters import InMemoryItemStore
from spacedrill.server import app, get_config, get_service

client = TestClient(app)


@pytest.fixture
def store():
    ts = datetime(2026, 3, 9, 8, 0, tzinfo=timezone.utc)
    items = [
        Item("due", date(2026, 3, 9), interval_days=2),
        Item("new", date(2026, 3, 1)),
        Item("future", date(2026, 5, 1), interval_days=30),
    ]
    events = [RatingEvent("due", Rating.AGAIN, 2.5, 0, ts.date(), ts) for _ in range(3)]
    return InMemoryItemStore(items, events)


@pytest.fixture(autouse=True)
def overrides(store):
    app.dependency_overrides[get_service] = lambda: ReviewService(store)
    app.dependency_overrides[get_config] = lambda: resolve_config({"backend": "memory"})
    yield
    app.dependency_overrides.clear()


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_due():
    response = client.get("/due", params={"as_of": "2026-03-10"})
    assert response.status_code == 200
    data = response.json()
    assert data["as_of"] == "2026-03-10"
    assert data["count"] == 2
    assert data["estimated_minutes"] == 3
    assert [i["id"] for i in data["items"]] == ["due", "new"]


def test_due_store_error():
    broken = AsyncMock(spec=ItemStore)
    broken.fetch_due.side_effect = StoreError("deck server unreachable")
    app.dependency_overrides[get_service] = lambda: ReviewService(broken)

    response = client.get("/due")
    assert response.status_code == 502
    assert "unreachable" in response.json()["detail"]


def test_schedule_preview():
    response = client.post(
        "/schedule/preview",
        json={"ease_factor": 2.5, "interval_days": 6, "rating": 3, "today": "2026-03-10"},
    )
    assert response.status_code == 200
    assert response.json() == {
        "ease_factor": 2.5,
        "interval_days": 15,
        "next_review_date": "2026-03-25",
    }


@pytest.mark.parametrize(
    "body",
    [{"rating": 5}, {"rating": 0}, {"rating": 3, "ease_factor": 0.5}, {"rating": 3, "interval_days": -2}],
)
def test_schedule_preview_rejects(body):
    response = client.post("/schedule/preview", json=body)
    assert response.status_code == 422


def test_retention_projection():
    response = client.post("/retention/projection", json={"from_date": "2026-03-10", "days": 2})
    assert response.status_code == 200
    points = response.json()
    assert [p["date"] for p in points] == ["2026-03-10", "2026-03-11", "2026-03-12"]
    assert points[0]["retention_pct"] > points[2]["retention_pct"] > 0


def test_retention_projection_default_days():
    response = client.post("/retention/projection", json={"from_date": "2026-03-10"})
    assert response.status_code == 200
    assert len(response.json()) == 31


def test_retention_projection_negative_days():
    response = client.post("/retention/projection", json={"days": -1})
    assert response.status_code == 422


def test_leeches():
    response = client.get("/leeches")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["item"]["id"] == "due"
    assert data[0]["failures"] == 3

    assert client.get("/leeches", params={"threshold": 4}).json() == []


@pytest.mark.parametrize("threshold", [0, -1])
def test_leeches_rejects_threshold_below_one(threshold):
    response = client.get("/leeches", params={"threshold": threshold})
    assert response.status_code == 422


def test_reset_leech(store):
    asyncio.run(store.set_suspended("due", True))

    response = client.post("/leeches/due/reset")
    assert response.status_code == 200
    assert response.json()["intervalDays"] == 0
    assert response.json()["easeFactor"] == 2.5
    assert response.json()["suspended"] is False
    assert asyncio.run(store.fetch_events("due")) == []
    assert client.get("/leeches").json() == []


def test_reset_unknown_leech():
    response = client.post("/leeches/ghost/reset")
    assert response.status_code == 404
