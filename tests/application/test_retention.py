import math
from datetime import datetime, timedelta, timezone

import pytest

from spacedrill.application.retention import RetentionProjector, build_decay_profiles
from spacedrill.domain.models import DecayProfile, Rating, RatingEvent


@pytest.fixture
def projector():
    return RetentionProjector()


def test_stability_and_retention(projector, today):
    profile = DecayProfile("x", today - timedelta(days=10), ease_factor=2.5, revision_count=1)

    assert projector.stability(profile) == 37.5
    retention = projector.retention_at(profile, today)
    # 100 * e^(-10 / 37.5) ~ 76.6
    assert retention == pytest.approx(100 * math.exp(-10 / 37.5))
    assert 76 < retention < 77


def test_retention_never_reviewed(projector, today):
    assert projector.retention_at(DecayProfile("x", None), today) is None


def test_retention_full_on_review_day(projector, today):
    profile = DecayProfile("x", today)
    assert projector.retention_at(profile, today) == 100.0
    # Dates before the last review do not exceed 100
    assert projector.retention_at(profile, today - timedelta(days=3)) == 100.0


def test_project_length_and_monotonic(projector, today):
    profiles = [
        DecayProfile("a", today - timedelta(days=2), 2.5, 0),
        DecayProfile("b", today - timedelta(days=20), 1.3, 4),
    ]
    points = projector.project(profiles, today, 30)

    assert len(points) == 31
    assert points[0].date == today
    assert points[-1].date == today + timedelta(days=30)
    for earlier, later in zip(points, points[1:]):
        assert later.retention_pct <= earlier.retention_pct
    assert all(0 <= p.retention_pct <= 100 for p in points)


def test_project_empty_is_flat_zero(projector, today):
    points = projector.project([], today, 5)
    assert len(points) == 6
    assert all(p.retention_pct == 0.0 for p in points)


def test_project_ignores_unreviewed(projector, today):
    profiles = [DecayProfile("a", today), DecayProfile("new", None)]
    points = projector.project(profiles, today, 0)
    assert len(points) == 1
    assert points[0].retention_pct == 100.0


def test_project_rejects_negative_days(projector, today):
    with pytest.raises(ValueError):
        projector.project([], today, -1)


def test_build_decay_profiles(make_item, make_event, today):
    items = [make_item("a", ease=2.2, interval=3), make_item("b")]
    events = [
        make_event("a", Rating.GOOD, days_ago=5),
        make_event("a", Rating.AGAIN, days_ago=1),
        make_event("a", Rating.GOOD, days_ago=3),
        make_event("gone", Rating.GOOD),
    ]

    profiles = {p.item_id: p for p in build_decay_profiles(items, events)}

    assert set(profiles) == {"a", "b"}
    assert profiles["a"].revision_count == 3
    assert profiles["a"].last_reviewed_on == today - timedelta(days=1)
    assert profiles["a"].ease_factor == 2.2
    assert profiles["b"].last_reviewed_on is None
    assert profiles["b"].revision_count == 0


def test_build_decay_profiles_uses_local_date(make_item, today, local_timezone):
    local_timezone("EST5")
    # 02:00 UTC on the 10th is still the evening of the 9th at UTC-5
    ts = datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)
    event = RatingEvent("a", Rating.GOOD, 2.5, 1, today + timedelta(days=1), ts)

    [profile] = build_decay_profiles([make_item("a")], [event])

    assert profile.last_reviewed_on == today - timedelta(days=1)
