"""
Retention projector for forecasting recall over the coming days.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from spacedrill.domain.constants import REVISION_STABILITY_BONUS, STABILITY_SCALE
from spacedrill.domain.models import DecayProfile, Item, RatingEvent


@dataclass(frozen=True)
class RetentionPoint:
    """Projected mean retention on a given date."""

    date: date
    retention_pct: float


class RetentionProjector:
    """
    Exponential (Ebbinghaus-style) decay model over a set of reviewed items.

    Stateless and side-effect free. Assumes no further reviews happen, so the
    projected curve never increases over time.
    """

    def stability(self, profile: DecayProfile) -> float:
        """
        Time constant of the decay curve in days.

        S = ease * 10 * (1 + revisions * 0.5)
        """
        return (
            profile.ease_factor
            * STABILITY_SCALE
            * (1 + profile.revision_count * REVISION_STABILITY_BONUS)
        )

    def retention_at(self, profile: DecayProfile, on: date) -> float | None:
        """
        Recall probability in percent on a given date.

        R = 100 * e^(-t/S) where t = days since last review, S = stability.
        Returns None for items that were never reviewed.
        """
        if profile.last_reviewed_on is None:
            return None

        days_since = max(0, (on - profile.last_reviewed_on).days)
        stability = self.stability(profile)
        if stability <= 0:
            return 0.0

        return min(100.0, max(0.0, 100.0 * math.exp(-days_since / stability)))

    def project(
        self, profiles: Iterable[DecayProfile], from_date: date, days: int
    ) -> list[RetentionPoint]:
        """
        Project mean retention for from_date .. from_date + days (inclusive).

        Items without a last review date are ignored; if none remain, the
        curve is flat zero rather than an error.
        """
        if days < 0:
            raise ValueError(f"days must be >= 0 (got {days})")

        reviewed = [p for p in profiles if p.last_reviewed_on is not None]
        points: list[RetentionPoint] = []

        for offset in range(days + 1):
            target = from_date + timedelta(days=offset)
            if not reviewed:
                points.append(RetentionPoint(date=target, retention_pct=0.0))
                continue
            total = sum(self.retention_at(p, target) for p in reviewed)
            points.append(RetentionPoint(date=target, retention_pct=total / len(reviewed)))

        return points


def build_decay_profiles(
    items: Iterable[Item], events: Iterable[RatingEvent]
) -> list[DecayProfile]:
    """
    Derive decay profiles from items and their review log.

    revision_count is the number of logged ratings; last_reviewed_on is the
    local calendar date of the most recent one (None when the item was never
    rated).
    """
    counts: dict[str, int] = {}
    last_seen: dict[str, date] = {}

    for event in events:
        counts[event.item_id] = counts.get(event.item_id, 0) + 1
        reviewed_on = event.timestamp.astimezone().date()
        if event.item_id not in last_seen or reviewed_on > last_seen[event.item_id]:
            last_seen[event.item_id] = reviewed_on

    return [
        DecayProfile(
            item_id=item.id,
            last_reviewed_on=last_seen.get(item.id),
            ease_factor=item.ease_factor,
            revision_count=counts.get(item.id, 0),
        )
        for item in items
    ]
