"""
Fixed revision schedule for whole topics (chapters), coarser than per-item SM-2.

The gaps between revisions follow TOPIC_REVISION_INTERVALS; once the last
revision is done the topic has no further scheduled date.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta

from spacedrill.domain.constants import TOPIC_REVISION_INTERVALS


def topic_revision_dates(completed_on: date) -> list[date]:
    """
    Revision dates for a topic completed on a given day.

    Each interval is counted from the previous revision date, e.g. completion on
    day 0 gives days 1, 4, 11, 32, 77.
    """
    dates: list[date] = []
    cursor = completed_on
    for gap in TOPIC_REVISION_INTERVALS:
        cursor = cursor + timedelta(days=gap)
        dates.append(cursor)
    return dates


@dataclass(frozen=True)
class TopicSchedule:
    """Revision progress of one completed topic."""

    completed_on: date
    revision_dates: list[date] = field(default_factory=list)
    revision_index: int = 0
    last_reviewed_on: date | None = None

    @classmethod
    def complete(cls, completed_on: date) -> "TopicSchedule":
        return cls(
            completed_on=completed_on,
            revision_dates=topic_revision_dates(completed_on),
            revision_index=0,
            last_reviewed_on=completed_on,
        )

    @property
    def next_revision(self) -> date | None:
        if self.revision_index < len(self.revision_dates):
            return self.revision_dates[self.revision_index]
        return None

    def is_due(self, today: date) -> bool:
        nxt = self.next_revision
        return nxt is not None and nxt <= today

    def overdue_days(self, today: date) -> int:
        nxt = self.next_revision
        if nxt is None:
            return 0
        return max(0, (today - nxt).days)

    def mark_revision_done(self, today: date) -> "TopicSchedule":
        """
        Record a completed revision and reschedule the next one from today.
        """
        index = self.revision_index + 1
        dates = list(self.revision_dates)
        if index < len(dates):
            dates[index] = today + timedelta(days=TOPIC_REVISION_INTERVALS[index])
        return replace(self, revision_dates=dates, revision_index=index, last_reviewed_on=today)
