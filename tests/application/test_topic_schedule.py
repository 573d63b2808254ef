from datetime import timedelta

from spacedrill.application.topic_schedule import TopicSchedule, topic_revision_dates


def test_revision_dates_are_cumulative(today):
    dates = topic_revision_dates(today)
    assert [(d - today).days for d in dates] == [1, 4, 11, 32, 77]


def test_complete(today):
    schedule = TopicSchedule.complete(today)

    assert schedule.completed_on == today
    assert schedule.last_reviewed_on == today
    assert schedule.revision_index == 0
    assert schedule.next_revision == today + timedelta(days=1)
    assert not schedule.is_due(today)
    assert schedule.is_due(today + timedelta(days=1))


def test_overdue_days(today):
    schedule = TopicSchedule.complete(today)
    assert schedule.overdue_days(today) == 0
    assert schedule.overdue_days(today + timedelta(days=4)) == 3


def test_mark_revision_done_reschedules_from_today(today):
    schedule = TopicSchedule.complete(today)
    late = today + timedelta(days=6)

    after = schedule.mark_revision_done(late)

    assert after.revision_index == 1
    assert after.last_reviewed_on == late
    assert after.next_revision == late + timedelta(days=3)
    # Immutable
    assert schedule.revision_index == 0
    assert schedule.revision_dates == topic_revision_dates(today)


def test_schedule_finishes_after_last_revision(today):
    schedule = TopicSchedule.complete(today)
    day = today
    for _ in range(5):
        day = schedule.next_revision
        schedule = schedule.mark_revision_done(day)

    assert schedule.revision_index == 5
    assert schedule.next_revision is None
    assert not schedule.is_due(day + timedelta(days=365))
    assert schedule.overdue_days(day + timedelta(days=365)) == 0
