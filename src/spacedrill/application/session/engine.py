"""
Review session engine: a single-writer state machine over an ordered queue.

    NOT_STARTED --start--> ACTIVE (front <-flip-> back) --rate--> ... --> COMPLETE --end--> ENDED

Every transition is synchronous. Persistence goes through a PersistenceOutbox
and never blocks, fails or rolls back the in-memory session; the local state
is authoritative for the rest of the session.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum

from ulid import ULID

from spacedrill.application.scheduler import apply_rating, round_half_up
from spacedrill.domain.errors import InvalidOperation
from spacedrill.domain.models import Item, ItemState, Rating, RatingEvent, ReviewQueueEntry
from spacedrill.domain.ports import ItemStore

from .outbox import DeleteItem, ErrorSink, PersistenceOutbox, PersistRating, RestoreState
from .timer import SessionTimer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETE = "complete"
    ENDED = "ended"


@dataclass(frozen=True)
class Command:
    """
    Reversible record of one rating.

    Attributes:
        index: Queue position that was rated.
        item_id: The rated item.
        previous_state: Scheduling state before the rating.
        rating: Button pressed.
        previous_streak: Streak before the rating.
        did_requeue: Whether an Again duplicate was appended.
    """

    index: int
    item_id: str
    previous_state: ItemState
    rating: Rating
    previous_streak: int
    did_requeue: bool


def _zero_counts() -> dict[Rating, int]:
    return {r: 0 for r in Rating}


@dataclass
class SessionState:
    """Transient in-memory state of one review pass. Never persisted."""

    session_id: str
    queue: list[ReviewQueueEntry] = field(default_factory=list)
    index: int = 0
    flipped: bool = False
    rating_counts: dict[Rating, int] = field(default_factory=_zero_counts)
    streak: int = 0
    undo_stack: list[Command] = field(default_factory=list)
    redo_stack: list[Command] = field(default_factory=list)
    started_at: datetime | None = None
    phase: SessionPhase = SessionPhase.NOT_STARTED
    events: list[RatingEvent] = field(default_factory=list)


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    rating_counts: dict[Rating, int]
    unique_rated: int
    retention_pct: int
    streak: int
    elapsed_seconds: float

    @property
    def total_ratings(self) -> int:
        return sum(self.rating_counts.values())


class ReviewSessionEngine:
    """
    Drives flip, rate, undo/redo, deletion and summary for one session.

    Depends on the ItemStore abstraction only through the outbox; scheduling
    is delegated to the pure scheduler.
    """

    def __init__(
        self,
        store: ItemStore,
        *,
        on_error: ErrorSink | None = None,
        outbox: PersistenceOutbox | None = None,
        timer: SessionTimer | None = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utcnow,
        strict: bool = False,
    ):
        """
        Args:
            store: Where ratings, undo corrections and deletions are written.
            on_error: Error sink for failed writes; logs by default.
            outbox: Custom outbox; built from store/on_error if not provided.
            timer: Session timer; a monotonic-clock timer by default.
            today: Date source for scheduling.
            now: Timestamp source for rating events.
            strict: Raise InvalidOperation for calls made in an invalid state
                instead of ignoring them.
        """
        self.outbox = outbox or PersistenceOutbox(store, on_error)
        self._timer = timer or SessionTimer()
        self._today = today
        self._now = now
        self._strict = strict
        self._items: dict[str, Item] = {}
        self._state: SessionState | None = None
        self._summary: SessionSummary | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase if self._state else SessionPhase.NOT_STARTED

    @property
    def is_active(self) -> bool:
        return self.phase == SessionPhase.ACTIVE

    @property
    def current_entry(self) -> ReviewQueueEntry | None:
        st = self._state
        if st is None or st.phase != SessionPhase.ACTIVE or st.index >= len(st.queue):
            return None
        return st.queue[st.index]

    @property
    def current_item(self) -> Item | None:
        entry = self.current_entry
        return self._items.get(entry.item_id) if entry else None

    @property
    def can_undo(self) -> bool:
        return self._undoable() and bool(self._state.undo_stack)

    @property
    def can_redo(self) -> bool:
        return self._undoable() and bool(self._state.redo_stack)

    @property
    def elapsed_seconds(self) -> float:
        return self._timer.elapsed

    def item(self, item_id: str) -> Item | None:
        """Session-local (optimistic) view of an item."""
        return self._items.get(item_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, items: Sequence[Item]) -> SessionState:
        """
        Begin a session over an already ordered list of items.

        Raises:
            InvalidOperation: if items is empty; the caller should show an
                empty state instead. No session is created.
        """
        if not items:
            raise InvalidOperation("Cannot start a session with an empty queue")

        self._timer.stop()
        self._items = {item.id: item for item in items}
        self._summary = None
        self._state = SessionState(
            session_id=str(ULID()),
            queue=[ReviewQueueEntry(item_id=item.id) for item in items],
            started_at=self._now(),
            phase=SessionPhase.ACTIVE,
        )
        self._timer.start()
        logger.info(f"Session {self._state.session_id} started with {len(items)} items")
        return self._state

    def flip(self) -> bool:
        """Toggle between front and back. Returns the new flipped value."""
        st = self._state
        if st is None or st.phase != SessionPhase.ACTIVE:
            self._violation(f"flip() ignored in phase {self.phase.value}")
            return False
        st.flipped = not st.flipped
        return st.flipped

    def rate(self, rating: Rating | int) -> RatingEvent | None:
        """
        Rate the current entry and advance.

        Only valid while active and flipped; otherwise the call is ignored
        (or rejected in strict mode) without touching session state.

        Raises:
            InvalidRating: if rating is not one of 1, 2, 3, 4.
        """
        rating = Rating.parse(rating)
        st = self._state
        if st is None or st.phase != SessionPhase.ACTIVE:
            self._violation(f"rate() ignored in phase {self.phase.value}")
            return None
        if not st.flipped:
            self._violation("rate() ignored before the answer was revealed")
            return None

        entry = st.queue[st.index]
        previous = self._items[entry.item_id]
        command = Command(
            index=st.index,
            item_id=entry.item_id,
            previous_state=previous.state,
            rating=rating,
            previous_streak=st.streak,
            did_requeue=rating == Rating.AGAIN,
        )
        new_state = apply_rating(previous.state, rating, self._today())
        st.redo_stack.clear()
        return self._forward(command, new_state)

    def undo(self) -> Command | None:
        """Revert the most recent rating. No-op when there is nothing to undo."""
        if not self.can_undo:
            return None

        st = self._state
        command = st.undo_stack.pop()
        st.redo_stack.append(command)

        if command.did_requeue:
            for i in range(len(st.queue) - 1, command.index, -1):
                entry = st.queue[i]
                if entry.requeued and entry.item_id == command.item_id:
                    del st.queue[i]
                    break

        st.rating_counts[command.rating] = max(0, st.rating_counts[command.rating] - 1)
        st.streak = command.previous_streak
        st.index = command.index
        st.flipped = False
        st.phase = SessionPhase.ACTIVE

        self._items[command.item_id] = self._items[command.item_id].with_state(
            command.previous_state
        )
        self.outbox.submit(RestoreState(command.item_id, command.previous_state))
        logger.debug(f"Undid rating {command.rating.name} on {command.item_id}")
        return command

    def redo(self) -> Command | None:
        """Replay the most recently undone rating. No-op when there is nothing to redo."""
        if not self.can_redo:
            return None

        command = self._state.redo_stack.pop()
        new_state = apply_rating(command.previous_state, command.rating, self._today())
        self._forward(command, new_state)
        logger.debug(f"Redid rating {command.rating.name} on {command.item_id}")
        return command

    def delete_current(self) -> int:
        entry = self.current_entry
        if entry is None:
            self._violation("delete_current() ignored: no current item")
            return 0
        return self.delete_item(entry.item_id)

    def delete_item(self, item_id: str) -> int:
        """
        Remove every queue entry of an item and delete it from the store.

        Returns:
            Number of queue entries removed.
        """
        st = self._state
        if st is None or st.phase not in (SessionPhase.ACTIVE, SessionPhase.COMPLETE):
            self._violation(f"delete_item() ignored in phase {self.phase.value}")
            return 0

        positions = [i for i, e in enumerate(st.queue) if e.item_id == item_id]
        if not positions:
            return 0

        if st.index in positions:
            st.flipped = False
        for pos in reversed(positions):
            del st.queue[pos]
            if pos < st.index:
                st.index -= 1
        st.index = max(0, min(st.index, len(st.queue)))

        # Ratings of the deleted item leave the counts along with their commands
        for cmd in st.undo_stack:
            if cmd.item_id == item_id:
                st.rating_counts[cmd.rating] = max(0, st.rating_counts[cmd.rating] - 1)
        st.undo_stack[:] = _reindex_commands(st.undo_stack, item_id, positions)
        st.redo_stack[:] = _reindex_commands(st.redo_stack, item_id, positions)
        self._items.pop(item_id, None)
        self.outbox.submit(DeleteItem(item_id))

        if st.index >= len(st.queue):
            st.phase = SessionPhase.COMPLETE
            st.flipped = False
        logger.info(f"Deleted {item_id} from session ({len(positions)} entries)")
        return len(positions)

    def end(self) -> SessionSummary:
        """
        Stop the timer and compute the session summary.

        Calling end() again returns the same summary.
        """
        st = self._state
        if st is None:
            raise InvalidOperation("No session has been started")
        if self._summary is not None:
            return self._summary

        elapsed = self._timer.stop()
        self._summary = self.summary(elapsed)
        st.phase = SessionPhase.ENDED
        logger.info(
            f"Session {st.session_id} ended: {self._summary.total_ratings} ratings, "
            f"retention {self._summary.retention_pct}%"
        )
        return self._summary

    def summary(self, elapsed: float | None = None) -> SessionSummary:
        """
        Summary statistics so far.

        retention_pct = round(100 * (good + easy) / unique_rated), where
        unique_rated counts only original (non-requeued) entries already rated.
        """
        st = self._state
        if st is None:
            raise InvalidOperation("No session has been started")

        unique_rated = sum(1 for e in st.queue[: st.index] if not e.requeued)
        successes = st.rating_counts[Rating.GOOD] + st.rating_counts[Rating.EASY]
        retention = round_half_up(100 * successes / unique_rated) if unique_rated else 0

        return SessionSummary(
            session_id=st.session_id,
            rating_counts=dict(st.rating_counts),
            unique_rated=unique_rated,
            retention_pct=retention,
            streak=st.streak,
            elapsed_seconds=self._timer.elapsed if elapsed is None else elapsed,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _forward(self, command: Command, new_state: ItemState) -> RatingEvent:
        st = self._state
        self._items[command.item_id] = self._items[command.item_id].with_state(new_state)

        event = RatingEvent.from_state(command.item_id, command.rating, new_state, self._now())
        st.events.append(event)
        self.outbox.submit(PersistRating(command.item_id, command.rating, new_state))

        st.rating_counts[command.rating] += 1
        st.streak = command.previous_streak + 1 if command.rating.is_success else 0

        if command.did_requeue:
            st.queue.append(ReviewQueueEntry(item_id=command.item_id, requeued=True))

        st.undo_stack.append(command)
        st.index = command.index + 1
        st.flipped = False
        if st.index >= len(st.queue):
            st.phase = SessionPhase.COMPLETE
        return event

    def _undoable(self) -> bool:
        return self._state is not None and self._state.phase in (
            SessionPhase.ACTIVE,
            SessionPhase.COMPLETE,
        )

    def _violation(self, message: str) -> None:
        if self._strict:
            raise InvalidOperation(message)
        logger.warning(message)


def _reindex_commands(
    commands: list[Command], item_id: str, removed: list[int]
) -> list[Command]:
    """Drop commands for a deleted item and shift the rest past removed positions."""
    kept = []
    for cmd in commands:
        if cmd.item_id == item_id:
            continue
        shift = sum(1 for pos in removed if pos < cmd.index)
        kept.append(replace(cmd, index=cmd.index - shift) if shift else cmd)
    return kept
