"""
One-way persistence outbox between the session engine and the ItemStore.

The engine submits jobs synchronously and never waits for them. Jobs are
issued to the store in submission order by a single asyncio task; a failure
is handed to the error sink and does not stop the remaining jobs.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from spacedrill.domain.models import Item, ItemState, Rating
from spacedrill.domain.ports import ItemStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistRating:
    item_id: str
    rating: Rating
    new_state: ItemState

    async def run(self, store: ItemStore) -> Item:
        return await store.persist_rating(self.item_id, self.rating, self.new_state)


@dataclass(frozen=True)
class RestoreState:
    item_id: str
    prior_state: ItemState

    async def run(self, store: ItemStore) -> Item:
        return await store.restore_state(self.item_id, self.prior_state)


@dataclass(frozen=True)
class DeleteItem:
    item_id: str

    async def run(self, store: ItemStore) -> None:
        await store.delete_item(self.item_id)


PersistenceJob = PersistRating | RestoreState | DeleteItem
ErrorSink = Callable[[Exception, PersistenceJob], None]


def log_persistence_error(exc: Exception, job: PersistenceJob) -> None:
    logger.error(f"Persistence job failed ({job}): {exc}")


class PersistenceOutbox:
    """
    FIFO of persistence jobs drained in the background.

    When no event loop is running at submit time, jobs wait until the next
    `flush()` call.
    """

    def __init__(self, store: ItemStore, on_error: ErrorSink | None = None):
        """
        Args:
            store: The repository (port) jobs are written to.
            on_error: Called with (exception, job) for every failed job.
        """
        self._store = store
        self._on_error = on_error or log_persistence_error
        self._pending: deque[PersistenceJob] = deque()
        self._worker: asyncio.Task | None = None
        self.completed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, job: PersistenceJob) -> None:
        """Queue a job without waiting for it."""
        self._pending.append(job)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop; deferring {job}")
            return

        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._drain())

    async def flush(self) -> None:
        """Wait until every submitted job has been attempted."""
        while True:
            if self._worker is not None and not self._worker.done():
                await self._worker
                continue
            if not self._pending:
                return
            self._worker = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending:
            job = self._pending.popleft()
            try:
                await job.run(self._store)
                self.completed += 1
            except Exception as e:
                self.failed += 1
                try:
                    self._on_error(e, job)
                except Exception as sink_error:
                    logger.error(f"Error sink raised while handling {job}: {sink_error}")
