"""Session wall-clock timer."""

import asyncio
import logging
import time
from collections.abc import Callable

from spacedrill.domain.constants import TIMER_TICK_SECONDS

logger = logging.getLogger(__name__)


def format_elapsed(seconds: float) -> str:
    """Format as mm:ss, or h:mm:ss once past an hour."""
    total = int(seconds)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


class SessionTimer:
    """
    Measures elapsed session time and optionally ticks once per second.

    Ticks are scheduled on the running event loop, if any; without a loop the
    timer still measures elapsed time but never ticks.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        on_tick: Callable[[float], None] | None = None,
        interval: float = TIMER_TICK_SECONDS,
    ):
        self._clock = clock
        self._on_tick = on_tick
        self._interval = interval
        self._started: float | None = None
        self._stopped: float | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._started is not None and self._stopped is None

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else self._clock()
        return end - self._started

    def start(self) -> None:
        self.cancel_tick()
        self._started = self._clock()
        self._stopped = None
        self._schedule_tick()

    def stop(self) -> float:
        if self.running:
            self._stopped = self._clock()
        self.cancel_tick()
        return self.elapsed

    def cancel_tick(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_tick(self) -> None:
        if self._on_tick is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if not self.running:
            return
        try:
            self._on_tick(self.elapsed)
        except Exception as e:
            logger.warning(f"Timer tick callback failed: {e}")
        self._schedule_tick()
