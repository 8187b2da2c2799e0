"""
Duel countdown.
A repeating tick bound to one duel id. The owner starts one when the clock
starts and cancels it when the clock pauses or the duel goes away; a tick
that still slips through for a discarded duel stops the loop instead of
touching state.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from floor.config import get_settings

logger = logging.getLogger(__name__)

# Called once per interval with the bound duel id. Returns False to stop ticking.
TickCallback = Callable[[int], Awaitable[bool]]


class DuelTimer:
    """Cancellable repeating action for one duel."""

    def __init__(self, duel_id: int, on_tick: TickCallback, interval: float | None = None):
        self.duel_id = duel_id
        self.interval = get_settings().TICK_SECONDS if interval is None else interval
        self._on_tick = on_tick
        self._task: asyncio.Task | None = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def start(self) -> None:
        """Start ticking on the running event loop. Idempotent."""
        if self._cancelled:
            raise RuntimeError(f"Timer for duel {self.duel_id} was cancelled")
        if self._task is not None and not self._task.done():
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())
        logger.debug("Duel %s timer started (every %ss)", self.duel_id, self.interval)

    def cancel(self) -> None:
        """Stop for good. Safe to call from inside a tick callback."""
        self._cancelled = True
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()
        logger.debug("Duel %s timer cancelled", self.duel_id)

    async def _run(self) -> None:
        try:
            while not self._cancelled:
                await asyncio.sleep(self.interval)
                if self._cancelled:
                    break
                keep_going = await self._on_tick(self.duel_id)
                if not keep_going:
                    break
        except asyncio.CancelledError:
            pass
        finally:
            self._cancelled = True
