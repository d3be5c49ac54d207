"""Current day in the team's timezone, refreshed periodically"""

import asyncio
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def current_day(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


class TodayWatcher:
    """Recomputes "today" every ``interval_minutes`` and reports rollovers."""

    def __init__(
        self,
        timezone: str,
        interval_minutes: int,
        on_change: Optional[Callable[[date], Awaitable[None]]] = None,
        clock: Callable[[str], date] = current_day,
    ):
        self.timezone = timezone
        self.interval_minutes = interval_minutes
        self.on_change = on_change
        self.clock = clock
        self.today = clock(timezone)
        self._task: Optional[asyncio.Task] = None

    async def refresh(self) -> bool:
        """Re-read the clock; returns True when the day changed"""
        day = self.clock(self.timezone)
        if day == self.today:
            return False
        logger.info(f"Day rolled over: {self.today} -> {day}")
        self.today = day
        if self.on_change:
            await self.on_change(day)
        return True

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval_minutes * 60)
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Failed to refresh current day: {e}")

    def start(self):
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
