"""Current Day Tests"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from matchday.services.clock import TodayWatcher, current_day


class FakeClock:
    def __init__(self, day: date):
        self.day = day

    def __call__(self, timezone: str) -> date:
        return self.day


class TestTodayWatcher:
    """Test day rollover detection"""

    @pytest.mark.asyncio
    async def test_same_day_is_quiet(self):
        on_change = AsyncMock()
        watcher = TodayWatcher("Europe/Berlin", 30, on_change, clock=FakeClock(date(2025, 3, 10)))

        assert await watcher.refresh() is False
        on_change.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rollover_is_reported(self):
        clock = FakeClock(date(2025, 3, 10))
        on_change = AsyncMock()
        watcher = TodayWatcher("Europe/Berlin", 30, on_change, clock=clock)

        clock.day = date(2025, 3, 11)

        assert await watcher.refresh() is True
        assert watcher.today == date(2025, 3, 11)
        on_change.assert_awaited_once_with(date(2025, 3, 11))

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        watcher = TodayWatcher("Europe/Berlin", 30, clock=FakeClock(date(2025, 3, 10)))

        watcher.start()
        await asyncio.sleep(0)
        assert watcher._task is not None

        await watcher.stop()
        assert watcher._task is None

    def test_current_day_uses_timezone(self):
        assert isinstance(current_day("Europe/Berlin"), date)
