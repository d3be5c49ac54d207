"""Shared route dependencies: store access, current day and team access codes"""

from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status

from ..config import settings
from ..services.clock import TodayWatcher
from ..services.database import Database
from ..services.store import TeamStore

store = TeamStore(Database(Path(settings.database_path)), settings.access_code_length)
today_watcher = TodayWatcher(settings.timezone, settings.today_refresh_minutes)


def get_store() -> TeamStore:
    store.initialize()
    return store


def get_today() -> date:
    return today_watcher.today


def get_window_days() -> int:
    return settings.ready_window_days


def get_team_or_404(store: TeamStore, slug: str) -> dict:
    team = store.get_team(slug)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


async def require_team(
    slug: str,
    code: Optional[str] = Query(None, description="Team access code"),
    x_access_code: Optional[str] = Header(None),
    store: TeamStore = Depends(get_store),
) -> dict:
    """Resolve the team from the path and check its access code."""
    team = get_team_or_404(store, slug)
    if not store.check_access_code(team, code or x_access_code):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access code required"
        )
    return team
