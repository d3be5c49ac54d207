"""Match routes: schedule, date changes, availability and calendar import"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from ..models.match import AvailabilityUpdate, CalendarImport, MatchCreate, MatchUpdate
from ..services.calendar_import import InvalidCalendarError, parse_ics
from ..services.predictions import predictions_for_member
from ..services.readiness import index_availability
from ..services.store import TeamStore
from .deps import get_store, get_today, get_window_days, require_team
from .websocket import publish_snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def get_match_or_404(store: TeamStore, team: dict, match_id: str) -> dict:
    match = store.get_match(team["id"], match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def get_member_or_404(store: TeamStore, team: dict, member_id: str) -> dict:
    member = store.get_member(team["id"], member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


def describe(store: TeamStore, team: dict, match: dict, today: date, window_days: int) -> dict:
    return store.describe_match(
        team,
        match,
        store.list_members(team["id"]),
        store.list_availability(team["id"]),
        store.get_predictions(team["id"]),
        today,
        window_days,
    )


@router.get("/{slug}/matches")
async def list_matches(
    include_past: bool = True,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """List matches by date with their availability summary and status"""
    matches = store.describe_matches(team, today, window_days)
    if not include_past:
        matches = [m for m in matches if m["status"] != "past"]
    return matches


@router.post("/{slug}/matches")
async def create_match(
    data: MatchCreate,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Schedule a match"""
    match = store.create_match(team["id"], data.model_dump())
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)


@router.post("/{slug}/matches/import")
async def import_matches(
    data: CalendarImport,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Import matches from an iCalendar export"""
    try:
        candidates = parse_ics(data.ics, team["name"])
    except InvalidCalendarError as e:
        raise HTTPException(status_code=422, detail=str(e))
    new = [c for c in candidates if not store.match_exists(team["id"], c.date, c.opponent)]

    if data.dry_run:
        return {
            "candidates": [c.to_dict() for c in new],
            "skipped": len(candidates) - len(new),
            "imported": [],
        }

    imported = [store.create_match(team["id"], c.to_dict()) for c in new]
    logger.info(f"Imported {len(imported)} matches into team {team['slug']}")
    if imported:
        await publish_snapshot(store, team, today, window_days)

    return {
        "candidates": [c.to_dict() for c in new],
        "skipped": len(candidates) - len(new),
        "imported": imported,
    }


@router.get("/{slug}/matches/{match_id}")
async def get_match(
    match_id: str,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """One match with every member's answer and proposed dates"""
    match = get_match_or_404(store, team, match_id)
    answers = index_availability(store.list_availability(team["id"]))
    members = store.list_members(team["id"])
    predictions = store.get_predictions(team["id"])

    result = describe(store, team, match, today, window_days)
    result["responses"] = [
        {
            "member_id": member["id"],
            "name": member["name"],
            "availability": (
                answers[(member["id"], match_id)].value
                if (member["id"], match_id) in answers else None
            ),
            "proposed_dates": [
                row["predicted_date"]
                for row in predictions_for_member(predictions, match_id, member["id"])
            ],
        }
        for member in members
    ]
    return result


@router.patch("/{slug}/matches/{match_id}")
async def update_match(
    match_id: str,
    data: MatchUpdate,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Change a match's date, time, venue or home flag"""
    match = get_match_or_404(store, team, match_id)
    match = store.update_match(match, data.model_dump(exclude_unset=True))
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)


@router.put("/{slug}/matches/{match_id}/availability/{member_id}")
async def set_availability(
    match_id: str,
    member_id: str,
    data: AvailabilityUpdate,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Record a member's answer for a match, replacing any earlier one"""
    match = get_match_or_404(store, team, match_id)
    get_member_or_404(store, team, member_id)

    store.set_availability(team["id"], match, member_id, data.availability)
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)
