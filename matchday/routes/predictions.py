"""Date proposal routes"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from ..models.match import PredictionChoice, PredictionCreate
from ..services.predictions import prediction_groups
from ..services.store import TeamStore
from .deps import get_store, get_today, get_window_days, require_team
from .matches import describe, get_match_or_404, get_member_or_404
from .websocket import publish_snapshot

router = APIRouter()


@router.get("/{slug}/matches/{match_id}/predictions")
async def list_predictions(
    match_id: str,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
):
    """Proposed dates with their turnout and status"""
    get_match_or_404(store, team, match_id)
    return prediction_groups(
        match_id,
        store.list_members(team["id"]),
        store.get_predictions(team["id"]),
        team["players_needed"],
    )


@router.post("/{slug}/matches/{match_id}/predictions")
async def add_prediction(
    match_id: str,
    data: PredictionCreate,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Propose a date, or join an existing proposal, with your availability"""
    match = get_match_or_404(store, team, match_id)
    get_member_or_404(store, team, data.member_id)

    store.add_prediction(team["id"], match_id, data.date, data.member_id, data.availability)
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)


@router.delete("/{slug}/matches/{match_id}/predictions/{member_id}")
async def remove_prediction(
    match_id: str,
    member_id: str,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Withdraw a member from every proposed date of the match"""
    match = get_match_or_404(store, team, match_id)
    get_member_or_404(store, team, member_id)

    store.remove_prediction(team["id"], match_id, member_id)
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)


@router.post("/{slug}/matches/{match_id}/predictions/choose")
async def choose_predicted_date(
    match_id: str,
    data: PredictionChoice,
    team: dict = Depends(require_team),
    store: TeamStore = Depends(get_store),
    today: date = Depends(get_today),
    window_days: int = Depends(get_window_days),
):
    """Move the match to a proposed date and close the vote"""
    match = get_match_or_404(store, team, match_id)

    proposed = store.get_predictions(team["id"]).get(match_id, {})
    if data.date not in proposed and data.date != match["date"]:
        raise HTTPException(status_code=400, detail="Date was not proposed for this match")

    match = store.choose_predicted_date(team["id"], match, data.date)
    await publish_snapshot(store, team, today, window_days)
    return describe(store, team, match, today, window_days)
