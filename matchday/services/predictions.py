"""
Date-proposal resolution

Members may propose alternate dates for a match and state whether they could
play on them. Proposals live in a nested mapping::

    {match_id: {predicted_date: {member_id: prediction}}}

Every helper returns a new mapping and leaves its input untouched.
"""
from copy import deepcopy
from typing import Dict, Iterable, List, Mapping, Tuple

from .readiness import (
    Availability,
    AvailabilitySummary,
    MatchStatus,
    format_display_date,
    headcount_status,
    normalize_date,
    summarize,
)

Predictions = Dict[str, Dict[str, Dict[str, dict]]]


def add_prediction(
    predictions: Mapping,
    match_id: str,
    predicted_date: str,
    member_id: str,
    availability: Availability,
) -> Predictions:
    """Insert or replace the member's row in the group for ``predicted_date``."""
    updated = deepcopy(dict(predictions))
    group = updated.setdefault(match_id, {}).setdefault(predicted_date, {})
    group[member_id] = {
        "member_id": member_id,
        "match_id": match_id,
        "predicted_date": predicted_date,
        "availability": Availability(availability).value,
    }
    return updated


def remove_prediction(predictions: Mapping, match_id: str, member_id: str) -> Predictions:
    """Withdraw the member from every date group of the match.

    Groups left without rows are dropped, and so is the match entry once it
    has no groups.
    """
    updated = deepcopy(dict(predictions))
    groups = updated.get(match_id)
    if not groups:
        return updated

    remaining = {}
    for predicted_date, rows in groups.items():
        rows = {mid: row for mid, row in rows.items() if mid != member_id}
        if rows:
            remaining[predicted_date] = rows

    if remaining:
        updated[match_id] = remaining
    else:
        updated.pop(match_id, None)
    return updated


def choose_predicted_date(match: Mapping, predictions: Mapping, predicted_date: str) -> Tuple[dict, Predictions]:
    """Promote a proposed date to the match's date.

    Returns the updated match and the predictions with the match's groups
    cleared. The first scheduled date is kept as ``original_date``; choosing
    the date the match already has changes nothing on the match.
    """
    updated_match = dict(match)
    new_date = normalize_date(predicted_date).isoformat()
    if normalize_date(updated_match["date"]).isoformat() != new_date:
        updated_match["original_date"] = updated_match.get("original_date") or updated_match["date"]
        updated_match["date"] = new_date

    updated = deepcopy(dict(predictions))
    updated.pop(updated_match["id"], None)
    return updated_match, updated


def predictions_for_member(predictions: Mapping, match_id: str, member_id: str) -> List[dict]:
    groups = predictions.get(match_id) or {}
    return [rows[member_id] for rows in groups.values() if member_id in rows]


def prediction_status(summary: AvailabilitySummary, players_needed: int) -> MatchStatus:
    """A proposal is ready or possible, never alarming."""
    return headcount_status(summary, players_needed) or MatchStatus.POSSIBLE


def prediction_groups(
    match_id: str,
    members: Iterable,
    predictions: Mapping,
    players_needed: int,
) -> List[dict]:
    """Summaries and statuses of every proposed date for a match, by date."""
    members = list(members)
    groups = predictions.get(match_id) or {}
    result = []
    for predicted_date in sorted(groups, key=normalize_date):
        rows = groups[predicted_date]
        summary = summarize(match_id, members, rows.values())
        result.append({
            "date": predicted_date,
            "display_date": format_display_date(predicted_date),
            "summary": summary.to_dict(),
            "status": prediction_status(summary, players_needed).value,
            "votes": list(rows.values()),
        })
    return result
