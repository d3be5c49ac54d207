"""Team store: teams, members, matches, availability and date proposals"""

import logging
import re
import secrets
import string
from datetime import date
from typing import Dict, List, Optional

from ..config import settings
from . import predictions as proposals
from .database import Database, Q
from .readiness import (
    Availability,
    derive_status,
    format_display_date,
    normalize_date,
    summarize,
)

logger = logging.getLogger(__name__)

_UMLAUTS = str.maketrans({"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"})


def slugify(name: str) -> str:
    """Lowercase, ASCII-only, dash separated"""
    text = name.strip().lower().translate(_UMLAUTS)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-") or "team"


def split_member_names(raw) -> List[str]:
    """Accept ``"Alice, Bob"`` or ``["Alice", "Bob"]``; drop blanks"""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    return [part.strip() for part in parts if part and part.strip()]


class TeamStore:
    """Server-side source of truth for all teams

    One TinyDB file holds every team; all rows carry a ``team_id``.
    """

    def __init__(self, db: Database, access_code_length: int = 4):
        self.db = db
        self.access_code_length = access_code_length

    def initialize(self):
        self.db.initialize()

    def close(self):
        self.db.close()

    # =========================================================================
    # Team Operations
    # =========================================================================

    def generate_access_code(self) -> str:
        return "".join(secrets.choice(string.digits) for _ in range(self.access_code_length))

    def create_team(self, name: str, creator_name: str, member_names: List[str], players_needed: int) -> dict:
        """Create a team with its creator and initial members"""
        team = {
            "id": self.db.generate_id(),
            "name": name.strip(),
            "players_needed": players_needed,
            "access_code": self.generate_access_code(),
            "created_at": self.db.timestamp(),
        }
        team["slug"] = f"{slugify(name)}-{team['id']}"
        self.db.teams.insert(team)
        logger.info(f"Team created: {team['slug']}")

        self.add_member(team["id"], creator_name)
        seen = {creator_name.strip().casefold()}
        for member_name in member_names:
            if member_name.casefold() in seen:
                continue
            seen.add(member_name.casefold())
            self.add_member(team["id"], member_name)
        return team

    def get_team(self, slug: str) -> Optional[dict]:
        return self.db.teams.get(Q.slug == slug)

    @staticmethod
    def check_access_code(team: dict, code: Optional[str]) -> bool:
        if not code:
            return False
        return secrets.compare_digest(str(code), team["access_code"])

    # =========================================================================
    # Member Operations
    # =========================================================================

    def list_members(self, team_id: str) -> List[dict]:
        return self.db.members.search(Q.team_id == team_id)

    def get_member(self, team_id: str, member_id: str) -> Optional[dict]:
        return self.db.members.get((Q.team_id == team_id) & (Q.id == member_id))

    def find_member_by_name(self, team_id: str, name: str) -> Optional[dict]:
        wanted = name.strip().casefold()
        for member in self.list_members(team_id):
            if member["name"].casefold() == wanted:
                return member
        return None

    def add_member(self, team_id: str, name: str) -> dict:
        member = {
            "id": self.db.generate_id(),
            "team_id": team_id,
            "name": name.strip(),
            "joined_at": self.db.timestamp(),
        }
        self.db.members.insert(member)
        logger.info(f"Member {member['id']} joined team {team_id}")
        return member

    # =========================================================================
    # Match Operations
    # =========================================================================

    def list_matches(self, team_id: str) -> List[dict]:
        matches = self.db.matches.search(Q.team_id == team_id)
        return sorted(matches, key=lambda m: (m["date"], m.get("time") or ""))

    def get_match(self, team_id: str, match_id: str) -> Optional[dict]:
        return self.db.matches.get((Q.team_id == team_id) & (Q.id == match_id))

    def create_match(self, team_id: str, data: dict) -> dict:
        match = {
            "id": self.db.generate_id(),
            "team_id": team_id,
            "opponent": data["opponent"].strip(),
            "date": normalize_date(data["date"]).isoformat(),
            "time": data.get("time"),
            "is_home": data.get("is_home", True),
            "venue": data.get("venue"),
            "original_date": None,
            "created_at": self.db.timestamp(),
        }
        self.db.matches.insert(match)
        logger.info(f"Match {match['id']} created for team {team_id} on {match['date']}")
        return match

    def update_match(self, match: dict, updates: dict) -> dict:
        """Apply edits; a date change keeps the first scheduled date as ``original_date``"""
        updates = dict(updates)
        if updates.get("date"):
            new_date = normalize_date(updates["date"]).isoformat()
            if new_date != match["date"]:
                updates["original_date"] = match.get("original_date") or match["date"]
            updates["date"] = new_date
        else:
            updates.pop("date", None)

        if updates:
            self.db.matches.update(updates, Q.id == match["id"])
            logger.info(f"Match {match['id']} updated: {sorted(updates)}")
        return {**match, **updates}

    def match_exists(self, team_id: str, match_date: date, opponent: str) -> bool:
        wanted = opponent.strip().casefold()
        return any(
            m["date"] == match_date.isoformat() and m["opponent"].casefold() == wanted
            for m in self.list_matches(team_id)
        )

    # =========================================================================
    # Availability Operations
    # =========================================================================

    def list_availability(self, team_id: str) -> List[dict]:
        """Answers given for each match's current date

        Answers are tied to the date they were given for; after a date change
        they stay stored under the old date and no longer count.
        """
        current = {m["id"]: m["date"] for m in self.db.matches.search(Q.team_id == team_id)}
        return [
            record for record in self.db.availability.search(Q.team_id == team_id)
            if record.get("match_date") == current.get(record["match_id"])
        ]

    def set_availability(self, team_id: str, match: dict, member_id: str, availability: Availability) -> dict:
        """Store the member's answer, replacing any earlier one for this date"""
        record = {
            "team_id": team_id,
            "match_id": match["id"],
            "match_date": match["date"],
            "member_id": member_id,
            "availability": Availability(availability).value,
            "updated_at": self.db.timestamp(),
        }
        self.db.availability.upsert(
            record,
            (Q.match_id == match["id"]) & (Q.member_id == member_id) & (Q.match_date == match["date"])
        )
        logger.info(f"Member {member_id} answered {record['availability']} for match {match['id']} on {match['date']}")
        return record

    # =========================================================================
    # Date Proposal Operations
    # =========================================================================

    def get_predictions(self, team_id: str) -> Dict[str, Dict[str, Dict[str, dict]]]:
        """Nested ``match_id -> date -> member_id -> prediction`` mapping"""
        return {
            doc["match_id"]: doc["dates"]
            for doc in self.db.predictions.search(Q.team_id == team_id)
        }

    def _save_predictions(self, team_id: str, match_id: str, mapping: dict):
        groups = mapping.get(match_id)
        if groups:
            self.db.predictions.upsert(
                {"team_id": team_id, "match_id": match_id, "dates": groups},
                Q.match_id == match_id
            )
        else:
            self.db.predictions.remove(Q.match_id == match_id)

    def add_prediction(self, team_id: str, match_id: str, predicted_date, member_id: str, availability: Availability) -> dict:
        key = normalize_date(predicted_date).isoformat()
        mapping = proposals.add_prediction(
            self.get_predictions(team_id), match_id, key, member_id, availability
        )
        self._save_predictions(team_id, match_id, mapping)
        logger.info(f"Member {member_id} proposed {key} for match {match_id}")
        return mapping[match_id][key][member_id]

    def remove_prediction(self, team_id: str, match_id: str, member_id: str):
        mapping = proposals.remove_prediction(self.get_predictions(team_id), match_id, member_id)
        self._save_predictions(team_id, match_id, mapping)
        logger.info(f"Member {member_id} withdrew proposals for match {match_id}")

    def choose_predicted_date(self, team_id: str, match: dict, predicted_date) -> dict:
        """Make a proposed date the match's date and drop its proposals"""
        updated, mapping = proposals.choose_predicted_date(
            match, self.get_predictions(team_id), predicted_date
        )
        changes = {
            key: updated[key]
            for key in ("date", "original_date")
            if updated.get(key) != match.get(key)
        }
        if changes:
            self.db.matches.update(changes, Q.id == match["id"])
        self._save_predictions(team_id, match["id"], mapping)
        logger.info(f"Match {match['id']} moved to {updated['date']}")
        return updated

    # =========================================================================
    # Projections
    # =========================================================================

    def describe_match(
        self,
        team: dict,
        match: dict,
        members: List[dict],
        availability: List[dict],
        predictions: dict,
        today: date,
        window_days: int,
    ) -> dict:
        """A match decorated with its summary, status and date proposals"""
        summary = summarize(match["id"], members, availability)
        status = derive_status(
            match["id"],
            match["date"],
            today,
            members,
            availability,
            team["players_needed"],
            predictions=predictions,
            window_days=window_days,
        )
        return {
            **match,
            "display_date": format_display_date(match["date"]),
            "display_original_date": (
                format_display_date(match["original_date"]) if match.get("original_date") else None
            ),
            "summary": summary.to_dict(),
            "status": status.value,
            "prediction_groups": proposals.prediction_groups(
                match["id"], members, predictions, team["players_needed"]
            ),
        }

    def describe_matches(self, team: dict, today: date, window_days: int) -> List[dict]:
        members = self.list_members(team["id"])
        availability = self.list_availability(team["id"])
        predictions = self.get_predictions(team["id"])
        return [
            self.describe_match(team, match, members, availability, predictions, today, window_days)
            for match in self.list_matches(team["id"])
        ]

    def snapshot(self, team: dict, today: date, window_days: int) -> dict:
        """Full team state as pushed to clients"""
        return {
            "team": public_team(team),
            "members": self.list_members(team["id"]),
            "matches": self.describe_matches(team, today, window_days),
            "availability": [
                {k: r[k] for k in ("match_id", "member_id", "availability")}
                for r in self.list_availability(team["id"])
            ],
            "today": today.isoformat(),
        }


def public_team(team: dict) -> dict:
    """Team fields that are safe to show without the access code"""
    return {k: v for k, v in team.items() if k != "access_code"}


def build_share_url(team: dict, base_url: Optional[str] = None) -> str:
    base = base_url or settings.public_base_url
    return f"{base.rstrip('/')}/team/{team['slug']}?code={team['access_code']}"
