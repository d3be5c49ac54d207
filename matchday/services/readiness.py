"""
Availability & Readiness Engine

Pure functions deriving a match's readiness from the roster, the
availability table and the team's required headcount. Nothing here touches
the database; callers pass every collection in explicitly.
"""
import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

DEFAULT_WINDOW_DAYS = 14

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_DOTTED_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")


class Availability(str, Enum):
    AVAILABLE = "available"
    NOT_AVAILABLE = "not_available"
    MAYBE = "maybe"


class MatchStatus(str, Enum):
    READY = "ready"          # enough confirmed players
    POSSIBLE = "possible"    # reachable with maybes, far out, or pending a date vote
    NOT_READY = "not_ready"  # short on players and coming up soon
    PAST = "past"


class InvalidDateError(ValueError):
    """Raised when a date string is neither ISO nor dd.mm.yyyy"""


DateLike = Union[date, str]


def normalize_date(value: DateLike) -> date:
    """Convert ``yyyy-mm-dd``, ``dd.mm.yyyy`` or a ``date`` into a ``date``.

    Display strings must never be compared directly: ``"01.02.2025"`` sorts
    before ``"15.01.2025"`` although it is the later day.
    """
    if isinstance(value, date):
        return value
    text = str(value).strip()

    match = _ISO_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
    else:
        match = _DOTTED_DATE.match(text)
        if not match:
            raise InvalidDateError(f"Unrecognized date: {value!r}")
        day, month, year = (int(part) for part in match.groups())

    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {value!r}: {e}") from e


def format_display_date(value: DateLike) -> str:
    """Format a date as ``dd.mm.yyyy``"""
    return normalize_date(value).strftime("%d.%m.%Y")


def _member_id(member) -> str:
    return member["id"] if isinstance(member, Mapping) else member.id


def _record_field(record, name: str):
    return record[name] if isinstance(record, Mapping) else getattr(record, name)


@dataclass(frozen=True)
class AvailabilitySummary:
    available: int = 0
    not_available: int = 0
    maybe: int = 0
    total: int = 0

    @property
    def no_response(self) -> int:
        return self.total - self.available - self.not_available - self.maybe

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "not_available": self.not_available,
            "maybe": self.maybe,
            "no_response": self.no_response,
            "total": self.total,
        }


def index_availability(records: Iterable) -> Dict[Tuple[str, str], Availability]:
    """Index records by ``(member_id, match_id)``; the first record wins."""
    index: Dict[Tuple[str, str], Availability] = {}
    for record in records:
        key = (_record_field(record, "member_id"), _record_field(record, "match_id"))
        if key not in index:
            index[key] = Availability(_record_field(record, "availability"))
    return index


def summarize(match_id: str, members: Iterable, availability_records: Iterable) -> AvailabilitySummary:
    """Count the roster's answers for one match.

    ``total`` is the roster size, so members without an answer show up as
    ``no_response``. Records of members outside the roster are ignored.
    """
    index = index_availability(availability_records)
    counts = {answer: 0 for answer in Availability}
    total = 0
    for member in members:
        total += 1
        answer = index.get((_member_id(member), match_id))
        if answer is not None:
            counts[answer] += 1

    return AvailabilitySummary(
        available=counts[Availability.AVAILABLE],
        not_available=counts[Availability.NOT_AVAILABLE],
        maybe=counts[Availability.MAYBE],
        total=total,
    )


def headcount_status(summary: AvailabilitySummary, players_needed: int) -> Optional[MatchStatus]:
    """Ready/possible from the counts alone, ``None`` when neither threshold is met."""
    if summary.available >= players_needed:
        return MatchStatus.READY
    if summary.available + summary.maybe >= players_needed:
        return MatchStatus.POSSIBLE
    return None


def has_predictions(match_id: str, predictions: Optional[Mapping]) -> bool:
    if not predictions:
        return False
    groups = predictions.get(match_id) or {}
    return any(bool(rows) for rows in groups.values())


def derive_status(
    match_id: str,
    match_date: DateLike,
    today: DateLike,
    members: Iterable,
    availability_records: Iterable,
    players_needed: int,
    predictions: Optional[Mapping] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> MatchStatus:
    """Derive the readiness status of a match.

    Rules are checked in order and the first hit wins:

    1. the match date lies before ``today`` -> ``PAST``
    2. alternate dates are being voted on -> ``POSSIBLE``
    3. enough available players -> ``READY``
    4. enough available plus maybe -> ``POSSIBLE``
    5. the match is within ``window_days`` of today -> ``NOT_READY``
    6. anything further out -> ``POSSIBLE``
    """
    day = normalize_date(match_date)
    current = normalize_date(today)

    if day < current:
        return MatchStatus.PAST

    if has_predictions(match_id, predictions):
        return MatchStatus.POSSIBLE

    summary = summarize(match_id, members, availability_records)
    status = headcount_status(summary, players_needed)
    if status is not None:
        return status

    if day <= current + timedelta(days=window_days):
        return MatchStatus.NOT_READY

    return MatchStatus.POSSIBLE
