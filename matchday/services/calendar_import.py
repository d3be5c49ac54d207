"""iCalendar import: turn a league's .ics export into candidate matches"""

import logging
import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from icalendar import Calendar

from ..config import settings

logger = logging.getLogger(__name__)

_SIDES = re.compile(r"\s+(?:-|–|:|vs\.?)\s+", re.IGNORECASE)


class InvalidCalendarError(ValueError):
    """Raised when the text is not an iCalendar document"""


@dataclass
class MatchCandidate:
    opponent: str
    date: date
    time: Optional[str] = None
    is_home: bool = True
    venue: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


def _text(value) -> str:
    """Property value as one line of text"""
    return " ".join(str(value).split()) if value is not None else ""


def local_start(start, timezone: str) -> Tuple[date, Optional[str]]:
    """Day and ``HH:MM`` of an event start in the team's timezone.

    All-day events have no time. Floating times are taken as they are;
    zoned and UTC times are converted.
    """
    if not isinstance(start, datetime):
        return start, None
    if start.tzinfo is not None:
        start = start.astimezone(ZoneInfo(timezone))
    return start.date(), start.strftime("%H:%M")


def split_summary(summary: str, team_name: str) -> Tuple[str, bool]:
    """Work out the opponent and whether we play at home.

    ``"Home - Away"`` style summaries are matched against our team name. If
    neither side mentions us the whole summary is taken as the opponent.
    """
    sides = _SIDES.split(summary, maxsplit=1)
    if len(sides) == 2:
        home, away = (side.strip() for side in sides)
        ours = team_name.strip().casefold()
        if ours and ours in home.casefold():
            return away, True
        if ours and ours in away.casefold():
            return home, False
    return summary.strip(), True


def parse_ics(text: str, team_name: str, timezone: Optional[str] = None) -> List[MatchCandidate]:
    """Parse every VEVENT into a :class:`MatchCandidate`, skipping undated ones"""
    timezone = timezone or settings.timezone
    try:
        calendar = Calendar.from_ical(text)
    except ValueError as e:
        raise InvalidCalendarError(f"Not an iCalendar document: {e}") from e

    candidates = []
    for event in calendar.walk("VEVENT"):
        start = event.get("DTSTART")
        if start is None:
            logger.debug(f"Skipping event without DTSTART: {event.get('SUMMARY')}")
            continue
        day, time = local_start(start.dt, timezone)
        opponent, is_home = split_summary(_text(event.get("SUMMARY")), team_name)
        if not opponent:
            continue
        candidates.append(MatchCandidate(
            opponent=opponent,
            date=day,
            time=time,
            is_home=is_home,
            venue=_text(event.get("LOCATION")) or None,
        ))
    return sorted(candidates, key=lambda c: (c.date, c.time or ""))
