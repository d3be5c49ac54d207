"""Match, availability and date proposal models"""

from pydantic import BaseModel, BeforeValidator, Field, field_validator
from typing import Annotated, Optional

from ..services.readiness import Availability, InvalidDateError, normalize_date


def _iso_date(value):
    try:
        return normalize_date(value).isoformat()
    except InvalidDateError as e:
        raise ValueError(str(e)) from e


# Accepts yyyy-mm-dd or dd.mm.yyyy, always stored as yyyy-mm-dd
IsoDate = Annotated[str, BeforeValidator(_iso_date)]


class MatchCreate(BaseModel):
    opponent: str = Field(..., min_length=1, max_length=100)
    date: IsoDate
    time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}$")
    is_home: bool = True
    venue: Optional[str] = Field(None, max_length=200)


class MatchUpdate(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = Field(None, pattern=r"^\d{1,2}:\d{2}$")
    venue: Optional[str] = Field(None, max_length=200)
    is_home: Optional[bool] = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize(cls, value):
        return None if value is None else _iso_date(value)


class AvailabilityUpdate(BaseModel):
    availability: Availability


class PredictionCreate(BaseModel):
    member_id: str
    date: IsoDate
    availability: Availability = Availability.AVAILABLE


class PredictionChoice(BaseModel):
    date: IsoDate


class CalendarImport(BaseModel):
    ics: str = Field(..., min_length=1)
    dry_run: bool = False
