"""Team and member models"""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    creator_name: str = Field(..., min_length=1, max_length=100)
    member_names: Union[str, List[str], None] = None  # "Alice, Bob" or a list
    players_needed: int = Field(..., ge=1, le=100)

    @field_validator("name", "creator_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class Member(BaseModel):
    id: str
    team_id: str
    name: str
    joined_at: str


class ShareInfo(BaseModel):
    url: str
    access_code: str
    slug: str
