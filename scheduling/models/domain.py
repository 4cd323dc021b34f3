# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Directory models: the normalized Person / Team schema.
Validated once where directory payloads enter the service; NO FastAPI dependency.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_ROLES = ("Athlete", "Coach", "Staff", "Manager", "Admin")


def discipline_key(value: Optional[str]) -> str:
    """Canonical comparison key for a discipline name."""
    return (value or "").strip().lower()


class Person(BaseModel):
    """A club member as published by the member directory."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    role: str
    sports: tuple[str, ...] = ()
    team_id: Optional[str] = Field(default=None, alias="teamId")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None

    @field_validator("role")
    @classmethod
    def normalise_role(cls, v: str) -> str:
        v = v.strip().capitalize()
        if v not in VALID_ROLES:
            raise ValueError(f"role must be one of {VALID_ROLES}")
        return v

    @field_validator("sports", mode="before")
    @classmethod
    def normalise_sports(cls, v):
        if v is None:
            return ()
        seen: dict[str, str] = {}
        for sport in v:
            key = discipline_key(sport)
            if key and key not in seen:
                seen[key] = sport.strip()
        return tuple(seen.values())

    @property
    def is_coach(self) -> bool:
        return self.role == "Coach"

    @property
    def sport_keys(self) -> frozenset[str]:
        return frozenset(discipline_key(s) for s in self.sports)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.id


class Team(BaseModel):
    """A club team and its (optional) assigned coach."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    discipline: str
    coach_id: Optional[str] = Field(default=None, alias="coachId")
    name: Optional[str] = None

    @field_validator("discipline")
    @classmethod
    def strip_discipline(cls, v: str) -> str:
        return v.strip()

    @property
    def discipline_key(self) -> str:
        return discipline_key(self.discipline)
