# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
Request bodies accept snake_case or the front-end's camelCase keys.
"""
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from scheduling.services.lifecycle import (
    ATTENDANCE_STATUSES, EVENT_STATUSES, EVENT_TYPES, TRAINING_STATUSES, canonical,
)

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _iso_date(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    try:
        return dt.date.fromisoformat(v.strip()).isoformat()
    except ValueError:
        raise ValueError("date must be an ISO date (YYYY-MM-DD)")


def _one_of(v: Optional[str], allowed: tuple, field: str) -> Optional[str]:
    if v is None:
        return None
    value = canonical(v, allowed)
    if value is None:
        raise ValueError(f"{field} must be one of {allowed}")
    return value


def _stripped(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


# ── Training Schemas ──

class TrainingCreate(_Request):
    discipline: str = Field(..., min_length=1, max_length=100)
    coach_id: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=255)
    date: str
    time: str = Field(..., pattern=TIME_PATTERN)
    duration: str = Field(..., min_length=1, max_length=50)
    max_capacity: int = Field(..., ge=1)
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return _iso_date(v)

    @field_validator("discipline", "location", "duration")
    @classmethod
    def strip_text(cls, v):
        return _stripped(v)


class TrainingUpdate(_Request):
    discipline: Optional[str] = Field(None, min_length=1, max_length=100)
    coach_id: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    date: Optional[str] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    duration: Optional[str] = Field(None, min_length=1, max_length=50)
    max_capacity: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return _iso_date(v)

    @field_validator("discipline", "location", "duration")
    @classmethod
    def strip_text(cls, v):
        return _stripped(v)


class TrainingStatusChange(_Request):
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _one_of(v, TRAINING_STATUSES, "status")


class AttendanceMark(_Request):
    athlete_id: str = Field(..., min_length=1)
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _one_of(v, ATTENDANCE_STATUSES, "status")


class EnrollmentCreate(_Request):
    athlete_id: str = Field(..., min_length=1)
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: Optional[str]) -> Optional[str]:
        return _one_of(v, ATTENDANCE_STATUSES, "status")


class AttendanceOut(BaseModel):
    id: str
    training_id: str
    athlete_id: str
    status: str
    created_at: str
    updated_at: str


class TrainingOut(BaseModel):
    id: str
    title: Optional[str]
    discipline: str
    coach_id: str
    location: str
    date: str
    time: str
    duration: str
    max_capacity: int
    status: str
    notes: Optional[str]
    attendees: int
    created_at: str
    updated_at: str


class TrainingDetail(TrainingOut):
    attendance: List[AttendanceOut] = []


# ── Event Schemas ──

class EventCreate(_Request):
    title: str = Field(..., min_length=1, max_length=255)
    type: str
    date: str
    time: str = Field(..., pattern=TIME_PATTERN)
    location: str = Field(..., min_length=1, max_length=255)
    capacity: int = Field(..., ge=1)
    description: Optional[str] = Field(None, max_length=5000)

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return _iso_date(v)

    @field_validator("title", "location")
    @classmethod
    def strip_text(cls, v):
        return _stripped(v)

    @field_validator("type")
    @classmethod
    def normalise_type(cls, v: str) -> str:
        return _one_of(v, EVENT_TYPES, "type")


class EventUpdate(_Request):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, ge=1)
    description: Optional[str] = Field(None, max_length=5000)

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return _iso_date(v)

    @field_validator("type")
    @classmethod
    def normalise_type(cls, v: Optional[str]) -> Optional[str]:
        return _one_of(v, EVENT_TYPES, "type")


class EventStatusChange(_Request):
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return _one_of(v, EVENT_STATUSES, "status")


class ParticipantCreate(_Request):
    user_id: str = Field(..., min_length=1)


class ParticipantResult(_Request):
    result: str = Field(..., min_length=1, max_length=255)


class ParticipantOut(BaseModel):
    id: str
    event_id: str
    user_id: str
    result: Optional[str] = None
    created_at: str
    updated_at: str


class EventOut(BaseModel):
    id: str
    title: str
    description: Optional[str]
    type: str
    date: str
    time: str
    location: str
    capacity: int
    status: str
    registered: int
    created_at: str
    updated_at: str


class EventDetail(EventOut):
    participants: List[ParticipantOut] = []


# ── Eligibility Schemas ──

class CoachOut(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    sports: List[str] = []
    team_id: Optional[str] = None


class EligibleCoaches(BaseModel):
    discipline: str
    total: int
    coaches: List[CoachOut]
