# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: event CRUD, status, participant registration and results."""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from scheduling.core.dependencies import get_event_service
from scheduling.schemas import (
    EventCreate, EventDetail, EventOut, EventStatusChange, EventUpdate,
    ParticipantCreate, ParticipantOut, ParticipantResult,
)
from scheduling.services import lifecycle
from scheduling.services.event_service import EventService

router = APIRouter(prefix="/api/v1/events", tags=["Events"])


def _validate_id(event_id: str) -> None:
    try:
        uuid.UUID(event_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid event ID format")


def _filter(value: Optional[str], allowed: tuple, name: str) -> Optional[str]:
    if value is None:
        return None
    canonical = lifecycle.canonical(value, allowed)
    if canonical is None:
        raise HTTPException(status_code=422, detail=f"{name} must be one of {allowed}")
    return canonical


@router.post("", status_code=201, response_model=EventOut)
def create_event(body: EventCreate,
                 service: EventService = Depends(get_event_service)):
    result = service.create_event(
        title=body.title, event_type=body.type, date=body.date, time=body.time,
        location=body.location, capacity=body.capacity, description=body.description,
    )
    return EventOut(**result)


@router.get("", response_model=List[EventOut])
def list_events(
    event_type: Optional[str] = Query(default=None, alias="type"),
    status: Optional[str] = None,
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    service: EventService = Depends(get_event_service),
):
    events = service.list_events(
        event_type=_filter(event_type, lifecycle.EVENT_TYPES, "type"),
        status=_filter(status, lifecycle.EVENT_STATUSES, "status"),
        date_from=date_from, date_to=date_to,
    )
    return [EventOut(**e) for e in events]


@router.get("/{event_id}", response_model=EventDetail)
def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    return EventDetail(**service.get_event(event_id))


@router.patch("/{event_id}", response_model=EventDetail)
def update_event(event_id: str, body: EventUpdate,
                 service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    result = service.update_event(event_id, body.model_dump(exclude_unset=True))
    return EventDetail(**result)


@router.delete("/{event_id}")
def delete_event(event_id: str, service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    return service.delete_event(event_id)


@router.post("/{event_id}/status", response_model=EventDetail)
def change_status(event_id: str, body: EventStatusChange,
                  service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    return EventDetail(**service.change_status(event_id, body.status))


@router.post("/{event_id}/participants", status_code=201, response_model=ParticipantOut)
def register_participant(event_id: str, body: ParticipantCreate,
                         service: EventService = Depends(get_event_service)):
    """Register a member; rejected once the event is full or closed."""
    _validate_id(event_id)
    return ParticipantOut(**service.register_participant(event_id, body.user_id))


@router.delete("/{event_id}/participants/{user_id}")
def unregister_participant(event_id: str, user_id: str,
                           service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    return service.unregister_participant(event_id, user_id)


@router.patch("/{event_id}/participants/{user_id}", response_model=ParticipantOut)
def record_result(event_id: str, user_id: str, body: ParticipantResult,
                  service: EventService = Depends(get_event_service)):
    _validate_id(event_id)
    return ParticipantOut(**service.record_result(event_id, user_id, body.result))
