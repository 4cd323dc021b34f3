# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for events and participant registration."""
import uuid
from typing import Any, Dict, List, Optional

from scheduling.core.errors import InvalidTransition, NotFound
from scheduling.core.logging import get_logger
from scheduling.metrics import ACTIVITIES_CREATED, STATUS_TRANSITIONS
from scheduling.repositories.event_repository import EventRepository
from scheduling.services import lifecycle
from scheduling.services.capacity import CapacityGate

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "description", "type", "date", "time", "location", "capacity")
NULLABLE_FIELDS = ("description",)


def _roster_writable(event: Dict[str, Any]) -> None:
    lifecycle.ensure_roster_writable(lifecycle.EVENT, event["status"])


class EventService:
    def __init__(self, repo: EventRepository, gate: CapacityGate, directory):
        self._repo = repo
        self._gate = gate
        self._directory = directory

    def create_event(self, title: str, event_type: str, date: str, time: str,
                     location: str, capacity: int,
                     description: Optional[str] = None) -> Dict[str, Any]:
        record = self._repo.insert({
            "id": str(uuid.uuid4()),
            "title": title,
            "description": description,
            "type": event_type,
            "date": date,
            "time": time,
            "location": location,
            "capacity": capacity,
            "status": lifecycle.INITIAL_STATUS[lifecycle.EVENT],
        })
        ACTIVITIES_CREATED.labels(activity=lifecycle.EVENT).inc()
        logger.info("Event created id=%s type=%s capacity=%d", record["id"], event_type, capacity)
        return {**record, "registered": 0}

    def update_event(self, event_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        changes = {k: v for k, v in patch.items()
                   if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)}
        with self._repo.transaction() as conn:
            if self._repo.lock(conn, event_id) is None:
                raise NotFound(f"Event {event_id} not found")
            fields = dict(changes)
            if "capacity" in fields:
                self._gate.change_capacity(conn, event_id, fields.pop("capacity"))
            self._repo.update_fields(conn, event_id, fields)
        if changes:
            logger.info("Event updated id=%s fields=%s", event_id, sorted(changes))
        return self.get_event(event_id)

    def delete_event(self, event_id: str) -> Dict[str, Any]:
        deleted = self._repo.delete(event_id)
        return {"status": "deleted", "id": event_id, "deleted": deleted}

    def change_status(self, event_id: str, new_status: str) -> Dict[str, Any]:
        with self._repo.transaction() as conn:
            current = self._repo.lock(conn, event_id)
            if current is None:
                raise NotFound(f"Event {event_id} not found")
            old_status = current["status"]
            lifecycle.ensure_transition(lifecycle.EVENT, old_status, new_status)
            if not self._repo.compare_and_set_status(conn, event_id, old_status, new_status):
                raise InvalidTransition(
                    f"Event {event_id} changed status concurrently; "
                    f"'{new_status}' was not applied",
                    current=old_status, requested=new_status,
                )
        STATUS_TRANSITIONS.labels(activity=lifecycle.EVENT, from_status=old_status,
                                  to_status=new_status).inc()
        logger.info("Event status changed id=%s from=%s to=%s", event_id, old_status, new_status)
        return self.get_event(event_id)

    def register_participant(self, event_id: str, person_id: str) -> Dict[str, Any]:
        if self._repo.get(event_id) is None:
            raise NotFound(f"Event {event_id} not found")
        if self._directory.get_person(person_id) is None:
            raise NotFound(f"Person {person_id} is not known to the member directory")
        return self._gate.try_enroll(event_id, person_id)

    def unregister_participant(self, event_id: str, person_id: str) -> Dict[str, Any]:
        """Idempotent; raises SessionClosed once the event is Completed or Cancelled."""
        removed = self._gate.unenroll(event_id, person_id, guard=_roster_writable)
        return {"status": "unregistered", "event_id": event_id,
                "user_id": person_id, "removed": removed}

    def record_result(self, event_id: str, person_id: str, result: str) -> Dict[str, Any]:
        """Store a participant's result (placing, score). Raises NotFound."""
        with self._repo.transaction() as conn:
            record = self._repo.update_enrollment(conn, event_id, person_id, {"result": result})
        if record is None:
            raise NotFound(f"{person_id} is not registered for event {event_id}")
        logger.info("Result recorded event=%s user=%s", event_id, person_id)
        return record

    def get_event(self, event_id: str) -> Dict[str, Any]:
        event = self._repo.get_detail(event_id)
        if event is None:
            raise NotFound(f"Event {event_id} not found")
        return event

    def list_events(self, event_type=None, status=None,
                    date_from=None, date_to=None) -> List[Dict[str, Any]]:
        return self._repo.list_events(event_type, status, date_from, date_to)
