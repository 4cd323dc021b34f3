# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: training session lifecycle.

Composes coach eligibility, the capacity gate and the session/attendance state
machines into the operations exposed by the training controller.
"""
import uuid
from typing import Any, Dict, List, Optional

from scheduling.core.errors import (
    IneligibleCoach, InvalidTransition, NoEligibleCoach, NotFound,
)
from scheduling.core.logging import get_logger
from scheduling.metrics import ACTIVITIES_CREATED, ATTENDANCE_MARKED, STATUS_TRANSITIONS
from scheduling.repositories.training_repository import TrainingRepository
from scheduling.services import lifecycle
from scheduling.services.capacity import CapacityGate
from scheduling.services.eligibility import EligibilityResolver

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("title", "discipline", "coach_id", "location", "date", "time",
                    "duration", "max_capacity", "notes")
# Optional text that an explicit null clears.
NULLABLE_FIELDS = ("title", "notes")


def _attendance_writable(session: Dict[str, Any]) -> None:
    lifecycle.ensure_attendance_writable(session["status"])


class TrainingService:
    def __init__(self, repo: TrainingRepository, gate: CapacityGate,
                 eligibility: EligibilityResolver, directory,
                 default_attendance_status: str = "Present"):
        self._repo = repo
        self._gate = gate
        self._eligibility = eligibility
        self._directory = directory
        self._default_status = default_attendance_status

    # ── Commands ──

    def create_training(self, discipline: str, coach_id: Optional[str], location: str,
                        date: str, time: str, duration: str, max_capacity: int,
                        title: Optional[str] = None,
                        notes: Optional[str] = None) -> Dict[str, Any]:
        """Schedule a session. Without ``coach_id`` the first eligible coach is assigned."""
        eligible = self._eligibility.eligible_coaches(discipline)
        if not coach_id:
            if not eligible:
                raise NoEligibleCoach(
                    f"No coach is eligible for discipline '{discipline}'",
                    discipline=discipline,
                )
            coach_id = eligible[0].id
        elif coach_id not in {c.id for c in eligible}:
            raise IneligibleCoach(
                f"Coach {coach_id} is not eligible for discipline '{discipline}'",
                discipline=discipline, coach_id=coach_id,
            )

        record = self._repo.insert({
            "id": str(uuid.uuid4()),
            "title": title,
            "discipline": discipline,
            "coach_id": coach_id,
            "location": location,
            "date": date,
            "time": time,
            "duration": duration,
            "max_capacity": max_capacity,
            "status": lifecycle.INITIAL_STATUS[lifecycle.TRAINING],
            "notes": notes,
        })
        ACTIVITIES_CREATED.labels(activity=lifecycle.TRAINING).inc()
        logger.info("Training created id=%s discipline=%s coach=%s capacity=%d",
                    record["id"], discipline, coach_id, max_capacity)
        return {**record, "attendees": 0}

    def update_training(self, training_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update. Raises NotFound / IneligibleCoach / CapacityBelowEnrollment."""
        current = self._require(training_id)
        changes = {k: v for k, v in patch.items()
                   if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)
                   and v != current[k]}

        if "discipline" in changes or "coach_id" in changes:
            discipline = changes.get("discipline", current["discipline"])
            coach_id = changes.get("coach_id", current["coach_id"])
            allowed = self._eligibility.eligible_coach_ids(
                discipline, retain_coach_id=current["coach_id"],
            )
            if coach_id not in allowed:
                raise IneligibleCoach(
                    f"Coach {coach_id} is not eligible for discipline '{discipline}'",
                    discipline=discipline, coach_id=coach_id,
                )

        with self._repo.transaction() as conn:
            if self._repo.lock(conn, training_id) is None:
                raise NotFound(f"Training session {training_id} not found")
            fields = dict(changes)
            if "max_capacity" in fields:
                self._gate.change_capacity(conn, training_id, fields.pop("max_capacity"))
            self._repo.update_fields(conn, training_id, fields)

        if changes:
            logger.info("Training updated id=%s fields=%s", training_id, sorted(changes))
        return self.get_training(training_id)

    def delete_training(self, training_id: str) -> Dict[str, Any]:
        deleted = self._repo.delete(training_id)
        return {"status": "deleted", "id": training_id, "deleted": deleted}

    def change_status(self, training_id: str, new_status: str) -> Dict[str, Any]:
        with self._repo.transaction() as conn:
            current = self._repo.lock(conn, training_id)
            if current is None:
                raise NotFound(f"Training session {training_id} not found")
            old_status = current["status"]
            lifecycle.ensure_transition(lifecycle.TRAINING, old_status, new_status)
            if not self._repo.compare_and_set_status(conn, training_id, old_status, new_status):
                raise InvalidTransition(
                    f"Training session {training_id} changed status concurrently; "
                    f"'{new_status}' was not applied",
                    current=old_status, requested=new_status,
                )
        STATUS_TRANSITIONS.labels(activity=lifecycle.TRAINING, from_status=old_status,
                                  to_status=new_status).inc()
        logger.info("Training status changed id=%s from=%s to=%s",
                    training_id, old_status, new_status)
        return self.get_training(training_id)

    def enroll_athlete(self, training_id: str, athlete_id: str,
                       status: Optional[str] = None) -> Dict[str, Any]:
        self._require(training_id)
        self._require_person(athlete_id)
        return self._gate.try_enroll(
            training_id, athlete_id, {"status": status or self._default_status},
            guard=_attendance_writable,
        )

    def unenroll_athlete(self, training_id: str, athlete_id: str) -> Dict[str, Any]:
        removed = self._gate.unenroll(training_id, athlete_id, guard=_attendance_writable)
        return {"status": "unenrolled", "training_id": training_id,
                "athlete_id": athlete_id, "removed": removed}

    def mark_attendance(self, training_id: str, athlete_id: str,
                        status: str) -> Dict[str, Any]:
        """Set an athlete's attendance, enrolling them first if needed.

        Raises SessionClosed once the session is Completed or Cancelled.
        """
        with self._repo.transaction() as conn:
            session = self._repo.lock(conn, training_id)
            if session is None:
                raise NotFound(f"Training session {training_id} not found")
            lifecycle.ensure_attendance_writable(session["status"])
            record = self._repo.update_enrollment(conn, training_id, athlete_id,
                                                  {"status": status})

        if record is None:
            self._require_person(athlete_id)
            record = self._gate.try_enroll(training_id, athlete_id, {"status": status},
                                          guard=_attendance_writable)

        ATTENDANCE_MARKED.labels(status=status).inc()
        logger.info("Attendance marked training=%s athlete=%s status=%s",
                    training_id, athlete_id, status)
        return record

    # ── Queries ──

    def get_training(self, training_id: str) -> Dict[str, Any]:
        training = self._repo.get_detail(training_id)
        if training is None:
            raise NotFound(f"Training session {training_id} not found")
        return training

    def list_trainings(self, status=None, coach_id=None, discipline=None,
                       date_from=None, date_to=None) -> List[Dict[str, Any]]:
        return self._repo.list_trainings(status, coach_id, discipline, date_from, date_to)

    def get_attendance(self, training_id: str) -> List[Dict[str, Any]]:
        self._require(training_id)
        return self._repo.get_attendance(training_id)

    # ── Private ──

    def _require(self, training_id: str) -> Dict[str, Any]:
        training = self._repo.get(training_id)
        if training is None:
            raise NotFound(f"Training session {training_id} not found")
        return training

    def _require_person(self, person_id: str):
        person = self._directory.get_person(person_id)
        if person is None:
            raise NotFound(f"Person {person_id} is not known to the member directory")
        return person
