# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: capacity gate shared by training sessions and events.

Enrollment runs as one store transaction: lock the activity row, check it is
open, reject duplicates, then insert under the capacity guard. Store conflicts
(lock timeouts, serialization failures) are retried a bounded number of times.
"""
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, OperationalError

from scheduling.core.errors import (
    CapacityBelowEnrollment, CapacityExceeded, DuplicateRegistration,
    NotFound, SessionClosed, StoreConflict,
)
from scheduling.core.logging import get_logger
from scheduling.metrics import ENROLLMENTS, ENROLL_RETRIES
from scheduling.repositories.activity_repository import ActivityRepository

logger = get_logger(__name__)

# Called with the locked activity row; raises to veto the write.
Guard = Callable[[Dict[str, Any]], None]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class CapacityGate:
    def __init__(self, repo: ActivityRepository, activity: str,
                 max_retries: int = 3, today: Callable[[], date] = utc_today):
        self._repo = repo
        self._activity = activity
        self._max_retries = max(1, max_retries)
        self._today = today

    def try_enroll(self, activity_id: str, person_id: str,
                   fields: Optional[Dict[str, Any]] = None,
                   guard: Optional[Guard] = None) -> Dict[str, Any]:
        """Create an enrollment record or raise the first failed precondition.

        ``guard`` runs against the locked activity row before any other check.
        """
        for attempt in range(1, self._max_retries + 1):
            try:
                with self._repo.transaction() as conn:
                    record = self._enroll(conn, activity_id, person_id, fields or {}, guard)
            except IntegrityError:
                # UNIQUE (activity, person) caught a concurrent duplicate
                self._reject(activity_id, person_id, "duplicate")
                raise DuplicateRegistration(
                    f"{person_id} is already enrolled in {self._activity} {activity_id}"
                )
            except OperationalError as exc:
                ENROLL_RETRIES.labels(activity=self._activity).inc()
                logger.warning("Enrollment store conflict %s=%s attempt=%d/%d error=%s",
                               self._activity, activity_id, attempt, self._max_retries, exc)
                continue
            ENROLLMENTS.labels(activity=self._activity, outcome="accepted").inc()
            logger.info("Enrollment accepted %s=%s person=%s",
                        self._activity, activity_id, person_id)
            return record
        raise StoreConflict(
            f"Enrollment for {self._activity} {activity_id} still conflicting "
            f"after {self._max_retries} attempts"
        )

    def unenroll(self, activity_id: str, person_id: str,
                 guard: Optional[Guard] = None) -> bool:
        """Remove the record if present. Removing an absent record is a no-op.

        The activity row is locked first; a ``guard`` raising keeps the record.
        """
        with self._repo.transaction() as conn:
            activity = self._repo.lock(conn, activity_id)
            if activity is None:
                return False
            if guard is not None:
                guard(activity)
            removed = self._repo.delete_enrollment(conn, activity_id, person_id)
        if removed:
            logger.info("Enrollment removed %s=%s person=%s",
                        self._activity, activity_id, person_id)
        return removed

    def change_capacity(self, conn, activity_id: str, new_capacity: int) -> None:
        """Write a new capacity inside the caller's transaction.

        The caller must already hold the activity row lock, so no enrollment
        can land between the count and the write.
        """
        enrolled = self._repo.count_enrollments(conn, activity_id)
        if new_capacity < enrolled:
            raise CapacityBelowEnrollment(
                f"Cannot set capacity to {new_capacity}: {enrolled} already enrolled",
                capacity=new_capacity, enrolled=enrolled,
            )
        self._repo.update_fields(conn, activity_id, {self._repo.CAPACITY_COL: new_capacity})
        logger.info("Capacity changed %s=%s capacity=%d enrolled=%d",
                    self._activity, activity_id, new_capacity, enrolled)

    def is_closed(self, activity: Dict[str, Any]) -> bool:
        """Cancelled, or Completed with its date already past."""
        if activity["status"] == "Cancelled":
            return True
        if activity["status"] == "Completed":
            return date.fromisoformat(activity["date"]) < self._today()
        return False

    # ── Private ────────────────────────────────────────────────────────

    def _enroll(self, conn, activity_id: str, person_id: str,
                fields: Dict[str, Any], guard: Optional[Guard]) -> Dict[str, Any]:
        activity = self._repo.lock(conn, activity_id)
        if activity is None:
            raise NotFound(f"{self._activity.capitalize()} {activity_id} not found")

        if guard is not None:
            guard(activity)

        if self.is_closed(activity):
            self._reject(activity_id, person_id, "closed")
            raise SessionClosed(
                f"{self._activity.capitalize()} {activity_id} is {activity['status']}; "
                f"enrollment is closed",
                status=activity["status"],
            )

        if self._repo.find_enrollment(conn, activity_id, person_id) is not None:
            self._reject(activity_id, person_id, "duplicate")
            raise DuplicateRegistration(
                f"{person_id} is already enrolled in {self._activity} {activity_id}"
            )

        capacity = activity[self._repo.CAPACITY_COL]
        record = self._repo.insert_within_capacity(conn, activity_id, person_id,
                                                   capacity, fields)
        if record is None:
            self._reject(activity_id, person_id, "full")
            raise CapacityExceeded(
                f"{self._activity.capitalize()} {activity_id} is at full capacity ({capacity})",
                capacity=capacity,
            )
        return record

    def _reject(self, activity_id: str, person_id: str, reason: str) -> None:
        ENROLLMENTS.labels(activity=self._activity, outcome=reason).inc()
        logger.info("Enrollment rejected %s=%s person=%s reason=%s",
                    self._activity, activity_id, person_id, reason)
