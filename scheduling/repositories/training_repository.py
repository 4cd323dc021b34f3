# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for training sessions and their attendance records."""
from typing import Any, Dict, List, Optional

from scheduling.repositories.activity_repository import ActivityRepository


class TrainingRepository(ActivityRepository):
    ACTIVITY_TABLE = "training_sessions"
    ACTIVITY_COLS = (
        "id, title, discipline, coach_id, location, date, time, duration, "
        "max_capacity, status, notes, created_at, updated_at"
    )
    CAPACITY_COL = "max_capacity"
    ENROLLMENT_TABLE = "training_attendance"
    ENROLLMENT_COLS = "id, training_id, athlete_id, status, created_at, updated_at"
    ACTIVITY_FK = "training_id"
    PERSON_COL = "athlete_id"
    COUNT_ALIAS = "attendees"
    RECORDS_KEY = "attendance"

    def list_trainings(self, status: Optional[str] = None, coach_id: Optional[str] = None,
                       discipline: Optional[str] = None, date_from: Optional[str] = None,
                       date_to: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.list_with_counts(
            {"status": status, "coach_id": coach_id, "discipline": discipline},
            date_from=date_from, date_to=date_to,
        )

    def get_attendance(self, training_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            return self.list_enrollments(conn, training_id)
