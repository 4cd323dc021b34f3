# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for events and their participant records."""
from typing import Any, Dict, List, Optional

from scheduling.repositories.activity_repository import ActivityRepository


class EventRepository(ActivityRepository):
    ACTIVITY_TABLE = "events"
    ACTIVITY_COLS = (
        "id, title, description, type, date, time, location, capacity, "
        "status, created_at, updated_at"
    )
    CAPACITY_COL = "capacity"
    ENROLLMENT_TABLE = "event_participants"
    ENROLLMENT_COLS = "id, event_id, user_id, result, created_at, updated_at"
    ACTIVITY_FK = "event_id"
    PERSON_COL = "user_id"
    COUNT_ALIAS = "registered"
    RECORDS_KEY = "participants"

    def list_events(self, event_type: Optional[str] = None, status: Optional[str] = None,
                    date_from: Optional[str] = None,
                    date_to: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.list_with_counts(
            {"type": event_type, "status": status},
            date_from=date_from, date_to=date_to,
        )
