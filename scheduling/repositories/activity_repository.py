# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Data-access layer shared by training sessions and events.

An activity is a row with a capacity and a status; its enrollment records live
in a child table keyed by (activity, person). Methods taking ``conn`` run inside
a caller-owned transaction opened with ``transaction()``.
NO business rules here beyond the capacity-guarded insert.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from scheduling.core.logging import get_logger

logger = get_logger(__name__)

# Dialects that cannot render SELECT ... FOR UPDATE
_NO_ROW_LOCKS = {"sqlite"}


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_dict(row) -> Dict[str, Any]:
    return dict(row._mapping)


class ActivityRepository:
    ACTIVITY_TABLE: str = ""
    ACTIVITY_COLS: str = ""
    CAPACITY_COL: str = ""
    ENROLLMENT_TABLE: str = ""
    ENROLLMENT_COLS: str = ""
    ACTIVITY_FK: str = ""
    PERSON_COL: str = ""
    COUNT_ALIAS: str = "enrolled"
    RECORDS_KEY: str = "records"

    def __init__(self, engine: Engine):
        self._engine = engine

    def transaction(self):
        return self._engine.begin()

    # ── Activity ───────────────────────────────────────────────────────

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        record = {**record, "created_at": now, "updated_at": now}
        names = ", ".join(record)
        values = ", ".join(f":{name}" for name in record)
        with self._engine.begin() as conn:
            conn.execute(
                text(f"INSERT INTO {self.ACTIVITY_TABLE} ({names}) VALUES ({values})"),
                record,
            )
        return record

    def get(self, activity_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            return self.fetch(conn, activity_id)

    def fetch(self, conn: Connection, activity_id: str,
              lock: bool = False) -> Optional[Dict[str, Any]]:
        sql = f"SELECT {self.ACTIVITY_COLS} FROM {self.ACTIVITY_TABLE} WHERE id = :id"
        if lock and conn.dialect.name not in _NO_ROW_LOCKS:
            sql += " FOR UPDATE"
        row = conn.execute(text(sql), {"id": activity_id}).fetchone()
        return _row_to_dict(row) if row else None

    def lock(self, conn: Connection, activity_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the activity row, holding a row lock until the transaction ends."""
        return self.fetch(conn, activity_id, lock=True)

    def update_fields(self, conn: Connection, activity_id: str,
                      fields: Dict[str, Any]) -> None:
        if not fields:
            return
        params = {**fields, "updated_at": utc_now(), "id": activity_id}
        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        conn.execute(
            text(f"UPDATE {self.ACTIVITY_TABLE} SET {assignments}, "
                 f"updated_at = :updated_at WHERE id = :id"),
            params,
        )

    def compare_and_set_status(self, conn: Connection, activity_id: str,
                               expected: str, new: str) -> bool:
        """Single check-and-set; False when another writer moved the status first."""
        result = conn.execute(
            text(f"UPDATE {self.ACTIVITY_TABLE} SET status = :new, updated_at = :ts "
                 f"WHERE id = :id AND status = :expected"),
            {"new": new, "expected": expected, "ts": utc_now(), "id": activity_id},
        )
        return result.rowcount == 1

    def delete(self, activity_id: str) -> bool:
        """Delete an activity and cascade to its enrollment records."""
        with self._engine.begin() as conn:
            removed = conn.execute(
                text(f"DELETE FROM {self.ENROLLMENT_TABLE} WHERE {self.ACTIVITY_FK} = :id"),
                {"id": activity_id},
            ).rowcount
            deleted = conn.execute(
                text(f"DELETE FROM {self.ACTIVITY_TABLE} WHERE id = :id"),
                {"id": activity_id},
            ).rowcount
        if deleted:
            logger.info("Deleted %s id=%s cascaded_records=%d",
                        self.ACTIVITY_TABLE, activity_id, removed)
        return deleted > 0

    # ── Enrollment records ─────────────────────────────────────────────

    def count_enrollments(self, conn: Connection, activity_id: str) -> int:
        return conn.execute(
            text(f"SELECT COUNT(*) FROM {self.ENROLLMENT_TABLE} "
                 f"WHERE {self.ACTIVITY_FK} = :id"),
            {"id": activity_id},
        ).scalar() or 0

    def find_enrollment(self, conn: Connection, activity_id: str,
                        person_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            text(f"SELECT {self.ENROLLMENT_COLS} FROM {self.ENROLLMENT_TABLE} "
                 f"WHERE {self.ACTIVITY_FK} = :aid AND {self.PERSON_COL} = :pid"),
            {"aid": activity_id, "pid": person_id},
        ).fetchone()
        return _row_to_dict(row) if row else None

    def list_enrollments(self, conn: Connection, activity_id: str) -> List[Dict[str, Any]]:
        rows = conn.execute(
            text(f"SELECT {self.ENROLLMENT_COLS} FROM {self.ENROLLMENT_TABLE} "
                 f"WHERE {self.ACTIVITY_FK} = :aid ORDER BY created_at, id"),
            {"aid": activity_id},
        ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def insert_within_capacity(self, conn: Connection, activity_id: str,
                               person_id: str, capacity: int,
                               fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert an enrollment record only if the live count is below ``capacity``.

        The count and the insert are one statement, so the capacity check holds
        even where the activity row lock is unavailable. Returns None when full.
        """
        now = utc_now()
        record = {
            "id": str(uuid.uuid4()),
            self.ACTIVITY_FK: activity_id,
            self.PERSON_COL: person_id,
            **fields,
            "created_at": now,
            "updated_at": now,
        }
        names = ", ".join(record)
        values = ", ".join(f":{name}" for name in record)
        result = conn.execute(
            text(f"""
                INSERT INTO {self.ENROLLMENT_TABLE} ({names})
                SELECT {values}
                WHERE (SELECT COUNT(*) FROM {self.ENROLLMENT_TABLE}
                       WHERE {self.ACTIVITY_FK} = :{self.ACTIVITY_FK}) < :capacity
            """),
            {**record, "capacity": capacity},
        )
        if result.rowcount != 1:
            return None
        return record

    def update_enrollment(self, conn: Connection, activity_id: str, person_id: str,
                          fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        params = {**fields, "ts": utc_now(), "aid": activity_id, "pid": person_id}
        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        result = conn.execute(
            text(f"UPDATE {self.ENROLLMENT_TABLE} SET {assignments}, updated_at = :ts "
                 f"WHERE {self.ACTIVITY_FK} = :aid AND {self.PERSON_COL} = :pid"),
            params,
        )
        if result.rowcount == 0:
            return None
        return self.find_enrollment(conn, activity_id, person_id)

    def delete_enrollment(self, conn: Connection, activity_id: str, person_id: str) -> bool:
        result = conn.execute(
            text(f"DELETE FROM {self.ENROLLMENT_TABLE} "
                 f"WHERE {self.ACTIVITY_FK} = :aid AND {self.PERSON_COL} = :pid"),
            {"aid": activity_id, "pid": person_id},
        )
        return result.rowcount > 0

    # ── Listing ────────────────────────────────────────────────────────

    def list_with_counts(self, filters: Dict[str, Any],
                         date_from: Optional[str] = None,
                         date_to: Optional[str] = None) -> List[Dict[str, Any]]:
        """List activities newest first, each with its derived enrollment count."""
        conditions: List[str] = []
        params: Dict[str, Any] = {}
        for column, value in filters.items():
            if value is not None:
                conditions.append(f"a.{column} = :{column}")
                params[column] = value
        if date_from:
            conditions.append("a.date >= :date_from")
            params["date_from"] = date_from
        if date_to:
            conditions.append("a.date <= :date_to")
            params["date_to"] = date_to
        where = (" WHERE " + " AND ".join(conditions)) if conditions else ""
        cols = ", ".join(f"a.{c.strip()}" for c in self.ACTIVITY_COLS.split(","))

        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {cols},
                           (SELECT COUNT(*) FROM {self.ENROLLMENT_TABLE} e
                            WHERE e.{self.ACTIVITY_FK} = a.id) AS {self.COUNT_ALIAS}
                    FROM {self.ACTIVITY_TABLE} a{where}
                    ORDER BY a.date DESC, a.time DESC
                """),
                params,
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def get_detail(self, activity_id: str) -> Optional[Dict[str, Any]]:
        """Activity with its enrollment records and derived count."""
        with self._engine.connect() as conn:
            activity = self.fetch(conn, activity_id)
            if activity is None:
                return None
            records = self.list_enrollments(conn, activity_id)
        activity[self.COUNT_ALIAS] = len(records)
        activity[self.RECORDS_KEY] = records
        return activity

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
