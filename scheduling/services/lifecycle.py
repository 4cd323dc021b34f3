# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Status state machines for training sessions, events and attendance.

    Training:  Scheduled ─► Completed
               Scheduled ─► Cancelled
    Event:     Upcoming ─► Ongoing ─► Completed
               Upcoming ─► Cancelled
               Ongoing  ─► Cancelled

Completed and Cancelled are terminal in both machines. Attendance status is a
flat set, writable only while the parent session is not terminal.
"""

from typing import Dict, Optional

from scheduling.core.errors import InvalidTransition, SessionClosed

TRAINING = "training"
EVENT = "event"

TRAINING_STATUSES = ("Scheduled", "Completed", "Cancelled")
EVENT_STATUSES = ("Upcoming", "Ongoing", "Completed", "Cancelled")
ATTENDANCE_STATUSES = ("Present", "Absent", "Late", "Excused")
EVENT_TYPES = ("Tournament", "Workshop", "Social", "Competition")

ALLOWED_TRANSITIONS: Dict[str, Dict[str, set]] = {
    TRAINING: {
        "Scheduled": {"Completed", "Cancelled"},
        "Completed": set(),
        "Cancelled": set(),
    },
    EVENT: {
        "Upcoming":  {"Ongoing", "Cancelled"},
        "Ongoing":   {"Completed", "Cancelled"},
        "Completed": set(),
        "Cancelled": set(),
    },
}

INITIAL_STATUS = {TRAINING: "Scheduled", EVENT: "Upcoming"}
TERMINAL_STATUSES = frozenset({"Completed", "Cancelled"})


def canonical(value: Optional[str], allowed: tuple) -> Optional[str]:
    """Map case-insensitive input onto the canonical spelling, or None."""
    if value is None:
        return None
    lookup = {s.lower(): s for s in allowed}
    return lookup.get(value.strip().lower())


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def ensure_transition(activity: str, current: str, new: str) -> None:
    allowed = ALLOWED_TRANSITIONS[activity].get(current, set())
    if new not in allowed:
        raise InvalidTransition(
            f"Cannot transition {activity} from '{current}' to '{new}'. "
            f"Allowed: {sorted(allowed) if allowed else 'none (terminal state)'}",
            current=current, requested=new,
        )


def ensure_attendance_writable(session_status: str) -> None:
    if is_terminal(session_status):
        raise SessionClosed(
            f"Training session is {session_status}; attendance is read-only",
            status=session_status,
        )


def ensure_roster_writable(activity: str, status: str) -> None:
    """A Completed or Cancelled activity keeps its participant list as a record."""
    if is_terminal(status):
        raise SessionClosed(
            f"{activity.capitalize()} is {status}; its participant list is read-only",
            status=status,
        )
