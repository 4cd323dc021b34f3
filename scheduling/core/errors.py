# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy.

``SchedulingError`` subclasses are expected, recoverable outcomes: the service
layer raises them and the HTTP layer turns them into ``{"error", "detail"}``
responses. ``InfrastructureError`` subclasses are fatal and surface as 503.
"""


class SchedulingError(Exception):
    """Base class for rejected scheduling operations."""

    kind: str = "SchedulingError"
    status_code: int = 409

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class IneligibleCoach(SchedulingError):
    kind = "IneligibleCoach"
    status_code = 422


class NoEligibleCoach(SchedulingError):
    kind = "NoEligibleCoach"
    status_code = 422


class CapacityExceeded(SchedulingError):
    kind = "CapacityExceeded"


class CapacityBelowEnrollment(SchedulingError):
    kind = "CapacityBelowEnrollment"


class DuplicateRegistration(SchedulingError):
    kind = "DuplicateRegistration"


class InvalidTransition(SchedulingError):
    kind = "InvalidTransition"


class SessionClosed(SchedulingError):
    kind = "SessionClosed"


class NotFound(SchedulingError):
    kind = "NotFound"
    status_code = 404


class InfrastructureError(Exception):
    """Store or collaborator failure; never a business outcome."""

    kind: str = "infrastructure_error"


class StoreConflict(InfrastructureError):
    kind = "store_conflict"


class DirectoryUnavailable(InfrastructureError):
    kind = "directory_unavailable"
