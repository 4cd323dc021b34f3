# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories, gates and services.
"""

from scheduling.core.config import settings
from scheduling.core.database import engine
from scheduling.repositories.training_repository import TrainingRepository
from scheduling.repositories.event_repository import EventRepository
from scheduling.services import lifecycle
from scheduling.services.capacity import CapacityGate
from scheduling.services.directory_client import DirectoryClient
from scheduling.services.eligibility import EligibilityResolver
from scheduling.services.training_service import TrainingService
from scheduling.services.event_service import EventService

# ── Singleton repository instances ──
_training_repo = TrainingRepository(engine)
_event_repo = EventRepository(engine)
_directory = DirectoryClient()

# ── Capacity gates (one per activity kind) ──
_training_gate = CapacityGate(_training_repo, lifecycle.TRAINING,
                              max_retries=settings.ENROLL_MAX_RETRIES)
_event_gate = CapacityGate(_event_repo, lifecycle.EVENT,
                           max_retries=settings.ENROLL_MAX_RETRIES)

# ── Service instances (with injected dependencies) ──
_eligibility = EligibilityResolver(_directory)
_training_service = TrainingService(
    repo=_training_repo,
    gate=_training_gate,
    eligibility=_eligibility,
    directory=_directory,
    default_attendance_status=settings.DEFAULT_ATTENDANCE_STATUS,
)
_event_service = EventService(
    repo=_event_repo,
    gate=_event_gate,
    directory=_directory,
)


# ── FastAPI dependency functions ──
def get_training_service() -> TrainingService:
    return _training_service


def get_event_service() -> EventService:
    return _event_service


def get_eligibility() -> EligibilityResolver:
    return _eligibility


def get_training_repo() -> TrainingRepository:
    return _training_repo
