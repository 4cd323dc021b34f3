# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the activity repositories."""
from scheduling.repositories.activity_repository import ActivityRepository
from scheduling.repositories.event_repository import EventRepository
from scheduling.repositories.training_repository import TrainingRepository

__all__ = ["ActivityRepository", "EventRepository", "TrainingRepository"]
