# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: training session CRUD, status, enrollment and attendance.
Pure HTTP layer; scheduling errors are mapped by the app-level handler.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from scheduling.core.dependencies import get_training_service
from scheduling.schemas import (
    AttendanceMark, AttendanceOut, EnrollmentCreate, TrainingCreate,
    TrainingDetail, TrainingOut, TrainingStatusChange, TrainingUpdate,
)
from scheduling.services import lifecycle
from scheduling.services.training_service import TrainingService

router = APIRouter(prefix="/api/v1/trainings", tags=["Trainings"])


def _validate_id(training_id: str) -> None:
    try:
        uuid.UUID(training_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid training ID format")


@router.post("", status_code=201, response_model=TrainingOut)
def create_training(body: TrainingCreate,
                    service: TrainingService = Depends(get_training_service)):
    """Schedule a session; without coach_id the first eligible coach is assigned."""
    result = service.create_training(
        discipline=body.discipline, coach_id=body.coach_id,
        location=body.location, date=body.date, time=body.time,
        duration=body.duration, max_capacity=body.max_capacity,
        title=body.title, notes=body.notes,
    )
    return TrainingOut(**result)


@router.get("", response_model=List[TrainingOut])
def list_trainings(
    status: Optional[str] = None,
    coach_id: Optional[str] = Query(default=None, alias="coachId"),
    discipline: Optional[str] = None,
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    service: TrainingService = Depends(get_training_service),
):
    if status is not None:
        status = lifecycle.canonical(status, lifecycle.TRAINING_STATUSES)
        if status is None:
            raise HTTPException(
                status_code=422,
                detail=f"status must be one of {lifecycle.TRAINING_STATUSES}",
            )
    trainings = service.list_trainings(status, coach_id, discipline, date_from, date_to)
    return [TrainingOut(**t) for t in trainings]


@router.get("/{training_id}", response_model=TrainingDetail)
def get_training(training_id: str,
                 service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    return TrainingDetail(**service.get_training(training_id))


@router.patch("/{training_id}", response_model=TrainingDetail)
def update_training(training_id: str, body: TrainingUpdate,
                    service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    result = service.update_training(training_id, body.model_dump(exclude_unset=True))
    return TrainingDetail(**result)


@router.delete("/{training_id}")
def delete_training(training_id: str,
                    service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    return service.delete_training(training_id)


@router.post("/{training_id}/status", response_model=TrainingDetail)
def change_status(training_id: str, body: TrainingStatusChange,
                  service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    return TrainingDetail(**service.change_status(training_id, body.status))


@router.post("/{training_id}/enrollments", status_code=201, response_model=AttendanceOut)
def enroll_athlete(training_id: str, body: EnrollmentCreate,
                   service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    result = service.enroll_athlete(training_id, body.athlete_id, status=body.status)
    return AttendanceOut(**result)


@router.delete("/{training_id}/enrollments/{athlete_id}")
def unenroll_athlete(training_id: str, athlete_id: str,
                     service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    return service.unenroll_athlete(training_id, athlete_id)


@router.post("/{training_id}/attendance", response_model=AttendanceOut)
def mark_attendance(training_id: str, body: AttendanceMark,
                    service: TrainingService = Depends(get_training_service)):
    """Set attendance; an athlete without a record is enrolled under the capacity limit."""
    _validate_id(training_id)
    result = service.mark_attendance(training_id, body.athlete_id, body.status)
    return AttendanceOut(**result)


@router.get("/{training_id}/attendance", response_model=List[AttendanceOut])
def get_attendance(training_id: str,
                   service: TrainingService = Depends(get_training_service)):
    _validate_id(training_id)
    return [AttendanceOut(**a) for a in service.get_attendance(training_id)]
