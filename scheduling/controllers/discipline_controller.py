# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: disciplines and the coaches eligible to run them."""
from typing import List

from fastapi import APIRouter, Depends

from scheduling.core.dependencies import get_eligibility
from scheduling.schemas import CoachOut, EligibleCoaches
from scheduling.services.eligibility import EligibilityResolver

router = APIRouter(prefix="/api/v1/disciplines", tags=["Disciplines"])


@router.get("", response_model=List[str])
def list_disciplines(eligibility: EligibilityResolver = Depends(get_eligibility)):
    """Disciplines with at least one eligible coach, for the scheduling form."""
    return eligibility.available_disciplines()


@router.get("/{discipline}/coaches", response_model=EligibleCoaches)
def eligible_coaches(discipline: str,
                     eligibility: EligibilityResolver = Depends(get_eligibility)):
    coaches = eligibility.eligible_coaches(discipline)
    return EligibleCoaches(
        discipline=discipline,
        total=len(coaches),
        coaches=[CoachOut(**c.model_dump()) for c in coaches],
    )
