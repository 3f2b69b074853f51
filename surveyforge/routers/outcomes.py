"""결과 구간(Outcome) API 라우터입니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from surveyforge.database import get_db
from surveyforge.middleware.auth_middleware import get_current_user
from surveyforge.models.user import User
from surveyforge.schemas.survey import OutcomeCreate, OutcomeOut, OutcomeUpdate
from surveyforge.services import outcome_service
from surveyforge.services.subscription_service import SnapshotHub, get_hub

router = APIRouter(prefix="/api", tags=["outcomes"])


@router.get("/surveys/{survey_id}/outcomes", response_model=List[OutcomeOut])
def list_outcomes(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return outcome_service.list_outcomes(db, survey_id=survey_id, current_user=current_user)


@router.post("/surveys/{survey_id}/outcomes", response_model=OutcomeOut)
def create_outcome(
    survey_id: int,
    data: OutcomeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    hub: SnapshotHub = Depends(get_hub),
):
    return outcome_service.create_outcome(
        db,
        survey_id=survey_id,
        data=data,
        current_user=current_user,
        hub=hub,
    )


@router.put("/outcomes/{outcome_id}", response_model=OutcomeOut)
def update_outcome(
    outcome_id: int,
    data: OutcomeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    hub: SnapshotHub = Depends(get_hub),
):
    return outcome_service.update_outcome(
        db,
        outcome_id=outcome_id,
        data=data,
        current_user=current_user,
        hub=hub,
    )


@router.delete("/outcomes/{outcome_id}")
def delete_outcome(
    outcome_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    hub: SnapshotHub = Depends(get_hub),
):
    outcome_service.delete_outcome(db, outcome_id=outcome_id, current_user=current_user, hub=hub)
    return {"message": "삭제되었습니다."}
