"""공개 임베드 API 라우터입니다. 인증 없이 활성 설문 폼 조회와 응답 제출만 허용합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from surveyforge.config import Settings
from surveyforge.database import get_db
from surveyforge.middleware.auth_middleware import get_settings
from surveyforge.schemas.submission import PublicSurveyOut, SubmissionCreate, SubmissionResultOut
from surveyforge.services import submission_service
from surveyforge.services.subscription_service import SnapshotHub, get_hub

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/surveys/{survey_id}", response_model=PublicSurveyOut)
def get_public_survey(survey_id: int, db: Session = Depends(get_db)):
    return submission_service.get_public_survey(db, survey_id)


@router.post("/surveys/{survey_id}/submissions", response_model=SubmissionResultOut)
def submit(
    survey_id: int,
    data: SubmissionCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hub: SnapshotHub = Depends(get_hub),
):
    return submission_service.submit_public(
        db,
        survey_id=survey_id,
        data=data,
        settings=settings,
        hub=hub,
    )
