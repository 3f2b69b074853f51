"""설문 관리 API 라우터입니다. 설문/문항/선택지/리드 수집 설정을 다룹니다."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from surveyforge.config import Settings
from surveyforge.database import get_db
from surveyforge.middleware.auth_middleware import get_current_user, get_settings
from surveyforge.models.user import User
from surveyforge.schemas.survey import (
    LeadCaptureSettings,
    OptionCreate,
    OptionOut,
    OptionUpdate,
    QuestionCreate,
    QuestionOut,
    QuestionReorder,
    QuestionUpdate,
    ShareLinkOut,
    SurveyCreate,
    SurveyDetailOut,
    SurveyMove,
    SurveyOut,
    SurveyUpdate,
)
from surveyforge.services import survey_service

router = APIRouter(prefix="/api/surveys", tags=["surveys"])


@router.get("", response_model=List[SurveyOut])
def list_surveys(
    workspace: str = "all",
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.list_surveys(db, current_user=current_user, workspace=workspace, search=q)


@router.post("", response_model=SurveyOut)
def create_survey(
    data: SurveyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.create_survey(db, data, current_user)


@router.get("/{survey_id}", response_model=SurveyOut)
def get_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.get_survey(db, survey_id=survey_id, current_user=current_user)


@router.get("/{survey_id}/detail", response_model=SurveyDetailOut)
def get_survey_detail(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    return survey_service.get_detail(db, survey_id=survey_id, current_user=current_user, settings=settings)


@router.put("/{survey_id}", response_model=SurveyOut)
def update_survey(
    survey_id: int,
    data: SurveyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.update_survey(db, survey_id=survey_id, data=data, current_user=current_user)


@router.delete("/{survey_id}")
def delete_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    survey_service.delete_survey(db, survey_id=survey_id, current_user=current_user)
    return {"message": "삭제되었습니다."}


@router.post("/{survey_id}/toggle", response_model=SurveyOut)
def toggle_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.toggle_active(db, survey_id=survey_id, current_user=current_user)


@router.post("/{survey_id}/duplicate", response_model=SurveyOut)
def duplicate_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.duplicate_survey(db, survey_id=survey_id, current_user=current_user)


@router.post("/{survey_id}/move", response_model=SurveyOut)
def move_survey(
    survey_id: int,
    data: SurveyMove,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.move_survey(
        db,
        survey_id=survey_id,
        workspace_id=data.workspace_id,
        current_user=current_user,
    )


@router.get("/{survey_id}/share", response_model=ShareLinkOut)
def share_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    return survey_service.share_link(db, survey_id=survey_id, current_user=current_user, settings=settings)


@router.get("/{survey_id}/lead-capture", response_model=LeadCaptureSettings)
def get_lead_capture(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    survey = survey_service.get_survey(db, survey_id=survey_id, current_user=current_user)
    return survey_service.lead_capture_settings(survey)


@router.put("/{survey_id}/lead-capture", response_model=LeadCaptureSettings)
def update_lead_capture(
    survey_id: int,
    data: LeadCaptureSettings,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.update_lead_capture(db, survey_id=survey_id, data=data, current_user=current_user)


@router.get("/{survey_id}/questions", response_model=List[QuestionOut])
def list_questions(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.list_questions(db, survey_id=survey_id, current_user=current_user)


@router.post("/{survey_id}/questions", response_model=QuestionOut)
def create_question(
    survey_id: int,
    data: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.create_question(db, survey_id=survey_id, data=data, current_user=current_user)


@router.put("/questions/{question_id}", response_model=QuestionOut)
def update_question(
    question_id: int,
    data: QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.update_question(db, question_id=question_id, data=data, current_user=current_user)


@router.post("/questions/{question_id}/reorder", response_model=List[QuestionOut])
def reorder_question(
    question_id: int,
    data: QuestionReorder,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.reorder_question(
        db,
        question_id=question_id,
        target_index=data.target_index,
        current_user=current_user,
    )


@router.delete("/questions/{question_id}")
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    survey_service.delete_question(db, question_id=question_id, current_user=current_user)
    return {"message": "삭제되었습니다."}


@router.get("/questions/{question_id}/options", response_model=List[OptionOut])
def list_options(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.list_options(db, question_id=question_id, current_user=current_user)


@router.post("/questions/{question_id}/options", response_model=OptionOut)
def create_option(
    question_id: int,
    data: OptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.create_option(db, question_id=question_id, data=data, current_user=current_user)


@router.put("/options/{option_id}", response_model=OptionOut)
def update_option(
    option_id: int,
    data: OptionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.update_option(db, option_id=option_id, data=data, current_user=current_user)


@router.delete("/options/{option_id}")
def delete_option(
    option_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    survey_service.delete_option(db, option_id=option_id, current_user=current_user)
    return {"message": "삭제되었습니다."}
