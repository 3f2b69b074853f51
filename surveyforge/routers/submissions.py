"""제출 분석 API 라우터입니다. 목록/상세/지표/CSV/전체 현황과 long-poll 스냅샷 피드를 제공합니다."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from surveyforge.config import Settings
from surveyforge.database import get_db
from surveyforge.middleware.auth_middleware import get_current_user, get_settings
from surveyforge.models.user import User
from surveyforge.schemas.submission import (
    SubmissionOut,
    SubmissionSnapshotOut,
    SubmissionStatsOut,
    SurveyOverviewRowOut,
)
from surveyforge.services import analytics_service
from surveyforge.services.subscription_service import SnapshotHub, get_hub

router = APIRouter(prefix="/api", tags=["submissions"])


@router.get("/submissions/overview", response_model=List[SurveyOverviewRowOut])
def overview(
    workspace: str = "all",
    only_with_responses: bool = False,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.overview(
        db,
        current_user=current_user,
        workspace=workspace,
        only_with_responses=only_with_responses,
        search=q,
    )


@router.get("/surveys/{survey_id}/submissions", response_model=List[SubmissionOut])
def list_submissions(
    survey_id: int,
    outcome: Optional[str] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.list_submissions(
        db,
        survey_id=survey_id,
        current_user=current_user,
        outcome=outcome,
        search=q,
    )


# /{submission_id} 보다 먼저 등록해야 한다.
# 대기 동안 스레드풀을 점유하지 않도록 async 로 둔다.
@router.get("/surveys/{survey_id}/submissions/poll", response_model=SubmissionSnapshotOut)
async def poll_submissions(
    survey_id: int,
    since: int = -1,
    timeout: Optional[float] = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    hub: SnapshotHub = Depends(get_hub),
):
    wait_seconds = settings.POLL_TIMEOUT_SECONDS if timeout is None else timeout
    return await analytics_service.poll_submissions(
        db,
        survey_id=survey_id,
        current_user=current_user,
        hub=hub,
        since=since,
        timeout=min(float(wait_seconds), float(settings.POLL_MAX_TIMEOUT_SECONDS)),
    )


@router.get("/surveys/{survey_id}/submissions/{submission_id}", response_model=SubmissionOut)
def get_submission(
    survey_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.get_submission(
        db,
        survey_id=survey_id,
        submission_id=submission_id,
        current_user=current_user,
    )


@router.get("/surveys/{survey_id}/stats", response_model=SubmissionStatsOut)
def survey_stats(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return analytics_service.survey_stats(db, survey_id=survey_id, current_user=current_user)


@router.get("/surveys/{survey_id}/export.csv")
def export_csv(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    csv_text = analytics_service.export_csv(db, survey_id=survey_id, current_user=current_user)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="survey_{survey_id}_submissions.csv"'},
    )
