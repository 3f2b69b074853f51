"""결과 구간(Outcome) 서비스 레이어입니다.

구간은 겹치거나 비어 있어도 허용하며, min_score <= max_score 만 검증합니다.
구간을 수정/삭제해도 이미 기록된 제출의 outcome_title 은 바뀌지 않습니다.
"""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from surveyforge.models.survey import Outcome
from surveyforge.models.user import User
from surveyforge.schemas.survey import OutcomeCreate, OutcomeUpdate
from surveyforge.services.scoring_service import OutcomeRange, order_outcomes
from surveyforge.services.subscription_service import SnapshotHub, outcomes_topic
from surveyforge.utils.permissions import get_owned_outcome, get_owned_survey


def _validate_range(min_score: int | None, max_score: int | None):
    if min_score is not None and max_score is not None and int(min_score) > int(max_score):
        raise HTTPException(status_code=400, detail="최소 점수는 최대 점수보다 클 수 없습니다.")


def _ordered(rows: list[Outcome]) -> list[Outcome]:
    by_id = {int(row.outcome_id): row for row in rows}
    ranges = order_outcomes(OutcomeRange.from_model(row) for row in rows)
    return [by_id[int(item.outcome_id)] for item in ranges]


def load_outcome_ranges(db: Session, survey_id: int) -> list[OutcomeRange]:
    rows = (
        db.query(Outcome)
        .filter(Outcome.survey_id == int(survey_id))
        .order_by(Outcome.outcome_id.asc())
        .all()
    )
    return order_outcomes(OutcomeRange.from_model(row) for row in rows)


def list_outcomes(db: Session, *, survey_id: int, current_user: User) -> list[Outcome]:
    survey = get_owned_survey(db, survey_id, current_user)
    rows = (
        db.query(Outcome)
        .filter(Outcome.survey_id == survey.survey_id)
        .order_by(Outcome.outcome_id.asc())
        .all()
    )
    return _ordered(rows)


def _publish(hub: SnapshotHub | None, survey_id: int):
    if hub is not None:
        hub.publish(outcomes_topic(survey_id))


def create_outcome(
    db: Session,
    *,
    survey_id: int,
    data: OutcomeCreate,
    current_user: User,
    hub: SnapshotHub | None = None,
) -> Outcome:
    survey = get_owned_survey(db, survey_id, current_user)
    title = data.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="결과 제목을 입력해 주세요.")
    _validate_range(data.min_score, data.max_score)
    row = Outcome(
        survey_id=survey.survey_id,
        title=title,
        description=data.description,
        min_score=data.min_score,
        max_score=data.max_score,
        redirect_url=data.redirect_url,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    _publish(hub, survey.survey_id)
    return row


def update_outcome(
    db: Session,
    *,
    outcome_id: int,
    data: OutcomeUpdate,
    current_user: User,
    hub: SnapshotHub | None = None,
) -> Outcome:
    row = get_owned_outcome(db, outcome_id, current_user)
    # min/max 는 null 로 비울 수 있으므로 명시적으로 보낸 필드만 반영한다.
    payload = data.model_dump(exclude_unset=True)
    if "title" in payload:
        title = str(payload["title"] or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="결과 제목을 입력해 주세요.")
        payload["title"] = title
    next_min = payload.get("min_score", row.min_score)
    next_max = payload.get("max_score", row.max_score)
    _validate_range(next_min, next_max)
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    _publish(hub, row.survey_id)
    return row


def delete_outcome(
    db: Session,
    *,
    outcome_id: int,
    current_user: User,
    hub: SnapshotHub | None = None,
):
    row = get_owned_outcome(db, outcome_id, current_user)
    survey_id = row.survey_id
    db.delete(row)
    db.commit()
    _publish(hub, survey_id)
