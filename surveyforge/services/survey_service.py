"""설문 관리 서비스 레이어입니다. 설문/문항/선택지/리드 수집 설정의 소유자 전용 CRUD를 담당합니다."""

import json
import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from surveyforge.config import Settings
from surveyforge.models.submission import Submission
from surveyforge.models.survey import Outcome, Question, QuestionOption, Survey
from surveyforge.models.user import User
from surveyforge.schemas.survey import (
    FREE_TEXT_TYPES,
    QUESTION_TYPES,
    LeadCaptureSettings,
    OptionCreate,
    OptionUpdate,
    QuestionCreate,
    QuestionUpdate,
    SurveyCreate,
    SurveyUpdate,
)
from surveyforge.services import workspace_service
from surveyforge.services.outcome_service import list_outcomes
from surveyforge.utils import lead_capture
from surveyforge.utils.permissions import (
    get_owned_option,
    get_owned_question,
    get_owned_survey,
    get_owned_workspace,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Initial draft"
UNTITLED = "Untitled"


# ---------------------------------------------------------------------------
# Surveys
# ---------------------------------------------------------------------------

def list_surveys(
    db: Session,
    *,
    current_user: User,
    workspace: str = "all",
    search: str | None = None,
) -> list[Survey]:
    query = db.query(Survey).filter(Survey.owner_id == current_user.user_id)
    workspace_filter = str(workspace or "all").strip().lower()
    if workspace_filter == "unassigned":
        query = query.filter(Survey.workspace_id.is_(None))
    elif workspace_filter != "all":
        try:
            workspace_id = int(workspace_filter)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="워크스페이스 필터가 올바르지 않습니다.") from exc
        query = query.filter(Survey.workspace_id == workspace_id)
    term = str(search or "").strip().lower()
    if term:
        query = query.filter(func.lower(Survey.title).contains(term))
    return query.order_by(Survey.created_at.desc(), Survey.survey_id.desc()).all()


def get_survey(db: Session, *, survey_id: int, current_user: User) -> Survey:
    return get_owned_survey(db, survey_id, current_user)


def create_survey(db: Session, data: SurveyCreate, current_user: User) -> Survey:
    title = data.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="설문 제목을 입력해 주세요.")
    workspace_id = workspace_service.resolve_workspace_id(db, current_user, data.workspace_id)
    row = Survey(
        owner_id=current_user.user_id,
        workspace_id=workspace_id,
        title=title,
        description=data.description or DEFAULT_DESCRIPTION,
        is_active=bool(data.is_active),
        lead_capture_fields_json=json.dumps(lead_capture.default_fields(), ensure_ascii=False),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("[survey] created survey_id=%s owner=%s", row.survey_id, current_user.user_id)
    return row


def update_survey(db: Session, *, survey_id: int, data: SurveyUpdate, current_user: User) -> Survey:
    row = get_owned_survey(db, survey_id, current_user)
    payload = data.model_dump(exclude_none=True)
    if "workspace_id" in payload:
        payload["workspace_id"] = int(get_owned_workspace(db, payload["workspace_id"], current_user).workspace_id)
    if "title" in payload:
        payload["title"] = payload["title"].strip()
        if not payload["title"]:
            raise HTTPException(status_code=400, detail="설문 제목을 입력해 주세요.")
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def delete_survey(db: Session, *, survey_id: int, current_user: User):
    row = get_owned_survey(db, survey_id, current_user)
    db.delete(row)
    db.commit()
    logger.info("[survey] deleted survey_id=%s owner=%s", survey_id, current_user.user_id)


def toggle_active(db: Session, *, survey_id: int, current_user: User) -> Survey:
    row = get_owned_survey(db, survey_id, current_user)
    row.is_active = not bool(row.is_active)
    db.commit()
    db.refresh(row)
    return row


def move_survey(db: Session, *, survey_id: int, workspace_id: int, current_user: User) -> Survey:
    row = get_owned_survey(db, survey_id, current_user)
    workspace = get_owned_workspace(db, workspace_id, current_user)
    row.workspace_id = workspace.workspace_id
    db.commit()
    db.refresh(row)
    return row


def duplicate_survey(db: Session, *, survey_id: int, current_user: User) -> Survey:
    source = get_owned_survey(db, survey_id, current_user)
    copy = Survey(
        owner_id=current_user.user_id,
        workspace_id=source.workspace_id,
        title=f"{source.title or UNTITLED} (copy)",
        description=source.description or DEFAULT_DESCRIPTION,
        is_active=False,
        lead_capture_enabled=source.lead_capture_enabled,
        lead_capture_title=source.lead_capture_title,
        lead_capture_subtitle=source.lead_capture_subtitle,
        lead_capture_cta_label=source.lead_capture_cta_label,
        lead_capture_disclaimer=source.lead_capture_disclaimer,
        lead_capture_collect_name=source.lead_capture_collect_name,
        lead_capture_require_name=source.lead_capture_require_name,
        lead_capture_fields_json=source.lead_capture_fields_json,
    )
    for question in source.questions:
        copy.questions.append(
            Question(
                text=question.text,
                question_type=question.question_type,
                display_order=question.display_order,
                options=[QuestionOption(text=option.text, score=option.score) for option in question.options],
            )
        )
    for outcome in source.outcomes:
        copy.outcomes.append(
            Outcome(
                title=outcome.title,
                description=outcome.description,
                min_score=outcome.min_score,
                max_score=outcome.max_score,
                redirect_url=outcome.redirect_url,
            )
        )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    logger.info("[survey] duplicated survey_id=%s -> %s", source.survey_id, copy.survey_id)
    return copy


def share_link(db: Session, *, survey_id: int, current_user: User, settings: Settings) -> dict:
    row = get_owned_survey(db, survey_id, current_user)
    return {"survey_id": int(row.survey_id), "url": settings.embed_url(row.survey_id)}


def get_detail(db: Session, *, survey_id: int, current_user: User, settings: Settings) -> dict:
    row = get_owned_survey(db, survey_id, current_user)
    submission_count = (
        db.query(func.count(Submission.submission_id))
        .filter(Submission.survey_id == row.survey_id)
        .scalar()
    )
    return {
        "survey": row,
        "questions": _load_questions(db, row.survey_id),
        "outcomes": list_outcomes(db, survey_id=row.survey_id, current_user=current_user),
        "lead_capture": lead_capture_settings(row),
        "share_url": settings.embed_url(row.survey_id),
        "submission_count": int(submission_count or 0),
    }


# ---------------------------------------------------------------------------
# Lead capture settings
# ---------------------------------------------------------------------------

def lead_capture_settings(survey: Survey) -> dict:
    return {
        "enabled": bool(survey.lead_capture_enabled),
        "title": survey.lead_capture_title,
        "subtitle": survey.lead_capture_subtitle,
        "cta_label": survey.lead_capture_cta_label,
        "disclaimer": survey.lead_capture_disclaimer,
        "collect_name": bool(survey.lead_capture_collect_name),
        "require_name": bool(survey.lead_capture_require_name),
        "fields": lead_capture.sanitize_fields(survey.lead_capture_fields_json),
    }


def update_lead_capture(
    db: Session,
    *,
    survey_id: int,
    data: LeadCaptureSettings,
    current_user: User,
) -> dict:
    row = get_owned_survey(db, survey_id, current_user)
    fields = lead_capture.sanitize_fields([field.model_dump(exclude_none=True) for field in data.fields])
    row.lead_capture_enabled = bool(data.enabled)
    row.lead_capture_title = data.title
    row.lead_capture_subtitle = data.subtitle
    row.lead_capture_cta_label = data.cta_label
    row.lead_capture_disclaimer = data.disclaimer
    row.lead_capture_collect_name = bool(data.collect_name)
    row.lead_capture_require_name = bool(data.require_name)
    row.lead_capture_fields_json = json.dumps(fields, ensure_ascii=False)
    db.commit()
    db.refresh(row)
    return lead_capture_settings(row)


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------

def _sort_options(options: list[QuestionOption]) -> list[QuestionOption]:
    def _key(option: QuestionOption):
        text = str(option.text or "")
        try:
            numeric = (0, float(text), "")
        except ValueError:
            numeric = (1, 0.0, text.lower())
        return (int(option.score or 0), numeric)

    return sorted(options, key=_key)


def _load_questions(db: Session, survey_id: int) -> list[Question]:
    return (
        db.query(Question)
        .filter(Question.survey_id == int(survey_id))
        .order_by(Question.display_order.asc(), Question.question_id.asc())
        .all()
    )


def _normalize_type(question_type: str | None) -> str:
    normalized = str(question_type or "single_choice").strip().lower()
    if normalized not in QUESTION_TYPES:
        raise HTTPException(status_code=400, detail="지원하지 않는 문항 유형입니다.")
    return normalized


def _default_options(question_type: str) -> list[tuple[str, int]]:
    if question_type == "linear_scale":
        return [(str(idx + 1), 1) for idx in range(10)]
    if question_type == "rating":
        return [(f"Star {idx + 1}", 1) for idx in range(5)]
    return []


def list_questions(db: Session, *, survey_id: int, current_user: User) -> list[Question]:
    get_owned_survey(db, survey_id, current_user)
    return _load_questions(db, survey_id)


def create_question(db: Session, *, survey_id: int, data: QuestionCreate, current_user: User) -> Question:
    survey = get_owned_survey(db, survey_id, current_user)
    question_type = _normalize_type(data.question_type)
    max_order = (
        db.query(func.max(Question.display_order))
        .filter(Question.survey_id == survey.survey_id)
        .scalar()
    )
    row = Question(
        survey_id=survey.survey_id,
        text=data.text.strip(),
        question_type=question_type,
        display_order=int(max_order or 0) + 1,
    )
    if question_type not in FREE_TEXT_TYPES:
        seeds = [(option.text.strip(), int(option.score)) for option in data.options if option.text.strip()]
        if not seeds:
            seeds = _default_options(question_type)
        row.options = [QuestionOption(text=text, score=score) for text, score in seeds]
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_question(db: Session, *, question_id: int, data: QuestionUpdate, current_user: User) -> Question:
    row = get_owned_question(db, question_id, current_user)
    payload = data.model_dump(exclude_none=True)
    if "text" in payload:
        text = payload["text"].strip()
        if not text:
            raise HTTPException(status_code=400, detail="질문 내용을 입력해 주세요.")
        row.text = text
    if "question_type" in payload:
        next_type = _normalize_type(payload["question_type"])
        if next_type in FREE_TEXT_TYPES:
            # 주관식 유형은 점수를 갖지 않는다.
            row.options = []
        elif not row.options:
            row.options = [QuestionOption(text=text, score=score) for text, score in _default_options(next_type)]
        row.question_type = next_type
    db.commit()
    db.refresh(row)
    return row


def reorder_question(db: Session, *, question_id: int, target_index: int, current_user: User) -> list[Question]:
    row = get_owned_question(db, question_id, current_user)
    ordered = _load_questions(db, row.survey_id)
    current_index = next(idx for idx, item in enumerate(ordered) if item.question_id == row.question_id)
    bounded = min(max(int(target_index), 0), len(ordered) - 1)
    if bounded != current_index:
        moved = ordered.pop(current_index)
        ordered.insert(bounded, moved)
    for idx, item in enumerate(ordered):
        item.display_order = idx + 1
    db.commit()
    return _load_questions(db, row.survey_id)


def delete_question(db: Session, *, question_id: int, current_user: User):
    row = get_owned_question(db, question_id, current_user)
    db.delete(row)
    db.commit()


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

def list_options(db: Session, *, question_id: int, current_user: User) -> list[QuestionOption]:
    question = get_owned_question(db, question_id, current_user)
    return _sort_options(list(question.options))


def create_option(db: Session, *, question_id: int, data: OptionCreate, current_user: User) -> QuestionOption:
    question = get_owned_question(db, question_id, current_user)
    if question.question_type in FREE_TEXT_TYPES:
        raise HTTPException(status_code=400, detail="주관식 문항에는 선택지를 추가할 수 없습니다.")
    text = data.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="선택지 내용을 입력해 주세요.")
    row = QuestionOption(question_id=question.question_id, text=text, score=int(data.score))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_option(db: Session, *, option_id: int, data: OptionUpdate, current_user: User) -> QuestionOption:
    row = get_owned_option(db, option_id, current_user)
    payload = data.model_dump(exclude_none=True)
    if "text" in payload:
        text = payload["text"].strip()
        if not text:
            raise HTTPException(status_code=400, detail="선택지 내용을 입력해 주세요.")
        row.text = text
    if "score" in payload:
        row.score = int(payload["score"])
    db.commit()
    db.refresh(row)
    return row


def delete_option(db: Session, *, option_id: int, current_user: User):
    row = get_owned_option(db, option_id, current_user)
    db.delete(row)
    db.commit()
