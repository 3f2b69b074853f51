"""공개 응답 폼 조회와 응답 제출(점수 합산 -> 결과 매칭 -> 기록) 서비스입니다.

응답자는 option_id 만 보내며, 점수는 항상 서버에 저장된 선택지 점수로 계산합니다.
제출 레코드는 결과 제목을 기록 시점 문자열로 저장하므로 이후 Outcome 수정/삭제의 영향을 받지 않습니다.
"""

import json
import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from surveyforge.config import Settings
from surveyforge.models.submission import Submission
from surveyforge.models.survey import Question, Survey
from surveyforge.schemas.submission import SubmissionCreate
from surveyforge.schemas.survey import FREE_TEXT_TYPES, MULTI_SELECT_TYPES
from surveyforge.services.outcome_service import load_outcome_ranges
from surveyforge.services.scoring_service import (
    OutcomeRange,
    aggregate_score,
    build_selections,
    resolve_outcome,
)
from surveyforge.services.subscription_service import SnapshotHub, submissions_topic
from surveyforge.utils import lead_capture

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "점수에 해당하는 결과가 정의되어 있지 않습니다."


def _get_active_survey(db: Session, survey_id: int) -> Survey:
    row = db.query(Survey).filter(Survey.survey_id == int(survey_id)).first()
    if not row or not bool(row.is_active):
        raise HTTPException(status_code=404, detail="설문을 찾을 수 없습니다.")
    return row


def _load_questions(db: Session, survey_id: int) -> list[Question]:
    return (
        db.query(Question)
        .filter(Question.survey_id == int(survey_id))
        .order_by(Question.display_order.asc(), Question.question_id.asc())
        .all()
    )


def _public_lead_capture(survey: Survey) -> dict:
    return {
        "enabled": bool(survey.lead_capture_enabled),
        "title": survey.lead_capture_title or lead_capture.DEFAULT_TITLE,
        "subtitle": survey.lead_capture_subtitle or lead_capture.DEFAULT_SUBTITLE,
        "cta_label": survey.lead_capture_cta_label or lead_capture.DEFAULT_CTA_LABEL,
        "disclaimer": survey.lead_capture_disclaimer or lead_capture.DEFAULT_DISCLAIMER,
        "collect_name": bool(survey.lead_capture_collect_name),
        "require_name": bool(survey.lead_capture_require_name),
        "fields": lead_capture.sanitize_fields(survey.lead_capture_fields_json),
    }


def get_public_survey(db: Session, survey_id: int) -> dict:
    survey = _get_active_survey(db, survey_id)
    questions = []
    for question in _load_questions(db, survey.survey_id):
        questions.append(
            {
                "question_id": question.question_id,
                "text": question.text,
                "question_type": question.question_type,
                "display_order": question.display_order,
                "is_multi_select": question.question_type in MULTI_SELECT_TYPES,
                # 응답자에게 점수는 노출하지 않는다.
                "options": [
                    {"option_id": option.option_id, "text": option.text}
                    for option in sorted(question.options, key=lambda row: row.option_id)
                ],
            }
        )
    return {
        "survey_id": survey.survey_id,
        "title": survey.title,
        "description": survey.description,
        "questions": questions,
        "lead_capture": _public_lead_capture(survey),
    }


def _collect_answers(questions: list[Question], data: SubmissionCreate) -> tuple[dict[int, list[int]], dict[int, str]]:
    by_question = {int(question.question_id): question for question in questions}
    selected: dict[int, list[int]] = {}
    texts: dict[int, str] = {}
    for answer in data.answers:
        question = by_question.get(int(answer.question_id))
        if question is None:
            raise HTTPException(status_code=400, detail="설문에 없는 문항에 대한 응답입니다.")
        if question.question_type in FREE_TEXT_TYPES:
            text = str(answer.text or "").strip()
            if text:
                texts[int(question.question_id)] = text
            continue
        option_ids = list(dict.fromkeys(int(option_id) for option_id in answer.option_ids))
        valid_ids = {int(option.option_id) for option in question.options}
        if any(option_id not in valid_ids for option_id in option_ids):
            raise HTTPException(status_code=400, detail="유효하지 않은 선택지입니다.")
        if len(option_ids) > 1 and question.question_type not in MULTI_SELECT_TYPES:
            raise HTTPException(status_code=400, detail="단일 선택 문항에는 하나의 선택지만 고를 수 있습니다.")
        if option_ids:
            selected[int(question.question_id)] = option_ids

    unanswered = [
        question
        for question in questions
        if int(question.question_id) not in selected and int(question.question_id) not in texts
    ]
    if unanswered:
        raise HTTPException(status_code=400, detail="모든 문항에 응답해 주세요. (incomplete answers)")
    return selected, texts


def _answers_content(
    questions: list[Question],
    selected: dict[int, list[int]],
    texts: dict[int, str],
) -> dict:
    content = {}
    for question in questions:
        question_id = int(question.question_id)
        option_ids = selected.get(question_id, [])
        chosen = [option for option in question.options if int(option.option_id) in option_ids]
        content[str(question_id)] = {
            "question": question.text,
            "question_type": question.question_type,
            "option_ids": option_ids,
            "options": [option.text for option in chosen],
            "score": sum(int(option.score or 0) for option in chosen),
            "text": texts.get(question_id),
        }
    return content


def _resolve_lead(survey: Survey, data: SubmissionCreate) -> dict:
    """리드 수집 설정에 따라 응답자 정보를 검증하고 저장할 스냅샷을 만든다."""
    respondent_name = str(data.respondent_name or "").strip()
    respondent_email = str(data.respondent_email or "").strip()
    if not bool(survey.lead_capture_enabled):
        return {
            "name": respondent_name or None,
            "email": respondent_email or None,
            "snapshot": None,
        }

    fields = lead_capture.sanitize_fields(survey.lead_capture_fields_json)
    values = {str(key): str(value or "").strip() for key, value in (data.lead_values or {}).items()}
    email_field = next((row for row in fields if row["type"] == "email"), None)
    if email_field and not values.get(email_field["id"]) and respondent_email:
        values[email_field["id"]] = respondent_email

    missing = lead_capture.missing_required(fields, values)
    if missing:
        raise HTTPException(status_code=400, detail=f"필수 입력 항목이 비어 있습니다: {', '.join(missing)}")

    email = lead_capture.extract_email(fields, values) or respondent_email
    if not email:
        raise HTTPException(status_code=400, detail="결과를 받을 이메일을 입력해 주세요.")
    if "@" not in email:
        raise HTTPException(status_code=400, detail="이메일 형식이 올바르지 않습니다.")

    name = lead_capture.build_name(fields, values) or respondent_name
    if bool(survey.lead_capture_collect_name) and bool(survey.lead_capture_require_name) and not name:
        raise HTTPException(status_code=400, detail="이름을 입력해 주세요.")

    return {
        "name": name or None,
        "email": email,
        "snapshot": lead_capture.build_snapshot(fields, values),
    }


def record_submission(
    db: Session,
    *,
    survey: Survey,
    total_score: int,
    outcome: OutcomeRange | None,
    answers_content: dict,
    lead: dict,
    respondent_id: str | None,
    settings: Settings,
    hub: SnapshotHub | None = None,
) -> Submission:
    row = Submission(
        survey_id=survey.survey_id,
        total_score=int(total_score),
        outcome_title=outcome.title if outcome is not None else settings.NO_OUTCOME_TITLE,
        answers_content=json.dumps(answers_content, ensure_ascii=False),
        respondent_id=respondent_id or str(uuid.uuid4()),
        respondent_name=lead.get("name"),
        respondent_email=lead.get("email"),
        lead_capture_data=(
            json.dumps(lead["snapshot"], ensure_ascii=False) if lead.get("snapshot") is not None else None
        ),
    )
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[submission] persist failed survey_id=%s", survey.survey_id)
        raise HTTPException(status_code=503, detail=f"응답을 저장하지 못했습니다: {exc}") from exc
    db.refresh(row)
    logger.info(
        "[submission] recorded submission_id=%s survey_id=%s total=%s outcome=%s",
        row.submission_id,
        row.survey_id,
        row.total_score,
        row.outcome_title,
    )
    if hub is not None:
        hub.publish(submissions_topic(survey.survey_id))
    return row


def submit_public(
    db: Session,
    *,
    survey_id: int,
    data: SubmissionCreate,
    settings: Settings,
    hub: SnapshotHub | None = None,
) -> dict:
    survey = _get_active_survey(db, survey_id)
    questions = _load_questions(db, survey.survey_id)
    selected, texts = _collect_answers(questions, data)

    total = aggregate_score(build_selections(questions, selected))
    outcome = resolve_outcome(total, load_outcome_ranges(db, survey.survey_id), settings.outcome_policy())
    lead = _resolve_lead(survey, data)

    row = record_submission(
        db,
        survey=survey,
        total_score=total,
        outcome=outcome,
        answers_content=_answers_content(questions, selected, texts),
        lead=lead,
        respondent_id=str(data.respondent_id or "").strip() or None,
        settings=settings,
        hub=hub,
    )
    return {
        "submission_id": row.submission_id,
        "survey_id": row.survey_id,
        "total_score": row.total_score,
        "outcome_title": row.outcome_title,
        "outcome": (
            {
                "title": outcome.title,
                "description": outcome.description,
                "redirect_url": outcome.redirect_url,
            }
            if outcome is not None
            else None
        ),
        "no_result_message": None if outcome is not None else NO_RESULT_MESSAGE,
    }
