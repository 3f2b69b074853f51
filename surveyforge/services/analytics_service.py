"""제출 분석 서비스 레이어입니다.

지표는 별도 집계 테이블 없이 조회 시점에 제출 목록을 스캔해서 계산합니다.
"""

import asyncio
import csv
import io
import json
import logging
from collections import Counter
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from surveyforge.models.submission import Submission
from surveyforge.models.survey import Question, Survey
from surveyforge.models.user import User
from surveyforge.models.workspace import Workspace
from surveyforge.services.subscription_service import SnapshotHub, submissions_topic
from surveyforge.utils.permissions import get_owned_survey

logger = logging.getLogger(__name__)


def _load_json(raw, fallback):
    if not raw:
        return fallback
    try:
        value = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return fallback
    return value if isinstance(value, type(fallback)) else fallback


def _answered_count(answers: dict) -> int:
    count = 0
    for entry in answers.values():
        if not isinstance(entry, dict):
            continue
        if entry.get("option_ids") or str(entry.get("text") or "").strip():
            count += 1
    return count


def serialize_submission(row: Submission) -> dict:
    answers = _load_json(row.answers_content, {})
    return {
        "submission_id": row.submission_id,
        "survey_id": row.survey_id,
        "total_score": int(row.total_score or 0),
        "outcome_title": row.outcome_title,
        "answers": answers,
        "answered_count": _answered_count(answers),
        "respondent_id": row.respondent_id,
        "respondent_name": row.respondent_name,
        "respondent_email": row.respondent_email,
        "lead_capture": _load_json(row.lead_capture_data, []),
        "created_at": row.created_at,
    }


def _query_submissions(db: Session, survey_id: int, *, outcome: str | None = None, search: str | None = None):
    query = db.query(Submission).filter(Submission.survey_id == int(survey_id))
    if outcome:
        query = query.filter(Submission.outcome_title == outcome)
    term = str(search or "").strip().lower()
    if term:
        query = query.filter(
            or_(
                func.lower(func.coalesce(Submission.respondent_email, "")).contains(term),
                func.lower(func.coalesce(Submission.respondent_name, "")).contains(term),
                func.lower(Submission.answers_content).contains(term),
            )
        )
    return query.order_by(Submission.created_at.desc(), Submission.submission_id.desc())


def list_submissions(
    db: Session,
    *,
    survey_id: int,
    current_user: User,
    outcome: str | None = None,
    search: str | None = None,
) -> list[dict]:
    survey = get_owned_survey(db, survey_id, current_user)
    rows = _query_submissions(db, survey.survey_id, outcome=outcome, search=search).all()
    return [serialize_submission(row) for row in rows]


def get_submission(db: Session, *, survey_id: int, submission_id: int, current_user: User) -> dict:
    survey = get_owned_survey(db, survey_id, current_user)
    row = (
        db.query(Submission)
        .filter(Submission.survey_id == survey.survey_id, Submission.submission_id == int(submission_id))
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="응답을 찾을 수 없습니다.")
    return serialize_submission(row)


def _round_half_up(value: float, digits: int = 0):
    # .5 는 올림
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def compute_stats(items: list[dict]) -> dict:
    """직렬화된 제출 목록(최신순)에서 요약 지표를 계산한다."""
    total = len(items)
    if total == 0:
        return {
            "total_submissions": 0,
            "average_score": 0,
            "average_answered": 0,
            "unique_respondents": 0,
            "leads_with_email": 0,
            "top_outcome": None,
            "outcome_titles": [],
        }

    respondents = set()
    for item in items:
        respondent_id = str(item.get("respondent_id") or "").strip()
        respondents.add(respondent_id or f"submission-{item['submission_id']}")

    titles = [str(item.get("outcome_title") or "") for item in items]
    counts = Counter(titles)
    best = max(counts.values())
    # 동률이면 목록에서 먼저 나온 결과
    top_title = next(title for title in titles if counts[title] == best)

    return {
        "total_submissions": total,
        "average_score": _round_half_up(sum(int(item.get("total_score") or 0) for item in items) / total, 1),
        "average_answered": _round_half_up(sum(int(item.get("answered_count") or 0) for item in items) / total, 1),
        "unique_respondents": len(respondents),
        "leads_with_email": sum(1 for item in items if str(item.get("respondent_email") or "").strip()),
        "top_outcome": {"title": top_title, "percent": _round_half_up(best * 100 / total)},
        "outcome_titles": sorted({title for title in titles if title}),
    }


def survey_stats(db: Session, *, survey_id: int, current_user: User) -> dict:
    return compute_stats(list_submissions(db, survey_id=survey_id, current_user=current_user))


def export_csv(db: Session, *, survey_id: int, current_user: User) -> str:
    survey = get_owned_survey(db, survey_id, current_user)
    questions = (
        db.query(Question)
        .filter(Question.survey_id == survey.survey_id)
        .order_by(Question.display_order.asc(), Question.question_id.asc())
        .all()
    )
    items = [serialize_submission(row) for row in _query_submissions(db, survey.survey_id).all()]

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        [
            "submission_id",
            "created_at",
            "respondent_id",
            "respondent_name",
            "respondent_email",
            "total_score",
            "outcome_title",
            *[question.text for question in questions],
            "lead_capture",
        ]
    )
    for item in items:
        answer_cells = []
        for question in questions:
            entry = item["answers"].get(str(question.question_id)) or {}
            if entry.get("text"):
                answer_cells.append(entry["text"])
            else:
                answer_cells.append("; ".join(str(text) for text in entry.get("options") or []))
        lead_cell = "; ".join(
            f"{row.get('label')}: {row.get('value')}"
            for row in item["lead_capture"]
            if isinstance(row, dict) and row.get("value")
        )
        writer.writerow(
            [
                item["submission_id"],
                item["created_at"].isoformat() if item["created_at"] else "",
                item["respondent_id"] or "",
                item["respondent_name"] or "",
                item["respondent_email"] or "",
                item["total_score"],
                item["outcome_title"],
                *answer_cells,
                lead_cell,
            ]
        )
    return buffer.getvalue()


def overview(
    db: Session,
    *,
    current_user: User,
    workspace: str = "all",
    only_with_responses: bool = False,
    search: str | None = None,
) -> list[dict]:
    """워크스페이스 전체 설문별 응답 현황. 최근 응답이 있는 설문이 먼저 온다."""
    summary = (
        db.query(
            Submission.survey_id.label("survey_id"),
            func.count(Submission.submission_id).label("total"),
            func.max(Submission.created_at).label("last_at"),
        )
        .group_by(Submission.survey_id)
        .subquery()
    )
    query = (
        db.query(Survey, Workspace.name, summary.c.total, summary.c.last_at)
        .outerjoin(Workspace, Workspace.workspace_id == Survey.workspace_id)
        .outerjoin(summary, summary.c.survey_id == Survey.survey_id)
        .filter(Survey.owner_id == current_user.user_id)
    )
    workspace_filter = str(workspace or "all").strip().lower()
    if workspace_filter == "unassigned":
        query = query.filter(Survey.workspace_id.is_(None))
    elif workspace_filter != "all":
        try:
            query = query.filter(Survey.workspace_id == int(workspace_filter))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="워크스페이스 필터가 올바르지 않습니다.") from exc
    term = str(search or "").strip().lower()
    if term:
        query = query.filter(func.lower(Survey.title).contains(term))

    rows = []
    for survey, workspace_name, total, last_at in query.all():
        total = int(total or 0)
        if only_with_responses and total == 0:
            continue
        rows.append(
            {
                "survey_id": survey.survey_id,
                "title": survey.title,
                "description": survey.description,
                "workspace_id": survey.workspace_id,
                "workspace_name": workspace_name,
                "is_active": bool(survey.is_active),
                "total_submissions": total,
                "last_response_at": last_at,
            }
        )
    rows.sort(
        key=lambda row: (
            row["last_response_at"] is not None,
            row["last_response_at"] or datetime.min,
            int(row["survey_id"]),
        ),
        reverse=True,
    )
    return rows


def _owned_survey_id(db: Session, survey_id: int, current_user: User) -> int:
    survey_id = int(get_owned_survey(db, survey_id, current_user).survey_id)
    # 대기 중에는 DB 커넥션을 쥐고 있지 않는다.
    db.close()
    return survey_id


def _snapshot_rows(db: Session, survey_id: int) -> list[dict]:
    try:
        return [serialize_submission(row) for row in _query_submissions(db, survey_id).all()]
    finally:
        db.close()


async def poll_submissions(
    db: Session,
    *,
    survey_id: int,
    current_user: User,
    hub: SnapshotHub,
    since: int,
    timeout: float,
) -> dict:
    """since 이후 제출 피드가 바뀌면 즉시, 아니면 timeout 까지 기다렸다가 스냅샷을 반환한다.

    DB 조회는 워커 스레드에서 하고, 대기는 이벤트 루프에서 하므로 대기 중인 클라이언트가
    다른 동기 엔드포인트의 스레드풀을 잡아두지 않는다.
    """
    survey_id = await asyncio.to_thread(_owned_survey_id, db, survey_id, current_user)
    try:
        subscription = hub.subscribe(submissions_topic(survey_id))
    except RuntimeError as exc:
        raise HTTPException(status_code=503, detail="서버가 종료 중입니다.") from exc
    with subscription:
        version = await subscription.wait(since, timeout=max(float(timeout), 0.0))
    # 재시작으로 버전이 since 보다 작아진 경우도 변경으로 본다.
    changed = version != int(since)
    submissions = []
    if changed:
        submissions = await asyncio.to_thread(_snapshot_rows, db, survey_id)
    return {
        "survey_id": survey_id,
        "version": version,
        "changed": changed,
        "submissions": submissions,
    }
