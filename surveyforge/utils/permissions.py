"""소유자 기준 접근 제어 헬퍼입니다. 다른 사용자의 리소스는 존재하지 않는 것처럼 404로 응답합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from surveyforge.models.survey import Outcome, Question, QuestionOption, Survey
from surveyforge.models.user import User
from surveyforge.models.workspace import Workspace


def is_owner(user: User, owner_id) -> bool:
    return owner_id is not None and int(owner_id) == int(user.user_id)


def get_owned_survey(db: Session, survey_id: int, user: User) -> Survey:
    row = db.query(Survey).filter(Survey.survey_id == int(survey_id)).first()
    if not row or not is_owner(user, row.owner_id):
        raise HTTPException(status_code=404, detail="설문을 찾을 수 없습니다.")
    return row


def get_owned_workspace(db: Session, workspace_id: int, user: User) -> Workspace:
    row = db.query(Workspace).filter(Workspace.workspace_id == int(workspace_id)).first()
    if not row or not is_owner(user, row.owner_id):
        raise HTTPException(status_code=404, detail="워크스페이스를 찾을 수 없습니다.")
    return row


def get_owned_question(db: Session, question_id: int, user: User) -> Question:
    row = (
        db.query(Question)
        .join(Survey, Survey.survey_id == Question.survey_id)
        .filter(Question.question_id == int(question_id), Survey.owner_id == user.user_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="질문을 찾을 수 없습니다.")
    return row


def get_owned_option(db: Session, option_id: int, user: User) -> QuestionOption:
    row = (
        db.query(QuestionOption)
        .join(Question, Question.question_id == QuestionOption.question_id)
        .join(Survey, Survey.survey_id == Question.survey_id)
        .filter(QuestionOption.option_id == int(option_id), Survey.owner_id == user.user_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="선택지를 찾을 수 없습니다.")
    return row


def get_owned_outcome(db: Session, outcome_id: int, user: User) -> Outcome:
    row = (
        db.query(Outcome)
        .join(Survey, Survey.survey_id == Outcome.survey_id)
        .filter(Outcome.outcome_id == int(outcome_id), Survey.owner_id == user.user_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="결과 구간을 찾을 수 없습니다.")
    return row
