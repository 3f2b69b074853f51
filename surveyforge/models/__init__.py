"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from surveyforge.models.user import User
from surveyforge.models.workspace import Workspace
from surveyforge.models.survey import Survey, Question, QuestionOption, Outcome
from surveyforge.models.submission import Submission

__all__ = [
    "User",
    "Workspace",
    "Survey", "Question", "QuestionOption", "Outcome",
    "Submission",
]
