"""설문/문항/선택지/결과 구간 SQLAlchemy 모델입니다."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from surveyforge.database import Base


class Survey(Base):
    __tablename__ = "survey"

    survey_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspace.workspace_id", ondelete="SET NULL"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)

    # 결과 공개 전 리드 수집 게이트
    lead_capture_enabled = Column(Boolean, nullable=False, default=True)
    lead_capture_title = Column(String(200))
    lead_capture_subtitle = Column(Text)
    lead_capture_cta_label = Column(String(100))
    lead_capture_disclaimer = Column(Text)
    lead_capture_collect_name = Column(Boolean, nullable=False, default=True)
    lead_capture_require_name = Column(Boolean, nullable=False, default=False)
    lead_capture_fields_json = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    owner = relationship("User", back_populates="surveys")
    workspace = relationship("Workspace", back_populates="surveys")
    questions = relationship(
        "Question",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="Question.display_order.asc(), Question.question_id.asc()",
    )
    outcomes = relationship(
        "Outcome",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="Outcome.outcome_id.asc()",
    )
    submissions = relationship(
        "Submission",
        back_populates="survey",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_survey_owner_created", "owner_id", "created_at"),
        Index("idx_survey_workspace", "workspace_id"),
    )


class Question(Base):
    __tablename__ = "question"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(Integer, ForeignKey("survey.survey_id", ondelete="CASCADE"), nullable=False)
    text = Column(String(500), nullable=False)
    question_type = Column(String(30), nullable=False, default="single_choice")
    display_order = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    survey = relationship("Survey", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.option_id.asc()",
    )

    __table_args__ = (
        Index("idx_question_survey_order", "survey_id", "display_order"),
    )


class QuestionOption(Base):
    __tablename__ = "question_option"

    option_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id", ondelete="CASCADE"), nullable=False)
    text = Column(String(300), nullable=False)
    score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    question = relationship("Question", back_populates="options")

    __table_args__ = (
        Index("idx_question_option_question", "question_id"),
    )


class Outcome(Base):
    __tablename__ = "outcome"

    outcome_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(Integer, ForeignKey("survey.survey_id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    # None 은 각각 -inf / +inf 로 취급한다.
    min_score = Column(Integer, nullable=True)
    max_score = Column(Integer, nullable=True)
    redirect_url = Column(String(500))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    survey = relationship("Survey", back_populates="outcomes")

    __table_args__ = (
        Index("idx_outcome_survey_min", "survey_id", "min_score"),
    )
