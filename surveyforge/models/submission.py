"""응답 제출(Submission) SQLAlchemy 모델입니다. 생성 후 수정 경로가 없습니다."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from surveyforge.database import Base


class Submission(Base):
    __tablename__ = "submission"

    submission_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(Integer, ForeignKey("survey.survey_id", ondelete="CASCADE"), nullable=False)
    total_score = Column(Integer, nullable=False, default=0)
    # 제출 시점의 결과 제목 스냅샷 (Outcome 참조 아님)
    outcome_title = Column(String(200), nullable=False)
    answers_content = Column(Text, nullable=False, default="{}")
    respondent_id = Column(String(100), nullable=True)
    respondent_name = Column(String(200), nullable=True)
    respondent_email = Column(String(200), nullable=True)
    lead_capture_data = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    survey = relationship("Survey", back_populates="submissions")

    __table_args__ = (
        Index("idx_submission_survey_created", "survey_id", "created_at"),
    )
