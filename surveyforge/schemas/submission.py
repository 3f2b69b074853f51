"""공개 응답 폼/제출/제출 분석 API 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PublicOptionOut(BaseModel):
    option_id: int
    text: str


class PublicQuestionOut(BaseModel):
    question_id: int
    text: str
    question_type: str
    display_order: int
    is_multi_select: bool = False
    options: List[PublicOptionOut] = Field(default_factory=list)


class PublicLeadCaptureOut(BaseModel):
    enabled: bool
    title: str
    subtitle: str
    cta_label: str
    disclaimer: str
    collect_name: bool
    require_name: bool
    fields: List[Dict[str, Any]] = Field(default_factory=list)


class PublicSurveyOut(BaseModel):
    survey_id: int
    title: str
    description: Optional[str] = None
    questions: List[PublicQuestionOut] = Field(default_factory=list)
    lead_capture: PublicLeadCaptureOut


class AnswerInput(BaseModel):
    question_id: int
    option_ids: List[int] = Field(default_factory=list)
    text: Optional[str] = None


class SubmissionCreate(BaseModel):
    answers: List[AnswerInput] = Field(default_factory=list)
    respondent_id: Optional[str] = Field(default=None, max_length=100)
    respondent_name: Optional[str] = Field(default=None, max_length=200)
    respondent_email: Optional[str] = Field(default=None, max_length=200)
    lead_values: Dict[str, str] = Field(default_factory=dict)


class OutcomeResultOut(BaseModel):
    title: str
    description: Optional[str] = None
    redirect_url: Optional[str] = None


class SubmissionResultOut(BaseModel):
    submission_id: int
    survey_id: int
    total_score: int
    outcome_title: str
    outcome: Optional[OutcomeResultOut] = None
    no_result_message: Optional[str] = None


class SubmissionOut(BaseModel):
    submission_id: int
    survey_id: int
    total_score: int
    outcome_title: str
    answers: Dict[str, Any] = Field(default_factory=dict)
    answered_count: int = 0
    respondent_id: Optional[str] = None
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    lead_capture: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class TopOutcomeOut(BaseModel):
    title: str
    percent: int


class SubmissionStatsOut(BaseModel):
    total_submissions: int = 0
    average_score: float = 0
    average_answered: float = 0
    unique_respondents: int = 0
    leads_with_email: int = 0
    top_outcome: Optional[TopOutcomeOut] = None
    outcome_titles: List[str] = Field(default_factory=list)


class SurveyOverviewRowOut(BaseModel):
    survey_id: int
    title: str
    description: Optional[str] = None
    workspace_id: Optional[int] = None
    workspace_name: Optional[str] = None
    is_active: bool = True
    total_submissions: int = 0
    last_response_at: Optional[datetime] = None


class SubmissionSnapshotOut(BaseModel):
    survey_id: int
    version: int
    changed: bool
    submissions: List[SubmissionOut] = Field(default_factory=list)
