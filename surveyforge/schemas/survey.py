"""설문 관리 API 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


# Integer 컬럼(32bit) 범위
SCORE_MIN = -(2**31)
SCORE_MAX = 2**31 - 1

QUESTION_TYPES = {
    "single_choice",
    "checkboxes",
    "dropdown",
    "linear_scale",
    "rating",
    "short_text",
    "paragraph",
    "file_upload",
    "grid",
    "checkbox_grid",
}
MULTI_SELECT_TYPES = {"checkboxes", "checkbox_grid"}
FREE_TEXT_TYPES = {"short_text", "paragraph", "file_upload"}


class SurveyCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: bool = True
    workspace_id: Optional[int] = None


class SurveyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    workspace_id: Optional[int] = None


class SurveyOut(BaseModel):
    survey_id: int
    title: str
    description: Optional[str] = None
    is_active: bool
    workspace_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SurveyMove(BaseModel):
    workspace_id: int


class ShareLinkOut(BaseModel):
    survey_id: int
    url: str


class OptionCreate(BaseModel):
    text: str = Field(min_length=1, max_length=300)
    score: int = Field(default=0, ge=SCORE_MIN, le=SCORE_MAX)


class OptionUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1, max_length=300)
    score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)


class OptionOut(BaseModel):
    option_id: int
    question_id: int
    text: str
    score: int

    model_config = {"from_attributes": True}


class QuestionCreate(BaseModel):
    text: str = Field(min_length=1, max_length=500)
    question_type: str = "single_choice"
    options: List[OptionCreate] = Field(default_factory=list)


class QuestionUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1, max_length=500)
    question_type: Optional[str] = None


class QuestionReorder(BaseModel):
    target_index: int


class QuestionOut(BaseModel):
    question_id: int
    survey_id: int
    text: str
    question_type: str
    display_order: int
    options: List[OptionOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class OutcomeBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    min_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    max_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    redirect_url: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _check_range(self):
        if self.min_score is not None and self.max_score is not None and self.min_score > self.max_score:
            raise ValueError("min_score must be less than or equal to max_score")
        return self


class OutcomeCreate(OutcomeBase):
    pass


class OutcomeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    min_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    max_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)
    redirect_url: Optional[str] = Field(default=None, max_length=500)


class OutcomeOut(OutcomeBase):
    outcome_id: int
    survey_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeadCaptureField(BaseModel):
    id: Optional[str] = None
    type: str
    label: Optional[str] = None
    placeholder: Optional[str] = None
    required: Optional[bool] = None


class LeadCaptureSettings(BaseModel):
    enabled: bool = True
    title: Optional[str] = None
    subtitle: Optional[str] = None
    cta_label: Optional[str] = None
    disclaimer: Optional[str] = None
    collect_name: bool = True
    require_name: bool = False
    fields: List[LeadCaptureField] = Field(default_factory=list)


class SurveyDetailOut(BaseModel):
    survey: SurveyOut
    questions: List[QuestionOut] = Field(default_factory=list)
    outcomes: List[OutcomeOut] = Field(default_factory=list)
    lead_capture: LeadCaptureSettings
    share_url: str
    submission_count: int = 0
