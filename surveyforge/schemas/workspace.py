"""Workspace API 스키마입니다."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    is_default: bool = False


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_default: Optional[bool] = None


class WorkspaceOut(BaseModel):
    workspace_id: int
    name: str
    description: Optional[str] = None
    is_default: bool = False
    survey_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
