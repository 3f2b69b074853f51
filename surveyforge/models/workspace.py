"""Workspace(설문 묶음) SQLAlchemy 모델입니다."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from surveyforge.database import Base


class Workspace(Base):
    __tablename__ = "workspace"

    workspace_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    owner = relationship("User", back_populates="workspaces")
    surveys = relationship("Survey", back_populates="workspace")

    __table_args__ = (
        Index("idx_workspace_owner", "owner_id"),
    )
