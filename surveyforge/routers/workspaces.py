"""Workspace API 라우터입니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from surveyforge.database import get_db
from surveyforge.middleware.auth_middleware import get_current_user
from surveyforge.models.user import User
from surveyforge.schemas.workspace import WorkspaceCreate, WorkspaceOut, WorkspaceUpdate
from surveyforge.services import workspace_service

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


@router.get("", response_model=List[WorkspaceOut])
def list_workspaces(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return workspace_service.list_workspaces(db, current_user)


@router.post("", response_model=WorkspaceOut)
def create_workspace(
    data: WorkspaceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return workspace_service.create_workspace(db, data, current_user)


@router.put("/{workspace_id}", response_model=WorkspaceOut)
def update_workspace(
    workspace_id: int,
    data: WorkspaceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return workspace_service.update_workspace(
        db,
        workspace_id=workspace_id,
        data=data,
        current_user=current_user,
    )


@router.delete("/{workspace_id}")
def delete_workspace(
    workspace_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    workspace_service.delete_workspace(db, workspace_id=workspace_id, current_user=current_user)
    return {"message": "삭제되었습니다."}
