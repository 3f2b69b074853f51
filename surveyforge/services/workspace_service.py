"""Workspace 서비스 레이어입니다."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from surveyforge.models.survey import Survey
from surveyforge.models.user import User
from surveyforge.models.workspace import Workspace
from surveyforge.schemas.workspace import WorkspaceCreate, WorkspaceUpdate
from surveyforge.utils.permissions import get_owned_workspace

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "My workspace"
DEFAULT_WORKSPACE_DESCRIPTION = "Initial workspace"


def _sorted(rows: list[Workspace]) -> list[Workspace]:
    # 기본 워크스페이스가 먼저, 나머지는 이름순
    return sorted(rows, key=lambda row: (not bool(row.is_default), str(row.name or "").lower()))


def _attach_survey_counts(db: Session, rows: list[Workspace]) -> list[Workspace]:
    ids = [int(row.workspace_id) for row in rows]
    counts = {}
    if ids:
        counts = {
            int(workspace_id): int(count)
            for workspace_id, count in db.query(Survey.workspace_id, func.count(Survey.survey_id))
            .filter(Survey.workspace_id.in_(ids))
            .group_by(Survey.workspace_id)
            .all()
        }
    for row in rows:
        setattr(row, "survey_count", counts.get(int(row.workspace_id), 0))
    return rows


def _clear_default(db: Session, current_user: User, *, keep_id: int | None = None):
    query = db.query(Workspace).filter(
        Workspace.owner_id == current_user.user_id,
        Workspace.is_default == True,  # noqa: E712
    )
    if keep_id is not None:
        query = query.filter(Workspace.workspace_id != int(keep_id))
    for row in query.all():
        row.is_default = False


def ensure_default_workspace(db: Session, current_user: User) -> Workspace:
    existing = (
        db.query(Workspace)
        .filter(
            Workspace.owner_id == current_user.user_id,
            Workspace.is_default == True,  # noqa: E712
        )
        .order_by(Workspace.workspace_id.asc())
        .first()
    )
    if existing:
        return existing
    row = Workspace(
        owner_id=current_user.user_id,
        name=DEFAULT_WORKSPACE_NAME,
        description=DEFAULT_WORKSPACE_DESCRIPTION,
        is_default=True,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("[workspace] default workspace created user_id=%s", current_user.user_id)
    return row


def list_workspaces(db: Session, current_user: User) -> list[Workspace]:
    rows = db.query(Workspace).filter(Workspace.owner_id == current_user.user_id).all()
    if not rows:
        rows = [ensure_default_workspace(db, current_user)]
    return _attach_survey_counts(db, _sorted(rows))


def create_workspace(db: Session, data: WorkspaceCreate, current_user: User) -> Workspace:
    if data.is_default:
        _clear_default(db, current_user)
    row = Workspace(
        owner_id=current_user.user_id,
        name=data.name.strip(),
        description=data.description,
        is_default=bool(data.is_default),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return _attach_survey_counts(db, [row])[0]


def update_workspace(db: Session, *, workspace_id: int, data: WorkspaceUpdate, current_user: User) -> Workspace:
    row = get_owned_workspace(db, workspace_id, current_user)
    payload = data.model_dump(exclude_none=True)
    if payload.get("is_default") is True:
        _clear_default(db, current_user, keep_id=row.workspace_id)
    if "name" in payload:
        payload["name"] = payload["name"].strip()
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return _attach_survey_counts(db, [row])[0]


def delete_workspace(db: Session, *, workspace_id: int, current_user: User):
    row = get_owned_workspace(db, workspace_id, current_user)
    # 소속 설문은 삭제하지 않고 미지정 상태로 남긴다.
    db.query(Survey).filter(Survey.workspace_id == row.workspace_id).update(
        {Survey.workspace_id: None}, synchronize_session=False
    )
    db.delete(row)
    db.commit()


def resolve_workspace_id(db: Session, current_user: User, workspace_id: int | None) -> int:
    if workspace_id is not None:
        return int(get_owned_workspace(db, workspace_id, current_user).workspace_id)
    return int(ensure_default_workspace(db, current_user).workspace_id)
