"""Auth Service 도메인 서비스 레이어입니다. 계정 등록, 모의 로그인, 토큰 발급을 담당합니다."""

from datetime import datetime, timedelta, timezone
from jose import jwt
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from surveyforge.config import Settings
from surveyforge.models.user import User
from surveyforge.schemas.user import UserCreate, UserUpdate

ALGORITHM = "HS256"


def _normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def create_access_token(user_id: int, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def register(db: Session, data: UserCreate) -> User:
    email = _normalize_email(data.email)
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="이미 등록된 이메일입니다.")
    user = User(email=email, name=data.name.strip())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def mock_sso_login(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == _normalize_email(email), User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"이메일 '{email}'에 해당하는 활성 사용자를 찾을 수 없습니다.",
        )
    return user


def update_profile(db: Session, user: User, data: UserUpdate) -> User:
    if data.name is not None:
        user.name = data.name.strip()
    db.commit()
    db.refresh(user)
    return user
