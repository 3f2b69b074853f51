"""DB 엔진/세션 팩토리를 묶는 데이터 접근 객체와 FastAPI 의존성입니다."""

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from surveyforge.utils.schema_sync import sync_missing_schema_objects

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """애플리케이션 시작 시 생성되어 종료 시 정리되는 DB 핸들."""

    def __init__(self, url: str, *, echo: bool = False):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.url = url
        self.engine = create_engine(url, connect_args=connect_args, echo=echo, pool_pre_ping=True)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self):
        import surveyforge.models  # noqa: F401 - 모델 import로 metadata 등록

        Base.metadata.create_all(bind=self.engine)
        applied = sync_missing_schema_objects(self.engine, Base.metadata)
        for statement in applied:
            logger.info("[schema] applied: %s", statement)

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()
        logger.info("[db] engine disposed")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
