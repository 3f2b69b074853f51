"""FastAPI 애플리케이션 진입점. 설정/DB/스냅샷 허브를 조립하고 API 라우터를 등록합니다."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from surveyforge.config import Settings, settings as default_settings
from surveyforge.database import Database
from surveyforge.logging_config import configure_logging
from surveyforge.routers import auth, outcomes, public, submissions, surveys, workspaces
from surveyforge.services.subscription_service import SnapshotHub

logger = logging.getLogger(__name__)

SERVICE_NAME = "SurveyForge 설문/퀴즈 빌더"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=SERVICE_NAME,
        description="점수 기반 설문/퀴즈 작성, 공개 임베드 응답, 응답 분석 API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)
    app.state.hub = SnapshotHub()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(workspaces.router)
    app.include_router(surveys.router)
    app.include_router(outcomes.router)
    app.include_router(submissions.router)
    app.include_router(public.router)

    @app.on_event("startup")
    def ensure_schema():
        # 신규 기능 배포 시 누락된 테이블/컬럼을 자동 생성합니다.
        app.state.database.create_all()
        logger.info("[app] started policy=%s", settings.outcome_policy())

    @app.on_event("shutdown")
    def release_resources():
        app.state.hub.close()
        app.state.database.dispose()

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "service": SERVICE_NAME}

    return app


app = create_app()
