"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


OUTCOME_MATCH_POLICIES = {"strict", "closest_below"}


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./surveyforge.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 공개 임베드 링크의 기준 URL
    PUBLIC_SITE_URL: str = "http://localhost:3000"

    # 점수 -> 결과(Outcome) 매칭
    # strict: 범위에 들어가는 결과가 없으면 미정의
    # closest_below: 점수 이하 중 min_score가 가장 큰 결과로 대체
    OUTCOME_MATCH_POLICY: str = "strict"
    NO_OUTCOME_TITLE: str = "Resultado No Definido"

    # 제출 스냅샷 long-poll
    POLL_TIMEOUT_SECONDS: float = 25.0
    POLL_MAX_TIMEOUT_SECONDS: float = 60.0

    def outcome_policy(self) -> str:
        policy = str(self.OUTCOME_MATCH_POLICY or "").strip().lower()
        return policy if policy in OUTCOME_MATCH_POLICIES else "strict"

    def embed_url(self, survey_id: int) -> str:
        base = str(self.PUBLIC_SITE_URL or "").strip().rstrip("/")
        return f"{base}/embed/{survey_id}"

    class Config:
        # 실행 cwd와 무관하게 프로젝트 루트의 .env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
