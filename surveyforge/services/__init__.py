"""서비스 레이어 패키지 초기화 모듈입니다."""

from surveyforge.services import (
    scoring_service,
    subscription_service,
    auth_service,
    workspace_service,
    outcome_service,
    survey_service,
    submission_service,
    analytics_service,
)
