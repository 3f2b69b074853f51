import pytest
from fastapi.testclient import TestClient

from surveyforge.config import Settings
from surveyforge.main import create_app
from surveyforge.models.user import User
from surveyforge.services.subscription_service import SnapshotHub

TEST_DB_URL = "sqlite:///./test_surveyforge.db"

test_settings = Settings(
    DATABASE_URL=TEST_DB_URL,
    SECRET_KEY="test-secret-key",
    LOG_LEVEL="WARNING",
    PUBLIC_SITE_URL="https://forms.example.com",
    OUTCOME_MATCH_POLICY="strict",
)

app = create_app(test_settings)
database = app.state.database


@pytest.fixture(autouse=True)
def setup_db():
    app.state.settings = test_settings
    app.state.hub = SnapshotHub()
    database.create_all()
    yield
    database.drop_all()


@pytest.fixture
def db():
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "owner": User(email="owner@example.com", name="Owner"),
        "other": User(email="other@example.com", name="Other"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}


def create_survey(client, headers, title: str = "Quiz", **extra) -> dict:
    resp = client.post("/api/surveys", json={"title": title, **extra}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def add_question(client, headers, survey_id: int, text: str, options=None, question_type: str = "single_choice") -> dict:
    payload = {
        "text": text,
        "question_type": question_type,
        "options": [{"text": label, "score": score} for label, score in (options or [])],
    }
    resp = client.post(f"/api/surveys/{survey_id}/questions", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def add_outcome(client, headers, survey_id: int, title: str, min_score=None, max_score=None, **extra) -> dict:
    payload = {"title": title, "min_score": min_score, "max_score": max_score, **extra}
    resp = client.post(f"/api/surveys/{survey_id}/outcomes", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def option_id(question: dict, text: str) -> int:
    return next(row["option_id"] for row in question["options"] if row["text"] == text)


def submit(client, survey_id: int, answers: list[dict], email: str = "respondent@example.com", **extra):
    payload = {"answers": answers, "respondent_email": email, **extra}
    return client.post(f"/api/public/surveys/{survey_id}/submissions", json=payload)
