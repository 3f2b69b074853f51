import csv
import io

import pytest

from surveyforge.services.analytics_service import compute_stats
from tests.conftest import add_outcome, add_question, auth_headers, create_survey, option_id, submit


@pytest.fixture
def answered_quiz(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers, title="Wellness check")
    question = add_question(client, headers, survey["survey_id"], "Energy level", [("tired", 5), ("great", 7)])
    add_outcome(client, headers, survey["survey_id"], "Low", 0, 5)
    add_outcome(client, headers, survey["survey_id"], "High", 6, 10)

    def _answer(text):
        return [{"question_id": question["question_id"], "option_ids": [option_id(question, text)]}]

    responses = [
        submit(client, survey["survey_id"], _answer("tired"), email="amy@example.com", respondent_id="r-1"),
        submit(client, survey["survey_id"], _answer("great"), email="bob@example.com", respondent_id="r-2"),
        submit(client, survey["survey_id"], _answer("great"), email="amy@example.com", respondent_id="r-1"),
    ]
    for resp in responses:
        assert resp.status_code == 200, resp.text
    return {"headers": headers, "survey_id": survey["survey_id"], "question": question}


def test_list_newest_first_with_filters(client, answered_quiz):
    headers = answered_quiz["headers"]
    path = f"/api/surveys/{answered_quiz['survey_id']}/submissions"

    rows = client.get(path, headers=headers).json()
    assert len(rows) == 3
    assert [row["submission_id"] for row in rows] == sorted((row["submission_id"] for row in rows), reverse=True)

    high = client.get(path, params={"outcome": "High"}, headers=headers).json()
    assert {row["outcome_title"] for row in high} == {"High"}
    assert len(high) == 2

    amy = client.get(path, params={"q": "AMY@"}, headers=headers).json()
    assert len(amy) == 2

    by_answer = client.get(path, params={"q": "tired"}, headers=headers).json()
    assert [row["total_score"] for row in by_answer] == [5]


def test_stats(client, answered_quiz):
    resp = client.get(f"/api/surveys/{answered_quiz['survey_id']}/stats", headers=answered_quiz["headers"])
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total_submissions"] == 3
    assert stats["average_score"] == 6.3
    assert stats["average_answered"] == 1.0
    assert stats["unique_respondents"] == 2
    assert stats["leads_with_email"] == 3
    assert stats["top_outcome"] == {"title": "High", "percent": 67}
    assert stats["outcome_titles"] == ["High", "Low"]


def test_stats_for_empty_survey(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    stats = client.get(f"/api/surveys/{survey['survey_id']}/stats", headers=headers).json()
    assert stats["total_submissions"] == 0
    assert stats["top_outcome"] is None


def test_compute_stats_ties_and_anonymous_respondents():
    items = [
        {"submission_id": 3, "total_score": 1, "outcome_title": "B", "answered_count": 2, "respondent_id": None},
        {"submission_id": 2, "total_score": 2, "outcome_title": "A", "answered_count": 1, "respondent_id": ""},
        {"submission_id": 1, "total_score": 4, "outcome_title": "A", "answered_count": 0, "respondent_email": "x@y.z"},
        {"submission_id": 0, "total_score": 1, "outcome_title": "B", "answered_count": 1},
    ]
    stats = compute_stats(items)
    # 동률이면 먼저 나온 결과
    assert stats["top_outcome"] == {"title": "B", "percent": 50}
    assert stats["unique_respondents"] == 4
    assert stats["leads_with_email"] == 1
    assert stats["average_score"] == 2.0
    assert stats["average_answered"] == 1.0


def test_submission_detail_not_found_for_other_survey(client, answered_quiz):
    headers = answered_quiz["headers"]
    other = create_survey(client, headers, title="Other")
    rows = client.get(f"/api/surveys/{answered_quiz['survey_id']}/submissions", headers=headers).json()
    resp = client.get(f"/api/surveys/{other['survey_id']}/submissions/{rows[0]['submission_id']}", headers=headers)
    assert resp.status_code == 404


def test_export_csv(client, answered_quiz):
    resp = client.get(f"/api/surveys/{answered_quiz['survey_id']}/export.csv", headers=answered_quiz["headers"])
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0][:7] == [
        "submission_id",
        "created_at",
        "respondent_id",
        "respondent_name",
        "respondent_email",
        "total_score",
        "outcome_title",
    ]
    assert "Energy level" in rows[0]
    assert len(rows) == 4
    answer_column = rows[0].index("Energy level")
    assert sorted(row[answer_column] for row in rows[1:]) == ["great", "great", "tired"]


def test_analytics_is_owner_scoped(client, answered_quiz):
    other = auth_headers(client, "other@example.com")
    survey_id = answered_quiz["survey_id"]
    assert client.get(f"/api/surveys/{survey_id}/submissions", headers=other).status_code == 404
    assert client.get(f"/api/surveys/{survey_id}/stats", headers=other).status_code == 404
    assert client.get(f"/api/surveys/{survey_id}/export.csv", headers=other).status_code == 404
    assert client.get("/api/submissions/overview", headers=other).json() == []


def test_overview(client, answered_quiz):
    headers = answered_quiz["headers"]
    quiet = create_survey(client, headers, title="Quiet survey")

    rows = client.get("/api/submissions/overview", headers=headers).json()
    assert [row["survey_id"] for row in rows] == [answered_quiz["survey_id"], quiet["survey_id"]]
    assert rows[0]["total_submissions"] == 3
    assert rows[0]["workspace_name"] == "My workspace"
    assert rows[0]["last_response_at"] is not None
    assert rows[1]["total_submissions"] == 0
    assert rows[1]["last_response_at"] is None

    only = client.get("/api/submissions/overview", params={"only_with_responses": "true"}, headers=headers).json()
    assert [row["survey_id"] for row in only] == [answered_quiz["survey_id"]]

    searched = client.get("/api/submissions/overview", params={"q": "quiet"}, headers=headers).json()
    assert [row["survey_id"] for row in searched] == [quiet["survey_id"]]

    unassigned = client.get("/api/submissions/overview", params={"workspace": "unassigned"}, headers=headers).json()
    assert unassigned == []


def test_compute_stats_rounds_halves_up():
    items = [
        {"submission_id": index, "total_score": 3 if index < 2 else 2, "outcome_title": "A" if index == 0 else f"B{index}"}
        for index in range(8)
    ]
    stats = compute_stats(items)
    # 18 / 8 = 2.25, 1 / 8 = 12.5%
    assert stats["average_score"] == 2.3
    assert stats["top_outcome"] == {"title": "A", "percent": 13}

    answered = [{"submission_id": index, "answered_count": 1 if index % 2 else 2} for index in range(4)]
    # 6 / 4 = 1.5 -> 소수 첫째 자리 유지
    assert compute_stats(answered)["average_answered"] == 1.5
