from surveyforge.services.subscription_service import outcomes_topic
from tests.conftest import add_outcome, auth_headers, create_survey


def test_outcomes_listed_by_min_score(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    add_outcome(client, headers, survey["survey_id"], "High", 6, 10)
    add_outcome(client, headers, survey["survey_id"], "Low", 0, 5)
    add_outcome(client, headers, survey["survey_id"], "Anything", None, None)

    rows = client.get(f"/api/surveys/{survey['survey_id']}/outcomes", headers=headers).json()
    assert [row["title"] for row in rows] == ["Anything", "Low", "High"]


def test_create_validates_range_and_title(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)

    inverted = client.post(
        f"/api/surveys/{survey['survey_id']}/outcomes",
        json={"title": "Bad", "min_score": 10, "max_score": 1},
        headers=headers,
    )
    assert inverted.status_code == 422

    blank = client.post(
        f"/api/surveys/{survey['survey_id']}/outcomes",
        json={"title": "   ", "min_score": 0, "max_score": 1},
        headers=headers,
    )
    assert blank.status_code == 400


def test_overlapping_and_gapped_ranges_are_allowed(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    add_outcome(client, headers, survey["survey_id"], "A", 0, 10)
    add_outcome(client, headers, survey["survey_id"], "B", 5, 15)
    add_outcome(client, headers, survey["survey_id"], "C", 40, 50)

    rows = client.get(f"/api/surveys/{survey['survey_id']}/outcomes", headers=headers).json()
    assert len(rows) == 3


def test_update_checks_merged_range(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    outcome = add_outcome(client, headers, survey["survey_id"], "Low", 0, 5, redirect_url="https://example.com/low")

    resp = client.put(f"/api/outcomes/{outcome['outcome_id']}", json={"min_score": 9}, headers=headers)
    assert resp.status_code == 400

    resp = client.put(
        f"/api/outcomes/{outcome['outcome_id']}",
        json={"title": "Starter", "max_score": 3, "description": "Just getting going"},
        headers=headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert (data["title"], data["min_score"], data["max_score"]) == ("Starter", 0, 3)
    assert data["redirect_url"] == "https://example.com/low"

    # null 을 명시하면 해당 경계를 제거한다.
    resp = client.put(f"/api/outcomes/{outcome['outcome_id']}", json={"max_score": None}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["max_score"] is None


def test_delete_outcome(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    outcome = add_outcome(client, headers, survey["survey_id"], "Low", 0, 5)

    assert client.delete(f"/api/outcomes/{outcome['outcome_id']}", headers=headers).status_code == 200
    assert client.get(f"/api/surveys/{survey['survey_id']}/outcomes", headers=headers).json() == []


def test_outcome_writes_publish_to_outcomes_topic(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    survey = create_survey(client, headers)
    hub = client.app.state.hub
    before = hub.version(outcomes_topic(survey["survey_id"]))

    outcome = add_outcome(client, headers, survey["survey_id"], "Low", 0, 5)
    client.put(f"/api/outcomes/{outcome['outcome_id']}", json={"title": "Lower"}, headers=headers)
    client.delete(f"/api/outcomes/{outcome['outcome_id']}", headers=headers)

    assert hub.version(outcomes_topic(survey["survey_id"])) == before + 3


def test_other_users_outcome_is_not_found(client, seed_users):
    owner = auth_headers(client, "owner@example.com")
    other = auth_headers(client, "other@example.com")
    survey = create_survey(client, owner)
    outcome = add_outcome(client, owner, survey["survey_id"], "Low", 0, 5)

    assert client.get(f"/api/surveys/{survey['survey_id']}/outcomes", headers=other).status_code == 404
    assert client.put(f"/api/outcomes/{outcome['outcome_id']}", json={"title": "x"}, headers=other).status_code == 404
    assert client.delete(f"/api/outcomes/{outcome['outcome_id']}", headers=other).status_code == 404
