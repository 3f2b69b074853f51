from tests.conftest import auth_headers


def test_register_issues_token(client):
    resp = client.post("/api/auth/register", json={"email": "New@Example.com", "name": "New"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert "access_token" in data
    assert data["user"]["email"] == "new@example.com"


def test_register_duplicate_email(client, seed_users):
    resp = client.post("/api/auth/register", json={"email": "owner@example.com", "name": "Again"})
    assert resp.status_code == 400


def test_register_rejects_malformed_email(client):
    resp = client.post("/api/auth/register", json={"email": "not-an-email", "name": "X"})
    assert resp.status_code == 422


def test_login_success(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "owner@example.com"})
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Owner"


def test_login_unknown_email(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com"})
    assert resp.status_code == 401


def test_me_authenticated(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "owner@example.com"


def test_update_me(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    resp = client.put("/api/auth/me", json={"name": "Renamed"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"


def test_me_unauthenticated(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code in (401, 403)  # HTTPBearer raises 401 or 403 depending on version


def test_me_rejects_bad_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_logout(client, seed_users):
    headers = auth_headers(client, "owner@example.com")
    resp = client.post("/api/auth/logout", headers=headers)
    assert resp.status_code == 200
