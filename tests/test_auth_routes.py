from app.core.deps import _extract_token


def test_auth_api_returns_json(client):
    # Invalid credentials; only the content type matters here.
    resp = client.post(
        "/auth/login",
        data={"email_or_username": "nouser", "password": "bad"},
        follow_redirects=False,
    )
    assert resp.status_code == 401
    assert "application/json" in resp.headers.get("content-type", "").lower()


def test_signup_rejects_duplicates(client, login):
    login("ada")
    resp = client.post(
        "/auth/signup",
        data={"email": "ada@example.com", "username": "other", "password": "pw"},
    )
    assert resp.status_code == 400

    resp = client.post(
        "/auth/signup",
        data={"email": "other@example.com", "username": "ada", "password": "pw"},
    )
    assert resp.status_code == 400


def test_login_sets_cookie_and_cookie_authenticates(client, login):
    login("ada")
    resp = client.post("/auth/login", data={"email_or_username": "ada@example.com", "password": "password123"})
    assert resp.status_code == 200
    assert "access_token" in resp.cookies

    # No header: the cookie set by login is used
    assert client.get("/challenge/stats").status_code == 200

    client.post("/auth/logout")
    client.cookies.clear()
    assert client.get("/challenge/stats").status_code == 401


def test_bad_token_is_rejected(client):
    resp = client.get("/challenge/progress", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_only_admin_can_create_problems(client, login):
    admin = login("root")  # first user gets id 1
    user = login("ada")
    data = {"title": "Two Sum", "description": "Find two numbers.", "difficulty": "Easy"}

    assert client.post("/problems/admin/create", data=data, headers=user).status_code == 403

    resp = client.post("/problems/admin/create", data=data, headers=admin)
    assert resp.status_code == 200
    problem_id = resp.json()["problem_id"]

    problem = client.get(f"/problems/{problem_id}").json()
    assert problem["title"] == "Two Sum"
    assert problem["difficulty"] == "Easy"
    assert problem["hints"] == []


def test_problem_create_validates_lists(client, login):
    admin = login("root")
    data = {"title": "T", "description": "D", "difficulty": "Easy", "hints": "not json"}
    assert client.post("/problems/admin/create", data=data, headers=admin).status_code == 400
    data = {"title": "T", "description": "D", "difficulty": "Trivial"}
    assert client.post("/problems/admin/create", data=data, headers=admin).status_code == 400


def test_problem_listing_filters_by_difficulty(client, problems):
    hard = client.get("/problems", params={"difficulty": "HARD"}).json()["problems"]
    assert len(hard) == 25
    assert {p["difficulty"] for p in hard} == {"Hard"}

    assert client.get("/problems", params={"difficulty": "nope"}).status_code == 400
    assert client.get("/problems/999999").status_code == 404


class _Req:
    def __init__(self, headers=None, cookies=None):
        self.headers = headers or {}
        self.cookies = cookies or {}


def test_extract_token_prefers_header():
    req = _Req(headers={"authorization": "Bearer abc"}, cookies={"access_token": "cookie"})
    assert _extract_token(req) == "abc"
    assert _extract_token(_Req(cookies={"access_token": "raw"})) == "raw"
    assert _extract_token(_Req(headers={"authorization": "Bearer "})) is None
    assert _extract_token(_Req()) is None
