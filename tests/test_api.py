"""Endpoint tests through FastAPI's TestClient.

The app runs on the in-memory repositories and FakeRedis from conftest, so
these tests cover routing, status codes, error bodies and authentication.
"""

import pytest

from tests.fixtures.memory_repositories import BASE_TIME
from tests.fixtures.sample_data import seed_posts


def auth(key):
    return {"X-API-Key": key}


# ==================== Root and Health ====================


@pytest.mark.integration
def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.integration
def test_health_reports_each_store(client):
    body = client.get("/health").json()

    assert body["redis"]["status"] == "healthy"
    assert body["database"]["status"] == "unavailable"
    assert body["status"] == "unhealthy"


# ==================== Posts ====================


@pytest.mark.integration
def test_list_posts_page_shape(client, post_repository):
    seed_posts(post_repository)

    body = client.get("/api/posts", params={"limit": 2}).json()

    assert set(body) == {"posts", "nextCursor", "nextId", "hasMore"}
    assert len(body["posts"]) == 2
    assert body["hasMore"] is True

    nxt = client.get("/api/posts", params={
        "limit": 2, "cursor": body["nextCursor"], "id": body["nextId"],
    }).json()
    assert {p["id"] for p in nxt["posts"]}.isdisjoint({p["id"] for p in body["posts"]})


@pytest.mark.integration
def test_created_at_uses_the_cursor_format(client, post_repository):
    seed_posts(post_repository)

    body = client.get("/api/posts", params={"limit": 2}).json()

    assert body["posts"][-1]["createdAt"] == body["nextCursor"]
    assert all(p["createdAt"].endswith("Z") for p in body["posts"])


@pytest.mark.integration
@pytest.mark.parametrize("params", [{"limit": "0"}, {"limit": "abc"}, {"cursor": "bad", "id": "1"}])
def test_bad_pagination_parameters_are_400(client, params):
    response = client.get("/api/posts", params=params)
    assert response.status_code == 400
    assert "message" in response.json()


@pytest.mark.integration
def test_fixed_routes_are_not_taken_for_post_ids(client, post_repository):
    seed_posts(post_repository)

    assert client.get("/api/posts/dashboard").json()["totalPosts"] == 5
    assert "categories" in client.get("/api/posts/home").json()
    assert len(client.get("/api/posts/search/python").json()["posts"]) == 1


@pytest.mark.integration
def test_get_post_and_errors(client, post_repository):
    post_repository.add(id=1, created_at=BASE_TIME, title="Hello")

    assert client.get("/api/posts/1").json()["title"] == "Hello"

    missing = client.get("/api/posts/404")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Post not found"}

    assert client.get("/api/posts/not-a-number").status_code == 400


@pytest.mark.integration
@pytest.mark.parametrize("path", [
    "/api/posts/99999999999999999999",
    "/api/posts/0",
    "/api/comments/99999999999999999999",
    "/api/categories/99999999999999999999",
    "/api/knowledges/-1",
])
def test_ids_outside_bigint_range_are_400(client, path):
    response = client.get(path)
    assert response.status_code == 400
    assert "message" in response.json()


@pytest.mark.integration
def test_oversized_cursor_id_is_400(client):
    params = {"cursor": "2024-01-01T00:00:00Z", "id": "99999999999999999999"}

    assert client.get("/api/posts", params=params).status_code == 400
    assert client.get("/api/comments/1", params=params).status_code == 400
    assert client.get("/api/knowledges", params=params).status_code == 400


@pytest.mark.integration
def test_comment_on_oversized_post_id_is_400(client):
    response = client.post("/api/comments", json={"postId": 2**63, "comment": "Hi"})
    assert response.status_code == 400


@pytest.mark.integration
def test_view_increment_is_public(client, post_repository):
    post_repository.add(id=1, created_at=BASE_TIME)

    response = client.post("/api/posts/1/view")

    assert response.status_code == 200
    assert response.json()["views"] == 1


@pytest.mark.integration
def test_create_post_requires_api_key(client, api_keys):
    payload = {"title": "T", "content": "C", "category": "News"}

    assert client.post("/api/posts", json=payload).status_code == 401
    assert client.post("/api/posts", json=payload, headers=auth("wrong")).status_code == 401

    response = client.post("/api/posts", json=payload, headers=auth(api_keys))
    assert response.status_code == 201
    body = response.json()
    assert body["commentCount"] == 0
    assert body["trivia"] == ""


@pytest.mark.integration
def test_create_post_missing_fields_is_400(client, api_keys):
    response = client.post("/api/posts", json={"title": "T"}, headers=auth(api_keys))
    assert response.status_code == 400
    assert "content" in response.json()["message"]


@pytest.mark.integration
def test_update_and_delete_post(client, api_keys, post_repository):
    post_repository.add(id=1, created_at=BASE_TIME, title="Old")
    client.get("/api/posts/1")

    updated = client.put("/api/posts/1", json={"title": "New"}, headers=auth(api_keys))
    assert updated.json()["title"] == "New"
    assert client.get("/api/posts/1").json()["title"] == "New"

    assert client.delete("/api/posts/1", headers=auth(api_keys)).status_code == 200
    assert client.get("/api/posts/1").status_code == 404
    assert client.delete("/api/posts/1", headers=auth(api_keys)).status_code == 404


# ==================== Comments ====================


@pytest.mark.integration
def test_comment_flow(client, api_keys, post_repository):
    post_repository.add(id=1, created_at=BASE_TIME)

    created = client.post("/api/comments", json={"postId": 1, "comment": "Nice"})
    assert created.status_code == 201
    assert created.json()["name"] == "Anonymous"

    page = client.get("/api/comments/1").json()
    assert [c["comment"] for c in page["comments"]] == ["Nice"]
    assert client.get("/api/posts/1").json()["commentCount"] == 1

    comment_id = created.json()["id"]
    assert client.delete(f"/api/comments/{comment_id}").status_code == 401
    assert client.delete(f"/api/comments/{comment_id}", headers=auth(api_keys)).status_code == 200
    assert client.get("/api/posts/1").json()["commentCount"] == 0


@pytest.mark.integration
def test_comment_on_missing_post_is_404(client):
    response = client.post("/api/comments", json={"postId": 99, "comment": "Hi"})
    assert response.status_code == 404


@pytest.mark.integration
def test_comment_without_text_is_400(client):
    assert client.post("/api/comments", json={"postId": 1}).status_code == 400


# ==================== Categories ====================


@pytest.mark.integration
def test_category_flow(client, api_keys):
    created = client.post("/api/categories", json={"name": "Travel"}, headers=auth(api_keys))
    assert created.status_code == 201
    category_id = created.json()["id"]

    duplicate = client.post("/api/categories", json={"name": "travel"}, headers=auth(api_keys))
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "Category already exists"}

    assert [c["name"] for c in client.get("/api/categories").json()] == ["Travel"]

    client.put(f"/api/categories/{category_id}", json={"description": "Trips"}, headers=auth(api_keys))
    assert client.get(f"/api/categories/{category_id}").json()["description"] == "Trips"

    assert client.delete(f"/api/categories/{category_id}", headers=auth(api_keys)).status_code == 200
    assert client.get(f"/api/categories/{category_id}").status_code == 404


# ==================== Knowledge ====================


@pytest.mark.integration
def test_knowledge_flow(client, api_keys):
    created = client.post(
        "/api/knowledges", json={"title": "Guide", "content": "<p>Steps</p>"}, headers=auth(api_keys)
    )
    assert created.status_code == 201
    article_id = created.json()["id"]

    page = client.get("/api/knowledges").json()
    assert [a["id"] for a in page["data"]] == [article_id]

    client.put(f"/api/knowledges/{article_id}", json={"title": "Guide v2"}, headers=auth(api_keys))
    assert client.get(f"/api/knowledges/{article_id}").json()["title"] == "Guide v2"

    assert client.delete(f"/api/knowledges/{article_id}", headers=auth(api_keys)).status_code == 200
    assert client.get("/api/knowledges").json()["data"] == []


# ==================== Accounts ====================


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.integration
def test_account_flow(client):
    registered = client.post("/api/auth/register", json={"username": "alice", "password": "s3cret"})
    assert registered.status_code == 201
    assert registered.json()["user"] == {"id": 1, "username": "alice", "role": "user"}

    login = client.post("/api/auth/login", json={"username": "alice", "password": "s3cret"})
    assert login.status_code == 200
    token = login.json()["token"]

    profile = client.get("/api/auth/profile", headers=bearer(token))
    assert profile.status_code == 200
    assert profile.json()["user"]["username"] == "alice"

    logout = client.post("/api/auth/logout", headers=bearer(token))
    assert logout.json() == {"message": "Logged out successfully"}

    revoked = client.get("/api/auth/profile", headers=bearer(token))
    assert revoked.status_code == 401
    assert revoked.json() == {"message": "Token has been revoked"}


@pytest.mark.integration
def test_register_ignores_requested_role(client):
    response = client.post(
        "/api/auth/register", json={"username": "mallory", "password": "pw", "role": "admin"}
    )
    assert response.json()["user"]["role"] == "user"


@pytest.mark.integration
def test_register_duplicate_and_missing_fields_are_400(client):
    client.post("/api/auth/register", json={"username": "alice", "password": "pw"})

    duplicate = client.post("/api/auth/register", json={"username": "alice", "password": "pw"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "User already exists"}

    assert client.post("/api/auth/register", json={"username": "bob"}).status_code == 400


@pytest.mark.integration
def test_bad_login_is_400(client):
    client.post("/api/auth/register", json={"username": "alice", "password": "pw"})

    response = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid credentials"}


@pytest.mark.integration
@pytest.mark.parametrize("headers,message", [
    ({}, "Access denied"),
    ({"Authorization": "Basic YWxpY2U6cHc="}, "Access denied"),
    ({"Authorization": "Bearer not-a-jwt"}, "Invalid token"),
])
def test_profile_rejects_missing_or_bad_tokens(client, headers, message):
    response = client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"message": message}


@pytest.mark.integration
def test_bearer_token_does_not_replace_api_key(client, api_keys):
    token = client.post(
        "/api/auth/register", json={"username": "alice", "password": "pw"}
    ).json()["token"]

    response = client.post(
        "/api/posts", json={"title": "T", "content": "C", "category": "News"}, headers=bearer(token)
    )
    assert response.status_code == 401
