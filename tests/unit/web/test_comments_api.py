"""HTTP tests for the comment endpoints."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from pinnote.app import App
from pinnote.web.server import create_fastapi_app


@pytest.fixture
def client(config, fake_db):  # noqa: ANN001, ANN201
    fastapi_app = create_fastapi_app(App(config, fake_db), config)
    with TestClient(fastapi_app) as test_client:
        yield test_client


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create(client, seed, token=None, **payload):  # noqa: ANN001, ANN201
    body = {"fileId": str(seed.file_id), "body": "Looks off", **payload}
    return client.post("/api/v1/comments", json=body, headers=auth(token or seed.author_token))


class TestCreateComment:
    def test_creates_top_level_comment(self, client, seed):
        response = create(client, seed, x=50, y=50)

        assert response.status_code == 201
        data = response.json()
        assert data["fileId"] == str(seed.file_id)
        assert data["authorId"] == str(seed.author_id)
        assert (data["x"], data["y"]) == (50, 50)
        assert data["parentId"] is None
        assert {"id", "createdAt", "number"} <= data.keys()

    def test_creates_reply(self, client, seed):
        parent = create(client, seed, x=50, y=50).json()

        response = create(client, seed, token=seed.reviewer_token, parentId=parent["id"])

        assert response.status_code == 201
        assert response.json()["parentId"] == parent["id"]

    def test_missing_coordinate_names_field(self, client, seed):
        response = create(client, seed, x=50)

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"
        assert "'y'" in response.json()["message"]

    def test_out_of_range_coordinate(self, client, seed):
        response = create(client, seed, x=150, y=50)

        assert response.status_code == 400
        assert "'x'" in response.json()["message"]

    def test_missing_body(self, client, seed):
        response = client.post(
            "/api/v1/comments", json={"fileId": str(seed.file_id), "x": 1, "y": 1}, headers=auth(seed.author_token)
        )

        assert response.status_code == 400
        assert "'body'" in response.json()["message"]

    def test_missing_parent(self, client, seed):
        response = create(client, seed, parentId=str(uuid4()))

        assert response.status_code == 404
        assert response.json()["message"] == "Parent comment not found"

    def test_requires_authentication(self, client, seed):
        response = client.post("/api/v1/comments", json={"fileId": str(seed.file_id), "body": "Hi", "x": 1, "y": 1})

        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"

    def test_expired_session(self, client, seed):
        response = create(client, seed, token=seed.expired_token, x=1, y=1)
        assert response.status_code == 401

    def test_outsider_is_forbidden(self, client, seed):
        response = create(client, seed, token=seed.outsider_token, x=1, y=1)
        assert response.status_code == 403

    def test_cookie_authentication(self, client, seed):
        client.cookies.set("auth_token", seed.author_token)
        response = client.post("/api/v1/comments", json={"fileId": str(seed.file_id), "body": "Hi", "x": 1, "y": 1})

        assert response.status_code == 201


class TestListComments:
    def test_newest_first_with_pagination(self, client, seed):
        for i in range(3):
            create(client, seed, body=f"c{i}", x=i, y=i)

        response = client.get(
            "/api/v1/comments",
            params={"fileId": str(seed.file_id), "page": 1, "limit": 2},
            headers=auth(seed.reviewer_token),
        )

        assert response.status_code == 200
        data = response.json()
        assert [c["body"] for c in data["comments"]] == ["c2", "c1"]
        assert data["pagination"] == {"total": 3, "page": 1, "limit": 2, "pages": 2, "hasMore": True}

    def test_default_limit(self, client, seed):
        response = client.get("/api/v1/comments", params={"fileId": str(seed.file_id)}, headers=auth(seed.author_token))

        assert response.status_code == 200
        assert response.json()["pagination"] == {"total": 0, "page": 1, "limit": 10, "pages": 0, "hasMore": False}

    @pytest.mark.parametrize(("params", "field"), [({"limit": 51}, "limit"), ({"limit": 0}, "limit"), ({"page": 0}, "page")])
    def test_rejects_out_of_range_params(self, client, seed, params, field):
        response = client.get(
            "/api/v1/comments", params={"fileId": str(seed.file_id), **params}, headers=auth(seed.author_token)
        )

        assert response.status_code == 400
        assert f"'{field}'" in response.json()["message"]

    def test_requires_file_id(self, client, seed):
        response = client.get("/api/v1/comments", headers=auth(seed.author_token))

        assert response.status_code == 400
        assert "'fileId'" in response.json()["message"]

    def test_requires_authentication(self, client, seed):
        response = client.get("/api/v1/comments", params={"fileId": str(seed.file_id)})
        assert response.status_code == 401

    def test_unknown_file(self, client, seed):
        response = client.get("/api/v1/comments", params={"fileId": str(uuid4())}, headers=auth(seed.author_token))
        assert response.status_code == 404


class TestLiveStream:
    def test_requires_authentication(self, client, seed):
        response = client.get("/api/v1/comments/live", params={"fileId": str(seed.file_id)})
        assert response.status_code == 401

    def test_outsider_is_forbidden(self, client, seed):
        response = client.get(
            "/api/v1/comments/live", params={"fileId": str(seed.file_id)}, headers=auth(seed.outsider_token)
        )
        assert response.status_code == 403


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
