import uuid

import pytest

from tests.helpers import API, create_post, signup


def comment(client, post_id, content, headers):
    return client.post(f"{API}/posts/{post_id}/comments", json={"content": content}, headers=headers)


@pytest.fixture
def post_and_user(client):
    headers, user = signup(client, "alice")
    post = create_post(client, headers)
    return post, headers, user


class TestCreateComment:

    def test_round_trip(self, client, post_and_user):
        post, headers, user = post_and_user
        response = comment(client, post["id"], "hello", headers)
        assert response.status_code == 201
        assert response.json()["message"] == "Comment created"

        body = client.get(f"{API}/posts/{post['id']}/comments", headers=headers).json()
        assert len(body["comments"]) == 1
        created = body["comments"][0]
        assert created["content"] == "hello"
        assert created["userName"] == "alice"
        assert created["authorId"] == user["id"]
        assert created["author"] == {"id": user["id"], "userName": "alice"}

    def test_content_is_trimmed(self, client, post_and_user):
        post, headers, _ = post_and_user
        assert comment(client, post["id"], "  spaced  ", headers).json()["comment"]["content"] == "spaced"

    def test_empty_content(self, client, post_and_user):
        post, headers, _ = post_and_user
        response = comment(client, post["id"], "   ", headers)
        assert response.status_code == 400
        assert response.json() == {"message": "content is required"}

    def test_oversized_content(self, client, post_and_user):
        post, headers, _ = post_and_user
        assert comment(client, post["id"], "x" * 2001, headers).status_code == 400
        assert comment(client, post["id"], "x" * 2000, headers).status_code == 201

    def test_error_order(self, client, post_and_user):
        _, headers, _ = post_and_user
        missing = str(uuid.uuid4())
        assert comment(client, "bad", "hi", {}).status_code == 400
        assert comment(client, missing, "hi", {}).status_code == 401
        assert comment(client, missing, "", headers).status_code == 400
        assert comment(client, missing, "hi", headers).status_code == 404


class TestListComments:

    def test_newest_first_with_pagination(self, client, post_and_user):
        post, headers, _ = post_and_user
        for i in range(3):
            comment(client, post["id"], f"c{i}", headers)

        body = client.get(f"{API}/posts/{post['id']}/comments", params={"limit": 2}, headers=headers).json()
        assert [c["content"] for c in body["comments"]] == ["c2", "c1"]
        assert body["pagination"] == {"total": 3, "page": 1, "pages": 2, "limit": 2}
        assert body["message"] == "Fetched comments"

    def test_default_limit(self, client, post_and_user):
        post, headers, _ = post_and_user
        body = client.get(f"{API}/posts/{post['id']}/comments", headers=headers).json()
        assert body["pagination"] == {"total": 0, "page": 1, "pages": 1, "limit": 20}

    def test_missing_post(self, client, post_and_user):
        _, headers, _ = post_and_user
        assert client.get(f"{API}/posts/{uuid.uuid4()}/comments", headers=headers).status_code == 404

    def test_invalid_id(self, client, post_and_user):
        _, headers, _ = post_and_user
        assert client.get(f"{API}/posts/xyz/comments", headers=headers).status_code == 400

    def test_requires_authentication(self, client, post_and_user):
        post, headers, _ = post_and_user
        comment(client, post["id"], "hidden", headers)
        response = client.get(f"{API}/posts/{post['id']}/comments")
        assert response.status_code == 401
        assert "comments" not in response.json()


class TestDeleteComment:

    def test_author_can_delete(self, client, post_and_user):
        post, headers, _ = post_and_user
        created = comment(client, post["id"], "oops", headers).json()["comment"]
        response = client.delete(f"{API}/comments/{created['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "message": "Comment deleted"}
        assert client.get(f"{API}/posts/{post['id']}", headers=headers).json()["post"]["commentCount"] == 0

    def test_other_user_is_forbidden(self, client, post_and_user):
        post, headers, _ = post_and_user
        other, _ = signup(client, "bob")
        created = comment(client, post["id"], "mine", headers).json()["comment"]
        response = client.delete(f"{API}/comments/{created['id']}", headers=other)
        assert response.status_code == 403
        assert client.get(f"{API}/posts/{post['id']}/comments", headers=headers).json()["pagination"]["total"] == 1

    def test_post_owner_cannot_delete_others_comment(self, client, post_and_user):
        post, headers, _ = post_and_user
        other, _ = signup(client, "bob")
        created = comment(client, post["id"], "bob's", other).json()["comment"]
        assert client.delete(f"{API}/comments/{created['id']}", headers=headers).status_code == 403

    def test_missing_comment(self, client, post_and_user):
        _, headers, _ = post_and_user
        response = client.delete(f"{API}/comments/{uuid.uuid4()}", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Comment not found"}

    def test_requires_identity(self, client, post_and_user):
        post, headers, _ = post_and_user
        created = comment(client, post["id"], "x", headers).json()["comment"]
        assert client.delete(f"{API}/comments/{created['id']}").status_code == 401
