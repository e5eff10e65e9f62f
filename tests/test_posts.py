"""
Post CRUD, listing and derived counters.
"""
import uuid

from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.reactions.models.reaction import Reaction
from app.modules.posts.reactions.services.categories import CATEGORIES
from tests.helpers import API, auth_headers, backdate_post, create_post, signup


class TestCreatePost:

    def test_create_post(self, client):
        headers, user = signup(client, "alice")
        response = client.post(
            f"{API}/posts",
            json={"title": " First ", "content": "Hello world", "tags": ["trip", " ", "beach"], "media": "https://img.test/1.png"},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Post created successfully"
        post = body["post"]
        assert post["title"] == "First"
        assert post["tags"] == ["trip", "beach"]
        assert post["media"] == "https://img.test/1.png"
        assert post["creatorId"] == user["id"]
        assert post["creatorName"] == "alice"
        assert post["reactionsCount"] == 0
        assert post["commentCount"] == 0
        assert post["reactions"] == []
        assert post["reactionsBreakdown"] == {category: 0 for category in CATEGORIES}

    def test_requires_authentication(self, client):
        response = client.post(f"{API}/posts", json={"title": "t", "content": "c"})
        assert response.status_code == 401

    def test_blank_title_is_rejected(self, client):
        headers, _ = signup(client, "alice")
        response = client.post(f"{API}/posts", json={"title": "   ", "content": "c"}, headers=headers)
        assert response.status_code == 400

    def test_oversized_title_is_rejected(self, client):
        headers, _ = signup(client, "alice")
        response = client.post(f"{API}/posts", json={"title": "x" * 201, "content": "c"}, headers=headers)
        assert response.status_code == 400

    def test_oversized_tag_is_rejected(self, client):
        headers, _ = signup(client, "alice")
        response = client.post(f"{API}/posts", json={"title": "t", "content": "c", "tags": ["x" * 51]}, headers=headers)
        assert response.status_code == 400


class TestListPosts:

    def test_empty_listing(self, client):
        headers, _ = signup(client, "alice")
        response = client.get(f"{API}/posts", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["posts"] == []
        assert body["pagination"] == {"total": 0, "page": 1, "pages": 1, "limit": 10}
        assert body["message"] == "Fetched posts"

    def test_requires_authentication(self, client):
        headers, _ = signup(client, "alice")
        create_post(client, headers)
        response = client.get(f"{API}/posts")
        assert response.status_code == 401
        assert "posts" not in response.json()

    def test_newest_first_with_pagination(self, client, db):
        headers, _ = signup(client, "alice")
        ids = [create_post(client, headers, title=f"post {i}")["id"] for i in range(3)]
        for age, post_id in zip((3, 2, 1), ids):
            backdate_post(db, post_id, days=age)

        response = client.get(f"{API}/posts", params={"limit": 2, "page": 1}, headers=headers)
        body = response.json()
        assert [p["id"] for p in body["posts"]] == [ids[2], ids[1]]
        assert body["pagination"] == {"total": 3, "page": 1, "pages": 2, "limit": 2}

        second = client.get(f"{API}/posts", params={"limit": 2, "page": 2}, headers=headers).json()
        assert [p["id"] for p in second["posts"]] == [ids[0]]

    def test_out_of_range_paging_is_clamped(self, client):
        headers, _ = signup(client, "alice")
        response = client.get(f"{API}/posts", params={"page": -4, "limit": 500}, headers=headers)
        assert response.json()["pagination"]["page"] == 1
        assert response.json()["pagination"]["limit"] == 100

    def test_sort_by_title(self, client):
        headers, _ = signup(client, "alice")
        for title in ("banana", "apple", "cherry"):
            create_post(client, headers, title=title)
        body = client.get(f"{API}/posts", params={"sort": "title"}, headers=headers).json()
        assert [p["title"] for p in body["posts"]] == ["apple", "banana", "cherry"]

    def test_unknown_sort_field(self, client):
        headers, _ = signup(client, "alice")
        response = client.get(f"{API}/posts", params={"sort": "-password"}, headers=headers)
        assert response.status_code == 400

    def test_counts_are_attached(self, client):
        headers, _ = signup(client, "alice")
        other, _ = signup(client, "bob")
        post = create_post(client, headers)
        client.post(f"{API}/posts/{post['id']}/comments", json={"content": "nice"}, headers=other)
        client.post(f"{API}/posts/{post['id']}/comments", json={"content": "great"}, headers=headers)
        client.put(f"{API}/posts/{post['id']}/reactions", json={"type": "love"}, headers=other)

        listed = client.get(f"{API}/posts", headers=headers).json()["posts"][0]
        assert listed["commentCount"] == 2
        assert listed["reactionsCount"] == 1
        assert listed["reactionsBreakdown"]["love"] == 1


class TestGetPost:

    def test_invalid_id(self, client):
        headers, _ = signup(client, "alice")
        response = client.get(f"{API}/posts/not-an-id", headers=headers)
        assert response.status_code == 400
        assert response.json() == {"message": "not-an-id is invalid id"}

    def test_missing_post(self, client):
        headers, _ = signup(client, "alice")
        response = client.get(f"{API}/posts/{uuid.uuid4()}", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Post not found"}

    def test_requires_authentication(self, client):
        headers, _ = signup(client, "alice")
        post = create_post(client, headers)
        assert client.get(f"{API}/posts/{post['id']}").status_code == 401
        assert client.get(f"{API}/posts/{post['id']}", headers=auth_headers("not.a.token")).status_code == 401

    def test_detail_includes_newest_comments(self, client):
        headers, _ = signup(client, "alice")
        post = create_post(client, headers)
        for i in range(5):
            client.post(f"{API}/posts/{post['id']}/comments", json={"content": f"comment {i}"}, headers=headers)

        body = client.get(f"{API}/posts/{post['id']}", headers=headers).json()
        assert body["post"]["commentCount"] == 5
        assert [c["content"] for c in body["commentsPreview"]] == ["comment 4", "comment 3", "comment 2"]

        body = client.get(f"{API}/posts/{post['id']}", params={"preview": 50}, headers=headers).json()
        assert len(body["commentsPreview"]) == 5


class TestUpdatePost:

    def test_owner_can_update(self, client):
        headers, _ = signup(client, "alice")
        post = create_post(client, headers, tags=["old"])
        response = client.patch(
            f"{API}/posts/{post['id']}",
            json={"title": "Updated", "tags": ["new", "tags"]},
            headers=headers,
        )
        assert response.status_code == 200
        updated = response.json()["post"]
        assert updated["title"] == "Updated"
        assert updated["content"] == post["content"]
        assert updated["tags"] == ["new", "tags"]

    def test_other_user_is_forbidden(self, client):
        headers, _ = signup(client, "alice")
        other, _ = signup(client, "bob")
        post = create_post(client, headers)
        response = client.patch(f"{API}/posts/{post['id']}", json={"title": "Mine now"}, headers=other)
        assert response.status_code == 403


class TestDeletePost:

    def test_other_user_is_forbidden(self, client):
        headers, _ = signup(client, "alice")
        other, _ = signup(client, "bob")
        post = create_post(client, headers)
        response = client.delete(f"{API}/posts/{post['id']}", headers=other)
        assert response.status_code == 403
        assert client.get(f"{API}/posts/{post['id']}", headers=headers).status_code == 200

    def test_delete_removes_engagement(self, client, db):
        headers, _ = signup(client, "alice")
        other, _ = signup(client, "bob")
        post = create_post(client, headers)
        client.put(f"{API}/posts/{post['id']}/reactions", json={"type": "like"}, headers=other)
        client.post(f"{API}/posts/{post['id']}/comments", json={"content": "bye"}, headers=other)
        client.post(f"{API}/posts/{post['id']}/bookmark", headers=other)

        response = client.delete(f"{API}/posts/{post['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"id": post["id"], "message": "Post Deleted Successfully"}
        assert client.get(f"{API}/posts/{post['id']}", headers=headers).status_code == 404

        assert db.query(Reaction).filter(Reaction.post_id == post["id"]).count() == 0
        assert db.query(Comment).filter(Comment.post_id == post["id"]).count() == 0
        assert db.query(Bookmark).filter(Bookmark.post_id == post["id"]).count() == 0
