"""
Search filters, count sorts and the trending score.
"""
from datetime import timedelta

import pytest

from app.db.session import utcnow
from tests.helpers import API, backdate_post, create_post, signup


def search(client, headers, **params):
    response = client.get(f"{API}/posts/search", params=params, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def titles(body):
    return [post["title"] for post in body["posts"]]


@pytest.fixture
def alice(client):
    return signup(client, "alice")


@pytest.fixture
def bob(client):
    return signup(client, "bob")


class TestFilters:

    def test_text_matches_title_or_content_case_insensitively(self, client, alice):
        headers, _ = alice
        create_post(client, headers, title="Beach day", content="sand")
        create_post(client, headers, title="Mountains", content="A long BEACH walk")
        create_post(client, headers, title="City", content="traffic")

        body = search(client, headers, query="beach")
        assert sorted(titles(body)) == ["Beach day", "Mountains"]
        assert body["message"] == "Search results"

    def test_any_term_matches(self, client, alice):
        headers, _ = alice
        create_post(client, headers, title="Snow", content="cold")
        create_post(client, headers, title="Sun", content="hot")
        create_post(client, headers, title="Rain", content="wet")
        assert sorted(titles(search(client, headers, query="snow sun"))) == ["Snow", "Sun"]

    def test_wildcards_are_literal(self, client, alice):
        headers, _ = alice
        create_post(client, headers, title="100% fun", content="c")
        create_post(client, headers, title="1000 fun", content="c")
        assert titles(search(client, headers, query="100%")) == ["100% fun"]

    def test_tags_any_of(self, client, alice):
        headers, _ = alice
        create_post(client, headers, title="one", tags=["travel", "food"])
        create_post(client, headers, title="two", tags=["food"])
        create_post(client, headers, title="three", tags=["work"])
        assert sorted(titles(search(client, headers, tags="travel,work"))) == ["one", "three"]
        assert sorted(titles(search(client, headers, tags="food"))) == ["one", "two"]

    def test_tags_match_exactly(self, client, alice):
        headers, _ = alice
        create_post(client, headers, title="upper", tags=["Travel"])
        create_post(client, headers, title="lower", tags=["travel"])
        assert titles(search(client, headers, tags="travel")) == ["lower"]
        assert titles(search(client, headers, tags=" Travel ,")) == ["upper"]

    def test_requires_authentication(self, client):
        assert client.get(f"{API}/posts/search").status_code == 401

    def test_author_by_name_or_id(self, client, alice, bob):
        alice_headers, alice_user = alice
        bob_headers, _ = bob
        create_post(client, alice_headers, title="from alice")
        create_post(client, bob_headers, title="from bob")
        assert titles(search(client, alice_headers, author="alice")) == ["from alice"]
        assert titles(search(client, alice_headers, author=alice_user["id"])) == ["from alice"]

    def test_date_range(self, client, db, alice):
        headers, _ = alice
        old = create_post(client, headers, title="old")
        mid = create_post(client, headers, title="mid")
        create_post(client, headers, title="new")
        backdate_post(db, old["id"], days=30)
        backdate_post(db, mid["id"], days=10)

        now = utcnow()
        body = search(client, headers, **{"from": (now - timedelta(days=20)).isoformat(), "to": (now - timedelta(days=5)).isoformat()})
        assert titles(body) == ["mid"]
        assert sorted(titles(search(client, headers, **{"from": (now - timedelta(days=20)).isoformat()}))) == ["mid", "new"]

    def test_filters_combine(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        create_post(client, alice_headers, title="beach alice", tags=["summer"])
        create_post(client, bob_headers, title="beach bob", tags=["summer"])
        create_post(client, alice_headers, title="beach winter", tags=["winter"])
        assert titles(search(client, alice_headers, query="beach", tags="summer", author="alice")) == ["beach alice"]

    def test_total_counts_full_match_set(self, client, alice):
        headers, _ = alice
        for i in range(3):
            create_post(client, headers, title=f"match {i}")
        for i in range(2):
            create_post(client, headers, title=f"other {i}")

        body = search(client, headers, query="match", limit=2, page=2)
        assert body["pagination"] == {"total": 3, "page": 2, "pages": 2, "limit": 2}
        assert len(body["posts"]) == 1


class TestSorts:

    def test_default_is_newest_first(self, client, db, alice):
        headers, _ = alice
        first = create_post(client, headers, title="first")
        create_post(client, headers, title="second")
        backdate_post(db, first["id"], days=1)
        assert titles(search(client, headers)) == ["second", "first"]

    def test_like_count(self, client, alice, bob):
        alice_headers, _ = alice
        bob_headers, _ = bob
        quiet = create_post(client, alice_headers, title="quiet")
        popular = create_post(client, alice_headers, title="popular")
        create_post(client, alice_headers, title="newest")
        client.put(f"{API}/posts/{popular['id']}/reactions", json={"type": "like"}, headers=alice_headers)
        client.put(f"{API}/posts/{popular['id']}/reactions", json={"type": "wow"}, headers=bob_headers)
        client.put(f"{API}/posts/{quiet['id']}/reactions", json={"type": "like"}, headers=bob_headers)

        body = search(client, alice_headers, sort="likeCount")
        assert titles(body) == ["popular", "quiet", "newest"]
        assert [p["reactionsCount"] for p in body["posts"]] == [2, 1, 0]

    def test_comment_count(self, client, alice):
        headers, _ = alice
        busy = create_post(client, headers, title="busy")
        create_post(client, headers, title="silent")
        for text in ("a", "b"):
            client.post(f"{API}/posts/{busy['id']}/comments", json={"content": text}, headers=headers)

        body = search(client, headers, sort="commentCount")
        assert titles(body) == ["busy", "silent"]
        assert body["posts"][0]["commentCount"] == 2

    def test_trending_prefers_recent_posts_with_equal_counts(self, client, db, alice):
        headers, _ = alice
        older = create_post(client, headers, title="older")
        create_post(client, headers, title="newer")
        backdate_post(db, older["id"], days=2)

        body = search(client, headers, sort="trending")
        assert titles(body) == ["newer", "older"]
        scores = [p["trendingScore"] for p in body["posts"]]
        assert scores[0] > scores[1]
        assert scores[0] - scores[1] == pytest.approx(2.0, abs=0.01)

    def test_trending_weights_comments_above_reactions(self, client, alice):
        headers, _ = alice
        reacted = create_post(client, headers, title="reacted")
        commented = create_post(client, headers, title="commented")
        client.put(f"{API}/posts/{reacted['id']}/reactions", json={"type": "like"}, headers=headers)
        client.post(f"{API}/posts/{commented['id']}/comments", json={"content": "hi"}, headers=headers)

        body = search(client, headers, sort="trending")
        assert titles(body) == ["commented", "reacted"]
        assert body["posts"][0]["trendingScore"] == pytest.approx(1.5, abs=0.01)
        assert body["posts"][1]["trendingScore"] == pytest.approx(1.0, abs=0.01)

    def test_age_lowers_trending_score(self, client, db, alice):
        headers, _ = alice
        stale = create_post(client, headers, title="stale")
        create_post(client, headers, title="fresh")
        client.put(f"{API}/posts/{stale['id']}/reactions", json={"type": "like"}, headers=headers)
        backdate_post(db, stale["id"], days=3)

        body = search(client, headers, sort="trending")
        assert titles(body) == ["fresh", "stale"]
        assert body["posts"][1]["trendingScore"] == pytest.approx(-2.0, abs=0.01)
