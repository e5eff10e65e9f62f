"""
Request helpers shared by the API tests.
"""

from datetime import timedelta

from app.db.session import utcnow
from app.modules.posts.models.post import Post

API = "/api/v1"


class RecordingMailer:
    """Mailer double that keeps every message instead of sending it"""

    def __init__(self):
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, user_name="alice", email=None, password="secret1"):
    response = client.post(
        f"{API}/auth/register",
        json={"userName": user_name, "email": email or f"{user_name}@example.com", "password": password},
    )
    # Requests authenticate through explicit headers only
    client.cookies.clear()
    return response


def signup(client, user_name="alice", **kwargs):
    """Register a user and return (headers, user json)"""
    response = register(client, user_name, **kwargs)
    assert response.status_code == 201, response.text
    body = response.json()
    return auth_headers(body["accessToken"]), body["user"]


def create_post(client, headers, title="A memory", content="Something worth keeping", **fields):
    payload = {"title": title, "content": content, **fields}
    response = client.post(f"{API}/posts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["post"]


def backdate_post(db, post_id, days):
    post = db.query(Post).filter(Post.id == post_id).first()
    post.created_at = utcnow() - timedelta(days=days)
    db.commit()
