"""Shared test helpers."""
from contentdesk.extensions import db
from contentdesk.models import Post


def bulk_insert_posts(author_id, count, status="draft", prefix="post"):
    """Insert posts straight through the session, skipping hooks, for volume tests."""
    db.session.add_all([
        Post(title=f"{prefix} {i}", slug=f"{prefix}-{i}", author_id=author_id, status=status)
        for i in range(count)
    ])
    db.session.commit()


def make_post(store, author_id, title, status="draft", **extra):
    data = {
        "title": title,
        "slug": title.lower().replace(" ", "-"),
        "author": author_id,
        "status": status,
    }
    data.update(extra)
    return store.create("posts", data)
