import dataclasses

from sqlalchemy import event

from contentdesk.errors import StoreError
from contentdesk.extensions import db
from tests.helpers import bulk_insert_posts, make_post


def test_stats_counts_posts_by_status(client, store, author):
    make_post(store, author["id"], "Draft A")
    make_post(store, author["id"], "Draft B")
    make_post(store, author["id"], "Live", status="published")

    response = client.get("/api/posts/stats")

    assert response.status_code == 200
    data = response.get_json()
    assert data["total"] == 3
    assert data["published"] == 1
    assert data["draft"] == 2
    assert data["timestamp"].endswith("Z")


def test_stats_on_empty_collection(client):
    data = client.get("/api/posts/stats").get_json()

    assert (data["total"], data["published"], data["draft"]) == (0, 0, 0)


def test_stats_total_matches_counts_at_read_cap(client, author):
    bulk_insert_posts(author["id"], 600, status="draft", prefix="draft")
    bulk_insert_posts(author["id"], 400, status="published", prefix="live")

    data = client.get("/api/posts/stats").get_json()

    assert data["total"] == 1000
    assert data["published"] + data["draft"] == data["total"]


def test_stats_counts_stop_at_read_cap(client, author):
    bulk_insert_posts(author["id"], 1001)

    data = client.get("/api/posts/stats").get_json()

    assert data["total"] == 1001
    assert data["published"] + data["draft"] == 1000
    assert data["published"] + data["draft"] < data["total"]


def test_stats_store_failure_is_a_server_error(app, client, store, monkeypatch):
    def broken_find(*args, **kwargs):
        raise StoreError("database unavailable")

    monkeypatch.setattr(store, "find", broken_find)
    app.config["PROPAGATE_EXCEPTIONS"] = False

    response = client.get("/api/posts/stats")

    assert response.status_code == 500


def test_publish_all_publishes_drafts(client, store, author):
    make_post(store, author["id"], "Draft A")
    make_post(store, author["id"], "Draft B")
    make_post(store, author["id"], "Already Live", status="published")

    response = client.post("/api/posts/publish-all")

    assert response.status_code == 200
    data = response.get_json()
    assert data["publishedCount"] == 2
    assert data["failedCount"] == 0
    assert data["failures"] == []
    assert data["message"] == "Published 2 posts"
    assert store.find("posts", where={"status": {"equals": "draft"}}).total_docs == 0


def test_publish_all_is_idempotent(client, store, author):
    make_post(store, author["id"], "Draft A")

    first = client.post("/api/posts/publish-all").get_json()
    second = client.post("/api/posts/publish-all").get_json()

    assert first["publishedCount"] == 1
    assert second["publishedCount"] == 0
    assert second["message"] == "Published 0 posts"


def test_publish_all_handles_at_most_one_batch_per_call(client, store, author):
    bulk_insert_posts(author["id"], 101)

    first = client.post("/api/posts/publish-all").get_json()
    second = client.post("/api/posts/publish-all").get_json()

    assert first["publishedCount"] == 100
    assert second["publishedCount"] == 1


def test_publish_all_reports_failed_posts_and_continues(client, store, author, monkeypatch):
    posts = [make_post(store, author["id"], f"Draft {i}") for i in range(3)]
    failing_id = posts[1]["id"]
    real_update = store.update

    def flaky_update(collection, document_id, data, depth=0):
        if document_id == failing_id:
            raise StoreError("write conflict")
        return real_update(collection, document_id, data, depth)

    monkeypatch.setattr(store, "update", flaky_update)

    response = client.post("/api/posts/publish-all")

    assert response.status_code == 207
    data = response.get_json()
    assert data["publishedCount"] == 2
    assert data["failedCount"] == 1
    assert data["failures"] == [{"id": failing_id, "error": "write conflict"}]
    assert store.find_by_id("posts", failing_id)["status"] == "draft"


def test_publish_all_can_stop_at_first_failure(app, client, store, author, monkeypatch):
    settings = app.extensions["content_settings"]
    app.extensions["content_settings"] = dataclasses.replace(settings, bulk_publish_stop_on_error=True)

    for i in range(3):
        make_post(store, author["id"], f"Draft {i}")
    # Drafts come back newest first, so the middle post is the second update
    drafts = store.find("posts", where={"status": {"equals": "draft"}}).docs
    failing_id = drafts[1]["id"]
    real_update = store.update

    def flaky_update(collection, document_id, data, depth=0):
        if document_id == failing_id:
            raise StoreError("write conflict")
        return real_update(collection, document_id, data, depth)

    monkeypatch.setattr(store, "update", flaky_update)

    response = client.post("/api/posts/publish-all")

    assert response.status_code == 207
    data = response.get_json()
    assert data["publishedCount"] == 1
    assert data["failedCount"] == 1
    assert "stopped at first failure" in data["message"]
    # The update applied before the failure is kept
    assert store.find_by_id("posts", drafts[0]["id"])["status"] == "published"
    assert store.find_by_id("posts", drafts[2]["id"])["status"] == "draft"


def test_publish_all_does_not_stamp_published_on(client, store, author):
    post = make_post(store, author["id"], "Quiet Publish")

    client.post("/api/posts/publish-all")

    doc = store.find_by_id("posts", post["id"])
    assert doc["status"] == "published"
    assert doc["publishedOn"] is None


def test_stats_query_count_does_not_grow_with_posts(client, store, author):
    category = store.create("categories", {"title": "Counted"})
    for i in range(5):
        make_post(store, author["id"], f"Categorised {i}", categories=[category["id"]])
    bulk_insert_posts(author["id"], 40)
    db.session.expunge_all()
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(db.engine, "before_cursor_execute", record)
    try:
        data = client.get("/api/posts/stats").get_json()
    finally:
        event.remove(db.engine, "before_cursor_execute", record)

    assert data["total"] == 45
    # count, page, then one batch each for authors and categories
    assert len(statements) < 10
