import threading

import pytest

from contentdesk.config import ContentSettings
from contentdesk.services.post_service import (
    API_BOT_BIO,
    CUSTOM_API_SOURCE,
    DEFAULT_POST_EXCERPT,
    DEFAULT_POST_TITLE,
    PostService,
)
from contentdesk.store.sql import MAX_PAGE_SIZE
from tests.fakes import InMemoryContentStore
from tests.helpers import make_post


def bot_authors(store):
    return store.find("authors", where={"name": {"equals": "API Bot"}}, limit=0).docs


class TestListCustomPosts:
    def test_lists_with_source_tag_and_default_limit(self, client, store, author):
        for i in range(12):
            make_post(store, author["id"], f"Listed {i}")

        response = client.get("/api/custom/posts")

        assert response.status_code == 200
        data = response.get_json()
        assert data["source"] == CUSTOM_API_SOURCE
        assert "custom route" in data["note"]
        assert data["totalDocs"] == 12
        assert data["limit"] == 10
        assert len(data["docs"]) == 10

    def test_expands_one_level(self, client, store, author):
        make_post(store, author["id"], "Expanded")

        doc = client.get("/api/custom/posts").get_json()["docs"][0]

        assert doc["author"]["name"] == "Jane Doe"

    @pytest.mark.parametrize("raw, expected", [
        ("3", 3),
        ("2.7", 2),
        ("abc", 10),
        ("Infinity", 10),
    ])
    def test_limit_parsing(self, client, store, author, raw, expected):
        for i in range(5):
            make_post(store, author["id"], f"Limited {i}")

        data = client.get(f"/api/custom/posts?limit={raw}").get_json()

        assert data["limit"] == expected
        assert len(data["docs"]) == min(expected, 5)

    @pytest.mark.parametrize("raw", ["1e20", "99999999999999999999"])
    def test_oversized_limit_is_capped(self, client, store, author, raw):
        make_post(store, author["id"], "Only One")

        response = client.get(f"/api/custom/posts?limit={raw}")

        assert response.status_code == 200
        data = response.get_json()
        assert data["limit"] == MAX_PAGE_SIZE
        assert len(data["docs"]) == 1

    def test_non_positive_limit_is_unbounded(self, client, store, author):
        for i in range(12):
            make_post(store, author["id"], f"Everything {i}")

        data = client.get("/api/custom/posts?limit=0").get_json()

        assert len(data["docs"]) == 12


class TestCreateCustomPost:
    def test_empty_body_uses_defaults_and_bot_author(self, client, store):
        response = client.post("/api/custom/posts", json={})

        assert response.status_code == 200
        data = response.get_json()
        created = data["created"]
        assert data["source"] == CUSTOM_API_SOURCE
        assert created["title"] == DEFAULT_POST_TITLE
        assert created["slug"] == "custom-api-post"
        assert created["excerpt"] == DEFAULT_POST_EXCERPT
        assert created["status"] == "draft"
        assert created["publishedOn"] is None

        bots = bot_authors(store)
        assert len(bots) == 1
        assert bots[0]["bio"] == API_BOT_BIO
        assert created["author"] == bots[0]["id"]

    def test_slug_is_derived_from_title(self, client):
        created = client.post("/api/custom/posts", json={"title": "  Hello,   World!  "}).get_json()["created"]

        assert created["slug"] == "hello-world"

    def test_explicit_fields_are_kept(self, client, author):
        created = client.post("/api/custom/posts", json={
            "title": "Given",
            "slug": "given-slug",
            "excerpt": "Given excerpt",
            "authorId": author["id"],
        }).get_json()["created"]

        assert created["slug"] == "given-slug"
        assert created["excerpt"] == "Given excerpt"
        assert created["author"] == author["id"]

    def test_published_status_stamps_published_on(self, client):
        created = client.post("/api/custom/posts", json={
            "title": "Live Now",
            "status": "published",
        }).get_json()["created"]

        assert created["status"] == "published"
        assert created["publishedOn"].endswith("Z")

    @pytest.mark.parametrize("status", ["draft", "archived", "PUBLISHED", 1])
    def test_any_other_status_is_draft(self, client, status):
        created = client.post("/api/custom/posts", json={
            "title": f"Status {status}",
            "status": status,
        }).get_json()["created"]

        assert created["status"] == "draft"
        assert created["publishedOn"] is None

    def test_category_ids_are_linked(self, client, store):
        category = store.create("categories", {"title": "Linked"})

        created = client.post("/api/custom/posts", json={
            "title": "Categorised",
            "categoryIds": [category["id"]],
        }).get_json()["created"]

        assert created["categories"] == [category["id"]]

    def test_bot_author_is_reused(self, client, store):
        first = client.post("/api/custom/posts", json={"title": "First"}).get_json()["created"]
        second = client.post("/api/custom/posts", json={"title": "Second"}).get_json()["created"]

        assert first["author"] == second["author"]
        assert len(bot_authors(store)) == 1

    def test_malformed_body_is_treated_as_empty(self, client):
        response = client.post(
            "/api/custom/posts",
            data="{not json",
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.get_json()["created"]["title"] == DEFAULT_POST_TITLE

    def test_non_object_body_is_treated_as_empty(self, client):
        response = client.post("/api/custom/posts", json=["title", "Listy"])

        assert response.get_json()["created"]["title"] == DEFAULT_POST_TITLE

    def test_duplicate_slug_is_a_validation_error(self, client):
        client.post("/api/custom/posts", json={"title": "Twice"})

        response = client.post("/api/custom/posts", json={"title": "Twice"})

        assert response.status_code == 400
        assert response.get_json()["errors"][0]["message"] == "slug: Value must be unique"

    def test_unknown_author_id_is_a_validation_error(self, client):
        response = client.post("/api/custom/posts", json={"title": "Orphan", "authorId": 999})

        assert response.status_code == 400


def test_concurrent_creates_can_each_create_a_bot_author():
    store = InMemoryContentStore()
    service = PostService(store, ContentSettings())
    barrier = threading.Barrier(2, timeout=5)

    def hold_author_lookups(collection):
        if collection == "authors":
            barrier.wait()

    store.after_find = hold_author_lookups
    errors = []

    def create(title):
        try:
            service.create_post({"title": title})
        except Exception as e:  # surfaced by the assertion below
            errors.append(e)

    threads = [threading.Thread(target=create, args=(f"Racer {i}",)) for i in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    bots = [doc for doc in store.docs("authors") if doc["name"] == "API Bot"]
    assert len(bots) == 2
    assert len(store.docs("posts")) == 2
