import pytest

from contentdesk.hooks import AFTER_CHANGE, BEFORE_CHANGE, HookDispatcher, register_collection_hooks
from tests.helpers import make_post


@pytest.fixture
def dispatcher():
    return HookDispatcher()


def test_handlers_run_in_registration_order(dispatcher):
    calls = []
    dispatcher.register("posts", BEFORE_CHANGE, lambda data, **ctx: calls.append("first"))
    dispatcher.register("posts", BEFORE_CHANGE, lambda data, **ctx: calls.append("second"))

    dispatcher.before_change("posts", {}, operation="create")

    assert calls == ["first", "second"]


def test_returned_payload_replaces_input(dispatcher):
    dispatcher.register("posts", BEFORE_CHANGE, lambda data, **ctx: {**data, "slug": "changed"})
    dispatcher.register("posts", BEFORE_CHANGE, lambda data, **ctx: None)

    result = dispatcher.before_change("posts", {"slug": "original"}, operation="update")

    assert result == {"slug": "changed"}


def test_handlers_are_scoped_to_collection_and_phase(dispatcher):
    calls = []
    dispatcher.register("authors", AFTER_CHANGE, lambda doc, **ctx: calls.append(ctx["operation"]))

    dispatcher.after_change("posts", {}, operation="create")
    dispatcher.before_change("authors", {}, operation="create")
    dispatcher.after_change("authors", {}, operation="update")

    assert calls == ["update"]


def test_handlers_receive_collection_and_context(dispatcher):
    seen = []
    dispatcher.register("posts", BEFORE_CHANGE, lambda data, **ctx: seen.append(ctx))
    dispatcher.register("posts", AFTER_CHANGE, lambda doc, **ctx: seen.append(ctx))

    dispatcher.before_change("posts", {}, operation="update", original_doc={"id": 1})
    dispatcher.after_change("posts", {}, operation="update", previous_doc={"id": 1})

    assert seen == [
        {"collection": "posts", "operation": "update", "original_doc": {"id": 1}},
        {"collection": "posts", "operation": "update", "previous_doc": {"id": 1}},
    ]


def test_store_writes_pass_through_hooks(client):
    response = client.post("/api/custom/posts", json={"title": "Hi", "status": "published"})

    assert response.status_code == 200
    assert response.get_json()["created"]["status"] == "published"


def test_unknown_phase_is_rejected(dispatcher):
    with pytest.raises(ValueError):
        dispatcher.register("posts", "before_delete", lambda doc, **ctx: None)


def test_handler_exceptions_propagate(dispatcher):
    def boom(data, **ctx):
        raise RuntimeError("abort")

    dispatcher.register("posts", BEFORE_CHANGE, boom)

    with pytest.raises(RuntimeError):
        dispatcher.before_change("posts", {}, operation="create")


def test_collection_hooks_leave_payloads_unchanged(dispatcher):
    register_collection_hooks(dispatcher)
    data = {"title": "Untouched", "slug": "untouched"}
    doc = {"id": 1, "name": "Ann"}

    assert dispatcher.before_change("posts", dict(data), operation="create") == data
    assert dispatcher.after_change("authors", dict(doc), operation="create") == doc


def test_post_writes_are_logged(store, author, content_logs):
    post = make_post(store, author["id"], "Logged Post")
    store.update("posts", post["id"], {"status": "published"})

    messages = [record.getMessage() for record in content_logs.records]
    assert "[posts] before_change (create): title='Logged Post'" in messages
    assert any(m.startswith("[posts] after_change (create)") for m in messages)
    assert any(m.startswith("[posts] before_change (update)") for m in messages)
    assert f"[posts] after_change (update): id={post['id']} title='Logged Post' status=published" in messages


def test_author_writes_are_logged(store, content_logs):
    store.create("authors", {"name": "Logged Author"})

    messages = [record.getMessage() for record in content_logs.records]
    assert any(
        m.startswith("[authors] after_change (create)") and "Logged Author" in m
        for m in messages
    )
