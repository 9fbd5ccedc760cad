import logging

import pytest

from contentdesk import create_app
from contentdesk.extensions import db as _db
from contentdesk.store import get_content_store


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return get_content_store()


@pytest.fixture
def author(store):
    return store.create("authors", {"name": "Jane Doe", "bio": "Staff writer"})


@pytest.fixture
def content_logs(caplog):
    caplog.set_level(logging.INFO, logger="contentdesk")
    return caplog
