"""
Pytest configuration and fixtures.

Every test gets a fresh app on an in-memory SQLite database and a fake
object store in place of R2. Service-level tests run inside the ``ctx``
app context; API tests use the logged-in clients and set up data in their
own short app contexts so that Flask-Login state never leaks between
requests.
"""

import pytest

from app import create_app
from config import TestingConfig
from errors import StorageUnavailable
from extensions import db
from services import catalog

ADMIN_PASSWORD = 'admin-pass'
STUDENT_PASSWORD = 'student-pass'


class FakeStorage:
    """Stands in for ObjectStorageGateway; records every put()."""

    def __init__(self, enabled=True, fail=False, base_url='https://cdn.example.test/proofs'):
        self.enabled = enabled
        self.fail = fail
        self.base_url = base_url
        self.puts = []

    def put(self, data, key, mimetype=None):
        if not self.enabled:
            return None
        if self.fail:
            raise StorageUnavailable('The file could not be stored. Please try again later.')
        self.puts.append({'key': key, 'data': data, 'mimetype': mimetype})
        return f"{self.base_url}/{key}"


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def app(storage):
    app = create_app(TestingConfig)
    app.extensions['object_storage'] = storage
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for tests that call services directly."""
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def seed(app):
    """Create rows in a throwaway app context and hand back plain ids."""
    def _seed(fn):
        with app.app_context():
            return fn()
    return _seed


@pytest.fixture
def admin_id(seed):
    return seed(lambda: catalog.create_admin('admin', ADMIN_PASSWORD).id)


@pytest.fixture
def class_id(seed):
    return seed(lambda: catalog.create_class('7b').id)


@pytest.fixture
def student_id(seed, class_id):
    return seed(lambda: catalog.create_student('mia', STUDENT_PASSWORD, class_id).id)


def login(client, name, password):
    response = client.post('/login', json={'name': name, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def admin_client(app, admin_id):
    return login(app.test_client(), 'admin', ADMIN_PASSWORD)


@pytest.fixture
def student_client(app, student_id):
    return login(app.test_client(), 'mia', STUDENT_PASSWORD)
