import fakeredis
import pytest

from practice_backend import create_app
from practice_backend.database.models import db


@pytest.fixture
def cache():
    # a fresh server per test so cached listings never leak between tests
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())


@pytest.fixture
def app(tmp_path, cache):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'practice.db'}",
        'JWT_SECRET_KEY': 'test_secret',
        'AUDIT_LOG_DIR': str(tmp_path / 'audit'),
        'RATELIMIT_ENABLED': False,
        # cheap hashing keeps the suite fast
        'ARGON2_TIME_COST': 1,
        'ARGON2_MEMORY_COST': 8,
        'ARGON2_PARALLELISM': 1,
    }, cache=cache)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    """Service context with an app context pushed for direct calls."""
    with app.app_context():
        yield app.extensions['practice_backend']
        db.session.remove()


@pytest.fixture
def register_user(client):
    def _register(email, password="secret1", role=None):
        payload = {"email": email, "password": password}
        if role:
            payload["role"] = role
        resp = client.post('/api/auth/register', json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _register


@pytest.fixture
def user_token(register_user):
    return register_user("user@example.com")["token"]


@pytest.fixture
def admin_token(register_user):
    return register_user("admin@example.com", role="admin")["token"]
