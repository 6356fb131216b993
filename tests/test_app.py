import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from practice_backend import create_app
from practice_backend.database.models import db
from practice_backend.operations.health_monitor import check_health


def test_unknown_route_returns_json_error(client):
    resp = client.get('/api/nope')
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Route not found"}


def test_wrong_method_returns_json_error(client):
    resp = client.delete('/api/products')
    assert resp.status_code == 405
    assert "error" in resp.get_json()


def test_unexpected_error_hides_details(client, services, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("secret stack detail")

    monkeypatch.setattr(services.catalog, "list_all", explode)
    resp = client.get('/api/products')
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


def test_health_ok(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "OK"
    assert body["checks"]["db"]["ok"] is True
    assert body["checks"]["cache"]["ok"] is True


def test_health_tolerates_cache_outage(services, cache, monkeypatch):
    def down():
        raise RedisConnectionError("no redis")

    monkeypatch.setattr(cache, "ping", down)
    res = check_health(services)
    assert res["overall_ok"] is True
    assert res["cache"]["ok"] is False
    assert res["cache"]["error"] == "unavailable"


def test_health_does_not_expose_backend_errors(client, cache, monkeypatch):
    def down():
        raise RedisConnectionError("Error 111 connecting to redis.internal:6379")

    monkeypatch.setattr(cache, "ping", down)
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json()["checks"]["cache"] == {"ok": False, "error": "unavailable"}
    assert b"redis.internal" not in resp.data


def test_services_are_per_app(app, tmp_path):
    other = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'other.db'}",
        'JWT_SECRET_KEY': 'another_secret',
        'AUDIT_LOG_DIR': str(tmp_path / 'other_audit'),
        'RATELIMIT_ENABLED': False,
    }, cache=fakeredis.FakeRedis(server=fakeredis.FakeServer()))
    ours = app.extensions['practice_backend']
    theirs = other.extensions['practice_backend']
    assert ours is not theirs
    assert ours.cache is not theirs.cache
    assert other.config['JWT_SECRET_KEY'] == 'another_secret'


def test_missing_signing_key_is_refused(tmp_path):
    with pytest.raises(RuntimeError):
        create_app({
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'nokey.db'}",
            'JWT_SECRET_KEY': '',
            'AUDIT_LOG_DIR': str(tmp_path),
        }, cache=fakeredis.FakeRedis(server=fakeredis.FakeServer()))


@pytest.fixture
def limited_client(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'limited.db'}",
        'JWT_SECRET_KEY': 'test_secret',
        'AUDIT_LOG_DIR': str(tmp_path / 'audit'),
        'RATELIMIT_ENABLED': True,
        'RATELIMIT_DEFAULT': '2 per minute',
    }, cache=fakeredis.FakeRedis(server=fakeredis.FakeServer()))
    with app.app_context():
        db.create_all()
    return app.test_client()


def test_rate_limit_returns_json_error(limited_client):
    assert limited_client.get('/api/products').status_code == 200
    assert limited_client.get('/api/products').status_code == 200
    resp = limited_client.get('/api/products')
    assert resp.status_code == 429
    assert "error" in resp.get_json()

    # health checks are exempt
    for _ in range(3):
        assert limited_client.get('/health').status_code == 200
