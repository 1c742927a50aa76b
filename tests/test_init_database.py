"""
Tests for the database seeding script.
"""

from init_database import DEFAULT_LEVELS, init_database, seed_admin, seed_levels
from models import Level, User, ROLE_ADMIN


def test_seed_levels_once(ctx):
    assert len(seed_levels()) == len(DEFAULT_LEVELS)
    assert seed_levels() == []
    assert Level.query.count() == len(DEFAULT_LEVELS)


def test_seed_admin_once(ctx):
    assert seed_admin('root', 'pw').role == ROLE_ADMIN
    assert seed_admin('other', 'pw') is None
    assert User.query.filter_by(role=ROLE_ADMIN).count() == 1


def test_init_database_reads_environment(app, monkeypatch):
    monkeypatch.setenv('ADMIN_NAME', 'headmaster')
    monkeypatch.setenv('ADMIN_PASSWORD', 'secret')

    assert init_database(app) is True

    with app.app_context():
        assert User.query.filter_by(name='headmaster').one().is_admin
        assert Level.query.count() == len(DEFAULT_LEVELS)


def test_init_database_without_password(app, monkeypatch):
    monkeypatch.delenv('ADMIN_PASSWORD', raising=False)

    init_database(app)

    with app.app_context():
        assert User.query.count() == 0
