from datetime import datetime
from types import SimpleNamespace

import pytest

from callboard import create_app
from callboard.config import Config
from callboard.extensions import db
from callboard.models import Attendance, Organization, Show, User

PASSWORD = "correct-horse"


def _make_config(db_uri: str):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = db_uri
        LOG_LEVEL = "WARNING"
    return TestConfig


@pytest.fixture
def app(tmp_path):
    app = create_app(_make_config(f"sqlite:///{(tmp_path / 'test.db').as_posix()}"))
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


def _user(email, role, org_id, first, last):
    u = User(email=email, role=role, organization_id=org_id, first_name=first, last_name=last)
    u.set_password(PASSWORD)
    db.session.add(u)
    return u


@pytest.fixture
def seed(app):
    """Two organizations; ids only, so nothing is bound to a closed session."""
    with app.app_context():
        globe = Organization(name="Globe Players", slug="globe", timezone="UTC", week_starts_on=0,
                             display_title="Hamlet")
        rose = Organization(name="Rose Company", slug="rose", timezone="UTC")
        db.session.add_all([globe, rose])
        db.session.flush()

        admin = _user("admin@globe.test", "admin", globe.id, "Ada", "Admin")
        alice = _user("alice@globe.test", "actor", globe.id, "Alice", "Anderson")
        bob = _user("bob@globe.test", "actor", globe.id, "Bob", "Brown")
        rose_admin = _user("admin@rose.test", "admin", rose.id, "Rita", "Rose")
        rose_actor = _user("carol@rose.test", "actor", rose.id, "Carol", "Clark")
        db.session.commit()

        return SimpleNamespace(
            org_id=globe.id,
            other_org_id=rose.id,
            admin_id=admin.id,
            alice_id=alice.id,
            bob_id=bob.id,
            rose_admin_id=rose_admin.id,
            rose_actor_id=rose_actor.id,
        )


def _login(app, email):
    client = app.test_client()
    res = client.post("/login", json={"email": email, "password": PASSWORD})
    assert res.status_code == 200, res.get_json()
    return client


@pytest.fixture
def admin_client(app, seed):
    return _login(app, "admin@globe.test")


@pytest.fixture
def alice_client(app, seed):
    return _login(app, "alice@globe.test")


@pytest.fixture
def bob_client(app, seed):
    return _login(app, "bob@globe.test")


@pytest.fixture
def rose_admin_client(app, seed):
    return _login(app, "admin@rose.test")


@pytest.fixture
def rose_actor_client(app, seed):
    return _login(app, "carol@rose.test")


@pytest.fixture
def today():
    # organizations in the fixtures run on UTC wall-clock time
    return datetime.utcnow().date()


@pytest.fixture
def make_show(app, seed):
    def _make(day, show_time="19:00", org_id=None, **fields):
        with app.app_context():
            show = Show(organization_id=org_id or seed.org_id, date=day, show_time=show_time, **fields)
            db.session.add(show)
            db.session.commit()
            return show.id
    return _make


@pytest.fixture
def load_show(app):
    def _load(show_id):
        with app.app_context():
            show = db.session.get(Show, show_id)
            if show is None:
                return None
            return SimpleNamespace(**show.to_dict())
    return _load


@pytest.fixture
def attendance_row(app):
    def _get(user_id, show_id):
        with app.app_context():
            row = db.session.get(Attendance, (user_id, show_id))
            return SimpleNamespace(**row.to_dict()) if row else None
    return _get


@pytest.fixture
def active_count(app):
    def _count(org_id):
        with app.app_context():
            return (
                db.session.query(Show)
                .filter(Show.organization_id == org_id, Show.active_at.isnot(None))
                .count()
            )
    return _count
