from decimal import Decimal

import pytest

from app import create_app
from config import Config
from models import db
from models.slot import Slot
from models.user import User, UserRole
from security.password import hash_password
from security.session import Principal

PASSWORD = "correct-horse-9"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    BCRYPT_ROUNDS = 4
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "test.db")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for tests that call services directly."""
    with app.app_context():
        yield app


def make_user(email, role="user", full_name=None):
    user = User(email=email, password_hash=hash_password(PASSWORD), full_name=full_name)
    user.role_binding = UserRole(role=role)
    db.session.add(user)
    db.session.commit()
    return user


def make_slot(slot_number="A1", zone="A", price="2.00"):
    slot = Slot(slot_number=slot_number, zone=zone, price_per_hour=Decimal(price))
    db.session.add(slot)
    db.session.commit()
    return slot


def principal(user):
    return Principal(user_id=user.id, email=user.email, role=user.role)


def login(client, email, password=PASSWORD):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


def csrf(client):
    return {"X-CSRF-Token": client.get_cookie("csrf_token").value}


@pytest.fixture
def people(app):
    """One account per role, plus a second plain user. Returns ids by name."""
    with app.app_context():
        return {
            "user": make_user("student@campus.edu", "user", "Sam Student").id,
            "other": make_user("other@campus.edu", "user").id,
            "staff": make_user("guard@campus.edu", "parking_staff").id,
            "admin": make_user("admin@campus.edu", "admin").id,
        }


@pytest.fixture
def slot_id(app):
    with app.app_context():
        return make_slot().id


def _client_for(app, email):
    return login(app.test_client(), email)


@pytest.fixture
def user_client(app, people):
    return _client_for(app, "student@campus.edu")


@pytest.fixture
def other_client(app, people):
    return _client_for(app, "other@campus.edu")


@pytest.fixture
def staff_client(app, people):
    return _client_for(app, "guard@campus.edu")


@pytest.fixture
def admin_client(app, people):
    return _client_for(app, "admin@campus.edu")
