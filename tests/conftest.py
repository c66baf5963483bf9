import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app
from models import User, db
from services.identity import hash_password

TEST_PEPPER = "test-pepper"

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SECRET_KEY": "test",
    "JWT_SECRET_KEY": "test-jwt-secret-key-with-enough-bytes",
    "PEPPER": TEST_PEPPER,
    "ADMIN_USERNAME": "admin",
    "ADMIN_PASSWORD": "admin123",
    "ADMIN_EMAIL": "admin@theatre.com",
    "SEED_ON_STARTUP": True,
}


@pytest.fixture()
def app():
    app = create_app(dict(TEST_CONFIG))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def customer(session):
    user = User(
        username="alice",
        password_hash=hash_password("Secret123!", TEST_PEPPER),
        email="alice@example.com",
        role="customer",
    )
    session.add(user)
    session.commit()
    return user.to_session_dict()
