from __future__ import annotations

import pytest

from api import create_app
from models.user import Role, User
from services.errors import MailDeliveryError
from utils.security import hash_password

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "password123"
USER_EMAIL = "visitor@example.com"
USER_PASSWORD = "visitor-pass-1"


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_contact_email(self, name: str, email: str, message: str) -> None:
        if self.fail:
            raise MailDeliveryError("Failed to send email")
        self.sent.append({"name": name, "email": email, "message": message})


@pytest.fixture
def app(tmp_path):
    app = create_app("test", {"DATABASE_URL": f"sqlite:///{tmp_path / 'portfolio_test.db'}"})
    app.extensions["mailer"] = FakeMailer()
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def sessions(app):
    return app.extensions["session_manager"]


@pytest.fixture
def mailer(app) -> FakeMailer:
    return app.extensions["mailer"]


def create_user(storage, email: str, password: str, role: Role = Role.USER) -> User:
    user = User(email=email, password_hash=hash_password(password), role=role)
    storage.new(user)
    storage.save()
    return user


@pytest.fixture
def admin_user(storage) -> User:
    return create_user(storage, ADMIN_EMAIL, ADMIN_PASSWORD, Role.ADMIN)


@pytest.fixture
def plain_user(storage) -> User:
    return create_user(storage, USER_EMAIL, USER_PASSWORD, Role.USER)


@pytest.fixture
def login(client):
    """Log in over HTTP and return a fresh access token."""
    def _login(email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD) -> str:
        res = client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 201, res.get_json()
        return res.get_json()["access_token"]

    return _login


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
