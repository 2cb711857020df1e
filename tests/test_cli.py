from __future__ import annotations

import json

from conftest import create_user
from models.user import Role, User


def test_create_admin_provisions_user(app, client) -> None:
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-admin", "--email", "Boss@Example.com", "--password", "supersecret"])

    assert result.exit_code == 0, result.output
    admin = json.loads(result.output)["admin"]
    assert admin["email"] == "boss@example.com"
    assert admin["role"] == "ADMIN"

    res = client.post("/api/auth/login", json={"email": "boss@example.com", "password": "supersecret"})
    assert res.status_code == 201
    assert res.get_json()["user"]["role"] == "ADMIN"


def test_create_admin_promotes_existing_user(app, storage) -> None:
    create_user(storage, "member@example.com", "old-password", Role.USER)

    result = app.test_cli_runner().invoke(
        args=["create-admin", "--email", "member@example.com", "--password", "new-password"]
    )

    assert result.exit_code == 0, result.output
    storage.close()
    users = storage.get_session().query(User).filter(User.email == "member@example.com").all()
    assert len(users) == 1
    assert users[0].role is Role.ADMIN


def test_create_admin_rejects_short_password(app) -> None:
    result = app.test_cli_runner().invoke(
        args=["create-admin", "--email", "boss@example.com", "--password", "short"]
    )
    assert result.exit_code != 0
