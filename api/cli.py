"""
Flask CLI commands:
- flask --app api create-admin --email admin@example.com --password ...
"""
import json

import click
from flask import Flask
from marshmallow import ValidationError

from api.extensions import get_storage
from models.schemas.user import UserCreateSchema
from models.user import Role, User
from services.credentials import Identity
from utils.security import hash_password


def register_commands(app: Flask) -> None:
    @app.cli.command("create-admin")
    @click.option("--email", required=True)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(email: str, password: str):
        """Create an ADMIN user, or promote and reset the password of an existing one."""
        try:
            data = UserCreateSchema().load({"email": email, "password": password})
        except ValidationError as err:
            raise click.ClickException(json.dumps(err.messages))
        storage = get_storage()
        session = storage.get_session()

        user = session.query(User).filter(User.email == data["email"]).first()
        if user is None:
            user = User(email=data["email"])
        user.password_hash = hash_password(data["password"])
        user.role = Role.ADMIN
        storage.new(user)
        storage.save()

        click.echo(json.dumps({"admin": Identity.from_user(user).to_dict()}))
