"""
Accessors for the per-app service instances wired up in create_app().
Views call these instead of importing module-level singletons.
"""
from flask import current_app

from models.db_storage import DBStorage
from services.mailer import Mailer
from services.session_manager import SessionManager


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_sessions() -> SessionManager:
    return current_app.extensions["session_manager"]


def get_mailer() -> Mailer:
    return current_app.extensions["mailer"]
