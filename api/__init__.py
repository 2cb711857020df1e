import atexit
import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from services.mailer import Mailer
from services.session_manager import SessionManager

API_PREFIX = "/api"

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Portfolio API",
        "version": "1.0.0",
        "description": (
            "REST API for managing portfolio projects. Writes require an ADMIN access token "
            "from /api/auth/login. Access tokens work once; each protected response carries "
            "an X-Refresh-Token header to exchange at /api/auth/refresh-token."
        ),
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app, and owns the
    lifecycle of the storage handle and the services built on top of it.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config), then explicit overrides
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from utils.decorators import REFRESH_TOKEN_HEADER, attach_refresh_token

    # Browsers only let scripts read the rotation header if it is exposed
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        expose_headers=[REFRESH_TOKEN_HEADER],
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(
        app.config["DATABASE_URL"],
        echo=app.config.get("DB_ECHO", False),
        timeout=app.config.get("DB_TIMEOUT_SECONDS", 5.0),
    )
    storage.reload()
    app.extensions["storage"] = storage
    app.extensions["session_manager"] = SessionManager.from_config(storage, app.config)
    app.extensions["mailer"] = Mailer.from_config(app.config)
    atexit.register(storage.dispose)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .projects import bp as projects_bp
    from .contact import bp as contact_bp
    from .cli import register_commands

    app.register_blueprint(health_bp, url_prefix=API_PREFIX)
    app.register_blueprint(auth_bp, url_prefix=f"{API_PREFIX}/auth")
    app.register_blueprint(projects_bp, url_prefix=API_PREFIX)
    app.register_blueprint(contact_bp, url_prefix=API_PREFIX)
    register_commands(app)

    app.after_request(attach_refresh_token)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to the Portfolio API",
            "docs": "/apidocs/",
            "health": f"{API_PREFIX}/health",
        }, 200

    return app
