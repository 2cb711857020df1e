from __future__ import annotations
from functools import wraps
import logging

from flask import request, g, abort, current_app

from api.extensions import get_sessions

logger = logging.getLogger(__name__)

REFRESH_TOKEN_HEADER = "X-Refresh-Token"


def _bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def jwt_required():
    """
    Reject the request with 401 unless it carries a valid, unused access token.
    On success the caller's identity is on g.current_user and, when rotation is
    on, a new refresh token is waiting on g.refresh_token for the response
    header.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _bearer_token()
            if token is None:
                abort(401, description="Unauthorized")

            rotate = current_app.config.get("AUTH_ROTATE_ON_REQUEST", True)
            result = get_sessions().validate_access_token(token, rotate=rotate)
            if not result.ok:
                logger.info("%s %s rejected: %s", request.method, request.path, result.error.value)
                abort(401, description="Unauthorized")

            g.current_user = result.value.identity
            g.refresh_token = result.value.refresh_token
            return fn(*args, **kwargs)

        return wrapper

    return decorator

def roles_required(required_roles: list[str]):
    """
    Allow access if the user's role is one of required_roles, 403 otherwise.
    """
    req = set(required_roles or [])
    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            if g.current_user.role not in req:
                abort(403, description="Insufficient role")
            return fn(*args, **kwargs)

        return wrapper

    return decorator

def attach_refresh_token(response):
    """after_request hook: hand the freshly minted refresh token to the client."""
    token = g.pop("refresh_token", None)
    if token:
        response.headers[REFRESH_TOKEN_HEADER] = token
    return response
