"""
Authentication blueprint:
- POST /auth/login          -> access token + user view
- POST /auth/refresh-token  -> spends a refresh token, returns a new access token
- POST /auth/logout         -> drops every refresh token of the caller
- GET  /auth/me             -> identity behind the bearer token

Access tokens are single-use: each protected request spends the one it
carries and gets a new refresh token back in the X-Refresh-Token header.
Every authentication failure is a plain 401; the reason is only logged.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from models.schemas.user import UserLoginSchema, RefreshTokenSchema
from api.extensions import get_sessions
from utils.decorators import jwt_required

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_login_schema = UserLoginSchema()
refresh_token_schema = RefreshTokenSchema()


@bp.post("/login")
def login():
    """
    Login: return a single-use access token and the user view
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string, format: email }
             password: { type: string }
    responses:
      201:
        description: Created (returns access_token and user)
      400:
        description: Validation error
      401:
        description: Unauthorized
    """
    payload = user_login_schema.load(request.get_json(silent=True) or {})

    result = get_sessions().login(payload["email"], payload["password"])
    if not result.ok:
        abort(401, description="Invalid credentials")

    return jsonify(result.value.to_dict()), 201

@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token (from the X-Refresh-Token header of a previous
    protected call) for a new access token. Each refresh token works once.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      201:
        description: Created (returns access_token and user)
      400:
        description: Validation error
      401:
        description: Invalid, expired, reused or unknown refresh token
    """
    payload = refresh_token_schema.load(request.get_json(silent=True) or {})

    result = get_sessions().refresh_tokens(payload["refresh_token"])
    if not result.ok:
        abort(401, description="Invalid refresh token")

    return jsonify(result.value.to_dict()), 201

@bp.post("/logout")
@jwt_required()
def logout():
    """
    logout: revokes every refresh token of the current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: ""
      401:
        description: Unauthorized
    """
    get_sessions().invalidate_all(g.current_user.id)
    # the token minted for this very request was just revoked
    g.pop("refresh_token", None)
    return ("", 204)

@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"data": g.current_user.to_dict()}), 200
