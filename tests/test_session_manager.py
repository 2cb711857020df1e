from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD
from services.errors import AuthError
from services.session_manager import SessionManager
from utils.security import generate_jti, sign_token


def test_login_returns_access_token_and_public_view(sessions, admin_user) -> None:
    result = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert result.ok
    body = result.value.to_dict()
    assert body["access_token"]
    assert body["user"] == {"id": admin_user.id, "email": ADMIN_EMAIL, "role": "ADMIN"}
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


def test_login_normalizes_email_case(sessions, admin_user) -> None:
    assert sessions.login("  Admin@Example.COM ", ADMIN_PASSWORD).ok


def test_login_with_bad_credentials_issues_nothing(sessions, admin_user) -> None:
    wrong_password = sessions.login(ADMIN_EMAIL, "not-the-password")
    unknown_user = sessions.login("ghost@example.com", ADMIN_PASSWORD)

    assert wrong_password.error is AuthError.INVALID_CREDENTIALS
    assert unknown_user.error is AuthError.INVALID_CREDENTIALS
    assert wrong_password.value is None
    assert sessions.store.refresh_tokens(admin_user.id) == []


def test_access_token_is_single_use(sessions, admin_user) -> None:
    token = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token

    first = sessions.validate_access_token(token)
    second = sessions.validate_access_token(token)

    assert first.ok
    assert first.value.identity.email == ADMIN_EMAIL
    assert sessions.store.is_token_used(admin_user.id, first.value.token_id)
    assert second.error is AuthError.TOKEN_ALREADY_USED


def test_validation_with_rotation_stores_new_refresh_token(sessions, admin_user) -> None:
    token = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token

    result = sessions.validate_access_token(token, rotate=True)

    assert result.ok
    assert result.value.refresh_token
    assert sessions.store.refresh_tokens(admin_user.id) == [result.value.refresh_token]


def test_replayed_access_token_does_not_mint_refresh_token(sessions, admin_user) -> None:
    token = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token
    sessions.validate_access_token(token, rotate=True)

    replay = sessions.validate_access_token(token, rotate=True)

    assert replay.error is AuthError.TOKEN_ALREADY_USED
    assert len(sessions.store.refresh_tokens(admin_user.id)) == 1


def test_malformed_access_token(sessions, admin_user) -> None:
    assert sessions.validate_access_token("garbage").error is AuthError.TOKEN_MALFORMED
    assert sessions.validate_access_token("").error is AuthError.TOKEN_MALFORMED


def test_refresh_token_is_not_accepted_as_access_token(sessions, admin_user) -> None:
    refresh = sessions.issue_refresh_token(admin_user.id, admin_user.email)
    assert sessions.validate_access_token(refresh).error is AuthError.TOKEN_MALFORMED


def test_expired_access_token(app, storage, admin_user) -> None:
    past = datetime.now(timezone.utc) - app.config["JWT_EXPIRES"] - timedelta(minutes=1)
    stale = SessionManager.from_config(storage, app.config, clock=lambda: past)
    token = stale.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token

    live = app.extensions["session_manager"]
    assert live.validate_access_token(token).error is AuthError.TOKEN_EXPIRED


def test_access_token_of_deleted_user(app, sessions) -> None:
    token = sign_token(
        {"sub": str(uuid.uuid4()), "email": "gone@example.com", "jti": generate_jti(), "type": "access"},
        app.config["JWT_SECRET"],
        app.config["JWT_EXPIRES"],
        issuer=app.config["JWT_ISSUER"],
    )
    assert sessions.validate_access_token(token).error is AuthError.USER_NOT_FOUND



def test_access_token_from_other_issuer_is_rejected(app, sessions, admin_user) -> None:
    token = sign_token(
        {"sub": admin_user.id, "email": admin_user.email, "jti": generate_jti(), "type": "access"},
        app.config["JWT_SECRET"],
        app.config["JWT_EXPIRES"],
        issuer="someone-else",
    )
    assert sessions.validate_access_token(token).error is AuthError.TOKEN_MALFORMED

def test_refresh_consumes_token(sessions, admin_user) -> None:
    refresh = sessions.issue_refresh_token(admin_user.id, admin_user.email)

    first = sessions.refresh_tokens(refresh)
    second = sessions.refresh_tokens(refresh)

    assert first.ok
    assert first.value.user.role == "ADMIN"
    assert refresh not in sessions.store.refresh_tokens(admin_user.id)
    assert second.error is AuthError.INVALID_REFRESH_TOKEN
    # the new access token is usable
    assert sessions.validate_access_token(first.value.access_token).ok


def test_refresh_only_consumes_the_presented_token(sessions, admin_user) -> None:
    keep = sessions.issue_refresh_token(admin_user.id, admin_user.email)
    spend = sessions.issue_refresh_token(admin_user.id, admin_user.email)

    assert sessions.refresh_tokens(spend).ok
    assert sessions.store.refresh_tokens(admin_user.id) == [keep]


def test_refresh_rejects_unrecorded_but_validly_signed_token(app, sessions, admin_user) -> None:
    forged = sign_token(
        {"sub": admin_user.id, "email": admin_user.email, "jti": generate_jti(), "type": "refresh"},
        app.config["JWT_REFRESH_SECRET"],
        app.config["JWT_REFRESH_EXPIRES"],
        issuer=app.config["JWT_ISSUER"],
    )
    assert sessions.refresh_tokens(forged).error is AuthError.INVALID_REFRESH_TOKEN


def test_refresh_rejects_access_token_and_garbage(sessions, admin_user) -> None:
    access = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token
    assert sessions.refresh_tokens(access).error is AuthError.INVALID_REFRESH_TOKEN
    assert sessions.refresh_tokens("invalid-refresh-token").error is AuthError.INVALID_REFRESH_TOKEN


def test_refresh_for_unknown_subject(app, sessions) -> None:
    token = sign_token(
        {"sub": str(uuid.uuid4()), "email": "gone@example.com", "jti": generate_jti(), "type": "refresh"},
        app.config["JWT_REFRESH_SECRET"],
        app.config["JWT_REFRESH_EXPIRES"],
        issuer=app.config["JWT_ISSUER"],
    )
    assert sessions.refresh_tokens(token).error is AuthError.INVALID_REFRESH_TOKEN


def test_expired_refresh_token(app, storage, sessions, admin_user) -> None:
    past = datetime.now(timezone.utc) - app.config["JWT_REFRESH_EXPIRES"] - timedelta(minutes=1)
    stale = SessionManager.from_config(storage, app.config, clock=lambda: past)
    refresh = stale.issue_refresh_token(admin_user.id, admin_user.email)

    assert refresh in sessions.store.refresh_tokens(admin_user.id)
    assert sessions.refresh_tokens(refresh).error is AuthError.INVALID_REFRESH_TOKEN


def test_invalidate_all_revokes_refresh_tokens(sessions, admin_user) -> None:
    refresh = sessions.issue_refresh_token(admin_user.id, admin_user.email)
    sessions.issue_refresh_token(admin_user.id, admin_user.email)

    sessions.invalidate_all(admin_user.id)
    sessions.invalidate_all(admin_user.id)

    assert sessions.store.refresh_tokens(admin_user.id) == []
    assert sessions.refresh_tokens(refresh).error is AuthError.INVALID_REFRESH_TOKEN


def test_invalidate_all_keeps_spent_ids_unless_asked(sessions, admin_user) -> None:
    token = sessions.login(ADMIN_EMAIL, ADMIN_PASSWORD).value.access_token
    token_id = sessions.validate_access_token(token).value.token_id

    sessions.invalidate_all(admin_user.id)
    assert sessions.store.is_token_used(admin_user.id, token_id)

    sessions.invalidate_all(admin_user.id, include_used=True)
    assert not sessions.store.is_token_used(admin_user.id, token_id)


def test_concurrent_refresh_has_exactly_one_winner(storage, sessions, admin_user) -> None:
    refresh = sessions.issue_refresh_token(admin_user.id, admin_user.email)
    storage.close()

    workers = 4
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def attempt():
        barrier.wait()
        try:
            outcome = sessions.refresh_tokens(refresh)
        finally:
            storage.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(results) == workers
    assert sum(1 for r in results if r.ok) == 1
    assert all(r.error is AuthError.INVALID_REFRESH_TOKEN for r in results if not r.ok)
