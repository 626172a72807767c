"""Authentication and session endpoints using the service layer."""

from __future__ import annotations

import secrets
from typing import NoReturn

from flask import Blueprint, current_app, redirect, request

from learnhub.api.deps import (
    build_auth_service,
    current_actor_id,
    get_oauth_provider,
    json_response,
    require_roles,
    session_metadata,
    timing,
)
from learnhub.schemas import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    MessageSchema,
    OAuthCallbackSchema,
    RefreshTokenSchema,
    RegisterSchema,
    SessionSchema,
    TokenPairSchema,
    UserSchema,
)
from learnhub.services._shared.errors import OAuthLoginError
from learnhub.services.auth.dto import LoginIn, RegisterIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

OAUTH_STATE_COOKIE = "learnhub_oauth_state"
OAUTH_STATE_MAX_AGE = 600

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_schema = TokenPairSchema()
session_list_schema = SessionSchema(many=True)
message_schema = MessageSchema()
oauth_callback_schema = OAuthCallbackSchema()


@bp.post("/register")
@timing
def register():
    """Register a local account and return its public representation."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    user = build_auth_service().register(RegisterIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and open a session."""

    payload = login_schema.load(request.get_json(silent=True) or {})
    out = build_auth_service().login(LoginIn(**payload), session_metadata())
    return json_response({"data": login_response_schema.dump(out)})


def _oauth_failed(reason: str) -> NoReturn:
    current_app.logger.info("auth.oauth_failed", extra={"reason": reason, "operation": "login_oauth"})
    raise OAuthLoginError(reason)


@bp.get("/google")
@timing
def google_login():
    """Redirect to Google's consent screen with a fresh anti-forgery state."""

    state = secrets.token_urlsafe(32)
    response = redirect(get_oauth_provider().authorization_url(state))
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("OAUTH_STATE_COOKIE_SECURE", True)),
    )
    return response


@bp.get("/google/redirect")
@timing
def google_callback():
    """Finish Google sign-in: check state, exchange the code and open a session."""

    args = oauth_callback_schema.load(request.args)
    if args["error"]:
        _oauth_failed(f"provider_error:{args['error']}")

    expected = (request.cookies.get(OAUTH_STATE_COOKIE) or "").encode()
    state = (args["state"] or "").encode()
    if not expected or not secrets.compare_digest(state, expected):
        _oauth_failed("state_mismatch")
    if not args["code"]:
        _oauth_failed("missing_code")

    profile = get_oauth_provider().fetch_profile(args["code"])
    out = build_auth_service().login_oauth(profile, session_metadata())
    response = json_response({"data": login_response_schema.dump(out)})
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new token pair."""

    payload = refresh_schema.load(request.get_json(silent=True) or {})
    pair = build_auth_service().refresh(payload["refresh_token"], session_metadata())
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """End the session of the given refresh token; always succeeds."""

    payload = logout_schema.load(request.get_json(silent=True) or {})
    out = build_auth_service().logout(payload.get("refresh_token"))
    return json_response({"data": message_schema.dump(out)})


@bp.post("/logout-all-devices")
@require_roles("auth.logout_all")
@timing
def logout_all_devices():
    """Revoke every session of the authenticated user."""

    out = build_auth_service().logout_all(current_actor_id())
    return json_response({"data": message_schema.dump(out)})


@bp.get("/sessions")
@require_roles("auth.sessions")
@timing
def list_sessions():
    """List the authenticated user's active sessions."""

    sessions = build_auth_service().list_sessions(current_actor_id())
    return json_response({"data": session_list_schema.dump(sessions)})


@bp.delete("/sessions/<string:session_id>")
@require_roles("auth.revoke_session")
@timing
def revoke_session(session_id: str):
    """Revoke one of the authenticated user's sessions."""

    out = build_auth_service().revoke_session(current_actor_id(), session_id)
    return json_response({"data": message_schema.dump(out)})
