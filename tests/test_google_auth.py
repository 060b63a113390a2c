# tests/test_google_auth.py

"""
Tests for Google sign-in and identity linking.
The provider endpoints are always mocked.
"""

from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from fastapi.testclient import TestClient
from sqlmodel import select

from core.config import settings
from core.google_oauth import GoogleOAuthError, GoogleUserInfo, exchange_code, fetch_user_info
from core.security import decode_access_token, sign_state, verify_state
from models import Administrator, User
from models.enums import AuthProvider, Role


@pytest.fixture
def google_configured(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(settings, "GOOGLE_REDIRECT_URI", "http://api.test/auth/google/callback")


def google_profile(email="gabi@example.com", subject="google-sub-1"):
    return GoogleUserInfo(email=email, name="Gabi", subject=subject, avatar_url="http://img.test/a.png")


def run_callback(client, profile, state):
    with patch("routers.google_auth.exchange_code", return_value="provider-token"), \
            patch("routers.google_auth.fetch_user_info", return_value=profile):
        return client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )


def login_state():
    return sign_state({"redirect": settings.APP_BASE_URL, "mode": "login"})


def link_state(user_id):
    return sign_state({"redirect": settings.APP_BASE_URL, "mode": "link", "user_id": user_id})


# -----------------------------------------------------
# Entry points
# -----------------------------------------------------
def test_google_login_not_configured(client: TestClient, monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", None)
    response = client.get("/auth/google", follow_redirects=False)
    assert response.status_code == 500
    assert response.json()["error"] == "provider_not_configured"


def test_google_login_redirects_to_consent(client: TestClient, google_configured):
    response = client.get("/auth/google", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "accounts.google.com"
    state = parse_qs(location.query)["state"][0]
    assert verify_state(state)["mode"] == "login"


def test_google_login_ignores_foreign_redirect(client: TestClient, google_configured):
    response = client.get("/auth/google", params={"redirect": "https://evil.test"}, follow_redirects=False)
    state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
    assert verify_state(state)["redirect"] == settings.APP_BASE_URL


def test_google_link_returns_url_for_current_user(client: TestClient, google_configured, make_user, headers_for):
    user = make_user(Role.administrator)

    response = client.post("/auth/google/link", json={}, headers=headers_for(user))

    assert response.status_code == 200
    state = parse_qs(urlparse(response.json()["url"]).query)["state"][0]
    claims = verify_state(state)
    assert claims["mode"] == "link"
    assert claims["user_id"] == user.id


def test_google_link_requires_auth(client: TestClient, google_configured):
    assert client.post("/auth/google/link", json={}).status_code == 401


def test_state_token_is_not_a_session(client: TestClient, make_user):
    """Test that a signed OAuth state cannot be replayed as a bearer token."""
    user = make_user(Role.administrator)
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {link_state(user.id)}"})
    assert response.status_code == 401


# -----------------------------------------------------
# Callback: login mode
# -----------------------------------------------------
def test_callback_provisions_new_tenant(client: TestClient, session, google_configured):
    response = run_callback(client, google_profile(), login_state())

    assert response.status_code == 302
    assert response.headers["location"].startswith(f"{settings.APP_BASE_URL}/#token=")

    user = session.exec(select(User).where(User.email == "gabi@example.com")).one()
    assert user.role is Role.administrator
    assert user.auth_provider is AuthProvider.google
    assert user.google_id == "google-sub-1"
    assert user.email_verified is True
    assert session.get(Administrator, user.administrator_id) is not None

    token = response.headers["location"].split("#token=", 1)[1]
    assert decode_access_token(token)["sub"] == user.id


def test_callback_signs_in_existing_email(client: TestClient, session, google_configured, make_user):
    existing = make_user(Role.operator, email="gabi@example.com", email_verified=False)

    response = run_callback(client, google_profile(), login_state())

    assert "#token=" in response.headers["location"]
    session.refresh(existing)
    assert existing.google_id == "google-sub-1"
    assert existing.email_verified is True
    # No new tenant for an existing account
    assert session.exec(select(Administrator)).all() == []


def test_callback_finds_user_by_google_id_first(client: TestClient, session, google_configured, make_user):
    owner = make_user(Role.administrator, email="old-address@example.com")
    owner.google_id = "google-sub-1"
    session.add(owner)
    session.commit()

    response = run_callback(client, google_profile(email="new-address@example.com"), login_state())

    token = response.headers["location"].split("#token=", 1)[1]
    assert decode_access_token(token)["sub"] == owner.id


def test_callback_refuses_second_identity(client: TestClient, session, google_configured, make_user):
    user = make_user(Role.administrator, email="gabi@example.com")
    user.google_id = "google-sub-1"
    session.add(user)
    session.commit()

    # Same email, different Google account
    response = run_callback(client, google_profile(subject="google-sub-2"), login_state())

    assert response.headers["location"].endswith("?error=google_other_identity_linked")
    session.refresh(user)
    assert user.google_id == "google-sub-1"


def test_callback_invalid_state_falls_back_to_login(client: TestClient, session, google_configured):
    response = run_callback(client, google_profile(), "tampered-state")

    assert response.headers["location"].startswith(f"{settings.APP_BASE_URL}/#token=")


def test_callback_without_code(client: TestClient, google_configured):
    response = client.get("/auth/google/callback", follow_redirects=False)
    assert response.status_code == 400
    assert response.json()["error"] == "missing_field"


def test_callback_provider_token_error(client: TestClient, google_configured):
    with patch("routers.google_auth.exchange_code", side_effect=GoogleOAuthError("token")):
        response = client.get(
            "/auth/google/callback",
            params={"code": "bad", "state": login_state()},
            follow_redirects=False,
        )
    assert response.headers["location"] == f"{settings.APP_BASE_URL}/?error=google_token"


def test_callback_provider_timeout_redirects(client: TestClient, google_configured):
    with patch("core.google_oauth.requests.post", side_effect=requests.Timeout("slow")):
        response = client.get(
            "/auth/google/callback",
            params={"code": "abc", "state": login_state()},
            follow_redirects=False,
        )
    assert response.status_code == 302
    assert response.headers["location"] == f"{settings.APP_BASE_URL}/?error=google_token"


def test_callback_profile_without_email(client: TestClient, google_configured):
    response = run_callback(client, google_profile(email=""), login_state())
    assert response.headers["location"] == f"{settings.APP_BASE_URL}/?error=google_no_email"


# -----------------------------------------------------
# Callback: link mode
# -----------------------------------------------------
def test_link_attaches_identity(client: TestClient, session, google_configured, make_user):
    user = make_user(Role.administrator, email="local@example.com")

    response = run_callback(client, google_profile(email="gabi@example.com"), link_state(user.id))

    assert response.headers["location"] == f"{settings.APP_BASE_URL}/?linked=1"
    session.refresh(user)
    assert user.google_id == "google-sub-1"
    assert user.auth_provider is AuthProvider.google
    assert user.avatar_url == "http://img.test/a.png"


def test_link_refused_when_identity_owned_by_other(client: TestClient, session, google_configured, make_user):
    owner = make_user(Role.administrator, email="owner@example.com")
    owner.google_id = "google-sub-1"
    session.add(owner)
    session.commit()
    requester = make_user(Role.administrator, email="requester@example.com")

    response = run_callback(client, google_profile(email="owner@example.com"), link_state(requester.id))

    assert response.headers["location"] == f"{settings.APP_BASE_URL}/?error=google_linked_to_other"
    session.refresh(requester)
    assert requester.google_id is None
    assert requester.auth_provider is AuthProvider.local


def test_link_refused_when_email_owned_by_other(client: TestClient, session, google_configured, make_user):
    make_user(Role.operator, email="gabi@example.com")
    requester = make_user(Role.administrator, email="requester@example.com")

    response = run_callback(client, google_profile(), link_state(requester.id))

    assert response.headers["location"].endswith("?error=google_linked_to_other")


# -----------------------------------------------------
# Provider client
# -----------------------------------------------------
def test_exchange_code_failure_raises(google_configured):
    failed = Mock(ok=False, status_code=400)
    failed.json.return_value = {"error": "invalid_grant"}
    with patch("core.google_oauth.requests.post", return_value=failed):
        with pytest.raises(GoogleOAuthError) as exc:
            exchange_code("bad-code")
    assert exc.value.stage == "token"


def test_exchange_code_success(google_configured):
    ok = Mock(ok=True, status_code=200)
    ok.json.return_value = {"access_token": "at-123"}
    with patch("core.google_oauth.requests.post", return_value=ok) as mock_post:
        assert exchange_code("good-code") == "at-123"
    assert mock_post.call_args.kwargs["data"]["code"] == "good-code"


def test_fetch_user_info_normalizes_profile():
    ok = Mock(ok=True, status_code=200)
    ok.json.return_value = {"email": " Gabi@Example.com ", "name": "Gabi", "sub": "123", "picture": None}
    with patch("core.google_oauth.requests.get", return_value=ok):
        info = fetch_user_info("at-123")
    assert info.email == "gabi@example.com"
    assert info.subject == "123"
    assert info.avatar_url is None


def test_fetch_user_info_failure_raises():
    failed = Mock(ok=False, status_code=401)
    failed.json.return_value = {"error": "invalid_token"}
    with patch("core.google_oauth.requests.get", return_value=failed):
        with pytest.raises(GoogleOAuthError) as exc:
            fetch_user_info("expired")
    assert exc.value.stage == "userinfo"


def test_fetch_user_info_non_json_body_raises():
    garbled = Mock(ok=True, status_code=200)
    garbled.json.side_effect = ValueError("Expecting value")
    with patch("core.google_oauth.requests.get", return_value=garbled):
        with pytest.raises(GoogleOAuthError) as exc:
            fetch_user_info("at-123")
    assert exc.value.stage == "userinfo"
