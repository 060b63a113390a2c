# core/google_oauth.py

"""
Google OAuth 2.0 authorization-code flow (openid email profile).
"""

from typing import Optional
from urllib.parse import urlencode

import requests
from pydantic import BaseModel

from core.config import settings
from core.logging_config import logger

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
REQUEST_TIMEOUT = 10


class GoogleOAuthError(Exception):
    """Provider rejected the exchange; `stage` is 'token' or 'userinfo'."""

    def __init__(self, stage: str, message: str = ""):
        self.stage = stage
        super().__init__(message or stage)


class GoogleUserInfo(BaseModel):
    email: str
    name: str
    subject: str
    avatar_url: Optional[str] = None


def is_configured(require_secret: bool = False) -> bool:
    if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_REDIRECT_URI:
        return False
    if require_secret and not settings.GOOGLE_CLIENT_SECRET:
        return False
    return True


def build_authorization_url(state: str) -> Optional[str]:
    if not is_configured():
        return None
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "prompt": "select_account",
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def exchange_code(code: str) -> str:
    """Authorization code → access token."""
    try:
        response = requests.post(
            TOKEN_URL,
            data={
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                "grant_type": "authorization_code",
                "code": code,
            },
            timeout=REQUEST_TIMEOUT,
        )
        body = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Google token request failed: {e}")
        raise GoogleOAuthError("token") from e
    if not response.ok or not body.get("access_token"):
        logger.error(f"Google token error ({response.status_code}): {body.get('error')}")
        raise GoogleOAuthError("token")
    return body["access_token"]


def fetch_user_info(access_token: str) -> GoogleUserInfo:
    try:
        response = requests.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=REQUEST_TIMEOUT,
        )
        body = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Google userinfo request failed: {e}")
        raise GoogleOAuthError("userinfo") from e
    if not response.ok:
        logger.error(f"Google userinfo error ({response.status_code}): {body.get('error')}")
        raise GoogleOAuthError("userinfo")

    picture = body.get("picture")
    return GoogleUserInfo(
        email=str(body.get("email") or "").strip().lower(),
        name=str(body.get("name") or body.get("given_name") or "Usuario").strip(),
        subject=str(body.get("sub") or "").strip(),
        avatar_url=str(picture).strip() if picture else None,
    )
