# routers/google_auth.py

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from jose import JWTError
from sqlmodel import Session, select

from core.config import settings
from core.errors import ApiError, ErrorCode
from core.google_oauth import (
    GoogleOAuthError,
    GoogleUserInfo,
    build_authorization_url,
    exchange_code,
    fetch_user_info,
    is_configured,
)
from core.logging_config import get_logger
from core.security import create_access_token, generate_token, hash_password, sign_state, verify_state
from core.utils import utcnow
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import Administrator, User
from models.auth import GoogleLinkRequest
from models.enums import AuthProvider, Role


log = get_logger("google")

router = APIRouter(
    prefix="/auth/google",
    tags=["Auth"],
)


class LinkRefused(Exception):
    """Identity cannot be attached to the requested account; `reason` goes to the UI."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


# -----------------------------------------------------
# Redirect targets are restricted to the known frontends
# -----------------------------------------------------
def safe_redirect(target: Optional[str]) -> str:
    default = settings.APP_BASE_URL
    if not target:
        return default
    target = target.rstrip("/")
    allowed = [default] + [o for o in settings.BACKEND_CORS_ORIGINS if o != "*"]
    for origin in allowed:
        if target == origin or target.startswith(origin + "/"):
            return target
    log.warning(f"Rejected OAuth redirect target {target!r}")
    return default


def require_provider():
    if not is_configured():
        raise ApiError(ErrorCode.provider_not_configured, "Google sign-in is not configured")


def redirect_with_error(redirect_to: str, error: str) -> RedirectResponse:
    return RedirectResponse(f"{redirect_to}/?error={error}", status_code=302)


# ============================================================
# Account resolution
# ============================================================
def find_identity_owner(session: Session, info: GoogleUserInfo) -> Optional[User]:
    user = None
    if info.subject:
        user = session.exec(select(User).where(User.google_id == info.subject)).first()
    if user is None:
        user = session.exec(select(User).where(User.email == info.email)).first()
    return user


def attach_identity(user: User, info: GoogleUserInfo):
    # One external identity per account
    if user.google_id and info.subject and user.google_id != info.subject:
        raise LinkRefused("google_other_identity_linked")
    user.auth_provider = AuthProvider.google
    user.google_id = info.subject or user.google_id
    user.avatar_url = info.avatar_url
    user.email_verified = True
    user.updated_at = utcnow()


def link_identity(session: Session, link_user_id: str, info: GoogleUserInfo) -> User:
    """Link mode: the caller proved ownership of `link_user_id` when the state was issued."""
    link_user = session.get(User, link_user_id)
    if link_user is None:
        raise LinkRefused("google_link_user_not_found")

    owner = find_identity_owner(session, info)
    if owner is not None and owner.id != link_user.id:
        raise LinkRefused("google_linked_to_other")

    attach_identity(link_user, info)
    session.add(link_user)
    session.commit()
    log.info(f"Linked Google identity to user {link_user.id}")
    return link_user


def sign_in(session: Session, info: GoogleUserInfo) -> User:
    """Login mode: reuse the account owning the identity/email, or provision a new tenant."""
    user = find_identity_owner(session, info)

    if user is None:
        administrator = Administrator(name=info.name)
        session.add(administrator)
        session.flush()
        user = User(
            name=info.name,
            email=info.email,
            # Unusable local password; this account signs in through Google
            password_hash=hash_password(generate_token()),
            role=Role.administrator,
            administrator_id=administrator.id,
            auth_provider=AuthProvider.google,
            google_id=info.subject or None,
            avatar_url=info.avatar_url,
            email_verified=True,
        )
        log.info(f"Provisioned administrator tenant {administrator.id} from Google sign-in")
    else:
        attach_identity(user, info)
        user.name = info.name

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


# ============================================================
# START LOGIN
# ============================================================
@router.get("", summary="Redirect to Google sign-in")
def google_login(redirect: Optional[str] = Query(None)):
    require_provider()
    state = sign_state({"redirect": safe_redirect(redirect), "mode": "login"})
    return RedirectResponse(build_authorization_url(state), status_code=302)


# ============================================================
# START LINK (authenticated)
# ============================================================
@router.post("/link", summary="Get a Google consent URL that links to the current account")
def google_link(
    payload: GoogleLinkRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_provider()
    state = sign_state({
        "redirect": safe_redirect(payload.redirect),
        "mode": "link",
        "user_id": current_user.id,
    })
    return {"url": build_authorization_url(state)}


# ============================================================
# CALLBACK
# ============================================================
@router.get("/callback", summary="Google OAuth callback")
def google_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    session: Session = Depends(get_session),
):
    if not is_configured(require_secret=True):
        raise ApiError(ErrorCode.provider_not_configured, "Google sign-in is not configured")

    code = (code or "").strip()
    if not code:
        raise ApiError(ErrorCode.missing_field, "Missing authorization code", field="code")

    redirect_to = settings.APP_BASE_URL
    mode = None
    link_user_id = None
    if state:
        try:
            claims = verify_state(state)
            redirect_to = safe_redirect(claims.get("redirect"))
            mode = claims.get("mode")
            link_user_id = claims.get("user_id")
        except JWTError:
            log.warning("Invalid or expired OAuth state; continuing as plain login")

    try:
        info = fetch_user_info(exchange_code(code))
    except GoogleOAuthError as e:
        return redirect_with_error(redirect_to, f"google_{e.stage}")

    if not info.email:
        return redirect_with_error(redirect_to, "google_no_email")

    try:
        if mode == "link" and link_user_id:
            link_identity(session, link_user_id, info)
            return RedirectResponse(f"{redirect_to}/?linked=1", status_code=302)

        user = sign_in(session, info)
    except LinkRefused as e:
        session.rollback()
        log.warning(f"Google identity refused: {e.reason}")
        return redirect_with_error(redirect_to, e.reason)
    except Exception as e:
        session.rollback()
        log.error(f"Google callback failed: {e}", exc_info=e)
        return redirect_with_error(redirect_to, "google_callback")

    token = create_access_token(
        user_id=user.id,
        role=user.role,
        administrator_id=user.administrator_id,
        condominium_id=user.condominium_id,
    )
    return RedirectResponse(f"{redirect_to}/#token={quote(token)}", status_code=302)
