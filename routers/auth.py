from datetime import timedelta

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func

from core.config import settings
from core.email_utils import send_password_reset_email, send_verification_email
from core.errors import ApiError, ErrorCode, handle_db_error
from core.logging_config import get_logger
from core.rate_limiter import CounterStore, get_login_store, login_rate_key
from core.security import (
    create_access_token,
    hash_password,
    hash_token,
    issue_token,
    verify_password,
)
from core.utils import utcnow
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import Administrator, Condominium, User, UserRead
from models.auth import (
    AuthResponse,
    EmailRequest,
    LoginRequest,
    OnboardingRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenRequest,
)
from models.enums import AuthProvider, Role


log = get_logger("auth")

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# Helpers
# ============================================================
def issue_session(user: User) -> AuthResponse:
    token = create_access_token(
        user_id=user.id,
        role=user.role,
        administrator_id=user.administrator_id,
        condominium_id=user.condominium_id,
    )
    return AuthResponse(token=token, user=UserRead.model_validate(user))


def dev_only(token: str):
    """Raw tokens are echoed back only outside production."""
    return None if settings.is_production else token


def require_strong_password(password: str):
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ApiError(
            ErrorCode.weak_password,
            f"Password must have at least {settings.MIN_PASSWORD_LENGTH} characters",
            field="password",
        )


def find_user_by_email(session: Session, email: str):
    return session.exec(select(User).where(User.email == email)).first()


def load_current_user(session: Session, current_user: CurrentUser) -> User:
    user = session.get(User, current_user.id)
    if user is None:
        raise ApiError(ErrorCode.not_found, "User not found")
    return user


# ============================================================
# REGISTER
# ============================================================
@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    summary="Create a local account (administrator tenant or board member)",
)
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    require_strong_password(payload.password)

    if payload.role is Role.administrator and not payload.administrator_name:
        raise ApiError(ErrorCode.missing_field, "administrator_name is required", field="administrator_name")
    if payload.role is Role.board_member and not payload.condominium_name:
        raise ApiError(ErrorCode.missing_field, "condominium_name is required", field="condominium_name")

    if find_user_by_email(session, payload.email):
        raise ApiError(ErrorCode.conflict, "Email already in use", field="email")

    raw_token, token_hash, expires_at = issue_token(timedelta(hours=settings.EMAIL_VERIFY_TTL_HOURS))

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        email_verification_token=token_hash,
        email_verification_expires=expires_at,
    )

    try:
        if payload.role is Role.administrator:
            administrator = Administrator(name=payload.administrator_name)
            session.add(administrator)
            session.flush()
            user.administrator_id = administrator.id
        else:
            condominium = Condominium(name=payload.condominium_name)
            session.add(condominium)
            session.flush()
            user.condominium_id = condominium.id

        session.add(user)
        session.commit()
    except IntegrityError as e:
        # Lost a race on the unique email
        session.rollback()
        raise handle_db_error(e, "Registration") from e

    log.info(f"Registered {payload.role} account {user.id}")
    send_verification_email(payload.email, raw_token)

    return RegisterResponse(verification_required=True, verification_token=dev_only(raw_token))


# ============================================================
# VERIFY EMAIL (single use, 24h)
# ============================================================
@router.post("/verify-email", response_model=AuthResponse, summary="Redeem an email verification token")
def verify_email(payload: TokenRequest, session: Session = Depends(get_session)):
    user = session.exec(
        select(User).where(
            User.email_verification_token == hash_token(payload.token),
            User.email_verification_expires > utcnow(),
        )
    ).first()

    if not user:
        raise ApiError(ErrorCode.invalid_token)

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    log.info(f"Email verified for user {user.id}")
    return issue_session(user)


# ============================================================
# RESEND VERIFICATION (never reveals whether the email exists)
# ============================================================
@router.post("/resend-verification", summary="Issue a fresh verification token")
def resend_verification(payload: EmailRequest, session: Session = Depends(get_session)):
    user = find_user_by_email(session, payload.email)
    if not user or user.email_verified or user.auth_provider is not AuthProvider.local:
        return {"ok": True}

    raw_token, token_hash, expires_at = issue_token(timedelta(hours=settings.EMAIL_VERIFY_TTL_HOURS))
    user.email_verification_token = token_hash
    user.email_verification_expires = expires_at
    session.add(user)
    session.commit()

    send_verification_email(user.email, raw_token)
    return {"ok": True, "verification_token": dev_only(raw_token)}


# ============================================================
# PASSWORD RESET (single use, 1h)
# ============================================================
@router.post("/request-reset", summary="Send a password reset link")
def request_reset(payload: EmailRequest, session: Session = Depends(get_session)):
    user = find_user_by_email(session, payload.email)
    if not user or user.auth_provider is not AuthProvider.local:
        return {"ok": True}

    raw_token, token_hash, expires_at = issue_token(timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES))
    user.password_reset_token = token_hash
    user.password_reset_expires = expires_at
    session.add(user)
    session.commit()

    send_password_reset_email(user.email, raw_token)
    return {"ok": True, "reset_token": dev_only(raw_token)}


@router.post("/reset-password", summary="Redeem a reset token and set a new password")
def reset_password(payload: ResetPasswordRequest, session: Session = Depends(get_session)):
    require_strong_password(payload.password)

    user = session.exec(
        select(User).where(
            User.password_reset_token == hash_token(payload.token),
            User.password_reset_expires > utcnow(),
        )
    ).first()

    if not user:
        raise ApiError(ErrorCode.invalid_token)

    user.password_hash = hash_password(payload.password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.updated_at = utcnow()
    session.add(user)
    session.commit()

    log.info(f"Password reset for user {user.id}")
    return {"ok": True}


# ============================================================
# LOGIN (rate limited per client + email)
# ============================================================
@router.post("/login", response_model=AuthResponse, summary="Authenticate with email and password")
def login(
    payload: LoginRequest,
    request: Request,
    session: Session = Depends(get_session),
    store: CounterStore = Depends(get_login_store),
):
    rate_key = login_rate_key(request, payload.email)
    if not store.check(rate_key):
        log.warning(f"Login rate limit hit for {rate_key}")
        raise ApiError(
            ErrorCode.rate_limited,
            headers={"Retry-After": str(store.window_seconds)},
        )

    user = find_user_by_email(session, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        log.warning(f"Login attempt failed for {payload.email}")
        raise ApiError(ErrorCode.invalid_credentials)

    if user.auth_provider is AuthProvider.local and not user.email_verified:
        raise ApiError(ErrorCode.email_not_verified)

    store.reset(rate_key)
    return issue_session(user)


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
def read_me(
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = load_current_user(session, current_user)
    return {"user": UserRead.model_validate(user)}


# ============================================================
# ONBOARDING (plan choice + first condominium)
# ============================================================
@router.post("/onboarding", summary="Choose a plan and set up the first condominium")
def onboarding(
    payload: OnboardingRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user = load_current_user(session, current_user)

    if user.role is Role.administrator:
        if not user.administrator_id:
            raise ApiError(ErrorCode.invalid_value, "Account has no administrator tenant")
        if not payload.condominium_name:
            raise ApiError(ErrorCode.missing_field, "condominium_name is required", field="condominium_name")

        existing = session.exec(
            select(func.count()).select_from(Condominium).where(
                Condominium.administrator_id == user.administrator_id
            )
        ).one()
        if existing == 0:
            session.add(Condominium(name=payload.condominium_name, administrator_id=user.administrator_id))

    elif user.role is Role.board_member:
        if payload.condominium_name and user.condominium_id:
            condominium = session.get(Condominium, user.condominium_id)
            if condominium is not None:
                condominium.name = payload.condominium_name
                condominium.updated_at = utcnow()
                session.add(condominium)

    user.plan = payload.plan
    user.onboarded = True
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    log.info(f"User {user.id} onboarded on plan {user.plan}")
    return {"user": UserRead.model_validate(user)}
