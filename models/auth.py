from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator
from pydantic_core import PydanticCustomError

from core.utils import clean, required_text
from .enums import Plan, Role
from .user import UserRead


# -----------------------------------------------------
# REGISTER (local credentials)
# -----------------------------------------------------
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Role
    administrator_name: Optional[str] = None   # required for administrators
    condominium_name: Optional[str] = None     # required for board members

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return required_text(v)

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return required_text(v).lower()

    @field_validator("password", mode="before")
    def require_password(cls, v):
        if v is None or v == "":
            raise PydanticCustomError("missing", "Field required")
        return v

    # Operators are created by their tenant, not by self-registration
    @field_validator("role", mode="before")
    def self_service_role(cls, v):
        role = Role.parse(v)
        if role not in (Role.administrator, Role.board_member):
            raise PydanticCustomError("invalid_value", "role must be administrator or board_member")
        return role

    @field_validator("administrator_name", "condominium_name", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


class RegisterResponse(BaseModel):
    verification_required: bool = True
    verification_token: Optional[str] = None   # development only


# -----------------------------------------------------
# TOKEN REDEMPTION / EMAIL-ONLY REQUESTS
# -----------------------------------------------------
class TokenRequest(BaseModel):
    token: str

    @field_validator("token", mode="before")
    def strip_token(cls, v):
        return required_text(v)


class EmailRequest(BaseModel):
    email: str

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return required_text(v).lower()


class ResetPasswordRequest(BaseModel):
    token: str
    password: str

    @field_validator("token", mode="before")
    def strip_token(cls, v):
        return required_text(v)

    @field_validator("password", mode="before")
    def require_password(cls, v):
        if v is None or v == "":
            raise PydanticCustomError("missing", "Field required")
        return v


# -----------------------------------------------------
# LOGIN
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return required_text(v).lower()


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


# -----------------------------------------------------
# ONBOARDING
# -----------------------------------------------------
class OnboardingRequest(BaseModel):
    plan: Plan = Plan.freemium
    condominium_name: Optional[str] = None

    @field_validator("plan", mode="before")
    def parse_plan(cls, v):
        if v is None or v == "":
            return Plan.freemium
        plan = Plan.parse(v)
        if plan is None:
            raise PydanticCustomError("invalid_value", "plan must be one of: {allowed}", {"allowed": Plan.list()})
        return plan

    @field_validator("condominium_name", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


# -----------------------------------------------------
# GOOGLE LINK
# -----------------------------------------------------
class GoogleLinkRequest(BaseModel):
    redirect: Optional[str] = None

    @field_validator("redirect", mode="before")
    def blank_to_none(cls, v):
        return clean(v)
