# models/user.py

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from .administrator import UTCDateTime, new_id, timestamp_field
from .enums import AuthProvider, Plan, Role


# ===============================================================
# USER (actor) table
# ===============================================================
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)   # always stored lower-cased
    password_hash: str

    role: Role
    administrator_id: Optional[str] = Field(
        default=None, foreign_key="administrators.id", index=True, ondelete="SET NULL"
    )
    # Only set for board members
    condominium_id: Optional[str] = Field(
        default=None, foreign_key="condominiums.id", index=True, ondelete="SET NULL"
    )

    plan: Plan = Field(default=Plan.freemium)
    email_verified: bool = Field(default=False)
    onboarded: bool = Field(default=False)

    # External identity
    auth_provider: AuthProvider = Field(default=AuthProvider.local)
    google_id: Optional[str] = Field(default=None, unique=True)
    avatar_url: Optional[str] = None

    # Single-use tokens, SHA-256 at rest
    email_verification_token: Optional[str] = Field(default=None, index=True)
    email_verification_expires: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    password_reset_token: Optional[str] = Field(default=None, index=True)
    password_reset_expires: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


# ===============================================================
# Public projection (never exposes hashes or tokens)
# ===============================================================
class UserRead(SQLModel):
    id: str
    name: str
    email: str
    role: Role
    administrator_id: Optional[str] = None
    condominium_id: Optional[str] = None
    auth_provider: AuthProvider
    avatar_url: Optional[str] = None
    google_id: Optional[str] = None
    plan: Plan
    onboarded: bool
    email_verified: bool
