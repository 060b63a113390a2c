# models/administrator.py

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from core.utils import utcnow


# Timestamps are written as timezone-aware UTC
UTCDateTime = DateTime(timezone=True)


def new_id() -> str:
    return str(uuid4())


def timestamp_field():
    return Field(default_factory=utcnow, sa_type=UTCDateTime, nullable=False)


# -------------------------------------------------
# Tenant root: owns condominiums and staff users
# -------------------------------------------------
class Administrator(SQLModel, table=True):
    __tablename__ = "administrators"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
