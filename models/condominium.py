# models/condominium.py

from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from core.utils import clean, required_text
from .administrator import new_id, timestamp_field


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class CondominiumBase(SQLModel):
    name: str
    tax_id: Optional[str] = None      # CNPJ
    address: Optional[str] = None


# -------------------------------------------------
# Table
# -------------------------------------------------
class Condominium(CondominiumBase, table=True):
    __tablename__ = "condominiums"

    id: str = Field(default_factory=new_id, primary_key=True)

    # Set once at creation; never reassigned by the API
    administrator_id: Optional[str] = Field(
        default=None,
        foreign_key="administrators.id",
        index=True,
        ondelete="SET NULL",
    )

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


# -------------------------------------------------
# Create
# -------------------------------------------------
class CondominiumCreate(SQLModel):
    name: str
    tax_id: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return required_text(v)

    @field_validator("tax_id", "address", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class CondominiumUpdate(SQLModel):
    name: Optional[str] = None
    tax_id: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return required_text(v)

    @field_validator("tax_id", "address", mode="before")
    def blank_to_none(cls, v):
        return clean(v)
