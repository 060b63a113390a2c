# models/resident.py

from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from core.utils import clean, required_text
from .administrator import new_id, timestamp_field


class ResidentBase(SQLModel):
    name: str
    document: Optional[str] = None    # CPF / RG
    contact: Optional[str] = None     # phone or email, free text


class Resident(ResidentBase, table=True):
    __tablename__ = "residents"

    id: str = Field(default_factory=new_id, primary_key=True)
    unit_id: str = Field(foreign_key="units.id", index=True, ondelete="RESTRICT")
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class ResidentCreate(SQLModel):
    name: str
    document: Optional[str] = None
    contact: Optional[str] = None

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return required_text(v)

    @field_validator("document", "contact", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


class ResidentUpdate(SQLModel):
    name: Optional[str] = None
    document: Optional[str] = None
    contact: Optional[str] = None

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        return required_text(v)

    @field_validator("document", "contact", mode="before")
    def blank_to_none(cls, v):
        return clean(v)
