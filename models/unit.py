# models/unit.py

from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from core.utils import clean, required_text
from .administrator import new_id, timestamp_field


class UnitBase(SQLModel):
    identifier: str                   # e.g. "Apto 101", "Bloco B - 12"
    type: Optional[str] = None        # e.g. "Apartamento", "Cobertura"


class Unit(UnitBase, table=True):
    __tablename__ = "units"

    id: str = Field(default_factory=new_id, primary_key=True)
    condominium_id: str = Field(foreign_key="condominiums.id", index=True, ondelete="RESTRICT")
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class UnitCreate(SQLModel):
    identifier: str
    type: Optional[str] = None

    @field_validator("identifier", mode="before")
    def strip_identifier(cls, v):
        return required_text(v)

    @field_validator("type", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


class UnitUpdate(SQLModel):
    identifier: Optional[str] = None
    type: Optional[str] = None

    @field_validator("identifier", mode="before")
    def strip_identifier(cls, v):
        return required_text(v)

    @field_validator("type", mode="before")
    def blank_to_none(cls, v):
        return clean(v)
