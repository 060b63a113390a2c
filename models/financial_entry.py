# models/financial_entry.py

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from pydantic_core import PydanticCustomError
from sqlmodel import SQLModel, Field

from core.utils import clean, parse_date_input, parse_decimal_input
from .administrator import UTCDateTime, new_id, timestamp_field
from .enums import EntryKind


# -------------------------------------------------
# Validators shared by create + update
# -------------------------------------------------
def _kind(v):
    kind = EntryKind.parse(v)
    if kind is None:
        raise PydanticCustomError("invalid_value", "kind must be one of: {allowed}", {"allowed": EntryKind.list()})
    return kind


def _amount(v):
    amount = parse_decimal_input(v)
    if amount is None:
        raise PydanticCustomError("invalid_value", "amount must be a decimal number")
    return amount


def _date(v):
    parsed = parse_date_input(v)
    if parsed is None:
        raise PydanticCustomError("invalid_value", "date must be YYYY-MM-DD or ISO-8601")
    return parsed


class FinancialEntryBase(SQLModel):
    kind: EntryKind
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    date: datetime = Field(sa_type=UTCDateTime)
    category: Optional[str] = None
    description: Optional[str] = None


class FinancialEntry(FinancialEntryBase, table=True):
    __tablename__ = "financial_entries"

    id: str = Field(default_factory=new_id, primary_key=True)
    condominium_id: str = Field(foreign_key="condominiums.id", index=True, ondelete="RESTRICT")
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class FinancialEntryCreate(SQLModel):
    kind: EntryKind
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    date: datetime
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("kind", mode="before")
    def parse_kind(cls, v):
        return _kind(v)

    @field_validator("amount", mode="before")
    def parse_amount(cls, v):
        return _amount(v)

    @field_validator("date", mode="before")
    def parse_date(cls, v):
        return _date(v)

    @field_validator("category", "description", mode="before")
    def blank_to_none(cls, v):
        return clean(v)


class FinancialEntryUpdate(SQLModel):
    kind: Optional[EntryKind] = None
    amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    date: Optional[datetime] = None
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("kind", mode="before")
    def parse_kind(cls, v):
        return _kind(v)

    @field_validator("amount", mode="before")
    def parse_amount(cls, v):
        return _amount(v)

    @field_validator("date", mode="before")
    def parse_date(cls, v):
        return _date(v)

    @field_validator("category", "description", mode="before")
    def blank_to_none(cls, v):
        return clean(v)
