# core/utils.py

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from pydantic_core import PydanticCustomError


TWO_PLACES = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------------------------------------------
# Normalize blank → None
# -------------------------------------------------------------
def clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def required_text(value: Any) -> str:
    """
    Strip a required text field. Blank values are reported with the same
    error type pydantic uses for absent fields, so both map to `missing_field`.
    """
    text = clean(value)
    if text is None:
        raise PydanticCustomError("missing", "Field required")
    return text


# -------------------------------------------------------------
# Decimal amounts ("1.234,5" is NOT supported; "1234,5" is)
# -------------------------------------------------------------
def parse_decimal_input(value: Any) -> Optional[Decimal]:
    """Parse an amount, accepting ',' as the decimal separator. None when invalid."""
    if value is None or isinstance(value, bool):
        return None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        amount = Decimal(raw.replace(",", "."))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# -------------------------------------------------------------
# Dates: "YYYY-MM-DD" → UTC midnight, otherwise ISO-8601 (naive = UTC)
# -------------------------------------------------------------
def is_date_only(raw: str) -> bool:
    return len(raw.strip()) == 10


def parse_date_input(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raw = str(value).strip()
    if not raw:
        return None
    try:
        if is_date_only(raw):
            parsed = datetime.strptime(raw, "%Y-%m-%d")
        else:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _to_utc(parsed)


def end_of_range(raw: str, parsed: datetime) -> datetime:
    """Exclusive upper bound: a date-only value covers its whole day."""
    if is_date_only(raw):
        return parsed + timedelta(days=1)
    return parsed


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# -------------------------------------------------------------
# Apply a partial update onto a table row
# -------------------------------------------------------------
def apply_updates(record, data: dict):
    for key, value in data.items():
        setattr(record, key, value)
    if hasattr(record, "updated_at"):
        record.updated_at = utcnow()
    return record
