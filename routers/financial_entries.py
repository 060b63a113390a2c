# routers/financial_entries.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import ApiError, ErrorCode, handle_db_error
from core.permission_helpers import (
    get_accessible_condominium,
    get_accessible_entry,
    require_mutation,
)
from core.utils import apply_updates, end_of_range, parse_date_input
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import FinancialEntry, FinancialEntryCreate, FinancialEntryUpdate


LIST_LIMIT = 200

router = APIRouter(tags=["Financial Entries"])


def _parse_bound(raw: Optional[str], field: str):
    if raw is None or not raw.strip():
        return None
    parsed = parse_date_input(raw)
    if parsed is None:
        raise ApiError(ErrorCode.invalid_value, f"{field} must be YYYY-MM-DD or ISO-8601", field=field)
    return parsed


# ============================================================
# LIST ENTRIES (optional date range)
# ============================================================
@router.get(
    "/condominiums/{condominium_id}/entries",
    summary="List financial entries of a condominium",
    description="""
    `start` is inclusive. `end` is exclusive, except that a date-only value
    (YYYY-MM-DD) includes that whole day.
    """,
)
def list_entries(
    condominium_id: str,
    start: Optional[str] = Query(None, description="YYYY-MM-DD or ISO-8601"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD or ISO-8601"),
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    start_at = _parse_bound(start, "start")
    end_at = _parse_bound(end, "end")

    get_accessible_condominium(session, current_user, condominium_id)

    query = select(FinancialEntry).where(FinancialEntry.condominium_id == condominium_id)
    if start_at is not None:
        query = query.where(FinancialEntry.date >= start_at)
    if end_at is not None:
        query = query.where(FinancialEntry.date < end_of_range(end, end_at))

    rows = session.exec(
        query
        .order_by(FinancialEntry.date.desc(), FinancialEntry.created_at.desc())
        .limit(LIST_LIMIT)
    ).all()
    return {"data": rows}


# ============================================================
# CREATE ENTRY
# ============================================================
@router.post("/condominiums/{condominium_id}/entries", status_code=201, summary="Record an income or expense")
def create_entry(
    condominium_id: str,
    payload: FinancialEntryCreate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    get_accessible_condominium(session, current_user, condominium_id)

    entry = FinancialEntry(**payload.model_dump(), condominium_id=condominium_id)
    try:
        session.add(entry)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise handle_db_error(e, "Create financial entry") from e

    session.refresh(entry)
    return {"data": entry}


# ============================================================
# UPDATE ENTRY
# ============================================================
@router.patch("/entries/{entry_id}", summary="Update a financial entry")
def update_entry(
    entry_id: str,
    payload: FinancialEntryUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ApiError(ErrorCode.nothing_to_update)

    require_mutation(current_user)
    entry = get_accessible_entry(session, current_user, entry_id)

    apply_updates(entry, data)
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return {"data": entry}


# ============================================================
# DELETE ENTRY
# ============================================================
@router.delete("/entries/{entry_id}", status_code=204, summary="Delete a financial entry")
def delete_entry(
    entry_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    entry = get_accessible_entry(session, current_user, entry_id)

    session.delete(entry)
    session.commit()
    return Response(status_code=204)
