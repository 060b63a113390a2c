# routers/units.py

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import ApiError, ErrorCode, handle_db_error
from core.logging_config import get_logger
from core.permission_helpers import (
    get_accessible_condominium,
    get_accessible_unit,
    require_mutation,
)
from core.plan_limits import enforce_unit_limit
from core.utils import apply_updates
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import Unit, UnitCreate, UnitUpdate


log = get_logger("units")

LIST_LIMIT = 100

router = APIRouter(tags=["Units"])


# ============================================================
# LIST UNITS OF A CONDOMINIUM
# ============================================================
@router.get("/condominiums/{condominium_id}/units", summary="List units of a condominium")
def list_units(
    condominium_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_accessible_condominium(session, current_user, condominium_id)

    rows = session.exec(
        select(Unit)
        .where(Unit.condominium_id == condominium_id)
        .order_by(Unit.created_at.desc())
        .limit(LIST_LIMIT)
    ).all()
    return {"data": rows}


# ============================================================
# CREATE UNIT (plan limited per condominium)
# ============================================================
@router.post("/condominiums/{condominium_id}/units", status_code=201, summary="Create a unit")
def create_unit(
    condominium_id: str,
    payload: UnitCreate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    get_accessible_condominium(session, current_user, condominium_id)
    enforce_unit_limit(session, current_user.id, condominium_id)

    unit = Unit(**payload.model_dump(), condominium_id=condominium_id)
    try:
        session.add(unit)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise handle_db_error(e, "Create unit") from e

    session.refresh(unit)
    return {"data": unit}


# ============================================================
# UPDATE UNIT
# ============================================================
@router.patch("/units/{unit_id}", summary="Update a unit")
def update_unit(
    unit_id: str,
    payload: UnitUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ApiError(ErrorCode.nothing_to_update)

    require_mutation(current_user)
    unit = get_accessible_unit(session, current_user, unit_id)

    apply_updates(unit, data)
    session.add(unit)
    session.commit()
    session.refresh(unit)
    return {"data": unit}


# ============================================================
# DELETE UNIT
# ============================================================
@router.delete("/units/{unit_id}", status_code=204, summary="Delete a unit")
def delete_unit(
    unit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    unit = get_accessible_unit(session, current_user, unit_id)

    try:
        session.delete(unit)
        session.commit()
    except SQLAlchemyError as e:
        # Residents still reference it
        session.rollback()
        raise handle_db_error(e, "Delete unit") from e

    log.info(f"Unit {unit_id} deleted by {current_user.id}")
    return Response(status_code=204)
