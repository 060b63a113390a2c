# routers/condominiums.py

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import ApiError, ErrorCode, handle_db_error
from core.logging_config import get_logger
from core.permission_helpers import (
    condominium_scope_filter,
    get_accessible_condominium,
    require_mutation,
)
from core.plan_limits import enforce_condominium_limit
from core.utils import apply_updates
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import Condominium, CondominiumCreate, CondominiumUpdate


log = get_logger("condominiums")

LIST_LIMIT = 50

router = APIRouter(
    prefix="/condominiums",
    tags=["Condominiums"],
)


# ============================================================
# LIST CONDOMINIUMS (scoped to the caller)
# ============================================================
@router.get("", summary="List condominiums visible to the current user")
def list_condominiums(
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    scope = condominium_scope_filter(current_user)
    if scope is None:
        return {"data": []}

    rows = session.exec(
        select(Condominium)
        .where(scope)
        .order_by(Condominium.created_at.desc())
        .limit(LIST_LIMIT)
    ).all()
    return {"data": rows}


# ============================================================
# CREATE CONDOMINIUM (plan limited)
# ============================================================
@router.post("", status_code=201, summary="Create a condominium for the caller's tenant")
def create_condominium(
    payload: CondominiumCreate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)

    if not current_user.administrator_id:
        raise ApiError(ErrorCode.forbidden, "Account is not attached to an administrator")

    enforce_condominium_limit(session, current_user.id, current_user.administrator_id)

    condominium = Condominium(**payload.model_dump(), administrator_id=current_user.administrator_id)
    try:
        session.add(condominium)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise handle_db_error(e, "Create condominium") from e

    session.refresh(condominium)
    log.info(f"Condominium {condominium.id} created by {current_user.id}")
    return {"data": condominium}


# ============================================================
# UPDATE CONDOMINIUM
# ============================================================
@router.patch("/{condominium_id}", summary="Update a condominium")
def update_condominium(
    condominium_id: str,
    payload: CondominiumUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ApiError(ErrorCode.nothing_to_update)

    require_mutation(current_user)
    condominium = get_accessible_condominium(session, current_user, condominium_id)

    apply_updates(condominium, data)
    session.add(condominium)
    session.commit()
    session.refresh(condominium)
    return {"data": condominium}


# ============================================================
# DELETE CONDOMINIUM
# ============================================================
@router.delete("/{condominium_id}", status_code=204, summary="Delete a condominium")
def delete_condominium(
    condominium_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    condominium = get_accessible_condominium(session, current_user, condominium_id)

    try:
        session.delete(condominium)
        session.commit()
    except SQLAlchemyError as e:
        # Units or entries still reference it
        session.rollback()
        raise handle_db_error(e, "Delete condominium") from e

    log.info(f"Condominium {condominium_id} deleted by {current_user.id}")
    return Response(status_code=204)
