# routers/residents.py

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import ApiError, ErrorCode, handle_db_error
from core.permission_helpers import (
    get_accessible_resident,
    get_accessible_unit,
    require_mutation,
)
from core.utils import apply_updates
from database import get_session
from dependencies.auth import get_current_user, CurrentUser
from models import Resident, ResidentCreate, ResidentUpdate


LIST_LIMIT = 200

router = APIRouter(tags=["Residents"])


@router.get("/units/{unit_id}/residents", summary="List residents of a unit")
def list_residents(
    unit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_accessible_unit(session, current_user, unit_id)

    rows = session.exec(
        select(Resident)
        .where(Resident.unit_id == unit_id)
        .order_by(Resident.created_at.desc())
        .limit(LIST_LIMIT)
    ).all()
    return {"data": rows}


@router.post("/units/{unit_id}/residents", status_code=201, summary="Add a resident to a unit")
def create_resident(
    unit_id: str,
    payload: ResidentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    get_accessible_unit(session, current_user, unit_id)

    resident = Resident(**payload.model_dump(), unit_id=unit_id)
    try:
        session.add(resident)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise handle_db_error(e, "Create resident") from e

    session.refresh(resident)
    return {"data": resident}


@router.patch("/residents/{resident_id}", summary="Update a resident")
def update_resident(
    resident_id: str,
    payload: ResidentUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise ApiError(ErrorCode.nothing_to_update)

    require_mutation(current_user)
    resident = get_accessible_resident(session, current_user, resident_id)

    apply_updates(resident, data)
    session.add(resident)
    session.commit()
    session.refresh(resident)
    return {"data": resident}


@router.delete("/residents/{resident_id}", status_code=204, summary="Remove a resident")
def delete_resident(
    resident_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_mutation(current_user)
    resident = get_accessible_resident(session, current_user, resident_id)

    session.delete(resident)
    session.commit()
    return Response(status_code=204)
