from typing import Optional

from sqlmodel import Session

from core.errors import ApiError, ErrorCode
from core.logging_config import get_logger
from dependencies.auth import CurrentUser
from models import Condominium, FinancialEntry, Resident, Unit
from models.enums import Role

log = get_logger("access")


# -----------------------------------------------------
# Role evaluation
# -----------------------------------------------------
def can_mutate(user: Optional[CurrentUser]) -> bool:
    """Administrators and operators write; board members are read-only everywhere."""
    if user is None:
        return False
    if user.role in (Role.administrator, Role.operator):
        return True
    if user.role is Role.board_member:
        return False
    raise ValueError(f"Unhandled role: {user.role!r}")


# -----------------------------------------------------
# Tenant-scope evaluation
# -----------------------------------------------------
def can_access_condominium(user: Optional[CurrentUser], condominium: Condominium) -> bool:
    """
    Board members see exactly their own condominium.
    Administrators/operators see every condominium owned by their tenant;
    without a tenant, or against an unowned condominium, they see nothing.
    """
    if user is None:
        return False
    if user.role is Role.board_member:
        return user.condominium_id is not None and user.condominium_id == condominium.id
    if user.role in (Role.administrator, Role.operator):
        return user.administrator_id is not None and user.administrator_id == condominium.administrator_id
    raise ValueError(f"Unhandled role: {user.role!r}")


def condominium_scope_filter(user: CurrentUser):
    """
    WHERE clause restricting a Condominium query to what `user` may see,
    or None when the user can see nothing.
    """
    if user.role is Role.board_member:
        if not user.condominium_id:
            return None
        return Condominium.id == user.condominium_id
    if user.role in (Role.administrator, Role.operator):
        if not user.administrator_id:
            return None
        return Condominium.administrator_id == user.administrator_id
    raise ValueError(f"Unhandled role: {user.role!r}")


# -----------------------------------------------------
# Request guards (raise structured errors)
# -----------------------------------------------------
def require_mutation(user: CurrentUser):
    if not can_mutate(user):
        log.warning(f"Write denied for read-only user {user.id} ({user.role})")
        raise ApiError(ErrorCode.forbidden, "Read-only role")


def require_condominium_access(user: CurrentUser, condominium: Condominium):
    if not can_access_condominium(user, condominium):
        log.warning(f"Scope denied: user {user.id} -> condominium {condominium.id}")
        raise ApiError(ErrorCode.forbidden)


# -----------------------------------------------------
# Lookups: not-found always precedes the scope check
# -----------------------------------------------------
def get_condominium_or_404(session: Session, condominium_id: str) -> Condominium:
    condominium = session.get(Condominium, condominium_id) if condominium_id else None
    if condominium is None:
        raise ApiError(ErrorCode.not_found, "Condominium not found")
    return condominium


def get_accessible_condominium(session: Session, user: CurrentUser, condominium_id: str) -> Condominium:
    condominium = get_condominium_or_404(session, condominium_id)
    require_condominium_access(user, condominium)
    return condominium


def get_accessible_unit(session: Session, user: CurrentUser, unit_id: str) -> Unit:
    unit = session.get(Unit, unit_id) if unit_id else None
    if unit is None:
        raise ApiError(ErrorCode.not_found, "Unit not found")
    require_condominium_access(user, get_condominium_or_404(session, unit.condominium_id))
    return unit


def get_accessible_resident(session: Session, user: CurrentUser, resident_id: str) -> Resident:
    resident = session.get(Resident, resident_id) if resident_id else None
    if resident is None:
        raise ApiError(ErrorCode.not_found, "Resident not found")
    unit = session.get(Unit, resident.unit_id)
    if unit is None:
        raise ApiError(ErrorCode.not_found, "Resident not found")
    require_condominium_access(user, get_condominium_or_404(session, unit.condominium_id))
    return resident


def get_accessible_entry(session: Session, user: CurrentUser, entry_id: str) -> FinancialEntry:
    entry = session.get(FinancialEntry, entry_id) if entry_id else None
    if entry is None:
        raise ApiError(ErrorCode.not_found, "Financial entry not found")
    require_condominium_access(user, get_condominium_or_404(session, entry.condominium_id))
    return entry
