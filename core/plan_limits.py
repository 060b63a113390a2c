# core/plan_limits.py

"""
Per-tenant resource quotas tied to the subscription plan.

Rules:
- freemium: 1 condominium per administrator tenant, 15 units per condominium
- essential / professional / scale: unlimited

Checks are evaluated right before the insert and are not atomic with it;
two concurrent creations at the boundary can both pass.
"""

from typing import Dict, Optional

from sqlmodel import Session, select, func

from core.errors import ApiError, ErrorCode
from core.logging_config import logger
from models import Condominium, Unit, User
from models.enums import Plan


# ============================================================
# PLAN LIMITS (None = unlimited)
# ============================================================
PLAN_LIMITS: Dict[Plan, Dict[str, Optional[int]]] = {
    Plan.freemium: {
        "condominiums_per_tenant": 1,
        "units_per_condominium": 15,
    },
    Plan.essential: {
        "condominiums_per_tenant": None,
        "units_per_condominium": None,
    },
    Plan.professional: {
        "condominiums_per_tenant": None,
        "units_per_condominium": None,
    },
    Plan.scale: {
        "condominiums_per_tenant": None,
        "units_per_condominium": None,
    },
}


def get_plan_limit(plan: Plan, resource: str) -> Optional[int]:
    # Unknown plans fall back to the most restrictive tier
    limits = PLAN_LIMITS.get(plan, PLAN_LIMITS[Plan.freemium])
    return limits[resource]


def _within(limit: Optional[int], current_count: int) -> bool:
    return limit is None or current_count < limit


# ============================================================
# PURE PREDICATES
# ============================================================
def can_create_condominium(plan: Plan, current_condominium_count: int) -> bool:
    return _within(get_plan_limit(plan, "condominiums_per_tenant"), current_condominium_count)


def can_create_unit(plan: Plan, current_unit_count: int) -> bool:
    return _within(get_plan_limit(plan, "units_per_condominium"), current_unit_count)


# ============================================================
# STORE-BACKED GUARDS
# ============================================================
def get_user_plan(session: Session, user_id: str) -> Plan:
    """Plan comes from the persisted record, never from the session token."""
    user = session.get(User, user_id)
    if user is None:
        # Token outlived its user
        raise ApiError(ErrorCode.unauthorized)
    return user.plan


def count_tenant_condominiums(session: Session, administrator_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(Condominium).where(Condominium.administrator_id == administrator_id)
    ).one()


def count_condominium_units(session: Session, condominium_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(Unit).where(Unit.condominium_id == condominium_id)
    ).one()


def enforce_condominium_limit(session: Session, user_id: str, administrator_id: str):
    plan = get_user_plan(session, user_id)
    current = count_tenant_condominiums(session, administrator_id)
    if not can_create_condominium(plan, current):
        logger.info(f"Plan limit: tenant {administrator_id} ({plan}) already has {current} condominium(s)")
        raise ApiError(ErrorCode.plan_limit_exceeded, "Condominium limit reached for your plan")


def enforce_unit_limit(session: Session, user_id: str, condominium_id: str):
    plan = get_user_plan(session, user_id)
    current = count_condominium_units(session, condominium_id)
    if not can_create_unit(plan, current):
        logger.info(f"Plan limit: condominium {condominium_id} ({plan}) already has {current} unit(s)")
        raise ApiError(ErrorCode.plan_limit_exceeded, "Unit limit reached for your plan")
