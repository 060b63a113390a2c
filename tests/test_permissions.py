# tests/test_permissions.py

"""
Tests for role checks and tenant scoping.
"""

import pytest
from fastapi.testclient import TestClient

from core.permission_helpers import (
    can_access_condominium,
    can_mutate,
    condominium_scope_filter,
)
from dependencies.auth import CurrentUser
from models import Condominium
from models.enums import Role


def actor(role, administrator_id=None, condominium_id=None):
    return CurrentUser(id="u-1", role=role, administrator_id=administrator_id, condominium_id=condominium_id)


# -----------------------------------------------------
# can_mutate
# -----------------------------------------------------
def test_staff_roles_can_mutate():
    """Test that administrators and operators may write."""
    assert can_mutate(actor(Role.administrator, "t-1")) is True
    assert can_mutate(actor(Role.operator, "t-1")) is True


def test_board_member_is_read_only():
    """Test that board members never write, even inside their own condominium."""
    assert can_mutate(actor(Role.board_member, condominium_id="c-1")) is False


def test_missing_actor_cannot_mutate():
    assert can_mutate(None) is False


def test_unknown_role_is_rejected():
    """Test that role evaluation does not silently accept unknown roles."""
    ghost = CurrentUser.model_construct(id="u-1", role="ghost", administrator_id="t-1", condominium_id=None)
    with pytest.raises(ValueError):
        can_mutate(ghost)
    with pytest.raises(ValueError):
        can_access_condominium(ghost, Condominium(id="c-1", name="X", administrator_id="t-1"))


# -----------------------------------------------------
# can_access_condominium
# -----------------------------------------------------
def test_board_member_sees_only_own_condominium():
    board = actor(Role.board_member, administrator_id="t-1", condominium_id="c-1")
    assert can_access_condominium(board, Condominium(id="c-1", name="A", administrator_id="t-1")) is True
    # Same tenant does not widen a board member's scope
    assert can_access_condominium(board, Condominium(id="c-2", name="B", administrator_id="t-1")) is False


def test_staff_see_their_tenant_only():
    own = Condominium(id="c-1", name="A", administrator_id="t-1")
    foreign = Condominium(id="c-2", name="B", administrator_id="t-2")
    for role in (Role.administrator, Role.operator):
        assert can_access_condominium(actor(role, "t-1"), own) is True
        assert can_access_condominium(actor(role, "t-1"), foreign) is False


def test_staff_without_tenant_see_nothing():
    """Test that a missing tenant on both sides never matches."""
    orphan = Condominium(id="c-1", name="A", administrator_id=None)
    assert can_access_condominium(actor(Role.administrator), orphan) is False
    assert can_access_condominium(actor(Role.operator), orphan) is False


def test_board_member_without_condominium_sees_nothing():
    assert can_access_condominium(actor(Role.board_member), Condominium(id="c-1", name="A")) is False


def test_scope_filter_is_none_when_nothing_visible():
    assert condominium_scope_filter(actor(Role.administrator)) is None
    assert condominium_scope_filter(actor(Role.board_member)) is None
    assert condominium_scope_filter(actor(Role.operator, "t-1")) is not None


# -----------------------------------------------------
# Through the API
# -----------------------------------------------------
def test_request_without_token_is_unauthorized(client: TestClient):
    response = client.get("/condominiums")
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_request_with_garbage_token_is_unauthorized(client: TestClient):
    response = client.get("/condominiums", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_cross_tenant_read_is_forbidden(client: TestClient, world, headers_for):
    """Test that tenant B's administrator cannot read tenant A's units."""
    response = client.get(f"/condominiums/{world.condo_a.id}/units", headers=headers_for(world.admin_b))
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_missing_resource_is_not_found_before_scope(client: TestClient, world, headers_for):
    response = client.get("/condominiums/does-not-exist/units", headers=headers_for(world.admin_b))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_board_member_write_is_forbidden(client: TestClient, world, headers_for):
    """Test that a board member cannot create a unit in their own condominium."""
    response = client.post(
        f"/condominiums/{world.condo_a.id}/units",
        json={"identifier": "Apto 999"},
        headers=headers_for(world.board_a),
    )
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_board_member_reads_own_condominium(client: TestClient, world, headers_for):
    response = client.get(f"/condominiums/{world.condo_a.id}/units", headers=headers_for(world.board_a))
    assert response.status_code == 200
    assert response.json()["data"] == []
