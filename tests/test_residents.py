# tests/test_residents.py

"""
Tests for resident endpoints.
"""

from fastapi.testclient import TestClient

from models import Resident


def test_create_and_list_residents(client: TestClient, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    headers = headers_for(world.operator_a)

    created = client.post(
        f"/units/{unit.id}/residents",
        json={"name": "Maria Souza", "document": "98765432100", "contact": ""},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["data"]["contact"] is None

    listed = client.get(f"/units/{unit.id}/residents", headers=headers)
    assert [r["name"] for r in listed.json()["data"]] == ["Maria Souza"]


def test_create_resident_missing_name(client: TestClient, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    response = client.post(f"/units/{unit.id}/residents", json={"document": "1"}, headers=headers_for(world.admin_a))
    assert response.status_code == 400
    assert response.json()["error"] == "missing_field"


def test_residents_of_unknown_unit(client: TestClient, world, headers_for):
    assert client.get("/units/nope/residents", headers=headers_for(world.admin_a)).status_code == 404


def test_residents_other_tenant(client: TestClient, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    response = client.get(f"/units/{unit.id}/residents", headers=headers_for(world.admin_b))
    assert response.status_code == 403


def test_update_resident(client: TestClient, session, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    resident = Resident(name="Joao", unit_id=unit.id)
    session.add(resident)
    session.commit()

    response = client.patch(
        f"/residents/{resident.id}",
        json={"contact": "11999990001"},
        headers=headers_for(world.admin_a),
    )

    assert response.status_code == 200
    assert response.json()["data"]["contact"] == "11999990001"


def test_board_member_cannot_add_resident(client: TestClient, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    response = client.post(f"/units/{unit.id}/residents", json={"name": "X"}, headers=headers_for(world.board_a))
    assert response.status_code == 403


def test_delete_resident(client: TestClient, session, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    resident = Resident(name="Joao", unit_id=unit.id)
    session.add(resident)
    session.commit()
    resident_id = resident.id

    response = client.delete(f"/residents/{resident_id}", headers=headers_for(world.admin_a))

    assert response.status_code == 204
    assert session.get(Resident, resident_id) is None


def test_delete_resident_other_tenant(client: TestClient, session, world, make_unit, headers_for):
    unit = make_unit(world.condo_a.id)
    resident = Resident(name="Joao", unit_id=unit.id)
    session.add(resident)
    session.commit()

    response = client.delete(f"/residents/{resident.id}", headers=headers_for(world.admin_b))
    assert response.status_code == 403
