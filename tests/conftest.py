# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

Every test gets a fresh in-memory SQLite database; the app's session
dependency is overridden to hand out the test session.
"""

from types import SimpleNamespace
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

import database
from core.rate_limiter import InMemoryCounterStore, set_login_store
from core.security import create_access_token, hash_password
from database import build_engine, create_db_and_tables, get_session
from main import create_app
from models import Administrator, Condominium, Unit, User
from models.administrator import new_id
from models.enums import Plan, Role


@pytest.fixture(scope="function")
def engine(monkeypatch):
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(test_engine)
    # Startup hook and jobs resolve the module-level engine
    monkeypatch.setattr(database, "engine", test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as test_session:
        yield test_session


@pytest.fixture(scope="function")
def app(session):
    """Create a test FastAPI application instance bound to the test session."""
    application = create_app()
    application.dependency_overrides[get_session] = lambda: session
    return application


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def login_store():
    """Fresh login counters for every test."""
    store = InMemoryCounterStore(max_attempts=10, window_seconds=900)
    set_login_store(store)
    yield store
    set_login_store(None)


# -----------------------------------------------------
# Factories
# -----------------------------------------------------
@pytest.fixture
def make_tenant(session):
    def _make(name: str = "Administradora Teste") -> Administrator:
        administrator = Administrator(name=name)
        session.add(administrator)
        session.commit()
        session.refresh(administrator)
        return administrator
    return _make


@pytest.fixture
def make_condominium(session):
    def _make(administrator_id=None, name: str = "Residencial Teste") -> Condominium:
        condominium = Condominium(name=name, administrator_id=administrator_id)
        session.add(condominium)
        session.commit()
        session.refresh(condominium)
        return condominium
    return _make


@pytest.fixture
def make_unit(session):
    def _make(condominium_id: str, identifier: str = "Apto 101") -> Unit:
        unit = Unit(identifier=identifier, condominium_id=condominium_id)
        session.add(unit)
        session.commit()
        session.refresh(unit)
        return unit
    return _make


@pytest.fixture
def make_user(session):
    def _make(
        role: Role = Role.administrator,
        administrator_id=None,
        condominium_id=None,
        plan: Plan = Plan.freemium,
        email: str = None,
        password: str = "secret123",
        email_verified: bool = True,
    ) -> User:
        user = User(
            name=f"Test {role.value}",
            email=email or f"{role.value}-{new_id()[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            administrator_id=administrator_id,
            condominium_id=condominium_id,
            plan=plan,
            email_verified=email_verified,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def headers_for():
    """Bearer headers carrying the user's identity claims."""
    def _headers(user: User) -> dict:
        token = create_access_token(
            user_id=user.id,
            role=user.role,
            administrator_id=user.administrator_id,
            condominium_id=user.condominium_id,
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def world(make_tenant, make_condominium, make_user):
    """
    Two tenants:
    - tenant A: administrator, operator, condominium A and its board member
    - tenant B: administrator and condominium B
    """
    tenant_a = make_tenant("Administradora Alpha")
    tenant_b = make_tenant("Administradora Beta")
    condo_a = make_condominium(tenant_a.id, "Residencial Aurora")
    condo_b = make_condominium(tenant_b.id, "Jardins do Sol")

    return SimpleNamespace(
        tenant_a=tenant_a,
        tenant_b=tenant_b,
        condo_a=condo_a,
        condo_b=condo_b,
        admin_a=make_user(Role.administrator, administrator_id=tenant_a.id),
        operator_a=make_user(Role.operator, administrator_id=tenant_a.id),
        board_a=make_user(Role.board_member, condominium_id=condo_a.id),
        admin_b=make_user(Role.administrator, administrator_id=tenant_b.id),
    )
