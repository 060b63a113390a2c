# jobs/seed_demo.py

from decimal import Decimal

from sqlmodel import Session, select, func

from core.logging_config import logger
from core.security import hash_password
from core.utils import parse_date_input
from database import create_db_and_tables, engine as default_engine
from models import Administrator, Condominium, FinancialEntry, Resident, Unit, User
from models.enums import EntryKind, Plan, Role


TENANT_NAME = "Administradora Alpha"

UNITS = {
    "Residencial Aurora": [
        ("Apto 101", "Apartamento", [
            ("Joao Pereira", "12345678900", "11999990001"),
            ("Maria Souza", "98765432100", "11999990002"),
        ]),
        ("Apto 102", "Apartamento", [("Carlos Lima", "11122233344", "11999990003")]),
        ("Cobertura 301", "Cobertura", [("Ana Costa", "55566677788", "11999990004")]),
    ],
    "Jardins do Sol": [
        ("Bloco B - 12", "Apartamento", [("Bruno Alves", "22233344455", "11999990005")]),
        ("Bloco B - 14", "Apartamento", [
            ("Paula Moraes", "33344455566", "11999990006"),
            ("Ricardo Melo", "44455566677", "11999990007"),
        ]),
    ],
}

ENTRIES = [
    ("Residencial Aurora", EntryKind.expense, "850.50", "2026-01-05", "Manutencao", "Troca de lampadas"),
    ("Residencial Aurora", EntryKind.expense, "420.00", "2026-01-12", "Limpeza", "Servicos de limpeza mensal"),
    ("Residencial Aurora", EntryKind.income, "12000.00", "2026-01-10", "Cota condominial", "Recebimento de cotas"),
    ("Jardins do Sol", EntryKind.expense, "1500.00", "2026-01-08", "Seguranca", "Monitoramento 24h"),
    ("Jardins do Sol", EntryKind.income, "9800.00", "2026-01-11", "Cota condominial", "Recebimento de cotas"),
]


def ensure_administrator(session: Session) -> Administrator:
    existing = session.exec(select(Administrator).where(Administrator.name == TENANT_NAME)).first()
    if existing:
        return existing
    administrator = Administrator(name=TENANT_NAME)
    session.add(administrator)
    session.flush()
    return administrator


def ensure_condominium(session: Session, name: str, administrator_id: str) -> Condominium:
    existing = session.exec(
        select(Condominium).where(
            Condominium.name == name,
            Condominium.administrator_id == administrator_id,
        )
    ).first()
    if existing:
        return existing
    condominium = Condominium(name=name, administrator_id=administrator_id)
    session.add(condominium)
    session.flush()
    return condominium


def upsert_user(session: Session, name, email, password, role, administrator_id=None, condominium_id=None):
    """Seeded accounts are verified, onboarded and on the professional plan."""
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        user = User(name=name, email=email, password_hash="", role=role)

    user.name = name
    user.role = role
    user.password_hash = hash_password(password)
    user.administrator_id = administrator_id
    user.condominium_id = condominium_id
    user.plan = Plan.professional
    user.email_verified = True
    user.onboarded = True
    session.add(user)


def ensure_units(session: Session, condominium: Condominium, units):
    count = session.exec(
        select(func.count()).select_from(Unit).where(Unit.condominium_id == condominium.id)
    ).one()
    if count > 0:
        return

    for identifier, unit_type, residents in units:
        unit = Unit(identifier=identifier, type=unit_type, condominium_id=condominium.id)
        session.add(unit)
        session.flush()
        for name, document, contact in residents:
            session.add(Resident(name=name, document=document, contact=contact, unit_id=unit.id))


def ensure_entries(session: Session, condominiums: dict):
    if session.exec(select(func.count()).select_from(FinancialEntry)).one() > 0:
        return

    for condominium_name, kind, amount, day, category, description in ENTRIES:
        session.add(FinancialEntry(
            kind=kind,
            amount=Decimal(amount),
            date=parse_date_input(day),
            category=category,
            description=description,
            condominium_id=condominiums[condominium_name].id,
        ))


def run(target_engine=None):
    """
    CLI entry point: python -m jobs.seed_demo
    Safe to run repeatedly; existing rows are reused.
    """
    target_engine = target_engine or default_engine
    create_db_and_tables(target_engine)

    with Session(target_engine) as session:
        administrator = ensure_administrator(session)
        condominiums = {name: ensure_condominium(session, name, administrator.id) for name in UNITS}
        aurora = condominiums["Residencial Aurora"]
        jardins = condominiums["Jardins do Sol"]

        upsert_user(session, "Admin Alpha", "admin@admg.local", "admin123", Role.administrator, administrator.id)
        upsert_user(session, "Operador 1", "op1@admg.local", "op123", Role.operator, administrator.id)
        upsert_user(session, "Operador 2", "op2@admg.local", "op123", Role.operator, administrator.id)
        upsert_user(session, "Sindico Aurora", "sindico1@admg.local", "sindico123",
                    Role.board_member, administrator.id, aurora.id)
        upsert_user(session, "Sindico Jardins", "sindico2@admg.local", "sindico123",
                    Role.board_member, administrator.id, jardins.id)

        for name, units in UNITS.items():
            ensure_units(session, condominiums[name], units)
        ensure_entries(session, condominiums)

        session.commit()

    logger.info("Seed complete: users, condominiums, units, residents and entries ready")


if __name__ == "__main__":
    run()
