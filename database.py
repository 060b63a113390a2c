from typing import Generator

from sqlalchemy import event
from sqlmodel import SQLModel, create_engine, Session

from core.config import settings
from core.logging_config import logger

DATABASE_URL = settings.DATABASE_URL.strip()

# Render/Neon often provide 'postgres://'. SQLAlchemy prefers 'postgresql+psycopg2://'
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)

if not DATABASE_URL:
    # Fallback to local SQLite for quick testing (not for production)
    DATABASE_URL = "sqlite:///./local.db"


def build_engine(url: str, **kwargs):
    """
    Create an engine. SQLite connections get foreign-key enforcement so
    RESTRICT / SET NULL behave as they do on Postgres.
    """
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    new_engine = create_engine(url, echo=False, connect_args=connect_args, **kwargs)

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)


def create_db_and_tables(target_engine=None) -> None:
    # Table classes must be imported before metadata.create_all
    import models  # noqa: F401

    SQLModel.metadata.create_all(target_engine or engine)
    logger.info("Database tables ensured")


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
