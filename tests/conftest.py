import os

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base
from app import models  # noqa: F401
from app.services.normalization_provider import provision_normalization

load_dotenv(os.path.join(os.getcwd(), ".env"))


def _resolve_test_database_url() -> str | None:
    return os.getenv("TEST_DATABASE_URL") or None


def make_sqlite_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@pytest.fixture(scope="session")
def engine():
    database_url = _resolve_test_database_url()
    if database_url:
        # Use PostgreSQL for tests when available (exercises unaccent)
        engine = create_engine(database_url)
    else:
        engine = make_sqlite_engine()
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def fresh_engine():
    """A private in-memory database with nothing provisioned yet."""
    engine = make_sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def normalization_mode(engine):
    return provision_normalization(engine)


@pytest.fixture()
def db_session(engine, normalization_mode):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()
