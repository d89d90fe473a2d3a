import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from tradedocs.config.settings import Settings
from tradedocs.database.connection import Database
from tradedocs.database.models import Client
from tradedocs.database.repositories.clients_repository import ClientsRepository
from tradedocs.database.schema import ensure_schema


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "tradedocs_test")
    return Settings(db_connect_timeout_seconds=3)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    try:
        db = Database.connect(test_settings)
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        ensure_schema(db)
        yield db
    finally:
        db.close()


@pytest.fixture
def db_conn(database: Database) -> Generator[psycopg.Connection[Any], None, None]:
    with database.connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(database: Database) -> Generator[list[tuple[str, str]], None, None]:
    """Rows to delete after the test, as (table, id). Documents go before clients."""
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with database.connection() as conn:
        with conn.cursor() as cur:
            for table in ("documents", "blobs", "clients"):
                for row_table, row_id in reversed(cleanup):
                    if row_table == table:
                        cur.execute(f"DELETE FROM {table} WHERE id = %s", (uuid.UUID(row_id),))
        conn.commit()


@pytest.fixture
def make_client(
    database: Database, integration_cleanup: list[tuple[str, str]]
) -> Any:
    def _make(name: str = "Quimica Andina C.A.") -> Client:
        client = ClientsRepository(database).create(
            name=name, rif=f"J-{uuid.uuid4().hex[:10].upper()}"
        )
        integration_cleanup.append(("clients", client.id))
        return client

    return _make
