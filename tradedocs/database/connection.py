from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from tradedocs.config.settings import Settings


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class Database:
    """Owns the connection pool. Built once at startup and passed to repositories."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    @classmethod
    def connect(cls, settings: Settings) -> "Database":
        """Open the pool and block until a connection is established.

        Raises:
            psycopg_pool.PoolTimeout: if PostgreSQL is not reachable in time.
        """
        pool = ConnectionPool(
            build_conninfo(settings),
            min_size=1,
            max_size=settings.db_pool_max_size,
            open=True,
        )
        try:
            pool.wait(timeout=settings.db_connect_timeout_seconds)
        except Exception:
            pool.close()
            raise
        return cls(pool)

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection from the pool. Caller manages commit/rollback."""
        with self._pool.connection() as conn:
            yield conn

    def close(self) -> None:
        self._pool.close()
