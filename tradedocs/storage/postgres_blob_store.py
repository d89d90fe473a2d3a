import hashlib
import io
from collections.abc import Iterator
from typing import Any, BinaryIO
from uuid import UUID

import psycopg
from psycopg.rows import dict_row

from tradedocs.database.connection import Database
from tradedocs.database.identifiers import new_identifier
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError, BlobNotFoundError, BlobWriteError
from tradedocs.storage.models import BlobInfo


class PostgresBlobStore(BaseBlobStore):
    """Stores blobs as bytea rows in the blobs table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def put(self, data: bytes, content_type: str, file_name: str | None = None) -> str:
        file_id = new_identifier()
        try:
            with self._db.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO blobs (id, sha256, content_type, file_name, size_bytes, data)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (
                        UUID(file_id),
                        hashlib.sha256(data).hexdigest(),
                        content_type,
                        file_name,
                        len(data),
                        data,
                    ),
                )
                conn.commit()
        except psycopg.Error as exc:
            raise BlobWriteError(f"Failed to store blob: {exc}") from exc
        return file_id

    def open_read_stream(self, file_id: str) -> BinaryIO:
        key = _parse(file_id)
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT data FROM blobs WHERE id = %s", (key,))
                row = cur.fetchone()
        if row is None:
            raise BlobNotFoundError(f"Blob {file_id} not found")
        return io.BytesIO(bytes(row[0]))

    def stat(self, file_id: str) -> BlobInfo:
        key = _parse(file_id)
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, content_type, size_bytes, sha256, created_at, file_name
                    FROM blobs
                    WHERE id = %s
                    """,
                    (key,),
                )
                row = cur.fetchone()
        if row is None:
            raise BlobNotFoundError(f"Blob {file_id} not found")
        return _row_to_info(row)

    def delete(self, file_id: str) -> bool:
        key = _parse(file_id)
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM blobs WHERE id = %s", (key,))
                    deleted = cur.rowcount == 1
                conn.commit()
        except psycopg.Error as exc:
            raise BlobDeleteError(f"Failed to delete blob {file_id}: {exc}") from exc
        return deleted

    def list_blobs(self) -> Iterator[BlobInfo]:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, content_type, size_bytes, sha256, created_at, file_name
                    FROM blobs
                    ORDER BY created_at
                    """
                )
                rows = cur.fetchall()
        for row in rows:
            yield _row_to_info(row)


def _parse(file_id: str) -> UUID | None:
    """Unknown id shapes are treated as absent blobs rather than bad input."""
    try:
        return UUID(str(file_id))
    except ValueError:
        return None


def _row_to_info(row: dict[str, Any]) -> BlobInfo:
    return BlobInfo(
        id=str(row["id"]),
        content_type=row["content_type"],
        size_bytes=row["size_bytes"],
        sha256=row["sha256"],
        created_at=row["created_at"],
        file_name=row["file_name"],
    )
