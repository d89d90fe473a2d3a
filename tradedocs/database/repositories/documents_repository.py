from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from tradedocs.database.connection import Database
from tradedocs.database.identifiers import parse_identifier
from tradedocs.database.models import Document, DocumentType
from tradedocs.database.schema import BOL_NUMBER_INDEX
from tradedocs.normalization import BolData, bol_data_to_dict, normalize
from tradedocs.processor.exceptions import DocumentNotFoundError, DuplicateKeyError

_SELECT = """
    SELECT id, type, client_id, file_id, file_name, content_type,
           bol_data, related_bol_id, version, created_at, updated_at
    FROM documents
"""


class DocumentsRepository:
    """Database operations for the documents table.

    Every write touches a single document row; the partial unique index on
    the BOL number is the final arbiter of duplicate uploads.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        key = parse_identifier(document_id, "document id")
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(_SELECT + " WHERE id = %s", (key,))
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _row_to_document(row)

    def find_bol_by_number(self, bol_number: str) -> Document | None:
        """Exact BOL number lookup among documents of type BOL."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    _SELECT + " WHERE type = 'BOL' AND bol_data ->> 'bolNumber' = %s",
                    (bol_number,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _row_to_document(row)

    def insert(self, document: Document) -> None:
        """Insert a new document and stamp the owning client's last document date.

        Raises:
            DuplicateKeyError: if a BOL with the same number already exists.
        """
        bol_payload = (
            Jsonb(bol_data_to_dict(document.bol_data))
            if document.bol_data is not None
            else None
        )
        related_key = (
            parse_identifier(document.related_bol_id, "related BOL id")
            if document.related_bol_id is not None
            else None
        )
        with self._db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO documents
                        (id, type, client_id, file_id, file_name, content_type,
                         bol_data, related_bol_id, version)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            parse_identifier(document.id, "document id"),
                            document.type.value,
                            parse_identifier(document.client_id, "client id"),
                            parse_identifier(document.file_id, "file id"),
                            document.file_name,
                            document.content_type,
                            bol_payload,
                            related_key,
                            document.version,
                        ),
                    )
                    cur.execute(
                        """
                        UPDATE clients
                        SET last_document_date = NOW(), updated_at = NOW()
                        WHERE id = %s
                        """,
                        (parse_identifier(document.client_id, "client id"),),
                    )
            except psycopg.errors.UniqueViolation as exc:
                conn.rollback()
                raise _translate_unique_violation(exc, document) from exc
            conn.commit()

    def update_bol_data(
        self,
        document_id: str,
        bol_data: BolData,
        file_id: str,
        expected_version: int,
    ) -> bool:
        """Replace BOL data and file reference if the row is still at expected_version.

        Returns:
            False when another writer changed the row first (or it is gone).

        Raises:
            DuplicateKeyError: if the new BOL number is held by another document.
        """
        with self._db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE documents
                        SET bol_data = %s, file_id = %s,
                            version = version + 1, updated_at = NOW()
                        WHERE id = %s AND version = %s
                        """,
                        (
                            Jsonb(bol_data_to_dict(bol_data)),
                            parse_identifier(file_id, "file id"),
                            parse_identifier(document_id, "document id"),
                            expected_version,
                        ),
                    )
                    updated = cur.rowcount == 1
            except psycopg.errors.UniqueViolation as exc:
                conn.rollback()
                raise DuplicateKeyError(
                    f"BOL number {bol_data.bol_number} already exists"
                ) from exc
            conn.commit()
        return updated

    def replace_file(
        self,
        document_id: str,
        file_id: str,
        file_name: str,
        expected_version: int,
    ) -> bool:
        """Point a document at a new blob if the row is still at expected_version.

        Returns:
            False when another writer changed the row first (or it is gone).
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET file_id = %s, file_name = %s,
                        version = version + 1, updated_at = NOW()
                    WHERE id = %s AND version = %s
                    """,
                    (
                        parse_identifier(file_id, "file id"),
                        file_name,
                        parse_identifier(document_id, "document id"),
                        expected_version,
                    ),
                )
                updated = cur.rowcount == 1
            conn.commit()
        return updated

    def list_by_client(self, client_id: str) -> list[Document]:
        """All documents of a client, grouped by BOL number and newest first within a group."""
        key = parse_identifier(client_id, "client id")
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    _SELECT
                    + """
                    WHERE client_id = %s
                    ORDER BY bol_data ->> 'bolNumber' ASC NULLS FIRST, created_at DESC
                    """,
                    (key,),
                )
                rows = cur.fetchall()
        return [_row_to_document(row) for row in rows]

    def list_related(self, bol_id: str, document_type: DocumentType) -> list[Document]:
        """Documents derived from a BOL, newest first."""
        key = parse_identifier(bol_id, "document id")
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    _SELECT
                    + " WHERE related_bol_id = %s AND type = %s ORDER BY created_at DESC",
                    (key, document_type.value),
                )
                rows = cur.fetchall()
        return [_row_to_document(row) for row in rows]

    def list_file_ids(self) -> set[str]:
        """All blob IDs referenced by any document."""
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT DISTINCT file_id FROM documents")
                rows = cur.fetchall()
        return {str(row[0]) for row in rows}


def _translate_unique_violation(
    exc: psycopg.errors.UniqueViolation, document: Document
) -> Exception:
    if exc.diag.constraint_name == BOL_NUMBER_INDEX and document.bol_data is not None:
        return DuplicateKeyError(
            f"BOL number {document.bol_data.bol_number} already exists"
        )
    return DuplicateKeyError(f"Document {document.id} violates {exc.diag.constraint_name}")


def _row_to_document(row: dict[str, Any]) -> Document:
    raw_bol = row["bol_data"]
    return Document(
        id=str(row["id"]),
        type=DocumentType(row["type"]),
        client_id=str(row["client_id"]),
        file_id=str(row["file_id"]),
        file_name=row["file_name"],
        content_type=row["content_type"],
        bol_data=normalize(raw_bol) if raw_bol is not None else None,
        related_bol_id=str(row["related_bol_id"]) if row["related_bol_id"] else None,
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
