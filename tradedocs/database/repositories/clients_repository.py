from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from tradedocs.database.connection import Database
from tradedocs.database.identifiers import new_identifier, parse_identifier
from tradedocs.database.models import Client
from tradedocs.processor.exceptions import ClientNotFoundError, DuplicateKeyError, InvalidInputError


def normalize_rif(rif: str) -> str:
    """RIF is the business key: stored trimmed and upper-cased."""
    return rif.strip().upper()


class ClientsRepository:
    """Database operations for the clients table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def find_by_id(self, client_id: str) -> Client:
        """Find a client by ID.

        Raises:
            ClientNotFoundError: if no client with this ID exists.
        """
        key = parse_identifier(client_id, "client id")
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, name, rif, address, contact, required_documents,
                           last_document_date, created_at
                    FROM clients
                    WHERE id = %s
                    """,
                    (key,),
                )
                row = cur.fetchone()

        if row is None:
            raise ClientNotFoundError(f"Client {client_id} not found")
        return _row_to_client(row)

    def create(
        self,
        *,
        name: str,
        rif: str,
        address: str = "",
        contact: dict[str, str] | None = None,
        required_documents: list[str] | None = None,
    ) -> Client:
        """Insert a client.

        Raises:
            InvalidInputError: if name or RIF is blank.
            DuplicateKeyError: if a client with the same RIF exists.
        """
        name = name.strip()
        rif = normalize_rif(rif)
        if not name or not rif:
            raise InvalidInputError("Client name and RIF are required")

        client = Client(
            id=new_identifier(),
            name=name,
            rif=rif,
            address=address,
            contact=dict(contact or {}),
            required_documents=list(required_documents or []),
        )
        with self._db.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO clients
                        (id, name, rif, address, contact, required_documents)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        """,
                        (
                            parse_identifier(client.id, "client id"),
                            client.name,
                            client.rif,
                            client.address,
                            Jsonb(client.contact),
                            Jsonb(client.required_documents),
                        ),
                    )
            except psycopg.errors.UniqueViolation as exc:
                conn.rollback()
                raise DuplicateKeyError(
                    f"A client with RIF {rif} already exists"
                ) from exc
            conn.commit()
        return client


def _row_to_client(row: dict[str, Any]) -> Client:
    return Client(
        id=str(row["id"]),
        name=row["name"],
        rif=row["rif"],
        address=row["address"] or "",
        contact=row["contact"] or {},
        required_documents=row["required_documents"] or [],
        last_document_date=row["last_document_date"],
        created_at=row["created_at"],
    )
