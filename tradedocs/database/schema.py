"""DDL for the ingestion store and verification of its uniqueness guarantees."""

from tradedocs.database.connection import Database
from tradedocs.logging.logger import Log

BOL_NUMBER_INDEX = "documents_bol_number_key"

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS clients (
        id uuid PRIMARY KEY,
        name text NOT NULL,
        rif text NOT NULL,
        address text NOT NULL DEFAULT '',
        contact jsonb,
        required_documents jsonb NOT NULL DEFAULT '[]'::jsonb,
        last_document_date timestamptz,
        created_at timestamptz NOT NULL DEFAULT NOW(),
        updated_at timestamptz NOT NULL DEFAULT NOW(),
        CONSTRAINT clients_rif_key UNIQUE (rif)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS blobs (
        id uuid PRIMARY KEY,
        sha256 char(64) NOT NULL,
        content_type text NOT NULL,
        file_name text,
        size_bytes bigint NOT NULL,
        data bytea NOT NULL,
        created_at timestamptz NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS documents (
        id uuid PRIMARY KEY,
        type text NOT NULL CHECK (type IN (
            'BOL', 'PL', 'COO', 'INVOICE', 'INVOICE_EXPORT',
            'COA', 'SED', 'DATA_SHEET', 'SAFETY_SHEET'
        )),
        client_id uuid NOT NULL REFERENCES clients (id),
        file_id uuid NOT NULL,
        file_name text NOT NULL,
        content_type text NOT NULL,
        bol_data jsonb,
        related_bol_id uuid REFERENCES documents (id),
        version integer NOT NULL DEFAULT 1,
        created_at timestamptz NOT NULL DEFAULT NOW(),
        updated_at timestamptz NOT NULL DEFAULT NOW(),
        CONSTRAINT documents_bol_data_present CHECK (
            type <> 'BOL' OR (bol_data ->> 'bolNumber') IS NOT NULL
        )
    )
    """,
    f"""
    CREATE UNIQUE INDEX IF NOT EXISTS {BOL_NUMBER_INDEX}
        ON documents ((bol_data ->> 'bolNumber'))
        WHERE type = 'BOL'
    """,
    "ALTER TABLE documents ADD COLUMN IF NOT EXISTS related_bol_id uuid",
    "CREATE INDEX IF NOT EXISTS documents_client_type_idx ON documents (client_id, type)",
    "CREATE INDEX IF NOT EXISTS documents_file_id_idx ON documents (file_id)",
    "CREATE INDEX IF NOT EXISTS documents_related_bol_idx ON documents (related_bol_id, type)",
)


class SchemaError(Exception):
    """Raised when the database is missing a required table or constraint."""


def ensure_schema(database: Database) -> None:
    """Apply all DDL statements. Safe to run repeatedly."""
    with database.connection() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(statement)
        conn.commit()
    Log.info("Database schema applied")


def verify_schema(database: Database) -> None:
    """Check that the BOL number uniqueness index exists and is unique.

    Raises:
        SchemaError: if the index is missing or not declared UNIQUE.
    """
    with database.connection() as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT indexdef
                FROM pg_indexes
                WHERE tablename = 'documents' AND indexname = %s
                """,
                (BOL_NUMBER_INDEX,),
            )
            row = cur.fetchone()

    if row is None:
        raise SchemaError(
            f"Index {BOL_NUMBER_INDEX} is missing; run 'tradedocs init-schema'"
        )
    indexdef: str = row[0]
    if "UNIQUE" not in indexdef.upper():
        raise SchemaError(f"Index {BOL_NUMBER_INDEX} exists but is not UNIQUE")
    Log.info(f"Verified uniqueness index {BOL_NUMBER_INDEX}")
