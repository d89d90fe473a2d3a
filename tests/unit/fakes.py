"""In-memory stand-ins for the repositories, blob store and extraction client."""

import io
from collections.abc import Iterator
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, BinaryIO
from unittest.mock import MagicMock

from tradedocs.database.identifiers import new_identifier, parse_identifier
from tradedocs.database.models import Client, Document, DocumentType
from tradedocs.extraction.models import (
    DocumentSource,
    ExtractionResult,
    ExtractionUsage,
    InstructionProfile,
)
from tradedocs.normalization import bol_data_to_dict, normalize
from tradedocs.processor.exceptions import (
    ClientNotFoundError,
    DocumentNotFoundError,
    DuplicateKeyError,
)
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError, BlobNotFoundError, BlobWriteError
from tradedocs.storage.models import BlobInfo

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryBlobStore(BaseBlobStore):
    def __init__(self) -> None:
        self.blobs: dict[str, tuple[bytes, BlobInfo]] = {}
        self.fail_put = False
        self.fail_delete = False
        self.created_at = FIXED_NOW

    def put(self, data: bytes, content_type: str, file_name: str | None = None) -> str:
        if self.fail_put:
            raise BlobWriteError("disk full")
        file_id = new_identifier()
        info = BlobInfo(
            id=file_id,
            content_type=content_type,
            size_bytes=len(data),
            sha256="0" * 64,
            created_at=self.created_at,
            file_name=file_name,
        )
        self.blobs[file_id] = (data, info)
        return file_id

    def open_read_stream(self, file_id: str) -> BinaryIO:
        if file_id not in self.blobs:
            raise BlobNotFoundError(f"Blob {file_id} not found")
        return io.BytesIO(self.blobs[file_id][0])

    def stat(self, file_id: str) -> BlobInfo:
        if file_id not in self.blobs:
            raise BlobNotFoundError(f"Blob {file_id} not found")
        return self.blobs[file_id][1]

    def delete(self, file_id: str) -> bool:
        if self.fail_delete:
            raise BlobDeleteError(f"cannot delete {file_id}")
        return self.blobs.pop(file_id, None) is not None

    def list_blobs(self) -> Iterator[BlobInfo]:
        for _, info in list(self.blobs.values()):
            yield info


class FakeDocumentsRepository:
    """Mimics DocumentsRepository including the BOL number unique index and version check."""

    def __init__(self) -> None:
        self.rows: dict[str, Document] = {}
        self.before_insert: Any = None
        self.before_update: Any = None

    def find_by_id(self, document_id: str) -> Document:
        parse_identifier(document_id, "document id")
        if document_id not in self.rows:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return self.rows[document_id]

    def find_bol_by_number(self, bol_number: str) -> Document | None:
        for document in self.rows.values():
            if (
                document.type is DocumentType.BOL
                and document.bol_data is not None
                and document.bol_data.bol_number == bol_number
            ):
                return document
        return None

    def insert(self, document: Document) -> None:
        if self.before_insert is not None:
            hook, self.before_insert = self.before_insert, None
            hook(document)
        self._check_unique(document.id, document)
        self.rows[document.id] = self._round_trip(document)

    def update_bol_data(
        self, document_id: str, bol_data: Any, file_id: str, expected_version: int
    ) -> bool:
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(document_id)
        current = self.rows.get(document_id)
        if current is None or current.version != expected_version:
            return False
        updated = replace(current, bol_data=bol_data, file_id=file_id, version=current.version + 1)
        self._check_unique(document_id, updated)
        self.rows[document_id] = self._round_trip(updated)
        return True

    def replace_file(
        self, document_id: str, file_id: str, file_name: str, expected_version: int
    ) -> bool:
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(document_id)
        current = self.rows.get(document_id)
        if current is None or current.version != expected_version:
            return False
        self.rows[document_id] = replace(
            current, file_id=file_id, file_name=file_name, version=current.version + 1
        )
        return True

    def list_by_client(self, client_id: str) -> list[Document]:
        newest_first = [d for d in reversed(self.rows.values()) if d.client_id == client_id]
        return sorted(newest_first, key=_bol_number_first_nulls)

    def list_related(self, bol_id: str, document_type: DocumentType) -> list[Document]:
        return [
            d
            for d in reversed(self.rows.values())
            if d.related_bol_id == bol_id and d.type is document_type
        ]

    def list_file_ids(self) -> set[str]:
        return {document.file_id for document in self.rows.values()}

    def add(self, document: Document) -> Document:
        self.rows[document.id] = self._round_trip(document)
        return self.rows[document.id]

    def _check_unique(self, document_id: str, document: Document) -> None:
        if document.type is not DocumentType.BOL or document.bol_data is None:
            return
        holder = self.find_bol_by_number(document.bol_data.bol_number or "")
        if holder is not None and holder.id != document_id:
            raise DuplicateKeyError(f"BOL number {document.bol_data.bol_number} already exists")

    @staticmethod
    def _round_trip(document: Document) -> Document:
        if document.bol_data is None:
            return document
        return replace(document, bol_data=normalize(bol_data_to_dict(document.bol_data)))


def _bol_number_first_nulls(document: Document) -> tuple[bool, str]:
    number = document.bol_data.bol_number if document.bol_data else None
    return number is not None, number or ""


class FakeClientsRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Client] = {}

    def add(self, name: str, rif: str) -> Client:
        client = Client(id=new_identifier(), name=name, rif=rif, address="Av. Principal, Caracas")
        self.rows[client.id] = client
        return client

    def create(self, *, name: str, rif: str, **kwargs: Any) -> Client:
        if any(client.rif == rif.strip().upper() for client in self.rows.values()):
            raise DuplicateKeyError(f"A client with RIF {rif} already exists")
        client = Client(id=new_identifier(), name=name, rif=rif.strip().upper())
        self.rows[client.id] = client
        return client

    def find_by_id(self, client_id: str) -> Client:
        if client_id not in self.rows:
            raise ClientNotFoundError(f"Client {client_id} not found")
        return self.rows[client_id]


class FakeExtractionClient:
    """Returns queued responses; an Exception in the queue is raised instead."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.sources: list[DocumentSource] = []

    def extract(self, source: DocumentSource, profile: InstructionProfile) -> ExtractionResult:
        self.sources.append(source)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return ExtractionResult(fields=response, model="fake-model", usage=ExtractionUsage(10, 5, 15))


def bol_fields(bol_number: str = "HLCUBSC250265371", **shipment: Any) -> dict[str, Any]:
    details = {
        "bolNumber": bol_number,
        "bookingNumber": "BSC2502653",
        "carrierReference": None,
        "vesselName": "MSC ANNA",
        "voyageNumber": "512W",
        "portOfLoading": "HOUSTON, TX",
        "portOfDischarge": "PUERTO CABELLO",
        "dateOfIssue": "03/15/2025",
    }
    details.update(shipment)
    return {
        "shipmentDetails": details,
        "containers": [
            {
                "containerNumber": "HLXU1234567",
                "sealNumber": "SEAL001",
                "type": "20' FLEXITANK",
                "product": {"name": "GLYCERINE", "density": 1.26},
                "quantity": {"volume": {"liters": 20000, "gallons": None}, "weight": {"kg": 25200}},
            }
        ],
    }


def mock_database() -> tuple[MagicMock, MagicMock, MagicMock]:
    """Wire up a mock Database + connection + cursor and return all three."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    database = MagicMock()
    database.connection.return_value.__enter__ = MagicMock(return_value=mock_conn)
    database.connection.return_value.__exit__ = MagicMock(return_value=False)
    return database, mock_conn, mock_cursor
