from dataclasses import dataclass

from tradedocs.database.models import DocumentType


@dataclass(frozen=True)
class UploadRequest:
    """One inbound upload, as accepted by the HTTP surface."""

    client_id: str
    file_name: str
    content_type: str
    data: bytes
    declared_type: DocumentType = DocumentType.BOL


@dataclass(frozen=True)
class UploadOutcome:
    document_id: str
    status: str
    file_id: str
