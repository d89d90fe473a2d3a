from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from tradedocs.normalization.models import BolData


class DocumentType(str, Enum):
    BOL = "BOL"
    PL = "PL"
    COO = "COO"
    INVOICE = "INVOICE"
    INVOICE_EXPORT = "INVOICE_EXPORT"
    COA = "COA"
    SED = "SED"
    DATA_SHEET = "DATA_SHEET"
    SAFETY_SHEET = "SAFETY_SHEET"


@dataclass(frozen=True)
class Document:
    """Represents a row from the documents table."""

    id: str
    type: DocumentType
    client_id: str
    file_id: str
    file_name: str
    content_type: str
    bol_data: BolData | None = None
    related_bol_id: str | None = None
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Client:
    """Represents a row from the clients table."""

    id: str
    name: str
    rif: str
    address: str = ""
    contact: dict[str, str] = field(default_factory=dict)
    required_documents: list[str] = field(default_factory=list)
    last_document_date: datetime | None = None
    created_at: datetime | None = None
