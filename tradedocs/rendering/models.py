from dataclasses import dataclass
from enum import Enum

from tradedocs.database.models import DocumentType


class ArtifactKind(str, Enum):
    PACKING_LIST = "pl"
    CERTIFICATE_OF_ORIGIN = "coo"

    @property
    def document_type(self) -> DocumentType:
        if self is ArtifactKind.PACKING_LIST:
            return DocumentType.PL
        return DocumentType.COO


class GenerationMode(str, Enum):
    """How a generated artifact relates to earlier ones of the same kind."""

    OVERWRITE = "overwrite"
    NEW = "new"


@dataclass(frozen=True)
class CertificateIssuer:
    """Exporter identity printed on certificates of origin."""

    name: str = ""
    address: str = ""
    origin_country: str = "U.S.A."
