from dataclasses import dataclass

from tradedocs.database.models import Document


@dataclass(frozen=True)
class Create:
    """No BOL with this number exists yet."""

    type: str = "create"


@dataclass(frozen=True)
class PatchExisting:
    """The number is already held by a BOL of the same client."""

    document: Document
    type: str = "patch"

    @property
    def document_id(self) -> str:
        return self.document.id


@dataclass(frozen=True)
class Conflict:
    """The number is held by a BOL of a different client."""

    existing_document_id: str
    existing_client_id: str
    type: str = "conflict"


Resolution = Create | PatchExisting | Conflict
