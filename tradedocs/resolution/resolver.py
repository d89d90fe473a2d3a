from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.resolution.models import Conflict, Create, PatchExisting, Resolution


class DuplicateResolver:
    """Decides whether an extracted BOL creates a record or patches one.

    The answer is advisory: two concurrent uploads can both see ``Create``.
    The unique index on the BOL number decides the race at write time.
    """

    def __init__(self, documents_repository: DocumentsRepository) -> None:
        self._documents = documents_repository

    def resolve(self, bol_number: str, client_id: str) -> Resolution:
        existing = self._documents.find_bol_by_number(bol_number)
        if existing is None:
            return Create()
        if existing.client_id == client_id:
            return PatchExisting(document=existing)
        return Conflict(
            existing_document_id=existing.id,
            existing_client_id=existing.client_id,
        )
