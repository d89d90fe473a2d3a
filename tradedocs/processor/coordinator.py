from dataclasses import replace
from typing import Any

from tradedocs.config.settings import Settings
from tradedocs.database.connection import Database
from tradedocs.database.models import Document, DocumentType
from tradedocs.database.repositories.clients_repository import ClientsRepository
from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.extraction.extractor import TextExtractionClient
from tradedocs.extraction.factory import ExtractionClientFactory
from tradedocs.extraction.models import InstructionProfile
from tradedocs.extraction.prompt_loader import load_instruction_profile
from tradedocs.logging.logger import Log
from tradedocs.normalization import BolData, bol_data_to_dict, normalize
from tradedocs.processor.exceptions import (
    BlobWriteFailedError,
    ConflictError,
    DuplicateKeyError,
    ExtractionFailedError,
    InvalidInputError,
    NotBolError,
    PersistentConflictError,
)
from tradedocs.processor.field_paths import apply_field, parse_field_path
from tradedocs.processor.models import UploadOutcome, UploadRequest
from tradedocs.processor.pipeline import FailureReason, UploadContext
from tradedocs.processor.steps import (
    ExtractStep,
    NormalizeStep,
    PersistStep,
    ResolveStep,
    StoreBlobStep,
)
from tradedocs.resolution.models import PatchExisting
from tradedocs.resolution.resolver import DuplicateResolver
from tradedocs.storage.base import BaseBlobStore

_FAILURE_REASONS: tuple[tuple[type[Exception], FailureReason], ...] = (
    (BlobWriteFailedError, FailureReason.BLOB_WRITE_FAILED),
    (ExtractionFailedError, FailureReason.EXTRACTION_FAILED),
    (PersistentConflictError, FailureReason.PERSISTENT_CONFLICT),
    (ConflictError, FailureReason.CONFLICT),
)


def failure_reason_for(exc: Exception) -> FailureReason:
    for exc_type, reason in _FAILURE_REASONS:
        if isinstance(exc, exc_type):
            return reason
    return FailureReason.INTERNAL


class DocumentCoordinator:
    """Drives one upload through the ingestion state machine and repairs BOL fields.

    Upload: store blob -> extract -> normalize -> resolve -> persist.
    Non-BOL uploads are persisted right after the blob is stored. A failed
    upload leaves its blob in place for the orphan sweep.
    """

    def __init__(
        self,
        *,
        clients_repository: ClientsRepository,
        documents_repository: DocumentsRepository,
        blob_store: BaseBlobStore,
        extraction_client: TextExtractionClient,
        profile: InstructionProfile,
        retry_backoff_seconds: float = 1.0,
    ) -> None:
        self._clients = clients_repository
        self._documents = documents_repository
        resolver = DuplicateResolver(documents_repository)
        self._store_blob = StoreBlobStep(blob_store)
        self._extract = ExtractStep(
            blob_store, extraction_client, profile, retry_backoff_seconds
        )
        self._normalize = NormalizeStep()
        self._resolve = ResolveStep(resolver)
        self._persist = PersistStep(documents_repository, blob_store)

    def upload(self, request: UploadRequest) -> UploadOutcome:
        return self.process(UploadContext(request=request))

    def process(self, context: UploadContext) -> UploadOutcome:
        """Run the upload state machine to PERSISTED.

        Raises:
            ClientNotFoundError: before anything is stored, if the client is unknown.
            BlobWriteFailedError, ExtractionFailedError, ConflictError,
            PersistentConflictError: with the context left in FAILED.
        """
        request = context.request
        self._clients.find_by_id(request.client_id)
        Log.info(
            f"Upload received: {request.file_name} ({len(request.data)} bytes)",
            client_id=request.client_id,
            type=request.declared_type.value,
        )
        try:
            self._store_blob.run(context)
            if request.declared_type is DocumentType.BOL:
                self._extract.run(context)
                self._normalize.run(context)
                self._resolve.run(context)
                self._persist_with_reresolve(context)
            else:
                self._persist.run(context)
        except Exception as exc:
            context.fail(failure_reason_for(exc), str(exc))
            raise

        if context.document is None or context.file_id is None:
            raise ValueError("Persisted upload has no document")
        status = "patched" if isinstance(context.resolution, PatchExisting) else "created"
        return UploadOutcome(
            document_id=context.document.id, status=status, file_id=context.file_id
        )

    def _persist_with_reresolve(self, context: UploadContext) -> None:
        try:
            self._persist.run(context)
            return
        except DuplicateKeyError as exc:
            Log.warning(f"Lost BOL number race, re-resolving: {exc}", file_id=context.file_id)

        self._resolve.run(context)
        try:
            self._persist.run(context)
        except DuplicateKeyError as exc:
            raise PersistentConflictError(
                f"BOL number still colliding after re-resolution: {exc}"
            ) from exc

    def repair(self, document_id: str, field_path: str, new_value: Any) -> Document:
        """Overwrite one BOL field in place, bypassing duplicate resolution.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            NotBolError: if the document is not a BOL; nothing is written.
            InvalidInputError: for unknown paths, non-numeric quantities or a cleared
                BOL number; nothing is written.
            DuplicateKeyError: if a repaired BOL number is held by another document.
            PersistentConflictError: if concurrent writers keep winning.
        """
        document = self._documents.find_by_id(document_id)
        if document.type is not DocumentType.BOL:
            raise NotBolError(
                f"Document {document_id} is {document.type.value}, not a BOL"
            )
        path = parse_field_path(field_path)

        for _ in range(2):
            raw = bol_data_to_dict(document.bol_data or BolData())
            apply_field(raw, path, new_value)
            repaired = normalize(raw)
            if repaired.bol_number is None:
                raise InvalidInputError("bolNumber cannot be cleared")
            if self._documents.update_bol_data(
                document.id, repaired, document.file_id, document.version
            ):
                Log.info(
                    f"Repaired field {field_path}",
                    document_id=document.id,
                    version=document.version + 1,
                )
                return replace(document, bol_data=repaired, version=document.version + 1)
            Log.warning("Concurrent update during repair, re-reading", document_id=document.id)
            document = self._documents.find_by_id(document_id)

        raise PersistentConflictError(f"Document {document_id} kept changing during repair")


def build_coordinator(
    settings: Settings,
    database: Database,
    blob_store: BaseBlobStore,
) -> DocumentCoordinator:
    """Build a DocumentCoordinator with all required adapters."""
    return DocumentCoordinator(
        clients_repository=ClientsRepository(database),
        documents_repository=DocumentsRepository(database),
        blob_store=blob_store,
        extraction_client=ExtractionClientFactory.create(settings),
        profile=load_instruction_profile("bol"),
        retry_backoff_seconds=settings.extraction_retry_backoff_seconds,
    )
