import time
from dataclasses import replace

from tradedocs.database.identifiers import new_identifier
from tradedocs.database.models import Document
from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.extraction.exceptions import (
    ExtractionError,
    ExtractionTimeoutError,
    ServiceUnavailableError,
)
from tradedocs.extraction.extractor import TextExtractionClient
from tradedocs.extraction.models import DocumentSource, ExtractionResult, InstructionProfile
from tradedocs.logging.logger import Log
from tradedocs.normalization import BolData, normalize
from tradedocs.processor.exceptions import (
    BlobWriteFailedError,
    ConflictError,
    ExtractionFailedError,
    PersistentConflictError,
)
from tradedocs.processor.pipeline import PipelineStep, UploadContext, UploadState
from tradedocs.resolution.merge import merge_bol_data
from tradedocs.resolution.models import Conflict, Create, PatchExisting
from tradedocs.resolution.resolver import DuplicateResolver
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError, BlobWriteError


class StoreBlobStep(PipelineStep):
    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    def run(self, context: UploadContext) -> UploadContext:
        request = context.request
        try:
            context.file_id = self._blob_store.put(
                request.data, request.content_type, request.file_name
            )
        except BlobWriteError as exc:
            raise BlobWriteFailedError(f"Could not store uploaded file: {exc}") from exc
        Log.info(f"Stored {len(request.data)} bytes", file_id=context.file_id)
        context.advance(UploadState.BLOB_STORED)
        return context


class ExtractStep(PipelineStep):
    """Runs extraction on the stored blob, retrying once on transient failures."""

    RETRYABLE = (ExtractionTimeoutError, ServiceUnavailableError)

    def __init__(
        self,
        blob_store: BaseBlobStore,
        extraction_client: TextExtractionClient,
        profile: InstructionProfile,
        retry_backoff_seconds: float,
    ) -> None:
        self._blob_store = blob_store
        self._extraction_client = extraction_client
        self._profile = profile
        self._retry_backoff_seconds = retry_backoff_seconds

    def run(self, context: UploadContext) -> UploadContext:
        if context.file_id is None:
            raise ValueError("UploadContext.file_id must be set before extraction")
        source = DocumentSource(
            data=self._blob_store.read_bytes(context.file_id),
            content_type=context.request.content_type,
            file_name=context.request.file_name,
        )
        try:
            context.extraction = self._extract_with_retry(source)
        except ExtractionError as exc:
            raise ExtractionFailedError(f"Extraction failed: {exc}") from exc
        context.advance(UploadState.EXTRACTED)
        return context

    def _extract_with_retry(self, source: DocumentSource) -> ExtractionResult:
        try:
            return self._extraction_client.extract(source, self._profile)
        except self.RETRYABLE as exc:
            Log.warning(
                f"Extraction attempt failed, retrying in {self._retry_backoff_seconds}s: {exc}"
            )
        time.sleep(self._retry_backoff_seconds)
        return self._extraction_client.extract(source, self._profile)


class NormalizeStep(PipelineStep):
    def run(self, context: UploadContext) -> UploadContext:
        if context.extraction is None:
            raise ValueError("UploadContext.extraction must be set before normalization")
        context.bol_data = normalize(context.extraction.fields)
        Log.info(
            f"Normalized BOL {context.bol_data.bol_number}: "
            f"{len(context.bol_data.containers)} containers, "
            f"{len(context.bol_data.overflow)} overflow fields",
            file_id=context.file_id,
        )
        context.advance(UploadState.NORMALIZED)
        return context


class ResolveStep(PipelineStep):
    def __init__(self, resolver: DuplicateResolver) -> None:
        self._resolver = resolver

    def run(self, context: UploadContext) -> UploadContext:
        if context.bol_data is None:
            raise ValueError("UploadContext.bol_data must be set before resolution")
        bol_number = context.bol_data.bol_number
        if bol_number is None:
            raise ExtractionFailedError("Extraction did not produce a BOL number")

        resolution = self._resolver.resolve(bol_number, context.request.client_id)
        context.resolve_attempts += 1
        if isinstance(resolution, Conflict):
            raise ConflictError(
                f"BOL {bol_number} already belongs to client {resolution.existing_client_id} "
                f"(document {resolution.existing_document_id})"
            )
        context.resolution = resolution
        Log.info(f"Resolved BOL {bol_number} as {resolution.type}", attempt=context.resolve_attempts)
        context.advance(UploadState.RESOLVED)
        return context


class PersistStep(PipelineStep):
    """Writes the Document row: insert on Create, version-checked merge on PatchExisting.

    DuplicateKeyError from an insert propagates; the coordinator re-resolves.
    """

    def __init__(self, documents_repository: DocumentsRepository, blob_store: BaseBlobStore) -> None:
        self._documents = documents_repository
        self._blob_store = blob_store

    def run(self, context: UploadContext) -> UploadContext:
        if context.file_id is None:
            raise ValueError("UploadContext.file_id must be set before persist")
        if isinstance(context.resolution, PatchExisting):
            self._patch(context, context.resolution)
        else:
            self._create(context)
        context.advance(UploadState.PERSISTED)
        return context

    def _create(self, context: UploadContext) -> None:
        if context.resolution is not None and not isinstance(context.resolution, Create):
            raise ValueError(f"Cannot persist resolution {context.resolution.type}")
        request = context.request
        document = Document(
            id=new_identifier(),
            type=request.declared_type,
            client_id=request.client_id,
            file_id=context.file_id or "",
            file_name=request.file_name,
            content_type=request.content_type,
            bol_data=context.bol_data,
        )
        self._documents.insert(document)
        context.document = document
        Log.info("Created document", document_id=document.id, type=document.type.value)

    def _patch(self, context: UploadContext, resolution: PatchExisting) -> None:
        incoming = context.bol_data or BolData()
        existing = resolution.document
        for _ in range(2):
            merged = merge_bol_data(existing.bol_data or BolData(), incoming)
            if self._documents.update_bol_data(
                existing.id, merged, context.file_id or "", existing.version
            ):
                break
            Log.warning("Concurrent update detected, re-reading", document_id=existing.id)
            existing = self._documents.find_by_id(existing.id)
        else:
            raise PersistentConflictError(
                f"Document {existing.id} kept changing during patch"
            )

        context.document = replace(
            existing,
            bol_data=merged,
            file_id=context.file_id or "",
            version=existing.version + 1,
        )
        Log.info("Patched document", document_id=existing.id, version=existing.version + 1)
        if existing.file_id != context.file_id:
            self._delete_replaced_blob(existing.file_id)

    def _delete_replaced_blob(self, file_id: str) -> None:
        try:
            self._blob_store.delete(file_id)
        except BlobDeleteError as exc:
            Log.warning(f"Could not delete replaced blob: {exc}", file_id=file_id)
