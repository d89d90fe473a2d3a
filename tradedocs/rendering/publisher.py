from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from tradedocs.database.identifiers import new_identifier
from tradedocs.database.models import Document, DocumentType
from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.logging.logger import Log
from tradedocs.processor.exceptions import NotBolError, PersistentConflictError
from tradedocs.rendering.models import ArtifactKind, GenerationMode
from tradedocs.rendering.regenerator import (
    ARTIFACT_CONTENT_TYPE,
    Regenerator,
    default_document_number,
)
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobDeleteError

DEFAULT_MODES: dict[ArtifactKind, GenerationMode] = {
    ArtifactKind.PACKING_LIST: GenerationMode.NEW,
    ArtifactKind.CERTIFICATE_OF_ORIGIN: GenerationMode.OVERWRITE,
}


class DerivedDocumentPublisher:
    """Generates a packing list or certificate of origin for a BOL and records it.

    The artifact is stored as its own Document of type PL or COO whose
    ``related_bol_id`` points at the BOL. In ``new`` mode every call adds a
    numbered version; in ``overwrite`` mode the latest one is re-pointed at
    the fresh artifact and its previous blob is deleted best-effort.
    """

    def __init__(
        self,
        documents_repository: DocumentsRepository,
        blob_store: BaseBlobStore,
        regenerator: Regenerator,
    ) -> None:
        self._documents = documents_repository
        self._blob_store = blob_store
        self._regenerator = regenerator

    def generate(
        self,
        bol_document_id: str,
        kind: ArtifactKind,
        mode: GenerationMode | None = None,
        layout_overrides: Mapping[str, Any] | None = None,
        debug: Any = False,
    ) -> Document:
        """Render the artifact and link it to the BOL.

        Raises:
            DocumentNotFoundError: if the BOL document does not exist.
            NotBolError: if the document is not a BOL.
            InvalidInputError: if the overrides are invalid.
            BlobWriteFailedError: if the artifact could not be stored.
            PersistentConflictError: if the overwritten document keeps changing.
        """
        bol = self._documents.find_by_id(bol_document_id)
        if bol.type is not DocumentType.BOL or bol.bol_data is None:
            raise NotBolError(f"Document {bol_document_id} is {bol.type.value}, not a BOL")
        mode = mode or DEFAULT_MODES[kind]

        existing = self._documents.list_related(bol.id, kind.document_type)
        if mode is GenerationMode.OVERWRITE and existing:
            return self._overwrite(bol, kind, existing[0], layout_overrides, debug)

        number = default_document_number(bol.bol_data.bol_number or "", kind)
        if existing:
            number = f"{number}-{len(existing) + 1}"
        artifact_id = self._regenerator.regenerate(
            bol.id, layout_overrides, debug, kind=kind, document_number=number
        )
        document = Document(
            id=new_identifier(),
            type=kind.document_type,
            client_id=bol.client_id,
            file_id=artifact_id,
            file_name=f"{number}.pdf",
            content_type=ARTIFACT_CONTENT_TYPE,
            related_bol_id=bol.id,
        )
        self._documents.insert(document)
        Log.info(
            f"Created {kind.document_type.value} {document.file_name}",
            document_id=document.id,
            bol_id=bol.id,
        )
        return document

    def _overwrite(
        self,
        bol: Document,
        kind: ArtifactKind,
        target: Document,
        layout_overrides: Mapping[str, Any] | None,
        debug: Any,
    ) -> Document:
        for _ in range(2):
            number = target.file_name.removesuffix(".pdf")
            artifact_id = self._regenerator.regenerate(
                bol.id, layout_overrides, debug, kind=kind, document_number=number
            )
            if self._documents.replace_file(
                target.id, artifact_id, target.file_name, target.version
            ):
                Log.info(
                    f"Overwrote {kind.document_type.value} {target.file_name}",
                    document_id=target.id,
                    bol_id=bol.id,
                )
                self._delete_blob(target.file_id)
                return replace(target, file_id=artifact_id, version=target.version + 1)

            Log.warning("Concurrent update during overwrite, re-reading", document_id=target.id)
            self._delete_blob(artifact_id)
            target = self._documents.find_by_id(target.id)

        raise PersistentConflictError(f"Document {target.id} kept changing during overwrite")

    def _delete_blob(self, file_id: str) -> None:
        try:
            self._blob_store.delete(file_id)
        except BlobDeleteError as exc:
            Log.warning(f"Could not delete replaced blob: {exc}", file_id=file_id)
