from collections.abc import Mapping
from typing import Any

from tradedocs.database.models import DocumentType
from tradedocs.database.repositories.clients_repository import ClientsRepository
from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.logging.logger import Log
from tradedocs.processor.exceptions import BlobWriteFailedError, NotBolError
from tradedocs.rendering.layout import CERTIFICATE_LAYOUT, PACKING_LIST_LAYOUT, resolve_layout
from tradedocs.rendering.models import ArtifactKind, CertificateIssuer
from tradedocs.rendering.renderer import render_certificate_of_origin, render_packing_list
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.exceptions import BlobWriteError

ARTIFACT_CONTENT_TYPE = "application/pdf"


def default_document_number(bol_number: str, kind: ArtifactKind) -> str:
    return f"{bol_number}-{kind.value.upper()}"


class Regenerator:
    """Renders a derived artifact (packing list or certificate of origin) from current BOL data.

    Reads the Document, writes one new blob and returns its id. The
    Document itself is never written.
    """

    def __init__(
        self,
        documents_repository: DocumentsRepository,
        clients_repository: ClientsRepository,
        blob_store: BaseBlobStore,
        issuer: CertificateIssuer | None = None,
    ) -> None:
        self._documents = documents_repository
        self._clients = clients_repository
        self._blob_store = blob_store
        self._issuer = issuer or CertificateIssuer()

    def regenerate(
        self,
        document_id: str,
        layout_overrides: Mapping[str, Any] | None = None,
        debug: Any = False,
        kind: ArtifactKind = ArtifactKind.PACKING_LIST,
        document_number: str | None = None,
    ) -> str:
        """Render and store the artifact, returning the new blob id.

        Debug overlays are drawn only when ``debug is True``.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            NotBolError: if the document has no BOL data to render.
            InvalidInputError: if the overrides are invalid.
            BlobWriteFailedError: if the artifact could not be stored.
        """
        debug_enabled = debug is True
        if kind is ArtifactKind.CERTIFICATE_OF_ORIGIN:
            layout = resolve_layout(layout_overrides, CERTIFICATE_LAYOUT)
        else:
            layout = resolve_layout(layout_overrides, PACKING_LIST_LAYOUT)
        document = self._documents.find_by_id(document_id)
        if document.type is not DocumentType.BOL or document.bol_data is None:
            raise NotBolError(f"Document {document_id} has no BOL data to render")
        client = self._clients.find_by_id(document.client_id)

        number = document_number or default_document_number(
            document.bol_data.bol_number or "", kind
        )
        if kind is ArtifactKind.CERTIFICATE_OF_ORIGIN:
            pdf_bytes = render_certificate_of_origin(
                document.bol_data, client, layout, self._issuer, number, debug=debug_enabled
            )
        else:
            pdf_bytes = render_packing_list(
                document.bol_data, client, layout, number, debug=debug_enabled
            )
        file_name = f"{number}.pdf"
        try:
            artifact_id = self._blob_store.put(pdf_bytes, ARTIFACT_CONTENT_TYPE, file_name)
        except BlobWriteError as exc:
            raise BlobWriteFailedError(f"Could not store regenerated artifact: {exc}") from exc

        Log.info(
            f"Regenerated {file_name} ({len(pdf_bytes)} bytes)",
            document_id=document_id,
            artifact_id=artifact_id,
            debug=debug_enabled,
        )
        return artifact_id
