from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from tradedocs.api.dependencies import get_services, require_admin
from tradedocs.api.serializers import document_to_dict
from tradedocs.api.services import Services
from tradedocs.api.streaming import attachment_response
from tradedocs.database.models import DocumentType
from tradedocs.extraction.extractor import SUPPORTED_CONTENT_TYPES
from tradedocs.processor.exceptions import InvalidInputError
from tradedocs.processor.models import UploadRequest
from tradedocs.rendering.models import ArtifactKind, GenerationMode

router = APIRouter(
    prefix="/api/v1/documents",
    tags=["documents"],
    dependencies=[Depends(require_admin)],
)


class RepairRequest(BaseModel):
    fieldPath: str
    newValue: Any


class RegenerateRequest(BaseModel):
    kind: str = ArtifactKind.PACKING_LIST.value
    coordinates: dict[str, Any] | None = None
    debug: Any = None


class GenerateRequest(BaseModel):
    mode: str | None = None
    coordinates: dict[str, Any] | None = None
    debug: Any = None


@router.post("/upload")
def upload_document(
    clientId: str = Form(...),
    document_type: str = Form(DocumentType.BOL.value, alias="type"),
    file: UploadFile = File(...),
    services: Services = Depends(get_services),
) -> dict[str, str]:
    declared_type = _parse_type(document_type)
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in SUPPORTED_CONTENT_TYPES:
        raise InvalidInputError(
            f"Unsupported content type '{file.content_type}'. "
            f"Allowed: {sorted(SUPPORTED_CONTENT_TYPES)}"
        )
    limit = services.settings.max_upload_bytes
    data = file.file.read(limit + 1)
    if not data:
        raise InvalidInputError("Uploaded file is empty")
    if len(data) > limit:
        raise InvalidInputError(f"Uploaded file exceeds {limit} bytes")

    outcome = services.coordinator.upload(
        UploadRequest(
            client_id=clientId.strip(),
            file_name=file.filename or "upload",
            content_type=content_type,
            data=data,
            declared_type=declared_type,
        )
    )
    return {"documentId": outcome.document_id, "status": outcome.status}


@router.get("/check-bol/{bol_number}")
def check_bol(bol_number: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    """Advisory only; the unique index decides at write time."""
    document = services.documents.find_bol_by_number(bol_number.strip())
    if document is None:
        return {"exists": False}
    return {"exists": True, "documentId": document.id, "clientId": document.client_id}


@router.get("/{document_id}")
def get_document(document_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    return document_to_dict(services.documents.find_by_id(document_id))


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    services: Services = Depends(get_services),
) -> StreamingResponse:
    document = services.documents.find_by_id(document_id)
    stream = services.blob_store.open_read_stream(document.file_id)
    return attachment_response(stream, document.content_type, document.file_name)


@router.post("/{document_id}/repair")
def repair_document(
    document_id: str,
    body: RepairRequest,
    services: Services = Depends(get_services),
) -> dict[str, bool]:
    services.coordinator.repair(document_id, body.fieldPath, body.newValue)
    return {"success": True}


@router.post("/{document_id}/regenerate")
def regenerate_document(
    document_id: str,
    body: RegenerateRequest | None = None,
    services: Services = Depends(get_services),
) -> dict[str, str]:
    body = body or RegenerateRequest()
    artifact_id = services.regenerator.regenerate(
        document_id,
        layout_overrides=body.coordinates,
        debug=body.debug,
        kind=_parse_kind(body.kind),
    )
    return {"artifactId": artifact_id}


@router.post("/{document_id}/generate/{kind}")
def generate_document(
    document_id: str,
    kind: str,
    body: GenerateRequest | None = None,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    """Render a packing list or certificate of origin and record it against the BOL."""
    body = body or GenerateRequest()
    document = services.publisher.generate(
        document_id,
        _parse_kind(kind),
        mode=_parse_mode(body.mode),
        layout_overrides=body.coordinates,
        debug=body.debug,
    )
    return {"document": document_to_dict(document)}


def _parse_type(value: str) -> DocumentType:
    try:
        return DocumentType(value.strip().upper())
    except ValueError:
        raise InvalidInputError(
            f"Unknown document type '{value}'. Allowed: {[t.value for t in DocumentType]}"
        ) from None


def _parse_kind(value: str) -> ArtifactKind:
    try:
        return ArtifactKind(value.strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Unknown artifact kind '{value}'. Allowed: {[k.value for k in ArtifactKind]}"
        ) from None


def _parse_mode(value: str | None) -> GenerationMode | None:
    if value is None:
        return None
    try:
        return GenerationMode(value.strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Unknown mode '{value}'. Allowed: {[m.value for m in GenerationMode]}"
        ) from None
