from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from tradedocs.api.dependencies import get_services, require_admin
from tradedocs.api.services import Services
from tradedocs.api.streaming import attachment_response

router = APIRouter(
    prefix="/api/v1/files",
    tags=["files"],
    dependencies=[Depends(require_admin)],
)


@router.get("/{file_id}/download")
def download_file(file_id: str, services: Services = Depends(get_services)) -> StreamingResponse:
    """Stream any stored blob by id, including regenerated artifacts."""
    info = services.blob_store.stat(file_id)
    stream = services.blob_store.open_read_stream(file_id)
    return attachment_response(stream, info.content_type, info.file_name or f"{file_id}.pdf")
