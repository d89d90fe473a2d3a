from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tradedocs.api.dependencies import get_services, require_admin
from tradedocs.api.serializers import client_to_dict, document_to_dict
from tradedocs.api.services import Services

router = APIRouter(
    prefix="/api/v1/clients",
    tags=["clients"],
    dependencies=[Depends(require_admin)],
)


class ClientCreateRequest(BaseModel):
    name: str
    rif: str
    address: str = ""
    contact: dict[str, str] = Field(default_factory=dict)
    requiredDocuments: list[str] = Field(default_factory=list)


@router.post("", status_code=201)
def create_client(
    body: ClientCreateRequest,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    client = services.clients.create(
        name=body.name,
        rif=body.rif,
        address=body.address,
        contact=body.contact,
        required_documents=body.requiredDocuments,
    )
    return client_to_dict(client)


@router.get("/{client_id}")
def get_client(client_id: str, services: Services = Depends(get_services)) -> dict[str, Any]:
    return client_to_dict(services.clients.find_by_id(client_id))


@router.get("/{client_id}/documents")
def list_client_documents(
    client_id: str,
    services: Services = Depends(get_services),
) -> dict[str, list[dict[str, Any]]]:
    services.clients.find_by_id(client_id)
    documents = services.documents.list_by_client(client_id)
    return {"documents": [document_to_dict(document) for document in documents]}
