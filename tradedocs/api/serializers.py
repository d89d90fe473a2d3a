from typing import Any

from tradedocs.database.models import Client, Document
from tradedocs.normalization import bol_data_to_dict


def document_to_dict(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "type": document.type.value,
        "clientId": document.client_id,
        "fileId": document.file_id,
        "fileName": document.file_name,
        "contentType": document.content_type,
        "bolData": bol_data_to_dict(document.bol_data) if document.bol_data else None,
        "relatedBolId": document.related_bol_id,
        "version": document.version,
        "createdAt": document.created_at.isoformat() if document.created_at else None,
        "updatedAt": document.updated_at.isoformat() if document.updated_at else None,
    }


def client_to_dict(client: Client) -> dict[str, Any]:
    return {
        "id": client.id,
        "name": client.name,
        "rif": client.rif,
        "address": client.address,
        "contact": client.contact,
        "requiredDocuments": client.required_documents,
        "lastDocumentDate": (
            client.last_document_date.isoformat() if client.last_document_date else None
        ),
    }
