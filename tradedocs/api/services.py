from dataclasses import dataclass
from datetime import timedelta

from tradedocs.config.settings import Settings
from tradedocs.database.connection import Database
from tradedocs.database.repositories.clients_repository import ClientsRepository
from tradedocs.database.repositories.documents_repository import DocumentsRepository
from tradedocs.maintenance.orphan_sweeper import OrphanBlobSweeper
from tradedocs.processor.coordinator import DocumentCoordinator, build_coordinator
from tradedocs.rendering.models import CertificateIssuer
from tradedocs.rendering.publisher import DerivedDocumentPublisher
from tradedocs.rendering.regenerator import Regenerator
from tradedocs.storage.base import BaseBlobStore
from tradedocs.storage.factory import BlobStoreFactory


@dataclass(frozen=True)
class Services:
    """Everything the HTTP handlers and commands need, built once at startup."""

    settings: Settings
    clients: ClientsRepository
    documents: DocumentsRepository
    blob_store: BaseBlobStore
    coordinator: DocumentCoordinator
    regenerator: Regenerator
    publisher: DerivedDocumentPublisher

    def orphan_sweeper(self) -> OrphanBlobSweeper:
        return OrphanBlobSweeper(
            self.documents,
            self.blob_store,
            grace_period=timedelta(hours=self.settings.orphan_grace_hours),
        )


def build_services(settings: Settings, database: Database) -> Services:
    blob_store = BlobStoreFactory.create(settings, database)
    clients = ClientsRepository(database)
    documents = DocumentsRepository(database)
    issuer = CertificateIssuer(
        name=settings.certificate_exporter_name,
        address=settings.certificate_exporter_address,
        origin_country=settings.certificate_origin_country,
    )
    regenerator = Regenerator(documents, clients, blob_store, issuer)
    return Services(
        settings=settings,
        clients=clients,
        documents=documents,
        blob_store=blob_store,
        coordinator=build_coordinator(settings, database, blob_store),
        regenerator=regenerator,
        publisher=DerivedDocumentPublisher(documents, blob_store, regenerator),
    )
