from typing import Any

import pytest

from fakes import (
    FakeClientsRepository,
    FakeDocumentsRepository,
    FakeExtractionClient,
    InMemoryBlobStore,
)
from tradedocs.database.models import Client
from tradedocs.extraction.models import InstructionProfile
from tradedocs.processor.coordinator import DocumentCoordinator


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def documents_repo() -> FakeDocumentsRepository:
    return FakeDocumentsRepository()


@pytest.fixture
def clients_repo() -> FakeClientsRepository:
    return FakeClientsRepository()


@pytest.fixture
def client_a(clients_repo: FakeClientsRepository) -> Client:
    return clients_repo.add("Quimica Andina C.A.", "J-12345678-9")


@pytest.fixture
def client_b(clients_repo: FakeClientsRepository) -> Client:
    return clients_repo.add("Solventes del Lago C.A.", "J-98765432-1")


@pytest.fixture
def profile() -> InstructionProfile:
    return InstructionProfile(
        name="bol",
        system_prompt="system",
        user_prompt_template="{json_schema}\n{document_text}",
        json_schema={"type": "object"},
    )


@pytest.fixture
def make_coordinator(
    clients_repo: FakeClientsRepository,
    documents_repo: FakeDocumentsRepository,
    blob_store: InMemoryBlobStore,
    profile: InstructionProfile,
) -> Any:
    def _make(extraction_client: FakeExtractionClient) -> DocumentCoordinator:
        return DocumentCoordinator(
            clients_repository=clients_repo,  # type: ignore[arg-type]
            documents_repository=documents_repo,  # type: ignore[arg-type]
            blob_store=blob_store,
            extraction_client=extraction_client,  # type: ignore[arg-type]
            profile=profile,
            retry_backoff_seconds=0.5,
        )

    return _make
