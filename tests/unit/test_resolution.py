from fakes import FakeDocumentsRepository
from tradedocs.database.identifiers import new_identifier
from tradedocs.database.models import Client, Document, DocumentType
from tradedocs.normalization.models import (
    BolData,
    Container,
    DateField,
    Product,
    Quantity,
    TextOverflow,
)
from tradedocs.resolution.merge import merge_bol_data
from tradedocs.resolution.models import Conflict, Create, PatchExisting
from tradedocs.resolution.resolver import DuplicateResolver


def _bol_document(client_id: str, bol_number: str, doc_type: DocumentType = DocumentType.BOL) -> Document:
    return Document(
        id=new_identifier(),
        type=doc_type,
        client_id=client_id,
        file_id=new_identifier(),
        file_name="bol.pdf",
        content_type="application/pdf",
        bol_data=BolData(bol_number=bol_number),
    )


class TestDuplicateResolver:
    def test_no_match_creates(self, documents_repo: FakeDocumentsRepository, client_a: Client) -> None:
        resolver = DuplicateResolver(documents_repo)  # type: ignore[arg-type]
        assert resolver.resolve("HLCU1", client_a.id) == Create()

    def test_same_client_patches(self, documents_repo: FakeDocumentsRepository, client_a: Client) -> None:
        existing = documents_repo.add(_bol_document(client_a.id, "HLCU1"))
        resolver = DuplicateResolver(documents_repo)  # type: ignore[arg-type]
        resolution = resolver.resolve("HLCU1", client_a.id)
        assert isinstance(resolution, PatchExisting)
        assert resolution.document_id == existing.id

    def test_other_client_conflicts(
        self, documents_repo: FakeDocumentsRepository, client_a: Client, client_b: Client
    ) -> None:
        existing = documents_repo.add(_bol_document(client_a.id, "HLCU1"))
        resolver = DuplicateResolver(documents_repo)  # type: ignore[arg-type]
        resolution = resolver.resolve("HLCU1", client_b.id)
        assert resolution == Conflict(existing_document_id=existing.id, existing_client_id=client_a.id)

    def test_lookup_is_exact(self, documents_repo: FakeDocumentsRepository, client_a: Client) -> None:
        documents_repo.add(_bol_document(client_a.id, "HLCU1"))
        resolver = DuplicateResolver(documents_repo)  # type: ignore[arg-type]
        assert resolver.resolve("hlcu1", client_a.id) == Create()


class TestMergeBolData:
    def test_non_null_fields_overwrite(self) -> None:
        existing = BolData(bol_number="B1", vessel="OLD VESSEL", voyage="1")
        incoming = BolData(bol_number="B1", vessel="NEW VESSEL")
        merged = merge_bol_data(existing, incoming)
        assert merged.vessel == "NEW VESSEL"
        assert merged.voyage == "1"

    def test_nulls_never_erase(self) -> None:
        existing = BolData(
            bol_number="B1",
            carrier_reference="18763708",
            date_of_issue=DateField("2025-03-15"),
        )
        merged = merge_bol_data(existing, BolData(bol_number="B1"))
        assert merged.carrier_reference == "18763708"
        assert merged.date_of_issue == DateField("2025-03-15")

    def test_containers_merge_by_number(self) -> None:
        existing = BolData(
            bol_number="B1",
            containers=[
                Container(
                    number="C1",
                    seal_number="S1",
                    product=Product(name="GLYCERINE", density=1.26),
                    quantity=Quantity(liters=20000.0, kilograms=25200.0),
                )
            ],
        )
        incoming = BolData(
            bol_number="B1",
            containers=[
                Container(number="C1", quantity=Quantity(liters=0.0, gallons=5283.44)),
                Container(number="C2", seal_number="S2"),
            ],
        )
        merged = merge_bol_data(existing, incoming)
        assert [c.number for c in merged.containers] == ["C1", "C2"]
        first = merged.containers[0]
        assert first.seal_number == "S1"
        assert first.product == Product(name="GLYCERINE", density=1.26)
        assert first.quantity == Quantity(liters=0.0, gallons=5283.44, kilograms=25200.0)

    def test_overflow_merges_by_key_incoming_wins(self) -> None:
        existing = BolData(
            bol_number="B1",
            overflow=[TextOverflow("commercial.currency", "VES"), TextOverflow("a", "kept")],
        )
        incoming = BolData(bol_number="B1", overflow=[TextOverflow("commercial.currency", "USD")])
        merged = merge_bol_data(existing, incoming)
        assert merged.overflow == [TextOverflow("a", "kept"), TextOverflow("commercial.currency", "USD")]
