import pytest

from fakes import bol_fields
from tradedocs.normalization import bol_data_to_dict, normalize
from tradedocs.normalization.models import (
    DateField,
    NumberOverflow,
    PartyOverflow,
    Quantity,
    TextOverflow,
    UnstructuredOverflow,
)


def _quantity(raw: dict) -> Quantity:
    data = normalize({"bolNumber": "B1", "containers": [{"number": "C1", "quantity": raw}]})
    return data.containers[0].quantity


class TestDateCoercion:
    @pytest.mark.parametrize(
        "raw",
        ["2025-03-15", "2025-03-15T00:00:00", "03/15/2025", "15/03/2025"],
    )
    def test_equivalent_formats_give_the_same_date(self, raw: str) -> None:
        data = normalize({"bolNumber": "B1", "dateOfIssue": raw})
        assert data.date_of_issue == DateField("2025-03-15", validated=True)

    def test_unparseable_date_is_preserved_and_flagged(self) -> None:
        data = normalize({"bolNumber": "B1", "dateOfIssue": "MARCH 15TH"})
        assert data.date_of_issue == DateField("MARCH 15TH", validated=False)
        assert data.unvalidated_fields == ["dateOfIssue"]
        assert bol_data_to_dict(data)["dateOfIssue"] == "MARCH 15TH"

    def test_issue_date_alias(self) -> None:
        data = normalize({"bolNumber": "B1", "issueDate": "2025-01-02"})
        assert data.date_of_issue == DateField("2025-01-02")


class TestQuantities:
    def test_explicit_zero_stays_zero(self) -> None:
        quantity = _quantity({"liters": 0, "gallons": 0, "kilograms": 0})
        assert quantity == Quantity(liters=0.0, gallons=0.0, kilograms=0.0)

    def test_absent_units_stay_absent(self) -> None:
        quantity = _quantity({"liters": 18500})
        assert quantity == Quantity(liters=18500.0, gallons=None, kilograms=None)

    @pytest.mark.parametrize(
        ("liters", "gallons", "kilograms"),
        [(0, None, None), (None, 0, None), (None, None, 0), (0, 12.5, None), (None, None, None)],
    )
    def test_zero_and_absence_are_never_conflated(
        self, liters: float | None, gallons: float | None, kilograms: float | None
    ) -> None:
        given = {"liters": liters, "gallons": gallons, "kilograms": kilograms}
        raw = {unit: value for unit, value in given.items() if value is not None}
        quantity = _quantity(raw)
        assert quantity.liters == (None if liters is None else float(liters))
        assert quantity.gallons == (None if gallons is None else float(gallons))
        assert quantity.kilograms == (None if kilograms is None else float(kilograms))

    def test_nested_volume_and_weight(self) -> None:
        quantity = _quantity({"volume": {"liters": "20,000", "gallons": 5283.44}, "weight": {"kg": "25,200.5 KG"}})
        assert quantity == Quantity(liters=20000.0, gallons=5283.44, kilograms=25200.5)

    def test_unparseable_quantity_is_absent_and_kept_in_overflow(self) -> None:
        data = normalize({"bolNumber": "B1", "containers": [{"quantity": {"liters": "about twenty"}}]})
        assert data.containers[0].quantity.liters is None
        assert TextOverflow(key="containers[0].quantity.liters", text="about twenty") in data.overflow


class TestAliasesAndSections:
    def test_shipment_details_are_flattened(self) -> None:
        data = normalize(bol_fields())
        assert data.bol_number == "HLCUBSC250265371"
        assert data.vessel == "MSC ANNA"
        assert data.voyage == "512W"
        assert data.port_of_loading == "HOUSTON, TX"
        assert data.containers[0].number == "HLXU1234567"
        assert data.containers[0].product.density == 1.26

    def test_misnamed_carrier_reference_is_accepted(self) -> None:
        data = normalize({"bolNumber": "B1", "carriersReference": "18763708"})
        assert data.carrier_reference == "18763708"

    def test_empty_strings_mean_not_extracted(self) -> None:
        data = normalize({"bolNumber": "B1", "carrierReference": "", "vessel": "  "})
        assert data.carrier_reference is None
        assert data.vessel is None
        assert data.overflow == []


class TestOverflow:
    def test_unknown_fields_are_preserved_by_kind(self) -> None:
        data = normalize(
            {
                "bolNumber": "B1",
                "commercial": {"currency": "USD", "freightAmount": 1500},
                "parties": {"shipper": {"name": "TWOS LLC", "address": "Houston", "taxId": None}},
                "hazardous": True,
            }
        )
        assert data.overflow == [
            TextOverflow(key="commercial.currency", text="USD"),
            NumberOverflow(key="commercial.freightAmount", number=1500.0),
            UnstructuredOverflow(key="hazardous", raw="true"),
            PartyOverflow(key="parties.shipper", name="TWOS LLC", address="Houston", tax_id=None),
        ]

    def test_overflow_is_sorted_by_key(self) -> None:
        data = normalize({"bolNumber": "B1", "zeta": "z", "alpha": "a"})
        assert [entry.key for entry in data.overflow] == ["alpha", "zeta"]


class TestDeterminismAndIdempotence:
    def test_same_input_same_output(self) -> None:
        assert normalize(bol_fields()) == normalize(bol_fields())

    def test_normalize_is_a_fixed_point(self) -> None:
        raw = bol_fields(dateOfIssue="15 MAR 2025")
        raw["commercial"] = {"currency": "USD", "itnNumber": None}
        raw["parties"] = {"consignee": {"name": "QUIMICA ANDINA", "address": None, "taxId": "J-1"}}
        raw["containers"][0]["quantity"]["volume"]["liters"] = "lots"
        first = normalize(raw)
        second = normalize(bol_data_to_dict(first))
        assert second == first
        assert bol_data_to_dict(second) == bol_data_to_dict(first)

    def test_total_over_odd_shapes(self) -> None:
        data = normalize({"containers": "not a list", "shipmentDetails": 7, "overflow": [42]})
        assert data.bol_number is None
        assert data.containers == []
        assert {entry.key for entry in data.overflow} == {"containers", "overflow[0]", "shipmentDetails"}
