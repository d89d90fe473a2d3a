from dataclasses import dataclass, field


@dataclass(frozen=True)
class DateField:
    """A date as extracted.

    ``value`` is ISO ``YYYY-MM-DD`` when ``validated`` is true, otherwise the
    original string, kept verbatim for manual correction.
    """

    value: str
    validated: bool = True


@dataclass(frozen=True)
class Product:
    """Product loaded in a container."""

    name: str | None = None
    density: float | None = None


@dataclass(frozen=True)
class Quantity:
    """Container quantity. A missing unit is None, never 0."""

    liters: float | None = None
    gallons: float | None = None
    kilograms: float | None = None


@dataclass(frozen=True)
class Container:
    """One container line item of a bill of lading."""

    number: str | None = None
    seal_number: str | None = None
    type: str | None = None
    product: Product = field(default_factory=Product)
    quantity: Quantity = field(default_factory=Quantity)


@dataclass(frozen=True)
class TextOverflow:
    """Extra text field returned by the extraction service."""

    key: str
    text: str
    kind: str = "text"


@dataclass(frozen=True)
class NumberOverflow:
    """Extra numeric field returned by the extraction service."""

    key: str
    number: float
    kind: str = "number"


@dataclass(frozen=True)
class PartyOverflow:
    """Shipper, consignee or notify party block."""

    key: str
    name: str | None = None
    address: str | None = None
    tax_id: str | None = None
    kind: str = "party"


@dataclass(frozen=True)
class UnstructuredOverflow:
    """Anything else, kept as canonical JSON text."""

    key: str
    raw: str
    kind: str = "unstructured"


OverflowField = TextOverflow | NumberOverflow | PartyOverflow | UnstructuredOverflow


@dataclass(frozen=True)
class BolData:
    """Canonical structured data of a bill of lading."""

    bol_number: str | None = None
    booking_number: str | None = None
    carrier_reference: str | None = None
    date_of_issue: DateField | None = None
    vessel: str | None = None
    voyage: str | None = None
    port_of_loading: str | None = None
    port_of_discharge: str | None = None
    containers: list[Container] = field(default_factory=list)
    overflow: list[OverflowField] = field(default_factory=list)

    @property
    def unvalidated_fields(self) -> list[str]:
        if self.date_of_issue is not None and not self.date_of_issue.validated:
            return ["dateOfIssue"]
        return []
