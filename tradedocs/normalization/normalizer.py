"""Maps raw extraction output onto the canonical BOL schema.

``normalize`` is pure and total: any mapping produces a ``BolData``, fields
that cannot be coerced are kept in the overflow bucket, and feeding the
serialized output back in yields the same value.
"""

import json
from collections.abc import Mapping
from typing import Any

from tradedocs.normalization.coercion import coerce_date, coerce_number, coerce_text
from tradedocs.normalization.models import (
    BolData,
    Container,
    NumberOverflow,
    OverflowField,
    PartyOverflow,
    Product,
    Quantity,
    TextOverflow,
    UnstructuredOverflow,
)

TEXT_FIELDS: dict[str, tuple[str, ...]] = {
    "bolNumber": ("bolNumber", "blNumber", "billOfLadingNumber"),
    "bookingNumber": ("bookingNumber",),
    "carrierReference": ("carrierReference", "carriersReference"),
    "vessel": ("vessel", "vesselName"),
    "voyage": ("voyage", "voyageNumber"),
    "portOfLoading": ("portOfLoading",),
    "portOfDischarge": ("portOfDischarge",),
}
DATE_FIELDS: dict[str, tuple[str, ...]] = {
    "dateOfIssue": ("dateOfIssue", "issueDate"),
}
CONTAINER_TEXT_FIELDS: dict[str, tuple[str, ...]] = {
    "number": ("number", "containerNumber"),
    "sealNumber": ("sealNumber", "seal"),
    "type": ("type", "containerType"),
}

_SECTION_KEY = "shipmentDetails"
_OVERFLOW_KEY = "overflow"
_DERIVED_KEYS = frozenset({"unvalidatedFields"})
_PARTY_KEYS = frozenset({"name", "address", "taxId"})


class _OverflowBucket:
    """Collects overflow entries keyed by their dotted path."""

    def __init__(self) -> None:
        self._entries: dict[str, OverflowField] = {}

    def add(self, entry: OverflowField) -> None:
        self._entries[entry.key] = entry

    def collect(self, key: str, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, bool):
            self.add(UnstructuredOverflow(key=key, raw=_dump(value)))
        elif isinstance(value, str):
            text = coerce_text(value)
            if text is not None:
                self.add(TextOverflow(key=key, text=text))
        elif isinstance(value, (int, float)):
            self.add(NumberOverflow(key=key, number=float(value)))
        elif isinstance(value, Mapping):
            for sub_key in value:
                self.collect(f"{key}.{sub_key}", value[sub_key])
        else:
            self.add(UnstructuredOverflow(key=key, raw=_dump(value)))

    def collect_parties(self, value: Any) -> None:
        if not isinstance(value, Mapping):
            self.collect("parties", value)
            return
        for role, block in value.items():
            key = f"parties.{role}"
            if _is_party_block(block):
                party = PartyOverflow(
                    key=key,
                    name=coerce_text(block.get("name")),
                    address=coerce_text(block.get("address")),
                    tax_id=coerce_text(block.get("taxId")),
                )
                if party.name or party.address or party.tax_id:
                    self.add(party)
            else:
                self.collect(key, block)

    def entries(self) -> list[OverflowField]:
        return [self._entries[key] for key in sorted(self._entries)]


def normalize(raw_fields: Mapping[str, Any]) -> BolData:
    """Build canonical BOL data from raw extracted key/value pairs."""
    fields = _flatten_sections(raw_fields)
    overflow = _OverflowBucket()

    for index, entry in enumerate(_as_list(fields.pop(_OVERFLOW_KEY, None))):
        overflow.add(_parse_overflow_entry(entry, index))
    for key in _DERIVED_KEYS:
        fields.pop(key, None)

    texts = {
        name: _take_text(fields, aliases, name, overflow)
        for name, aliases in TEXT_FIELDS.items()
    }
    raw_date = _take_first(fields, DATE_FIELDS["dateOfIssue"])
    date_of_issue = coerce_date(raw_date)
    if date_of_issue is None and raw_date is not None:
        overflow.collect("dateOfIssue", raw_date)
    containers = _build_containers(fields.pop("containers", None), overflow)

    overflow.collect_parties(fields.pop("parties", None))
    for key in list(fields):
        overflow.collect(key, fields[key])

    return BolData(
        bol_number=texts["bolNumber"],
        booking_number=texts["bookingNumber"],
        carrier_reference=texts["carrierReference"],
        date_of_issue=date_of_issue,
        vessel=texts["vessel"],
        voyage=texts["voyage"],
        port_of_loading=texts["portOfLoading"],
        port_of_discharge=texts["portOfDischarge"],
        containers=containers,
        overflow=overflow.entries(),
    )


def _flatten_sections(raw_fields: Mapping[str, Any]) -> dict[str, Any]:
    fields = dict(raw_fields)
    section = fields.pop(_SECTION_KEY, None)
    if isinstance(section, Mapping):
        for key, value in section.items():
            fields.setdefault(key, value)
    elif section is not None:
        fields[_SECTION_KEY] = section
    return fields


def _take_first(fields: dict[str, Any], aliases: tuple[str, ...]) -> Any:
    """Pop every alias; return the first value that is not None or blank."""
    chosen: Any = None
    for alias in aliases:
        value = fields.pop(alias, None)
        if chosen is None and value is not None and value != "":
            chosen = value
    return chosen


def _take_text(
    fields: dict[str, Any],
    aliases: tuple[str, ...],
    key: str,
    overflow: _OverflowBucket,
) -> str | None:
    raw = _take_first(fields, aliases)
    text = coerce_text(raw)
    if text is None and raw is not None:
        overflow.collect(key, raw)
    return text


def _build_containers(raw: Any, overflow: _OverflowBucket) -> list[Container]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        overflow.add(UnstructuredOverflow(key="containers", raw=_dump(raw)))
        return []
    containers: list[Container] = []
    for index, item in enumerate(raw):
        prefix = f"containers[{index}]"
        if isinstance(item, Mapping):
            containers.append(_build_container(dict(item), prefix, overflow))
        else:
            overflow.add(UnstructuredOverflow(key=prefix, raw=_dump(item)))
    return containers


def _build_container(item: dict[str, Any], prefix: str, overflow: _OverflowBucket) -> Container:
    texts = {
        name: _take_text(item, aliases, f"{prefix}.{name}", overflow)
        for name, aliases in CONTAINER_TEXT_FIELDS.items()
    }
    product = _build_product(item.pop("product", None), prefix, overflow)
    quantity = _build_quantity(item.pop("quantity", None), prefix, overflow)
    for key in list(item):
        overflow.collect(f"{prefix}.{key}", item[key])
    return Container(
        number=texts["number"],
        seal_number=texts["sealNumber"],
        type=texts["type"],
        product=product,
        quantity=quantity,
    )


def _build_product(raw: Any, prefix: str, overflow: _OverflowBucket) -> Product:
    key = f"{prefix}.product"
    if raw is None:
        return Product()
    if isinstance(raw, str):
        return Product(name=coerce_text(raw))
    if not isinstance(raw, Mapping):
        overflow.collect(key, raw)
        return Product()
    fields = dict(raw)
    name = _take_text(fields, ("name", "productName"), f"{key}.name", overflow)
    density = _pick_number([fields.pop("density", None)], f"{key}.density", overflow)
    for sub_key in list(fields):
        overflow.collect(f"{key}.{sub_key}", fields[sub_key])
    return Product(name=name, density=density)


def _build_quantity(raw: Any, prefix: str, overflow: _OverflowBucket) -> Quantity:
    key = f"{prefix}.quantity"
    if raw is None:
        return Quantity()
    if not isinstance(raw, Mapping):
        overflow.collect(key, raw)
        return Quantity()
    fields = dict(raw)
    volume = _pop_section(fields, "volume", key, overflow)
    weight = _pop_section(fields, "weight", key, overflow)

    liters = _pick_number(
        [fields.pop("liters", None), fields.pop("litros", None), volume.pop("liters", None)],
        f"{key}.liters",
        overflow,
    )
    gallons = _pick_number(
        [fields.pop("gallons", None), volume.pop("gallons", None)],
        f"{key}.gallons",
        overflow,
    )
    kilograms = _pick_number(
        [
            fields.pop("kilograms", None),
            fields.pop("kg", None),
            weight.pop("kg", None),
            weight.pop("kilograms", None),
        ],
        f"{key}.kilograms",
        overflow,
    )
    for sub_key in list(volume):
        overflow.collect(f"{key}.volume.{sub_key}", volume[sub_key])
    for sub_key in list(weight):
        overflow.collect(f"{key}.weight.{sub_key}", weight[sub_key])
    for sub_key in list(fields):
        overflow.collect(f"{key}.{sub_key}", fields[sub_key])
    return Quantity(liters=liters, gallons=gallons, kilograms=kilograms)


def _pop_section(
    fields: dict[str, Any], name: str, key: str, overflow: _OverflowBucket
) -> dict[str, Any]:
    section = fields.pop(name, None)
    if isinstance(section, Mapping):
        return dict(section)
    overflow.collect(f"{key}.{name}", section)
    return {}


def _pick_number(candidates: list[Any], key: str, overflow: _OverflowBucket) -> float | None:
    """Return the first candidate that parses; keep the raw value if none does."""
    rejected: Any = None
    for candidate in candidates:
        if candidate is None or candidate == "":
            continue
        number = coerce_number(candidate)
        if number is not None:
            return number
        if rejected is None:
            rejected = candidate
    if rejected is not None:
        overflow.collect(key, rejected)
    return None


def _parse_overflow_entry(raw: Any, index: int) -> OverflowField:
    fallback = UnstructuredOverflow(key=f"overflow[{index}]", raw=_dump(raw))
    if not isinstance(raw, Mapping):
        return fallback
    key = raw.get("key")
    kind = raw.get("kind")
    if not isinstance(key, str) or not key:
        return fallback
    if kind == "text" and isinstance(raw.get("text"), str):
        return TextOverflow(key=key, text=raw["text"])
    if kind == "number":
        number = raw.get("number")
        if isinstance(number, (int, float)) and not isinstance(number, bool):
            return NumberOverflow(key=key, number=float(number))
    if kind == "party":
        return PartyOverflow(
            key=key,
            name=coerce_text(raw.get("name")),
            address=coerce_text(raw.get("address")),
            tax_id=coerce_text(raw.get("taxId")),
        )
    if kind == "unstructured" and isinstance(raw.get("raw"), str):
        return UnstructuredOverflow(key=key, raw=raw["raw"])
    return fallback


def _is_party_block(block: Any) -> bool:
    if not isinstance(block, Mapping) or not block:
        return False
    if not set(block) <= _PARTY_KEYS:
        return False
    return all(value is None or isinstance(value, str) for value in block.values())


def _as_list(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    return [raw]


def _dump(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)
