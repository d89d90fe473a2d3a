"""Addressing of single BOL fields for manual repair.

Accepted forms are ``<field>``, ``bolData.<field>`` and
``containers.<index>.<field>`` (also under ``bolData.``).
"""

from dataclasses import dataclass
from typing import Any

from tradedocs.normalization.coercion import coerce_number, coerce_text
from tradedocs.processor.exceptions import InvalidInputError

_PREFIX = "bolData."

BOL_FIELDS = frozenset(
    {
        "bolNumber",
        "bookingNumber",
        "carrierReference",
        "dateOfIssue",
        "vessel",
        "voyage",
        "portOfLoading",
        "portOfDischarge",
    }
)
CONTAINER_FIELDS = frozenset(
    {
        "number",
        "sealNumber",
        "type",
        "product.name",
        "product.density",
        "quantity.liters",
        "quantity.gallons",
        "quantity.kilograms",
    }
)
NUMERIC_FIELDS = frozenset(
    {"product.density", "quantity.liters", "quantity.gallons", "quantity.kilograms"}
)


@dataclass(frozen=True)
class FieldPath:
    field: str
    container_index: int | None = None


def parse_field_path(path: str) -> FieldPath:
    """Raises InvalidInputError for anything outside the repairable fields."""
    cleaned = path.strip()
    if cleaned.startswith(_PREFIX):
        cleaned = cleaned[len(_PREFIX):]
    if cleaned in BOL_FIELDS:
        return FieldPath(field=cleaned)

    parts = cleaned.split(".", 2)
    if len(parts) == 3 and parts[0] == "containers" and parts[1].isdigit():
        if parts[2] in CONTAINER_FIELDS:
            return FieldPath(field=parts[2], container_index=int(parts[1]))
    raise InvalidInputError(f"Field path '{path}' is not repairable")


def apply_field(raw: dict[str, Any], path: FieldPath, value: Any) -> None:
    """Set one value inside serialized BOL data, in place."""
    if value is not None and (
        isinstance(value, bool) or not isinstance(value, (str, int, float))
    ):
        raise InvalidInputError("newValue must be a string, a number or null")
    if (
        path.field in NUMERIC_FIELDS
        and coerce_text(value) is not None
        and coerce_number(value) is None
    ):
        raise InvalidInputError(f"newValue {value!r} is not a number for {path.field}")

    if path.container_index is None:
        raw[path.field] = value
        return

    containers = raw.get("containers") or []
    if path.container_index >= len(containers):
        raise InvalidInputError(
            f"Container index {path.container_index} out of range ({len(containers)} containers)"
        )
    target = containers[path.container_index]
    *parents, leaf = path.field.split(".")
    for parent in parents:
        target = target.setdefault(parent, {})
    target[leaf] = value
