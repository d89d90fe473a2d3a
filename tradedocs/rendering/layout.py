"""Default field placement of each rendered artifact and per-request overrides.

Coordinates are PDF points from the bottom-left corner of a US Letter page.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from tradedocs.processor.exceptions import InvalidInputError

PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0
MIN_FONT_SIZE = 4.0
MAX_FONT_SIZE = 36.0


@dataclass(frozen=True)
class FieldPlacement:
    x: float
    y: float
    font_size: float = 9.0


PACKING_LIST_LAYOUT: dict[str, FieldPlacement] = {
    "title": FieldPlacement(236, 730, 18),
    "documentNumber": FieldPlacement(412, 690),
    "documentDate": FieldPlacement(412, 676),
    "consigneeName": FieldPlacement(50, 690),
    "consigneeRif": FieldPlacement(50, 676),
    "consigneeAddress": FieldPlacement(50, 662),
    "bolNumber": FieldPlacement(50, 620),
    "bookingNumber": FieldPlacement(50, 606),
    "carrierReference": FieldPlacement(50, 592),
    "vessel": FieldPlacement(320, 620),
    "voyage": FieldPlacement(320, 606),
    "portOfLoading": FieldPlacement(320, 592),
    "portOfDischarge": FieldPlacement(320, 578),
    "containersTable": FieldPlacement(50, 540),
}

CERTIFICATE_LAYOUT: dict[str, FieldPlacement] = {
    "title": FieldPlacement(166, 720, 20),
    "documentNumber": FieldPlacement(50, 680, 11),
    "documentDate": FieldPlacement(412, 680, 11),
    "buyer": FieldPlacement(50, 640, 11),
    "booking": FieldPlacement(50, 560, 11),
    "containers": FieldPlacement(320, 560, 11),
    "products": FieldPlacement(50, 470, 11),
    "ports": FieldPlacement(50, 380, 11),
    "declaration": FieldPlacement(50, 320, 11),
    "exporter": FieldPlacement(50, 200, 10),
}

_OVERRIDE_KEYS = {"x": "x", "y": "y", "fontSize": "font_size"}


def resolve_layout(
    overrides: Mapping[str, Any] | None,
    defaults: Mapping[str, FieldPlacement] = PACKING_LIST_LAYOUT,
) -> dict[str, FieldPlacement]:
    """Apply coordinate overrides field by field over a default layout.

    Raises:
        InvalidInputError: for unknown fields or keys, non-numeric values, or
            positions outside the page.
    """
    layout = dict(defaults)
    if not overrides:
        return layout

    for name, override in overrides.items():
        if name not in layout:
            raise InvalidInputError(
                f"Unknown layout field '{name}'. Known fields: {sorted(layout)}"
            )
        if not isinstance(override, Mapping):
            raise InvalidInputError(f"Override for '{name}' must be an object")
        changes: dict[str, float] = {}
        for key, value in override.items():
            attribute = _OVERRIDE_KEYS.get(key)
            if attribute is None:
                raise InvalidInputError(
                    f"Unknown coordinate '{key}' for '{name}'. Use x, y or fontSize"
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputError(f"Coordinate '{name}.{key}' must be a number")
            changes[attribute] = float(value)
        placement = replace(layout[name], **changes)
        _check_bounds(name, placement)
        layout[name] = placement
    return layout


def _check_bounds(name: str, placement: FieldPlacement) -> None:
    if not 0 <= placement.x <= PAGE_WIDTH or not 0 <= placement.y <= PAGE_HEIGHT:
        raise InvalidInputError(
            f"'{name}' at ({placement.x}, {placement.y}) is outside the "
            f"{PAGE_WIDTH:g}x{PAGE_HEIGHT:g} page"
        )
    if not MIN_FONT_SIZE <= placement.font_size <= MAX_FONT_SIZE:
        raise InvalidInputError(
            f"'{name}' font size {placement.font_size} is outside "
            f"{MIN_FONT_SIZE:g}..{MAX_FONT_SIZE:g}"
        )
