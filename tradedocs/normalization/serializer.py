"""Canonical JSON shape of BOL data, as persisted and returned by the API."""

from typing import Any

from tradedocs.normalization.models import (
    BolData,
    Container,
    NumberOverflow,
    OverflowField,
    PartyOverflow,
    TextOverflow,
)


def bol_data_to_dict(data: BolData) -> dict[str, Any]:
    return {
        "bolNumber": data.bol_number,
        "bookingNumber": data.booking_number,
        "carrierReference": data.carrier_reference,
        "dateOfIssue": data.date_of_issue.value if data.date_of_issue else None,
        "vessel": data.vessel,
        "voyage": data.voyage,
        "portOfLoading": data.port_of_loading,
        "portOfDischarge": data.port_of_discharge,
        "containers": [container_to_dict(c) for c in data.containers],
        "overflow": [overflow_to_dict(entry) for entry in data.overflow],
        "unvalidatedFields": data.unvalidated_fields,
    }


def container_to_dict(container: Container) -> dict[str, Any]:
    return {
        "number": container.number,
        "sealNumber": container.seal_number,
        "type": container.type,
        "product": {
            "name": container.product.name,
            "density": container.product.density,
        },
        "quantity": {
            "liters": container.quantity.liters,
            "gallons": container.quantity.gallons,
            "kilograms": container.quantity.kilograms,
        },
    }


def overflow_to_dict(entry: OverflowField) -> dict[str, Any]:
    if isinstance(entry, TextOverflow):
        return {"kind": entry.kind, "key": entry.key, "text": entry.text}
    if isinstance(entry, NumberOverflow):
        return {"kind": entry.kind, "key": entry.key, "number": entry.number}
    if isinstance(entry, PartyOverflow):
        return {
            "kind": entry.kind,
            "key": entry.key,
            "name": entry.name,
            "address": entry.address,
            "taxId": entry.tax_id,
        }
    return {"kind": entry.kind, "key": entry.key, "raw": entry.raw}
