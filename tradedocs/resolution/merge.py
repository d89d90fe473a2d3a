"""Field-wise merge of a new extraction into known BOL data.

A value from the new extraction replaces the known one only when it is
present; None never erases anything.
"""

from dataclasses import fields, replace
from typing import TypeVar

from tradedocs.normalization.models import BolData, Container, OverflowField

_T = TypeVar("_T")


def merge_bol_data(existing: BolData, incoming: BolData) -> BolData:
    return BolData(
        bol_number=_pick(existing.bol_number, incoming.bol_number),
        booking_number=_pick(existing.booking_number, incoming.booking_number),
        carrier_reference=_pick(existing.carrier_reference, incoming.carrier_reference),
        date_of_issue=_pick(existing.date_of_issue, incoming.date_of_issue),
        vessel=_pick(existing.vessel, incoming.vessel),
        voyage=_pick(existing.voyage, incoming.voyage),
        port_of_loading=_pick(existing.port_of_loading, incoming.port_of_loading),
        port_of_discharge=_pick(existing.port_of_discharge, incoming.port_of_discharge),
        containers=_merge_containers(existing.containers, incoming.containers),
        overflow=_merge_overflow(existing.overflow, incoming.overflow),
    )


def _pick(known: _T | None, new: _T | None) -> _T | None:
    return new if new is not None else known


def _merge_flat(known: _T, new: _T) -> _T:
    """Merge two instances of the same flat dataclass attribute by attribute."""
    changes = {
        f.name: getattr(new, f.name)
        for f in fields(new)  # type: ignore[arg-type]
        if getattr(new, f.name) is not None
    }
    return replace(known, **changes)  # type: ignore[type-var]


def _merge_container(known: Container, new: Container) -> Container:
    return Container(
        number=_pick(known.number, new.number),
        seal_number=_pick(known.seal_number, new.seal_number),
        type=_pick(known.type, new.type),
        product=_merge_flat(known.product, new.product),
        quantity=_merge_flat(known.quantity, new.quantity),
    )


def _merge_containers(known: list[Container], new: list[Container]) -> list[Container]:
    """Containers with a number are matched by number; unnumbered ones by position."""
    merged = list(known)
    by_number = {c.number: i for i, c in enumerate(merged) if c.number is not None}
    for position, container in enumerate(new):
        if container.number is not None:
            index = by_number.get(container.number)
            if index is None:
                by_number[container.number] = len(merged)
                merged.append(container)
            else:
                merged[index] = _merge_container(merged[index], container)
        elif position < len(merged) and merged[position].number is None:
            merged[position] = _merge_container(merged[position], container)
        else:
            merged.append(container)
    return merged


def _merge_overflow(known: list[OverflowField], new: list[OverflowField]) -> list[OverflowField]:
    entries = {entry.key: entry for entry in known}
    entries.update({entry.key: entry for entry in new})
    return [entries[key] for key in sorted(entries)]
