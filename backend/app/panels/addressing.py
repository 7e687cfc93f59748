"""Breaker addressing: panel + position + slot.

A stored breaker is identified by the triple (panel_id, position, slot).
Tandem halves share a position and use slots A/B. A double-pole breaker is
stored once at its own position; the position below it (position + 2) is a
derived "shadow" that no other breaker may occupy.

Pure Python. No database access.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol

from app.errors import ValidationFailed


MIN_PANEL_SIZE = 12
MAX_PANEL_SIZE = 42
DOUBLE_POLE_SPAN = 2


class Slot(str, Enum):
    SINGLE = "single"
    A = "A"
    B = "B"


class BreakerType(str, Enum):
    SINGLE = "single"
    DOUBLE_POLE = "double_pole"
    TANDEM = "tandem"


class PlacedBreaker(Protocol):
    id: int
    position: int
    slot: str
    breaker_type: str


@dataclass(frozen=True)
class BreakerAddress:
    panel_id: int
    position: int
    slot: Slot = Slot.SINGLE

    @property
    def label(self) -> str:
        """Position as shown on a panel door: ``4`` or ``4A``."""
        return position_label(self.position, self.slot)


def position_label(position: int, slot: Slot | str) -> str:
    slot = Slot(slot)
    return str(position) if slot is Slot.SINGLE else f"{position}{slot.value}"


def shadow_position(breaker: PlacedBreaker) -> int | None:
    """Position covered by the second pole of a double-pole breaker."""
    if BreakerType(breaker.breaker_type) is BreakerType.DOUBLE_POLE:
        return breaker.position + DOUBLE_POLE_SPAN
    return None


def occupied_positions(breaker: PlacedBreaker) -> tuple[int, ...]:
    shadow = shadow_position(breaker)
    if shadow is None:
        return (breaker.position,)
    return (breaker.position, shadow)


def normalize_slot(breaker_type: BreakerType | str, slot: Slot | str | None) -> Slot:
    """Tandem breakers always live in A or B; default an unset slot to A."""
    breaker_type = BreakerType(breaker_type)
    slot = Slot(slot or Slot.SINGLE)
    if breaker_type is BreakerType.TANDEM and slot is Slot.SINGLE:
        return Slot.A
    return slot


def breaker_type_for_slot(source_type: BreakerType | str, slot: Slot | str) -> BreakerType:
    """Type a relocated breaker takes when it lands in ``slot``."""
    source_type = BreakerType(source_type)
    slot = Slot(slot)
    if slot is not Slot.SINGLE:
        if source_type is BreakerType.DOUBLE_POLE:
            return source_type
        return BreakerType.TANDEM
    if source_type is BreakerType.TANDEM:
        return BreakerType.SINGLE
    return source_type


def validate_panel_size(size: int) -> None:
    if not MIN_PANEL_SIZE <= size <= MAX_PANEL_SIZE:
        raise ValidationFailed(
            f"Panel size must be between {MIN_PANEL_SIZE} and {MAX_PANEL_SIZE}"
        )


def validate_address(
    address: BreakerAddress,
    panel_size: int,
    breaker_type: BreakerType | str = BreakerType.SINGLE,
) -> None:
    """Raise ValidationFailed if a breaker of ``breaker_type`` cannot sit at
    ``address`` in a panel with ``panel_size`` positions."""
    breaker_type = BreakerType(breaker_type)
    slot = Slot(address.slot)

    if address.position < 1:
        raise ValidationFailed("Position must be a positive integer")
    if address.position > panel_size:
        raise ValidationFailed(
            f"Position {address.position} exceeds panel size {panel_size}"
        )

    if breaker_type is BreakerType.DOUBLE_POLE:
        if slot is not Slot.SINGLE:
            raise ValidationFailed("Double pole breakers cannot use tandem slots")
        if address.position + DOUBLE_POLE_SPAN > panel_size:
            raise ValidationFailed(
                f"Double pole breaker at position {address.position} "
                f"does not fit in a {panel_size} position panel"
            )
    elif breaker_type is BreakerType.TANDEM and slot is Slot.SINGLE:
        raise ValidationFailed("Tandem breakers must use slot A or B")
    elif breaker_type is BreakerType.SINGLE and slot is not Slot.SINGLE:
        raise ValidationFailed("Only tandem breakers use slot A or B")


def layout_conflicts(
    address: BreakerAddress,
    breaker_type: BreakerType | str,
    occupants: Iterable[PlacedBreaker],
    ignore_ids: Iterable[int] = (),
) -> list[PlacedBreaker]:
    """Return breakers in the same panel that physically block a new breaker.

    ``occupants`` are the breakers currently stored in ``address.panel_id``.
    An exact (position, slot) match is not reported here; that case is a
    swap target, not a layout conflict.
    """
    breaker_type = BreakerType(breaker_type)
    slot = Slot(address.slot)
    ignored = set(ignore_ids)
    new_positions = {address.position}
    if breaker_type is BreakerType.DOUBLE_POLE:
        new_positions.add(address.position + DOUBLE_POLE_SPAN)

    conflicts: list[PlacedBreaker] = []
    for other in occupants:
        if other.id in ignored:
            continue
        other_slot = Slot(other.slot)
        if other.position == address.position and other_slot is slot:
            continue

        if other.position == address.position:
            # single vs tandem half at the same position
            if (slot is Slot.SINGLE) != (other_slot is Slot.SINGLE):
                conflicts.append(other)
                continue

        other_positions = set(occupied_positions(other))
        if other.position != address.position and new_positions & other_positions:
            conflicts.append(other)

    return conflicts


def describe_conflicts(address: BreakerAddress, conflicts: list[PlacedBreaker]) -> str:
    labels = ", ".join(position_label(c.position, c.slot) for c in conflicts)
    return f"Position {address.label} is blocked by breaker(s) at {labels}"
