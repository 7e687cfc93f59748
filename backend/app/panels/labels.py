"""Auto-generated breaker labels.

A breaker without a manual label is described by the circuits it feeds,
e.g. "Dryer, Kitchen and Den outlets, Hall lights".
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence

GENERAL = "General"
MERGED_TYPES = ("outlet", "lighting")
MERGED_TYPE_NAMES = {"outlet": "outlets", "lighting": "lights"}
NOTE_FIRST_TYPES = {"appliance": "Appliance", "heating": "Heating"}


class LabelCircuit(Protocol):
    type: str | None
    notes: str | None
    room_name: str | None


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def _group_by_type(circuits: Iterable[LabelCircuit]) -> dict[str, list[LabelCircuit]]:
    groups: dict[str, list[LabelCircuit]] = {}
    for circuit in circuits:
        # str-valued enums hash by member name, so key on the plain value
        circuit_type = getattr(circuit.type, "value", circuit.type)
        groups.setdefault(circuit_type or "other", []).append(circuit)
    return groups


def _merged_rooms_label(type_name: str, rooms: list[str]) -> str:
    if len(rooms) == 1:
        room = rooms[0]
        return type_name if room == GENERAL else f"{room} {type_name}"

    named = [r for r in rooms if r != GENERAL]
    if len(rooms) <= 3:
        room_list = " and ".join(named)
        if GENERAL in rooms and room_list:
            return f"{room_list} and general {type_name}"
        if room_list:
            return f"{room_list} {type_name}"
        return type_name

    return f"{len(rooms)} room {type_name}"


def generate_auto_label(circuits: Sequence[LabelCircuit]) -> str:
    """Build a breaker label from its circuits; empty string if none."""
    groups = _group_by_type(circuits)
    parts: list[str] = []

    for circuit_type, fallback in NOTE_FIRST_TYPES.items():
        for circuit in groups.get(circuit_type, []):
            notes, room = _clean(circuit.notes), _clean(circuit.room_name)
            if notes:
                parts.append(notes)
            elif room:
                parts.append(f"{room} {circuit_type}")
            else:
                parts.append(fallback)

    for circuit in groups.get("subpanel", []):
        parts.append(_clean(circuit.notes) or "Subpanel")

    for circuit_type in MERGED_TYPES:
        members = groups.get(circuit_type)
        if not members:
            continue
        rooms: list[str] = []
        for circuit in members:
            room = _clean(circuit.room_name) or GENERAL
            if room not in rooms:
                rooms.append(room)
        parts.append(_merged_rooms_label(MERGED_TYPE_NAMES[circuit_type], rooms))

    handled = {*NOTE_FIRST_TYPES, "subpanel", *MERGED_TYPES}
    for circuit_type, members in groups.items():
        if circuit_type in handled:
            continue
        for circuit in members:
            notes, room = _clean(circuit.notes), _clean(circuit.room_name)
            if notes:
                parts.append(notes)
            elif room:
                parts.append(f"{room} {circuit_type}")
            else:
                parts.append(circuit_type)

    return ", ".join(parts)


def display_label(
    label: str | None,
    breaker_type: str,
    circuits: Sequence[LabelCircuit],
    fed_panel_name: str | None = None,
) -> str:
    """Manual label if set, else the auto label. A double-pole feeding a
    subpanel gets the subpanel name on a second line."""
    text = _clean(label) or generate_auto_label(circuits)
    if fed_panel_name and breaker_type == "double_pole":
        link = f"→ {fed_panel_name}"
        text = f"{text}\n{link}" if text else link
    return text
