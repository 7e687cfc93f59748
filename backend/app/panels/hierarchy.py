"""Main panel / subpanel classification.

A panel is a subpanel when some circuit of type "subpanel" feeds it.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar


class FeedCircuit(Protocol):
    type: str | None
    subpanel_id: int | None


class NamedPanel(Protocol):
    id: int
    name: str


P = TypeVar("P", bound=NamedPanel)


def subpanel_ids(circuits: Iterable[FeedCircuit]) -> set[int]:
    return {
        c.subpanel_id for c in circuits if c.type == "subpanel" and c.subpanel_id
    }


def sort_main_first(panels: Sequence[P], fed_ids: set[int]) -> list[P]:
    """Main panels first, then subpanels; alphabetical within each group."""
    return sorted(panels, key=lambda p: (p.id in fed_ids, p.name.casefold()))


def feeds_own_panel(breaker_panel_id: int, subpanel_id: int | None) -> bool:
    return subpanel_id is not None and subpanel_id == breaker_panel_id
