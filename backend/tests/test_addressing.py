"""Unit tests for breaker addressing and panel layout rules."""

from dataclasses import dataclass

import pytest

from app.errors import ValidationFailed
from app.panels.addressing import (
    BreakerAddress,
    BreakerType,
    Slot,
    breaker_type_for_slot,
    describe_conflicts,
    layout_conflicts,
    normalize_slot,
    occupied_positions,
    position_label,
    validate_address,
    validate_panel_size,
)


# ─── Fixtures ───


@dataclass
class _Placed:
    id: int
    position: int
    slot: str = "single"
    breaker_type: str = "single"


def _addr(position: int, slot: Slot = Slot.SINGLE) -> BreakerAddress:
    return BreakerAddress(panel_id=1, position=position, slot=slot)


# ═══════════════════════════════════════════════════════════
# Labels and derived positions
# ═══════════════════════════════════════════════════════════


class TestPositionLabels:
    def test_single_slot_label(self):
        assert _addr(4).label == "4"

    def test_tandem_half_label(self):
        assert _addr(4, Slot.B).label == "4B"
        assert position_label(7, "A") == "7A"

    def test_addresses_compare_by_value(self):
        assert _addr(3, Slot.A) == BreakerAddress(1, 3, Slot.A)
        assert _addr(3, Slot.A) != _addr(3, Slot.B)


class TestOccupiedPositions:
    def test_single_occupies_own_position(self):
        assert occupied_positions(_Placed(1, 5)) == (5,)

    def test_double_pole_covers_position_below(self):
        dp = _Placed(1, 5, breaker_type="double_pole")
        assert occupied_positions(dp) == (5, 7)


# ═══════════════════════════════════════════════════════════
# Slot and type rules
# ═══════════════════════════════════════════════════════════


class TestSlotRules:
    def test_tandem_defaults_to_half_a(self):
        assert normalize_slot(BreakerType.TANDEM, None) is Slot.A
        assert normalize_slot("tandem", "single") is Slot.A

    def test_tandem_keeps_explicit_half(self):
        assert normalize_slot(BreakerType.TANDEM, Slot.B) is Slot.B

    def test_single_unset_slot(self):
        assert normalize_slot(BreakerType.SINGLE, None) is Slot.SINGLE

    def test_relocating_into_half_makes_tandem(self):
        assert breaker_type_for_slot("single", Slot.A) is BreakerType.TANDEM

    def test_tandem_into_single_slot_becomes_single(self):
        assert breaker_type_for_slot("tandem", Slot.SINGLE) is BreakerType.SINGLE

    def test_double_pole_keeps_type(self):
        assert breaker_type_for_slot("double_pole", Slot.SINGLE) is BreakerType.DOUBLE_POLE
        assert breaker_type_for_slot("double_pole", Slot.A) is BreakerType.DOUBLE_POLE


class TestValidateAddress:
    def test_valid_single(self):
        validate_address(_addr(12), 12)

    def test_position_beyond_panel(self):
        with pytest.raises(ValidationFailed, match="exceeds panel size"):
            validate_address(_addr(13), 12)

    def test_position_zero(self):
        with pytest.raises(ValidationFailed):
            validate_address(_addr(0), 12)

    def test_double_pole_needs_room_for_second_pole(self):
        validate_address(_addr(10), 12, BreakerType.DOUBLE_POLE)
        with pytest.raises(ValidationFailed, match="does not fit"):
            validate_address(_addr(11), 12, BreakerType.DOUBLE_POLE)

    def test_double_pole_cannot_be_tandem_half(self):
        with pytest.raises(ValidationFailed, match="tandem slots"):
            validate_address(_addr(2, Slot.A), 12, BreakerType.DOUBLE_POLE)

    def test_tandem_needs_half(self):
        with pytest.raises(ValidationFailed):
            validate_address(_addr(2), 12, BreakerType.TANDEM)

    def test_single_cannot_use_half(self):
        with pytest.raises(ValidationFailed):
            validate_address(_addr(2, Slot.B), 12, BreakerType.SINGLE)


class TestPanelSize:
    @pytest.mark.parametrize("size", [12, 20, 42])
    def test_sizes_in_range(self, size):
        validate_panel_size(size)

    @pytest.mark.parametrize("size", [0, 11, 43])
    def test_sizes_out_of_range(self, size):
        with pytest.raises(ValidationFailed):
            validate_panel_size(size)


# ═══════════════════════════════════════════════════════════
# Layout conflicts
# ═══════════════════════════════════════════════════════════


class TestLayoutConflicts:
    def test_empty_panel(self):
        assert layout_conflicts(_addr(3), "single", []) == []

    def test_exact_match_is_not_a_layout_conflict(self):
        occupant = _Placed(1, 3)
        assert layout_conflicts(_addr(3), "single", [occupant]) == []

    def test_shadow_of_double_pole_blocks(self):
        dp = _Placed(1, 1, breaker_type="double_pole")
        assert layout_conflicts(_addr(3), "single", [dp]) == [dp]

    def test_double_pole_blocked_by_breaker_below(self):
        below = _Placed(2, 7)
        assert layout_conflicts(_addr(5), "double_pole", [below]) == [below]

    def test_adjacent_positions_do_not_conflict(self):
        neighbours = [_Placed(1, 2), _Placed(2, 4)]
        assert layout_conflicts(_addr(3), "single", neighbours) == []

    def test_single_blocked_by_tandem_half(self):
        half = _Placed(1, 4, slot="A", breaker_type="tandem")
        assert layout_conflicts(_addr(4), "single", [half]) == [half]

    def test_tandem_half_beside_its_twin(self):
        half = _Placed(1, 4, slot="A", breaker_type="tandem")
        assert layout_conflicts(_addr(4, Slot.B), "tandem", [half]) == []

    def test_ignored_breaker_never_blocks(self):
        dp = _Placed(9, 1, breaker_type="double_pole")
        assert layout_conflicts(_addr(3), "single", [dp], ignore_ids=[9]) == []

    def test_conflict_message_lists_positions(self):
        blockers = [_Placed(1, 1, breaker_type="double_pole"), _Placed(2, 5, slot="A")]
        message = describe_conflicts(_addr(3), blockers)
        assert message == "Position 3 is blocked by breaker(s) at 1, 5A"
