"""Unit tests for the availability engine."""

from datetime import datetime, timedelta, timezone

import pytest

from housing_availability.models import AvailabilityPolicy, Claim, ClaimLevel
from housing_availability.services import (
    can_create_claim,
    check_claim,
    compute_availability,
    compute_availability_for_all,
    count_available,
    partition_claims_by_property,
)
from tests.factories import build_property, property_claim, sub_room_claim, unit_claim


class TestConcreteScenarios:
    """Single sub-room S1 with units U1, U2."""

    def test_unit_claim_blocks_only_that_unit(self, simple_property, policy):
        """Test that a unit claim blocks the unit and the whole property only."""
        claims = [unit_claim("c1", "U1", status="confirmed")]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_unit["U1"] is False
        assert state.can_reserve_unit["U2"] is True
        assert state.can_reserve_sub_room["S1"] is True
        assert count_available(simple_property, state).available_units == 1

    def test_sub_room_claim_blocks_its_units(self, simple_property, policy):
        """Test that a sub-room claim blocks every unit beneath it."""
        claims = [
            unit_claim("c1", "U1", status="confirmed"),
            sub_room_claim("c2", "S1", status="pending"),
        ]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_sub_room["S1"] is False
        assert state.can_reserve_unit["U1"] is False
        assert state.can_reserve_unit["U2"] is False
        assert count_available(simple_property, state).available_units == 0

    def test_property_claim_locks_everything(self, simple_property, policy):
        """Test that a whole-property claim locks every sub-room and unit."""
        claims = [property_claim("c1", "P", status="active")]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_whole_property is False
        assert state.can_reserve_sub_room["S1"] is False
        assert state.can_reserve_unit == {"U1": False, "U2": False}
        assert state.reason == "Property is fully reserved"


class TestComputeAvailability:
    """Tests for compute_availability invariants and edge cases."""

    def test_no_claims_gives_maximal_availability(self, shared_flat, policy):
        """Test that every enabled target is free with no claims."""
        state = compute_availability(shared_flat, [], policy=policy)

        assert state.can_reserve_whole_property is True
        assert all(state.can_reserve_sub_room.values())
        assert all(state.can_reserve_unit.values())
        assert set(state.can_reserve_sub_room) == {"S1", "S2"}
        assert set(state.can_reserve_unit) == {"U1", "U2", "U3", "U4", "U5"}
        assert state.reason is None

    def test_property_claim_overrides_every_other_claim(self, shared_flat, policy):
        """Test that a property claim wins over any mix of other claims."""
        claims = [
            sub_room_claim("c1", "S2", status="cancelled"),
            unit_claim("c2", "U1", status="declined"),
            property_claim("c3", "FLAT", status="confirmed"),
        ]

        state = compute_availability(shared_flat, claims, policy=policy)

        assert not any(state.can_reserve_sub_room.values())
        assert not any(state.can_reserve_unit.values())

    def test_sub_room_claim_does_not_affect_sibling(self, shared_flat, policy):
        """Test that a sub-room claim leaves sibling sub-rooms free."""
        state = compute_availability(shared_flat, [sub_room_claim("c1", "S1")], policy=policy)

        assert state.can_reserve_unit["U1"] is False
        assert state.can_reserve_unit["U2"] is False
        assert state.can_reserve_sub_room["S2"] is True
        assert state.can_reserve_unit["U3"] is True
        assert state.can_reserve_unit["U4"] is True
        assert state.can_reserve_unit["U5"] is True

    def test_descendant_claims_block_whole_property(self, shared_flat, policy):
        """Test that sub-room and unit claims block the whole property."""
        state = compute_availability(shared_flat, [unit_claim("c1", "U4")], policy=policy)

        assert state.can_reserve_whole_property is False
        assert state.reason == "Part of the property is already reserved"

        state = compute_availability(shared_flat, [sub_room_claim("c2", "S2")], policy=policy)

        assert state.can_reserve_whole_property is False

    @pytest.mark.parametrize("disabled", ["whole", "sub_room", "unit"])
    def test_disabled_granularity_is_hard_override(self, disabled, policy):
        """Test that a disabled granularity forces its entries False."""
        prop = build_property(**{disabled: False})

        state = compute_availability(prop, [], policy=policy)

        if disabled == "whole":
            assert state.can_reserve_whole_property is False
            assert state.reason == "Whole-property reservation is not enabled"
        elif disabled == "sub_room":
            assert state.can_reserve_sub_room == {"S1": False}
            assert state.can_reserve_unit == {"U1": True, "U2": True}
        else:
            assert state.can_reserve_unit == {"U1": False, "U2": False}
            assert state.can_reserve_sub_room == {"S1": True}

    def test_no_granularity_enabled_degrades_to_all_false(self, policy):
        """Test that a property with nothing enabled reports everything False."""
        prop = build_property(whole=False, sub_room=False, unit=False)

        state = compute_availability(prop, [unit_claim("c1", "U1")], policy=policy)

        assert state.can_reserve_whole_property is False
        assert state.can_reserve_sub_room == {"S1": False}
        assert state.can_reserve_unit == {"U1": False, "U2": False}

    def test_operator_disabled_unit_is_unreservable(self, policy):
        """Test that an unavailable unit is never reservable."""
        prop = build_property(unavailable_units=("U2",))

        state = compute_availability(prop, [], policy=policy)

        assert state.can_reserve_unit == {"U1": True, "U2": False}
        assert state.can_reserve_sub_room["S1"] is True

    def test_non_active_claims_are_invisible(self, shared_flat, policy):
        """Test that cancelled, declined and expired claims are ignored."""
        baseline = compute_availability(shared_flat, [], policy=policy)
        claims = [
            property_claim("c1", "FLAT", status="cancelled"),
            sub_room_claim("c2", "S1", status="expired"),
            unit_claim("c3", "U3", status="declined"),
            unit_claim("c4", "U4", status="completed"),
        ]

        state = compute_availability(shared_flat, claims, policy=policy)

        assert state == baseline

    def test_status_match_is_case_insensitive(self, simple_property, policy):
        """Test matching active statuses regardless of case."""
        state = compute_availability(simple_property, [unit_claim("c1", "U1", status="CONFIRMED")], policy=policy)

        assert state.can_reserve_unit["U1"] is False

    def test_duplicate_claims_on_same_target(self, simple_property, policy):
        """Test that duplicate claims on one target are harmless."""
        claims = [unit_claim("c1", "U1"), unit_claim("c2", "U1"), sub_room_claim("c3", "S1"), sub_room_claim("c4", "S1")]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_sub_room["S1"] is False
        assert state.can_reserve_unit == {"U1": False, "U2": False}

    def test_orphaned_claims_are_ignored(self, simple_property, policy):
        """Test that claims on unknown targets never raise or block."""
        claims = [sub_room_claim("c1", "GONE"), unit_claim("c2", "U-missing")]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state == compute_availability(simple_property, [], policy=policy)
        assert set(state.can_reserve_unit) == {"U1", "U2"}

    def test_ambiguous_claims_do_not_match(self, simple_property, policy):
        """Test that claims without a resolvable target match nothing."""
        claims = [
            Claim(id="c1", level="unit", sub_room_id="S1", status="confirmed"),
            Claim(id="c2", level="subroom", sub_room_id="S1", unit_id="U1", status="confirmed"),
            Claim(id="c3", level="unit", status="confirmed"),
        ]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_whole_property is True
        assert state.can_reserve_sub_room["S1"] is True
        assert state.can_reserve_unit == {"U1": True, "U2": True}

    def test_output_independent_of_claim_order(self, shared_flat, policy):
        """Test that claim order does not change the result."""
        claims = [
            unit_claim("c1", "U1"),
            sub_room_claim("c2", "S2"),
            unit_claim("c3", "U2", status="cancelled"),
        ]

        first = compute_availability(shared_flat, claims, policy=policy)
        second = compute_availability(shared_flat, list(reversed(claims)), policy=policy)

        assert first == second
        assert first.model_dump() == compute_availability(shared_flat, claims, policy=policy).model_dump()

    def test_custom_active_statuses(self, simple_property):
        """Test computing availability with a custom active status set."""
        policy = AvailabilityPolicy(active_statuses={"Paid"})
        claims = [unit_claim("c1", "U1", status="confirmed"), unit_claim("c2", "U2", status="paid")]

        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_unit == {"U1": True, "U2": False}

    def test_unit_claims_lock_sub_room_policy(self, shared_flat):
        """Test the policy where a claimed unit also blocks its sub-room."""
        policy = AvailabilityPolicy(unit_claims_lock_sub_room=True)

        state = compute_availability(shared_flat, [unit_claim("c1", "U1")], policy=policy)

        assert state.can_reserve_sub_room == {"S1": False, "S2": True}
        assert state.can_reserve_unit["U2"] is True

    def test_expired_hold_does_not_block_when_as_of_given(self, simple_property, policy):
        """Test that a hold expired at the evaluation instant does not block."""
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        claims = [
            unit_claim("c1", "U1", status="pending_payment", expires_at=now - timedelta(minutes=1)),
            unit_claim("c2", "U2", status="pending_payment", expires_at=now + timedelta(minutes=5)),
        ]

        state = compute_availability(simple_property, claims, policy=policy, as_of=now)

        assert state.can_reserve_unit == {"U1": True, "U2": False}

        # Without an evaluation instant expiry is not consulted
        state = compute_availability(simple_property, claims, policy=policy)

        assert state.can_reserve_unit == {"U1": False, "U2": False}

    def test_to_dict_uses_camel_case(self, simple_property, policy):
        """Test serializing the state with camelCase keys."""
        state = compute_availability(simple_property, [], policy=policy)

        data = state.to_dict()

        assert data["propertyId"] == "P"
        assert data["canReserveWholeProperty"] is True
        assert data["canReserveSubRoom"] == {"S1": True}
        assert data["canReserveUnit"] == {"U1": True, "U2": True}
        assert "reason" not in data


class TestCheckClaim:
    """Tests for the write-time guard."""

    def test_free_unit_is_allowed(self, simple_property, policy):
        """Test allowing a claim on a free unit."""
        assert can_create_claim(simple_property, [], ClaimLevel.UNIT, "U1", policy=policy) is True

    def test_claimed_unit_is_refused(self, simple_property, policy):
        """Test refusing a claim on an already claimed unit."""
        decision = check_claim(simple_property, [unit_claim("c1", "U1")], "unit", "U1", policy=policy)

        assert decision.allowed is False
        assert not decision
        assert decision.reason == "This unit is not available for reservation"

    def test_sibling_unit_still_allowed(self, simple_property, policy):
        """Test allowing a claim on the sibling of a claimed unit."""
        assert can_create_claim(simple_property, [unit_claim("c1", "U1")], "bed", "U2", policy=policy) is True

    def test_whole_property_refused_after_unit_claim(self, simple_property, policy):
        """Test refusing a whole-property claim once a unit is claimed."""
        decision = check_claim(simple_property, [unit_claim("c1", "U1")], "property", policy=policy)

        assert decision.allowed is False
        assert decision.reason == "Part of the property is already reserved"

    def test_whole_property_allowed_with_own_id(self, simple_property, policy):
        """Test allowing a whole-property claim that names the property id."""
        assert can_create_claim(simple_property, [], "property", "P", policy=policy) is True
        assert can_create_claim(simple_property, [], "apartment", None, policy=policy) is True

    def test_whole_property_with_foreign_id_refused(self, simple_property, policy):
        """Test refusing a whole-property claim naming another property."""
        decision = check_claim(simple_property, [], "property", "OTHER", policy=policy)

        assert decision.allowed is False
        assert decision.reason == "Claim targets a different property"

    def test_sub_room_refused_after_property_claim(self, simple_property, policy):
        """Test refusing a sub-room claim under a whole-property claim."""
        claims = [property_claim("c1", "P")]

        decision = check_claim(simple_property, claims, ClaimLevel.SUBROOM, "S1", policy=policy)

        assert decision.allowed is False
        assert decision.reason == "This sub-room is not available for reservation"

    def test_missing_target_id_refused(self, simple_property, policy):
        """Test refusing sub-room and unit claims without a target id."""
        decision = check_claim(simple_property, [], ClaimLevel.SUBROOM, None, policy=policy)

        assert decision.allowed is False
        assert decision.reason == "Sub-room ID required"

    def test_unknown_target_refused(self, simple_property, policy):
        """Test refusing claims on targets outside the hierarchy."""
        decision = check_claim(simple_property, [], ClaimLevel.UNIT, "U9", policy=policy)

        assert decision.allowed is False
        assert decision.reason == "Unit not found in this property"

    def test_invalid_level_refused(self, simple_property, policy):
        """Test refusing a claim with an unknown level."""
        decision = check_claim(simple_property, [], "floor", "S1", policy=policy)

        assert decision.allowed is False
        assert decision.reason == "Invalid reservation level"

    def test_guard_agrees_with_computed_state(self, shared_flat, policy):
        """Test that the guard agrees with every computed state entry."""
        claims = [unit_claim("c1", "U3"), sub_room_claim("c2", "S1")]
        state = compute_availability(shared_flat, claims, policy=policy)

        for sub_room_id, expected in state.can_reserve_sub_room.items():
            assert can_create_claim(shared_flat, claims, "subroom", sub_room_id, policy=policy) is expected
        for unit_id, expected in state.can_reserve_unit.items():
            assert can_create_claim(shared_flat, claims, "unit", unit_id, policy=policy) is expected
        assert can_create_claim(shared_flat, claims, "property", policy=policy) is state.can_reserve_whole_property


class TestBatchAvailability:
    """Tests for partitioning and multi-property computation."""

    @pytest.fixture
    def properties(self):
        return [
            build_property("A", {"A-S1": ["A-U1", "A-U2"]}),
            build_property("B", {"B-S1": ["B-U1"], "B-S2": ["B-U2"]}),
            build_property("C", {"C-S1": ["C-U1"]}, whole=False),
        ]

    @pytest.fixture
    def claims(self):
        return [
            property_claim("c1", "A"),
            unit_claim("c2", "B-U2"),
            sub_room_claim("c3", "C-S1"),
            unit_claim("c4", "Z-U1"),
            Claim(id="c5", level="unit", status="confirmed"),
        ]

    def test_partition_follows_hierarchy(self, properties, claims):
        """Test partitioning claims through the hierarchy they target."""
        partitions = partition_claims_by_property(properties, claims)

        assert {key: [c.id for c in value] for key, value in partitions.items()} == {
            "A": ["c1"],
            "B": ["c2"],
            "C": ["c3"],
        }

    def test_partition_keeps_properties_without_claims(self, properties):
        """Test that properties without claims still get an entry."""
        partitions = partition_claims_by_property(properties, [])

        assert partitions == {"A": [], "B": [], "C": []}

    def test_batch_matches_single_property_results(self, properties, claims, policy):
        """Test that batch results equal per-property results."""
        results = compute_availability_for_all(properties, claims, policy=policy, max_workers=1)
        partitions = partition_claims_by_property(properties, claims)

        assert set(results) == {"A", "B", "C"}
        for prop in properties:
            assert results[prop.id] == compute_availability(prop, partitions[prop.id], policy=policy)

        assert results["A"].can_reserve_unit == {"A-U1": False, "A-U2": False}
        assert results["B"].can_reserve_unit == {"B-U1": True, "B-U2": False}
        assert results["B"].can_reserve_sub_room == {"B-S1": True, "B-S2": True}
        assert results["C"].can_reserve_sub_room == {"C-S1": False}

    def test_thread_pool_gives_same_results(self, properties, claims, policy):
        """Test that the thread pool gives the sequential results."""
        sequential = compute_availability_for_all(properties, claims, policy=policy, max_workers=1)
        threaded = compute_availability_for_all(properties, claims, policy=policy, max_workers=4)

        assert threaded == sequential
