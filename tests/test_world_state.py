"""
tests/test_world_state.py

Unit tests for the world-state model (component_11_world_state.py).

Tests cover:
- Fact binding, ordering and display
- WorldState set/unset/get, natural key order and digest
- Condition and effect consistency
- preMatch / postMatch (lenient and strict policies)
- Reverse and forward application, including the round-trip law
- compStart, comp and the full difference scan
"""

import pytest

from component_11_world_state import (
    ConditionType,
    EffectType,
    Fact,
    MatchPolicy,
    Param,
    WorldState,
    consistent_with_condition,
    consistent_with_effect,
)
from component_12_action_model import Action
from goap_exceptions import InvalidFactError, UnboundParameterError

AT_HOME = Fact("at", ("alice",))
DOOR = Fact("door")
FUEL = Fact("fuel")

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def drive():
    """drive(?0): at(?0) == home -> at(?0) := work"""
    at = Fact("at", (Param(0),))
    action = Action("drive", num_params=1)
    action.requires(at, ConditionType.EQUALS, "home")
    action.effects(at, EffectType.SET, "work")
    return action


@pytest.fixture
def effect_only():
    """Action whose clauses only carry effects."""
    action = Action("tinker")
    action.effects(DOOR, EffectType.SET, 1)
    action.effects(Fact("lamp"), EffectType.UNSET, 3)
    action.effects(FUEL, EffectType.INCREMENT, 4)
    action.effects(Fact("ammo"), EffectType.DECREMENT, 3)
    return action


# ============================================================================
# Facts
# ============================================================================


class TestFact:
    """Fact identity, binding and ordering."""

    def test_bind_replaces_placeholders(self):
        fact = Fact("at", (Param(1), "x", Param(0)))
        assert not fact.is_bound
        bound = fact.bind(["a", "b"])
        assert bound == Fact("at", ("b", "x", "a"))
        assert bound.is_bound

    def test_bind_outside_binding_raises(self):
        with pytest.raises(UnboundParameterError) as exc_info:
            Fact("at", (Param(2),)).bind(["a"])
        assert exc_info.value.context["index"] == 2
        assert exc_info.value.context["binding_size"] == 1

    def test_args_are_normalized_to_tuple(self):
        assert Fact("at", ["a"]) == Fact("at", ("a",))
        assert hash(Fact("at", ["a"])) == hash(Fact("at", ("a",)))

    def test_empty_name_rejected(self):
        with pytest.raises(InvalidFactError):
            Fact("")

    def test_ordering_is_structural(self):
        facts = [Fact("b"), Fact("a", ("y",)), Fact("a", ("x",)), Fact("a", (2,))]
        assert sorted(facts) == [Fact("a", (2,)), Fact("a", ("x",)), Fact("a", ("y",)), Fact("b")]

    def test_str(self):
        assert str(Fact("at", ("alice", "home"))) == "at(alice, home)"
        assert str(Fact("door")) == "door"
        assert str(Fact("at", (Param(0),))) == "at(?0)"


# ============================================================================
# WorldState mapping
# ============================================================================


class TestWorldStateMapping:
    """Basic mapping behavior."""

    def test_set_get_unset(self):
        ws = WorldState()
        ws.set(DOOR, 1)
        assert ws.get(DOOR) == 1
        assert DOOR in ws
        ws.unset(DOOR)
        assert DOOR not in ws
        assert ws.get(DOOR) is None
        assert ws.get(DOOR, "missing") == "missing"

    def test_unset_missing_fact_is_noop(self):
        ws = WorldState({DOOR: 1})
        ws.unset(FUEL)
        assert len(ws) == 1

    def test_absent_differs_from_present_zero(self):
        assert WorldState() != WorldState({DOOR: 0})

    def test_unbound_fact_cannot_be_stored(self):
        with pytest.raises(InvalidFactError):
            WorldState().set(Fact("at", (Param(0),)), 1)

    def test_iteration_uses_natural_order(self):
        ws = WorldState()
        ws.set(Fact("z"), 1)
        ws.set(Fact("a"), 2)
        ws.set(Fact("m"), 3)
        assert list(ws) == [Fact("a"), Fact("m"), Fact("z")]

    def test_copy_is_independent(self):
        ws = WorldState({DOOR: 1})
        clone = ws.copy()
        clone.set(DOOR, 2)
        assert ws.get(DOOR) == 1
        assert clone.get(DOOR) == 2

    def test_to_string(self):
        ws = WorldState({AT_HOME: "home"})
        assert ws.to_string() == "{\n    at(alice) -> home\n}"
        assert WorldState().to_string() == "{}"


class TestDigest:
    """Digest caching and equality."""

    def test_equal_states_have_equal_digest_regardless_of_insertion(self):
        a = WorldState()
        a.set(DOOR, 1)
        a.set(FUEL, 2)
        b = WorldState()
        b.set(FUEL, 2)
        b.set(DOOR, 1)
        assert a == b
        assert a.digest == b.digest
        assert hash(a) == hash(b)

    def test_digest_follows_mutation(self):
        ws = WorldState({DOOR: 1})
        before = ws.digest
        ws.set(DOOR, 2)
        assert ws.digest != before
        ws.set(DOOR, 1)
        assert ws.digest == before

    def test_empty_state_digest(self):
        assert WorldState().digest == 0

    def test_states_work_as_dict_keys(self):
        seen = {WorldState({DOOR: 1}): "first"}
        assert seen[WorldState({DOOR: 1})] == "first"
        assert WorldState({DOOR: 2}) not in seen


# ============================================================================
# Consistency
# ============================================================================


class TestConsistency:
    """Condition and effect consistency functions."""

    @pytest.mark.parametrize(
        "condition,value,target,expected",
        [
            (ConditionType.IS_UNSET, 1, None, False),
            (ConditionType.IS_SET, 1, None, True),
            (ConditionType.NONE, 1, None, True),
            (ConditionType.EQUALS, 1, 1, True),
            (ConditionType.EQUALS, 1, 2, False),
            (ConditionType.NOT_EQUAL, 1, 2, True),
            (ConditionType.NOT_EQUAL, 1, 1, False),
            (ConditionType.LESS, 1, 2, True),
            (ConditionType.LESS, 2, 2, False),
            (ConditionType.GREATER, 3, 2, True),
            (ConditionType.GREATER, 2, 2, False),
            (ConditionType.LESS_EQUAL, 2, 2, True),
            (ConditionType.LESS_EQUAL, 3, 2, False),
            (ConditionType.GREATER_EQUAL, 2, 2, True),
            (ConditionType.GREATER_EQUAL, 1, 2, False),
        ],
    )
    def test_condition(self, condition, value, target, expected):
        assert consistent_with_condition(value, condition, target) is expected

    @pytest.mark.parametrize(
        "effect,value,target,expected",
        [
            (EffectType.SET, 5, 5, True),
            (EffectType.SET, 5, 4, False),
            (EffectType.UNSET, 5, 5, False),
            (EffectType.INCREMENT, 5, 4, True),
            (EffectType.INCREMENT, 5, 5, False),
            (EffectType.DECREMENT, 3, 4, True),
            (EffectType.DECREMENT, 4, 4, False),
        ],
    )
    def test_effect(self, effect, value, target, expected):
        assert consistent_with_effect(value, effect, target) is expected


# ============================================================================
# Matching
# ============================================================================


class TestPreMatch:
    """Forward applicability."""

    def test_matches_bound_condition(self, drive):
        ws = WorldState({AT_HOME: "home"})
        assert ws.pre_match(drive, ("alice",))
        assert not ws.pre_match(drive, ("bob",))

    def test_wrong_value_fails(self, drive):
        assert not WorldState({AT_HOME: "work"}).pre_match(drive, ("alice",))

    def test_missing_fact_only_matches_is_unset(self):
        build = Action("build").requires(DOOR, ConditionType.IS_UNSET)
        assert WorldState().pre_match(build)
        assert not WorldState({DOOR: 0}).pre_match(build)

        open_door = Action("open").requires(DOOR, ConditionType.IS_SET)
        assert not WorldState().pre_match(open_door)
        assert WorldState({DOOR: 0}).pre_match(open_door)

    def test_effect_only_clauses_are_ignored(self, effect_only):
        assert WorldState().pre_match(effect_only)

    def test_special_conditions_must_accept(self):
        picky = Action("picky", num_params=1, special_conditions=lambda p: p[0] != "bob")
        picky.requires(Fact("at", (Param(0),)), ConditionType.IS_SET)
        ws = WorldState({Fact("at", ("alice",)): 1, Fact("at", ("bob",)): 1})
        assert ws.pre_match(picky, ("alice",))
        assert not ws.pre_match(picky, ("bob",))

    def test_condition_value_from_binding(self):
        at = Fact("at", (Param(0),))
        goto = Action("goto", num_params=2)
        goto.requires(at, ConditionType.NOT_EQUAL, param=1)
        ws = WorldState({Fact("at", ("alice",)): "home"})
        assert ws.pre_match(goto, ("alice", "work"))
        assert not ws.pre_match(goto, ("alice", "home"))

    def test_unbound_fact_with_empty_binding_does_not_match(self, drive):
        assert not WorldState({AT_HOME: "home"}).pre_match(drive, ())


class TestPostMatch:
    """Backward candidacy under both policies."""

    def test_effect_explains_state(self, drive):
        ws = WorldState({AT_HOME: "work"})
        assert ws.post_match(drive, ("alice",))

    def test_contradicting_effect_rejects(self, drive):
        assert not WorldState({AT_HOME: "office"}).post_match(drive, ("alice",))

    def test_no_supporting_clause_rejects(self, drive):
        # at(bob) is unknown: nothing contradicts, nothing supports
        assert not WorldState({AT_HOME: "work"}).post_match(drive, ("bob",))

    def test_condition_only_clause_counts(self):
        wait = Action("wait").requires(DOOR, ConditionType.EQUALS, 1)
        assert WorldState({DOOR: 1}).post_match(wait)
        assert not WorldState({DOOR: 2}).post_match(wait)
        assert not WorldState().post_match(wait)

    def test_lenient_accepts_partial_explanation(self):
        action = Action("both")
        action.effects(DOOR, EffectType.SET, 1)
        action.effects(FUEL, EffectType.SET, 5)
        ws = WorldState({DOOR: 1})
        assert ws.post_match(action, (), MatchPolicy.LENIENT_ANY)
        assert not ws.post_match(action, (), MatchPolicy.STRICT_ALL)
        assert WorldState({DOOR: 1, FUEL: 5}).post_match(action, (), MatchPolicy.STRICT_ALL)

    def test_unset_effect_under_each_policy(self):
        close = Action("remove_door").effects(DOOR, EffectType.UNSET, 1)
        assert not WorldState().post_match(close, (), MatchPolicy.LENIENT_ANY)
        assert WorldState().post_match(close, (), MatchPolicy.STRICT_ALL)
        assert not WorldState({DOOR: 1}).post_match(close, (), MatchPolicy.STRICT_ALL)

    def test_special_conditions_apply(self, drive):
        drive.special_conditions = lambda params: False
        assert not WorldState({AT_HOME: "work"}).post_match(drive, ("alice",))


# ============================================================================
# Application
# ============================================================================


class TestApplyReverse:
    """Deriving predecessor states."""

    def test_equals_condition_forces_value(self, drive):
        ws = WorldState({AT_HOME: "work"})
        ws.apply_reverse(drive, ("alice",))
        assert ws == WorldState({AT_HOME: "home"})

    def test_effect_only_clauses_are_undone(self, effect_only):
        ws = WorldState({DOOR: 1, FUEL: 5, Fact("ammo"): 2})
        ws.apply_reverse(effect_only)
        assert DOOR not in ws
        assert ws.get(Fact("lamp")) == 3
        assert ws.get(FUEL) == 4
        assert ws.get(Fact("ammo")) == 3

    def test_increment_on_unknown_fact_uses_effect_value(self):
        action = Action("charge").effects(FUEL, EffectType.INCREMENT, 7)
        ws = WorldState()
        ws.apply_reverse(action)
        assert ws.get(FUEL) == 7

    def test_is_unset_condition_removes_fact(self):
        build = Action("build")
        build.requires(DOOR, ConditionType.IS_UNSET)
        build.effects(DOOR, EffectType.SET, 1)
        ws = WorldState({DOOR: 1})
        ws.apply_reverse(build)
        assert DOOR not in ws

    def test_is_set_condition_writes_sentinel_when_absent(self):
        use = Action("use").requires(FUEL, ConditionType.IS_SET)
        ws = WorldState()
        ws.apply_reverse(use)
        assert ws.get(FUEL) == 0

        kept = WorldState({FUEL: 9})
        kept.apply_reverse(use)
        assert kept.get(FUEL) == 9

    def test_comparison_condition_undoes_effect(self):
        refuel = Action("refuel")
        refuel.requires(FUEL, ConditionType.LESS, 5)
        refuel.effects(FUEL, EffectType.SET, 5)
        ws = WorldState({FUEL: 5})
        ws.apply_reverse(refuel)
        assert FUEL not in ws

    def test_is_set_keeps_value_left_by_undo(self):
        charge = Action("charge")
        charge.requires(FUEL, ConditionType.IS_SET)
        charge.effects(FUEL, EffectType.INCREMENT, 0)
        ws = WorldState({FUEL: 4})
        ws.apply_reverse(charge)
        assert ws.get(FUEL) == 3

    def test_other_conditions_leave_fact_alone(self):
        burn = Action("burn").requires(FUEL, ConditionType.GREATER, 0)
        ws = WorldState({FUEL: 4})
        ws.apply_reverse(burn)
        assert ws == WorldState({FUEL: 4})

    def test_digest_recomputed(self, drive):
        ws = WorldState({AT_HOME: "work"})
        ws.apply_reverse(drive, ("alice",))
        assert ws.digest == WorldState({AT_HOME: "home"}).digest


class TestApplyForward:
    """Forward application of effects."""

    def test_effects_applied(self, effect_only):
        ws = WorldState({Fact("lamp"): 3, FUEL: 4, Fact("ammo"): 3})
        ws.apply_forward(effect_only)
        assert ws == WorldState({DOOR: 1, FUEL: 5, Fact("ammo"): 2})

    def test_conditions_untouched(self, drive):
        ws = WorldState({AT_HOME: "home"})
        ws.apply_forward(drive, ("alice",))
        assert ws.get(AT_HOME) == "work"

    def test_round_trip_for_effect_only_action(self, effect_only):
        original = WorldState({DOOR: 1, FUEL: 5, Fact("ammo"): 2})
        assert original.post_match(effect_only, (), MatchPolicy.STRICT_ALL)

        ws = original.copy()
        ws.apply_reverse(effect_only)
        assert ws != original
        ws.apply_forward(effect_only)
        assert ws == original


# ============================================================================
# Comparison
# ============================================================================


class TestComparison:
    """compStart, comp and difference."""

    def test_comp_start_ignores_unique_facts(self):
        a = WorldState({DOOR: 1, FUEL: 3})
        b = WorldState({DOOR: 1, Fact("lamp"): 0})
        assert WorldState.comp_start(a, b) == 0

    def test_comp_start_counts_shared_disagreements(self):
        a = WorldState({DOOR: 1, FUEL: 3, Fact("lamp"): 1})
        b = WorldState({DOOR: 2, FUEL: 4, Fact("lamp"): 1})
        assert WorldState.comp_start(a, b) == 2
        assert WorldState.comp_start(b, a) == 2

    def test_comp_start_disjoint_is_zero(self):
        assert WorldState.comp_start(WorldState({DOOR: 1}), WorldState({FUEL: 1})) == 0

    def test_comp_is_binary(self):
        a = WorldState({DOOR: 1, FUEL: 3})
        assert WorldState.comp(a, a.copy()) == 0
        assert WorldState.comp(a, WorldState({DOOR: 2, FUEL: 4, Fact("lamp"): 1})) == 1

    def test_difference_counts_unique_and_disagreeing(self):
        a = WorldState({DOOR: 1, FUEL: 3})
        b = WorldState({DOOR: 2, Fact("lamp"): 1})
        # door differs, fuel only in a, lamp only in b
        assert WorldState.difference(a, b) == 3
        assert WorldState.difference(a, a.copy()) == 0

    def test_satisfies(self):
        state = WorldState({DOOR: 1, FUEL: 3})
        assert state.satisfies(WorldState({DOOR: 1}))
        assert not state.satisfies(WorldState({DOOR: 2}))
        assert not state.satisfies(WorldState({Fact("lamp"): 1}))
