"""
Unit tests for Proposition and Action

Tests cover:
- Negation symmetry and irreflexivity
- Literal equality and hashing
- Action identity by name
- Add/delete effect split
"""

import pytest

from graphplan.problem import Action, Proposition


# ===== Test Proposition =====

class TestProposition:
    """Test propositional literals"""

    @pytest.mark.parametrize("name", ["x_at_a", "garb", "on_a_b"])
    def test_negation_symmetry(self, name):
        """p negates !p and !p negates p"""
        p = Proposition(name)
        assert p.is_negation_of(p.get_negated())
        assert p.get_negated().is_negation_of(p)

    def test_negation_irreflexive(self):
        """No literal is its own negation"""
        p = Proposition("x_at_a")
        assert not p.is_negation_of(p)
        assert not p.get_negated().is_negation_of(p.get_negated())

    def test_negation_requires_same_name(self):
        """Different names never negate each other"""
        assert not Proposition("a").is_negation_of(Proposition("b", True))

    def test_double_negation(self):
        """Negating twice returns an equal literal"""
        p = Proposition("clean")
        assert p.get_negated().get_negated() == p

    def test_equality_includes_negation(self):
        """x and !x are different literals"""
        assert Proposition("x") == Proposition("x")
        assert Proposition("x") != Proposition("x", True)
        assert len({Proposition("x"), Proposition("x"), Proposition("x", True)}) == 2

    def test_get_positive(self):
        """get_positive strips the negation"""
        assert Proposition("x", True).get_positive() == Proposition("x")
        assert Proposition("x").get_positive() == Proposition("x")

    def test_to_string(self):
        """Negated literals render with a leading '!'"""
        assert Proposition("garb").to_string() == "garb"
        assert str(Proposition("garb", True)) == "!garb"
        assert repr(Proposition("garb", True)) == "Proposition(!garb)"

    def test_immutable(self):
        """Literals cannot be modified after creation"""
        p = Proposition("x")
        with pytest.raises(AttributeError):
            p.name = "y"


# ===== Test Action =====

class TestAction:
    """Test STRIPS actions"""

    def test_equality_by_name(self):
        """Actions with the same name are equal regardless of contents"""
        first = Action("move", [Proposition("a")], [Proposition("b")])
        second = Action("move", [], [Proposition("c")])
        assert first == second
        assert hash(first) == hash(second)
        assert first != Action("stay")

    def test_not_equal_to_other_types(self):
        """An action never equals a non-action"""
        assert Action("move") != "move"

    def test_adds_and_deletes(self, move_a_to_b):
        """Negated effects are deletions"""
        assert move_a_to_b.adds() == frozenset({Proposition("x_at_b")})
        assert move_a_to_b.deletes() == frozenset({Proposition("x_at_a", True)})

    def test_duplicate_literals_collapse(self):
        """Preconditions and effects are sets"""
        action = Action("a", [Proposition("p"), Proposition("p")], [Proposition("q")])
        assert len(action.preconditions) == 1

    def test_zero_preconditions(self):
        """An action may have no preconditions"""
        action = Action("spawn", effects=[Proposition("thing")])
        assert action.preconditions == frozenset()
        assert action.sorted_effects() == [Proposition("thing")]

    def test_sorted_effects_order(self):
        """Sorted order is by name, positive before negated"""
        action = Action("a", [], [Proposition("b", True), Proposition("a"), Proposition("b")])
        assert action.sorted_effects() == [Proposition("a"), Proposition("b"), Proposition("b", True)]

    def test_to_string(self, move_a_to_b):
        """to_string lists preconditions and effects"""
        text = move_a_to_b.to_string()
        assert text.startswith("Action: move_a_to_b")
        assert "\t\tx_at_a" in text
        assert "\t\t!x_at_a" in text
        assert str(move_a_to_b) == "move_a_to_b"
