"""
Planning Problem Data Structures

This module defines the value types a planning problem is made of:
- Proposition: A named literal, possibly negated (e.g., x_at_a, !x_at_a)
- Action: A named transformation with precondition and effect propositions

Negated effects represent deletions: an action with effect !x_at_a removes
x_at_a from the world. Both types are immutable and can be shared freely
between the problem definition and the planning graph.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List


@dataclass(frozen=True)
class Proposition:
    """
    Represents a (possibly negated) propositional literal

    Examples:
        x_at_a  → Proposition(name="x_at_a", negated=False)
        !x_at_a → Proposition(name="x_at_a", negated=True)

    Attributes:
        name: Proposition name (e.g., "x_at_a")
        negated: Whether this literal asserts the proposition is false
    """
    name: str
    negated: bool = False

    def is_negation_of(self, other: 'Proposition') -> bool:
        """
        Check if this literal is the negation of another

        Returns:
            True iff names are equal and negation flags differ
        """
        return self.name == other.name and self.negated != other.negated

    def get_negated(self) -> 'Proposition':
        """Get the negated version of this proposition"""
        return Proposition(self.name, not self.negated)

    def get_positive(self) -> 'Proposition':
        """Get the positive version of this proposition"""
        if not self.negated:
            return self
        return Proposition(self.name, False)

    def to_string(self) -> str:
        """
        Convert to problem-definition syntax

        Returns:
            String like "x_at_a" or "!x_at_a"
        """
        prefix = "!" if self.negated else ""
        return f"{prefix}{self.name}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Proposition({self.to_string()})"


def _sorted_props(props: Iterable[Proposition]) -> List[Proposition]:
    return sorted(props, key=lambda p: (p.name, p.negated))


class Action:
    """
    Represents a STRIPS action over propositional literals

    Example:
        move_a_to_b: pre {x_at_a} → effects {x_at_b, !x_at_a}

    Two actions are equal when their names are equal, so a problem holds at
    most one action per name.

    Attributes:
        name: Action name
        preconditions: Literals that must hold before the action
        effects: Literals that hold after the action (negated = deleted)
    """

    __slots__ = ("_name", "_preconditions", "_effects")

    def __init__(self, name: str,
                 preconditions: Iterable[Proposition] = (),
                 effects: Iterable[Proposition] = ()):
        self._name = name
        self._preconditions: FrozenSet[Proposition] = frozenset(preconditions)
        self._effects: FrozenSet[Proposition] = frozenset(effects)

    @property
    def name(self) -> str:
        return self._name

    @property
    def preconditions(self) -> FrozenSet[Proposition]:
        return self._preconditions

    @property
    def effects(self) -> FrozenSet[Proposition]:
        return self._effects

    def adds(self) -> FrozenSet[Proposition]:
        """Effects that make a proposition true"""
        return frozenset(e for e in self._effects if not e.negated)

    def deletes(self) -> FrozenSet[Proposition]:
        """Effects that make a proposition false"""
        return frozenset(e for e in self._effects if e.negated)

    def sorted_preconditions(self) -> List[Proposition]:
        """Preconditions in deterministic (name, negated) order"""
        return _sorted_props(self._preconditions)

    def sorted_effects(self) -> List[Proposition]:
        """Effects in deterministic (name, negated) order"""
        return _sorted_props(self._effects)

    def to_string(self) -> str:
        """
        Human-readable multi-line description

        Returns:
            String listing the action's preconditions and effects
        """
        lines = [f"Action: {self._name}", "\tPreconditions:"]
        for pre in self.sorted_preconditions():
            lines.append(f"\t\t{pre}")
        lines.append("\tEffects:")
        for effect in self.sorted_effects():
            lines.append(f"\t\t{effect}")
        return "\n".join(lines)

    def __hash__(self) -> int:
        """Hash based on name only"""
        return hash(self._name)

    def __eq__(self, other) -> bool:
        """Equality based on name only"""
        if not isinstance(other, Action):
            return False
        return self._name == other._name

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        pre = ", ".join(str(p) for p in self.sorted_preconditions())
        eff = ", ".join(str(e) for e in self.sorted_effects())
        return f"Action({self._name}: [{pre}] -> [{eff}])"
