"""
Planning Graph Data Structures

This module defines the leveled graph GraphPlan builds and searches:
- PropositionNode: A proposition instantiated at one level of the graph
- ActionNode: An action (or no-op) instantiated at one level of the graph
- PlanningGraph: Arena owning every node, addressed by stable integer indices

Levels alternate proposition layers and action layers. Proposition level 0
holds the starting facts. Action level k (k >= 1) holds the action nodes whose
preconditions live at proposition level k-1 and whose effects live at
proposition level k.

All links between nodes (supply, causes, preconditions, effects, mutex) are
sets of node indices into the arena, so the graph never holds direct object
cycles and is released in bulk by clear().
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from graphplan.problem import Action, Proposition


NOOP_PREFIX = "noop"


def make_noop_action(proposition: Proposition) -> Action:
    """
    Build the maintenance action for a proposition

    Example:
        x_at_a → noop[x_at_a]: pre {x_at_a} → effects {x_at_a}
    """
    return Action(f"{NOOP_PREFIX}[{proposition}]", [proposition], [proposition])


@dataclass(eq=False)
class PropositionNode:
    """
    A proposition at a specific graph level

    Attributes:
        index: Position of this node in the arena
        proposition: The literal this node instantiates
        level: Proposition level (0 = starting facts)
        supply: Action nodes (level + 1) that use this node as precondition
        causes: Action nodes (same level) that produce this node
        mutex: Proposition nodes (same level) mutually exclusive with this one
    """
    index: int
    proposition: Proposition
    level: int
    supply: Set[int] = field(default_factory=set)
    causes: Set[int] = field(default_factory=set)
    mutex: Set[int] = field(default_factory=set)

    def instance_of(self, proposition: Proposition) -> bool:
        """Check if this node instantiates the given literal"""
        return self.proposition == proposition

    def get_name(self) -> str:
        return self.proposition.name

    def is_negated(self) -> bool:
        return self.proposition.negated

    def __str__(self) -> str:
        return f"{self.proposition}@{self.level}"

    def __repr__(self) -> str:
        return f"PropositionNode(#{self.index} {self.proposition}@{self.level})"


@dataclass(eq=False)
class ActionNode:
    """
    An action at a specific graph level

    Attributes:
        index: Position of this node in the arena
        action: The action this node instantiates
        level: Action level (effects live at proposition level `level`)
        is_noop: Whether this is a synthesized maintenance action
        preconditions: Proposition nodes at level - 1
        effects: Proposition nodes at level
        mutex: Action nodes (same level) mutually exclusive with this one
    """
    index: int
    action: Action
    level: int
    is_noop: bool = False
    preconditions: Set[int] = field(default_factory=set)
    effects: Set[int] = field(default_factory=set)
    mutex: Set[int] = field(default_factory=set)

    def is_instance_of(self, action: Action) -> bool:
        return self.action == action

    def get_name(self) -> str:
        return self.action.name

    def __str__(self) -> str:
        return f"{self.action.name}@{self.level}"

    def __repr__(self) -> str:
        kind = "noop " if self.is_noop else ""
        return f"ActionNode(#{self.index} {kind}{self.action.name}@{self.level})"


class PlanningGraph:
    """
    Arena of proposition and action nodes, organized by level

    The graph only grows: nodes are appended and never removed individually.
    Nodes of superseded levels are kept so that back-links from later levels
    remain valid for solution extraction.

    Attributes:
        proposition_nodes: Every proposition node, indexed by node.index
        action_nodes: Every action node, indexed by node.index
    """

    def __init__(self):
        self.proposition_nodes: List[PropositionNode] = []
        self.action_nodes: List[ActionNode] = []
        self._proposition_levels: List[Dict[Proposition, int]] = []
        self._action_levels: List[List[int]] = []

    # ========== CONSTRUCTION ==========

    def add_level(self) -> int:
        """
        Open a new (empty) proposition level and its incoming action level

        Returns:
            Index of the new level
        """
        self._proposition_levels.append({})
        self._action_levels.append([])
        return len(self._proposition_levels) - 1

    def new_proposition_node(self, proposition: Proposition, level: int) -> PropositionNode:
        """
        Create a proposition node at a level

        Args:
            proposition: Literal to instantiate
            level: Existing proposition level

        Returns:
            The new node (already registered in the level index)
        """
        node = PropositionNode(len(self.proposition_nodes), proposition, level)
        self.proposition_nodes.append(node)
        self._proposition_levels[level][proposition] = node.index
        return node

    def get_or_create_proposition_node(self, proposition: Proposition, level: int) -> PropositionNode:
        """Reuse the node for a literal at a level, creating it if missing"""
        existing = self.find_proposition(proposition, level)
        if existing is not None:
            return existing
        return self.new_proposition_node(proposition, level)

    def new_action_node(self, action: Action, level: int, is_noop: bool = False) -> ActionNode:
        """Create an action node at an action level"""
        node = ActionNode(len(self.action_nodes), action, level, is_noop)
        self.action_nodes.append(node)
        self._action_levels[level].append(node.index)
        return node

    def connect_precondition(self, action_node: ActionNode, prop_node: PropositionNode) -> None:
        """Link an action node to a precondition node (records supply)"""
        action_node.preconditions.add(prop_node.index)
        prop_node.supply.add(action_node.index)

    def connect_effect(self, action_node: ActionNode, prop_node: PropositionNode) -> None:
        """Link an action node to an effect node (records cause)"""
        action_node.effects.add(prop_node.index)
        prop_node.causes.add(action_node.index)

    def add_proposition_mutex(self, first: PropositionNode, second: PropositionNode) -> None:
        """Mark two same-level propositions as mutex (symmetric)"""
        if first.index == second.index:
            return
        first.mutex.add(second.index)
        second.mutex.add(first.index)

    def add_action_mutex(self, first: ActionNode, second: ActionNode) -> None:
        """Mark two same-level actions as mutex (symmetric)"""
        if first.index == second.index:
            return
        first.mutex.add(second.index)
        second.mutex.add(first.index)

    def clear(self) -> None:
        """Release every node and level"""
        self.proposition_nodes = []
        self.action_nodes = []
        self._proposition_levels = []
        self._action_levels = []

    # ========== QUERIES ==========

    @property
    def num_levels(self) -> int:
        return len(self._proposition_levels)

    def find_proposition(self, proposition: Proposition, level: int) -> Optional[PropositionNode]:
        """Find the node instantiating a literal at a level"""
        index = self._proposition_levels[level].get(proposition)
        if index is None:
            return None
        return self.proposition_nodes[index]

    def propositions_at(self, level: int) -> List[PropositionNode]:
        """Proposition nodes of a level, ordered by literal"""
        nodes = [self.proposition_nodes[i] for i in self._proposition_levels[level].values()]
        return sorted(nodes, key=lambda n: (n.proposition.name, n.proposition.negated))

    def actions_at(self, level: int) -> List[ActionNode]:
        """Action nodes of an action level, in creation order"""
        return [self.action_nodes[i] for i in self._action_levels[level]]

    def literals_at(self, level: int) -> Set[Proposition]:
        return set(self._proposition_levels[level].keys())

    def prop_nodes(self, indices: Iterable[int]) -> List[PropositionNode]:
        return [self.proposition_nodes[i] for i in indices]

    def act_nodes(self, indices: Iterable[int]) -> List[ActionNode]:
        return [self.action_nodes[i] for i in indices]

    def count_proposition_mutexes(self, level: int) -> int:
        """Number of unordered mutex pairs among a level's propositions"""
        return sum(len(n.mutex) for n in self.propositions_at(level)) // 2

    def count_action_mutexes(self, level: int) -> int:
        """Number of unordered mutex pairs among a level's actions"""
        return sum(len(n.mutex) for n in self.actions_at(level)) // 2

    def get_statistics(self) -> Dict[str, int]:
        """Get graph statistics"""
        return {
            "num_levels": self.num_levels,
            "num_proposition_nodes": len(self.proposition_nodes),
            "num_action_nodes": len(self.action_nodes),
            "num_noop_nodes": sum(1 for a in self.action_nodes if a.is_noop),
        }

    def to_dot(self, include_noops: bool = False) -> str:
        """
        Generate DOT format for visualization

        Args:
            include_noops: Also draw maintenance actions

        Returns:
            DOT format string (one column per level, mutex edges dashed red)
        """
        lines = ["digraph PlanningGraph {"]
        lines.append("  rankdir=LR;")
        lines.append("")

        for level in range(self.num_levels):
            lines.append(f"  subgraph cluster_p{level} {{")
            lines.append(f'    label="P{level}";')
            for node in self.propositions_at(level):
                label = str(node.proposition).replace('"', '\\"')
                lines.append(f'    p{node.index} [label="{label}", shape=ellipse];')
            lines.append("  }")

            if level == 0:
                continue
            lines.append(f"  subgraph cluster_a{level} {{")
            lines.append(f'    label="A{level}";')
            for node in self.actions_at(level):
                if node.is_noop and not include_noops:
                    continue
                label = node.action.name.replace('"', '\\"')
                lines.append(f'    a{node.index} [label="{label}", shape=box];')
            lines.append("  }")

        lines.append("")
        for node in self.action_nodes:
            if node.is_noop and not include_noops:
                continue
            for pre in sorted(node.preconditions):
                lines.append(f"  p{pre} -> a{node.index};")
            for eff in sorted(node.effects):
                lines.append(f"  a{node.index} -> p{eff};")

        for node in self.proposition_nodes:
            for other in sorted(node.mutex):
                if other > node.index:
                    lines.append(f"  p{node.index} -> p{other} [dir=none, style=dashed, color=red];")

        lines.append("}")
        return "\n".join(lines)

    def __str__(self) -> str:
        stats = self.get_statistics()
        return (f"PlanningGraph(levels={stats['num_levels']}, "
                f"propositions={stats['num_proposition_nodes']}, "
                f"actions={stats['num_action_nodes']})")

    def __repr__(self) -> str:
        return self.__str__()


def is_mutex(nodes: Iterable[PropositionNode]) -> bool:
    """
    Check whether any two distinct nodes of a set are mutex

    Args:
        nodes: Proposition nodes of a single level

    Returns:
        True if some pair appears in each other's mutex sets
    """
    node_list = list(nodes)
    for i, first in enumerate(node_list):
        for second in node_list[i + 1:]:
            if first.index != second.index and second.index in first.mutex:
                return True
    return False
