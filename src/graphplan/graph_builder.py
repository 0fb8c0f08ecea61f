"""
Planning Graph Builder

Implements level expansion and the mutex engine of GraphPlan:
1. Level 0 holds one proposition node per starting fact
2. Each expansion adds a no-op action for every live proposition
3. Every problem action whose preconditions are all present and pairwise
   non-mutex at the previous level is instantiated, and its effects are
   merged into the new proposition level
4. Action mutex is computed incrementally as each action node is placed
   (inconsistent effects, interference, competing needs)
5. Proposition mutex is computed once the new level is complete
   (negation, no non-mutex pair of supporting actions)

The builder writes into a PlanningGraph arena it does not own; the Graphplan
engine owns both the graph and the builder.
"""

from typing import Iterable, List, Optional

from graphplan.planning_graph import (
    ActionNode, PlanningGraph, PropositionNode, is_mutex, make_noop_action
)
from graphplan.problem import Action, Proposition


class GraphBuilder:
    """
    Grows a PlanningGraph one level at a time

    Attributes:
        graph: The arena receiving new nodes
        actions: Problem actions, tried in name order at every level
        verbose: Print a progress line per level
    """

    def __init__(self, graph: PlanningGraph, actions: Iterable[Action], verbose: bool = False):
        """
        Initialize graph builder

        Args:
            graph: Planning graph arena (may already hold levels)
            actions: Problem actions
            verbose: Print per-level statistics
        """
        self.graph = graph
        self.actions: List[Action] = sorted(actions, key=lambda a: a.name)
        self.verbose = verbose

    def build_initial_level(self, starting: Iterable[Proposition]) -> int:
        """
        Create proposition level 0 from the starting facts

        Returns:
            Index of the created level (always 0 on an empty graph)
        """
        level = self.graph.add_level()
        for prop in sorted(set(starting), key=lambda p: (p.name, p.negated)):
            self.graph.new_proposition_node(prop, level)

        if self.verbose:
            print(f"[Graph Builder] Level {level}: "
                  f"{len(self.graph.propositions_at(level))} starting proposition(s)")
        return level

    def expand(self) -> int:
        """
        Build the next action level and proposition level

        Returns:
            Index of the new proposition level
        """
        previous = self.graph.num_levels - 1
        if previous < 0:
            raise RuntimeError("Cannot expand a graph without an initial level")

        level = self.graph.add_level()
        placed: List[ActionNode] = []

        # Persistence: every live proposition carries over via its no-op
        for prop_node in self.graph.propositions_at(previous):
            action_node = self.graph.new_action_node(
                make_noop_action(prop_node.proposition), level, is_noop=True
            )
            self.graph.connect_precondition(action_node, prop_node)
            self._connect_effects(action_node, level)
            self._make_action_mutex_connections(placed, action_node)
            placed.append(action_node)

        # Problem actions whose preconditions are jointly available
        for action in self.actions:
            found_precond = self._match_preconditions(action, previous)
            if found_precond is None or is_mutex(found_precond):
                continue

            action_node = self.graph.new_action_node(action, level)
            for prop_node in found_precond:
                self.graph.connect_precondition(action_node, prop_node)
            self._connect_effects(action_node, level)
            self._make_action_mutex_connections(placed, action_node)
            placed.append(action_node)

        self._make_proposition_mutex_connections(level)

        if self.verbose:
            noops = sum(1 for a in placed if a.is_noop)
            print(f"[Graph Builder] Level {level}: "
                  f"{len(self.graph.propositions_at(level))} proposition(s), "
                  f"{len(placed) - noops} action(s) + {noops} no-op(s), "
                  f"{self.graph.count_action_mutexes(level)} action mutex pair(s), "
                  f"{self.graph.count_proposition_mutexes(level)} proposition mutex pair(s)")
        return level

    def has_leveled_off(self, level: int) -> bool:
        """
        Check whether a level repeats the one before it

        A level has leveled off when it holds exactly the literals of the
        previous level with the same number of mutex pairs. From then on
        every further level is identical.
        """
        if level < 1:
            return False
        if self.graph.literals_at(level) != self.graph.literals_at(level - 1):
            return False
        return (self.graph.count_proposition_mutexes(level)
                == self.graph.count_proposition_mutexes(level - 1))

    # ========== ACTION INSTANTIATION ==========

    def _match_preconditions(self, action: Action, level: int) -> Optional[List[PropositionNode]]:
        """
        Find a node at `level` for every precondition of an action

        Returns:
            Matched nodes, or None if some precondition is absent
        """
        found: List[PropositionNode] = []
        for precond in action.sorted_preconditions():
            node = self.graph.find_proposition(precond, level)
            if node is None:
                return None
            found.append(node)
        return found

    def _connect_effects(self, action_node: ActionNode, level: int) -> None:
        """Attach effect nodes at `level`, merging with existing ones"""
        for effect in action_node.action.sorted_effects():
            prop_node = self.graph.get_or_create_proposition_node(effect, level)
            self.graph.connect_effect(action_node, prop_node)

    # ========== MUTEX ENGINE ==========

    def _make_action_mutex_connections(self, placed: List[ActionNode], action_node: ActionNode) -> None:
        """Compare a new action node against every action already at its level"""
        for other in placed:
            if self._actions_mutex(action_node, other):
                self.graph.add_action_mutex(action_node, other)

    def _actions_mutex(self, first: ActionNode, second: ActionNode) -> bool:
        """
        Decide whether two same-level action nodes are mutex

        Cases:
            1. Inconsistent effects: an effect of one negates an effect of the other
            2. Interference: an effect of one negates a precondition of the other
            3. Competing needs: some preconditions of the two are mutex
        """
        first_action = first.action
        second_action = second.action

        # Case 1: inconsistent effects
        for effect in first_action.effects:
            if effect.get_negated() in second_action.effects:
                return True

        # Case 2: interference, in both directions
        for effect in first_action.effects:
            if effect.get_negated() in second_action.preconditions:
                return True
        for effect in second_action.effects:
            if effect.get_negated() in first_action.preconditions:
                return True

        # Case 3: competing needs at the previous level
        for pre_index in first.preconditions:
            pre_mutex = self.graph.proposition_nodes[pre_index].mutex
            if pre_mutex & second.preconditions:
                return True

        return False

    def _make_proposition_mutex_connections(self, level: int) -> None:
        """Compute proposition mutex for a completed level"""
        nodes = self.graph.propositions_at(level)
        for i, first in enumerate(nodes):
            for second in nodes[i + 1:]:
                # Case 1: the two literals negate each other
                if first.proposition.is_negation_of(second.proposition):
                    self.graph.add_proposition_mutex(first, second)
                # Case 2: every way of producing both uses mutex actions
                elif self._no_compatible_support(first, second):
                    self.graph.add_proposition_mutex(first, second)

    def _no_compatible_support(self, first: PropositionNode, second: PropositionNode) -> bool:
        """
        Check that no pair of supporting actions can run together

        Returns:
            True iff both nodes have causes and every (cause of first,
            cause of second) pair is two distinct mutex actions
        """
        if not first.causes or not second.causes:
            return False
        for cause in first.causes:
            cause_mutex = self.graph.action_nodes[cause].mutex
            for other_cause in second.causes:
                if cause == other_cause or other_cause not in cause_mutex:
                    return False
        return True
