"""
Backward Solution Extraction

Searches the planning graph backward from a goal level to level 0:
1. Every goal node at the current level needs one supporting action node
2. Supporting actions are chosen goal by goal, skipping any action that is
   mutex with an action already chosen at this level
3. Once every goal is supported, the union of the chosen actions'
   preconditions becomes the goal set of the level below
4. Level 0 goals (starting facts, no causes) succeed trivially

This is a satisficing backtracking search: candidate actions are tried in
action-name order and the first complete assignment wins. Goal sets that
fail at a level can be memoized as nogoods; a failed set fails regardless of
how it was reached, so memoization only changes speed.
"""

from collections import Counter
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set

from graphplan.planning_graph import PlanningGraph, PropositionNode


# Action level -> indices of the action nodes chosen at that level
Solution = Dict[int, FrozenSet[int]]


class SolutionExtractor:
    """
    Mutex-aware backward search over a PlanningGraph

    Attributes:
        graph: Planning graph to search (read-only)
        memoize: Remember failed goal sets per level
        nogoods: Level -> goal sets (node index sets) known to fail
        goal_sets_expanded: Number of goal sets searched (statistics)
        nogood_hits: Number of searches answered from the nogood table
    """

    def __init__(self, graph: PlanningGraph, memoize: bool = True, verbose: bool = False):
        self.graph = graph
        self.memoize = memoize
        self.verbose = verbose
        self.nogoods: Dict[int, Set[FrozenSet[int]]] = {}
        self.goal_sets_expanded = 0
        self.nogood_hits = 0

    def reset(self) -> None:
        """Forget memoized nogoods and statistics"""
        self.nogoods = {}
        self.goal_sets_expanded = 0
        self.nogood_hits = 0

    def level_goal_check(self, goal_nodes: Iterable[PropositionNode]) -> Optional[Solution]:
        """
        Check whether a set of same-level goal nodes can be supported down to level 0

        Args:
            goal_nodes: Proposition nodes of one level

        Returns:
            Chosen action nodes per action level, or None if no support exists
        """
        goals = self._order_goals(goal_nodes)

        # Base case: level 0 facts have no producers
        if all(not goal.causes for goal in goals):
            return {}

        level = goals[0].level
        key = frozenset(goal.index for goal in goals)
        if self.memoize and key in self.nogoods.get(level, ()):
            self.nogood_hits += 1
            return None

        self.goal_sets_expanded += 1
        result = self.sub_level_goal_check(goals, 0, {})

        if result is None and self.memoize:
            self.nogoods.setdefault(level, set()).add(key)
        if self.verbose:
            outcome = "supported" if result is not None else "no support"
            print(f"[Solution Extraction] Level {level}: "
                  f"{[str(g.proposition) for g in goals]} -> {outcome}")
        return result

    def sub_level_goal_check(self, goal_nodes: List[PropositionNode], cursor: int,
                             chosen_causes: Mapping[int, int]) -> Optional[Solution]:
        """
        Choose a supporting action for each of goal_nodes[cursor:] and descend

        Goals are assigned depth-first with one candidate iterator per goal
        on an explicit stack. Backtracking pops the goal's assignment, so each
        branch sees exactly the choices made above it.

        Args:
            goal_nodes: Goals of the current level, in search order
            cursor: Position of the first goal still to support
            chosen_causes: Goal node index -> chosen action node index so far
                           (never mutated)

        Returns:
            Chosen action nodes per action level, or None on exhaustion
        """
        if cursor == len(goal_nodes):
            return self._descend(chosen_causes)

        assignment = dict(chosen_causes)
        in_use = Counter(assignment.values())
        frames: List[Iterator[int]] = [iter(self._order_causes(goal_nodes[cursor]))]

        while frames:
            position = cursor + len(frames) - 1
            goal = goal_nodes[position]

            previous = assignment.pop(goal.index, None)
            if previous is not None:
                in_use[previous] -= 1
                if not in_use[previous]:
                    del in_use[previous]

            candidate = next((c for c in frames[-1] if self._compatible(c, in_use)), None)
            if candidate is None:
                frames.pop()
                continue

            assignment[goal.index] = candidate
            in_use[candidate] += 1

            if position + 1 < len(goal_nodes):
                frames.append(iter(self._order_causes(goal_nodes[position + 1])))
                continue

            result = self._descend(assignment)
            if result is not None:
                return result

        return None

    def _compatible(self, candidate: int, in_use: Counter) -> bool:
        """True if the action is not mutex with any action already chosen"""
        return in_use.keys().isdisjoint(self.graph.action_nodes[candidate].mutex)

    def _descend(self, chosen_causes: Mapping[int, int]) -> Optional[Solution]:
        """Recurse into the level below using the chosen actions' preconditions"""
        chosen = frozenset(chosen_causes.values())
        subgoal_indices: Set[int] = set()
        for action_index in chosen:
            subgoal_indices |= self.graph.action_nodes[action_index].preconditions

        action_level = self.graph.action_nodes[next(iter(chosen))].level
        below = self.level_goal_check(self.graph.prop_nodes(subgoal_indices))
        if below is None:
            return None

        solution = dict(below)
        solution[action_level] = chosen
        return solution

    def _order_goals(self, goal_nodes: Iterable[PropositionNode]) -> List[PropositionNode]:
        unique = {node.index: node for node in goal_nodes}
        return sorted(unique.values(), key=lambda n: (n.proposition.name, n.proposition.negated))

    def _order_causes(self, goal: PropositionNode) -> List[int]:
        return sorted(goal.causes, key=lambda i: self.graph.action_nodes[i].action.name)
