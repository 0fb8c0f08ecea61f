"""
GraphPlan Engine

Owns a planning problem (starting facts, goals, actions) and the planning
graph grown for it, and drives the GraphPlan loop:
1. Build proposition level 0 from the starting facts
2. Check the goals at the current level (presence, pairwise non-mutex,
   backward extraction down to level 0)
3. If the check fails, expand the graph by one level and check again
4. Stop when a solution is found, when the graph has leveled off with the
   goals still unreachable, or when the iteration budget is spent

Example:
    planner = Graphplan()
    planner.add_starting(Proposition("x_at_a"))
    planner.add_goal(Proposition("x_at_b"))
    planner.add_action(Action("move_a_to_b",
                              [Proposition("x_at_a")],
                              [Proposition("x_at_b"), Proposition("x_at_a", True)]))
    result = planner.plan()          # PlanResult(SOLVED, level=1)
    print(planner.extract_plan())    # Stage 0: move_a_to_b
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from graphplan.config import get_config
from graphplan.graph_builder import GraphBuilder
from graphplan.partial_order_plan import PartialOrderPlan
from graphplan.planning_graph import PlanningGraph, PropositionNode, is_mutex
from graphplan.problem import Action, Proposition
from graphplan.solution_extraction import Solution, SolutionExtractor
from graphplan.utils.planning_logger import PlanningLogger


class PlanStatus(Enum):
    """Terminal state of a plan() call"""
    SOLVED = "solved"
    UNSOLVED = "unsolved"


@dataclass(frozen=True)
class PlanResult:
    """
    Outcome of a plan() call

    Attributes:
        status: SOLVED or UNSOLVED
        level: Goal level when solved; number of levels tried otherwise
        levels_built: Proposition levels present in the graph afterwards
        leveled_off: True if the search stopped because the graph stopped changing
    """
    status: PlanStatus
    level: int
    levels_built: int
    leveled_off: bool = False

    @property
    def solved(self) -> bool:
        return self.status == PlanStatus.SOLVED

    def __str__(self) -> str:
        if self.solved:
            return f"Solved({self.level})"
        suffix = ", leveled off" if self.leveled_off else ""
        return f"Unsolved({self.level}{suffix})"


class Graphplan:
    """
    GraphPlan planner over propositional STRIPS problems

    Attributes:
        starting: Literals true at level 0
        goals: Literals that must hold at the goal level
        actions: Problem actions by name
        graph: Planning graph arena (owned; released by reset())
        solution: Action nodes chosen per action level by the last solved plan() call
        solution_level: Goal level of the last solved plan() call
    """

    def __init__(self, memoize: Optional[bool] = None, verbose: Optional[bool] = None,
                 logger: Optional[PlanningLogger] = None):
        """
        Initialize the planner

        Args:
            memoize: Memoize failed goal sets during extraction (default from config)
            verbose: Print progress (default from config)
            logger: Optional run logger receiving per-level statistics
        """
        config = get_config()
        self.memoize = config.memoize_nogoods if memoize is None else memoize
        self.verbose = config.verbose if verbose is None else verbose
        self.logger = logger

        self.starting: Set[Proposition] = set()
        self.goals: Set[Proposition] = set()
        self.actions: Dict[str, Action] = {}

        self.graph = PlanningGraph()
        self.extractor = SolutionExtractor(self.graph, memoize=self.memoize, verbose=self.verbose)
        self._builder: Optional[GraphBuilder] = None

        self.solution: Optional[Solution] = None
        self.solution_level: Optional[int] = None

    # ========== PROBLEM DEFINITION ==========

    def add_starting(self, fact: Proposition, deleted: bool = False) -> None:
        """
        Add a starting fact

        Args:
            fact: Literal true at level 0
            deleted: Store the negation of `fact` instead
        """
        self.starting.add(fact.get_negated() if deleted else fact)
        self.reset()

    def add_goal(self, fact: Proposition, deleted: bool = False) -> None:
        """
        Add a goal fact

        Args:
            fact: Literal required at the goal level
            deleted: Require the negation of `fact` instead
        """
        self.goals.add(fact.get_negated() if deleted else fact)
        self.solution = None
        self.solution_level = None

    def add_action(self, action: Action) -> None:
        """Add an action (an action with an already-known name is ignored)"""
        if action.name in self.actions:
            return
        self.actions[action.name] = action
        self.reset()

    def get_starting(self) -> Set[Proposition]:
        return self.starting

    def get_goals(self) -> Set[Proposition]:
        return self.goals

    def get_actions(self) -> List[Action]:
        return sorted(self.actions.values(), key=lambda a: a.name)

    # ========== PLANNING ==========

    def reset(self) -> None:
        """Release the planning graph and everything derived from it"""
        self.graph.clear()
        self.extractor.reset()
        self._builder = None
        self.solution = None
        self.solution_level = None

    def plan(self, iterations: Optional[int] = None) -> PlanResult:
        """
        Grow the planning graph until the goals can be extracted

        Levels already built by an earlier call are reused.

        Args:
            iterations: Maximum number of expansions (default from config, 5)

        Returns:
            PlanResult: Solved(level) or Unsolved(levels tried)
        """
        budget = get_config().max_iterations if iterations is None else iterations
        if budget < 0:
            raise ValueError(f"Iteration budget must be non-negative, got {budget}")

        if self.verbose:
            print(f"[Graphplan] Planning with {len(self.starting)} starting fact(s), "
                  f"{len(self.goals)} goal(s), {len(self.actions)} action(s), budget {budget}")

        self.solution = None
        self.solution_level = None
        level = self._ensure_level(0)

        while True:
            solution = self._find_solution(self.graph.propositions_at(level))
            satisfied = solution is not None
            if self.logger:
                self.logger.log_goal_check(level, satisfied)
            if self.verbose:
                print(f"[Graphplan] Level {level}: goal check "
                      f"{'satisfied' if satisfied else 'failed'}")

            if satisfied:
                self.solution = solution
                self.solution_level = level
                return self._finish(PlanResult(PlanStatus.SOLVED, level, self.graph.num_levels))

            if level >= budget:
                return self._finish(PlanResult(PlanStatus.UNSOLVED, budget, self.graph.num_levels))

            if self._builder.has_leveled_off(level) and not self.goals_reachable(level):
                return self._finish(PlanResult(PlanStatus.UNSOLVED, level, self.graph.num_levels,
                                               leveled_off=True))

            level = self._ensure_level(level + 1)

    def goal_check(self, level_props: Iterable[PropositionNode]) -> bool:
        """
        Check whether the goals hold at a proposition level

        Every goal must be instantiated by some node of `level_props`, the
        matched nodes must be pairwise non-mutex, and backward extraction must
        find non-mutex supporting actions down to level 0. The stored plan is
        left untouched; only plan() records one.

        Args:
            level_props: Proposition nodes of a single level

        Returns:
            True if the goals are achievable at this level
        """
        return self._find_solution(level_props) is not None

    def _find_solution(self, level_props: Iterable[PropositionNode]) -> Optional[Solution]:
        found_goals = self._match_goals(level_props)
        if found_goals is None or is_mutex(found_goals):
            return None
        return self.extractor.level_goal_check(found_goals)

    def goals_reachable(self, level: int) -> bool:
        """Check that all goals are present and pairwise non-mutex at a level"""
        found_goals = self._match_goals(self.graph.propositions_at(level))
        return found_goals is not None and not is_mutex(found_goals)

    def extract_plan(self) -> Optional[PartialOrderPlan]:
        """
        Turn the last solved plan() call into a plan

        Returns:
            PartialOrderPlan with one stage per level, or None if nothing was solved
        """
        if self.solution is None or self.solution_level is None:
            return None
        return PartialOrderPlan.from_solution(self.graph, self.solution, self.solution_level)

    def _match_goals(self, level_props: Iterable[PropositionNode]) -> Optional[List[PropositionNode]]:
        props = list(level_props)
        found: List[PropositionNode] = []
        for goal in sorted(self.goals, key=lambda p: (p.name, p.negated)):
            match = next((node for node in props if node.instance_of(goal)), None)
            if match is None:
                return None
            found.append(match)
        return found

    def _ensure_level(self, level: int) -> int:
        """Build proposition levels up to `level` if not built yet"""
        if self._builder is None:
            self._builder = GraphBuilder(self.graph, self.actions.values(), verbose=self.verbose)

        if self.graph.num_levels == 0:
            self._builder.build_initial_level(self.starting)
            self._log_level(0)

        while self.graph.num_levels <= level:
            built = self._builder.expand()
            self._log_level(built)

        return level

    def _log_level(self, level: int) -> None:
        if not self.logger:
            return
        actions = self.graph.actions_at(level)
        noops = sum(1 for a in actions if a.is_noop)
        self.logger.log_level(
            level,
            num_propositions=len(self.graph.propositions_at(level)),
            num_actions=len(actions) - noops,
            num_noops=noops,
            action_mutex_pairs=self.graph.count_action_mutexes(level),
            proposition_mutex_pairs=self.graph.count_proposition_mutexes(level),
        )

    def _finish(self, result: PlanResult) -> PlanResult:
        if self.verbose:
            print(f"[Graphplan] Result: {result}")
        if self.logger:
            plan = self.extract_plan() if result.solved else None
            stages = [sorted(a.name for a in stage) for stage in plan] if plan else []
            self.logger.log_result(
                result.solved, result.level,
                leveled_off=result.leveled_off,
                plan_stages=stages,
                goal_sets_expanded=self.extractor.goal_sets_expanded,
                nogood_hits=self.extractor.nogood_hits,
            )
        return result

    # ========== DIAGNOSTICS ==========

    def get_statistics(self) -> Dict[str, int]:
        """Graph and extraction statistics"""
        stats = self.graph.get_statistics()
        stats["goal_sets_expanded"] = self.extractor.goal_sets_expanded
        stats["nogood_hits"] = self.extractor.nogood_hits
        stats["nogoods"] = sum(len(s) for s in self.extractor.nogoods.values())
        return stats

    def to_string(self) -> str:
        """
        Human-readable dump of the problem and, after planning, the graph

        Not a stable serialization format.
        """
        lines = ["Starting Propositions:"]
        for prop in sorted(self.starting, key=lambda p: (p.name, p.negated)):
            lines.append(f"\t{prop}")

        lines.append("Goal Propositions:")
        for prop in sorted(self.goals, key=lambda p: (p.name, p.negated)):
            lines.append(f"\t{prop}")

        lines.append("Actions:")
        for action in self.get_actions():
            lines.append(f"\t{action.name}")
            lines.append("\t\tPreconditions:")
            for pre in action.sorted_preconditions():
                lines.append(f"\t\t\t{pre}")
            lines.append("\t\tEffects:")
            for effect in action.sorted_effects():
                lines.append(f"\t\t\t{effect}")

        for level in range(self.graph.num_levels):
            lines.append(f"Level {level}:")
            if level > 0:
                real_actions = [a for a in self.graph.actions_at(level) if not a.is_noop]
                lines.append(f"\tActions: {', '.join(a.get_name() for a in real_actions)}")
            for node in self.graph.propositions_at(level):
                mutex = sorted(str(self.graph.proposition_nodes[i].proposition) for i in node.mutex)
                mutex_str = f" mutex {{{', '.join(mutex)}}}" if mutex else ""
                lines.append(f"\t{node.proposition}{mutex_str}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return (f"Graphplan(starting={len(self.starting)}, goals={len(self.goals)}, "
                f"actions={len(self.actions)}, levels={self.graph.num_levels})")
