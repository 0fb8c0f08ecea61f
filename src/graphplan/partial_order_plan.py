"""
Partial Order Plan

Stage-indexed container of action sets. Actions within one stage are pairwise
non-mutex and may run in any order (or in parallel); stages run in sequence.
"""

from typing import Iterator, List, Mapping, FrozenSet, Set

from graphplan.planning_graph import PlanningGraph
from graphplan.problem import Action


class PartialOrderPlan:
    """
    Ordered sequence of stages, each a set of actions

    Attributes:
        stages: stages[i] is the set of actions executed at stage i
    """

    def __init__(self):
        self.stages: List[Set[Action]] = []

    @classmethod
    def from_solution(cls, graph: PlanningGraph, solution: Mapping[int, FrozenSet[int]],
                      goal_level: int) -> 'PartialOrderPlan':
        """
        Build a plan from an extracted solution

        Args:
            graph: Graph the solution was extracted from
            solution: Action level -> chosen action node indices
            goal_level: Level at which the goals were satisfied

        Returns:
            Plan with one stage per action level (stage 0 = action level 1);
            no-op actions are left out
        """
        plan = cls()
        for level in range(1, goal_level + 1):
            plan.ensure_stage(level - 1)
            for node in graph.act_nodes(solution.get(level, ())):
                if not node.is_noop:
                    plan.add_action(level - 1, node.action)
        return plan

    def ensure_stage(self, stage: int) -> None:
        """Grow the plan so that `stage` exists"""
        while len(self.stages) <= stage:
            self.stages.append(set())

    def add_action(self, stage: int, action: Action) -> None:
        """Add an action at a stage, growing the plan if needed"""
        if stage < 0:
            raise ValueError(f"Stage must be non-negative, got {stage}")
        self.ensure_stage(stage)
        self.stages[stage].add(action)

    def get_actions(self, stage: int) -> Set[Action]:
        return self.stages[stage]

    def num_stages(self) -> int:
        return len(self.stages)

    def num_actions(self) -> int:
        return sum(len(stage) for stage in self.stages)

    def is_empty(self) -> bool:
        return self.num_actions() == 0

    def linearize(self) -> List[Action]:
        """One valid total order: stages in sequence, names within a stage"""
        return [action for stage in self.stages
                for action in sorted(stage, key=lambda a: a.name)]

    def to_string(self) -> str:
        lines = []
        for stage_index, stage in enumerate(self.stages):
            lines.append(f"Stage {stage_index}")
            for action in sorted(stage, key=lambda a: a.name):
                lines.append(f"\t{action.name}")
        return "\n".join(lines)

    def __iter__(self) -> Iterator[Set[Action]]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"PartialOrderPlan(stages={self.num_stages()}, actions={self.num_actions()})"
