"""
GraphPlan: planning-graph construction and mutex-aware plan extraction

Public API:
  Proposition, Action                  problem value types
  Graphplan, PlanResult, PlanStatus    planning engine
  PartialOrderPlan                     extracted plan
  parse_problem_string / _file         problem-definition parser
  load_pddl_problem                    STRIPS PDDL loader (pyperplan)
"""

from .problem import Action, Proposition
from .planning_graph import ActionNode, PlanningGraph, PropositionNode, is_mutex
from .graphplan_planner import Graphplan, PlanResult, PlanStatus
from .partial_order_plan import PartialOrderPlan
from .problem_parser import ProblemParseError, ProblemParser, parse_problem_file, parse_problem_string
from .pddl_loader import load_pddl_problem

__version__ = "0.1.0"

__all__ = [
    'Action',
    'Proposition',
    'ActionNode',
    'PlanningGraph',
    'PropositionNode',
    'is_mutex',
    'Graphplan',
    'PlanResult',
    'PlanStatus',
    'PartialOrderPlan',
    'ProblemParseError',
    'ProblemParser',
    'parse_problem_file',
    'parse_problem_string',
    'load_pddl_problem',
]
