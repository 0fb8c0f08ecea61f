"""
PDDL Problem Loader

Loads a STRIPS PDDL domain/problem pair into a Graphplan engine.

pyperplan parses and grounds the PDDL files into a propositional task; each
ground fact becomes a Proposition and each ground operator becomes an Action
whose delete effects are negated literals:

    (:action pick-up :parameters (?x) ...)  with object a
    → Action("pick-up_a", pre {clear_a, ontable_a, handempty},
             effects {holding_a, !clear_a, !ontable_a, !handempty})
"""

from pathlib import Path
from typing import Iterable, List

from pyperplan import grounding
from pyperplan.pddl.parser import Parser

from graphplan.graphplan_planner import Graphplan
from graphplan.problem import Action, Proposition


def fact_to_name(fact: str) -> str:
    """
    Convert a pyperplan ground fact to a proposition name

    Examples:
        "(on a b)"    → "on_a_b"
        "(handempty)" → "handempty"
    """
    return "_".join(fact.strip("()").split())


def _propositions(facts: Iterable[str], negated: bool = False) -> List[Proposition]:
    return [Proposition(fact_to_name(fact), negated) for fact in sorted(facts)]


def ground_task(domain_file: str, problem_file: str):
    """
    Parse and ground a PDDL domain/problem pair with pyperplan

    Args:
        domain_file: Path to domain.pddl
        problem_file: Path to problem.pddl

    Returns:
        pyperplan Task (initial_state, goals, operators)
    """
    for path in (domain_file, problem_file):
        if not Path(path).exists():
            raise FileNotFoundError(f"PDDL file not found: {path}")

    parser = Parser(domain_file, problem_file)
    domain = parser.parse_domain()
    problem = parser.parse_problem(domain)
    return grounding.ground(problem)


def task_to_planner(task, **planner_kwargs) -> Graphplan:
    """
    Build a Graphplan engine from a grounded pyperplan task

    Args:
        task: pyperplan Task
        **planner_kwargs: Passed to Graphplan (memoize, verbose, logger)

    Returns:
        Graphplan ready for plan()
    """
    planner = Graphplan(**planner_kwargs)
    for prop in _propositions(task.initial_state):
        planner.add_starting(prop)
    for prop in _propositions(task.goals):
        planner.add_goal(prop)

    for operator in task.operators:
        effects = _propositions(operator.add_effects) + _propositions(operator.del_effects, negated=True)
        planner.add_action(Action(
            fact_to_name(operator.name),
            _propositions(operator.preconditions),
            effects,
        ))
    return planner


def load_pddl_problem(domain_file: str, problem_file: str, **planner_kwargs) -> Graphplan:
    """
    Load a STRIPS PDDL problem into a Graphplan engine

    Args:
        domain_file: Path to domain.pddl
        problem_file: Path to problem.pddl
        **planner_kwargs: Passed to Graphplan

    Returns:
        Graphplan ready for plan()
    """
    task = ground_task(domain_file, problem_file)
    return task_to_planner(task, **planner_kwargs)
