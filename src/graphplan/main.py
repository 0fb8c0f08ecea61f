"""
Main Entry Point - GraphPlan Planner

Usage:
    graphplan problems/birthday.txt
    graphplan problems/birthday.txt --iterations 10 --verbose
    graphplan --pddl domain.pddl problem.pddl --log

Exit codes:
    0  plan found
    1  no plan within the iteration budget
    2  invalid input (parse error, unreadable or missing file, bad configuration)
"""

import argparse
import sys
from typing import List, Optional

from pyperplan.pddl.errors import ParseError

from graphplan.config import get_config
from graphplan.graphplan_planner import Graphplan
from graphplan.pddl_loader import load_pddl_problem
from graphplan.problem_parser import ProblemParseError, parse_problem_file
from graphplan.utils.planning_logger import PlanningLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='graphplan',
        description='GraphPlan - plan extraction from a leveled planning graph',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  graphplan problems/birthday.txt
  graphplan problems/birthday.txt --iterations 10 --verbose
  graphplan --pddl domain.pddl problem.pddl

Problem format:
  INIT: garb clean quiet
  GOAL: !garb dinner present
  ACTION: cook PRECONDITIONS: clean EFFECTS: dinner
        '''
    )
    parser.add_argument('problem', nargs='?', help='Problem definition file')
    parser.add_argument(
        '--pddl',
        nargs=2,
        metavar=('DOMAIN', 'PROBLEM'),
        help='Load a STRIPS PDDL domain and problem instead'
    )
    parser.add_argument(
        '--iterations', '-n',
        type=int,
        default=None,
        help='Maximum number of graph expansions (default: GRAPHPLAN_MAX_ITERATIONS or 5)'
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Print progress per level')
    parser.add_argument('--no-memo', action='store_true', help='Disable nogood memoization')
    parser.add_argument('--show-graph', action='store_true', help='Print the planning graph after planning')
    parser.add_argument('--log', action='store_true', help='Write a run record under the logs directory')
    return parser


def _load_planner(args, **planner_kwargs) -> Graphplan:
    if args.pddl:
        domain_file, problem_file = args.pddl
        return load_pddl_problem(domain_file, problem_file, **planner_kwargs)
    return parse_problem_file(args.problem, **planner_kwargs)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.problem and not args.pddl:
        parser.error("a problem file or --pddl DOMAIN PROBLEM is required")

    config = get_config()
    if not config.validate():
        print("ERROR: invalid configuration (check GRAPHPLAN_MAX_ITERATIONS and GRAPHPLAN_LOGS_DIR)")
        return 2

    iterations = config.max_iterations if args.iterations is None else args.iterations
    source = " ".join(args.pddl) if args.pddl else args.problem

    logger = None
    if args.log or config.log_runs:
        logger = PlanningLogger(logs_dir=config.logs_dir)
        logger.start_run(source, iteration_budget=iterations)

    planner_kwargs = {
        "verbose": args.verbose or config.verbose,
        "memoize": False if args.no_memo else config.memoize_nogoods,
        "logger": logger,
    }

    try:
        planner = _load_planner(args, **planner_kwargs)
    except (ProblemParseError, ParseError, UnicodeDecodeError, ValueError, OSError) as e:
        print(f"ERROR: {e}")
        if logger:
            logger.log_error(str(e))
            logger.end_run(success=False)
        return 2

    if logger and logger.current_record:
        logger.current_record.num_starting = len(planner.get_starting())
        logger.current_record.num_goals = len(planner.get_goals())
        logger.current_record.num_actions = len(planner.get_actions())

    try:
        result = planner.plan(iterations)
    except ValueError as e:
        print(f"ERROR: {e}")
        if logger:
            logger.log_error(str(e))
            logger.end_run(success=False)
        return 2

    print("="*80)
    print(f"Result: {result}")
    print("="*80)

    if result.solved:
        plan = planner.extract_plan()
        print(plan.to_string() if plan and not plan.is_empty() else "(goals already hold)")
    elif result.leveled_off:
        print(f"The planning graph leveled off at level {result.level}; the goals are unreachable.")
    else:
        print(f"No plan found within {result.level} level(s). Try a larger --iterations.")

    if args.show_graph:
        print("")
        print(planner.to_string())

    if logger:
        log_file = logger.end_run(success=result.solved)
        print(f"\nRun record saved to: {log_file}")

    return 0 if result.solved else 1


if __name__ == "__main__":
    sys.exit(main())
