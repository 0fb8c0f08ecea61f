"""
Planning Logger

Records the execution trace of a GraphPlan run:
- Problem source and size
- Per-level graph statistics (propositions, actions, mutex pairs)
- Goal check outcomes
- The final result and extracted plan
- Any errors encountered

Each run is saved with a timestamp for easy tracking.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict, field


@dataclass
class PlanningRecord:
    """Complete record of a planning run"""
    timestamp: str
    source: str
    success: bool
    iteration_budget: int = 0

    # Problem
    num_starting: int = 0
    num_goals: int = 0
    num_actions: int = 0

    # Graph construction, one entry per level
    levels: List[Dict[str, Any]] = field(default_factory=list)

    # Solution extraction
    goal_checks: List[Dict[str, Any]] = field(default_factory=list)
    status: str = "pending"
    solution_level: Optional[int] = None
    leveled_off: bool = False
    plan_stages: List[List[str]] = field(default_factory=list)
    goal_sets_expanded: int = 0
    nogood_hits: int = 0
    error: Optional[str] = None

    # Metadata
    execution_time_seconds: float = 0.0


class PlanningLogger:
    """
    Logger for GraphPlan runs

    Saves structured JSON records with timestamps for each run.
    """

    def __init__(self, logs_dir: str = "logs"):
        """
        Initialize logger

        Args:
            logs_dir: Directory to save log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        self.current_record: Optional[PlanningRecord] = None
        self.start_time: Optional[datetime] = None
        self.current_log_dir: Optional[Path] = None

    def start_run(self,
                  source: str,
                  iteration_budget: int = 0,
                  num_starting: int = 0,
                  num_goals: int = 0,
                  num_actions: int = 0,
                  timestamp: str = None):
        """
        Start logging a new planning run

        Args:
            source: Where the problem came from (file path or description)
            iteration_budget: Number of levels plan() may build
            num_starting: Number of starting facts
            num_goals: Number of goal facts
            num_actions: Number of problem actions
            timestamp: Optional timestamp string (YYYYMMDD_HHMMSS format). If not provided, current time is used.
        """
        self.start_time = datetime.now()
        if timestamp is None:
            timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")

        self.current_log_dir = self.logs_dir / f"{timestamp}_graphplan"
        self.current_log_dir.mkdir(parents=True, exist_ok=True)

        self.current_record = PlanningRecord(
            timestamp=timestamp,
            source=source,
            success=False,
            iteration_budget=iteration_budget,
            num_starting=num_starting,
            num_goals=num_goals,
            num_actions=num_actions,
        )

    def log_level(self, level: int, num_propositions: int, num_actions: int,
                  num_noops: int, action_mutex_pairs: int, proposition_mutex_pairs: int):
        """Log the statistics of one built level"""
        if not self.current_record:
            return

        self.current_record.levels.append({
            "level": level,
            "propositions": num_propositions,
            "actions": num_actions,
            "noops": num_noops,
            "action_mutex_pairs": action_mutex_pairs,
            "proposition_mutex_pairs": proposition_mutex_pairs,
        })
        self._save_current_state()

    def log_goal_check(self, level: int, satisfied: bool):
        """Log the outcome of a goal check at a level"""
        if not self.current_record:
            return

        self.current_record.goal_checks.append({"level": level, "satisfied": satisfied})
        self._save_current_state()

    def log_result(self, solved: bool, level: int, leveled_off: bool = False,
                   plan_stages: Optional[List[List[str]]] = None,
                   goal_sets_expanded: int = 0, nogood_hits: int = 0):
        """
        Log the final planning result

        Args:
            solved: Whether a plan was found
            level: Goal level if solved, levels tried otherwise
            leveled_off: Whether the graph stopped changing before the budget
            plan_stages: Action names per plan stage
            goal_sets_expanded: Backward-search goal sets searched
            nogood_hits: Goal sets answered from the nogood table
        """
        if not self.current_record:
            return

        self.current_record.status = "solved" if solved else "unsolved"
        self.current_record.solution_level = level if solved else None
        self.current_record.leveled_off = leveled_off
        self.current_record.plan_stages = plan_stages or []
        self.current_record.goal_sets_expanded = goal_sets_expanded
        self.current_record.nogood_hits = nogood_hits
        self._save_current_state()

    def log_error(self, error: str):
        """Log a failure (parse error, missing file, ...)"""
        if not self.current_record:
            return

        self.current_record.status = "failed"
        self.current_record.error = str(error)
        self._save_current_state()

    def _save_current_state(self):
        """
        Save current state to both JSON and TXT files
        Called after every update
        """
        if not self.current_record or not self.current_log_dir:
            return

        if self.start_time:
            self.current_record.execution_time_seconds = (
                datetime.now() - self.start_time
            ).total_seconds()

        json_filepath = self.current_log_dir / "execution.json"
        record_dict = asdict(self.current_record)

        with open(json_filepath, 'w') as f:
            json.dump(record_dict, f, indent=2)

        txt_filepath = self.current_log_dir / "execution.txt"
        self._save_readable_format(txt_filepath, record_dict)

    def end_run(self, success: bool = True) -> Path:
        """
        End logging and save the final record

        Args:
            success: Whether the run succeeded

        Returns:
            Path to the saved log file
        """
        if not self.current_record or not self.start_time:
            raise RuntimeError("No active planning record to end")

        self.current_record.success = success
        self._save_current_state()

        if not self.current_log_dir:
            raise RuntimeError("Log directory not initialized")

        return self.current_log_dir / "execution.json"

    def _save_readable_format(self, filepath: Path, record: Dict[str, Any]):
        """Save a human-readable text version of the record"""
        with open(filepath, 'w') as f:
            f.write("="*80 + "\n")
            f.write("GRAPHPLAN EXECUTION RECORD\n")
            f.write("="*80 + "\n\n")

            f.write(f"Timestamp: {record['timestamp']}\n")
            f.write(f"Execution Time: {record['execution_time_seconds']:.2f} seconds\n")
            f.write(f"Overall Status: {'SUCCESS' if record['success'] else 'FAILED'}\n")
            f.write(f"Source: {record['source']}\n")
            f.write(f"Iteration Budget: {record['iteration_budget']}\n")
            f.write("\n")

            f.write("-"*80 + "\n")
            f.write("PROBLEM\n")
            f.write("-"*80 + "\n")
            f.write(f"Starting facts: {record['num_starting']}\n")
            f.write(f"Goals: {record['num_goals']}\n")
            f.write(f"Actions: {record['num_actions']}\n")
            f.write("\n")

            f.write("-"*80 + "\n")
            f.write("PLANNING GRAPH\n")
            f.write("-"*80 + "\n")
            for level in record['levels']:
                f.write(f"Level {level['level']}: "
                        f"{level['propositions']} propositions, "
                        f"{level['actions']} actions, {level['noops']} no-ops, "
                        f"{level['action_mutex_pairs']} action mutex, "
                        f"{level['proposition_mutex_pairs']} proposition mutex\n")
            for check in record['goal_checks']:
                outcome = "satisfied" if check['satisfied'] else "not satisfied"
                f.write(f"Goal check at level {check['level']}: {outcome}\n")
            f.write("\n")

            f.write("-"*80 + "\n")
            f.write("RESULT\n")
            f.write("-"*80 + "\n")
            f.write(f"Status: {record['status'].upper()}\n")
            if record['solution_level'] is not None:
                f.write(f"Solution level: {record['solution_level']}\n")
            if record['leveled_off']:
                f.write("Graph leveled off before a solution was found\n")
            f.write(f"Goal sets expanded: {record['goal_sets_expanded']:,}\n")
            f.write(f"Nogood hits: {record['nogood_hits']:,}\n")
            for i, stage in enumerate(record['plan_stages']):
                f.write(f"  Stage {i}: {', '.join(stage) if stage else '(no actions)'}\n")
            if record['error']:
                f.write(f"\nError: {record['error']}\n")
            f.write("\n")

            f.write("="*80 + "\n")
            f.write("END OF RECORD\n")
            f.write("="*80 + "\n")
