"""
Pytest configuration and shared fixtures for GraphPlan tests

This file provides common problems, planners and utilities used across all tests.
"""

import pytest
from pathlib import Path

from graphplan.graphplan_planner import Graphplan
from graphplan.problem import Action, Proposition

from tests.plan_helpers import make_birthday_planner


# ===== Test Data Directory =====

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """Returns the test data directory path"""
    return Path(__file__).parent / "test_data"


@pytest.fixture(scope="session")
def domain_file(test_data_dir: Path) -> str:
    """Returns path to test PDDL domain file"""
    return str(test_data_dir / "blocksworld_domain.pddl")


@pytest.fixture(scope="session")
def examples_dir() -> Path:
    """Returns the example problem directory path"""
    return Path(__file__).parent.parent / "examples" / "problems"


# ===== Environment Configuration Fixtures =====

@pytest.fixture
def clean_env(monkeypatch):
    """Remove every GRAPHPLAN_* setting so defaults apply (restored afterwards)"""
    for name in ("GRAPHPLAN_MAX_ITERATIONS", "GRAPHPLAN_MEMOIZE", "GRAPHPLAN_VERBOSE",
                 "GRAPHPLAN_LOG_RUNS", "GRAPHPLAN_LOGS_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


# ===== Problem Fixtures =====

@pytest.fixture
def move_a_to_b() -> Action:
    """x_at_a → x_at_b"""
    return Action("move_a_to_b",
                  [Proposition("x_at_a")],
                  [Proposition("x_at_b"), Proposition("x_at_a", True)])


@pytest.fixture
def move_b_to_c() -> Action:
    """x_at_b → x_at_c"""
    return Action("move_b_to_c",
                  [Proposition("x_at_b")],
                  [Proposition("x_at_c"), Proposition("x_at_b", True)])


@pytest.fixture
def move_planner(move_a_to_b, move_b_to_c) -> Graphplan:
    """Two-step chain: x_at_a → x_at_b → x_at_c"""
    planner = Graphplan(memoize=True, verbose=False)
    planner.add_starting(Proposition("x_at_a"))
    planner.add_goal(Proposition("x_at_c"))
    planner.add_action(move_a_to_b)
    planner.add_action(move_b_to_c)
    return planner


@pytest.fixture
def birthday_actions():
    """Actions of the surprise birthday dinner problem"""
    return [
        Action("cook", [Proposition("clean")], [Proposition("dinner")]),
        Action("wrap", [Proposition("quiet")], [Proposition("present")]),
        Action("carry", [Proposition("garb")],
               [Proposition("garb", True), Proposition("clean", True)]),
        Action("dolly", [Proposition("garb")],
               [Proposition("garb", True), Proposition("quiet", True)]),
    ]


@pytest.fixture
def birthday_planner(birthday_actions) -> Graphplan:
    """Birthday dinner: starting {garb, clean, quiet}, goals {!garb, dinner, present}"""
    return make_birthday_planner(birthday_actions)


# ===== Temporary Directory Fixtures =====

@pytest.fixture
def temp_log_dir(tmp_path) -> Path:
    """Create temporary log directory for tests"""
    log_dir = tmp_path / "logs"
    log_dir.mkdir(exist_ok=True)
    return log_dir


# ===== Test Markers =====

def pytest_collection_modifyitems(config, items):
    """Mark tests that read PDDL input"""
    for item in items:
        if "pddl" in str(item.fspath):
            item.add_marker(pytest.mark.pddl)
