"""
Tests for the command-line entry point

Tests cover:
- Exit codes for solved, unsolved and invalid problems
- Plan printing
- PDDL input
- Run records written with --log
"""

import json

import pytest

from graphplan.main import build_parser, main


@pytest.fixture
def problem_file(tmp_path):
    path = tmp_path / "move.txt"
    path.write_text(
        "INIT: x_at_a\n"
        "GOAL: x_at_c\n"
        "ACTION: move_a_to_b PRECONDITIONS: x_at_a EFFECTS: x_at_b !x_at_a\n"
        "ACTION: move_b_to_c PRECONDITIONS: x_at_b EFFECTS: x_at_c !x_at_b\n"
    )
    return str(path)


class TestArguments:
    """Test argument parsing"""

    def test_defaults(self):
        args = build_parser().parse_args(["problem.txt"])
        assert args.problem == "problem.txt"
        assert args.iterations is None
        assert args.pddl is None
        assert not args.verbose and not args.log

    def test_pddl_pair(self):
        args = build_parser().parse_args(["--pddl", "d.pddl", "p.pddl"])
        assert args.pddl == ["d.pddl", "p.pddl"]

    def test_no_input_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2


class TestExitCodes:
    """Test CLI outcomes"""

    def test_solved(self, problem_file, capsys, clean_env):
        assert main([problem_file]) == 0
        out = capsys.readouterr().out
        assert "Result: Solved(2)" in out
        assert "Stage 0\n\tmove_a_to_b" in out
        assert "Stage 1\n\tmove_b_to_c" in out

    def test_unsolved_within_budget(self, problem_file, capsys, clean_env):
        assert main([problem_file, "--iterations", "1"]) == 1
        assert "Unsolved(1)" in capsys.readouterr().out

    def test_leveled_off(self, examples_dir, capsys, clean_env):
        assert main([str(examples_dir / "unreachable.txt")]) == 1
        assert "leveled off" in capsys.readouterr().out

    def test_parse_error(self, tmp_path, capsys, clean_env):
        path = tmp_path / "bad.txt"
        path.write_text("INIT: a\nGOAL b\n")
        assert main([str(path)]) == 2
        assert "ERROR: 2:6" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys, clean_env):
        assert main([str(tmp_path / "missing.txt")]) == 2

    def test_problem_path_is_directory(self, tmp_path, capsys, clean_env):
        assert main([str(tmp_path)]) == 2
        assert "ERROR:" in capsys.readouterr().out

    def test_invalid_utf8(self, tmp_path, capsys, clean_env):
        """Undecodable bytes are invalid input, not a crash"""
        path = tmp_path / "binary.txt"
        path.write_bytes(b"INIT: a\xff\xfe\nGOAL: a\n")
        assert main([str(path)]) == 2
        assert "ERROR:" in capsys.readouterr().out

    def test_malformed_pddl_domain(self, tmp_path, test_data_dir, capsys, clean_env):
        """pyperplan parse errors are reported as invalid input"""
        domain = tmp_path / "broken_domain.pddl"
        domain.write_text("(define (domain broken) (:predicates (p)")
        problem = str(test_data_dir / "blocksworld_two_blocks.pddl")
        assert main(["--pddl", str(domain), problem]) == 2
        assert "ERROR:" in capsys.readouterr().out

    def test_negative_iterations(self, problem_file, capsys, clean_env):
        assert main([problem_file, "--iterations", "-1"]) == 2

    def test_invalid_config(self, problem_file, monkeypatch, capsys):
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "-3")
        assert main([problem_file]) == 2

    def test_goals_already_hold(self, tmp_path, capsys, clean_env):
        path = tmp_path / "trivial.txt"
        path.write_text("INIT: a GOAL: a")
        assert main([str(path)]) == 0
        assert "(goals already hold)" in capsys.readouterr().out

    def test_show_graph(self, problem_file, capsys, clean_env):
        main([problem_file, "--show-graph"])
        out = capsys.readouterr().out
        assert "Starting Propositions:" in out
        assert "Level 2:" in out

    def test_pddl(self, domain_file, test_data_dir, capsys, clean_env):
        problem = str(test_data_dir / "blocksworld_two_blocks.pddl")
        assert main(["--pddl", domain_file, problem]) == 0
        out = capsys.readouterr().out
        assert "pick-up_a" in out
        assert "stack_a_b" in out


class TestRunRecords:
    """Test --log output"""

    def test_log_written(self, problem_file, temp_log_dir, monkeypatch, capsys, clean_env):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", str(temp_log_dir))
        assert main([problem_file, "--log"]) == 0

        records = list(temp_log_dir.glob("*_graphplan/execution.json"))
        assert len(records) == 1
        data = json.loads(records[0].read_text())
        assert data["success"] is True
        assert data["status"] == "solved"
        assert data["num_actions"] == 2
        assert data["source"] == problem_file

    def test_log_on_parse_error(self, tmp_path, temp_log_dir, monkeypatch, capsys, clean_env):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", str(temp_log_dir))
        path = tmp_path / "bad.txt"
        path.write_text("GOAL")
        assert main([str(path), "--log"]) == 2

        data = json.loads(next(temp_log_dir.glob("*_graphplan/execution.json")).read_text())
        assert data["status"] == "failed"
        assert data["success"] is False

    def test_log_on_malformed_pddl(self, tmp_path, test_data_dir, temp_log_dir, monkeypatch,
                                   capsys, clean_env):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", str(temp_log_dir))
        domain = tmp_path / "broken_domain.pddl"
        domain.write_text("(define (domain broken) (:predicates (p)")
        problem = str(test_data_dir / "blocksworld_two_blocks.pddl")
        assert main(["--pddl", str(domain), problem, "--log"]) == 2

        data = json.loads(next(temp_log_dir.glob("*_graphplan/execution.json")).read_text())
        assert data["status"] == "failed"
        assert data["error"]

    def test_log_runs_from_config(self, problem_file, temp_log_dir, monkeypatch, capsys, clean_env):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", str(temp_log_dir))
        monkeypatch.setenv("GRAPHPLAN_LOG_RUNS", "true")
        main([problem_file])
        assert list(temp_log_dir.glob("*_graphplan/execution.json"))
