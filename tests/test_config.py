"""
Unit tests for Configuration Module

Tests cover:
- Default values
- Environment overrides
- Boolean flag parsing
- Validation
- .env loading without overriding the environment
"""

import pytest

from graphplan import config as config_module
from graphplan.config import Config, get_config


# ===== Test Config Class =====

class TestConfig:
    """Test planner configuration"""

    def test_defaults(self, clean_env):
        config = Config()
        assert config.max_iterations == 5
        assert config.memoize_nogoods is True
        assert config.verbose is False
        assert config.log_runs is False
        assert config.logs_dir == "logs"

    def test_custom_iterations(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "12")
        assert Config().max_iterations == 12

    def test_invalid_iterations_fall_back(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "many")
        assert Config().max_iterations == 5

    @pytest.mark.parametrize("value, expected", [
        ("true", True), ("TRUE", True), ("1", True), ("yes", True),
        ("false", False), ("0", False), ("no", False),
    ])
    def test_flag_parsing(self, monkeypatch, value, expected):
        monkeypatch.setenv("GRAPHPLAN_VERBOSE", value)
        assert Config().verbose is expected

    def test_memoize_disabled(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_MEMOIZE", "false")
        assert Config().memoize_nogoods is False

    def test_logs_dir(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", "/tmp/graphplan-logs")
        assert Config().logs_dir == "/tmp/graphplan-logs"

    def test_validate_defaults(self, clean_env):
        assert Config().validate() is True

    def test_validate_negative_iterations(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "-1")
        assert Config().validate() is False

    def test_validate_empty_logs_dir(self, monkeypatch):
        monkeypatch.setenv("GRAPHPLAN_LOGS_DIR", "")
        assert Config().validate() is False

    def test_get_config_is_global(self):
        assert get_config() is get_config()
        assert isinstance(get_config(), Config)

    def test_settings_read_at_access_time(self, monkeypatch):
        """The global instance sees later environment changes"""
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "7")
        assert get_config().max_iterations == 7


# ===== Test .env Loading =====

class TestEnvFile:
    """Test .env file handling"""

    def test_env_file_loaded(self, tmp_path, monkeypatch, clean_env):
        package_dir = tmp_path / "src" / "graphplan"
        package_dir.mkdir(parents=True)
        (tmp_path / ".env").write_text(
            "# comment\nGRAPHPLAN_MAX_ITERATIONS=9\nnot a setting\nGRAPHPLAN_VERBOSE = true\n"
        )
        monkeypatch.setattr(config_module, "__file__", str(package_dir / "config.py"))

        config = Config()
        assert config.max_iterations == 9
        assert config.verbose is True

    def test_environment_wins_over_env_file(self, tmp_path, monkeypatch, clean_env):
        package_dir = tmp_path / "src" / "graphplan"
        package_dir.mkdir(parents=True)
        (tmp_path / ".env").write_text("GRAPHPLAN_MAX_ITERATIONS=9\n")
        monkeypatch.setattr(config_module, "__file__", str(package_dir / "config.py"))
        monkeypatch.setenv("GRAPHPLAN_MAX_ITERATIONS", "3")

        assert Config().max_iterations == 3
