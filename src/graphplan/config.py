"""
Configuration Management

Handles loading planner settings from environment variables and the .env file.
"""

import os
from pathlib import Path


class Config:
    """Configuration manager for the GraphPlan planner"""

    DEFAULT_MAX_ITERATIONS = 5

    def __init__(self):
        self._load_env()

    def _load_env(self):
        """Load environment variables from .env file"""
        env_path = Path(__file__).parent.parent.parent / ".env"

        if env_path.exists():
            with open(env_path, 'r') as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        os.environ.setdefault(key.strip(), value.strip())

    @staticmethod
    def _flag(name: str, default: str) -> bool:
        return os.getenv(name, default).lower() in ('true', '1', 'yes')

    @property
    def max_iterations(self) -> int:
        """Default iteration budget for plan() (default: 5)"""
        try:
            return int(os.getenv('GRAPHPLAN_MAX_ITERATIONS', str(self.DEFAULT_MAX_ITERATIONS)))
        except ValueError:
            return self.DEFAULT_MAX_ITERATIONS

    @property
    def memoize_nogoods(self) -> bool:
        """Remember failed goal sets during extraction (default: True)"""
        return self._flag('GRAPHPLAN_MEMOIZE', 'true')

    @property
    def verbose(self) -> bool:
        """Print progress while planning (default: False)"""
        return self._flag('GRAPHPLAN_VERBOSE', 'false')

    @property
    def log_runs(self) -> bool:
        """Write a run record for every CLI invocation (default: False)"""
        return self._flag('GRAPHPLAN_LOG_RUNS', 'false')

    @property
    def logs_dir(self) -> str:
        """Directory for run records (default: logs)"""
        return os.getenv('GRAPHPLAN_LOGS_DIR', 'logs')

    def validate(self) -> bool:
        """Validate configuration"""
        if self.max_iterations < 0:
            return False
        if not self.logs_dir:
            return False
        return True


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config
