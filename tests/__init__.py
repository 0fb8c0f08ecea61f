"""
GraphPlan test suite

Puts the src directory on the import path so `graphplan` resolves without an
editable install.
"""

import sys
from pathlib import Path

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
