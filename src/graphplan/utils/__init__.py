"""
Utility modules for the GraphPlan planner

Contains shared utility functions and classes used across the package.
"""

from .planning_logger import PlanningLogger, PlanningRecord

__all__ = ['PlanningLogger', 'PlanningRecord']
