"""focalplan - scheduling and selection engine for a personal task/todo planner."""

__version__ = "0.1.0"
