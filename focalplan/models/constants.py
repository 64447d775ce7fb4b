"""Constants for focalplan.

This module centralizes all magic numbers and default values used throughout the application.
"""

from datetime import time

# Record defaults
DEFAULT_TASK_DURATION_SECONDS = 3600
DEFAULT_ENERGY_LEVEL = 2
DEFAULT_TASK_ICON = "📝"
DEFAULT_TASK_COLOR = "sage"
DEFAULT_TODO_COLOR = "sky"

# Effort classification
SHORT_TASK_SECONDS = 15 * 60
LOW_ENERGY_MAX = 1
MEDIUM_ENERGY_MAX = 2

# Recurrence
OCCURRENCE_SEARCH_DAYS = 366
# Feb 29 anchors can go eight years without an occurrence (2096 to 2104)
YEARLY_SEARCH_DAYS = 8 * 366

# Todos with a due date but no due time are reminded at this time of day
DEFAULT_TODO_REMINDER_TIME = time(9, 0)

MINUTES_PER_DAY = 24 * 60
SECONDS_PER_DAY = 24 * 60 * 60
