"""
Exception types raised by the Schedulr pipeline
"""
from typing import Optional


class ScheduleError(Exception):
    """Base class for recoverable schedule-processing failures"""


class CalendarParseError(ScheduleError):
    """The uploaded file is not valid iCalendar data"""


class SuggestionGenerationError(ScheduleError):
    """The AI service did not produce a usable suggestion batch"""

    def __init__(self, message: str, error_kind: Optional[str] = None):
        super().__init__(message)
        self.error_kind = error_kind


class InvalidTransitionError(ScheduleError):
    """A session action was attempted from a state that does not allow it"""

    def __init__(self, action: str, state: str):
        super().__init__(f"Cannot {action} while schedule is {state}")
        self.action = action
        self.state = state
