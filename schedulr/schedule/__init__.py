"""
Schedule session handling and weekly layout for Schedulr
"""

from .state import ScheduleSession, ScheduleStatus
from .orchestrator import ScheduleOrchestrator
from .session_store import SessionStore
from .grid_layout import build_week_grid, place_event, EventBlockView, GridPlacement, WeekGrid

__all__ = [
    'ScheduleSession', 'ScheduleStatus', 'ScheduleOrchestrator', 'SessionStore',
    'build_week_grid', 'place_event', 'EventBlockView', 'GridPlacement', 'WeekGrid',
]
