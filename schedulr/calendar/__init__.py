"""
Calendar ingestion for Schedulr
"""

from .models import CalendarEvent
from .ics_parser import ICSParser, parse_ics, week_bounds

__all__ = ['CalendarEvent', 'ICSParser', 'parse_ics', 'week_bounds']
