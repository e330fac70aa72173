"""
Utility modules for Schedulr
"""

from .logger import ScheduleLogger
from .validators import UploadValidator, SuggestionValidator

__all__ = ['ScheduleLogger', 'UploadValidator', 'SuggestionValidator']
