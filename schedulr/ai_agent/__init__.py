"""
AI study-suggestion adapters for Schedulr
"""

from .suggestion_service import (
    StudySuggestionService,
    SuggestionDecodeResult,
    SuggestionErrorKind,
    decode_suggestions,
)

__all__ = ['StudySuggestionService', 'SuggestionDecodeResult', 'SuggestionErrorKind', 'decode_suggestions']
