"""
Event value type shared by the parser, the suggestion service and the views
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class CalendarEvent:
    """A class session or an AI-suggested study block"""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    description: Optional[str] = None
    is_study_suggestion: bool = False

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60

    @property
    def day_index(self) -> int:
        """Day of week with Sunday as 0"""
        return (self.start_time.weekday() + 1) % 7

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for JSON serialization"""
        return {
            "id": self.id,
            "title": self.title,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "location": self.location,
            "description": self.description,
            "isStudySuggestion": self.is_study_suggestion,
        }
