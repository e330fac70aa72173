"""
Session state for one schedule upload flow

A ScheduleSession is an immutable value; every action returns a new session.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from schedulr.calendar.models import CalendarEvent
from schedulr.exceptions import InvalidTransitionError


class ScheduleStatus(str, Enum):
    INITIAL = "initial"
    PARSING = "parsing"
    GENERATING = "generating"
    DISPLAYING = "displaying"
    ERROR = "error"


@dataclass(frozen=True)
class ScheduleSession:
    status: ScheduleStatus = ScheduleStatus.INITIAL
    class_events: Tuple[CalendarEvent, ...] = ()
    study_suggestions: Tuple[CalendarEvent, ...] = ()
    error: Optional[str] = None

    @property
    def can_upload(self) -> bool:
        return self.status in (ScheduleStatus.INITIAL, ScheduleStatus.ERROR)

    @property
    def is_busy(self) -> bool:
        return self.status in (ScheduleStatus.PARSING, ScheduleStatus.GENERATING)

    @property
    def visible_events(self) -> Tuple[CalendarEvent, ...]:
        """Events shown on the grid; nothing is shown after a failure"""
        if self.status == ScheduleStatus.ERROR:
            return ()
        return self.class_events + self.study_suggestions

    def find_event(self, event_id: str) -> Optional[CalendarEvent]:
        for event in self.visible_events:
            if event.id == event_id:
                return event
        return None

    def _require(self, action: str, *allowed: ScheduleStatus):
        if self.status not in allowed:
            raise InvalidTransitionError(action, self.status.value)

    def upload(self) -> "ScheduleSession":
        self._require("upload", ScheduleStatus.INITIAL, ScheduleStatus.ERROR)
        return ScheduleSession(status=ScheduleStatus.PARSING)

    def events_parsed(self, events: Sequence[CalendarEvent]) -> "ScheduleSession":
        self._require("start generating", ScheduleStatus.PARSING)
        return replace(self, status=ScheduleStatus.GENERATING, class_events=tuple(events))

    def suggestions_ready(self, suggestions: Sequence[CalendarEvent]) -> "ScheduleSession":
        self._require("display suggestions", ScheduleStatus.GENERATING)
        return replace(self, status=ScheduleStatus.DISPLAYING, study_suggestions=tuple(suggestions))

    def fail(self, message: str) -> "ScheduleSession":
        self._require("fail", ScheduleStatus.INITIAL, ScheduleStatus.PARSING, ScheduleStatus.GENERATING)
        return replace(self, status=ScheduleStatus.ERROR, error=message)

    def reset(self) -> "ScheduleSession":
        return ScheduleSession()

    def to_dict(self):
        return {
            "status": self.status.value,
            "error": self.error,
            "classEvents": [e.to_dict() for e in self.class_events] if self.status != ScheduleStatus.ERROR else [],
            "studySuggestions": [e.to_dict() for e in self.study_suggestions],
            "canUpload": self.can_upload,
        }
