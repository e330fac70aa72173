"""Shared fixtures for Schedulr tests."""

import json
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from schedulr.ai_agent.suggestion_service import StudySuggestionService
from schedulr.api.flask_server import SchedulrAPI
from schedulr.calendar.ics_parser import ICSParser
from schedulr.calendar.models import CalendarEvent
from schedulr.schedule.orchestrator import ScheduleOrchestrator

UTC = timezone.utc
FIXED_NOW = datetime(2025, 9, 1, 0, 0, tzinfo=UTC)


def vevent(uid: str, start: str, end: Optional[str] = None, summary: Optional[str] = "Class",
           extra: List[str] = None) -> str:
    """Build a VEVENT block; ``start``/``end`` are raw iCalendar values."""
    lines = ["BEGIN:VEVENT", f"UID:{uid}", "DTSTAMP:20250801T000000Z"]
    if start.startswith(";"):
        lines.append(f"DTSTART{start}")
    else:
        lines.append(f"DTSTART:{start}")
    if end:
        lines.append(f"DTEND{end}" if end.startswith(";") else f"DTEND:{end}")
    if summary is not None:
        lines.append(f"SUMMARY:{summary}")
    lines.extend(extra or [])
    lines.append("END:VEVENT")
    return "\r\n".join(lines)


def make_ics(*events: str) -> str:
    parts = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Schedulr//Tests//EN", *events, "END:VCALENDAR"]
    return "\r\n".join(parts) + "\r\n"


def make_event(title: str, start: datetime, end: datetime, study: bool = False, **kwargs) -> CalendarEvent:
    return CalendarEvent(
        id=kwargs.pop("id", f"{title}-{start.isoformat()}"),
        title=title,
        start_time=start,
        end_time=end,
        is_study_suggestion=study,
        **kwargs
    )


class FakeLLMClient:
    """Returns a canned response body and records the prompts it was sent."""

    model_name = "fake-llm"

    def __init__(self, response: Optional[str] = None, error: Exception = None):
        self.response = response
        self.error = error
        self.prompts = []

    def generate_json(self, prompt, schema, schema_name="response"):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def suggestions_body(*entries) -> str:
    return json.dumps({"study_suggestions": list(entries)})


MATH_SUGGESTION = {
    "title": "Review for Math101",
    "day_of_week": "Monday",
    "start_time": "11:00",
    "end_time": "12:30",
    "description": "Go over today's lecture notes while they are fresh."
}

MATH_CALENDAR = make_ics(
    vevent("math101", "20250901T090000", "20250901T100000", "Math101", ["LOCATION:Room 12"])
)


@pytest.fixture
def parser():
    return ICSParser(horizon_days=183, display_timezone=UTC, now=lambda: FIXED_NOW)


@pytest.fixture
def fake_llm():
    return FakeLLMClient(suggestions_body(MATH_SUGGESTION))


@pytest.fixture
def orchestrator(parser, fake_llm):
    return ScheduleOrchestrator(
        parser=parser,
        suggestion_service=StudySuggestionService(llm_client=fake_llm)
    )


@pytest.fixture
def app(orchestrator):
    api = SchedulrAPI(orchestrator=orchestrator)
    api.app.config["TESTING"] = True
    return api.app


@pytest.fixture
def client(app):
    return app.test_client()
