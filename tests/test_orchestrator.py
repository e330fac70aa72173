"""Tests for the upload pipeline driven by ScheduleOrchestrator."""

import pytest

from schedulr.ai_agent.suggestion_service import StudySuggestionService
from schedulr.exceptions import InvalidTransitionError
from schedulr.schedule.orchestrator import ScheduleOrchestrator
from schedulr.schedule.state import ScheduleSession, ScheduleStatus

from conftest import MATH_CALENDAR, FakeLLMClient, make_ics


def orchestrator_with(parser, llm) -> ScheduleOrchestrator:
    return ScheduleOrchestrator(parser=parser, suggestion_service=StudySuggestionService(llm_client=llm))


@pytest.mark.integration
def test_successful_upload_reaches_displaying(orchestrator, fake_llm) -> None:
    published = []

    session = orchestrator.handle_upload(ScheduleSession(), MATH_CALENDAR, publish=published.append)

    assert [s.status for s in published] == [
        ScheduleStatus.PARSING,
        ScheduleStatus.GENERATING,
        ScheduleStatus.DISPLAYING,
    ]
    assert session.status == ScheduleStatus.DISPLAYING
    assert [e.title for e in session.class_events] == ["Math101"]
    assert [e.title for e in session.study_suggestions] == ["Review for Math101"]
    assert "Math101" in fake_llm.prompts[0]


@pytest.mark.integration
def test_calendar_without_events_fails_without_calling_ai(parser) -> None:
    llm = FakeLLMClient("{}")

    session = orchestrator_with(parser, llm).handle_upload(ScheduleSession(), make_ics())

    assert session.status == ScheduleStatus.ERROR
    assert session.error.startswith("No events found in the calendar.")
    assert llm.prompts == []


@pytest.mark.integration
def test_malformed_calendar_reports_processing_failure(orchestrator) -> None:
    published = []

    session = orchestrator.handle_upload(ScheduleSession(), "garbage", publish=published.append)

    assert [s.status for s in published] == [ScheduleStatus.PARSING, ScheduleStatus.ERROR]
    assert session.error.startswith("Failed to process calendar.")
    assert session.error.endswith("Please ensure it is a valid .ics file.")


@pytest.mark.integration
def test_unusable_ai_answer_keeps_classes_but_shows_nothing(parser) -> None:
    session = orchestrator_with(parser, FakeLLMClient("{}")).handle_upload(ScheduleSession(), MATH_CALENDAR)

    assert session.status == ScheduleStatus.ERROR
    assert "Failed to parse study suggestions from the AI response" in session.error
    assert ".." not in session.error
    assert len(session.class_events) == 1
    assert session.visible_events == ()


@pytest.mark.integration
def test_unexpected_client_error_becomes_generation_failure(parser) -> None:
    llm = FakeLLMClient(error=RuntimeError("connection reset"))

    session = orchestrator_with(parser, llm).handle_upload(ScheduleSession(), MATH_CALENDAR)

    assert session.status == ScheduleStatus.ERROR
    assert "Failed to generate study suggestions from AI" in session.error


@pytest.mark.integration
def test_upload_is_rejected_while_displaying(orchestrator) -> None:
    session = orchestrator.handle_upload(ScheduleSession(), MATH_CALENDAR)

    with pytest.raises(InvalidTransitionError):
        orchestrator.handle_upload(session, MATH_CALENDAR)


@pytest.mark.integration
def test_retry_after_error_starts_fresh(orchestrator) -> None:
    failed = orchestrator.handle_upload(ScheduleSession(), make_ics())

    session = orchestrator.handle_upload(failed, MATH_CALENDAR)

    assert session.status == ScheduleStatus.DISPLAYING
    assert session.error is None


@pytest.mark.unit
def test_reset_returns_initial_session(orchestrator) -> None:
    session = orchestrator.handle_upload(ScheduleSession(), MATH_CALENDAR)

    assert orchestrator.reset(session) == ScheduleSession()
