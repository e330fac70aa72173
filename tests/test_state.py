"""Tests for the upload flow session states."""

from datetime import datetime

import pytest

from schedulr.exceptions import InvalidTransitionError
from schedulr.schedule.state import ScheduleSession, ScheduleStatus

from conftest import UTC, make_event

CLASS = make_event("Math101", datetime(2025, 9, 1, 9, 0, tzinfo=UTC), datetime(2025, 9, 1, 10, 0, tzinfo=UTC))
STUDY = make_event("Review", datetime(2025, 9, 1, 11, 0, tzinfo=UTC), datetime(2025, 9, 1, 12, 30, tzinfo=UTC),
                   study=True, id="study-0-1")


def displaying_session() -> ScheduleSession:
    return ScheduleSession().upload().events_parsed([CLASS]).suggestions_ready([STUDY])


@pytest.mark.unit
def test_new_session_is_initial_and_empty() -> None:
    session = ScheduleSession()

    assert session.status == ScheduleStatus.INITIAL
    assert session.can_upload
    assert not session.is_busy
    assert session.visible_events == ()
    assert session.error is None


@pytest.mark.unit
def test_happy_path_transitions() -> None:
    parsing = ScheduleSession().upload()
    generating = parsing.events_parsed([CLASS])
    displaying = generating.suggestions_ready([STUDY])

    assert parsing.status == ScheduleStatus.PARSING and parsing.is_busy
    assert generating.status == ScheduleStatus.GENERATING and generating.class_events == (CLASS,)
    assert displaying.status == ScheduleStatus.DISPLAYING
    assert displaying.visible_events == (CLASS, STUDY)
    assert not displaying.can_upload


@pytest.mark.unit
def test_actions_do_not_mutate_the_previous_session() -> None:
    session = ScheduleSession()

    session.upload()

    assert session.status == ScheduleStatus.INITIAL


@pytest.mark.unit
def test_upload_after_error_clears_previous_data() -> None:
    failed = ScheduleSession().upload().events_parsed([CLASS]).fail("boom")

    retried = failed.upload()

    assert retried.status == ScheduleStatus.PARSING
    assert retried.class_events == ()
    assert retried.error is None


@pytest.mark.unit
def test_failure_keeps_class_events_but_hides_them() -> None:
    failed = ScheduleSession().upload().events_parsed([CLASS]).fail("AI down")

    assert failed.status == ScheduleStatus.ERROR
    assert failed.error == "AI down"
    assert failed.class_events == (CLASS,)
    assert failed.visible_events == ()
    assert failed.to_dict()["classEvents"] == []
    assert failed.can_upload


@pytest.mark.unit
def test_reset_returns_to_initial_from_any_state() -> None:
    for session in (ScheduleSession(), displaying_session(), ScheduleSession().upload().fail("x")):
        assert session.reset() == ScheduleSession()


@pytest.mark.unit
@pytest.mark.parametrize("action", [
    lambda s: s.upload(),
    lambda s: s.events_parsed([CLASS]),
    lambda s: s.suggestions_ready([STUDY]),
    lambda s: s.fail("late failure"),
])
def test_displaying_rejects_everything_but_reset(action) -> None:
    with pytest.raises(InvalidTransitionError):
        action(displaying_session())


@pytest.mark.unit
def test_upload_while_busy_is_rejected() -> None:
    with pytest.raises(InvalidTransitionError, match="Cannot upload while schedule is parsing"):
        ScheduleSession().upload().upload()


@pytest.mark.unit
def test_find_event_looks_in_visible_events() -> None:
    session = displaying_session()

    assert session.find_event("study-0-1") is STUDY
    assert session.find_event("missing") is None


@pytest.mark.unit
def test_to_dict_uses_camel_case_event_fields() -> None:
    data = displaying_session().to_dict()

    assert data["status"] == "displaying"
    assert data["canUpload"] is False
    assert data["studySuggestions"][0]["isStudySuggestion"] is True
    assert data["classEvents"][0]["startTime"].startswith("2025-09-01T09:00")
