"""Tests for placing events on the weekly grid."""

from datetime import datetime

import pytest

from schedulr.schedule.grid_layout import (
    EventBlockView,
    build_week_grid,
    format_hour_label,
    format_time,
    last_row_line,
    place_event,
)

from conftest import UTC, make_event


def event_at(day: int, start: tuple, end: tuple, study: bool = False, **kwargs):
    """``day`` is the September 2025 date; the 1st is a Monday."""
    return make_event(
        kwargs.pop("title", "Block"),
        datetime(2025, 9, day, *start, tzinfo=UTC),
        datetime(2025, 9, day, *end, tzinfo=UTC),
        study=study,
        **kwargs
    )


@pytest.mark.unit
def test_monday_morning_class_placement() -> None:
    placement = place_event(event_at(1, (9, 0), (10, 0)))

    assert (placement.row_start, placement.row_end, placement.column) == (6, 8, 3)
    assert placement.style == "grid-row: 6 / 8; grid-column: 3;"


@pytest.mark.unit
def test_sunday_and_saturday_columns() -> None:
    assert place_event(event_at(7, (9, 0), (10, 0))).column == 2
    assert place_event(event_at(6, (9, 0), (10, 0))).column == 8


@pytest.mark.unit
def test_early_event_is_clamped_to_first_slot() -> None:
    placement = place_event(event_at(2, (6, 0), (7, 30)))

    assert (placement.row_start, placement.row_end) == (2, 3)


@pytest.mark.unit
def test_late_event_is_clamped_to_last_line() -> None:
    placement = place_event(event_at(2, (22, 30), (23, 59)))

    assert last_row_line() == 34
    assert (placement.row_start, placement.row_end) == (33, 34)


@pytest.mark.unit
def test_quarter_hour_start_rounds_half_up() -> None:
    placement = place_event(event_at(3, (9, 15), (10, 30)))

    assert (placement.row_start, placement.row_end) == (7, 9)


@pytest.mark.unit
def test_hour_labels_cover_seven_am_to_ten_pm() -> None:
    grid = build_week_grid([], [])

    assert len(grid.hour_labels) == 16
    assert grid.hour_labels[0] == (2, "7 AM")
    assert (12, "12 PM") in grid.hour_labels
    assert grid.hour_labels[-1] == (32, "10 PM")
    assert grid.row_count == 32
    assert grid.day_headers[0] == "Sunday"


@pytest.mark.unit
def test_classes_are_laid_out_before_suggestions() -> None:
    study = event_at(1, (11, 0), (12, 30), study=True, title="Review")
    lecture = event_at(1, (9, 0), (10, 0), title="Math101")

    blocks = build_week_grid([lecture], [study]).blocks()

    assert [view.event.title for _, view in blocks] == ["Math101", "Review"]
    assert [view.css_class for _, view in blocks] == ["event-block class", "event-block study"]


@pytest.mark.unit
@pytest.mark.parametrize("hour, minute, expected", [
    (0, 30, "12:30 AM"),
    (9, 5, "9:05 AM"),
    (12, 0, "12:00 PM"),
    (23, 45, "11:45 PM"),
])
def test_format_time(hour, minute, expected) -> None:
    assert format_time(datetime(2025, 9, 1, hour, minute)) == expected


@pytest.mark.unit
def test_format_hour_label() -> None:
    assert [format_hour_label(h) for h in (7, 11, 12, 13, 22)] == ["7 AM", "11 AM", "12 PM", "1 PM", "10 PM"]


@pytest.mark.unit
def test_short_block_shows_title_only() -> None:
    view = EventBlockView(event_at(1, (9, 0), (9, 45), location="Room 12"))

    assert not view.show_time
    assert view.detail_line == ""


@pytest.mark.unit
def test_hour_long_class_shows_time_but_no_location() -> None:
    view = EventBlockView(event_at(1, (9, 0), (10, 0), location="Room 12"))

    assert view.show_time
    assert view.time_range == "9:00 AM - 10:00 AM"
    assert view.detail_line == ""


@pytest.mark.unit
def test_long_blocks_show_location_or_description() -> None:
    lecture = EventBlockView(event_at(1, (9, 0), (10, 30), location="Room 12", description="Chapter 3"))
    study = EventBlockView(event_at(1, (11, 0), (12, 30), study=True, location="AI Suggestion",
                                    description="Go over lecture notes"))

    assert lecture.detail_line == "Room 12"
    assert study.detail_line == "Go over lecture notes"
    assert study.day_name == "Monday"
