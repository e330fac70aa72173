"""
Weekly grid layout for the schedule view

Columns are the seven days (Sunday first) after one column of hour labels;
rows are 30-minute slots after one header row. Overlapping events are not
separated: they share the same cells.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence, Tuple

from schedulr.calendar.models import CalendarEvent
from schedulr.config.settings import Config

HEADER_ROWS = 1
LABEL_COLUMNS = 1


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def slots_per_hour() -> int:
    return 60 // Config.GRID_SLOT_MINUTES


def slot_row(hour_fraction: float) -> float:
    """Grid row (1-based) where a time of day falls"""
    return (hour_fraction - Config.GRID_START_HOUR) * slots_per_hour() + HEADER_ROWS + 1


def last_row_line() -> int:
    return int(slot_row(Config.GRID_END_HOUR))


def format_time(moment: datetime) -> str:
    """12-hour clock without a leading zero, e.g. 9:05 AM"""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_hour_label(hour: int) -> str:
    if hour == 12:
        return "12 PM"
    if hour > 12:
        return f"{hour - 12} PM"
    return f"{hour} AM"


@dataclass(frozen=True)
class GridPlacement:
    event: CalendarEvent
    row_start: int
    row_end: int
    column: int

    @property
    def grid_row(self) -> str:
        return f"{self.row_start} / {self.row_end}"

    @property
    def grid_column(self) -> str:
        return str(self.column)

    @property
    def style(self) -> str:
        return f"grid-row: {self.grid_row}; grid-column: {self.grid_column};"


def place_event(event: CalendarEvent) -> GridPlacement:
    start_hour = event.start_time.hour + event.start_time.minute / 60
    end_hour = event.end_time.hour + event.end_time.minute / 60

    return GridPlacement(
        event=event,
        row_start=max(HEADER_ROWS + 1, _round_half_up(slot_row(start_hour))),
        row_end=min(last_row_line(), _round_half_up(slot_row(end_hour))),
        column=event.day_index + LABEL_COLUMNS + 1,
    )


@dataclass(frozen=True)
class EventBlockView:
    """What an event block shows, derived from the event and its length"""

    event: CalendarEvent

    @property
    def css_class(self) -> str:
        return "event-block study" if self.event.is_study_suggestion else "event-block class"

    @property
    def time_range(self) -> str:
        return f"{format_time(self.event.start_time)} - {format_time(self.event.end_time)}"

    @property
    def show_time(self) -> bool:
        return self.event.duration_minutes > 45

    @property
    def detail_line(self) -> str:
        """Description for suggestions, location for classes, on longer blocks"""
        if self.event.duration_minutes <= 60:
            return ""
        if self.event.is_study_suggestion:
            return self.event.description or ""
        return self.event.location or ""

    @property
    def tooltip(self) -> str:
        extra = self.event.description or self.event.location or ""
        return f"{self.event.title}\n{self.time_range}\n{extra}"

    @property
    def day_name(self) -> str:
        return Config.DAY_NAMES[self.event.day_index]


@dataclass(frozen=True)
class WeekGrid:
    day_headers: Tuple[str, ...]
    hour_labels: Tuple[Tuple[int, str], ...]
    placements: Tuple[GridPlacement, ...]
    row_count: int

    def blocks(self) -> List[Tuple[GridPlacement, EventBlockView]]:
        return [(p, EventBlockView(p.event)) for p in self.placements]


def build_week_grid(class_events: Sequence[CalendarEvent],
                    study_suggestions: Sequence[CalendarEvent]) -> WeekGrid:
    """Lay out class events followed by suggestions on the weekly grid"""
    hours = range(Config.GRID_START_HOUR, Config.GRID_END_HOUR)
    return WeekGrid(
        day_headers=tuple(Config.DAY_NAMES),
        hour_labels=tuple((int(slot_row(h)), format_hour_label(h)) for h in hours),
        placements=tuple(place_event(e) for e in list(class_events) + list(study_suggestions)),
        row_count=(Config.GRID_END_HOUR - Config.GRID_START_HOUR) * slots_per_hour(),
    )
