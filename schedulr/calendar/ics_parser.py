"""
iCalendar ingestion for Schedulr

Turns uploaded .ics text into the class events of a single week: the
Sunday-to-Saturday week that holds the earliest occurrence in the file.
Recurring events are expanded with dateutil up to a forward horizon.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

import icalendar
from dateutil.rrule import rrule, rruleset, rrulestr

from schedulr.calendar.models import CalendarEvent
from schedulr.config.settings import Config
from schedulr.exceptions import CalendarParseError

logger = logging.getLogger(__name__)


def week_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Return (Sunday 00:00, following Sunday 00:00) around ``moment``"""
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = midnight - timedelta(days=(moment.weekday() + 1) % 7)
    return week_start, week_start + timedelta(days=7)


def _as_list(value) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


class ICSParser:
    """Parses .ics text and expands recurring events up to a forward horizon"""

    def __init__(self, horizon_days: int = None, display_timezone: tzinfo = None,
                 now: Callable[[], datetime] = None):
        self.config = Config()
        self.horizon = timedelta(
            days=horizon_days if horizon_days is not None else self.config.RECURRENCE_HORIZON_DAYS
        )
        self.timezone = display_timezone or self.config.get_display_timezone()
        self._now = now or (lambda: datetime.now(self.timezone))

    def parse(self, ics_text: str) -> List[CalendarEvent]:
        """Return the events of the earliest event's week, sorted by start time.

        Raises CalendarParseError when the text is not iCalendar data. A valid
        calendar without any events yields an empty list.
        """
        calendar = self._load_calendar(ics_text)

        all_events = self._expand_events(calendar)
        if not all_events:
            logger.info("Calendar parsed but contains no events within the horizon")
            return []

        all_events.sort(key=lambda e: e.start_time)
        week_start, week_end = week_bounds(all_events[0].start_time)

        week_events = [e for e in all_events if week_start <= e.start_time < week_end]
        logger.info(
            f"Parsed {len(all_events)} occurrences, {len(week_events)} in week "
            f"{week_start.date()} to {(week_end - timedelta(days=1)).date()}"
        )
        return week_events

    def _load_calendar(self, ics_text: str) -> icalendar.Calendar:
        try:
            return icalendar.Calendar.from_ical(ics_text)
        except ValueError as e:
            logger.error(f"Invalid iCalendar data: {e}")
            raise CalendarParseError(f"Could not read calendar file ({e})") from e

    def _expand_events(self, calendar: icalendar.Calendar) -> List[CalendarEvent]:
        """Expand every VEVENT into concrete occurrences before the horizon"""
        horizon_end = self._now() + self.horizon
        components = [c for c in calendar.walk("VEVENT") if c.get("DTSTART") is not None]
        overridden = self._overridden_instances(components)

        events = []
        for component in components:
            uid = str(component.get("UID", ""))
            try:
                for start in self._occurrence_starts(component, overridden.get(uid, set()), horizon_end):
                    events.append(self._to_calendar_event(component, uid, start))
            except (ValueError, TypeError) as e:
                logger.error(f"Failed to expand event {uid!r}: {e}")
                raise CalendarParseError(f"Could not expand event {uid or 'without UID'} ({e})") from e
        return events

    def _overridden_instances(self, components) -> Dict[str, Set[datetime]]:
        """RECURRENCE-ID values per UID, replaced by their own components"""
        overridden: Dict[str, Set[datetime]] = {}
        for component in components:
            recurrence_id = component.get("RECURRENCE-ID")
            if recurrence_id is not None:
                uid = str(component.get("UID", ""))
                overridden.setdefault(uid, set()).add(self._to_local(recurrence_id.dt))
        return overridden

    def _occurrence_starts(self, component: icalendar.Event, skipped: Set[datetime],
                           horizon_end: datetime) -> Iterator[datetime]:
        """Yield occurrence starts in the display timezone, ending at the horizon"""
        dtstart = self._native(component["DTSTART"].dt)
        rules = self._recurrence_set(component, dtstart)

        if rules is None:
            start = self._to_local(dtstart)
            if start < horizon_end:
                yield start
            return

        for occurrence in rules:
            start = self._to_local(occurrence)
            if start >= horizon_end:
                break
            if start not in skipped:
                yield start

    def _recurrence_set(self, component: icalendar.Event, dtstart: datetime) -> Optional[rruleset]:
        if component.get("RECURRENCE-ID") is not None:
            return None
        recurrences = _as_list(component.get("RRULE"))
        rdates = _as_list(component.get("RDATE"))
        if not recurrences and not rdates:
            return None

        rules = rruleset()
        for recur in recurrences:
            rules.rrule(self._build_rule(recur, dtstart))
        if not recurrences:
            rules.rdate(dtstart)
        for rdate in rdates:
            for value in rdate.dts:
                if isinstance(value.dt, (datetime, date)):
                    rules.rdate(self._align(value.dt, dtstart))
        for exdate in _as_list(component.get("EXDATE")):
            for value in exdate.dts:
                rules.exdate(self._align(value.dt, dtstart))
        return rules

    def _build_rule(self, recur: icalendar.vRecur, dtstart: datetime) -> rrule:
        """dateutil rule from an RRULE, with UNTIL matched to DTSTART's tz-awareness"""
        fields = icalendar.vRecur(recur)
        until = fields.pop("UNTIL", None)
        rule = rrulestr(fields.to_ical().decode(), dtstart=dtstart)
        if until:
            value = until[0] if isinstance(until, list) else until
            if not isinstance(value, datetime):
                value = datetime.combine(value, time(23, 59, 59))
            rule = rule.replace(until=self._align(value, dtstart))
        return rule

    def _native(self, value) -> datetime:
        """Date-times as written (floating stays naive); dates become midnight"""
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        raise CalendarParseError(f"Unsupported date value in calendar: {value!r}")

    def _align(self, value, dtstart: datetime) -> datetime:
        """Make an RDATE/EXDATE/UNTIL value comparable with ``dtstart``"""
        if not isinstance(value, datetime):
            return datetime.combine(value, dtstart.time(), tzinfo=dtstart.tzinfo)
        if dtstart.tzinfo is None and value.tzinfo is not None:
            return value.astimezone(self.timezone).replace(tzinfo=None)
        if dtstart.tzinfo is not None and value.tzinfo is None:
            return value.replace(tzinfo=dtstart.tzinfo)
        return value

    def _to_calendar_event(self, component: icalendar.Event, uid: str, start: datetime) -> CalendarEvent:
        start_utc = start.astimezone(timezone.utc)
        return CalendarEvent(
            id=f"{uid}-{start_utc.strftime('%Y-%m-%dT%H:%M:%S.000Z')}",
            title=str(component.get("SUMMARY") or self.config.UNTITLED_EVENT),
            start_time=start,
            end_time=start + self._duration(component),
            location=self._optional_text(component, "LOCATION"),
            description=self._optional_text(component, "DESCRIPTION"),
        )

    def _duration(self, component: icalendar.Event) -> timedelta:
        dtstart = component["DTSTART"].dt
        dtend = component.get("DTEND")
        if dtend is not None:
            return self._to_local(dtend.dt) - self._to_local(dtstart)

        duration = component.get("DURATION")
        if duration is not None:
            return duration.dt

        # RFC 5545: a date-only start lasts one day, a date-time start has no length
        if not isinstance(dtstart, datetime):
            return timedelta(days=1)
        return timedelta(0)

    def _to_local(self, value) -> datetime:
        """Normalise an iCalendar date/date-time to the display timezone"""
        value = self._native(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=self.timezone)
        return value.astimezone(self.timezone)

    @staticmethod
    def _optional_text(component: icalendar.Event, name: str) -> Optional[str]:
        value = component.get(name)
        if value is None:
            return None
        text = str(value)
        return text or None


def parse_ics(ics_text: str, horizon_days: int = None) -> List[CalendarEvent]:
    """Parse .ics text with the configured timezone and horizon"""
    return ICSParser(horizon_days=horizon_days).parse(ics_text)
