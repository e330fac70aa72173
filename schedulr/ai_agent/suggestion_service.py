"""
Study suggestion generation: prompt composition and response decoding
"""
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from schedulr.calendar.ics_parser import week_bounds
from schedulr.calendar.models import CalendarEvent
from schedulr.config.settings import Config
from schedulr.exceptions import SuggestionGenerationError
from schedulr.utils.validators import SuggestionValidator

logger = logging.getLogger(__name__)

SUGGESTIONS_FIELD = "study_suggestions"


class SuggestionErrorKind(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    INVALID_JSON = "invalid_json"
    MISSING_SUGGESTIONS = "missing_suggestions"


@dataclass(frozen=True)
class SuggestionDecodeResult:
    """Outcome of decoding one AI response: suggestions or an error kind"""

    suggestions: Tuple[CalendarEvent, ...] = ()
    error_kind: Optional[SuggestionErrorKind] = None
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, suggestions: Sequence[CalendarEvent], skipped: int = 0) -> "SuggestionDecodeResult":
        return cls(suggestions=tuple(suggestions), skipped=skipped)

    @classmethod
    def failure(cls, error_kind: SuggestionErrorKind) -> "SuggestionDecodeResult":
        return cls(error_kind=error_kind)


def decode_suggestions(response_text: Optional[str], week_start: datetime,
                       batch_stamp: int = None) -> SuggestionDecodeResult:
    """Decode an AI response body into study-suggestion events.

    Malformed entries are skipped; only a missing body or a body without a
    ``study_suggestions`` array fails the whole batch.
    """
    text = (response_text or "").strip()
    if not text:
        return SuggestionDecodeResult.failure(SuggestionErrorKind.EMPTY_RESPONSE)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"AI response is not valid JSON: {e}")
        return SuggestionDecodeResult.failure(SuggestionErrorKind.INVALID_JSON)

    entries = payload.get(SUGGESTIONS_FIELD) if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        logger.error(f"Invalid suggestions format from AI: {text[:200]}")
        return SuggestionDecodeResult.failure(SuggestionErrorKind.MISSING_SUGGESTIONS)

    if batch_stamp is None:
        batch_stamp = int(time.time() * 1000)

    suggestions = []
    for index, entry in enumerate(entries):
        event = _entry_to_event(entry, index, week_start, batch_stamp)
        if event is not None:
            suggestions.append(event)

    return SuggestionDecodeResult.success(suggestions, skipped=len(entries) - len(suggestions))


def _entry_to_event(entry: Any, index: int, week_start: datetime,
                    batch_stamp: int) -> Optional[CalendarEvent]:
    config = Config()

    if not isinstance(entry, dict):
        logger.warning(f"Skipping study suggestion that is not an object: {entry!r}")
        return None

    day_index = SuggestionValidator.day_index(entry.get("day_of_week"), config.DAY_NAMES)
    if day_index is None:
        logger.warning(f"Invalid day_of_week from AI: {entry.get('day_of_week')!r}")
        return None

    start_clock = SuggestionValidator.parse_clock_time(entry.get("start_time"))
    end_clock = SuggestionValidator.parse_clock_time(entry.get("end_time"))
    if start_clock is None or end_clock is None:
        logger.warning(f"Skipping study suggestion with unreadable time: {entry}")
        return None

    day = week_start + timedelta(days=day_index)
    start_time = day.replace(hour=start_clock.hour, minute=start_clock.minute)
    end_time = day.replace(hour=end_clock.hour, minute=end_clock.minute)
    if start_time >= end_time:
        logger.warning(f"Skipping study suggestion that ends before it starts: {entry}")
        return None

    description = entry.get("description")
    return CalendarEvent(
        id=f"study-{index}-{batch_stamp}",
        title=str(entry.get("title") or "Study Session"),
        start_time=start_time,
        end_time=end_time,
        location=config.SUGGESTION_LOCATION,
        description=str(description) if description else None,
        is_study_suggestion=True,
    )


class StudySuggestionService:
    """Asks the AI service for study blocks around a week of classes"""

    def __init__(self, llm_client=None, model_name: str = None):
        self.config = Config()
        if llm_client is None:
            llm_client = self._default_client(model_name)
        self.llm_client = llm_client

    def _default_client(self, model_name: str = None):
        if self.config.USE_MOCK_LLM:
            from schedulr.ai_agent.mock_llm_client import MockLLMClient
            logger.info("Using mock LLM client (SCHEDULR_USE_MOCK_LLM)")
            return MockLLMClient(model_name)
        from schedulr.ai_agent.llm_client import LLMClient
        return LLMClient(model_name)

    def build_prompt(self, class_events: Sequence[CalendarEvent]) -> str:
        week_start, week_end = week_bounds(class_events[0].start_time)
        last_day = week_end - timedelta(days=1)

        schedule = [self._event_for_prompt(e) for e in class_events]

        return self.config.STUDY_SUGGESTION_PROMPT.format(
            week_start=f"{week_start.month}/{week_start.day}/{week_start.year}",
            week_end=f"{last_day.month}/{last_day.day}/{last_day.year}",
            min_suggestions=self.config.MIN_SUGGESTIONS,
            max_suggestions=self.config.MAX_SUGGESTIONS,
            min_minutes=self.config.MIN_STUDY_MINUTES,
            max_minutes=self.config.MAX_STUDY_MINUTES,
            day_start=self.config.STUDY_DAY_START,
            day_end=self.config.STUDY_DAY_END,
            buffer=self.config.CLASS_BUFFER_MINUTES,
            class_schedule=json.dumps(schedule)
        )

    def _event_for_prompt(self, event: CalendarEvent) -> Dict[str, str]:
        return {
            "title": event.title,
            "day": self.config.DAY_NAMES[event.day_index],
            "startTime": event.start_time.strftime(self.config.SUGGESTION_TIME_FORMAT),
            "endTime": event.end_time.strftime(self.config.SUGGESTION_TIME_FORMAT),
        }

    def get_study_suggestions(self, class_events: Sequence[CalendarEvent]) -> List[CalendarEvent]:
        """Return suggestion events for the week of ``class_events``.

        Raises SuggestionGenerationError when the service fails or its answer
        cannot be decoded. Placement rules are only stated in the prompt; the
        returned blocks are not checked against the class schedule.
        """
        if not class_events:
            return []

        week_start, _ = week_bounds(class_events[0].start_time)
        prompt = self.build_prompt(class_events)
        logger.info(f"Requesting study suggestions for {len(class_events)} class events")

        response_text = self.llm_client.generate_json(
            prompt, self.config.SUGGESTION_RESPONSE_SCHEMA, schema_name=SUGGESTIONS_FIELD
        )

        result = decode_suggestions(response_text, week_start)
        if not result.ok:
            raise SuggestionGenerationError(self._failure_message(result.error_kind), result.error_kind.value)

        if result.skipped:
            logger.warning(f"Dropped {result.skipped} malformed study suggestion(s)")
        logger.info(f"Received {len(result.suggestions)} study suggestions")
        return list(result.suggestions)

    def _failure_message(self, error_kind: SuggestionErrorKind) -> str:
        if error_kind == SuggestionErrorKind.EMPTY_RESPONSE:
            return self.config.EMPTY_RESPONSE_MESSAGE
        if error_kind == SuggestionErrorKind.MISSING_SUGGESTIONS:
            return self.config.INVALID_RESPONSE_MESSAGE
        return self.config.GENERATION_FAILED_MESSAGE
