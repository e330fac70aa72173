"""
Schedule orchestrator - drives one upload from parsing to display
"""
import logging
import time
from typing import Callable, Optional

from schedulr.calendar.ics_parser import ICSParser
from schedulr.config.settings import Config
from schedulr.exceptions import CalendarParseError, ScheduleError, SuggestionGenerationError
from schedulr.schedule.state import ScheduleSession

logger = logging.getLogger(__name__)

Publisher = Callable[[ScheduleSession], None]


class ScheduleOrchestrator:
    """
    Runs the parse step and then the suggestion step, moving the session
    through parsing, generating and displaying (or error).
    """

    def __init__(self, parser: ICSParser = None, suggestion_service=None, model_name: str = None):
        self.config = Config()
        self.parser = parser or ICSParser()
        if suggestion_service is None:
            from schedulr.ai_agent.suggestion_service import StudySuggestionService
            suggestion_service = StudySuggestionService(model_name=model_name)
        self.suggestion_service = suggestion_service
        logger.info("ScheduleOrchestrator initialized")

    def handle_upload(self, session: ScheduleSession, ics_text: str,
                      publish: Optional[Publisher] = None) -> ScheduleSession:
        """Process uploaded calendar text and return the resulting session.

        ``publish`` is called with every intermediate session so observers can
        show progress. Raises InvalidTransitionError if the session does not
        accept uploads.
        """
        publish = publish or (lambda s: None)
        start_time = time.time()

        session = session.upload()
        publish(session)

        try:
            events = self.parser.parse(ics_text)
        except CalendarParseError as e:
            return self._fail(session, self._process_failed(e), publish)

        if not events:
            logger.info("No events found in uploaded calendar")
            return self._fail(session, self.config.NO_EVENTS_MESSAGE, publish)

        session = session.events_parsed(events)
        publish(session)

        try:
            suggestions = self.suggestion_service.get_study_suggestions(list(session.class_events))
        except SuggestionGenerationError as e:
            logger.error(f"Study suggestion generation failed: {e} ({e.error_kind})")
            return self._fail(session, self._process_failed(e), publish)
        except ScheduleError as e:
            return self._fail(session, self._process_failed(e), publish)
        except Exception as e:
            logger.exception(f"Unexpected error while generating suggestions: {e}")
            return self._fail(session, self._process_failed(self.config.GENERATION_FAILED_MESSAGE), publish)

        session = session.suggestions_ready(suggestions)
        publish(session)

        logger.info(
            f"Schedule ready: {len(session.class_events)} classes, "
            f"{len(session.study_suggestions)} suggestions in {time.time() - start_time:.2f}s"
        )
        return session

    def reset(self, session: ScheduleSession) -> ScheduleSession:
        return session.reset()

    def _fail(self, session: ScheduleSession, message: str, publish: Publisher) -> ScheduleSession:
        session = session.fail(message)
        publish(session)
        return session

    def _process_failed(self, reason) -> str:
        reason = str(reason).strip().rstrip(".") or "An unknown error occurred"
        return self.config.PROCESS_FAILED_MESSAGE.format(reason=reason)
