"""
Configuration settings for Schedulr
"""
import os
from datetime import tzinfo
from typing import Dict, Any, Optional
from zoneinfo import ZoneInfo

from dateutil import tz
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {value!r}")


class Config:
    # Generative AI service (OpenAI-compatible endpoint)
    LLM_BASE_URL = os.getenv(
        "SCHEDULR_LLM_BASE_URL",
        "https://generativelanguage.googleapis.com/v1beta/openai/"
    )
    LLM_API_KEY = os.getenv("SCHEDULR_API_KEY") or os.getenv("GEMINI_API_KEY", "")
    DEFAULT_MODEL = os.getenv("SCHEDULR_MODEL", "gemini-2.5-flash")
    USE_MOCK_LLM = os.getenv("SCHEDULR_USE_MOCK_LLM", "").lower() in ("1", "true", "yes")
    LLM_TIMEOUT = _env_int("LLM_TIMEOUT", 60)  # seconds
    LLM_MAX_RETRIES = _env_int("LLM_MAX_RETRIES", 2)
    MAX_TOKENS = 2048
    TEMPERATURE = _env_float("TEMPERATURE", 0.4)

    # Calendar ingestion
    TIMEZONE = os.getenv("SCHEDULR_TIMEZONE", "")  # IANA name, empty = system local
    RECURRENCE_HORIZON_DAYS = _env_int("SCHEDULR_RECURRENCE_HORIZON_DAYS", 183)  # ~6 months
    UNTITLED_EVENT = "Untitled Event"

    # Weekly grid
    GRID_START_HOUR = 7   # 7 AM
    GRID_END_HOUR = 23    # 11 PM
    GRID_SLOT_MINUTES = 30
    DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

    # Study suggestion rules (advisory, encoded in the prompt)
    MIN_SUGGESTIONS = 3
    MAX_SUGGESTIONS = 5
    MIN_STUDY_MINUTES = 90
    MAX_STUDY_MINUTES = 120
    STUDY_DAY_START = "08:00"
    STUDY_DAY_END = "22:00"
    CLASS_BUFFER_MINUTES = 30
    SUGGESTION_LOCATION = "AI Suggestion"

    # API Configuration
    API_HOST = os.getenv("SCHEDULR_HOST", "0.0.0.0")
    API_PORT = _env_int("SCHEDULR_PORT", 5000)
    SECRET_KEY = os.getenv("SCHEDULR_SECRET_KEY", "dev-schedulr-secret")
    MAX_UPLOAD_BYTES = _env_int("SCHEDULR_MAX_UPLOAD_BYTES", 2 * 1024 * 1024)
    ALLOWED_EXTENSIONS = (".ics", ".ical", ".icalendar", ".ifb")
    ALLOWED_MIME_TYPES = ("text/calendar", "application/ics", "text/x-vcalendar")

    # Logging
    LOG_LEVEL = os.getenv("SCHEDULR_LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "openai", "werkzeug")

    # Date/Time Formats
    SUGGESTION_TIME_FORMAT = "%H:%M"

    # User-facing messages
    NO_EVENTS_MESSAGE = "No events found in the calendar. Please check the file or try another one."
    PROCESS_FAILED_MESSAGE = "Failed to process calendar. {reason}. Please ensure it is a valid .ics file."
    GENERATION_FAILED_MESSAGE = "Failed to generate study suggestions from AI."
    EMPTY_RESPONSE_MESSAGE = "The AI returned an empty response."
    INVALID_RESPONSE_MESSAGE = "Failed to parse study suggestions from the AI response."

    STUDY_SUGGESTION_PROMPT = """Analyze the following weekly class schedule, which runs from {week_start} to {week_end}.
Your task is to suggest {min_suggestions} to {max_suggestions} optimal study blocks.

RULES:
1. Place suggestions in the empty gaps between classes.
2. All study blocks must be between {min_minutes} minutes and {max_minutes} minutes long.
3. Schedule study blocks only between {day_start} and {day_end}.
4. Ensure there is at least a {buffer}-minute break before and after any scheduled class. Do not suggest back-to-back sessions.
5. The title for each suggestion should be specific, like "Review for [Class Name]" or "Work on [Class Name] Assignment".
6. The description MUST provide a clear, concise reason for the study session. It cannot be empty.

Class Schedule:
{class_schedule}"""

    SUGGESTION_RESPONSE_SCHEMA: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "study_suggestions": {
                "type": "array",
                "description": "A list of suggested study sessions.",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {
                            "type": "string",
                            "description": "A concise title for the study session, e.g., 'Study for Math'."
                        },
                        "day_of_week": {
                            "type": "string",
                            "description": "The day of the week for the study session (e.g., 'Monday', 'Tuesday')."
                        },
                        "start_time": {
                            "type": "string",
                            "description": "The start time in 24-hour HH:mm format (e.g., '14:00')."
                        },
                        "end_time": {
                            "type": "string",
                            "description": "The end time in 24-hour HH:mm format (e.g., '15:30')."
                        },
                        "description": {
                            "type": "string",
                            "description": "A brief reason or focus for this study session. Must not be empty."
                        }
                    },
                    "required": ["title", "day_of_week", "start_time", "end_time", "description"]
                }
            }
        },
        "required": ["study_suggestions"]
    }

    @classmethod
    def get_model_config(cls, model_name: str = None) -> Dict[str, Any]:
        """Get connection and sampling settings for the suggestion model"""
        return {
            "model": model_name or cls.DEFAULT_MODEL,
            "base_url": cls.LLM_BASE_URL,
            "api_key": cls.LLM_API_KEY,
            "max_tokens": cls.MAX_TOKENS,
            "temperature": cls.TEMPERATURE,
        }

    @classmethod
    def get_display_timezone(cls, name: Optional[str] = None) -> tzinfo:
        """Timezone used for week boundaries and grid placement"""
        name = name if name is not None else cls.TIMEZONE
        if name:
            return ZoneInfo(name)
        return tz.tzlocal()
