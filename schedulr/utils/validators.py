"""
Validation utilities for Schedulr
"""
import re
from datetime import time
from typing import Any, List, Optional, Sequence

from schedulr.config.settings import Config

CLOCK_TIME_PATTERN = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*$')


class UploadValidator:
    """Validator for uploaded calendar files"""

    @staticmethod
    def validate_filename(filename: Optional[str]) -> bool:
        if not filename:
            return False
        return filename.lower().endswith(Config.ALLOWED_EXTENSIONS)

    @staticmethod
    def validate_mimetype(mimetype: Optional[str]) -> bool:
        return (mimetype or "").split(";")[0].strip().lower() in Config.ALLOWED_MIME_TYPES

    @staticmethod
    def validate_upload(filename: Optional[str], mimetype: Optional[str]) -> List[str]:
        """Validate an uploaded file and return list of errors

        Like the picker's ``.ics,text/calendar`` filter, a calendar extension
        or a calendar content type is enough; the parser rejects bad content.
        """
        errors = []

        if not filename:
            errors.append("No file selected")
            return errors

        if not (UploadValidator.validate_filename(filename) or UploadValidator.validate_mimetype(mimetype)):
            errors.append(f"Unsupported file type: {filename} ({mimetype or 'unknown type'}). "
                          f"Expected an .ics calendar file")

        return errors

    @staticmethod
    def decode_content(raw: bytes) -> str:
        """Decode uploaded bytes as UTF-8, tolerating a BOM and stray bytes"""
        return raw.decode("utf-8-sig", errors="replace")


class SuggestionValidator:
    """Field checks for study suggestions returned by the AI service"""

    @staticmethod
    def parse_clock_time(value: Any) -> Optional[time]:
        """Parse 24-hour HH:mm, returning None when it is not a valid time"""
        if not isinstance(value, str):
            return None
        match = CLOCK_TIME_PATTERN.match(value)
        if not match:
            return None
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            return None
        return time(hours, minutes)

    @staticmethod
    def day_index(value: Any, day_names: Sequence[str]) -> Optional[int]:
        """Index of an English day name (Sunday is 0), or None"""
        if not isinstance(value, str):
            return None
        name = value.strip().capitalize()
        if name not in day_names:
            return None
        return list(day_names).index(name)
