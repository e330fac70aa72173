"""
Logging utilities for Schedulr
"""
import json
import logging
import sys
from datetime import datetime
from typing import Sequence

from schedulr.config.settings import Config


class ScheduleLogger:
    """Logging setup and structured summaries for schedule processing"""

    @staticmethod
    def setup_logging(log_level: str = None, log_file: str = None) -> logging.Logger:
        """Route Schedulr logs to stdout and, optionally, a file.

        ``log_level`` defaults to ``Config.LOG_LEVEL``. Unknown level names
        raise ValueError.
        """
        level_name = (log_level or Config.LOG_LEVEL).upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")

        formatter = logging.Formatter(Config.LOG_FORMAT)
        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()
        for handler in handlers:
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        for name in Config.QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_schedule_summary(session_id: str, filename: str, class_events: Sequence,
                             suggestions: Sequence, status: str, processing_time: float):
        """Log a per-upload summary for debugging"""
        logger = logging.getLogger(__name__)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "session_id": session_id,
            "filename": filename,
            "status": status,
            "processing_time_seconds": round(processing_time, 3),
            "class_events": len(class_events),
            "study_suggestions": len(suggestions),
            "week_start": class_events[0].start_time.date().isoformat() if class_events else None,
        }

        logger.info(f"Schedule processed: {json.dumps(log_entry, indent=2)}")
