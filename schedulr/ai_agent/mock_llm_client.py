"""
Mock LLM Client for running Schedulr without an AI service
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from schedulr.config.settings import Config

logger = logging.getLogger(__name__)

SCHEDULE_MARKER = "Class Schedule:"


class MockLLMClient:
    """Offline stand-in that answers the study-suggestion prompt deterministically"""

    def __init__(self, model_name: str = None):
        self.config = Config()
        self.model_name = model_name or "mock-llm"
        self._total_requests = 0
        logger.info(f"Initialized Mock LLM client: {self.model_name}")

    def generate_json(self, prompt: str, schema: Dict[str, Any],
                      schema_name: str = "response") -> Optional[str]:
        """Suggest one block after each class, as the real service would be asked to"""
        self._total_requests += 1
        logger.info("🤖 MOCK: Generating study suggestions")

        classes = self._extract_schedule(prompt)
        suggestions = self._suggest_blocks(classes)

        logger.info(f"🤖 MOCK: Suggested {len(suggestions)} study blocks")
        return json.dumps({"study_suggestions": suggestions})

    def _extract_schedule(self, prompt: str) -> List[Dict[str, str]]:
        """Read the class schedule JSON that follows the marker"""
        marker_pos = prompt.find(SCHEDULE_MARKER)
        if marker_pos == -1:
            return []
        try:
            classes = json.loads(prompt[marker_pos + len(SCHEDULE_MARKER):].strip())
        except json.JSONDecodeError as e:
            logger.debug(f"MOCK: could not read class schedule: {e}")
            return []
        return classes if isinstance(classes, list) else []

    def get_stats(self) -> Dict[str, Any]:
        return {"model": self.model_name, "total_requests": self._total_requests, "failed_requests": 0}

    def _suggest_blocks(self, classes: List[Dict[str, str]]) -> List[Dict[str, str]]:
        fmt = self.config.SUGGESTION_TIME_FORMAT
        buffer = timedelta(minutes=self.config.CLASS_BUFFER_MINUTES)
        length = timedelta(minutes=self.config.MIN_STUDY_MINUTES)
        latest_end = datetime.strptime(self.config.STUDY_DAY_END, fmt)
        earliest_start = datetime.strptime(self.config.STUDY_DAY_START, fmt)

        busy = {}
        for cls in classes:
            busy.setdefault(cls["day"], []).append(
                (datetime.strptime(cls["startTime"], fmt), datetime.strptime(cls["endTime"], fmt))
            )

        suggestions = []
        for cls in classes:
            if len(suggestions) >= self.config.MAX_SUGGESTIONS:
                break

            start = max(datetime.strptime(cls["endTime"], fmt) + buffer, earliest_start)
            end = start + length
            if end > latest_end:
                continue

            clashes = any(
                start < class_end + buffer and end > class_start - buffer
                for class_start, class_end in busy[cls["day"]]
            )
            taken = any(
                s["day_of_week"] == cls["day"]
                and start < datetime.strptime(s["end_time"], fmt)
                and end > datetime.strptime(s["start_time"], fmt)
                for s in suggestions
            )
            if clashes or taken:
                continue

            suggestions.append({
                "title": f"Review for {cls['title']}",
                "day_of_week": cls["day"],
                "start_time": start.strftime(fmt),
                "end_time": end.strftime(fmt),
                "description": f"Consolidate today's {cls['title']} material while it is fresh."
            })

        return suggestions
