"""
Smoke-test client for a running Schedulr server
"""
import json
import logging
import time
from typing import Any, Dict, List

import requests

SAMPLE_CALENDAR = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Schedulr//Smoke Test//EN
BEGIN:VEVENT
UID:smoke-math101
DTSTART:20250901T090000
DTEND:20250901T100000
RRULE:FREQ=WEEKLY;BYDAY=MO,WE;COUNT=6
SUMMARY:Math101
LOCATION:Room 12
END:VEVENT
BEGIN:VEVENT
UID:smoke-hist200
DTSTART:20250902T130000
DTEND:20250902T143000
SUMMARY:History 200
END:VEVENT
END:VCALENDAR
"""

EVENT_FIELDS = ["id", "title", "startTime", "endTime", "isStudySuggestion"]


class SchedulrSmokeClient:
    """Exercises the JSON API of a running server"""

    def __init__(self, base_url: str = "http://localhost:5000"):
        self.base_url = base_url.rstrip("/")
        self.http = requests.Session()
        self.logger = logging.getLogger(__name__)

    def test_health_check(self) -> bool:
        """Test health check endpoint"""
        try:
            response = self.http.get(f"{self.base_url}/health", timeout=5)
            if response.status_code == 200:
                self.logger.info("Health check passed")
                return True
            self.logger.error(f"Health check failed: {response.status_code}")
            return False
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Health check error: {e}")
            return False

    def upload_calendar(self, ics_text: str, filename: str = "schedule.ics") -> Dict[str, Any]:
        """Reset the session, upload a calendar and return the outcome"""
        try:
            self.http.post(f"{self.base_url}/api/schedule/reset", timeout=5)

            start_time = time.time()
            response = self.http.post(
                f"{self.base_url}/api/schedule",
                files={"calendar": (filename, ics_text.encode("utf-8"), "text/calendar")},
                timeout=120
            )
            response_time = time.time() - start_time

            return {
                "success": response.status_code == 200,
                "data": response.json(),
                "response_time": response_time,
                "status_code": response.status_code
            }
        except requests.exceptions.Timeout:
            self.logger.error("Request timeout")
            return {"success": False, "error": "timeout"}
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.error(f"Request error: {e}")
            return {"success": False, "error": str(e)}

    def validate_response_format(self, data: Dict[str, Any]) -> List[str]:
        """Check a displayed schedule against the API contract"""
        errors = []

        if data.get("status") != "displaying":
            errors.append(f"Unexpected status: {data.get('status')} ({data.get('error')})")

        for field in ("classEvents", "studySuggestions"):
            events = data.get(field)
            if not isinstance(events, list):
                errors.append(f"{field} must be a list")
                continue
            for i, event in enumerate(events):
                missing = [f for f in EVENT_FIELDS if f not in event]
                if missing:
                    errors.append(f"{field}[{i}] missing {missing}")
                elif event["startTime"] >= event["endTime"]:
                    errors.append(f"{field}[{i}] does not end after it starts")

        if not data.get("classEvents"):
            errors.append("No class events returned")
        return errors

    def run_test_suite(self) -> Dict[str, Any]:
        """Run health check, a valid upload and an empty upload"""
        results = {
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
            "health_check": self.test_health_check(),
            "tests": [],
            "summary": {"total": 0, "passed": 0, "failed": 0}
        }

        outcome = self.upload_calendar(SAMPLE_CALENDAR)
        errors = self.validate_response_format(outcome["data"]) if outcome.get("success") else [
            outcome.get("error") or f"HTTP {outcome.get('status_code')}"
        ]
        results["tests"].append({"name": "valid calendar", "errors": errors,
                                 "response_time": outcome.get("response_time", 0)})

        empty = "BEGIN:VCALENDAR\nVERSION:2.0\nPRODID:-//Schedulr//Empty//EN\nEND:VCALENDAR\n"
        outcome = self.upload_calendar(empty, "empty.ics")
        errors = []
        if outcome.get("status_code") != 422 or outcome.get("data", {}).get("status") != "error":
            errors.append(f"Expected error state for empty calendar, got {outcome}")
        results["tests"].append({"name": "empty calendar", "errors": errors,
                                 "response_time": outcome.get("response_time", 0)})

        for test in results["tests"]:
            results["summary"]["total"] += 1
            if test["errors"]:
                results["summary"]["failed"] += 1
            else:
                results["summary"]["passed"] += 1

        return results


def print_results(results: Dict[str, Any], output: str = None):
    summary = results["summary"]
    print(f"\nTest Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Health check: {'✓' if results['health_check'] else '✗'}")
    for test in results["tests"]:
        for error in test["errors"]:
            print(f"  [{test['name']}] {error}")

    if output:
        with open(output, 'w') as f:
            json.dump(results, f, indent=2)
        print(f"\nDetailed results saved to: {output}")
