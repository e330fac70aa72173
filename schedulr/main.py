#!/usr/bin/env python3
"""
Main entry point for Schedulr

Runs the web server, or processes a single .ics file from the command line.
"""

import json
import logging
import sys
from pathlib import Path

from schedulr.config.settings import Config
from schedulr.utils.logger import ScheduleLogger


def _read_calendar(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


def process_calendar(ics_text: str, use_mock: bool = False, model_name: str = None) -> dict:
    """Run one calendar through the full pipeline and return the session as a dict"""
    from schedulr.ai_agent.suggestion_service import StudySuggestionService
    from schedulr.schedule.orchestrator import ScheduleOrchestrator
    from schedulr.schedule.state import ScheduleSession

    llm_client = None
    if use_mock:
        from schedulr.ai_agent.mock_llm_client import MockLLMClient
        llm_client = MockLLMClient()

    orchestrator = ScheduleOrchestrator(
        suggestion_service=StudySuggestionService(llm_client=llm_client, model_name=model_name)
    )
    return orchestrator.handle_upload(ScheduleSession(), ics_text).to_dict()


def run_server(host=None, port=None, model=None, use_mock=False, debug=False):
    """Run the Flask server"""
    from schedulr.api.flask_server import SchedulrAPI
    from schedulr.ai_agent.suggestion_service import StudySuggestionService
    from schedulr.schedule.orchestrator import ScheduleOrchestrator

    logger = logging.getLogger(__name__)
    logger.info("Starting Schedulr...")

    llm_client = None
    if use_mock:
        from schedulr.ai_agent.mock_llm_client import MockLLMClient
        llm_client = MockLLMClient()

    try:
        orchestrator = ScheduleOrchestrator(
            suggestion_service=StudySuggestionService(llm_client=llm_client, model_name=model)
        )
        api = SchedulrAPI(orchestrator=orchestrator)
        api.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


def run_tests(api_url="http://localhost:5000", output=None):
    """Run smoke tests against a running server"""
    from schedulr.api.smoke_client import SchedulrSmokeClient, print_results

    logger = logging.getLogger(__name__)
    logger.info(f"Running smoke tests against {api_url}")

    results = SchedulrSmokeClient(api_url).run_test_suite()
    print_results(results, output)
    return results


def main(argv=None):
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Schedulr - weekly schedule with AI study suggestions')
    parser.add_argument('--log-level', help='Logging level (default: SCHEDULR_LOG_LEVEL or INFO)')
    parser.add_argument('--log-file', help='Also write logs to this file')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    server_parser = subparsers.add_parser('server', help='Run the web server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    server_parser.add_argument('--model', help='Model identifier for study suggestions')
    server_parser.add_argument('--mock', action='store_true', help='Use the offline mock LLM')
    server_parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    parse_parser = subparsers.add_parser('parse', help='Print the first week of events in an .ics file')
    parse_parser.add_argument('input_file', help='Input .ics file')
    parse_parser.add_argument('--horizon-days', type=int, help='Recurrence expansion horizon in days')

    suggest_parser = subparsers.add_parser('suggest', help='Parse an .ics file and generate study suggestions')
    suggest_parser.add_argument('input_file', help='Input .ics file')
    suggest_parser.add_argument('--output', help='Output JSON file')
    suggest_parser.add_argument('--model', help='Model identifier for study suggestions')
    suggest_parser.add_argument('--mock', action='store_true', help='Use the offline mock LLM')

    test_parser = subparsers.add_parser('test', help='Run smoke tests against a running server')
    test_parser.add_argument('--url', default='http://localhost:5000', help='API URL to test')
    test_parser.add_argument('--output', help='Output file for test results')

    args = parser.parse_args(argv)
    try:
        ScheduleLogger.setup_logging(log_level=args.log_level, log_file=args.log_file)
    except ValueError as e:
        parser.error(str(e))

    if args.command == 'server':
        run_server(host=args.host, port=args.port, model=args.model, use_mock=args.mock, debug=args.debug)

    elif args.command == 'parse':
        from schedulr.calendar.ics_parser import parse_ics
        from schedulr.exceptions import CalendarParseError

        try:
            events = parse_ics(_read_calendar(args.input_file), horizon_days=args.horizon_days)
        except CalendarParseError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps([e.to_dict() for e in events], indent=2))

    elif args.command == 'suggest':
        result = process_calendar(_read_calendar(args.input_file), use_mock=args.mock, model_name=args.model)

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(result, f, indent=2)
        else:
            print(json.dumps(result, indent=2))
        return 1 if result["status"] == "error" else 0

    elif args.command == 'test':
        results = run_tests(api_url=args.url, output=args.output)
        return 1 if results["summary"]["failed"] else 0

    else:
        parser.print_help()

    return 0


if __name__ == '__main__':
    sys.exit(main())
