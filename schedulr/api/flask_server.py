"""
Flask server for Schedulr: upload page, weekly grid and JSON API
"""
import logging
import signal
import sys
import time
from datetime import datetime

from flask import Flask, flash, jsonify, redirect, render_template, request, session, url_for
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from schedulr.config.settings import Config
from schedulr.exceptions import InvalidTransitionError
from schedulr.schedule.grid_layout import EventBlockView, build_week_grid
from schedulr.schedule.orchestrator import ScheduleOrchestrator
from schedulr.schedule.session_store import SessionStore
from schedulr.schedule.state import ScheduleStatus
from schedulr.utils.logger import ScheduleLogger
from schedulr.utils.validators import UploadValidator

logger = logging.getLogger(__name__)

SESSION_KEY = "schedule_id"


class UploadRejected(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class SchedulrAPI:
    """
    Flask application serving the schedule viewer and its JSON API
    """

    def __init__(self, orchestrator: ScheduleOrchestrator = None, model_name: str = None,
                 store: SessionStore = None):
        self.config = Config()
        self.app = Flask(__name__)
        self.app.config["SECRET_KEY"] = self.config.SECRET_KEY
        self.app.config["MAX_CONTENT_LENGTH"] = self.config.MAX_UPLOAD_BYTES
        CORS(self.app, resources={r"/api/*": {"origins": "*"}, r"/health": {"origins": "*"}})

        self.orchestrator = orchestrator or ScheduleOrchestrator(model_name=model_name)
        self.store = store or SessionStore()
        self.uploads_processed = 0
        self.start_time = time.time()

        self._setup_routes()

    def _session_id(self) -> str:
        session_id = session.get(SESSION_KEY)
        if not session_id:
            session_id = self.store.new_session_id()
            session[SESSION_KEY] = session_id
        return session_id

    def _process_upload(self, session_id: str):
        """Validate the uploaded file and run it through the orchestrator"""
        upload = request.files.get("calendar")
        if upload is None:
            raise UploadRejected("No calendar file provided", 400)

        errors = UploadValidator.validate_upload(upload.filename, upload.mimetype)
        if errors:
            raise UploadRejected("; ".join(errors), 400)

        ics_text = UploadValidator.decode_content(upload.read())

        lock = self.store.lock_for(session_id)
        if not lock.acquire(blocking=False):
            raise UploadRejected("A schedule is already being processed", 409)

        try:
            start_time = time.time()
            current = self.store.get(session_id)
            logger.info(f"📅 RECEIVED CALENDAR: {upload.filename} ({len(ics_text)} chars) session={session_id[:8]}")

            try:
                result = self.orchestrator.handle_upload(
                    current, ics_text, publish=lambda s: self.store.set(session_id, s)
                )
            except InvalidTransitionError as e:
                logger.warning(f"Upload rejected: {e}")
                raise UploadRejected("Start a new upload before sending another calendar", 409) from e

            self.uploads_processed += 1
            ScheduleLogger.log_schedule_summary(
                session_id, upload.filename, result.class_events, result.study_suggestions,
                result.status.value, time.time() - start_time
            )
            return result
        finally:
            lock.release()

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/', methods=['GET'])
        def index():
            current = self.store.get(self._session_id())
            grid = None
            if current.status != ScheduleStatus.ERROR and (current.class_events or current.study_suggestions):
                grid = build_week_grid(current.class_events, current.study_suggestions)

            selected = None
            event_id = request.args.get("event")
            if event_id:
                event = current.find_event(event_id)
                selected = EventBlockView(event) if event else None

            return render_template(
                "index.html",
                schedule=current,
                statuses=ScheduleStatus,
                grid=grid,
                selected=selected,
            )

        @self.app.route('/upload', methods=['POST'])
        def upload():
            try:
                self._process_upload(self._session_id())
            except UploadRejected as e:
                flash(str(e))
            return redirect(url_for("index"))

        @self.app.route('/reset', methods=['POST'])
        def reset():
            self.store.discard(self._session_id())
            return redirect(url_for("index"))

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "model": self._model_name()
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            llm_client = self.orchestrator.suggestion_service.llm_client
            return jsonify({
                "status": "running",
                "uploads_processed": self.uploads_processed,
                "active_sessions": len(self.store),
                "llm": llm_client.get_stats() if hasattr(llm_client, "get_stats") else None,
                "uptime": time.time() - self.start_time
            })

        @self.app.route('/api/schedule', methods=['GET'])
        def get_schedule():
            return jsonify(self.store.get(self._session_id()).to_dict())

        @self.app.route('/api/schedule', methods=['POST'])
        def post_schedule():
            try:
                result = self._process_upload(self._session_id())
            except UploadRejected as e:
                return jsonify({"error": str(e)}), e.status_code

            status_code = 422 if result.status == ScheduleStatus.ERROR else 200
            return jsonify(result.to_dict()), status_code

        @self.app.route('/api/schedule/reset', methods=['POST'])
        def reset_schedule():
            session_id = self._session_id()
            result = self.orchestrator.reset(self.store.get(session_id))
            self.store.discard(session_id)
            return jsonify(result.to_dict())

        @self.app.errorhandler(HTTPException)
        def http_error(error):
            if request.path.startswith("/api/") or request.path in ("/health", "/status"):
                return jsonify({"error": error.description}), error.code
            if error.code == 413:
                flash("The calendar file is too large")
                return redirect(url_for("index"))
            return error

        @self.app.errorhandler(500)
        def internal_error(error):
            logger.error(f"Internal server error: {error}")
            return jsonify({"error": "Internal server error"}), 500

    def _install_shutdown_handlers(self):
        def on_signal(signum, frame):
            logger.info(f"{signal.Signals(signum).name} received")
            self.shutdown()
            sys.exit(0)

        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, on_signal)

    def run(self, host=None, port=None, debug=False):
        """Serve the viewer with one thread per request; sessions serialise on their own locks"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._install_shutdown_handlers()
        self.start_time = time.time()
        logger.info(f"Schedulr listening on http://{host}:{port} (model: {self._model_name()})")

        self.app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=False)

    def _model_name(self):
        return getattr(self.orchestrator.suggestion_service.llm_client, "model_name", None)

    def shutdown(self):
        """Log what this process handled before it exits"""
        logger.info(
            f"Stopping Schedulr: {self.uploads_processed} uploads, "
            f"{len(self.store)} sessions held, up {time.time() - self.start_time:.0f}s"
        )


def create_app(model_name: str = None, orchestrator: ScheduleOrchestrator = None) -> Flask:
    """Factory function to create Flask app"""
    api = SchedulrAPI(orchestrator=orchestrator, model_name=model_name)
    return api.app
