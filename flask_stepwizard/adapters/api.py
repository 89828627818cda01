"""
HTTP JSON adapter

Exposes wizards over a Flask blueprint. Live wizards are kept in memory by a
``WizardManager`` and addressed by a generated id; nothing is persisted, so a
wizard lives only as long as the process. Every operation on one wizard runs
under that wizard's lock so intents apply in the order they arrive.

Endpoints, relative to ``STEPWIZARD_URL_PREFIX``::

    POST /                      start a wizard
    GET  /<wizard_id>           current snapshot
    POST /<wizard_id>/fields    stage an edit {"name": ..., "value": ...}
    POST /<wizard_id>/next      validate and move forward
    POST /<wizard_id>/back      move back one step
    POST /<wizard_id>/submit    validate the last step and complete
    DELETE /<wizard_id>         dismiss an unfinished wizard

A response that completes the wizard carries the finalized ``record``; the
wizard is discarded afterwards. Wizards left idle longer than
``STEPWIZARD_IDLE_TIMEOUT_MINUTES`` are dropped when a new one starts.
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException, NotFound, ServiceUnavailable

from ..config import WizardConfig
from ..exceptions import IllegalTransitionError, UnknownFieldError
from ..forms.steps import StepRegistry
from ..schemas import FieldChangeSchema, WizardSnapshotSchema
from ..wizard.machine import CompletionHandler, WizardStateMachine
from ..wizard.state import WizardSnapshot
from . import PresentationAdapter

logger = logging.getLogger(__name__)


class ApiAdapter(PresentationAdapter):
    """
    Renders snapshots into JSON-ready payloads

    ``completion_error`` is set when the completion handler failed for this
    wizard; the record is still final and is returned to the client.
    """

    snapshot_schema = WizardSnapshotSchema()

    def __init__(self, machine: WizardStateMachine):
        super().__init__(machine)
        self.lock = threading.Lock()
        self.payload: Optional[dict] = None
        self.completion_error: Optional[str] = None
        self.last_used = 0.0

    def render(self, snapshot: WizardSnapshot) -> None:
        self.payload = self.snapshot_schema.dump(snapshot)


class WizardManager:
    """
    In-memory registry of live wizards

    Args:
        registry: Steps shared by every wizard this manager starts
        config: Behavior configuration handed to each state machine
        completion_handler: Receives each finalized record
        clock: Monotonic time source in seconds, used for idle expiry
    """

    def __init__(
        self,
        registry: StepRegistry,
        config: Optional[WizardConfig] = None,
        completion_handler: Optional[CompletionHandler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.config = config or WizardConfig()
        self.completion_handler = completion_handler
        self.clock = clock
        self._wizards: Dict[str, ApiAdapter] = {}
        self._lock = threading.Lock()

    def start(self) -> Tuple[str, ApiAdapter]:
        """
        Start a new wizard

        Idle wizards are expired first so abandoned sessions free their slot.

        Raises:
            ServiceUnavailable: If ``max_active_wizards`` are already live
        """
        machine = WizardStateMachine(self.registry, config=self.config)
        adapter = ApiAdapter(machine)
        machine.on_complete = lambda record: self._notify_completion(adapter, record)
        adapter.last_used = self.clock()
        self.expire_idle()
        with self._lock:
            if len(self._wizards) >= self.config.max_active_wizards:
                logger.warning(
                    f"Refusing new wizard: {len(self._wizards)} wizards already active"
                )
                raise ServiceUnavailable("Too many active wizards, try again later")
            wizard_id = str(uuid.uuid4())
            self._wizards[wizard_id] = adapter
        logger.info(f"Started wizard {wizard_id}")
        return wizard_id, adapter

    def get(self, wizard_id: str) -> ApiAdapter:
        with self._lock:
            adapter = self._wizards.get(wizard_id)
        if adapter is None:
            raise NotFound(f"Wizard {wizard_id} not found")
        adapter.last_used = self.clock()
        return adapter

    def discard(self, wizard_id: str) -> bool:
        with self._lock:
            removed = self._wizards.pop(wizard_id, None)
        if removed is not None:
            logger.info(f"Discarded wizard {wizard_id}")
        return removed is not None

    def expire_idle(self) -> int:
        """
        Drop wizards idle for longer than ``idle_timeout_minutes``

        Returns:
            Number of wizards dropped
        """
        timeout = self.config.idle_timeout_minutes * 60
        if not timeout:
            return 0
        deadline = self.clock() - timeout
        with self._lock:
            expired = [
                wizard_id
                for wizard_id, adapter in self._wizards.items()
                if adapter.last_used < deadline and not adapter.lock.locked()
            ]
            for wizard_id in expired:
                del self._wizards[wizard_id]
        if expired:
            logger.info(f"Expired {len(expired)} idle wizard(s)")
        return len(expired)

    def _notify_completion(self, adapter: ApiAdapter, record: Dict[str, Any]) -> None:
        if self.completion_handler is None:
            return
        try:
            self.completion_handler(record)
        except Exception as e:
            logger.exception(f"Completion handler failed: {e}")
            adapter.completion_error = str(e) or e.__class__.__name__

    def __len__(self) -> int:
        with self._lock:
            return len(self._wizards)

    def __contains__(self, wizard_id: str) -> bool:
        with self._lock:
            return wizard_id in self._wizards


class WizardApi:
    """
    Flask extension serving one wizard definition over JSON

    Usage::

        app = Flask(__name__)
        WizardApi(passenger_registry(), app, completion_handler=submit_booking)

    Args:
        registry: Steps of the wizard being served
        app: Flask application, or None to call ``init_app`` later
        completion_handler: Receives each finalized record
        name: Blueprint name and ``app.extensions`` key
    """

    field_change_schema = FieldChangeSchema()

    def __init__(
        self,
        registry: StepRegistry,
        app=None,
        completion_handler: Optional[CompletionHandler] = None,
        name: str = "stepwizard",
    ):
        self.registry = registry
        self.completion_handler = completion_handler
        self.name = name
        self.config: Optional[WizardConfig] = None
        self.manager: Optional[WizardManager] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.config = WizardConfig.from_app(app)
        self.manager = WizardManager(
            self.registry, config=self.config, completion_handler=self.completion_handler
        )
        app.register_blueprint(self.create_blueprint(), url_prefix=self.config.url_prefix)
        app.extensions[self.name] = self
        logger.debug(f"Wizard API '{self.name}' registered at {self.config.url_prefix}")

    def create_blueprint(self) -> Blueprint:
        bp = Blueprint(self.name, __name__)
        bp.add_url_rule("/", "start", self.start, methods=["POST"])
        bp.add_url_rule("/<wizard_id>", "show", self.show, methods=["GET"])
        bp.add_url_rule("/<wizard_id>", "dismiss", self.dismiss, methods=["DELETE"])
        bp.add_url_rule("/<wizard_id>/fields", "change_field", self.change_field, methods=["POST"])
        bp.add_url_rule("/<wizard_id>/next", "next_step", self.next_step, methods=["POST"])
        bp.add_url_rule("/<wizard_id>/back", "previous_step", self.previous_step, methods=["POST"])
        bp.add_url_rule("/<wizard_id>/submit", "submit", self.submit, methods=["POST"])

        bp.register_error_handler(IllegalTransitionError, self._illegal_transition)
        bp.register_error_handler(UnknownFieldError, self._unknown_field)
        bp.register_error_handler(ValidationError, self._invalid_payload)
        bp.register_error_handler(HTTPException, self._http_error)
        return bp

    # Views

    def start(self):
        wizard_id, adapter = self.manager.start()
        with adapter.lock:
            adapter.refresh()
            return self._respond(wizard_id, adapter, 201)

    def show(self, wizard_id: str):
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            adapter.refresh()
            return self._respond(wizard_id, adapter)

    def dismiss(self, wizard_id: str):
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            self.manager.discard(wizard_id)
        return "", 204

    def change_field(self, wizard_id: str):
        change = self.field_change_schema.load(request.get_json(silent=True) or {})
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            adapter.on_field_change(change["name"], change["value"])
            return self._respond(wizard_id, adapter)

    def next_step(self, wizard_id: str):
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            adapter.on_next()
            return self._respond(wizard_id, adapter)

    def previous_step(self, wizard_id: str):
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            adapter.on_back()
            return self._respond(wizard_id, adapter)

    def submit(self, wizard_id: str):
        adapter = self.manager.get(wizard_id)
        with adapter.lock:
            adapter.on_submit_final()
            return self._respond(wizard_id, adapter)

    # Helpers

    def _respond(self, wizard_id: str, adapter: ApiAdapter, status: int = 200):
        body = {"id": wizard_id, "wizard": adapter.payload}
        if adapter.machine.is_completed:
            body["record"] = adapter.machine.record
            if adapter.completion_error is not None:
                # Record is final even though the handler failed
                body["message"] = f"Completion handler failed: {adapter.completion_error}"
                status = 500
            self.manager.discard(wizard_id)
        return jsonify(body), status

    def _illegal_transition(self, e: IllegalTransitionError):
        return jsonify({"message": str(e), "operation": e.operation}), 409

    def _unknown_field(self, e: UnknownFieldError):
        return jsonify({"message": str(e), "field": e.field_name}), 400

    def _invalid_payload(self, e: ValidationError):
        return jsonify({"message": "Invalid payload", "errors": e.messages}), 400

    def _http_error(self, e: HTTPException):
        return jsonify({"message": e.description}), e.code
