"""
Session workflow: state snapshots, named transitions, and the per-session controller
"""
import logging
import os
import shutil
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from .config import (
    CLINICAL_TOPICS, CASE_DURATION_SECONDS, MIN_ORDERS_LENGTH, DEFAULT_MODEL,
    CASE_LOAD_FAILED_MESSAGE, EVALUATION_FAILED_MESSAGE
)
from .exceptions import GenerationError, EvaluationError
from .generation import generate_case, evaluate_orders
from .models import StudentInfo, ClinicalCase, EvaluationResult
from .report import export_report
from .timer import CountdownTimer, CountdownHandle

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    IDLE = "IDLE"
    REGISTRATION = "REGISTRATION"
    LOADING_CASE = "LOADING_CASE"
    ACTIVE_CASE = "ACTIVE_CASE"
    EVALUATING = "EVALUATING"
    FEEDBACK = "FEEDBACK"


class SessionState(BaseModel):
    """Immutable snapshot of one student's session."""
    model_config = ConfigDict(frozen=True)

    state: AppState = AppState.IDLE
    student: Optional[StudentInfo] = None
    topic: Optional[str] = None
    case: Optional[ClinicalCase] = None
    orders: str = ""
    evaluation: Optional[EvaluationResult] = None
    remaining: int = CASE_DURATION_SECONDS
    timer_running: bool = False
    error: str = ""


# --- TRANSITIONS ---
# Each returns a new snapshot; called from the wrong state it returns the input.

def enter_registration(s: SessionState) -> SessionState:
    if s.state != AppState.IDLE:
        return s
    return s.model_copy(update={"state": AppState.REGISTRATION})


def cancel_registration(s: SessionState) -> SessionState:
    if s.state != AppState.REGISTRATION:
        return s
    return s.model_copy(update={"state": AppState.IDLE})


def is_valid_registration(name: str, id_number: str, topic: str) -> bool:
    return bool((name or "").strip()) and bool((id_number or "").strip()) and topic in CLINICAL_TOPICS


def submit_registration(s: SessionState, name: str, id_number: str, topic: str) -> SessionState:
    if s.state != AppState.REGISTRATION or not is_valid_registration(name, id_number, topic):
        return s
    return s.model_copy(update={
        "state": AppState.LOADING_CASE,
        "student": StudentInfo(name=name, id_number=id_number),
        "topic": topic,
        "error": ""
    })


def case_loaded(s: SessionState, clinical_case: ClinicalCase) -> SessionState:
    if s.state != AppState.LOADING_CASE:
        return s
    return s.model_copy(update={
        "state": AppState.ACTIVE_CASE,
        "case": clinical_case,
        "orders": "",
        "evaluation": None,
        "remaining": CASE_DURATION_SECONDS,
        "timer_running": True
    })


def case_failed(s: SessionState, message: str) -> SessionState:
    if s.state != AppState.LOADING_CASE:
        return s
    return s.model_copy(update={
        "state": AppState.IDLE,
        "case": None,
        "orders": "",
        "evaluation": None,
        "timer_running": False,
        "error": message
    })


def update_orders(s: SessionState, orders: str) -> SessionState:
    if s.state != AppState.ACTIVE_CASE:
        return s
    return s.model_copy(update={"orders": orders or ""})


def can_submit(s: SessionState, forced: bool = False) -> bool:
    if s.state != AppState.ACTIVE_CASE or s.case is None:
        return False
    return forced or len(s.orders) >= MIN_ORDERS_LENGTH


def submit_orders(s: SessionState, forced: bool = False) -> SessionState:
    """Move to evaluation; forced bypasses the minimum-length guard."""
    if not can_submit(s, forced):
        return s
    return s.model_copy(update={
        "state": AppState.EVALUATING,
        "timer_running": False,
        "error": ""
    })


def evaluation_succeeded(s: SessionState, result: EvaluationResult) -> SessionState:
    if s.state != AppState.EVALUATING:
        return s
    return s.model_copy(update={"state": AppState.FEEDBACK, "evaluation": result})


def evaluation_failed(s: SessionState, message: str) -> SessionState:
    if s.state != AppState.EVALUATING:
        return s
    return s.model_copy(update={
        "state": AppState.ACTIVE_CASE,
        "timer_running": False,
        "error": message
    })


def restart(s: SessionState) -> SessionState:
    if s.state != AppState.FEEDBACK:
        return s
    return s.model_copy(update={
        "state": AppState.REGISTRATION,
        "case": None,
        "evaluation": None,
        "orders": "",
        "remaining": CASE_DURATION_SECONDS,
        "timer_running": False,
        "error": ""
    })


def set_remaining(s: SessionState, remaining: int) -> SessionState:
    if s.state != AppState.ACTIVE_CASE or not s.timer_running:
        return s
    remaining = max(0, int(remaining))
    if remaining == s.remaining:
        return s
    return s.model_copy(update={"remaining": remaining})


def tick(s: SessionState) -> SessionState:
    if s.remaining <= 0:
        return s
    return set_remaining(s, s.remaining - 1)


# --- CONTROLLER ---
class SimulationController:
    """
    Owns one session's snapshot and countdown, and calls the model client.

    The client calls only happen from LOADING_CASE and EVALUATING, so at most
    one request is in flight per session. The countdown is the source of the
    remaining time; the snapshot copies it after every tick.
    """

    def __init__(self, generate: Callable[..., ClinicalCase] = generate_case,
                 evaluate: Callable[..., EvaluationResult] = evaluate_orders,
                 model: str = DEFAULT_MODEL):
        self.generate_fn = generate
        self.evaluate_fn = evaluate
        self.model = model
        self.session = SessionState()
        self.timer = CountdownTimer(CASE_DURATION_SECONDS, on_expire=self._time_up)
        self._countdown: Optional[CountdownHandle] = None
        self._report_path: Optional[str] = None

    @property
    def state(self) -> AppState:
        return self.session.state

    @property
    def countdown_id(self) -> Optional[int]:
        """Token of the running countdown, passed back by the UI with each tick."""
        return self._countdown.id if self._countdown is not None else None

    def _stop_countdown(self):
        self.timer.cancel()
        self._countdown = None

    def _sync_remaining(self):
        self.session = set_remaining(self.session, self.timer.remaining)

    def _time_up(self):
        logger.info("Time is up, forcing submission")
        self._sync_remaining()
        self.submit(forced=True)

    # -- registration --
    def enter_registration(self) -> SessionState:
        self.session = enter_registration(self.session)
        return self.session

    def cancel(self) -> SessionState:
        self.session = cancel_registration(self.session)
        return self.session

    def register(self, name: str, id_number: str, topic: str) -> bool:
        before = self.session
        self.session = submit_registration(self.session, name, id_number, topic)
        return self.session is not before

    # -- case --
    def load_case(self) -> SessionState:
        if self.session.state != AppState.LOADING_CASE:
            return self.session
        try:
            clinical_case = self.generate_fn(self.session.topic, model=self.model)
        except GenerationError:
            logger.warning("Case generation failed for topic %r", self.session.topic)
            self.session = case_failed(self.session, CASE_LOAD_FAILED_MESSAGE)
            return self.session

        self.session = case_loaded(self.session, clinical_case)
        self._countdown = self.timer.start(self.session.remaining)
        return self.session

    def set_orders(self, orders: str) -> SessionState:
        self.session = update_orders(self.session, orders)
        return self.session

    def tick(self, countdown_id: Optional[int] = None) -> SessionState:
        """
        Advance the countdown by one second; expiry forces submission.

        Args:
            countdown_id: Token read from countdown_id when the tick was
                scheduled. A tick for an older countdown is ignored.
        """
        handle = self._countdown
        if handle is None or self.session.state != AppState.ACTIVE_CASE:
            return self.session
        if countdown_id is not None and countdown_id != handle.id:
            logger.debug("Ignoring tick for countdown %s, live one is %s", countdown_id, handle.id)
            return self.session
        if not self.timer.tick(handle):
            self._sync_remaining()
        return self.session

    def submit(self, forced: bool = False) -> bool:
        before = self.session
        self.session = submit_orders(self.session, forced)
        if self.session is before:
            return False
        self._stop_countdown()
        return True

    def submit_manual(self) -> bool:
        """Button submission; once time has run out it is treated as forced."""
        return self.submit(forced=self.session.remaining <= 0)

    def evaluate(self) -> SessionState:
        if self.session.state != AppState.EVALUATING:
            return self.session
        try:
            result = self.evaluate_fn(self.session.case, self.session.orders, model=self.model)
        except EvaluationError:
            logger.warning("Evaluation failed for case %s", self.session.case.id)
            self.session = evaluation_failed(self.session, EVALUATION_FAILED_MESSAGE)
            return self.session

        self.session = evaluation_succeeded(self.session, result)
        return self.session

    # -- feedback --
    def restart(self) -> SessionState:
        self._stop_countdown()
        self.discard_report()
        self.session = restart(self.session)
        return self.session

    def export_report(self, output_dir: Optional[str] = None) -> Optional[str]:
        """
        Write the PDF for the current feedback and return its path.

        Without output_dir the file lives in a temporary directory that is
        removed when the next report is written or the session restarts.
        """
        s = self.session
        if s.state != AppState.FEEDBACK or s.evaluation is None:
            return None
        path = export_report(s.case, s.student, s.orders, s.evaluation, output_dir=output_dir)
        self.discard_report()
        if output_dir is None:
            self._report_path = path
        return path

    def discard_report(self):
        """Remove the temporary report written by the previous export, if any."""
        if self._report_path is None:
            return
        shutil.rmtree(os.path.dirname(self._report_path), ignore_errors=True)
        self._report_path = None
