"""Tests for the session state machine and its controller"""
import os
import re

import pytest

from simulador.config import (
    CASE_DURATION_SECONDS, CASE_LOAD_FAILED_MESSAGE, EVALUATION_FAILED_MESSAGE
)
from simulador.exceptions import GenerationError, EvaluationError
from simulador.views import format_score, score_tier
from simulador import workflow
from simulador.workflow import AppState, SessionState

TOPIC = "Atención del parto"


def active_controller(controller):
    controller.enter_registration()
    controller.register("Pepito Pérez", "123456789", TOPIC)
    controller.load_case()
    assert controller.state == AppState.ACTIVE_CASE
    return controller


class TestTransitions:

    def test_rejected_transitions_return_same_snapshot(self):
        s = SessionState()
        assert workflow.cancel_registration(s) is s
        assert workflow.submit_orders(s) is s
        assert workflow.restart(s) is s
        assert workflow.tick(s) is s

    def test_registration_stores_pair_unchanged(self):
        s = workflow.enter_registration(SessionState())
        s = workflow.submit_registration(s, " Ana Ruiz ", "987", TOPIC)
        assert s.state == AppState.LOADING_CASE
        assert s.student.name == " Ana Ruiz "
        assert s.student.id_number == "987"
        assert s.topic == TOPIC

    @pytest.mark.parametrize("name,id_number,topic", [
        ("", "123", TOPIC),
        ("   ", "123", TOPIC),
        ("Ana", "  ", TOPIC),
        ("Ana", "123", "Cardiología"),
    ])
    def test_invalid_registration_is_rejected(self, name, id_number, topic):
        s = workflow.enter_registration(SessionState())
        assert workflow.submit_registration(s, name, id_number, topic) is s

    def test_case_loaded_resets_orders_and_time(self, clinical_case):
        s = SessionState(state=AppState.LOADING_CASE, orders="viejo", remaining=12)
        s = workflow.case_loaded(s, clinical_case)
        assert s.state == AppState.ACTIVE_CASE
        assert s.orders == ""
        assert s.remaining == CASE_DURATION_SECONDS
        assert s.timer_running

    def test_tick_stops_at_zero(self, clinical_case):
        s = SessionState(state=AppState.ACTIVE_CASE, case=clinical_case, remaining=1, timer_running=True)
        s = workflow.tick(s)
        assert s.remaining == 0
        assert workflow.tick(s).remaining == 0

    def test_forced_submission_bypasses_minimum_length(self, clinical_case):
        s = SessionState(state=AppState.ACTIVE_CASE, case=clinical_case, orders="")
        assert workflow.submit_orders(s) is s
        assert workflow.submit_orders(s, forced=True).state == AppState.EVALUATING


class TestController:

    def test_cancel_returns_to_idle(self, controller):
        controller.enter_registration()
        controller.cancel()
        assert controller.state == AppState.IDLE

    def test_registration_transitions_once(self, controller, client):
        controller.enter_registration()
        assert controller.register("Pepito Pérez", "123456789", TOPIC)
        assert controller.state == AppState.LOADING_CASE
        assert not controller.register("Otro", "1", TOPIC)
        assert controller.session.student.name == "Pepito Pérez"
        assert client.generated == []

    def test_generation_failure_returns_to_idle(self, controller, client):
        client.generate_error = GenerationError()
        controller.enter_registration()
        controller.register("Pepito Pérez", "123456789", TOPIC)
        controller.load_case()

        s = controller.session
        assert s.state == AppState.IDLE
        assert s.error == CASE_LOAD_FAILED_MESSAGE
        assert s.case is None
        assert not controller.timer.active

    def test_load_case_only_from_loading_state(self, controller, client):
        controller.load_case()
        assert client.generated == []

    def test_happy_path(self, controller, client, clinical_case):
        active_controller(controller)
        assert controller.session.case is clinical_case
        assert controller.timer.active

        controller.set_orders("1234567890")
        assert controller.submit()
        assert controller.state == AppState.EVALUATING
        assert not controller.timer.active

        controller.evaluate()
        s = controller.session
        assert s.state == AppState.FEEDBACK
        assert client.evaluated == [(clinical_case.id, "1234567890")]
        assert format_score(s.evaluation.score) == "4.2/5.0"
        assert score_tier(s.evaluation.score) == "good"

    def test_short_manual_submission_rejected(self, controller, client):
        active_controller(controller)
        controller.set_orders("123456789")
        assert not controller.submit()
        assert controller.state == AppState.ACTIVE_CASE
        controller.evaluate()
        assert client.evaluated == []

    def test_timer_expiry_forces_submission(self, controller, client, clinical_case):
        active_controller(controller)
        for _ in range(CASE_DURATION_SECONDS - 1):
            controller.tick()
        assert controller.state == AppState.ACTIVE_CASE
        assert controller.session.remaining == 1

        controller.tick()
        assert controller.state == AppState.EVALUATING
        assert controller.session.remaining == 0

        controller.evaluate()
        assert controller.state == AppState.FEEDBACK
        assert client.evaluated == [(clinical_case.id, "")]

    def test_ticks_after_expiry_do_nothing(self, controller):
        active_controller(controller)
        for _ in range(CASE_DURATION_SECONDS + 5):
            controller.tick()
        assert controller.state == AppState.EVALUATING
        assert controller.session.remaining == 0

    def test_evaluation_failure_keeps_case_and_orders(self, controller, client, clinical_case):
        active_controller(controller)
        controller.set_orders("Remitir a segundo nivel")
        controller.submit()
        client.evaluate_error = EvaluationError()
        controller.evaluate()

        s = controller.session
        assert s.state == AppState.ACTIVE_CASE
        assert s.case is clinical_case
        assert s.orders == "Remitir a segundo nivel"
        assert s.error == EVALUATION_FAILED_MESSAGE
        assert not s.timer_running

        # Timer stays paused
        remaining = s.remaining
        controller.tick()
        assert controller.session.remaining == remaining

        # Resubmission works
        client.evaluate_error = None
        assert controller.submit()
        controller.evaluate()
        assert controller.state == AppState.FEEDBACK
        assert controller.session.error == ""

    def test_resubmission_after_expiry_is_forced(self, controller, client):
        active_controller(controller)
        client.evaluate_error = EvaluationError()
        for _ in range(CASE_DURATION_SECONDS):
            controller.tick()
        controller.evaluate()
        assert controller.state == AppState.ACTIVE_CASE

        client.evaluate_error = None
        assert controller.submit_manual()
        assert controller.state == AppState.EVALUATING

    def test_restart_keeps_identity_only(self, controller):
        active_controller(controller)
        controller.set_orders("1234567890")
        controller.submit()
        controller.evaluate()
        controller.restart()

        s = controller.session
        assert s.state == AppState.REGISTRATION
        assert s.case is None
        assert s.evaluation is None
        assert s.orders == ""
        assert s.student.id_number == "123456789"

    def test_new_case_after_restart_rearms_timer(self, controller):
        active_controller(controller)
        controller.tick()
        controller.set_orders("1234567890")
        controller.submit()
        controller.evaluate()
        controller.restart()
        controller.register("Pepito Pérez", "123456789", TOPIC)
        controller.load_case()

        assert controller.session.remaining == CASE_DURATION_SECONDS
        controller.tick()
        assert controller.session.remaining == CASE_DURATION_SECONDS - 1
        assert controller.timer.remaining == CASE_DURATION_SECONDS - 1

    def test_export_report_only_in_feedback(self, controller, tmp_path):
        active_controller(controller)
        assert controller.export_report(str(tmp_path)) is None

        controller.set_orders("1234567890")
        controller.submit()
        controller.evaluate()
        path = controller.export_report(str(tmp_path))

        assert os.path.exists(path)
        assert re.fullmatch(r"Reporte_Caso_123456789_\d+\.pdf", os.path.basename(path))

    def test_session_time_follows_countdown(self, controller):
        active_controller(controller)
        for _ in range(5):
            controller.tick()
            assert controller.session.remaining == controller.timer.remaining
        assert controller.session.remaining == CASE_DURATION_SECONDS - 5

    def test_tick_for_previous_countdown_is_ignored(self, controller):
        active_controller(controller)
        old_id = controller.countdown_id
        controller.set_orders("1234567890")
        controller.submit()
        controller.evaluate()
        controller.restart()
        controller.register("Pepito Pérez", "123456789", TOPIC)
        controller.load_case()

        assert controller.countdown_id != old_id
        controller.tick(old_id)
        assert controller.session.remaining == CASE_DURATION_SECONDS
        controller.tick(controller.countdown_id)
        assert controller.session.remaining == CASE_DURATION_SECONDS - 1

    def test_no_countdown_token_outside_active_case(self, controller):
        assert controller.countdown_id is None
        active_controller(controller)
        assert controller.countdown_id is not None
        controller.set_orders("1234567890")
        controller.submit()
        assert controller.countdown_id is None


class TestReportFiles:

    def finished(self, controller):
        active_controller(controller)
        controller.set_orders("1234567890")
        controller.submit()
        controller.evaluate()
        return controller

    def test_default_export_uses_temporary_directory(self, controller):
        path = self.finished(controller).export_report()
        assert os.path.exists(path)
        assert os.path.basename(os.path.dirname(path)).startswith("simulador_reporte_")
        controller.discard_report()
        assert not os.path.exists(path)

    def test_new_export_removes_previous_file(self, controller):
        self.finished(controller)
        first = controller.export_report()
        second = controller.export_report()
        assert not os.path.exists(first)
        assert os.path.exists(second)
        controller.discard_report()

    def test_restart_removes_report(self, controller):
        path = self.finished(controller).export_report()
        controller.restart()
        assert not os.path.exists(path)

    def test_explicit_directory_is_left_alone(self, controller, tmp_path):
        path = self.finished(controller).export_report(str(tmp_path))
        controller.restart()
        assert os.path.exists(path)
