"""
Shared fixtures: a fully populated case, an evaluation, and fake model clients.
"""
import pytest

from fakes import CASE_PAYLOAD, EVALUATION_PAYLOAD, FakeClient, fake_llm as make_fake_llm
from simulador.models import ClinicalCase, EvaluationResult, StudentInfo
from simulador.workflow import SimulationController


@pytest.fixture
def fake_llm():
    return make_fake_llm


@pytest.fixture
def case_payload():
    return {**CASE_PAYLOAD, "patientInfo": dict(CASE_PAYLOAD["patientInfo"]),
            "vitals": dict(CASE_PAYLOAD["vitals"])}


@pytest.fixture
def evaluation_payload():
    return {**EVALUATION_PAYLOAD}


@pytest.fixture
def clinical_case():
    return ClinicalCase.model_validate({**CASE_PAYLOAD, "id": "case-1", "topic": "Atención del parto"})


@pytest.fixture
def evaluation():
    return EvaluationResult.model_validate(EVALUATION_PAYLOAD)


@pytest.fixture
def student():
    return StudentInfo(name="Pepito Pérez", id_number="123456789")


@pytest.fixture
def client(clinical_case, evaluation):
    return FakeClient(clinical_case, evaluation)


@pytest.fixture
def controller(client):
    return SimulationController(generate=client.generate, evaluate=client.evaluate, model="test")
