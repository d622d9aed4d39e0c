"""
Canned model payloads and stand-ins for the model client used across the tests.
"""
from langchain_core.runnables import RunnableLambda


CASE_PAYLOAD = {
    "title": "Gestante de 38 semanas en trabajo de parto activo",
    "patientInfo": {
        "name": "María Fernanda Gómez",
        "age": "24 años",
        "gender": "Femenino",
        "occupation": "Comerciante",
        "residence": "Zona rural de Boyacá",
        "insuranceType": "Régimen Subsidiado"
    },
    "chiefComplaint": "Tengo dolores fuertes desde hace 6 horas",
    "historyOfPresentIllness": "Contracciones regulares cada 3 minutos, expulsión de tapón mucoso.",
    "pastMedicalHistory": "G2P1, parto vaginal previo sin complicaciones. Niega alergias.",
    "familyHistory": "Madre con hipertensión arterial.",
    "vitals": {
        "bp": "118/76 mmHg",
        "hr": "88 lpm",
        "rr": "18 rpm",
        "temp": "36.8 °C",
        "o2": "97%",
        "weight": "68 kg",
        "height": "1.58 m",
        "bmi": "27.2"
    },
    "physicalExam": "Altura uterina 33 cm, FCF 140 lpm, dilatación 6 cm, borramiento 80%.",
    "labsAndImages": "Hemoclasificación O+, VIH y sífilis no reactivos.",
    "contextHints": "Ruta Materno Perinatal - atención del parto en primer nivel"
}

EVALUATION_PAYLOAD = {
    "score": 4.2,
    "positiveAspects": ["A"],
    "areasForImprovement": ["B"],
    "recommendations": ["C"],
    "clinicalSummary": "S"
}


def fake_llm(payload, calls=None):
    """Runnable standing in for a structured-output model."""
    def respond(prompt_value):
        if calls is not None:
            calls.append(prompt_value.to_string())
        if isinstance(payload, Exception):
            raise payload
        return payload
    return RunnableLambda(respond)


class FakeClient:
    """Records calls and returns canned results or raises."""

    def __init__(self, clinical_case, evaluation):
        self.clinical_case = clinical_case
        self.evaluation = evaluation
        self.generate_error = None
        self.evaluate_error = None
        self.generated = []
        self.evaluated = []

    def generate(self, topic, model=None):
        self.generated.append(topic)
        if self.generate_error:
            raise self.generate_error
        return self.clinical_case

    def evaluate(self, clinical_case, orders, model=None):
        self.evaluated.append((clinical_case.id, orders))
        if self.evaluate_error:
            raise self.evaluate_error
        return self.evaluation
