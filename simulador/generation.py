"""
Case generation and order evaluation against the external language model
"""
import uuid
import logging

from langchain_core.prompts import ChatPromptTemplate

from .config import (
    CLINICAL_TOPICS, OBSTETRIC_EMERGENCY_TOPICS, DEFAULT_MODEL,
    CASE_TEMPERATURE, EVALUATION_TEMPERATURE
)
from .exceptions import GenerationError, EvaluationError
from .models import GeneratedCase, ClinicalCase, EvaluationResult
from .utils import load_prompt, get_llm, response_to_model

logger = logging.getLogger(__name__)

DEFAULT_CASE_TEMPLATE = (
    "Genera un caso clínico de atención primaria en Colombia alineado con la "
    "Resolución 3280 de 2018 sobre el tema \"{topic}\", con signos vitales "
    "coherentes.\n{topic_instructions}"
)

DEFAULT_EVALUATION_TEMPLATE = (
    "Actúa como un profesor estricto y evalúa de 0.0 a 5.0 las órdenes del "
    "estudiante para un caso de \"{topic}\" (paciente {age} {gender}, "
    "{chief_complaint}; {history}; contexto: {context}).\n"
    "Órdenes: \"{orders}\"\n"
    "Si el campo está vacío o no tiene sentido, califica con 0 o 1."
)

FIRST_RESPONDER_INSTRUCTIONS = (
    "3. Como el tema es \"{topic}\", sitúa el caso en un contexto donde el médico "
    "de atención primaria deba actuar inicialmente."
)


def build_case_prompt() -> ChatPromptTemplate:
    template = load_prompt("case_generation.txt") or DEFAULT_CASE_TEMPLATE
    return ChatPromptTemplate.from_template(template)


def build_evaluation_prompt() -> ChatPromptTemplate:
    template = load_prompt("evaluation.txt") or DEFAULT_EVALUATION_TEMPLATE
    return ChatPromptTemplate.from_template(template)


def topic_instructions(topic: str) -> str:
    if topic in OBSTETRIC_EMERGENCY_TOPICS:
        return FIRST_RESPONDER_INSTRUCTIONS.format(topic=topic)
    return ""


# --- CASE GENERATION ---
def generate_case(topic: str, model: str = DEFAULT_MODEL, llm=None) -> ClinicalCase:
    """
    Generate a clinical case for the given topic.

    Args:
        topic: One of CLINICAL_TOPICS
        model: Display name from MODEL_MAP
        llm: Optional runnable already bound to the GeneratedCase schema

    Returns:
        ClinicalCase with a fresh id and the requested topic

    Raises:
        GenerationError: on any failure, with a fixed user-facing message
    """
    if topic not in CLINICAL_TOPICS:
        logger.error("Rejected case generation for unknown topic: %r", topic)
        raise GenerationError()

    try:
        if llm is None:
            llm = get_llm(model, GeneratedCase, temperature=CASE_TEMPERATURE)
        chain = build_case_prompt() | llm
        response = chain.invoke({
            "topic": topic,
            "topic_instructions": topic_instructions(topic)
        })
        generated = response_to_model(response, GeneratedCase)
    except Exception as e:
        logger.exception("Error generating case for topic %r", topic)
        raise GenerationError() from e

    if generated is None:
        logger.error("Model returned no usable case for topic %r", topic)
        raise GenerationError()

    # id and topic are never trusted from the model output
    data = generated.model_dump()
    data["id"] = uuid.uuid4().hex
    data["topic"] = topic
    clinical_case = ClinicalCase.model_validate(data)
    logger.info("Generated case %s (%s) with %s", clinical_case.id, topic, model)
    return clinical_case


# --- ORDER EVALUATION ---
def evaluate_orders(clinical_case: ClinicalCase, orders: str,
                    model: str = DEFAULT_MODEL, llm=None) -> EvaluationResult:
    """Grade the student's free-text orders for a case."""
    patient = clinical_case.patient_info
    try:
        if llm is None:
            llm = get_llm(model, EvaluationResult, temperature=EVALUATION_TEMPERATURE)
        chain = build_evaluation_prompt() | llm
        response = chain.invoke({
            "topic": clinical_case.topic,
            "age": patient.age,
            "gender": patient.gender,
            "chief_complaint": clinical_case.chief_complaint,
            "history": clinical_case.history_of_present_illness,
            "context": clinical_case.context_hints,
            "orders": orders or ""
        })
        result = response_to_model(response, EvaluationResult)
    except Exception as e:
        logger.exception("Error evaluating orders for case %s", clinical_case.id)
        raise EvaluationError() from e

    if result is None:
        logger.error("Model returned no usable evaluation for case %s", clinical_case.id)
        raise EvaluationError()

    logger.info("Evaluated case %s: score %.1f", clinical_case.id, result.score)
    return result
