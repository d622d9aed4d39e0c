"""
Pydantic models for students, clinical cases and evaluations
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import MIN_SCORE, MAX_SCORE


class StudentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    id_number: str


# --- CASE GENERATION SCHEMA ---
class PatientInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    age: str
    gender: str
    occupation: str
    residence: Optional[str] = None
    insurance_type: str = Field(alias="insuranceType", description="Regimen Contributivo o Subsidiado")


class Vitals(BaseModel):
    """All vital signs are free text; the model formats units inline."""
    model_config = ConfigDict(frozen=True)

    bp: Optional[str] = Field(default=None, description="Tensión arterial")
    hr: Optional[str] = Field(default=None, description="Frecuencia cardiaca")
    rr: Optional[str] = Field(default=None, description="Frecuencia respiratoria")
    temp: Optional[str] = Field(default=None, description="Temperatura")
    o2: Optional[str] = Field(default=None, description="Saturación de oxígeno")
    weight: Optional[str] = None
    height: Optional[str] = None
    bmi: Optional[str] = None


class GeneratedCase(BaseModel):
    """Shape the model must return when generating a case."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(description="Un título clínico descriptivo")
    patient_info: PatientInfo = Field(alias="patientInfo")
    chief_complaint: str = Field(alias="chiefComplaint", description="Motivo de consulta en palabras del paciente")
    history_of_present_illness: str = Field(alias="historyOfPresentIllness", description="Enfermedad actual detallada")
    past_medical_history: str = Field(
        alias="pastMedicalHistory",
        description="Antecedentes patológicos, quirúrgicos, alérgicos, tóxicos"
    )
    family_history: str = Field(default="", alias="familyHistory")
    vitals: Vitals
    physical_exam: str = Field(
        alias="physicalExam",
        description="Hallazgos positivos y negativos relevantes al examen físico"
    )
    labs_and_images: str = Field(default="", alias="labsAndImages", description="Paraclínicos que trae el paciente o 'No aporta'")
    context_hints: str = Field(
        default="",
        alias="contextHints",
        description="Contexto de la ruta de atención (Ej: Ruta Materno Perinatal, etc)"
    )


class ClinicalCase(GeneratedCase):
    id: str
    topic: str


# --- EVALUATION SCHEMA ---
class EvaluationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    score: float = Field(description="Puntuación de 0 a 5")
    positive_aspects: List[str] = Field(alias="positiveAspects")
    areas_for_improvement: List[str] = Field(alias="areasForImprovement")
    recommendations: List[str] = Field(description="Recomendaciones específicas basadas en Res 3280")
    clinical_summary: str = Field(alias="clinicalSummary", description="Resumen breve del manejo ideal según la norma")

    @field_validator("score")
    @classmethod
    def clamp_score(cls, value: float) -> float:
        return min(MAX_SCORE, max(MIN_SCORE, value))
