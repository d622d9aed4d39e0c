"""
Configuration and constants for Simulador Clínico 3280
"""
import os

# --- PATHS ---
PROMPTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "prompts")

# --- CONSTANTS ---
CLINICAL_TOPICS = [
    "Detección temprana de cáncer de cuello uterino",
    "Ruta integral de atención en salud materno perinatal",
    "Atención del parto",
    "Atención de emergencias obstétricas",
    "Atención para el cuidado preconcepcional"
]

# Topics where the primary-care physician must act as first responder
OBSTETRIC_EMERGENCY_TOPICS = [
    "Atención del parto",
    "Atención de emergencias obstétricas"
]

CASE_DURATION_SECONDS = 7 * 60
URGENT_THRESHOLD_SECONDS = 60
MIN_ORDERS_LENGTH = 10

MIN_SCORE = 0.0
MAX_SCORE = 5.0
PASSING_SCORE = 3.0
GOOD_SCORE = 4.0

CASE_TEMPERATURE = 0.8
EVALUATION_TEMPERATURE = 0.4

# --- MODELS ---
FREE_MODELS = ["Llama3.2", "Qwen 2.5 7B"]
PREMIUM_MODELS = ["Gemini 2.5 Flash", "Gemini 2.5 Pro", "GPT-4o", "Claude 3.5 Sonnet"]
ALL_MODELS = FREE_MODELS + PREMIUM_MODELS

MODEL_MAP = {
    "Llama3.2": "llama3.2:latest",
    "Qwen 2.5 7B": "qwen2.5:7b",
    "Gemini 2.5 Flash": "gemini-2.5-flash",
    "Gemini 2.5 Pro": "gemini-2.5-pro",
    "GPT-4o": "gpt-4o",
    "Claude 3.5 Sonnet": "claude-3-5-sonnet-20240620"
}

DEFAULT_MODEL = os.getenv("SIMULATOR_MODEL", "Gemini 2.5 Flash")
if DEFAULT_MODEL not in MODEL_MAP:
    DEFAULT_MODEL = "Gemini 2.5 Flash"

# --- USER-FACING MESSAGES ---
GENERATION_ERROR_MESSAGE = "No se pudo generar el caso clínico. Intenta nuevamente."
EVALUATION_ERROR_MESSAGE = "Error al evaluar las órdenes. Intenta nuevamente."
CASE_LOAD_FAILED_MESSAGE = "Error generando el caso. Por favor verifica tu conexión o intenta de nuevo."
EVALUATION_FAILED_MESSAGE = "Error al evaluar. Intenta enviar de nuevo."
REPORT_EXPORT_FAILED_MESSAGE = "No fue posible generar el informe PDF. Intenta descargarlo de nuevo."

APP_TITLE = "Simulador Clínico 3280"
REPORT_TITLE = "INFORME DE SIMULACIÓN CLÍNICA - RES. 3280"
