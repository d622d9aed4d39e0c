"""
Domain errors raised by the case/evaluation client.

Each error carries a fixed, user-facing message; the underlying cause is
logged at the failure site and chained, never shown to the student.
"""
from .config import GENERATION_ERROR_MESSAGE, EVALUATION_ERROR_MESSAGE


class SimulatorError(Exception):
    """Base class for simulator errors."""

    default_message = "Error inesperado."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class GenerationError(SimulatorError):
    """The external model could not produce a usable clinical case."""

    default_message = GENERATION_ERROR_MESSAGE


class EvaluationError(SimulatorError):
    """The external model could not produce a usable evaluation."""

    default_message = EVALUATION_ERROR_MESSAGE
