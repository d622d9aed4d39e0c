"""
Utility functions for prompt loading and LLM initialization
"""
import os
import logging
from typing import Optional, Type

from dotenv import load_dotenv
from pydantic import BaseModel

from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_anthropic import ChatAnthropic
from langchain_ollama import ChatOllama

from .config import PROMPTS_DIR, MODEL_MAP, FREE_MODELS, DEFAULT_MODEL

# Ensure .env is loaded when this module is imported
load_dotenv()

logger = logging.getLogger(__name__)


# --- FILE I/O ---
def load_prompt(filename: str) -> str:
    """Load prompt template from file."""
    filepath = os.path.join(PROMPTS_DIR, filename)
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        logger.warning("Prompt file %s not found. Using default.", filename)
        return ""


# --- LLM INITIALIZATION ---
def _require_key(env_var: str) -> str:
    api_key = os.getenv(env_var)
    if not api_key:
        raise ValueError(f"{env_var} not found in environment. Please check your .env file.")
    return api_key


def get_chat_model(model_name: str, temperature: float = 0.7):
    """Initialize the chat model for the given display name."""
    model_id = MODEL_MAP.get(model_name)
    if model_id is None:
        logger.warning("Unknown model %s, falling back to %s", model_name, DEFAULT_MODEL)
        model_name = DEFAULT_MODEL
        model_id = MODEL_MAP[model_name]

    if model_name in FREE_MODELS:
        return ChatOllama(model=model_id, temperature=temperature)
    elif model_name.startswith("Gemini"):
        api_key = _require_key("GOOGLE_API_KEY")
        return ChatGoogleGenerativeAI(model=model_id, temperature=temperature, google_api_key=api_key)
    elif model_name == "GPT-4o":
        api_key = _require_key("OPENAI_API_KEY")
        return ChatOpenAI(model=model_id, temperature=temperature, api_key=api_key)
    elif model_name.startswith("Claude"):
        api_key = _require_key("ANTHROPIC_API_KEY")
        return ChatAnthropic(model=model_id, temperature=temperature, api_key=api_key)
    raise ValueError(f"No provider configured for model {model_name}")


def get_llm(model_name: str, schema: Type[BaseModel], temperature: float = 0.7):
    """Initialize LLM bound to a pydantic output schema."""
    return get_chat_model(model_name, temperature).with_structured_output(schema)


def response_to_model(response, schema: Type[BaseModel]) -> Optional[BaseModel]:
    """Coerce a structured-output response into the schema, or None."""
    if response is None:
        return None
    if isinstance(response, schema):
        return response
    if isinstance(response, BaseModel):
        response = response.model_dump(by_alias=True)
    if isinstance(response, dict):
        return schema.model_validate(response)
    logger.warning("Unexpected response type from model: %s", type(response).__name__)
    return None
