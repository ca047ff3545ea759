# /annotation_backend/services/gemini_service.py

import json
import logging
from typing import Dict

import google.generativeai as genai
from google.generativeai.types import GenerationConfig

from ..core.config import settings
from ..core.errors import ScoringError

logger = logging.getLogger(__name__)

_configured = False


def _ensure_configured() -> None:
    """Configures the Gemini client on first use so the app can start without a key."""
    global _configured
    if _configured:
        return
    if not settings.GOOGLE_API_KEY:
        raise ScoringError("GOOGLE_API_KEY is not set; automated MT scoring is unavailable.")
    genai.configure(api_key=settings.GOOGLE_API_KEY)
    _configured = True


# --- CORE GENERATIVE FUNCTIONS ---

async def generate_json(prompt: str, temperature: float = 0.1) -> Dict:
    """
    Generates a response and guarantees the output is a parsable JSON object
    by using the Gemini API's JSON Mode. Any failure surfaces as ScoringError.
    """
    _ensure_configured()
    try:
        model = genai.GenerativeModel(settings.GEMINI_MODEL)
        config = GenerationConfig(
            temperature=temperature,
            response_mime_type="application/json"
        )
        response = await model.generate_content_async(prompt, generation_config=config)
        if not response.text:
            raise ValueError("AI model returned an empty response.")
        return json.loads(response.text)
    except Exception as e:
        logger.error("generate_json with Gemini API failed: %s", e)
        raise ScoringError(f"Failed to get a valid JSON response from the AI. Error: {e}") from e
