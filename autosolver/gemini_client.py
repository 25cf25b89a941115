"""
gemini_client.py — Cloud provider backed by Google Gemini.

Segments a question bank with a structured-output request (JSON array of
strings) and answers single questions against the source notes.
"""

import json
import logging

from google import genai
from google.genai import types

from autosolver.config import CLOUD_CONTEXT_LIMIT, GEMINI_MODEL, get_api_key
from autosolver.exceptions import ConfigurationError, SegmentationError
from autosolver.prompts import (
    ANSWER_FAILED,
    NO_ANSWER,
    build_answer_prompt,
    build_segment_prompt,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Client cache (only the client for the most recently used key is kept)
# ---------------------------------------------------------------------------
_clients: dict[str, genai.Client] = {}

QUESTION_LIST_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(type=types.Type.STRING),
)


def _get_client(api_key=None) -> genai.Client:
    key = get_api_key(api_key)
    if key is None:
        raise ConfigurationError()
    if key not in _clients:
        _clients.clear()
        _clients[key] = genai.Client(api_key=key)
    return _clients[key]


def _parse_question_list(payload: str) -> list[str]:
    questions = json.loads(payload)
    if not isinstance(questions, list) or not all(isinstance(q, str) for q in questions):
        raise ValueError(f"expected a JSON array of strings, got {type(questions).__name__}")
    return questions


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def segment(raw_text: str, api_key=None, model: str = GEMINI_MODEL) -> list[str]:
    """
    Split the raw question-bank text into individual questions.

    Parameters
    ----------
    raw_text : str
        Text extracted from the question-bank document.
    api_key : str, optional
        Overrides ``GEMINI_API_KEY`` for this call.
    model : str
        Gemini model id.

    Returns
    -------
    list[str]
        Questions in document order; empty when the model returned nothing.

    Raises
    ------
    ConfigurationError
        No API key is available. Raised before any network call.
    SegmentationError
        The request failed or the response was not a JSON array of strings.
    """
    client = _get_client(api_key)
    prompt = build_segment_prompt(raw_text)

    try:
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=QUESTION_LIST_SCHEMA,
            ),
        )
        if not response.text:
            return []
        return _parse_question_list(response.text)
    except Exception as exc:
        logger.error("Gemini analysis error: %s", exc)
        raise SegmentationError() from exc


def answer(question: str, context: str, api_key=None,
           model: str = GEMINI_MODEL) -> str:
    """
    Answer *question* using at most the first 50k characters of *context*.

    Backend failures never propagate; a placeholder string is returned
    instead so one bad question does not stop the run. A missing API key
    still raises ``ConfigurationError``.
    """
    client = _get_client(api_key)
    prompt = build_answer_prompt(question, context, CLOUD_CONTEXT_LIMIT)

    try:
        response = client.models.generate_content(model=model, contents=prompt)
    except Exception as exc:
        logger.error("Gemini solver error: %s", exc)
        return ANSWER_FAILED
    return response.text or NO_ANSWER
