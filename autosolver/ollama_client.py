"""
ollama_client.py — Local provider backed by an Ollama daemon.

Talks to the daemon's HTTP API directly with requests:

  GET  /api/tags      liveness probe and model list
  POST /api/generate  non-streaming completion
  POST /api/pull      start downloading a model
"""

import json
import logging
import re

import requests

from autosolver.config import (
    LOCAL_CONTEXT_LIMIT,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
    OLLAMA_PROBE_TIMEOUT,
)
from autosolver.exceptions import ProviderError, SegmentationError
from autosolver.prompts import (
    ANSWER_FAILED,
    NO_ANSWER,
    build_answer_prompt,
    build_segment_prompt,
)

logger = logging.getLogger(__name__)

SEGMENT_TEMPERATURE = 0.3
ANSWER_TEMPERATURE = 0.7
TOP_P = 0.9
TOP_K = 40

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


# ---------------------------------------------------------------------------
# Daemon status
# ---------------------------------------------------------------------------

def probe_local(base_url: str = OLLAMA_BASE_URL,
                timeout: float = OLLAMA_PROBE_TIMEOUT) -> bool:
    """Return True if the daemon answers ``/api/tags`` with a 2xx. Never raises."""
    try:
        resp = requests.get(f"{base_url}/api/tags", timeout=timeout)
    except requests.RequestException as exc:
        logger.info("Ollama is not running: %s", exc)
        return False
    return 200 <= resp.status_code < 300


def list_models(base_url: str = OLLAMA_BASE_URL,
                timeout: float = OLLAMA_PROBE_TIMEOUT) -> list[str]:
    """Names of the models the daemon has pulled; empty on any failure."""
    try:
        resp = requests.get(f"{base_url}/api/tags", timeout=timeout)
        resp.raise_for_status()
        models = resp.json().get("models") or []
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Failed to list Ollama models: %s", exc)
        return []
    return [m["name"] for m in models if "name" in m]


def pull_model(name: str, base_url: str = OLLAMA_BASE_URL) -> None:
    """
    Ask the daemon to download *name*.

    The endpoint streams progress lines; they are not read, the download
    carries on inside the daemon after the response is closed.
    """
    try:
        resp = requests.post(f"{base_url}/api/pull", json={"name": name}, stream=True)
    except requests.RequestException as exc:
        raise ProviderError(f"Failed to pull model: {exc}") from exc

    with resp:
        if not resp.ok:
            raise ProviderError(f"Failed to pull model: {resp.reason}")
    logger.info("Model %s pull initiated", name)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def generate(prompt: str, model: str = OLLAMA_MODEL,
             temperature: float = ANSWER_TEMPERATURE,
             base_url: str = OLLAMA_BASE_URL) -> str:
    """
    Run a single non-streaming completion and return the ``response`` text.

    Raises
    ------
    ProviderError
        The daemon is unreachable, answered with an error status, or sent
        a body without a ``response`` field.
    """
    body = {
        "model": model,
        "prompt": prompt,
        "stream": False,
        "options": {
            "temperature": temperature,
            "top_p": TOP_P,
            "top_k": TOP_K,
        },
    }

    try:
        resp = requests.post(f"{base_url}/api/generate", json=body)
    except requests.RequestException as exc:
        raise ProviderError(f"Failed to generate with Ollama: {exc}") from exc

    if not resp.ok:
        raise ProviderError(f"Failed to generate with Ollama: Ollama API error: {resp.reason}")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise ProviderError(f"Failed to generate with Ollama: malformed response ({exc})") from exc

    reply = payload.get("response") if isinstance(payload, dict) else None
    if not isinstance(reply, str):
        raise ProviderError("Failed to generate with Ollama: response carries no text")
    return reply


def segment(raw_text: str, model: str = OLLAMA_MODEL,
            base_url: str = OLLAMA_BASE_URL) -> list[str]:
    """
    Split the raw question-bank text into questions with a local model.

    Local models wrap the array in chatter, so the outermost ``[...]`` span
    of the reply is parsed. A reply without one yields ``[]``; a span that
    is not valid JSON raises ``SegmentationError``.
    """
    prompt = build_segment_prompt(raw_text, local=True)

    try:
        reply = generate(prompt, model=model, temperature=SEGMENT_TEMPERATURE,
                         base_url=base_url)
    except ProviderError as exc:
        logger.error("Ollama analysis error: %s", exc)
        raise SegmentationError() from exc

    match = _JSON_ARRAY.search(reply)
    if not match:
        logger.warning("Could not extract JSON array from response")
        return []

    try:
        questions = json.loads(match.group(0))
    except ValueError as exc:
        logger.error("Ollama analysis error: %s", exc)
        raise SegmentationError() from exc

    if not isinstance(questions, list) or not all(isinstance(q, str) for q in questions):
        logger.error("Ollama analysis error: expected a JSON array of strings")
        raise SegmentationError()
    return questions


def answer(question: str, context: str, model: str = OLLAMA_MODEL,
           base_url: str = OLLAMA_BASE_URL) -> str:
    """Answer *question* from the first 8k characters of *context*; never raises."""
    prompt = build_answer_prompt(question, context, LOCAL_CONTEXT_LIMIT, local=True)

    try:
        reply = generate(prompt, model=model, temperature=ANSWER_TEMPERATURE,
                         base_url=base_url)
    except ProviderError as exc:
        logger.error("Ollama solver error: %s", exc)
        return ANSWER_FAILED
    return reply.strip() or NO_ANSWER
