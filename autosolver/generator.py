"""
generator.py — Provider-independent entry points for the two LLM steps.

The Analyst step (``segment_questions``) and the Solver step
(``answer_question``) take an explicit ``ProviderConfig`` and route to
the Gemini or the Ollama client. Nothing here holds global state; the
active provider lives in a ``ProviderSelector`` owned by the caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from autosolver import gemini_client, ollama_client
from autosolver.config import GEMINI_MODEL, OLLAMA_BASE_URL, OLLAMA_MODEL, get_api_key
from autosolver.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    CLOUD = "cloud"
    LOCAL = "local"

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self]


PROVIDER_LABELS = {
    Provider.CLOUD: "Gemini API (Cloud)",
    Provider.LOCAL: f"Ollama ({OLLAMA_MODEL} - Local)",
}


class ProviderSelector:
    """Which backend serves the next Analyst/Solver call. Defaults to cloud."""

    def __init__(self, provider: Provider = Provider.CLOUD):
        self._provider = provider

    def set_provider(self, provider: Provider) -> None:
        self._provider = Provider(provider)

    def get_provider(self) -> Provider:
        return self._provider


@dataclass(frozen=True)
class ProviderConfig:
    """Everything a single LLM call needs to know about its backend."""

    provider: Provider = Provider.CLOUD
    api_key: Optional[str] = None
    cloud_model: str = GEMINI_MODEL
    local_model: str = OLLAMA_MODEL
    ollama_url: str = OLLAMA_BASE_URL


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def segment_questions(raw_text: str, config: ProviderConfig) -> list[str]:
    """
    Analyst step: split question-bank text into discrete questions.

    Parameters
    ----------
    raw_text : str
        Text of the question-bank document.
    config : ProviderConfig
        Backend to use.

    Returns
    -------
    list[str]
        Questions in document order.

    Raises
    ------
    ConfigurationError
        Cloud provider selected and no API key available.
    SegmentationError
        The backend failed or its reply could not be parsed.
    """
    logger.debug("Segmenting with provider %s", config.provider)
    if config.provider == Provider.LOCAL:
        return ollama_client.segment(raw_text, model=config.local_model,
                                     base_url=config.ollama_url)
    return gemini_client.segment(raw_text, api_key=config.api_key,
                                 model=config.cloud_model)


def answer_question(question: str, context: str, config: ProviderConfig) -> str:
    """
    Solver step: answer one question from the concatenated source notes.

    Returns a placeholder answer instead of raising when the backend fails.
    """
    if config.provider == Provider.LOCAL:
        return ollama_client.answer(question, context, model=config.local_model,
                                    base_url=config.ollama_url)
    return gemini_client.answer(question, context, api_key=config.api_key,
                                model=config.cloud_model)


def auto_detect_provider(api_key=None, ollama_url: str = OLLAMA_BASE_URL) -> Provider:
    """Prefer a running local daemon, fall back to the cloud when a key exists."""
    if ollama_client.probe_local(ollama_url):
        return Provider.LOCAL
    if get_api_key(api_key):
        return Provider.CLOUD
    raise ConfigurationError(
        "No AI provider available. Please set up a Gemini API key or install Ollama."
    )
