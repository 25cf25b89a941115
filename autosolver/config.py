"""
config.py — Central settings for AutoSolver.

Values come from the environment (optionally a local .env file) so the
Streamlit app, the clients and the tests all read the same knobs.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Cloud provider (Gemini)
# ---------------------------------------------------------------------------
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
API_KEY_PLACEHOLDER = "your-gemini-api-key-here"

# ---------------------------------------------------------------------------
# Local provider (Ollama)
# ---------------------------------------------------------------------------
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma2:2b")
OLLAMA_PROBE_TIMEOUT = float(os.getenv("OLLAMA_PROBE_TIMEOUT", "5"))

# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------
CLOUD_CONTEXT_LIMIT = 50_000   # characters of source notes sent to Gemini
LOCAL_CONTEXT_LIMIT = 8_000    # small local models choke on more
SOLVE_DELAY_SECONDS = float(os.getenv("SOLVE_DELAY_SECONDS", "0.5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_api_key(override=None):
    """Return the Gemini key, preferring *override* over the environment.

    Read on every call so a key typed into the UI (or exported after
    start-up) takes effect immediately. The .env template placeholder
    counts as unset.
    """
    for candidate in (override, os.getenv("GEMINI_API_KEY"), os.getenv("API_KEY")):
        if candidate and candidate.strip() and candidate != API_KEY_PLACEHOLDER:
            return candidate.strip()
    return None


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
