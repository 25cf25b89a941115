"""Shared fixtures: no real API keys, no network, no sleeping."""

from unittest.mock import MagicMock

import pytest

from autosolver import gemini_client
from autosolver.pipeline import Pipeline


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    """Tests never see a key from the developer's shell or .env file."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture(autouse=True)
def fresh_gemini_clients():
    gemini_client._clients.clear()
    yield
    gemini_client._clients.clear()


def fake_extract(file):
    return file.data.decode("utf-8")


@pytest.fixture
def make_pipeline():
    """Build a Pipeline with fake collaborators; keyword args override them."""

    def _make(**overrides):
        options = {
            "extract": fake_extract,
            "segment": MagicMock(return_value=["What is X?", "What is Y?"]),
            "answer": MagicMock(side_effect=lambda q, ctx, cfg: f"Answer to {q}"),
            "compile_doc": MagicMock(return_value=b"docx-bytes"),
            "sleep": MagicMock(),
            "solve_delay": 0.5,
        }
        options.update(overrides)
        return Pipeline(**options)

    return _make


@pytest.fixture
def loaded_pipeline(make_pipeline):
    """A pipeline holding one question bank and one source file, ready to start."""

    def _make(**overrides):
        p = make_pipeline(**overrides)
        p.set_question_bank("bank.txt", b"1. What is X? 2. What is Y?")
        p.set_source_files([("notes.txt", b"X is a letter. Y is another letter.")])
        return p

    return _make
