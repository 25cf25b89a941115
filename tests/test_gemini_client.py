"""
Tests for the Gemini cloud client.

The SDK client is mocked; no request leaves the process.
"""

from unittest.mock import MagicMock, patch

import pytest
from google.genai import types

from autosolver import gemini_client
from autosolver.exceptions import ConfigurationError, SegmentationError
from autosolver.prompts import ANSWER_FAILED, NO_ANSWER


@pytest.fixture
def sdk():
    """Patched genai.Client; yields the instance the client module will use."""
    with patch("autosolver.gemini_client.genai.Client") as client_cls:
        instance = client_cls.return_value
        instance.models.generate_content.return_value = MagicMock(text="[]")
        yield client_cls, instance


class TestCredentials:
    """API key resolution"""

    def test_missing_key_raises_before_network(self, sdk):
        client_cls, instance = sdk
        with pytest.raises(ConfigurationError) as excinfo:
            gemini_client.segment("1. What is X?")
        assert str(excinfo.value) == "API Key not set"
        client_cls.assert_not_called()
        instance.models.generate_content.assert_not_called()

    def test_missing_key_also_fails_answer(self, sdk):
        with pytest.raises(ConfigurationError, match="^API Key not set$"):
            gemini_client.answer("What is X?", "notes")

    def test_placeholder_key_counts_as_unset(self, sdk, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "your-gemini-api-key-here")
        with pytest.raises(ConfigurationError):
            gemini_client.segment("text")

    def test_env_key_is_used(self, sdk, monkeypatch):
        client_cls, _ = sdk
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        gemini_client.segment("text")
        client_cls.assert_called_once_with(api_key="env-key")

    def test_override_beats_env(self, sdk, monkeypatch):
        client_cls, _ = sdk
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        gemini_client.segment("text", api_key="typed-key")
        client_cls.assert_called_once_with(api_key="typed-key")

    def test_client_cached_per_key(self, sdk):
        client_cls, _ = sdk
        gemini_client.segment("a", api_key="k1")
        gemini_client.segment("b", api_key="k1")
        gemini_client.segment("c", api_key="k2")
        assert client_cls.call_count == 2

    def test_only_latest_key_is_cached(self, sdk):
        client_cls, _ = sdk
        for key in ("k1", "k2", "k3"):
            gemini_client.segment("text", api_key=key)
        assert list(gemini_client._clients) == ["k3"]

        gemini_client.segment("text", api_key="k1")
        assert list(gemini_client._clients) == ["k1"]
        assert client_cls.call_count == 4


class TestSegment:
    """Question bank segmentation"""

    def test_parses_json_array(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(
            text='["What is X?", "What is Y?"]'
        )
        assert gemini_client.segment("1. What is X? 2. What is Y?", api_key="k") == [
            "What is X?",
            "What is Y?",
        ]

    def test_requests_structured_output(self, sdk):
        _, instance = sdk
        gemini_client.segment("raw text", api_key="k", model="gemini-test")

        kwargs = instance.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "raw text" in kwargs["contents"]
        assert "JSON array of strings" in kwargs["contents"]
        config = kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.response_schema.type == types.Type.ARRAY
        assert config.response_schema.items.type == types.Type.STRING

    def test_empty_response_gives_empty_list(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(text="")
        assert gemini_client.segment("text", api_key="k") == []

    def test_malformed_json_raises(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(text='["unterminated')
        with pytest.raises(SegmentationError) as excinfo:
            gemini_client.segment("text", api_key="k")
        assert str(excinfo.value) == "Failed to analyze question bank."
        assert excinfo.value.__cause__ is not None

    def test_non_array_json_raises(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(text='{"q": "x"}')
        with pytest.raises(SegmentationError):
            gemini_client.segment("text", api_key="k")

    def test_sdk_failure_raises(self, sdk):
        _, instance = sdk
        instance.models.generate_content.side_effect = RuntimeError("503 unavailable")
        with pytest.raises(SegmentationError):
            gemini_client.segment("text", api_key="k")


class TestAnswer:
    """Answering single questions"""

    def test_returns_model_text(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(text="X is a letter.")
        assert gemini_client.answer("What is X?", "notes", api_key="k") == "X is a letter."

    def test_empty_text_gives_placeholder(self, sdk):
        _, instance = sdk
        instance.models.generate_content.return_value = MagicMock(text=None)
        assert gemini_client.answer("What is X?", "notes", api_key="k") == NO_ANSWER

    def test_failure_gives_placeholder(self, sdk):
        _, instance = sdk
        instance.models.generate_content.side_effect = RuntimeError("429 quota")
        assert gemini_client.answer("What is X?", "notes", api_key="k") == ANSWER_FAILED

    def test_context_truncated_to_50k(self, sdk):
        _, instance = sdk
        context = "a" * 50_000 + "b" * 10
        gemini_client.answer("What is X?", context, api_key="k")

        prompt = instance.models.generate_content.call_args.kwargs["contents"]
        assert "a" * 50_000 in prompt
        assert "b" not in prompt.split("Question:")[0].split("Source Notes:")[1]
        assert "What is X?" in prompt
