"""
Tests for provider selection and the provider-independent operations.
"""

from unittest.mock import patch

import pytest

from autosolver.exceptions import ConfigurationError
from autosolver.generator import (
    Provider,
    ProviderConfig,
    ProviderSelector,
    answer_question,
    auto_detect_provider,
    segment_questions,
)


class TestProviderSelector:
    """Session-level provider switch"""

    def test_defaults_to_cloud(self):
        assert ProviderSelector().get_provider() is Provider.CLOUD

    def test_set_overwrites(self):
        selector = ProviderSelector()
        selector.set_provider(Provider.LOCAL)
        assert selector.get_provider() is Provider.LOCAL
        selector.set_provider(Provider.CLOUD)
        assert selector.get_provider() is Provider.CLOUD

    def test_accepts_plain_strings(self):
        selector = ProviderSelector()
        selector.set_provider("local")
        assert selector.get_provider() is Provider.LOCAL

    def test_selectors_are_independent(self):
        a, b = ProviderSelector(), ProviderSelector()
        a.set_provider(Provider.LOCAL)
        assert b.get_provider() is Provider.CLOUD


class TestDispatch:
    """Routing to the configured backend"""

    def test_segment_cloud(self):
        config = ProviderConfig(provider=Provider.CLOUD, api_key="k", cloud_model="g")
        with patch("autosolver.gemini_client.segment", return_value=["Q"]) as cloud, \
                patch("autosolver.ollama_client.segment") as local:
            assert segment_questions("raw", config) == ["Q"]
        cloud.assert_called_once_with("raw", api_key="k", model="g")
        local.assert_not_called()

    def test_segment_local(self):
        config = ProviderConfig(provider=Provider.LOCAL, local_model="m", ollama_url="http://x")
        with patch("autosolver.ollama_client.segment", return_value=["Q"]) as local, \
                patch("autosolver.gemini_client.segment") as cloud:
            assert segment_questions("raw", config) == ["Q"]
        local.assert_called_once_with("raw", model="m", base_url="http://x")
        cloud.assert_not_called()

    def test_answer_cloud(self):
        config = ProviderConfig(provider=Provider.CLOUD, api_key="k", cloud_model="g")
        with patch("autosolver.gemini_client.answer", return_value="A") as cloud:
            assert answer_question("Q", "ctx", config) == "A"
        cloud.assert_called_once_with("Q", "ctx", api_key="k", model="g")

    def test_answer_local(self):
        config = ProviderConfig(provider=Provider.LOCAL, local_model="m", ollama_url="http://x")
        with patch("autosolver.ollama_client.answer", return_value="A") as local:
            assert answer_question("Q", "ctx", config) == "A"
        local.assert_called_once_with("Q", "ctx", model="m", base_url="http://x")


class TestMissingCredential:
    """Cloud calls without any key"""

    def test_segment_raises_exact_message(self):
        with patch("autosolver.gemini_client.genai.Client") as client_cls:
            with pytest.raises(ConfigurationError) as excinfo:
                segment_questions("raw", ProviderConfig())
        assert str(excinfo.value) == "API Key not set"
        client_cls.assert_not_called()

    def test_answer_raises_exact_message(self):
        with patch("autosolver.gemini_client.genai.Client") as client_cls:
            with pytest.raises(ConfigurationError) as excinfo:
                answer_question("Q", "ctx", ProviderConfig())
        assert str(excinfo.value) == "API Key not set"
        client_cls.assert_not_called()

    def test_local_needs_no_key(self):
        with patch("autosolver.ollama_client.segment", return_value=[]) as local:
            segment_questions("raw", ProviderConfig(provider=Provider.LOCAL))
        local.assert_called_once()


class TestAutoDetect:
    """Picking a provider from what is available"""

    def test_prefers_local(self):
        with patch("autosolver.ollama_client.probe_local", return_value=True):
            assert auto_detect_provider() is Provider.LOCAL

    def test_falls_back_to_cloud_with_key(self):
        with patch("autosolver.ollama_client.probe_local", return_value=False):
            assert auto_detect_provider(api_key="k") is Provider.CLOUD

    def test_nothing_available(self):
        with patch("autosolver.ollama_client.probe_local", return_value=False):
            with pytest.raises(ConfigurationError, match="No AI provider available"):
                auto_detect_provider()
