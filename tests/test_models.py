"""
Tests for the small data types and config helpers.
"""

import pytest

from autosolver.config import get_api_key
from autosolver.models import LogEntry, LogStage, Progress, StageResult


class TestProgress:

    def test_fraction(self):
        assert Progress(total=4, current=1).fraction == 0.25

    def test_fraction_with_no_questions(self):
        assert Progress().fraction == 0.0

    def test_elapsed(self):
        assert Progress().elapsed is None
        assert Progress(started_at=10.0, finished_at=12.5).elapsed == 2.5


class TestStageResult:

    def test_success(self):
        result = StageResult.success(["q"])
        assert result.ok
        assert result.value == ["q"]

    def test_failure(self):
        error = RuntimeError("boom")
        result = StageResult.failure(error)
        assert not result.ok
        assert result.error is error


class TestLogEntry:

    def test_clock_format(self):
        entry = LogEntry(timestamp=0.0, stage=LogStage.SYSTEM, message="hi")
        assert len(entry.clock) == 8
        assert entry.clock.count(":") == 2

    def test_frozen(self):
        entry = LogEntry(timestamp=0.0, stage=LogStage.SYSTEM, message="hi")
        with pytest.raises(AttributeError):
            entry.message = "changed"


class TestApiKey:

    def test_none_when_unset(self):
        assert get_api_key() is None

    def test_blank_override_falls_through(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        assert get_api_key("   ") == "env-key"

    def test_fallback_variable(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "legacy")
        assert get_api_key() == "legacy"
