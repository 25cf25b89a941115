"""
models.py — Plain data types shared by the pipeline and the UI.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PipelineState(str, Enum):
    IDLE = "IDLE"
    READING_FILES = "READING_FILES"
    ANALYZING_QUESTIONS = "ANALYZING_QUESTIONS"
    SOLVING = "SOLVING"
    COMPILING = "COMPILING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class FileRole(str, Enum):
    QUESTION_BANK = "question-bank"
    SOURCE_MATERIAL = "source-material"


class QuestionStatus(str, Enum):
    PENDING = "pending"
    SOLVING = "solving"
    DONE = "done"
    ERROR = "error"


class LogStage(str, Enum):
    READER = "Reader"
    ANALYST = "Analyst"
    SOLVER = "Solver"
    WRITER = "Writer"
    SYSTEM = "System"


@dataclass
class InputFile:
    """An uploaded document. Text is extracted per run, never stored here."""

    name: str
    role: FileRole
    data: bytes = field(repr=False)


@dataclass
class Question:
    id: str
    text: str
    answer: Optional[str] = None
    status: QuestionStatus = QuestionStatus.PENDING


@dataclass(frozen=True)
class LogEntry:
    timestamp: float
    stage: LogStage
    message: str

    @property
    def clock(self) -> str:
        """HH:MM:SS in local time, as shown in the log terminal."""
        return time.strftime("%H:%M:%S", time.localtime(self.timestamp))


@dataclass
class Progress:
    total: int = 0
    current: int = 0
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 0.0

    @property
    def elapsed(self) -> Optional[float]:
        if self.started_at is None:
            return None
        end = self.finished_at if self.finished_at is not None else time.time()
        return end - self.started_at


@dataclass(frozen=True)
class StageResult:
    """Outcome of one pipeline stage: either a value or the error that stopped it."""

    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "StageResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "StageResult":
        return cls(error=error)
