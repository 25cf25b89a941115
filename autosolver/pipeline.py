"""
pipeline.py — Orchestrator that drives a question bank from upload to
compiled document.

    IDLE -> READING_FILES -> ANALYZING_QUESTIONS -> SOLVING -> COMPLETED
    COMPLETED -> COMPILING -> COMPLETED      (download)
    COMPLETED | ERROR -> IDLE                (reset)
    any -> ERROR

Each stage (Reader, Analyst, Solver) returns a ``StageResult``; the first
failed stage moves the pipeline to ERROR and the run stops there. The
class has no UI dependency: Streamlit (or a test) observes it through the
``listener`` callback and by reading its attributes.
"""

import logging
import time
from typing import Callable, Iterable, Optional

from autosolver.config import OLLAMA_BASE_URL, SOLVE_DELAY_SECONDS
from autosolver.exceptions import InvalidTransitionError, RunInterruptedError
from autosolver.exporter import compile_document
from autosolver.generator import (
    Provider,
    ProviderConfig,
    ProviderSelector,
    answer_question,
    segment_questions,
)
from autosolver.ingestor import build_context, extract_text
from autosolver.models import (
    FileRole,
    InputFile,
    LogEntry,
    LogStage,
    PipelineState,
    Progress,
    Question,
    QuestionStatus,
    StageResult,
)
from autosolver.ollama_client import probe_local

logger = logging.getLogger(__name__)

S = PipelineState

TRANSITIONS = {
    S.IDLE: {S.READING_FILES},
    S.READING_FILES: {S.ANALYZING_QUESTIONS},
    # straight to COMPLETED when the question bank holds no questions
    S.ANALYZING_QUESTIONS: {S.SOLVING, S.COMPLETED},
    S.SOLVING: {S.COMPLETED},
    S.COMPLETED: {S.COMPILING, S.IDLE},
    S.COMPILING: {S.COMPLETED},
    S.ERROR: {S.IDLE},
}

BUSY_STATES = {S.READING_FILES, S.ANALYZING_QUESTIONS, S.SOLVING, S.COMPILING}
RESETTABLE_STATES = {S.IDLE, S.COMPLETED, S.ERROR}
PROVIDER_SWITCH_STATES = {S.IDLE, S.COMPLETED}

PREVIEW_CHARS = 40


class Pipeline:
    """
    One question-bank run and everything the UI shows about it.

    Collaborators are injectable so the state machine can be exercised
    without network access or real documents.
    """

    def __init__(
        self,
        selector: Optional[ProviderSelector] = None,
        api_key: Optional[str] = None,
        extract: Callable = extract_text,
        segment: Callable = segment_questions,
        answer: Callable = answer_question,
        compile_doc: Callable = compile_document,
        sleep: Callable[[float], None] = time.sleep,
        solve_delay: float = SOLVE_DELAY_SECONDS,
        listener: Optional[Callable[["Pipeline"], None]] = None,
    ):
        self.selector = selector or ProviderSelector()
        self.api_key = api_key
        self.extract = extract
        self.segment = segment
        self.answer = answer
        self.compile_doc = compile_doc
        self.sleep = sleep
        self.solve_delay = solve_delay
        self.listener = listener

        self.state = S.IDLE
        self.question_bank: Optional[InputFile] = None
        self.source_files: list[InputFile] = []
        self.questions: list[Question] = []
        self.logs: list[LogEntry] = []
        self.progress = Progress()
        self.last_error: Optional[BaseException] = None
        self.local_available = False

    # ------------------------------------------------------------------
    # Provider
    # ------------------------------------------------------------------

    @property
    def provider(self) -> Provider:
        return self.selector.get_provider()

    def set_provider(self, provider: Provider) -> bool:
        """Switch backend; refused while a run or a compile is in flight."""
        if self.state not in PROVIDER_SWITCH_STATES:
            return False
        self.selector.set_provider(provider)
        self._log(LogStage.SYSTEM, f"Switched to {self.provider.label}")
        return True

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(provider=self.selector.get_provider(), api_key=self.api_key)

    def check_local_provider(self, base_url: str = OLLAMA_BASE_URL,
                             probe: Callable[[str], bool] = probe_local) -> bool:
        self.local_available = probe(base_url)
        if self.local_available:
            self._log(LogStage.SYSTEM, "Ollama detected - Local AI available!")
        else:
            self._log(LogStage.SYSTEM, "Using Gemini API (Ollama not detected)")
        return self.local_available

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_question_bank(self, name: str, data: bytes) -> bool:
        if self.state is not S.IDLE:
            return False
        self.question_bank = InputFile(name, FileRole.QUESTION_BANK, data)
        self._log(LogStage.SYSTEM, f"Question Bank loaded: {name}")
        return True

    def clear_question_bank(self) -> bool:
        if self.state is not S.IDLE:
            return False
        self.question_bank = None
        self._notify()
        return True

    def set_source_files(self, files: Iterable[tuple[str, bytes]]) -> bool:
        """Replace the source materials with *files* (``(name, data)`` pairs)."""
        if self.state is not S.IDLE:
            return False
        self.source_files = []
        return self.add_source_files(files)

    def add_source_files(self, files: Iterable[tuple[str, bytes]]) -> bool:
        if self.state is not S.IDLE:
            return False
        added = [InputFile(name, FileRole.SOURCE_MATERIAL, data) for name, data in files]
        self.source_files.extend(added)
        if added:
            self._log(LogStage.SYSTEM, f"Added {len(added)} source file(s).")
        else:
            self._notify()
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    def can_start(self) -> bool:
        return (
            self.state is S.IDLE
            and self.question_bank is not None
            and len(self.source_files) > 0
        )

    def start(self) -> bool:
        """
        Run the whole pipeline synchronously.

        Returns False without touching anything when the pipeline is not
        idle or the inputs are incomplete. Otherwise returns True once the
        run has ended, in COMPLETED or in ERROR.
        """
        if not self.can_start():
            logger.debug("Start ignored in state %s", self.state.value)
            return False

        self.questions = []
        self.progress = Progress(started_at=time.time())
        self.last_error = None

        # 1. Reader
        self._transition(S.READING_FILES)
        self._log(LogStage.READER, "Initiating document ingestion sequence...")
        read = self._read_files()
        if not read.ok:
            return self._fail(read.error)
        qb_text, context = read.value

        # 2. Analyst
        self._transition(S.ANALYZING_QUESTIONS)
        analyzed = self._analyze(qb_text)
        if not analyzed.ok:
            return self._fail(analyzed.error)

        # 3. Solver
        if self.questions:
            self._transition(S.SOLVING)
            solved = self._solve(context)
            if not solved.ok:
                return self._fail(solved.error)
        else:
            self._log(LogStage.ANALYST, "No questions found in the question bank.")

        # 4. Writer
        self.progress.finished_at = time.time()
        self._transition(S.COMPLETED)
        self._log(LogStage.WRITER, "All questions processed. Ready to compile.")
        return True

    def download(self) -> Optional[bytes]:
        """
        Compile the answered questions into a document.

        Only valid from COMPLETED, and always lands back in COMPLETED; a
        compile failure is logged and yields None.
        """
        if self.state is not S.COMPLETED:
            return None

        self._transition(S.COMPILING)
        self._log(LogStage.WRITER, "Compiling final DOCX document...")
        document = None
        try:
            document = self.compile_doc(list(self.questions))
            self._log(LogStage.WRITER, "Document generated and downloaded.")
        except Exception as exc:
            logger.exception("Document compilation failed")
            self._log(LogStage.WRITER, f"Document compilation failed: {exc}")
        finally:
            self._transition(S.COMPLETED)
        return document

    def reset(self) -> bool:
        """Drop files, questions, logs and progress; back to IDLE."""
        if self.state not in RESETTABLE_STATES:
            return False
        self.question_bank = None
        self.source_files = []
        self.questions = []
        self.logs = []
        self.progress = Progress()
        self.last_error = None
        if self.state is not S.IDLE:
            self._transition(S.IDLE)
        else:
            self._notify()
        return True

    def abort(self, error: Optional[BaseException] = None) -> bool:
        """
        Move a run that was cut off mid-stage to ERROR.

        Returns False when nothing is running.
        """
        if not self.is_busy:
            return False
        return self._fail(error or RunInterruptedError())

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _read_files(self) -> StageResult:
        try:
            qb_text = self.extract(self.question_bank)
            self._log(LogStage.READER, f"Question Bank ingested ({len(qb_text)} chars).")

            sources = []
            for source in self.source_files:
                sources.append((source.name, self.extract(source)))
                self._log(LogStage.READER, f"Ingested source: {source.name}")
        except Exception as exc:
            return StageResult.failure(exc)
        return StageResult.success((qb_text, build_context(sources)))

    def _analyze(self, qb_text: str) -> StageResult:
        self._log(LogStage.ANALYST, "Scanning Question Bank for distinct queries...")
        try:
            raw_questions = self.segment(qb_text, self.provider_config())
        except Exception as exc:
            return StageResult.failure(exc)

        self.questions = [
            Question(id=f"q-{i}", text=text) for i, text in enumerate(raw_questions)
        ]
        self.progress.total = len(self.questions)
        self.progress.current = 0
        self._log(LogStage.ANALYST, f"Identified {len(self.questions)} distinct questions.")
        return StageResult.success(self.questions)

    def _solve(self, context: str) -> StageResult:
        self._log(LogStage.SOLVER, "Working through questions in order...")
        for i, question in enumerate(self.questions):
            self._log(
                LogStage.SOLVER,
                f'Solving Q{i + 1}: "{question.text[:PREVIEW_CHARS]}..."',
            )
            question.status = QuestionStatus.SOLVING
            self._notify()

            try:
                question.answer = self.answer(question.text, context, self.provider_config())
            except Exception as exc:
                return StageResult.failure(exc)

            question.status = QuestionStatus.DONE
            self._update_progress()
            self._notify()

            # rate-limit cushion for free-tier keys
            self.sleep(self.solve_delay)
        return StageResult.success(self.progress.current)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, target: PipelineState) -> None:
        if target is not S.ERROR and target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot move from {self.state.value} to {target.value}"
            )
        logger.debug("State %s -> %s", self.state.value, target.value)
        self.state = target
        self._notify()

    def _fail(self, error: BaseException) -> bool:
        logger.error("Pipeline failed in %s: %s", self.state.value, error, exc_info=error)
        self.last_error = error
        self._transition(S.ERROR)
        self._log(LogStage.SYSTEM, f"Critical Error: {error}")
        return True

    def _update_progress(self) -> None:
        done = sum(1 for q in self.questions if q.status is QuestionStatus.DONE)
        self.progress.current = min(done, self.progress.total)

    def _log(self, stage: LogStage, message: str) -> None:
        self.logs.append(LogEntry(timestamp=time.time(), stage=stage, message=message))
        logger.info("[%s] %s", stage.value, message)
        self._notify()

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self)
