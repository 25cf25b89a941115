"""
exceptions.py — Error types raised by the clients and the pipeline.
"""

API_KEY_MISSING = "API Key not set"
SEGMENTATION_FAILED = "Failed to analyze question bank."
RUN_INTERRUPTED = "Run interrupted before it finished."


class AutoSolverError(Exception):
    """Base class for every error AutoSolver raises on purpose."""


class ConfigurationError(AutoSolverError, ValueError):
    """A required setting (usually the cloud API key) is missing."""

    def __init__(self, message: str = API_KEY_MISSING):
        super().__init__(message)


class SegmentationError(AutoSolverError):
    """The question bank could not be split into questions."""

    def __init__(self, message: str = SEGMENTATION_FAILED):
        super().__init__(message)


class ProviderError(AutoSolverError):
    """The LLM backend could not be reached or returned an error status."""


class ExtractionError(AutoSolverError):
    """An uploaded document could not be parsed into text."""


class RunInterruptedError(AutoSolverError):
    """A run was cut short by its caller while a stage was still working."""

    def __init__(self, message: str = RUN_INTERRUPTED):
        super().__init__(message)


class InvalidTransitionError(AutoSolverError):
    """The pipeline was asked to move between states that are not linked."""
