from abc import ABC, abstractmethod

from mathdoc.logging.logger import Log


class ProgressReporter(ABC):
    """Contract for caller-supplied progress feedback."""

    @abstractmethod
    def advance_step(self) -> None:
        """Move the progress indicator to the next processing step."""

    @abstractmethod
    def report_timing(self, message: str) -> None:
        """Show a status message, typically including elapsed time."""

    @abstractmethod
    def report_error(self, error: Exception, context: str) -> None:
        """Render a final error state; no further polling follows."""


class NullProgressReporter(ProgressReporter):
    """Discards all progress notifications."""

    def advance_step(self) -> None:
        pass

    def report_timing(self, message: str) -> None:
        pass

    def report_error(self, error: Exception, context: str) -> None:
        pass


class LoggingProgressReporter(ProgressReporter):
    """Writes progress notifications to a logger."""

    def __init__(self, log: Log | None = None) -> None:
        self._log = log or Log.for_component("progress")
        self._step = 0

    @property
    def step(self) -> int:
        return self._step

    def advance_step(self) -> None:
        self._step += 1
        self._log.info(f"Step {self._step}")

    def report_timing(self, message: str) -> None:
        self._log.info(message)

    def report_error(self, error: Exception, context: str) -> None:
        self._log.error(f"Error {context}: {error}")
