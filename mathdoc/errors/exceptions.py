from mathdoc.errors.models import ClassifiedError


class MathdocError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        *,
        classification: ClassifiedError | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.classification = classification
        self.status_code = status_code
        self.response_body = response_body

    @property
    def is_retryable(self) -> bool:
        return self.classification.is_retryable if self.classification else False

    @property
    def suggested_action(self) -> str:
        return self.classification.suggested_action if self.classification else ""


class ValidationError(MathdocError, ValueError):
    """Raised when input fails validation before any network call."""


class CredentialsError(MathdocError):
    """Raised when the service credentials are not configured."""


class UploadError(MathdocError):
    """Raised when a document upload fails or returns no job identifier."""


class StatusCheckError(MathdocError):
    """Raised when a single status query fails."""


class DownloadError(MathdocError):
    """Raised when a result format or the lines data cannot be fetched."""


class ProcessingError(MathdocError):
    """Raised when the remote service reports the job as failed."""


class PollTimeoutError(MathdocError, TimeoutError):
    """Raised when the status poll attempt ceiling is exceeded."""


class PollCancelledError(MathdocError):
    """Raised when the caller cancels polling."""
