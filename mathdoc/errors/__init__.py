from mathdoc.errors.classifier import ErrorClassifier
from mathdoc.errors.exceptions import (
    CredentialsError,
    DownloadError,
    MathdocError,
    PollCancelledError,
    PollTimeoutError,
    ProcessingError,
    StatusCheckError,
    UploadError,
    ValidationError,
)
from mathdoc.errors.models import ClassifiedError

__all__ = [
    "ClassifiedError",
    "CredentialsError",
    "DownloadError",
    "ErrorClassifier",
    "MathdocError",
    "PollCancelledError",
    "PollTimeoutError",
    "ProcessingError",
    "StatusCheckError",
    "UploadError",
    "ValidationError",
]
