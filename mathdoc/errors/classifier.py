"""Maps caught failures onto user-facing messages and a retry verdict."""

from collections.abc import Callable

import httpx

from mathdoc.errors.exceptions import (
    CredentialsError,
    MathdocError,
    ProcessingError,
    ValidationError,
)
from mathdoc.errors.models import ClassifiedError

_CONNECTION_SIGNATURES = (
    "failed to fetch",
    "fetch failed",
    "networkerror",
    "err_name_not_resolved",
    "name or service not known",
    "nodename nor servname provided",
    "connection refused",
    "all connection attempts failed",
)
_TIMEOUT_SIGNATURES = ("timeout", "timed out")
_BLOCKED_SIGNATURES = ("cors", "blocked")

# Never retried; message text is not matched against network signatures.
_TERMINAL_ACTIONS: dict[type, str] = {
    ProcessingError: "Check the document and submit it again",
    ValidationError: "Check the file type, size and options, then submit again",
    CredentialsError: "Configure the app ID and app key",
}
_TERMINAL_ERRORS = tuple(_TERMINAL_ACTIONS)

CONNECTION_FAILED = ClassifiedError(
    user_message=(
        "Unable to connect to the conversion service. "
        "Please check your internet connection and try again."
    ),
    technical_detail="Network connection failed",
    is_retryable=True,
    suggested_action='Check your internet connection, then click "Try Again"',
)
REQUEST_TIMEOUT = ClassifiedError(
    user_message="The request took too long to complete. The server may be busy.",
    technical_detail="Request timeout",
    is_retryable=True,
    suggested_action="Please wait a moment and try again",
)
REQUEST_BLOCKED = ClassifiedError(
    user_message=(
        "Unable to reach the conversion service. This may be a temporary issue."
    ),
    technical_detail="Request blocked",
    is_retryable=True,
    suggested_action="Try refreshing the page",
)
OFFLINE = ClassifiedError(
    user_message="You appear to be offline. Please check your internet connection.",
    technical_detail="Client offline",
    is_retryable=True,
    suggested_action="Reconnect to the internet and try again",
)


class ErrorClassifier:
    """Deterministic mapping from an exception to a ClassifiedError.

    Args:
        is_online: Reports whether the host currently has connectivity.
            Defaults to always online.
    """

    def __init__(self, is_online: Callable[[], bool] | None = None) -> None:
        self._is_online = is_online or (lambda: True)

    def classify(self, error: BaseException) -> ClassifiedError:
        """Classify a failure caught during a network call."""
        if isinstance(error, MathdocError) and error.classification is not None:
            return error.classification
        if isinstance(error, _TERMINAL_ERRORS):
            return _terminal(error)

        message = str(error)
        lowered = message.lower()
        name = type(error).__name__.lower()

        if isinstance(error, httpx.ConnectError) or _contains_any(
            lowered, _CONNECTION_SIGNATURES
        ):
            return CONNECTION_FAILED

        if isinstance(error, (httpx.TimeoutException, TimeoutError)) or _contains_any(
            lowered, _TIMEOUT_SIGNATURES
        ):
            return REQUEST_TIMEOUT

        if _contains_any(lowered, _BLOCKED_SIGNATURES):
            return REQUEST_BLOCKED

        if not self._is_online():
            return OFFLINE

        if isinstance(error, httpx.TransportError) or (
            name == "typeerror" and "fetch" in lowered
        ):
            return ClassifiedError(
                user_message=(
                    "A network error occurred. Please check your connection and try again."
                ),
                technical_detail=message,
                is_retryable=True,
                suggested_action="Check your internet connection",
            )

        return ClassifiedError(
            user_message=f"An error occurred: {message}",
            technical_detail=message,
            is_retryable=False,
            suggested_action="Please try again or contact support if the issue persists",
        )

    def classify_response(self, status_code: int, reason: str = "") -> ClassifiedError:
        """Classify a non-success HTTP response."""
        detail = f"HTTP {status_code} {reason}".strip()
        if status_code in (401, 403):
            return ClassifiedError(
                user_message="The conversion service rejected the credentials.",
                technical_detail=detail,
                is_retryable=False,
                suggested_action="Check the configured app ID and app key",
            )
        if status_code == 429:
            return ClassifiedError(
                user_message="Too many requests were sent to the conversion service.",
                technical_detail=detail,
                is_retryable=True,
                suggested_action="Please wait a moment and try again",
            )
        if status_code >= 500:
            return ClassifiedError(
                user_message="The conversion service is temporarily unavailable.",
                technical_detail=detail,
                is_retryable=True,
                suggested_action="Please wait a moment and try again",
            )
        return ClassifiedError(
            user_message=f"The conversion service returned an error ({status_code}).",
            technical_detail=detail,
            is_retryable=False,
            suggested_action="Please try again or contact support if the issue persists",
        )


def _contains_any(text: str, signatures: tuple[str, ...]) -> bool:
    return any(signature in text for signature in signatures)


def _terminal(error: MathdocError) -> ClassifiedError:
    action = next(
        (text for kind, text in _TERMINAL_ACTIONS.items() if isinstance(error, kind)),
        "Please try again or contact support if the issue persists",
    )
    return ClassifiedError(
        user_message=str(error),
        technical_detail=f"{type(error).__name__}: {error}",
        is_retryable=False,
        suggested_action=action,
    )
