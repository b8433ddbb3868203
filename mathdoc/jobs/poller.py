import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

from mathdoc.client.api_client import MathpixApiClient
from mathdoc.config.settings import Settings
from mathdoc.errors.exceptions import (
    MathdocError,
    PollCancelledError,
    PollTimeoutError,
    ProcessingError,
    StatusCheckError,
)
from mathdoc.errors.models import ClassifiedError
from mathdoc.jobs.models import JobStatus, StatusRecord
from mathdoc.jobs.progress import NullProgressReporter, ProgressReporter
from mathdoc.logging.logger import Log


class CancellationToken:
    """Cooperative cancellation flag checked between status queries."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def format_status_message(status: str, elapsed_seconds: float) -> str:
    """Render a progress line such as ``Document queued for processing... (0:04)``."""
    minutes, seconds = divmod(int(elapsed_seconds), 60)
    time_string = f"{minutes}:{seconds:02d}"
    if status == JobStatus.QUEUED.value:
        return f"Document queued for processing... ({time_string})"
    if status == JobStatus.PROCESSING.value:
        return f"Converting document to formats... ({time_string})"
    return f"Processing status: {status} ({time_string})"


class StatusPoller:
    """Queries job status until it reaches a terminal state.

    Queries are strictly sequential. The wait between them is
    ``poll_interval_seconds``, multiplied by ``backoff_multiplier`` once more
    than ``backoff_after_polls`` queries have been made. At most
    ``max_status_polls`` queries are issued.
    """

    ALTERNATIVE_STATUS_FIELDS: ClassVar[tuple[str, ...]] = (
        "state",
        "processing_status",
        "job_status",
    )

    def __init__(
        self,
        api: MathpixApiClient,
        settings: Settings,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        log: Log | None = None,
    ) -> None:
        self._api = api
        self._interval = settings.poll_interval_seconds
        self._max_polls = settings.max_status_polls
        self._backoff_after = settings.backoff_after_polls
        self._backoff_multiplier = settings.backoff_multiplier
        self._sleep = sleep
        self._clock = clock
        self._log = log or Log.for_component("jobs.poller")

    async def check_status(self, job_id: str, elapsed_ms: int = 0) -> StatusRecord:
        """Issue one status query.

        Raises:
            StatusCheckError: on transport failure, non-success response,
                or a response without any status field.
        """
        payload = await self._api.send_json(
            "GET",
            f"pdf/{job_id}",
            operation="Status check",
            error_kind=StatusCheckError,
            request_summary={"jobId": job_id},
        )
        return StatusRecord(
            status=self._read_status(payload),
            elapsed_ms=elapsed_ms,
            results=payload.get("results") if isinstance(payload.get("results"), dict) else None,
            error_message=_error_message(payload),
            raw=payload,
        )

    async def poll(
        self,
        job_id: str,
        progress: ProgressReporter | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> StatusRecord:
        """Poll until ``completed`` and return that record.

        Raises:
            ProcessingError: when the service reports ``error``.
            PollTimeoutError: when the attempt ceiling is reached.
            PollCancelledError: when ``cancel_token`` is cancelled.
            StatusCheckError: when a status query fails.
        """
        progress = progress or NullProgressReporter()
        started = self._clock()
        self._log.info(
            f"Polling job {job_id}: max {self._max_polls} polls every {self._interval}s"
        )
        attempt = 0
        try:
            while attempt < self._max_polls:
                self._raise_if_cancelled(job_id, cancel_token)
                attempt += 1
                elapsed = self._clock() - started
                record = await self.check_status(job_id, elapsed_ms=int(elapsed * 1000))
                # A query already in flight completes; its result is dropped on cancel.
                self._raise_if_cancelled(job_id, cancel_token)
                progress.report_timing(format_status_message(record.status, elapsed))
                self._log.debug(f"Job {job_id} poll {attempt}: {record.status}")

                if record.job_status is JobStatus.COMPLETED:
                    self._log.info(
                        f"Job {job_id} completed after {attempt} polls ({record.elapsed_ms}ms)"
                    )
                    return record
                if record.job_status is JobStatus.ERROR:
                    message = record.error_message or "Processing failed with unknown error"
                    raise ProcessingError(f"Processing failed: {message}")
                if record.job_status is None:
                    self._log.warning(f"Unknown status for job {job_id}: {record.status!r}")

                if attempt < self._max_polls:
                    await self._sleep(self.wait_seconds(attempt))

            raise PollTimeoutError(
                f"Processing timed out after {self._max_polls} status checks",
                classification=ClassifiedError(
                    user_message="Processing time exceeded - document too complex",
                    technical_detail=f"Job {job_id} not finished after {self._max_polls} polls",
                    is_retryable=False,
                    suggested_action=(
                        "Reduce the input size, for example by selecting a smaller "
                        "page range, and try again"
                    ),
                ),
            )
        except MathdocError as exc:
            self._log.error(f"Polling job {job_id} stopped after {attempt} polls: {exc}")
            progress.report_error(exc, f"during status polling (poll {attempt})")
            raise

    def wait_seconds(self, attempt: int) -> float:
        """Wait after the given (1-based) attempt."""
        if attempt > self._backoff_after:
            return self._interval * self._backoff_multiplier
        return self._interval

    def _read_status(self, payload: dict[str, Any]) -> str:
        status = payload.get("status")
        if status is None:
            for field_name in self.ALTERNATIVE_STATUS_FIELDS:
                if payload.get(field_name):
                    self._log.warning(f"Status read from alternative field '{field_name}'")
                    status = payload[field_name]
                    break
        if status is None:
            raise StatusCheckError(
                "Invalid status response: missing status field. "
                f"Response keys: {', '.join(payload) or 'none'}"
            )
        return str(status)

    def _raise_if_cancelled(self, job_id: str, token: CancellationToken | None) -> None:
        if token is not None and token.cancelled:
            raise PollCancelledError(f"Polling for job {job_id} was cancelled")


def _error_message(payload: dict[str, Any]) -> str | None:
    for key in ("error", "error_message", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and value.get("message"):
            return str(value["message"])
    return None
