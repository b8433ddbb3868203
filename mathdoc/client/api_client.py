"""Async HTTP transport for the remote conversion service."""

import copy
import json
import time
from datetime import datetime, timezone
from typing import Any

import httpx

from mathdoc.client.debug import DebugSnapshot, mask_secret
from mathdoc.config.settings import Settings
from mathdoc.errors.classifier import ErrorClassifier
from mathdoc.errors.exceptions import CredentialsError, MathdocError
from mathdoc.logging.logger import Log

_BODY_PREVIEW_CHARS = 200


class MathpixApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` that authenticates every request,
    turns transport failures and non-success responses into the caller's error
    kind, and keeps a redacted snapshot of the last exchange.

    Use as an async context manager::

        async with MathpixApiClient(settings) as api:
            response = await api.send("GET", "pdf/abc", operation="Status check",
                                      error_kind=StatusCheckError)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        classifier: ErrorClassifier | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        log: Log | None = None,
    ) -> None:
        self._settings = settings
        self._classifier = classifier or ErrorClassifier()
        self._transport = transport
        self._log = log or Log.for_component("client")
        self._client: httpx.AsyncClient | None = None
        self._last_debug: DebugSnapshot | None = None

    async def __aenter__(self) -> "MathpixApiClient":
        self._client = httpx.AsyncClient(
            base_url=self._settings.api_base.rstrip("/"),
            timeout=self._settings.request_timeout_seconds,
            verify=self._settings.verify_tls,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    def last_debug_snapshot(self) -> DebugSnapshot | None:
        """Return a copy of the last captured exchange, if any."""
        if self._last_debug is None:
            self._log.debug("No debug data available - no requests sent yet")
            return None
        return copy.deepcopy(self._last_debug)

    async def send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        error_kind: type[MathdocError],
        timeout: float | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        request_summary: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request and return a successful response.

        Raises:
            CredentialsError: if app id or key is not configured.
            error_kind: on transport failure or a non-success status.
        """
        self._require_credentials()
        client = self._require_client()
        started = time.monotonic()
        try:
            response = await client.request(
                method,
                path,
                headers=self._auth_headers(),
                files=files,
                data=data,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except (httpx.HTTPError, OSError) as exc:
            classification = self._classifier.classify(exc)
            self._record(
                operation, method, path, started, request_summary,
                {"status": "error", "error": str(exc)},
            )
            self._log.error(f"{operation} request failed: {classification.technical_detail}")
            raise error_kind(
                f"{operation} failed: {classification.user_message}",
                classification=classification,
            ) from exc

        self._record(
            operation, method, path, started, request_summary,
            {"status": response.status_code, "statusText": response.reason_phrase},
        )
        if not response.is_success:
            body = response.text[:_BODY_PREVIEW_CHARS]
            self._log.error(
                f"{operation} failed: {response.status_code} {response.reason_phrase}: {body}"
            )
            raise error_kind(
                f"{operation} failed: {response.status_code} {response.reason_phrase}",
                classification=self._classifier.classify_response(
                    response.status_code, response.reason_phrase
                ),
                status_code=response.status_code,
                response_body=body,
            )
        return response

    async def send_json(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        error_kind: type[MathdocError],
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send one request and decode a JSON object body."""
        response = await self.send(
            method, path, operation=operation, error_kind=error_kind, **kwargs
        )
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise error_kind(
                f"{operation} returned invalid JSON: {exc}",
                status_code=response.status_code,
                response_body=response.text[:_BODY_PREVIEW_CHARS],
            ) from exc
        if not isinstance(payload, dict):
            raise error_kind(
                f"{operation} returned {type(payload).__name__}, expected an object",
                status_code=response.status_code,
            )
        if self._last_debug is not None:
            self._last_debug.response["data"] = payload
        return payload

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "Client is not started. Use 'async with MathpixApiClient(...)'."
            )
        return self._client

    def _require_credentials(self) -> None:
        if not self._settings.app_id or not self._settings.app_key:
            raise CredentialsError("Service credentials (app_id/app_key) not configured")

    def _auth_headers(self) -> dict[str, str]:
        return {"app_id": self._settings.app_id, "app_key": self._settings.app_key}

    def _record(
        self,
        operation: str,
        method: str,
        path: str,
        started: float,
        request_summary: dict[str, Any] | None,
        response_summary: dict[str, Any],
    ) -> None:
        if not self._settings.capture_debug_snapshots:
            return
        elapsed_ms = int((time.monotonic() - started) * 1000)
        request = dict(request_summary or {})
        request["headers"] = {
            "app_id": self._settings.app_id,
            "app_key": mask_secret(self._settings.app_key),
        }
        self._last_debug = DebugSnapshot(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=operation,
            endpoint=f"{self._settings.api_base.rstrip('/')}/{path.lstrip('/')}",
            method=method,
            request=request,
            response=response_summary,
            timing={"total_ms": elapsed_ms},
        )
