import httpx
import pytest

from mathdoc.client.api_client import MathpixApiClient
from mathdoc.client.debug import mask_secret
from mathdoc.config.settings import Settings
from mathdoc.errors import CredentialsError, DownloadError, StatusCheckError
from mathdoc.errors.classifier import CONNECTION_FAILED


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


class TestMaskSecret:
    def test_keeps_last_four_characters(self) -> None:
        assert mask_secret("abcdefgh1234") == "********1234"

    def test_short_secret_fully_masked(self) -> None:
        assert mask_secret("abc") == "****"

    def test_missing_secret(self) -> None:
        assert mask_secret(None) == "*" * 12
        assert mask_secret("") == "*" * 12


class TestSend:
    @pytest.mark.asyncio
    async def test_sends_credentials_as_headers(self, settings: Settings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "completed"})

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            await api.send("GET", "pdf/abc", operation="Status check",
                           error_kind=StatusCheckError)

        assert seen[0].headers["app_id"] == "test-app"
        assert seen[0].headers["app_key"] == "secret-key-9876"
        assert str(seen[0].url) == "https://ocr.example.test/v3/pdf/abc"

    @pytest.mark.asyncio
    async def test_missing_credentials_raise_before_request(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        settings = Settings(app_id="", app_key="")
        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            with pytest.raises(CredentialsError):
                await api.send("GET", "pdf/abc", operation="Status check",
                               error_kind=StatusCheckError)
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_success_raises_error_kind_with_status_and_body(
        self, settings: Settings
    ) -> None:
        body = "x" * 500

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text=body)

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            with pytest.raises(DownloadError) as exc_info:
                await api.send("GET", "pdf/abc.docx", operation="Download of docx format",
                               error_kind=DownloadError)

        error = exc_info.value
        assert error.status_code == 503
        assert error.response_body == "x" * 200
        assert error.is_retryable is True

    @pytest.mark.asyncio
    async def test_transport_failure_is_classified(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("fetch failed", request=request)

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            with pytest.raises(StatusCheckError) as exc_info:
                await api.send("GET", "pdf/abc", operation="Status check",
                               error_kind=StatusCheckError)

        error = exc_info.value
        assert error.classification == CONNECTION_FAILED
        assert error.is_retryable is True
        assert isinstance(error.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_send_outside_context_raises(self, settings: Settings) -> None:
        api = MathpixApiClient(settings)
        with pytest.raises(RuntimeError, match="not started"):
            await api.send("GET", "pdf/abc", operation="Status check",
                           error_kind=StatusCheckError)


class TestSendJson:
    @pytest.mark.asyncio
    async def test_invalid_json_raises_error_kind(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            with pytest.raises(StatusCheckError, match="invalid JSON"):
                await api.send_json("GET", "pdf/abc", operation="Status check",
                                    error_kind=StatusCheckError)

    @pytest.mark.asyncio
    async def test_non_object_payload_raises(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=["completed"])

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            with pytest.raises(StatusCheckError, match="expected an object"):
                await api.send_json("GET", "pdf/abc", operation="Status check",
                                    error_kind=StatusCheckError)


class TestDebugSnapshot:
    @pytest.mark.asyncio
    async def test_no_snapshot_before_first_request(self, settings: Settings) -> None:
        async with MathpixApiClient(settings) as api:
            assert api.last_debug_snapshot() is None

    @pytest.mark.asyncio
    async def test_snapshot_masks_key(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "processing"})

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            await api.send_json("GET", "pdf/abc", operation="Status check",
                                error_kind=StatusCheckError,
                                request_summary={"jobId": "abc"})
            snapshot = api.last_debug_snapshot()

        assert snapshot is not None
        assert snapshot.operation == "Status check"
        assert snapshot.endpoint == "https://ocr.example.test/v3/pdf/abc"
        assert snapshot.request["jobId"] == "abc"
        assert snapshot.request["headers"]["app_key"] == "*" * 11 + "9876"
        assert "secret" not in str(snapshot)
        assert snapshot.response["status"] == 200
        assert snapshot.response["data"] == {"status": "processing"}

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "processing"})

        async with MathpixApiClient(settings, transport=_transport(handler)) as api:
            await api.send_json("GET", "pdf/abc", operation="Status check",
                                error_kind=StatusCheckError)
            api.last_debug_snapshot().request["injected"] = True
            assert "injected" not in api.last_debug_snapshot().request

    @pytest.mark.asyncio
    async def test_snapshots_can_be_disabled(self, settings: Settings) -> None:
        quiet = settings.model_copy(update={"capture_debug_snapshots": False})

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "processing"})

        async with MathpixApiClient(quiet, transport=_transport(handler)) as api:
            await api.send_json("GET", "pdf/abc", operation="Status check",
                                error_kind=StatusCheckError)
            assert api.last_debug_snapshot() is None
