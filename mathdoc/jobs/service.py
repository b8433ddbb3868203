"""End-to-end document flow: submit -> poll -> download -> normalize, plus lines analysis."""

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from mathdoc.analysis.analyzer import ContentAnalyzer
from mathdoc.analysis.models import ContentAnalysis
from mathdoc.client.api_client import MathpixApiClient
from mathdoc.config.settings import Settings
from mathdoc.errors.classifier import ErrorClassifier
from mathdoc.errors.exceptions import MathdocError, ProcessingError, UploadError
from mathdoc.jobs.cache import ResultCache
from mathdoc.jobs.models import Job, JobStatus, StatusRecord, UploadFile
from mathdoc.jobs.options import RequestOptionsBuilder, SubmitOptions
from mathdoc.jobs.poller import CancellationToken, StatusPoller
from mathdoc.jobs.progress import NullProgressReporter, ProgressReporter
from mathdoc.jobs.retriever import ResultRetriever
from mathdoc.jobs.submitter import JobSubmitter
from mathdoc.jobs.validation import FileValidator
from mathdoc.logging.logger import Log
from mathdoc.normalization.models import NormalizedResult
from mathdoc.normalization.normalizer import ResponseNormalizer


@dataclass(frozen=True)
class DocumentResult:
    """A completed job with its normalized result and downloaded files."""

    job: Job
    result: NormalizedResult
    files: dict[str, str | bytes] = field(default_factory=dict)


class DocumentJobService:
    """Orchestrates the document lifecycle and caches results per job."""

    def __init__(
        self,
        api: MathpixApiClient,
        validator: FileValidator,
        options_builder: RequestOptionsBuilder,
        submitter: JobSubmitter,
        poller: StatusPoller,
        retriever: ResultRetriever,
        normalizer: ResponseNormalizer,
        analyzer: ContentAnalyzer,
        *,
        log: Log | None = None,
    ) -> None:
        self._api = api
        self._validator = validator
        self._options_builder = options_builder
        self._submitter = submitter
        self._poller = poller
        self._retriever = retriever
        self._normalizer = normalizer
        self._analyzer = analyzer
        self._log = log or Log.for_component("jobs.service")
        self._results: ResultCache[DocumentResult] = ResultCache("results")
        self._lines: ResultCache[dict[str, Any]] = ResultCache("lines")
        self._analyses: ResultCache[ContentAnalysis] = ResultCache("analysis")

    @property
    def api(self) -> MathpixApiClient:
        return self._api

    async def process_document(
        self,
        upload: UploadFile,
        options: SubmitOptions | None = None,
        progress: ProgressReporter | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> DocumentResult:
        """Submit a document, wait for completion, and fetch every requested format."""
        progress = progress or NullProgressReporter()
        options = options or SubmitOptions()

        job = await self._submitter.submit(upload, options, progress)
        job.transition_to(JobStatus.PROCESSING)
        try:
            record = await self._poller.poll(job.id, progress, cancel_token)
        except ProcessingError:
            job.transition_to(JobStatus.ERROR)
            raise
        job.transition_to(JobStatus.COMPLETED)

        progress.advance_step()
        files: dict[str, str | bytes] = {}
        for fmt in job.requested_formats:
            files[fmt] = await self._retriever.download(job.id, fmt, progress)

        result = self._normalizer.normalize(self._document_response(record, files))
        progress.advance_step()
        self._log.info(f"Job {job.id} finished with formats {sorted(files)}")
        return self._results.put(job.id, DocumentResult(job=job, result=result, files=files))

    async def process_image(
        self,
        upload: UploadFile,
        options: SubmitOptions | None = None,
        progress: ProgressReporter | None = None,
    ) -> NormalizedResult:
        """Recognize an image synchronously and normalize the response."""
        progress = progress or NullProgressReporter()
        options = options or SubmitOptions()
        try:
            self._validator.validate_image(upload)
            request_options = self._options_builder.build_image_request(options)
            progress.advance_step()
            payload = await self._api.send_json(
                "POST",
                "text",
                operation="Image recognition",
                error_kind=UploadError,
                files={"file": (upload.filename, upload.content, upload.mime_type)},
                data={"options_json": json.dumps(request_options)},
                request_summary={
                    "fileName": upload.filename,
                    "fileSize": upload.size,
                    "fileType": upload.mime_type,
                    "options": request_options,
                },
            )
            if payload.get("error"):
                raise ProcessingError(f"Recognition failed: {payload['error']}")
        except MathdocError as exc:
            progress.report_error(exc, "during image recognition")
            raise

        result = self._normalizer.normalize(payload)
        progress.report_timing(f"{round(result.confidence * 100)}% confidence detected")
        progress.advance_step()
        request_id = payload.get("request_id")
        if request_id:
            self._results.put(
                str(request_id),
                DocumentResult(
                    job=Job(id=str(request_id), status=JobStatus.COMPLETED),
                    result=result,
                ),
            )
        return result

    async def fetch_lines(
        self,
        job_id: str,
        use_cache: bool = True,
        progress: ProgressReporter | None = None,
    ) -> dict[str, Any]:
        if use_cache:
            cached = self._lines.get(job_id)
            if cached is not None:
                self._log.debug(f"Using cached lines data for {job_id}")
                return cached
        data = await self._retriever.fetch_lines(job_id, progress)
        return self._lines.put(job_id, data)

    async def analyze_lines(
        self,
        job_id: str,
        use_cache: bool = True,
        progress: ProgressReporter | None = None,
        **analysis_options: Any,
    ) -> ContentAnalysis:
        """Fetch the lines data of a job and analyze it.

        Only default-option analyses are cached; passing ``analysis_options``
        always recomputes and leaves the cached analysis untouched.
        """
        cacheable = not analysis_options
        if use_cache and cacheable:
            cached = self._analyses.get(job_id)
            if cached is not None:
                return cached
        progress = progress or NullProgressReporter()
        data = await self.fetch_lines(job_id, use_cache, progress)
        try:
            analysis = self._analyzer.analyze(data, **analysis_options)
        except MathdocError as exc:
            progress.report_error(exc, "while analyzing lines data")
            raise
        if not cacheable:
            return analysis
        return self._analyses.put(job_id, analysis)

    def get_cached_result(self, job_id: str) -> DocumentResult | None:
        return self._results.get(job_id)

    def get_cached_analysis(self, job_id: str) -> ContentAnalysis | None:
        return self._analyses.get(job_id)

    def clear_cache(self, key: str | None = None) -> None:
        for cache in (self._results, self._lines, self._analyses):
            cache.clear(key)

    @staticmethod
    def _document_response(
        record: StatusRecord, files: dict[str, str | bytes]
    ) -> dict[str, Any]:
        response: dict[str, Any] = dict(record.results or {})
        for field_name, fmt in (("text", "mmd"), ("html", "html")):
            content = files.get(fmt)
            if isinstance(content, str) and not response.get(field_name):
                response[field_name] = content
        return response


def build_service(
    settings: Settings,
    api: MathpixApiClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DocumentJobService:
    """Build a DocumentJobService with all collaborators.

    The returned service's ``api`` must be entered (``async with``) before use.
    """
    if api is None:
        api = MathpixApiClient(settings, classifier=ErrorClassifier(), transport=transport)
    validator = FileValidator(settings)
    options_builder = RequestOptionsBuilder()
    return DocumentJobService(
        api=api,
        validator=validator,
        options_builder=options_builder,
        submitter=JobSubmitter(
            api,
            validator,
            options_builder,
            upload_timeout_seconds=settings.upload_timeout_seconds,
        ),
        poller=StatusPoller(api, settings),
        retriever=ResultRetriever(api),
        normalizer=ResponseNormalizer(),
        analyzer=ContentAnalyzer(),
    )
