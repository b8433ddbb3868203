import json
from typing import Any, ClassVar

from mathdoc.client.api_client import MathpixApiClient
from mathdoc.errors.exceptions import MathdocError, UploadError
from mathdoc.jobs.models import Job, UploadFile
from mathdoc.jobs.options import RequestOptionsBuilder, SubmitOptions
from mathdoc.jobs.progress import NullProgressReporter, ProgressReporter
from mathdoc.jobs.retriever import ResultRetriever
from mathdoc.jobs.validation import FileValidator
from mathdoc.logging.logger import Log


class JobSubmitter:
    """Uploads a document with its processing options and returns the new Job."""

    # Tried in order; the service has used each of these names for the job id.
    JOB_ID_FIELDS: ClassVar[tuple[str, ...]] = (
        "pdf_id",
        "id",
        "processing_id",
        "document_id",
        "job_id",
        "request_id",
    )

    def __init__(
        self,
        api: MathpixApiClient,
        validator: FileValidator,
        options_builder: RequestOptionsBuilder | None = None,
        *,
        upload_timeout_seconds: float | None = None,
        log: Log | None = None,
    ) -> None:
        self._api = api
        self._validator = validator
        self._options_builder = options_builder or RequestOptionsBuilder()
        self._upload_timeout = upload_timeout_seconds
        self._log = log or Log.for_component("jobs.submitter")

    async def submit(
        self,
        upload: UploadFile,
        options: SubmitOptions | None = None,
        progress: ProgressReporter | None = None,
    ) -> Job:
        """Validate, upload, and return a queued Job.

        Raises:
            ValidationError: before any network call, for bad type or size
                or an output format that cannot be requested and downloaded.
            UploadError: on transport failure, non-success response, or
                a response without a job identifier.
        """
        progress = progress or NullProgressReporter()
        options = options or SubmitOptions()
        try:
            self._validator.validate_document(upload)
            for fmt in options.requested_formats:
                ResultRetriever.extension_for(fmt)
            request_options = self._options_builder.build_document_request(options)
            self._log.info(
                f"Submitting {upload.filename} ({upload.size} bytes), "
                f"pages={options.effective_page_range or 'all'}, "
                f"formats={list(options.requested_formats)}"
            )
            progress.advance_step()
            payload = await self._api.send_json(
                "POST",
                "pdf",
                operation="Document upload",
                error_kind=UploadError,
                timeout=self._upload_timeout,
                files={"file": (upload.filename, upload.content, upload.mime_type)},
                data={"options_json": json.dumps(request_options)},
                request_summary={
                    "fileName": upload.filename,
                    "fileSize": upload.size,
                    "fileType": upload.mime_type,
                    "pageRange": options.effective_page_range or "all",
                    "options": request_options,
                },
            )
            job_id = self.extract_job_id(payload)
        except MathdocError as exc:
            progress.report_error(exc, "during document upload")
            raise

        self._log.info(f"Document uploaded, job {job_id} queued")
        progress.report_timing("Document uploaded, processing started...")
        return Job(
            id=job_id,
            requested_formats=tuple(options.requested_formats),
            page_range=options.effective_page_range,
        )

    @classmethod
    def extract_job_id(cls, payload: dict[str, Any]) -> str:
        """Return the first present job identifier field.

        Raises:
            UploadError: naming every inspected field when none is present.
        """
        for field_name in cls.JOB_ID_FIELDS:
            value = payload.get(field_name)
            if value:
                return str(value)
        raise UploadError(
            "Upload succeeded but no job identifier was returned. "
            f"Inspected fields: {', '.join(cls.JOB_ID_FIELDS)}; "
            f"available fields: {', '.join(payload) or 'none'}"
        )
