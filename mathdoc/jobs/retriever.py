from typing import Any, ClassVar

from mathdoc.client.api_client import MathpixApiClient
from mathdoc.errors.exceptions import DownloadError, MathdocError, ValidationError
from mathdoc.jobs.progress import NullProgressReporter, ProgressReporter
from mathdoc.logging.logger import Log


class ResultRetriever:
    """Downloads finished output formats and the structural lines data."""

    # Caller-facing format name -> download extension.
    FORMAT_EXTENSIONS: ClassVar[dict[str, str]] = {
        "mmd": "mmd",
        "md": "md",
        "html": "html",
        "pdf": "pdf",
        "latexpdf": "latex.pdf",
        "latex.pdf": "latex.pdf",
        "latex": "tex",
        "tex.zip": "tex",
        "docx": "docx",
        "pptx": "pptx",
        "mmd.zip": "mmd.zip",
        "md.zip": "md.zip",
        "html.zip": "html.zip",
    }
    BINARY_EXTENSIONS: ClassVar[frozenset[str]] = frozenset({
        "pdf",
        "latex.pdf",
        "tex",
        "docx",
        "pptx",
        "mmd.zip",
        "md.zip",
        "html.zip",
    })

    def __init__(self, api: MathpixApiClient, log: Log | None = None) -> None:
        self._api = api
        self._log = log or Log.for_component("jobs.retriever")

    @classmethod
    def extension_for(cls, fmt: str) -> str:
        extension = cls.FORMAT_EXTENSIONS.get(fmt)
        if extension is None:
            raise ValidationError(
                f"Unknown download format '{fmt}'. Choose from: {sorted(cls.FORMAT_EXTENSIONS)}"
            )
        return extension

    @classmethod
    def is_binary(cls, fmt: str) -> bool:
        return cls.extension_for(fmt) in cls.BINARY_EXTENSIONS

    async def download(
        self,
        job_id: str,
        fmt: str,
        progress: ProgressReporter | None = None,
    ) -> str | bytes:
        """Fetch one format of a completed job; text formats return ``str``.

        Raises:
            ValidationError: for an unknown format name.
            DownloadError: on transport failure or a non-success response.
        """
        progress = progress or NullProgressReporter()
        try:
            extension = self.extension_for(fmt)
            response = await self._api.send(
                "GET",
                f"pdf/{job_id}.{extension}",
                operation=f"Download of {fmt} format",
                error_kind=DownloadError,
                request_summary={"jobId": job_id, "format": fmt},
            )
        except MathdocError as exc:
            progress.report_error(exc, f"while downloading {fmt}")
            raise

        if extension in self.BINARY_EXTENSIONS:
            content = response.content
            self._log.info(f"Downloaded binary {fmt} for job {job_id}: {len(content)} bytes")
            return content
        text = response.text
        self._log.info(f"Downloaded text {fmt} for job {job_id}: {len(text)} chars")
        return text

    async def fetch_lines(
        self,
        job_id: str,
        progress: ProgressReporter | None = None,
    ) -> dict[str, Any]:
        """Fetch the page/line structural breakdown of a completed job."""
        progress = progress or NullProgressReporter()
        try:
            if not job_id:
                raise ValidationError("Job ID is required for lines data fetching")
            data = await self._api.send_json(
                "GET",
                f"pdf/{job_id}.lines.json",
                operation="Lines data fetch",
                error_kind=DownloadError,
                request_summary={"jobId": job_id},
            )
        except MathdocError as exc:
            progress.report_error(exc, "while fetching lines data")
            raise

        pages = data.get("pages")
        if not isinstance(pages, list):
            self._log.warning(f"Unexpected lines data structure for job {job_id}: no pages list")
            return data
        total_lines = sum(
            len(page.get("lines") or []) for page in pages if isinstance(page, dict)
        )
        self._log.info(
            f"Lines data fetched for job {job_id}: {len(pages)} pages, {total_lines} lines"
        )
        return data
