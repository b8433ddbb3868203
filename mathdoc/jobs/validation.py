from dataclasses import dataclass

from mathdoc.config.settings import Settings
from mathdoc.errors.exceptions import ValidationError
from mathdoc.jobs.models import UploadFile
from mathdoc.logging.logger import Log

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


@dataclass(frozen=True)
class FormatLimit:
    """Display name and maximum upload size for one MIME type."""

    display_name: str
    max_size_bytes: int


class FileValidator:
    """Checks MIME type and per-type size limits before any upload."""

    def __init__(self, settings: Settings, log: Log | None = None) -> None:
        self._log = log or Log.for_component("jobs.validation")
        image = settings.max_image_size_bytes
        office = settings.max_office_size_bytes
        self._limits: dict[str, FormatLimit] = {
            "image/jpeg": FormatLimit("JPEG image", image),
            "image/png": FormatLimit("PNG image", image),
            "image/webp": FormatLimit("WebP image", image),
            "application/pdf": FormatLimit("PDF document", settings.max_pdf_size_bytes),
            DOCX_TYPE: FormatLimit("Word document", office),
            PPTX_TYPE: FormatLimit("PowerPoint presentation", office),
        }

    @property
    def supported_types(self) -> frozenset[str]:
        return frozenset(self._limits)

    def validate_document(self, upload: UploadFile) -> FormatLimit:
        """Validate a file for asynchronous document processing.

        Raises:
            ValidationError: if the type is unsupported or the file is too large.
        """
        return self._validate(upload, self.supported_types)

    def validate_image(self, upload: UploadFile) -> FormatLimit:
        """Validate a file for synchronous image recognition."""
        return self._validate(upload, IMAGE_TYPES)

    def _validate(self, upload: UploadFile, allowed: frozenset[str]) -> FormatLimit:
        if upload.mime_type not in allowed:
            raise ValidationError(
                f"Unsupported file type: {upload.mime_type}. "
                f"Supported types: {', '.join(sorted(allowed))}"
            )
        limit = self._limits[upload.mime_type]
        if upload.size > limit.max_size_bytes:
            size_mb = upload.size / 1024 / 1024
            max_mb = limit.max_size_bytes / 1024 / 1024
            raise ValidationError(
                f"{limit.display_name} too large: {size_mb:.1f}MB (max {max_mb:.0f}MB)"
            )
        if upload.size == 0:
            raise ValidationError(f"{limit.display_name} is empty: {upload.filename}")
        self._log.debug(
            f"File validation passed: {upload.filename} ({upload.mime_type}, {upload.size} bytes)"
        )
        return limit
