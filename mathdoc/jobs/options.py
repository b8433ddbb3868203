"""Request option building: defaults < caller options < enforced privacy."""

import copy
from dataclasses import dataclass, field
from typing import Any, ClassVar

from mathdoc.errors.exceptions import ValidationError
from mathdoc.logging.logger import Log

# improve_mathpix=False opts out of training use and of retention beyond processing.
PRIVACY_OPTIONS: dict[str, Any] = {"metadata": {"improve_mathpix": False}}

DEFAULT_DOCUMENT_FORMATS: tuple[str, ...] = ("mmd", "html")

DEFAULT_DOCUMENT_REQUEST: dict[str, Any] = {
    "math_inline_delimiters": ["$", "$"],
    "math_display_delimiters": ["$$", "$$"],
    "rm_spaces": True,
    "rm_fonts": True,
}

DEFAULT_IMAGE_REQUEST: dict[str, Any] = {
    "formats": ["text", "data", "html"],
    "data_options": {
        "include_latex": True,
        "include_mathml": True,
        "include_asciimath": True,
        "include_table_html": True,
        "include_tsv": True,
    },
    "enable_tables_fallback": True,
    "math_inline_delimiters": ["\\(", "\\)"],
    "math_display_delimiters": ["\\[", "\\]"],
    "include_line_data": True,
}


@dataclass(frozen=True)
class SubmitOptions:
    """Caller-supplied processing options; ``None`` leaves the default in place."""

    formats: tuple[str, ...] | None = None
    data_options: dict[str, bool] | None = None
    math_inline_delimiters: tuple[str, str] | None = None
    math_display_delimiters: tuple[str, str] | None = None
    page_range: str | None = None
    include_equation_tags: bool | None = None
    idiomatic_eqn_arrays: bool | None = None
    auto_number_sections: bool | None = None
    remove_section_numbering: bool | None = None
    preserve_section_numbering: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    FLAG_FIELDS: ClassVar[tuple[str, ...]] = (
        "include_equation_tags",
        "idiomatic_eqn_arrays",
        "auto_number_sections",
        "remove_section_numbering",
        "preserve_section_numbering",
    )

    @property
    def requested_formats(self) -> tuple[str, ...]:
        return self.formats if self.formats is not None else DEFAULT_DOCUMENT_FORMATS

    @property
    def effective_page_range(self) -> str | None:
        if not self.page_range or self.page_range.strip().lower() == "all":
            return None
        return self.page_range.strip()

    def caller_overrides(self) -> dict[str, Any]:
        """Options explicitly set by the caller, excluding formats and page range."""
        overrides: dict[str, Any] = {}
        if self.data_options is not None:
            overrides["data_options"] = dict(self.data_options)
        if self.math_inline_delimiters is not None:
            overrides["math_inline_delimiters"] = list(self.math_inline_delimiters)
        if self.math_display_delimiters is not None:
            overrides["math_display_delimiters"] = list(self.math_display_delimiters)
        for name in self.FLAG_FIELDS:
            value = getattr(self, name)
            if value is not None:
                overrides[name] = value
        return overrides


class RequestOptionsBuilder:
    """Builds the JSON options sent alongside an upload."""

    # Caller-facing format name -> service conversion format.
    CONVERSION_FORMATS: ClassVar[dict[str, str]] = {
        "md": "md",
        "html": "html",
        "pdf": "pdf",
        "latexpdf": "latex.pdf",
        "latex.pdf": "latex.pdf",
        "latex": "tex.zip",
        "tex.zip": "tex.zip",
        "docx": "docx",
        "pptx": "pptx",
        "mmd.zip": "mmd.zip",
        "md.zip": "md.zip",
        "html.zip": "html.zip",
    }
    DEFAULT_OUTPUT_FORMAT: ClassVar[str] = "mmd"

    def __init__(self, log: Log | None = None) -> None:
        self._log = log or Log.for_component("jobs.options")

    def build_document_request(self, options: SubmitOptions) -> dict[str, Any]:
        """Options for the asynchronous document endpoint."""
        request = copy.deepcopy(DEFAULT_DOCUMENT_REQUEST)
        request["conversion_formats"] = self.conversion_formats(options.requested_formats)
        self._log.debug(f"Conversion formats requested: {sorted(request['conversion_formats'])}")
        page_range = options.effective_page_range
        if page_range is not None:
            request["page_ranges"] = page_range
        request = deep_merge(request, options.caller_overrides())
        request = deep_merge(request, options.extra)
        return deep_merge(request, PRIVACY_OPTIONS)

    def build_image_request(self, options: SubmitOptions) -> dict[str, Any]:
        """Options for the synchronous image endpoint."""
        request = copy.deepcopy(DEFAULT_IMAGE_REQUEST)
        if options.formats is not None:
            request["formats"] = list(options.formats)
        request = deep_merge(request, options.caller_overrides())
        request = deep_merge(request, options.extra)
        return deep_merge(request, PRIVACY_OPTIONS)

    def conversion_formats(self, formats: tuple[str, ...]) -> dict[str, bool]:
        conversions: dict[str, bool] = {}
        for name in formats:
            if name == self.DEFAULT_OUTPUT_FORMAT:
                continue
            api_name = self.CONVERSION_FORMATS.get(name)
            if api_name is None:
                raise ValidationError(
                    f"Unknown output format '{name}'. "
                    f"Choose from: {sorted({self.DEFAULT_OUTPUT_FORMAT, *self.CONVERSION_FORMATS})}"
                )
            conversions[api_name] = True
        return conversions


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` applied; nested dicts merge."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
