from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Line:
    """One recognized line of a page."""

    type: str | None = None
    text: str = ""
    confidence: float | None = None
    is_printed: bool = False
    is_handwritten: bool = False
    region: dict[str, Any] | None = None
    subtype: str | None = None
    table_id: str | None = None
    geometry: dict[str, Any] | None = None


@dataclass(frozen=True)
class Page:
    """A page of a LinesDocument."""

    page_number: int
    width: float | None = None
    height: float | None = None
    image_id: str | None = None
    lines: list[Line] = field(default_factory=list)


@dataclass(frozen=True)
class LinesDocument:
    """Line-by-line structural breakdown of a processed document."""

    pages: list[Page]

    @property
    def total_lines(self) -> int:
        return sum(len(page.lines) for page in self.pages)


@dataclass(frozen=True)
class ConfidenceStats:
    """Distribution of per-line confidence values."""

    mean: float
    median: float
    minimum: float
    maximum: float
    high_confidence_lines: int
    low_confidence_lines: int


@dataclass
class PageAnalysis:
    """Per-page counters mirroring the document-level ones."""

    page_number: int
    width: float | None = None
    height: float | None = None
    image_id: str | None = None
    line_count: int = 0
    content_types: dict[str, int] = field(default_factory=dict)
    math_count: int = 0
    table_count: int = 0
    diagram_count: int = 0
    handwritten_lines: int = 0
    printed_lines: int = 0
    total_characters: int = 0
    word_count: int = 0
    average_confidence: float = 0.0


@dataclass
class ContentAnalysis:
    """Aggregate statistics over a LinesDocument."""

    total_pages: int = 0
    total_lines: int = 0
    content_types: dict[str, int] = field(default_factory=dict)
    content_type_shares: dict[str, int] = field(default_factory=dict)
    math_count: int = 0
    table_count: int = 0
    distinct_tables: int = 0
    diagram_count: int = 0
    handwritten_lines: int = 0
    printed_lines: int = 0
    total_characters: int = 0
    word_count: int = 0
    math_symbol_count: int = 0
    average_confidence: float = 0.0
    confidence_stats: ConfidenceStats | None = None
    page_breakdown: list[PageAnalysis] | None = None
    summary: str = ""
