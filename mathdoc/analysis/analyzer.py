"""Aggregate statistics over the line-level structure of a processed document."""

import re
import statistics
from collections.abc import Iterable
from typing import Any, ClassVar

from mathdoc.analysis.lines import validate_and_build
from mathdoc.analysis.models import (
    ConfidenceStats,
    ContentAnalysis,
    Line,
    LinesDocument,
    PageAnalysis,
)
from mathdoc.logging.logger import Log

MATH = "math"
TEXT = "text"
TABLE = "table"
DIAGRAM = "diagram"

_MATH_DELIMITERS = re.compile(r"\$.*\$|\\\(.*\\\)|\\\[.*\\\]", re.DOTALL)
_MATH_SYMBOLS = re.compile(r"[∑∫∆∇πθφψω]")
_HIGH_CONFIDENCE = 0.9
_LOW_CONFIDENCE = 0.7


def classify_line(line: Line) -> str:
    """Content type of a line: its explicit ``type``, else a text heuristic."""
    if line.type:
        return line.type
    if line.text and _MATH_DELIMITERS.search(line.text):
        return MATH
    if line.geometry and line.geometry.get(TABLE):
        return TABLE
    return TEXT


class ContentAnalyzer:
    """Counts content types, confidence and handwriting over a LinesDocument."""

    DISPLAY_NAMES: ClassVar[dict[str, str]] = {
        MATH: "Mathematical Elements",
        TABLE: "Tables",
        TEXT: "Text Content",
        "image": "Images & Figures",
        DIAGRAM: "Diagrams",
        "equation": "Equations",
        "figure": "Figures",
    }

    def __init__(self, log: Log | None = None) -> None:
        self._log = log or Log.for_component("analysis")

    @classmethod
    def display_name(cls, content_type: str) -> str:
        return cls.DISPLAY_NAMES.get(content_type) or content_type[:1].upper() + content_type[1:]

    def analyze(
        self,
        document: dict[str, Any] | LinesDocument,
        *,
        include_page_breakdown: bool = True,
        calculate_confidence: bool = True,
        filter_types: Iterable[str] | None = None,
    ) -> ContentAnalysis:
        """Analyze a lines payload.

        Args:
            document: Raw ``{"pages": [...]}`` payload or a LinesDocument.
            include_page_breakdown: Also produce per-page counters.
            calculate_confidence: Compute the confidence mean and distribution.
            filter_types: When given, only lines of these content types count.

        Raises:
            ValidationError: if the payload structure is invalid.
        """
        doc = validate_and_build(document)
        wanted = frozenset(filter_types) if filter_types is not None else None

        analysis = ContentAnalysis(
            total_pages=len(doc.pages),
            page_breakdown=[] if include_page_breakdown else None,
        )
        confidences: list[float] = []
        tables: set[str] = set()

        for page in doc.pages:
            page_analysis = PageAnalysis(
                page_number=page.page_number,
                width=page.width,
                height=page.height,
                image_id=page.image_id,
            )
            page_confidences: list[float] = []

            for line in page.lines:
                content_type = classify_line(line)
                if wanted is not None and content_type not in wanted:
                    continue
                self._count_line(analysis, page_analysis, line, content_type)
                if content_type == TABLE:
                    tables.add(line.table_id or f"page-{page.page_number}")
                if calculate_confidence and line.confidence is not None:
                    confidences.append(line.confidence)
                    page_confidences.append(line.confidence)

            if page_confidences:
                page_analysis.average_confidence = statistics.fmean(page_confidences)
            if analysis.page_breakdown is not None:
                analysis.page_breakdown.append(page_analysis)

        analysis.distinct_tables = len(tables)
        analysis.content_type_shares = _shares(analysis.content_types, analysis.total_lines)
        if confidences:
            analysis.average_confidence = statistics.fmean(confidences)
            analysis.confidence_stats = _confidence_stats(confidences)
        analysis.summary = self.summarize(analysis, has_confidence=bool(confidences))

        self._log.info(
            f"Document analysis complete: {analysis.total_pages} pages, "
            f"{analysis.total_lines} lines, {analysis.math_count} math, "
            f"{analysis.table_count} tables, confidence {analysis.average_confidence:.3f}"
        )
        return analysis

    @staticmethod
    def summarize(analysis: ContentAnalysis, has_confidence: bool = False) -> str:
        """One sentence naming only the non-zero categories."""
        counts = [
            (analysis.total_pages, "page", "pages"),
            (analysis.total_lines, "line", "lines"),
            (analysis.math_count, "mathematical element", "mathematical elements"),
            (analysis.table_count, "table", "tables"),
            (analysis.diagram_count, "diagram", "diagrams"),
            (analysis.handwritten_lines, "handwritten line", "handwritten lines"),
            (analysis.word_count, "word of text", "words of text"),
        ]
        parts = [
            f"{count} {singular if count == 1 else plural}"
            for count, singular, plural in counts
            if count
        ]
        if not parts:
            return "Document structure analyzed."
        summary = f"Analyzed {', '.join(parts)}."
        if has_confidence:
            summary += f" Average confidence {analysis.average_confidence:.3f}."
        return summary

    @staticmethod
    def _count_line(
        analysis: ContentAnalysis,
        page: PageAnalysis,
        line: Line,
        content_type: str,
    ) -> None:
        analysis.total_lines += 1
        page.line_count += 1
        analysis.content_types[content_type] = analysis.content_types.get(content_type, 0) + 1
        page.content_types[content_type] = page.content_types.get(content_type, 0) + 1

        if content_type == MATH:
            analysis.math_count += 1
            page.math_count += 1
            analysis.math_symbol_count += len(_MATH_SYMBOLS.findall(line.text))
        elif content_type == TABLE:
            analysis.table_count += 1
            page.table_count += 1
        elif content_type == DIAGRAM:
            analysis.diagram_count += 1
            page.diagram_count += 1
        elif content_type == TEXT:
            words = len(line.text.split())
            analysis.word_count += words
            page.word_count += words

        analysis.total_characters += len(line.text)
        page.total_characters += len(line.text)
        if line.is_handwritten:
            analysis.handwritten_lines += 1
            page.handwritten_lines += 1
        if line.is_printed:
            analysis.printed_lines += 1
            page.printed_lines += 1


def _shares(counts: dict[str, int], total: int) -> dict[str, int]:
    if not total:
        return {}
    return {name: round(count / total * 100) for name, count in counts.items()}


def _confidence_stats(values: list[float]) -> ConfidenceStats:
    return ConfidenceStats(
        mean=statistics.fmean(values),
        median=statistics.median(values),
        minimum=min(values),
        maximum=max(values),
        high_confidence_lines=sum(1 for v in values if v >= _HIGH_CONFIDENCE),
        low_confidence_lines=sum(1 for v in values if v < _LOW_CONFIDENCE),
    )
