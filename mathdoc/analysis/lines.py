"""Validates a raw lines payload and builds a LinesDocument."""

from typing import Any

from mathdoc.analysis.models import Line, LinesDocument, Page
from mathdoc.errors.exceptions import ValidationError


def validate_and_build(data: Any) -> LinesDocument:
    """Validate the raw ``pages[].lines[]`` structure and build a LinesDocument.

    Raises:
        ValidationError: if ``pages`` is missing, not a list, or empty, or
            if any page lacks a ``lines`` list.
    """
    if isinstance(data, LinesDocument):
        _require_pages(data.pages)
        return data
    if not isinstance(data, dict):
        raise ValidationError("No lines data provided for analysis")
    if "pages" not in data or data["pages"] is None:
        raise ValidationError('Lines data missing "pages" property')
    pages = data["pages"]
    if not isinstance(pages, list):
        raise ValidationError('Lines data "pages" must be a list')
    _require_pages(pages)
    return LinesDocument(pages=[_build_page(raw, i) for i, raw in enumerate(pages)])


def _require_pages(pages: list[Any]) -> None:
    if not pages:
        raise ValidationError("Lines data has no pages")


def _build_page(raw: Any, index: int) -> Page:
    if not isinstance(raw, dict) or not isinstance(raw.get("lines"), list):
        raise ValidationError(f'Page at index {index} is missing a "lines" list')
    number = raw.get("page")
    return Page(
        page_number=number if isinstance(number, int) and number > 0 else index + 1,
        width=_number(raw.get("page_width")),
        height=_number(raw.get("page_height")),
        image_id=raw.get("image_id") if isinstance(raw.get("image_id"), str) else None,
        lines=[_build_line(line) for line in raw["lines"] if isinstance(line, dict)],
    )


def _build_line(raw: dict[str, Any]) -> Line:
    line_type = raw.get("type")
    table_id = raw.get("table_id", raw.get("tableId"))
    return Line(
        type=line_type if isinstance(line_type, str) and line_type else None,
        text=raw.get("text") if isinstance(raw.get("text"), str) else "",
        confidence=_number(raw.get("confidence")),
        is_printed=raw.get("is_printed") is True,
        is_handwritten=raw.get("is_handwritten") is True,
        region=raw.get("region") if isinstance(raw.get("region"), dict) else None,
        subtype=raw.get("subtype") if isinstance(raw.get("subtype"), str) else None,
        table_id=str(table_id) if table_id is not None else None,
        geometry=raw.get("geometry") if isinstance(raw.get("geometry"), dict) else None,
    )


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
