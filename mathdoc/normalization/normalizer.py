"""Tolerant conversion of a raw recognition response into a NormalizedResult."""

import json
import math
from typing import Any

from mathdoc.logging.logger import Log
from mathdoc.normalization.delimiters import (
    convert_latex_to_markdown,
    transform_delimiters,
    validate_delimiters,
)
from mathdoc.normalization.exceptions import NormalizationError
from mathdoc.normalization.formats import (
    TSV_TYPE,
    convert_tsv_to_markdown,
    detect_table,
    extract_smiles,
    extract_table_html,
    index_data_entries,
)
from mathdoc.normalization.models import NormalizedResult


class ResponseNormalizer:
    """Normalizes loosely-typed service responses; missing fields get defaults."""

    def __init__(self, log: Log | None = None) -> None:
        self._log = log or Log.for_component("normalization")

    def normalize(self, raw: dict[str, Any]) -> NormalizedResult:
        """Build a NormalizedResult from a raw response.

        Raises:
            NormalizationError: if ``raw`` is not a JSON object.
        """
        if not isinstance(raw, dict):
            raise NormalizationError(
                f"Response must be an object, got {type(raw).__name__}"
            )

        data_index = index_data_entries(raw.get("data"))
        latex = _text(raw.get("text"))
        html = _text(raw.get("html"))
        tsv = data_index.get(TSV_TYPE, "")
        smiles = extract_smiles(raw)
        detections = raw.get("detections") if isinstance(raw.get("detections"), dict) else {}

        delimiter_check = validate_delimiters(transform_delimiters(latex))
        if not delimiter_check.valid:
            self._log.warning(f"Delimiter warnings: {'; '.join(delimiter_check.issues)}")

        line_data = raw.get("line_data")
        result = NormalizedResult(
            latex=latex,
            html=html,
            asciimath=data_index.get("asciimath", ""),
            mathml=data_index.get("mathml", ""),
            markdown=convert_latex_to_markdown(latex),
            tsv=tsv,
            table_html=extract_table_html(html),
            table_markdown=convert_tsv_to_markdown(tsv),
            smiles=smiles,
            confidence=_confidence(raw.get("confidence")),
            is_handwritten=raw.get("is_handwritten") is True,
            is_printed=raw.get("is_printed") is True,
            contains_table=detect_table(raw, data_index),
            contains_chemistry=detections.get("contains_chemistry") is True or bool(smiles),
            line_data=[line for line in line_data if isinstance(line, dict)]
            if isinstance(line_data, list)
            else [],
            delimiter_warnings=delimiter_check.issues,
            raw_json=json.dumps(raw, indent=2, default=str),
            raw_response=raw,
        )
        self._log.debug(
            f"Response normalized: latex={bool(result.latex)}, html={bool(result.html)}, "
            f"table={result.contains_table}, lines={len(result.line_data)}, "
            f"confidence={result.confidence}"
        )
        return result


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, float(value)))
