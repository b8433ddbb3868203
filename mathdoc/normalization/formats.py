"""Extraction helpers for the secondary formats of a recognition response."""

import re
from typing import Any

from mathdoc.normalization.models import SmilesEntry

TSV_TYPE = "tsv"

_TABLE_ELEMENT = re.compile(r"<table[^>]*>[\s\S]*?</table>", re.IGNORECASE)
_TABLE_OPEN_TAG = re.compile(r"<table[^>]*>", re.IGNORECASE)
_SMILES_TAG = re.compile(r"<smiles>(.*?)</smiles>")
_CHEMISTRY_SUBTYPES = frozenset({"chemistry", "chemistry_reaction"})
_CONTEXT_CHARS = 50
_CONTEXT_WORDS = 5


def index_data_entries(data: Any) -> dict[str, str]:
    """Key the ``[{type, value}]`` entries by type; the first entry per type wins."""
    index: dict[str, str] = {}
    if not isinstance(data, list):
        return index
    for item in data:
        if not isinstance(item, dict):
            continue
        entry_type = item.get("type")
        if isinstance(entry_type, str) and entry_type not in index:
            value = item.get("value")
            index[entry_type] = value if isinstance(value, str) else ""
    return index


def extract_table_html(html: str) -> str:
    """Return every table element in ``html``, separated by blank lines."""
    if not html:
        return ""
    return "\n\n".join(_TABLE_ELEMENT.findall(html))


def convert_tsv_to_markdown(tsv: str) -> str:
    """Convert tab-separated rows to a Markdown table; the first row is the header.

    Rows shorter than the header are padded with empty cells.
    """
    if not tsv or not isinstance(tsv, str):
        return ""
    rows = [line for line in tsv.split("\n") if line.strip()]
    if not rows:
        return ""

    header = rows[0].split("\t")
    lines = [
        f"| {' | '.join(header)} |",
        f"| {' | '.join('---' for _ in header)} |",
    ]
    for row in rows[1:]:
        cells = row.split("\t")
        cells.extend("" for _ in range(len(header) - len(cells)))
        lines.append(f"| {' | '.join(cells)} |")
    return "\n".join(lines)


def detect_table(response: dict[str, Any], data_index: dict[str, str] | None = None) -> bool:
    """True if tabular data, table markup, or a table line item is present.

    The checks run in that order and stop at the first hit.
    """
    if not response:
        return False
    if data_index is None:
        data_index = index_data_entries(response.get("data"))
    if data_index.get(TSV_TYPE):
        return True
    html = response.get("html")
    if isinstance(html, str) and _TABLE_OPEN_TAG.search(html):
        return True
    line_data = response.get("line_data")
    if isinstance(line_data, list):
        return any(isinstance(line, dict) and line.get("type") == "table" for line in line_data)
    return False


def extract_smiles(response: dict[str, Any]) -> list[SmilesEntry]:
    """Collect SMILES notations from the primary text and chemistry line items."""
    entries: list[SmilesEntry] = []
    text = response.get("text") or ""
    if isinstance(text, str):
        for match in _SMILES_TAG.finditer(text):
            entries.append(
                SmilesEntry(notation=match.group(1), context=_context_before(text, match.start()))
            )

    line_data = response.get("line_data")
    if isinstance(line_data, list):
        for line in line_data:
            if not isinstance(line, dict) or line.get("subtype") not in _CHEMISTRY_SUBTYPES:
                continue
            match = _SMILES_TAG.search(line.get("text") or "")
            if match:
                line_id = line.get("id")
                entries.append(
                    SmilesEntry(
                        notation=match.group(1),
                        context=line.get("type") or "chemistry diagram",
                        line_id=str(line_id) if line_id is not None else None,
                    )
                )
    return entries


def _context_before(text: str, position: int) -> str:
    preceding = text[max(0, position - _CONTEXT_CHARS):position].strip()
    words = preceding.split()
    return " ".join(words[-_CONTEXT_WORDS:]) or "General chemistry"
