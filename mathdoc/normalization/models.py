from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SmilesEntry:
    """One chemistry notation found in a response."""

    notation: str
    context: str
    line_id: str | None = None


@dataclass(frozen=True)
class DelimiterForms:
    """A text in its original delimiters and two dollar-delimited renderings."""

    original: str
    dollar: str
    display: str


@dataclass(frozen=True)
class DelimiterCheck:
    """Structural warnings about math delimiters; never a hard failure."""

    valid: bool
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NormalizedResult:
    """Canonical, format-agnostic representation of a recognition result."""

    latex: str = ""
    html: str = ""
    asciimath: str = ""
    mathml: str = ""
    markdown: str = ""
    tsv: str = ""
    table_html: str = ""
    table_markdown: str = ""
    smiles: list[SmilesEntry] = field(default_factory=list)
    confidence: float = 0.0
    is_handwritten: bool = False
    is_printed: bool = False
    contains_table: bool = False
    contains_chemistry: bool = False
    line_data: list[dict[str, Any]] = field(default_factory=list)
    delimiter_warnings: list[str] = field(default_factory=list)
    raw_json: str = ""
    raw_response: dict[str, Any] = field(default_factory=dict)
