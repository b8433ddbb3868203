"""Conversion between bracket-style and dollar-style math delimiters."""

import re

from mathdoc.normalization.models import DelimiterCheck, DelimiterForms

_INLINE_PAIR = re.compile(r"\\\((.*?)\\\)", re.DOTALL)
_DISPLAY_PAIR = re.compile(r"\\\[(.*?)\\\]", re.DOTALL)
_INLINE_OPEN = re.compile(r"\\\(")
_INLINE_CLOSE = re.compile(r"\\\)")
_DISPLAY_OPEN = re.compile(r"\\\[")
_DISPLAY_CLOSE = re.compile(r"\\\]")
_SINGLE_DOLLAR = re.compile(r"(?<!\$)\$(?!\$)")
_DOUBLE_DOLLAR = re.compile(r"\$\$")
_INLINE_DOLLAR_PAIR = re.compile(r"(?<!\$)\$(?!\$).*?(?<!\$)\$(?!\$)")
_DISPLAY_DOLLAR_PAIR = re.compile(r"\$\$.*?\$\$")


def convert_latex_to_markdown(latex: str) -> str:
    r"""Replace ``\(``/``\)`` with ``$`` and ``\[``/``\]`` with ``$$``."""
    if not latex:
        return ""
    return (
        latex.replace("\\(", "$")
        .replace("\\)", "$")
        .replace("\\[", "$$")
        .replace("\\]", "$$")
    )


def transform_delimiters(latex: str) -> DelimiterForms:
    """Render paired bracket delimiters in dollar style.

    ``dollar`` keeps the inline/display distinction (``$``/``$$``);
    ``display`` forces every expression to ``$$``.
    """
    if not latex or not isinstance(latex, str):
        text = latex or ""
        return DelimiterForms(original=text, dollar=text, display=text)

    dollar = _INLINE_PAIR.sub(lambda m: f"${m.group(1)}$", latex)
    dollar = _DISPLAY_PAIR.sub(lambda m: f"$${m.group(1)}$$", dollar)

    display = _INLINE_PAIR.sub(lambda m: f"$${m.group(1)}$$", latex)
    display = _DISPLAY_PAIR.sub(lambda m: f"$${m.group(1)}$$", display)
    return DelimiterForms(original=latex, dollar=dollar, display=display)


def validate_delimiters(forms: DelimiterForms) -> DelimiterCheck:
    """Count delimiters and flag unmatched pairs or odd dollar counts."""
    issues: list[str] = []

    inline_open = len(_INLINE_OPEN.findall(forms.original))
    inline_close = len(_INLINE_CLOSE.findall(forms.original))
    if inline_open != inline_close:
        issues.append(
            f"Unmatched inline delimiters: {inline_open} open, {inline_close} close"
        )

    display_open = len(_DISPLAY_OPEN.findall(forms.original))
    display_close = len(_DISPLAY_CLOSE.findall(forms.original))
    if display_open != display_close:
        issues.append(
            f"Unmatched display delimiters: {display_open} open, {display_close} close"
        )

    single = len(_SINGLE_DOLLAR.findall(forms.dollar))
    if single % 2:
        issues.append(f"Odd number of inline $ delimiters: {single}")

    double = len(_DOUBLE_DOLLAR.findall(forms.display))
    if double % 2:
        issues.append(f"Odd number of display $$ delimiters: {double}")

    return DelimiterCheck(valid=not issues, issues=issues)


def detect_delimiter_format(latex: str) -> tuple[str, bool, bool]:
    """Return ``(format, has_inline, has_display)``.

    ``format`` is ``backslash``, ``dollar`` or ``unknown``.
    """
    if not latex or not isinstance(latex, str):
        return "unknown", False, False

    inline_backslash = bool(_INLINE_PAIR.search(latex))
    display_backslash = bool(_DISPLAY_PAIR.search(latex))
    inline_dollar = bool(_INLINE_DOLLAR_PAIR.search(latex))
    display_dollar = bool(_DISPLAY_DOLLAR_PAIR.search(latex))

    if inline_backslash or display_backslash:
        fmt = "backslash"
    elif inline_dollar or display_dollar:
        fmt = "dollar"
    else:
        fmt = "unknown"
    return fmt, inline_backslash or inline_dollar, display_backslash or display_dollar
