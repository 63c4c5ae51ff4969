"""Text and number helpers shared by the extractors and writers."""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_MULTI_SPACE_RE = re.compile(r"\s{2,}")
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")


def normalize_text(value: object) -> str:
    """Lowercase, strip accents, collapse whitespace and trim.

    Used to compare scraped labels ("TIPO DE IMÓVEL :") against canonical
    ones ("Tipo de imóvel") regardless of case/accent/spacing drift.
    None yields "".
    """
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", stripped.lower()).strip()


def collapse_whitespace(value: str | None) -> str:
    """Collapse runs of whitespace to one space and trim."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def parse_brl(text: str | None) -> float | None:
    """Parse a Brazilian-formatted amount like '1.234,56' into 1234.56.

    Returns None if parsing fails.
    """
    if not text:
        return None
    cleaned = re.sub(r"[^\d,.-]", "", text)
    cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError:
        return None


def format_brl_number(value: float) -> str:
    """Format with two decimals and a comma decimal separator ('1234,50')."""
    return f"{value:.2f}".replace(".", ",")


def compute_discount(appraisal: float | None, minimum: float | None) -> str:
    """Discount of the minimum bid over the appraisal, e.g. '20,00%'.

    Empty when either value is missing or the appraisal is not positive.
    Negative discounts are clamped to zero.
    """
    if appraisal is None or minimum is None or appraisal <= 0:
        return ""
    discount = max((appraisal - minimum) / appraisal * 100, 0.0)
    return f"{format_brl_number(discount)}%"


def sanitize_cell(value: object) -> str:
    """Flatten a value for a spreadsheet cell.

    Newlines become spaces, whitespace runs collapse to one, ends are trimmed
    and None becomes "".
    """
    if value is None:
        return ""
    text = _NEWLINE_RE.sub(" ", str(value))
    return _MULTI_SPACE_RE.sub(" ", text).strip()
