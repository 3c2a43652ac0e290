"""
Filter canonicalization.

Saved filters are stored in a normalized form: one space between terms,
relation symbols as written, quotes kept where the user quoted, and a
concrete page size in place of ``rows=-2``.
"""

from collections.abc import Sequence

from scanquery.core.config import FilterSettings
from scanquery.core.paging import ROWS_DEFAULT, default_rows_per_page, max_rows
from scanquery.core.terms import FilterTerm, parse_int


def clean_filter(
    tokens: Sequence[FilterTerm] | None,
    exclude: str | None = None,
    ignore_max_rows_per_page: bool = False,
    settings: FilterSettings | None = None,
) -> str:
    """
    Re-serialize filter terms, optionally removing one keyword.

    Args:
        tokens: Terms from the tokenizer.
        exclude: Column to remove. Matches case-insensitively, also when
            the term's column carries a leading underscore.
        ignore_max_rows_per_page: Do not clamp the ``rows`` value.
        settings: Filter settings. Uses cached settings if not provided.

    Returns:
        The canonical filter string.
    """
    if not tokens:
        return ""
    parts = []
    for term in tokens:
        if term.column is not None:
            if _excluded(term.column, exclude):
                continue
            parts.append(_column_text(term, ignore_max_rows_per_page, settings))
        else:
            marker = "=" if term.exact else "~" if term.approx else ""
            parts.append(marker + _value_text(term))
    # Empty bare terms are left out.
    return " ".join(part for part in parts if part).strip()


def _excluded(column: str, exclude: str | None) -> bool:
    if not exclude:
        return False
    column = column.lower()
    exclude = exclude.lower()
    return column == exclude or (column.startswith("_") and column[1:] == exclude)


def _value_text(term: FilterTerm) -> str:
    return f'"{term.text}"' if term.quoted else term.text


def _column_text(
    term: FilterTerm,
    ignore_max_rows_per_page: bool,
    settings: FilterSettings | None,
) -> str:
    prefix = f"{term.column}{term.relation.symbol}"
    if term.column == "rows":
        if term.text == str(ROWS_DEFAULT):
            rows = default_rows_per_page(settings)
        else:
            rows = parse_int(term.text)
        return f"{prefix}{max_rows(rows, ignore_max_rows_per_page, settings)}"
    return prefix + _value_text(term)
