"""
Page size handling shared by the compiler, canonicalizer and controls.

A filter may ask for ``rows=-2``, meaning "the user's Rows Per Page
setting". Every page size a listing finally uses is clamped by the
system-wide ``max_rows_per_page`` unless the caller bypasses it.
"""

from scanquery.core.config import FilterSettings, get_settings
from scanquery.core.terms import parse_int

ROWS_DEFAULT = -2
ROWS_UNLIMITED = -1


def default_rows_per_page(settings: FilterSettings | None = None) -> int:
    """Look up the persisted Rows Per Page setting."""
    return (settings or get_settings()).default_rows_per_page


def max_rows(
    rows: int,
    ignore_max_rows_per_page: bool = False,
    settings: FilterSettings | None = None,
) -> int:
    """
    Clamp a page size to the system-wide maximum.

    Args:
        rows: Requested page size, -1 for unlimited.
        ignore_max_rows_per_page: Return ``rows`` untouched.
        settings: Filter settings. Uses cached settings if not provided.

    Returns:
        The page size to use.
    """
    if ignore_max_rows_per_page:
        return rows
    cap = (settings or get_settings()).max_rows_per_page
    if cap and (rows < 0 or rows > cap):
        return cap
    return rows


def resolve_rows(text: str, settings: FilterSettings | None = None) -> int:
    """Turn the value of a ``rows`` keyword into a page size (-1 unlimited)."""
    rows = parse_int(text)
    if rows == ROWS_DEFAULT:
        return default_rows_per_page(settings)
    if rows < 1:
        return ROWS_UNLIMITED
    return rows
