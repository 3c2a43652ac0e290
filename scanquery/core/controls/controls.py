"""
Control extraction from filter terms.

Listings and reports read a few settings straight from the filter
instead of compiling them: page bounds, sort field, and for reports the
QoD threshold, severity levels, override handling and the search phrase.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from scanquery.core.config import FilterSettings
from scanquery.core.paging import ROWS_DEFAULT, resolve_rows
from scanquery.core.terms import FilterTerm, parse_int

# Defaults when a filter term does not say otherwise
APPLY_OVERRIDES_DEFAULT = 0
MIN_QOD_DEFAULT = 70
REPORT_ROWS_DEFAULT = 100
SORT_FIELD_DEFAULT = "name"


@dataclass(frozen=True)
class FilterControls:
    """Paging and sorting of a generic listing. ``first`` is 1-based."""

    first: int = 1
    max_rows: int = ROWS_DEFAULT
    sort_field: str = SORT_FIELD_DEFAULT
    sort_ascending: bool = True


@dataclass(frozen=True)
class ReportFilterControls:
    """
    Controls of a report listing. ``first`` is 0-based.

    ``levels``, ``compliance_levels`` and ``delta_states`` are letter sets
    such as "hml" (High, Medium, Low); None means all.
    """

    first: int = 0
    max_rows: int = REPORT_ROWS_DEFAULT
    sort_field: str = SORT_FIELD_DEFAULT
    sort_ascending: bool = True
    result_hosts_only: bool = True
    min_qod: str | None = None
    levels: str | None = None
    compliance_levels: str | None = None
    delta_states: str | None = None
    search_phrase: str = ""
    search_phrase_exact: bool = False
    notes: bool = True
    overrides: bool = True
    apply_overrides: bool = True
    timezone: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary format."""
        return {
            "first": self.first,
            "maxRows": self.max_rows,
            "sortField": self.sort_field,
            "sortAscending": self.sort_ascending,
            "resultHostsOnly": self.result_hosts_only,
            "minQod": self.min_qod,
            "levels": self.levels,
            "complianceLevels": self.compliance_levels,
            "deltaStates": self.delta_states,
            "searchPhrase": self.search_phrase,
            "searchPhraseExact": self.search_phrase_exact,
            "notes": self.notes,
            "overrides": self.overrides,
            "applyOverrides": self.apply_overrides,
            "timezone": self.timezone,
        }


# -----------------------------
# Lookups
# -----------------------------


def _find(tokens: Sequence[FilterTerm], column: str) -> FilterTerm | None:
    """First term whose column is exactly ``column``."""
    for term in tokens:
        if term.column_is(column):
            return term
    return None


def _find_int(tokens: Sequence[FilterTerm], column: str) -> int | None:
    term = _find(tokens, column)
    return parse_int(term.text) if term is not None else None


def _find_str(tokens: Sequence[FilterTerm], column: str) -> str | None:
    term = _find(tokens, column)
    return term.text if term is not None else None


def _first(tokens: Sequence[FilterTerm]) -> int:
    first = _find_int(tokens, "first")
    return 1 if first is None else max(first, 0)


def _sort(tokens: Sequence[FilterTerm]) -> tuple[str, bool]:
    for term in tokens:
        if term.column_is("sort"):
            return term.text, True
        if term.column_is("sort-reverse"):
            return term.text, False
    return SORT_FIELD_DEFAULT, True


def _max_rows(
    tokens: Sequence[FilterTerm], default: int, settings: FilterSettings | None
) -> int:
    term = _find(tokens, "rows")
    if term is None:
        return default
    return resolve_rows(term.text, settings)


# -----------------------------
# Extractors
# -----------------------------


def filter_controls(
    tokens: Sequence[FilterTerm] | None,
    settings: FilterSettings | None = None,
) -> FilterControls:
    """
    Get paging and sorting of a generic listing.

    The page size is not clamped; callers apply ``max_rows`` themselves.
    A missing ``rows`` keyword leaves ``max_rows`` at -2 (the default
    page size sentinel).
    """
    if not tokens:
        return FilterControls()
    sort_field, ascending = _sort(tokens)
    return FilterControls(
        first=_first(tokens),
        max_rows=_max_rows(tokens, ROWS_DEFAULT, settings),
        sort_field=sort_field,
        sort_ascending=ascending,
    )


def report_filter_controls(
    tokens: Sequence[FilterTerm] | None,
    settings: FilterSettings | None = None,
) -> ReportFilterControls:
    """
    Get the controls of a report listing.

    All bare terms other than logical words are joined into one search
    phrase; the phrase is exact if any of its terms was an ``=`` term.
    """
    if not tokens:
        return ReportFilterControls()

    sort_field, ascending = _sort(tokens)
    phrase = [term for term in tokens if term.is_bare and not term.is_connective]

    overrides = _find_int(tokens, "overrides")
    apply_overrides = _find_int(tokens, "apply_overrides")
    if apply_overrides is None:
        apply_overrides = overrides
    result_hosts_only = _find_int(tokens, "result_hosts_only")
    notes = _find_int(tokens, "notes")
    # Trimmed at both ends, so a leading empty term adds no space.
    search_phrase = " ".join(term.text for term in phrase).strip()

    return ReportFilterControls(
        first=max(_first(tokens) - 1, 0),
        max_rows=_max_rows(tokens, REPORT_ROWS_DEFAULT, settings),
        sort_field=sort_field,
        sort_ascending=ascending,
        result_hosts_only=bool(1 if result_hosts_only is None else result_hosts_only),
        min_qod=_find_str(tokens, "min_qod"),
        levels=_find_str(tokens, "levels"),
        compliance_levels=_find_str(tokens, "compliance_levels"),
        delta_states=_find_str(tokens, "delta_states"),
        search_phrase=search_phrase,
        search_phrase_exact=any(term.exact for term in phrase),
        notes=bool(1 if notes is None else notes),
        overrides=bool(1 if overrides is None else overrides),
        apply_overrides=bool(1 if apply_overrides is None else apply_overrides),
        timezone=_find_str(tokens, "timezone"),
    )


# -----------------------------
# Single keyword values
# -----------------------------


def term_value(tokens: Sequence[FilterTerm] | None, column: str) -> str | None:
    """
    Value of the first keyword for ``column``.

    Matches case-insensitively, and also matches ``_<column>``.
    """
    column = column.lower()
    for term in tokens or ():
        if term.column is None:
            continue
        name = term.column.lower()
        if name == column or (name.startswith("_") and name[1:] == column):
            return term.text
    return None


def term_min_qod(tokens: Sequence[FilterTerm] | None) -> int:
    """Minimum QoD of a filter, MIN_QOD_DEFAULT when absent or empty."""
    value = term_value(tokens, "min_qod")
    return parse_int(value) if value else MIN_QOD_DEFAULT


def term_apply_overrides(tokens: Sequence[FilterTerm] | None) -> int:
    """Whether a filter applies overrides: 1 unless its value is "0"."""
    value = term_value(tokens, "apply_overrides")
    if value is None:
        return APPLY_OVERRIDES_DEFAULT
    return 0 if value == "0" else 1
