"""Controls read directly from filter terms."""

from .controls import (
    APPLY_OVERRIDES_DEFAULT,
    MIN_QOD_DEFAULT,
    FilterControls,
    ReportFilterControls,
    filter_controls,
    report_filter_controls,
    term_apply_overrides,
    term_min_qod,
    term_value,
)

__all__ = [
    "APPLY_OVERRIDES_DEFAULT",
    "MIN_QOD_DEFAULT",
    "FilterControls",
    "ReportFilterControls",
    "filter_controls",
    "report_filter_controls",
    "term_apply_overrides",
    "term_min_qod",
    "term_value",
]
