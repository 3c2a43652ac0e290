"""
Tests for control extraction.
"""

from scanquery.core.controls import (
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
from scanquery.core.terms import FilterTerm


# -----------------------------
# Listing Controls
# -----------------------------


class TestFilterControls:
    """Tests for filter_controls."""

    def test_defaults(self, settings) -> None:
        assert filter_controls(None, settings) == FilterControls(
            first=1, max_rows=-2, sort_field="name", sort_ascending=True
        )

    def test_values(self, tokenize, settings) -> None:
        controls = filter_controls(tokenize("first=21 rows=20 sort-reverse=created"), settings)

        assert controls == FilterControls(
            first=21, max_rows=20, sort_field="created", sort_ascending=False
        )

    def test_missing_rows_keeps_sentinel(self, tokenize, settings) -> None:
        assert filter_controls(tokenize("name=a"), settings).max_rows == -2

    def test_rows_default_resolves(self, tokenize, settings) -> None:
        assert filter_controls(tokenize("rows=-2"), settings).max_rows == 10

    def test_rows_not_capped(self, tokenize, capped_settings) -> None:
        assert filter_controls(tokenize("rows=500"), capped_settings).max_rows == 500

    def test_negative_first(self, tokenize, settings) -> None:
        assert filter_controls(tokenize("first=-4"), settings).first == 0

    def test_first_sort_keyword_wins(self, tokenize, settings) -> None:
        controls = filter_controls(tokenize("sort-reverse=host sort=name"), settings)

        assert (controls.sort_field, controls.sort_ascending) == ("host", False)

    def test_reserved_keywords_are_case_sensitive(self, tokenize, settings) -> None:
        assert filter_controls(tokenize("FIRST=5"), settings).first == 1

    def test_mixed_case_rows_and_sort_are_ignored(self, tokenize, settings) -> None:
        controls = filter_controls(tokenize("ROWS=5 Sort-reverse=created"), settings)

        assert controls == FilterControls(
            first=1, max_rows=-2, sort_field="name", sort_ascending=True
        )


# -----------------------------
# Report Controls
# -----------------------------


class TestReportFilterControls:
    """Tests for report_filter_controls."""

    def test_defaults(self, settings) -> None:
        controls = report_filter_controls(None, settings)

        assert controls == ReportFilterControls()
        assert controls.first == 0
        assert controls.max_rows == 100

    def test_first_is_zero_based(self, tokenize, settings) -> None:
        assert report_filter_controls(tokenize("first=11"), settings).first == 10
        assert report_filter_controls(tokenize("first=0"), settings).first == 0

    def test_missing_rows_uses_report_default(self, tokenize, settings) -> None:
        assert report_filter_controls(tokenize("name=a"), settings).max_rows == 100

    def test_keywords(self, tokenize, settings) -> None:
        controls = report_filter_controls(
            tokenize(
                "levels=hm min_qod=50 result_hosts_only=0 notes=0"
                " delta_states=cg compliance_levels=yn timezone=UTC"
            ),
            settings,
        )

        assert controls.levels == "hm"
        assert controls.min_qod == "50"
        assert controls.result_hosts_only is False
        assert controls.notes is False
        assert controls.delta_states == "cg"
        assert controls.compliance_levels == "yn"
        assert controls.timezone == "UTC"

    def test_apply_overrides_follows_overrides(self, tokenize, settings) -> None:
        controls = report_filter_controls(tokenize("overrides=0"), settings)

        assert controls.overrides is False
        assert controls.apply_overrides is False

    def test_apply_overrides_wins(self, tokenize, settings) -> None:
        controls = report_filter_controls(tokenize("overrides=0 apply_overrides=1"), settings)

        assert controls.overrides is False
        assert controls.apply_overrides is True

    def test_search_phrase(self, tokenize, settings) -> None:
        controls = report_filter_controls(
            tokenize("openssh and not =banner rows=5"), settings
        )

        assert controls.search_phrase == "openssh banner"
        assert controls.search_phrase_exact is True

    def test_search_phrase_is_trimmed(self, settings) -> None:
        tokens = [FilterTerm(text=""), FilterTerm(text="openssh"), FilterTerm(text="")]

        assert report_filter_controls(tokens, settings).search_phrase == "openssh"

    def test_to_dict(self, tokenize, settings) -> None:
        data = report_filter_controls(tokenize("sort-reverse=severity"), settings).to_dict()

        assert data["sortField"] == "severity"
        assert data["sortAscending"] is False
        assert data["maxRows"] == 100


# -----------------------------
# Single Values
# -----------------------------


class TestTermValues:
    """Tests for term_value and its typed helpers."""

    def test_term_value(self, tokenize) -> None:
        assert term_value(tokenize("name=a task_id=x1"), "task_id") == "x1"

    def test_term_value_matches_underscore_and_case(self, tokenize) -> None:
        assert term_value(tokenize("_Owner=bob"), "owner") == "bob"

    def test_term_value_missing(self, tokenize) -> None:
        assert term_value(tokenize("owner name=a"), "owner") is None
        assert term_value(None, "owner") is None

    def test_min_qod(self, tokenize) -> None:
        assert term_min_qod(tokenize("min_qod=30")) == 30
        assert term_min_qod(tokenize("min_qod=")) == MIN_QOD_DEFAULT
        assert term_min_qod(None) == 70

    def test_apply_overrides(self, tokenize) -> None:
        assert term_apply_overrides(tokenize("apply_overrides=0")) == 0
        assert term_apply_overrides(tokenize("apply_overrides=yes")) == 1
        assert term_apply_overrides(tokenize("name=a")) == APPLY_OVERRIDES_DEFAULT
