"""
Tests for filter canonicalization.
"""

from scanquery.core.canonical import clean_filter
from scanquery.core.terms import FilterTerm


class TestCleanFilter:
    """Tests for clean_filter."""

    def test_empty(self, settings) -> None:
        assert clean_filter(None, settings=settings) == ""
        assert clean_filter([], settings=settings) == ""

    def test_terms_are_rejoined(self, tokenize, settings) -> None:
        text = "name~foo and severity>7.0 =exact ~near sort-reverse=created"

        assert clean_filter(tokenize(text), settings=settings) == text

    def test_quotes_are_kept(self, tokenize, settings) -> None:
        assert clean_filter(tokenize('name="a" "b"'), settings=settings) == 'name="a" "b"'

    def test_exclude(self, tokenize, settings) -> None:
        tokens = tokenize("name=a first=3 rows=10 sort=name")

        assert clean_filter(tokens, exclude="first", settings=settings) == (
            "name=a rows=10 sort=name"
        )

    def test_exclude_ignores_case(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("Owner=bob name=a"), exclude="owner", settings=settings) == (
            "name=a"
        )

    def test_exclude_matches_underscore_prefix(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("_owner=bob name=a"), exclude="owner", settings=settings) == (
            "name=a"
        )

    def test_exclude_does_not_touch_bare_terms(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("owner name=a"), exclude="owner", settings=settings) == (
            "owner name=a"
        )

    def test_rows_default_is_resolved(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("rows=-2 name=a"), settings=settings) == "rows=10 name=a"

    def test_reserved_rows_is_case_sensitive(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("ROWS=-2 Sort=name"), settings=settings) == (
            "ROWS=-2 Sort=name"
        )

    def test_rows_is_capped(self, tokenize, capped_settings) -> None:
        assert clean_filter(tokenize("rows=500"), settings=capped_settings) == "rows=50"
        assert clean_filter(tokenize("rows=-1"), settings=capped_settings) == "rows=50"
        assert clean_filter(tokenize("rows=-2"), settings=capped_settings) == "rows=25"

    def test_rows_cap_can_be_ignored(self, tokenize, capped_settings) -> None:
        result = clean_filter(
            tokenize("rows=500"), ignore_max_rows_per_page=True, settings=capped_settings
        )

        assert result == "rows=500"

    def test_rows_junk_is_parsed(self, tokenize, settings) -> None:
        assert clean_filter(tokenize("rows=abc"), settings=settings) == "rows=0"

    def test_empty_bare_terms_are_skipped(self, settings) -> None:
        tokens = [FilterTerm(text="a"), FilterTerm(text=""), FilterTerm(text="b")]

        assert clean_filter(tokens, settings=settings) == "a b"

    def test_idempotent(self, tokenize, settings) -> None:
        text = 'name~foo  rows=-2 not "x" tag=os=linux first=2'
        once = clean_filter(tokenize(text), settings=settings)

        assert clean_filter(tokenize(once), settings=settings) == once
