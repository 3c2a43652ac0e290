"""
Shared fixtures.

Tokenizing filter text is not part of scanquery, so tests build terms with
a small splitter: words are separated by whitespace, a word is a column
term when it contains one of ``= ~ > < :`` after its first character, and
a value wrapped in double quotes is marked quoted. Quoted values cannot
contain spaces here.
"""

import pytest

from scanquery.core.column_registry import (
    ColumnRegistry,
    ColumnSet,
    ColumnSpec,
    ResourceType,
)
from scanquery.core.config import FilterSettings
from scanquery.core.terms import FilterTerm, KeywordType, Relation

_RELATIONS = {
    "=": Relation.EQUAL,
    "~": Relation.APPROX,
    ">": Relation.ABOVE,
    "<": Relation.BELOW,
    ":": Relation.REGEX,
}


def _number(text: str) -> tuple[KeywordType, int | float | None]:
    try:
        return KeywordType.INTEGER, int(text)
    except ValueError:
        pass
    try:
        return KeywordType.REAL, float(text)
    except ValueError:
        return KeywordType.TEXT, None


def _unquote(text: str) -> tuple[str, bool]:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1], True
    return text, False


def make_term(word: str) -> FilterTerm:
    """Build one FilterTerm from a whitespace-free word."""
    if word[:1] in ("=", "~"):
        text, quoted = _unquote(word[1:])
        return FilterTerm(
            text=text, quoted=quoted, exact=word[0] == "=", approx=word[0] == "~"
        )

    for index, char in enumerate(word):
        if index > 0 and char in _RELATIONS:
            text, quoted = _unquote(word[index + 1 :])
            kind, number = (KeywordType.TEXT, None) if quoted else _number(text)
            return FilterTerm(
                column=word[:index],
                relation=_RELATIONS[char],
                text=text,
                quoted=quoted,
                kind=kind,
                number=number,
            )

    text, quoted = _unquote(word)
    return FilterTerm(text=text, quoted=quoted)


def make_terms(text: str) -> list[FilterTerm]:
    return [make_term(word) for word in text.split()]


@pytest.fixture
def tokenize():
    """Split pre-tokenized filter text into FilterTerms."""
    return make_terms


@pytest.fixture
def settings() -> FilterSettings:
    """Settings with no row cap and a default page size of 10."""
    return FilterSettings(
        max_rows_per_page=0, default_rows_per_page=10, critical_severity=False
    )


@pytest.fixture
def capped_settings() -> FilterSettings:
    """Settings with a row cap of 50."""
    return FilterSettings(
        max_rows_per_page=50, default_rows_per_page=25, critical_severity=False
    )


@pytest.fixture
def simple_registry() -> ColumnRegistry:
    """A two column registry: text ``name`` and real ``severity``."""
    return ColumnRegistry(
        resource_type=ResourceType.RESULT,
        live=ColumnSet(
            table="results",
            select_columns=(
                ColumnSpec("name"),
                ColumnSpec("num_expr", "severity", KeywordType.REAL),
            ),
            filter_columns=("name", "severity"),
        ),
    )
