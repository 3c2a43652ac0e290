"""
Filter term models for scanquery.

A filter string such as ``name~foo and severity>7.0 rows=50`` is split by
the tokenizer into an ordered sequence of FilterTerm objects. Everything
downstream (compiler, canonicalizer, control extractors) consumes only
this sequence.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


# -----------------------------
# Enums
# -----------------------------


class KeywordType(str, Enum):
    """Type of a term value, as detected by the tokenizer."""

    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"

    @property
    def is_numeric(self) -> bool:
        return self is not KeywordType.TEXT


class Relation(str, Enum):
    """Relation between a column and a value. Values are filter symbols."""

    NONE = ""
    EQUAL = "="
    APPROX = "~"
    ABOVE = ">"
    BELOW = "<"
    REGEX = ":"

    @property
    def symbol(self) -> str:
        return self.value


CONNECTIVES = frozenset({"and", "or", "not", "re", "regexp"})


# -----------------------------
# Term
# -----------------------------


class FilterTerm(BaseModel):
    """
    One parsed unit of a filter expression.

    Examples:
        name~foo          column="name", relation=APPROX, text="foo"
        severity>7.0      column="severity", relation=ABOVE, kind=REAL
        =example          bare term, exact=True
        and               bare connective
    """

    model_config = ConfigDict(frozen=True)

    column: str | None = None
    text: str = ""
    kind: KeywordType = KeywordType.TEXT
    number: int | float | None = None
    relation: Relation = Relation.NONE
    quoted: bool = False
    exact: bool = False
    approx: bool = False

    @model_validator(mode="after")
    def check_shape(self) -> "FilterTerm":
        if (self.column is None) != (self.relation is Relation.NONE):
            raise ValueError(
                "A term has a relation exactly when it has a column"
            )
        if self.column is not None and (self.exact or self.approx):
            raise ValueError("Only bare terms can carry '=' or '~' markers")
        if self.kind.is_numeric and self.number is None:
            raise ValueError(f"{self.kind.value} term needs a parsed number")
        return self

    @property
    def is_bare(self) -> bool:
        return self.column is None

    @property
    def is_connective(self) -> bool:
        """Whether this term is one of the logical words (and, or, not, re)."""
        return (
            self.column is None
            and not (self.quoted or self.exact or self.approx)
            and self.text.lower() in CONNECTIVES
        )

    def column_is(self, name: str) -> bool:
        """Case-sensitive column match, as used for reserved keywords."""
        return self.column is not None and self.column == name


# -----------------------------
# Helpers
# -----------------------------


def parse_int(text: str) -> int:
    """
    Parse the leading integer of ``text``, like C ``atoi``.

    Leading whitespace and a sign are accepted, trailing junk is ignored,
    and text with no digits gives 0.
    """
    stripped = text.lstrip()
    end = 0
    if stripped[:1] in ("-", "+"):
        end = 1
    digits_start = end
    while end < len(stripped) and stripped[end] in "0123456789":
        end += 1
    if end == digits_start:
        return 0
    return int(stripped[:end])
