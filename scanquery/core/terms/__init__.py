"""Filter term models: the contract between the tokenizer and everything else."""

from .models import CONNECTIVES, FilterTerm, KeywordType, Relation, parse_int

__all__ = [
    "CONNECTIVES",
    "FilterTerm",
    "KeywordType",
    "Relation",
    "parse_int",
]
