"""Canonical re-serialization of filters."""

from .canonical import clean_filter

__all__ = ["clean_filter"]
