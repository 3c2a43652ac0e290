"""Column registries: which columns each resource type exposes to filters."""

from .registry import (
    SEARCH_VOCABULARIES,
    ColumnRegistry,
    ColumnSet,
    ColumnSpec,
    ResourceRegistry,
    ResourceType,
    valid_type,
)
from .resources import get_default_registry

__all__ = [
    "SEARCH_VOCABULARIES",
    "ColumnRegistry",
    "ColumnSet",
    "ColumnSpec",
    "ResourceRegistry",
    "ResourceType",
    "get_default_registry",
    "valid_type",
]
