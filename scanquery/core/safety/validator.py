"""
Registry Validator for scanquery.

Checks that a column registry is consistent with its filter allow-list,
so that no allowed filter name can reach the compiler unresolved.
"""

from scanquery.core.column_registry import (
    ColumnRegistry,
    ColumnSet,
    ResourceRegistry,
    get_default_registry,
    valid_type,
)
from scanquery.core.clause.compiler import is_soft_reference


# -----------------------------
# Errors
# -----------------------------


class RegistryValidationError(Exception):
    """Raised when a column registry is inconsistent."""

    pass


# -----------------------------
# Validator
# -----------------------------


class RegistryValidator:
    """
    Validates column registries.

    Every allow-listed name must resolve to a column, or be a soft
    reference ``<type>_id`` to a known resource type. Search vocabularies
    only make sense on text columns.
    """

    def __init__(self, registry: ResourceRegistry | None = None):
        """
        Initialize the validator.

        Args:
            registry: Resource registry to validate with ``validate_all``.
                     Uses default registry if not provided.
        """
        self._registry = registry or get_default_registry()

    def validate_all(self) -> None:
        """
        Validate every column registry of the resource registry.

        Raises:
            RegistryValidationError: If any registry is inconsistent.
        """
        for resource_type in self._registry.list_types():
            self.validate(self._registry.get(resource_type))

    def validate(self, registry: ColumnRegistry) -> None:
        """
        Validate the live and trash columns of one resource type.

        Raises:
            RegistryValidationError: If the registry is inconsistent.
        """
        self._validate_columns(registry, registry.live)
        if registry.trash is not None:
            self._validate_columns(registry, registry.trash)

    # -------------------------
    # Validation Methods
    # -------------------------

    def _validate_columns(self, registry: ColumnRegistry, columns: ColumnSet) -> None:
        for name in columns.filter_columns:
            if columns.resolve(name) is not None:
                continue
            if self._is_soft_reference(name):
                continue
            raise RegistryValidationError(
                f"Filter column '{name}' of {registry.resource_type.value} "
                f"({columns.table}) has no column"
            )

        for column in (*columns.select_columns, *columns.where_columns):
            if column.vocabulary is not None and column.is_numeric:
                raise RegistryValidationError(
                    f"Column '{column.name}' of {registry.resource_type.value} "
                    "is numeric but has a search vocabulary"
                )

    def _is_soft_reference(self, name: str) -> bool:
        if not is_soft_reference(name):
            return False
        return valid_type(name[:-3]) is not None
