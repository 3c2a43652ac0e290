"""Safety module for scanquery - registry consistency checks."""

from .validator import RegistryValidationError, RegistryValidator

__all__ = [
    "RegistryValidationError",
    "RegistryValidator",
]
