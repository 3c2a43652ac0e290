"""
Column Registry for scanquery.

This module defines, per resource type:
- Which columns a listing may SELECT and ORDER BY
- Which extra columns may only appear in WHERE / ORDER BY
- Which public names a filter may target (the allow-list)

Column expressions are trusted SQL written by resource authors. Filter
text never reaches SQL through this module except as an allow-list key.
"""

from dataclasses import dataclass
from enum import Enum

from scanquery.core.terms import KeywordType


# -----------------------------
# Resource Types
# -----------------------------


class ResourceType(str, Enum):
    """Every resource type known to the manager."""

    AGENT = "agent"
    ALERT = "alert"
    CERT_BUND_ADV = "cert_bund_adv"
    CONFIG = "config"
    CPE = "cpe"
    CREDENTIAL = "credential"
    CVE = "cve"
    DFN_CERT_ADV = "dfn_cert_adv"
    FILTER = "filter"
    GROUP = "group"
    HOST = "host"
    NOTE = "note"
    NVT = "nvt"
    OS = "os"
    OVERRIDE = "override"
    PERMISSION = "permission"
    PORT_LIST = "port_list"
    REPORT = "report"
    REPORT_CONFIG = "report_config"
    REPORT_FORMAT = "report_format"
    RESULT = "result"
    ROLE = "role"
    SCANNER = "scanner"
    SCHEDULE = "schedule"
    TAG = "tag"
    TARGET = "target"
    TASK = "task"
    TICKET = "ticket"
    TLS_CERTIFICATE = "tls_certificate"
    USER = "user"


def valid_type(name: str) -> ResourceType | None:
    """Return the ResourceType called ``name``, or None if there is none."""
    try:
        return ResourceType(name)
    except ValueError:
        return None


# Free-text search only reaches these columns when the term is part of one
# of the values they can hold.
SEARCH_VOCABULARIES: dict[str, tuple[str, ...]] = {
    "threat": (
        "None",
        "False Positive",
        "Error",
        "Alarm",
        "High",
        "Medium",
        "Low",
        "Log",
    ),
    "trend": ("more", "less", "up", "down", "same"),
    "status": (
        "Delete Requested",
        "Ultimate Delete Requested",
        "Done",
        "New",
        "Running",
        "Queued",
        "Stop Requested",
        "Stopped",
        "Interrupted",
    ),
}


# -----------------------------
# Column Metadata
# -----------------------------


@dataclass(frozen=True)
class ColumnSpec:
    """A single column: trusted SQL expression plus its public filter name."""

    expression: str  # trusted SQL (e.g. "creation_time", "task_severity (id)")
    public_name: str | None = None  # filter alias (e.g. "created")
    kind: KeywordType = KeywordType.TEXT
    vocabulary: tuple[str, ...] | None = None  # overrides SEARCH_VOCABULARIES

    @property
    def name(self) -> str:
        """Public name, defaulting to the expression itself."""
        return self.public_name if self.public_name is not None else self.expression

    @property
    def is_numeric(self) -> bool:
        return self.kind.is_numeric

    def accepts_search(self, text: str, name: str | None = None) -> bool:
        """Whether a free-text term may be compared against this column."""
        vocabulary = self.vocabulary
        if vocabulary is None:
            vocabulary = SEARCH_VOCABULARIES.get(name or self.name)
        if vocabulary is None:
            return True
        return any(text in word for word in vocabulary)


@dataclass(frozen=True)
class ColumnSet:
    """The columns of one table variant (live or trash) of a resource type."""

    table: str
    select_columns: tuple[ColumnSpec, ...]
    where_columns: tuple[ColumnSpec, ...] = ()
    filter_columns: tuple[str, ...] = ()

    def allows(self, name: str) -> bool:
        """Whether ``name`` is on the filter allow-list."""
        return name in self.filter_columns

    def resolve(self, name: str) -> ColumnSpec | None:
        """
        Resolve a filter name to a column.

        SELECT columns are searched first, then WHERE-only columns, then any
        column whose expression is literally ``name``.
        """
        for column in self.select_columns:
            if column.name == name:
                return column
        for column in self.where_columns:
            if column.name == name:
                return column
        for column in (*self.select_columns, *self.where_columns):
            if column.expression == name:
                return column
        return None


@dataclass(frozen=True)
class ColumnRegistry:
    """Live and (optionally) trash columns of a resource type."""

    resource_type: ResourceType
    live: ColumnSet
    trash: ColumnSet | None = None

    def columns(self, trash: bool = False) -> ColumnSet:
        """Get the column set for the live or trash variant."""
        if trash and self.trash is not None:
            return self.trash
        return self.live


# -----------------------------
# Resource Registry
# -----------------------------


class ResourceRegistry:
    """
    Central registry of column registries, keyed by resource type.

    Registries are immutable after construction, so one instance can be
    shared across threads.
    """

    def __init__(self, registries: dict[ResourceType, ColumnRegistry]):
        self._registries = dict(registries)

    def get(self, resource_type: ResourceType | str) -> ColumnRegistry | None:
        """Get the column registry of a resource type."""
        resolved = valid_type(resource_type)
        if resolved is None:
            return None
        return self._registries.get(resolved)

    def list_types(self) -> list[ResourceType]:
        """List all resource types with a registry."""
        return list(self._registries.keys())

    def __contains__(self, resource_type: object) -> bool:
        return isinstance(resource_type, str) and self.get(resource_type) is not None
