"""
Sort planning for compiled filters.

The first sort keyword of a filter gets resource-aware semantics: run
status sorts with its progress, severities sort numerically with unscored
rows grouped at one end, addresses sort as addresses, and so on. Later
sort keywords are plain column orderings.
"""

from sqlalchemy import (
    REAL,
    BigInteger,
    Integer,
    Text,
    case,
    cast,
    func,
    literal,
    literal_column,
    or_,
    select,
    table,
)
from sqlalchemy.sql.elements import ColumnElement, UnaryExpression

from scanquery.core.column_registry import ColumnSet, ColumnSpec, ResourceType
from scanquery.core.config import FilterSettings
from scanquery.core.terms import KeywordType

from .errors import FilterCompileError


# -----------------------------
# Column groups
# -----------------------------

SEVERITY_SORT_COLUMNS = frozenset(
    {
        "severity",
        "original_severity",
        "cvss",
        "cvss_base",
        "max_cvss",
        "fp_per_host",
        "log_per_host",
        "low_per_host",
        "medium_per_host",
        "high_per_host",
    }
)

DIRECT_SORT_COLUMNS = frozenset(
    {
        "created",
        "modified",
        "published",
        "qod",
        "cves",
        "high",
        "medium",
        "low",
        "log",
        "false_positive",
        "hosts",
        "result_hosts",
        "results",
        "latest_severity",
        "highest_severity",
        "average_severity",
    }
)

INTEGER_SORT_COLUMNS = frozenset({"ips", "total", "tcp", "udp"})

ADDRESS_SORT_COLUMNS = frozenset({"ip", "host"})


def _neg_infinity() -> ColumnElement:
    return cast(literal("-Infinity"), REAL)


def severity_sort_columns(settings: FilterSettings) -> frozenset[str]:
    if settings.critical_severity:
        return SEVERITY_SORT_COLUMNS | {"critical_per_host"}
    return SEVERITY_SORT_COLUMNS


def direct_sort_columns(settings: FilterSettings) -> frozenset[str]:
    if settings.critical_severity:
        return DIRECT_SORT_COLUMNS | {"critical"}
    return DIRECT_SORT_COLUMNS


# -----------------------------
# Expressions
# -----------------------------


def _concat(left: ColumnElement, right: ColumnElement) -> ColumnElement:
    return left.op("||")(right)


def _progress_suffix(progress: ColumnElement) -> ColumnElement:
    """Completion percentage as three zero padded digits."""
    return func.lpad(cast(progress, Text), 3, "0")


def run_status_order(resource_type: ResourceType, table_name: str) -> ColumnElement:
    """Run status name then progress, with container tasks grouped together."""
    if resource_type is ResourceType.REPORT:
        container = (
            select(literal_column("target IS NULL OR target = 0"))
            .select_from(table("tasks"))
            .where(literal_column("tasks.id") == literal_column(f"{table_name}.task"))
            .scalar_subquery()
        )
        status = func.run_status_name(literal_column(f"{table_name}.scan_run_status"))
        progress = func.report_progress(literal_column(f"{table_name}.id"))
    else:
        target = literal_column(f"{table_name}.target")
        container = or_(target.is_(None), target == 0)
        status = func.run_status_name(literal_column(f"{table_name}.run_status"))
        progress = func.task_progress(literal_column(f"{table_name}.id"))
    return case(
        (container, literal("Container")),
        else_=_concat(status, _progress_suffix(progress)),
    )


def severity_order(expression: ColumnElement) -> ColumnElement:
    """Numeric order where an empty value sorts as negative infinity."""
    return case(
        (cast(expression, Text) == "", _neg_infinity()),
        else_=func.coalesce(cast(expression, REAL), _neg_infinity()),
    )


def role_order(expression: ColumnElement) -> ColumnElement:
    """Admin roles first, then the rest by name."""
    return case(
        (expression.regexp_match("Admin.*"), _concat(literal("0"), expression)),
        else_=_concat(literal("1"), expression),
    )


def typed_order(column: ColumnSpec) -> ColumnElement:
    """Default order of a column by its declared type."""
    expression = literal_column(column.expression)
    if column.kind is KeywordType.INTEGER:
        return cast(expression, BigInteger)
    if column.kind is KeywordType.REAL:
        return cast(expression, REAL)
    return func.lower(cast(expression, Text))


def _direction(expression: ColumnElement, descending: bool) -> UnaryExpression:
    return expression.desc() if descending else expression.asc()


# -----------------------------
# Planner
# -----------------------------


def plan_first_sort(
    resource_type: ResourceType,
    target: str,
    columns: ColumnSet,
    descending: bool,
    settings: FilterSettings,
) -> list[UnaryExpression]:
    """
    Plan the ORDER BY items for the first sort keyword of a filter.

    Args:
        resource_type: Type of the resource being listed.
        target: Public column name to sort on (already allow-listed).
        columns: Column set of the live or trash table.
        descending: True for ``sort-reverse``.
        settings: Filter settings (for the critical severity columns).

    Returns:
        Ordering items, most significant first.

    Raises:
        FilterCompileError: If ``target`` has no column in ``columns``.
    """
    if target == "status" and resource_type in (ResourceType.REPORT, ResourceType.TASK):
        return [_direction(run_status_order(resource_type, columns.table), descending)]

    if resource_type in (ResourceType.NOTE, ResourceType.OVERRIDE) and target in (
        "nvt",
        "name",
    ):
        return [
            _direction(literal_column("nvt"), descending),
            _direction(func.lower(cast(literal_column("text"), Text)), descending),
        ]

    column = columns.resolve(target)
    if column is None:
        raise FilterCompileError(
            f"Sort column '{target}' is allowed but has no column in '{columns.table}'"
        )
    expression = literal_column(column.expression)

    if resource_type is ResourceType.TASK and target == "threat":
        order = func.order_threat(expression)
    elif target in severity_sort_columns(settings):
        order = severity_order(expression)
    elif target == "roles":
        order = role_order(expression)
    elif target in direct_sort_columns(settings):
        order = expression
    elif target in INTEGER_SORT_COLUMNS:
        order = cast(expression, Integer)
    elif target in ADDRESS_SORT_COLUMNS:
        order = func.order_inet(expression)
    else:
        order = typed_order(column)
    return [_direction(order, descending)]


def plan_later_sort(target: str, descending: bool) -> UnaryExpression:
    """Plain ordering for the second and later sort keywords."""
    return _direction(literal_column(target), descending)
