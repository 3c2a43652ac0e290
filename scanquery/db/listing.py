"""
Listing query builder.

Embeds a CompiledFilter in a SQLAlchemy Select over one column set. The
compiled WHERE and ORDER BY text is trusted (it was rendered from the
filter expression tree) and is spliced in verbatim; pagination is
applied as OFFSET / LIMIT.
"""

import logging

from sqlalchemy import literal_column, select, table
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from scanquery.core.clause import CompiledFilter
from scanquery.core.column_registry import ColumnSet, ColumnSpec

logger = logging.getLogger(__name__)


def columns_build_select(columns: ColumnSet) -> str:
    """Column list for a SELECT: ``expr AS name, ...``, or ``''`` if empty."""
    if not columns.select_columns:
        return "''"
    return ", ".join(
        f"{column.expression} AS {column.public_name}"
        if column.public_name
        else column.expression
        for column in columns.select_columns
    )


def _select_column(column: ColumnSpec) -> ColumnElement:
    element = literal_column(column.expression)
    if column.public_name:
        return element.label(column.public_name)
    return element


def build_list_query(columns: ColumnSet, compiled: CompiledFilter) -> Select:
    """
    Build the listing query for a compiled filter.

    Args:
        columns: Column set of the live or trash table being listed.
        compiled: Output of the filter compiler for the same column set.

    Returns:
        A SQLAlchemy Select ready for execution.
    """
    select_columns = [_select_column(column) for column in columns.select_columns]
    if not select_columns:
        select_columns = [literal_column("''")]

    query = select(*select_columns).select_from(table(columns.table))

    if compiled.where_clause:
        query = query.where(literal_column(compiled.where_clause))

    for ordering in compiled.order_by:
        query = query.order_by(literal_column(ordering))

    if compiled.offset:
        query = query.offset(compiled.offset)
    if compiled.limit >= 0:
        query = query.limit(compiled.limit)

    logger.debug(
        "Listing %s: where=%r order=%r offset=%d limit=%d",
        columns.table,
        compiled.where_clause,
        compiled.order_clause,
        compiled.offset,
        compiled.limit,
    )
    return query
