"""
Filter Clause Compiler for scanquery.

Transforms a tokenized filter and a column registry into a CompiledFilter:
WHERE predicate, ORDER BY items, pagination, required permissions and the
owner filter value.

Each predicate is a SQLAlchemy expression over the registry's trusted
column expressions, with user text only ever entering as a bound value.
The WHERE text is the predicates joined left to right by the filter's
connectives, each one parenthesized.

Malformed or disallowed terms degrade the search instead of failing it:
they are dropped and the join state is reset.
"""

import logging
import math
import operator
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import (
    REAL,
    BigInteger,
    Text,
    and_,
    cast,
    exists,
    false,
    func,
    literal,
    literal_column,
    or_,
    select,
    table,
    true,
)
from sqlalchemy.sql.elements import ColumnElement, UnaryExpression

from scanquery.core.column_registry import (
    ColumnRegistry,
    ColumnSet,
    ColumnSpec,
    ResourceRegistry,
    ResourceType,
    get_default_registry,
    valid_type,
)
from scanquery.core.config import FilterSettings, get_settings
from scanquery.core.paging import default_rows_per_page, max_rows, resolve_rows
from scanquery.core.terms import FilterTerm, KeywordType, Relation, parse_int
from scanquery.db.dialect import render_sql, text_value

from .errors import FilterCompileError
from .ordering import plan_first_sort, plan_later_sort

logger = logging.getLogger(__name__)


# -----------------------------
# Keyword tables
# -----------------------------

# Columns ending in "_id" that are real columns, not soft references.
SOFT_REFERENCE_EXCEPTIONS = frozenset({"nvt_id", "result_id"})

NUMERIC_OPERATORS: dict[Relation, Callable[[ColumnElement, ColumnElement], ColumnElement]] = {
    Relation.EQUAL: operator.eq,
    Relation.ABOVE: operator.gt,
    Relation.BELOW: operator.lt,
}


def get_join(first: bool, last_was_and: bool, last_was_not: bool) -> str:
    """
    Return the SQL words joining a predicate to the clause before it.

    Args:
        first: Whether this is the first predicate of the clause.
        last_was_and: Whether the previous keyword was "and".
        last_was_not: Whether the previous keyword was "not".

    Returns:
        One of "", "NOT ", " AND ", " AND NOT ", " OR ", " OR NOT ".
    """
    if first:
        return "NOT " if last_was_not else ""
    if last_was_and:
        return " AND NOT " if last_was_not else " AND "
    return " OR NOT " if last_was_not else " OR "


# -----------------------------
# Result
# -----------------------------


@dataclass(frozen=True)
class CompiledFilter:
    """
    Everything a listing needs from a filter.

    ``where_clause`` and ``order_clause`` are spliced verbatim into the
    listing query. ``permissions`` and ``owner_filter`` go to the ACL layer.
    """

    where_clause: str | None = None
    order_by: tuple[str, ...] = ()
    offset: int = 0
    limit: int = -1  # -1 means unlimited
    permissions: tuple[str, ...] = ()
    owner_filter: str | None = None

    @property
    def order_clause(self) -> str | None:
        if not self.order_by:
            return None
        return "ORDER BY " + ", ".join(self.order_by)


@dataclass(frozen=True)
class Joined:
    """A predicate with the join words that precede it in the clause."""

    join: str  # from get_join: "", "NOT ", " AND ", " OR NOT ", ...
    predicate: ColumnElement

    def render(self) -> str:
        return f"{self.join}({render_sql(self.predicate)})"


def render_clause(parts: Sequence[Joined]) -> str | None:
    """Render accumulated predicates, or None when there are none."""
    if not parts:
        return None
    return "".join(part.render() for part in parts)


@dataclass
class _CompileState:
    """Per-call state of a single pass over the terms."""

    first_keyword: bool = True
    last_was_and: bool = False
    last_was_not: bool = False
    last_was_re: bool = False
    clause: list[Joined] = field(default_factory=list)
    order: list[UnaryExpression] = field(default_factory=list)
    offset: int = 0
    rows: int | None = None
    permissions: list[str] = field(default_factory=list)
    owner_filter: str | None = None

    def emit(self, predicate: ColumnElement, negate: bool | None = None) -> None:
        """Append a predicate, then reset the join state."""
        if negate is None:
            negate = self.last_was_not
        self.clause.append(
            Joined(get_join(self.first_keyword, self.last_was_and, negate), predicate)
        )
        self.first_keyword = False
        self.last_was_and = False
        self.last_was_not = False
        self.last_was_re = False

    def drop(self, term: FilterTerm, reason: str) -> None:
        logger.debug("Dropping filter term %s: %s", _describe(term), reason)
        self.last_was_and = False
        self.last_was_not = False


def _describe(term: FilterTerm) -> str:
    if term.column is None:
        return repr(term.text)
    return repr(f"{term.column}{term.relation.symbol}{term.text}")


# -----------------------------
# Compiler
# -----------------------------


def compile_filter(
    resource_type: ResourceType | str,
    tokens: Sequence[FilterTerm] | None,
    registry: ColumnRegistry,
    trash: bool = False,
    ignore_max_rows_per_page: bool = False,
    settings: FilterSettings | None = None,
) -> CompiledFilter:
    """
    Compile filter terms into SQL clauses, pagination and ACL inputs.

    Reserved keywords (``sort``, ``first``, ``rows``, ...) are matched
    exactly, so ``ROWS=5`` is an ordinary column term.

    Args:
        resource_type: Type of the resource being listed.
        tokens: Terms from the tokenizer, in filter order.
        registry: Column registry of the resource type.
        trash: Compile against the trash variant of the columns.
        ignore_max_rows_per_page: Do not clamp the page size.
        settings: Filter settings. Uses cached settings if not provided.

    Returns:
        The compiled filter.

    Raises:
        FilterCompileError: If the resource type is unknown, or a sort
            column passes the allow-list but is missing from the registry.
    """
    resolved_type = valid_type(resource_type)
    if resolved_type is None:
        raise FilterCompileError(f"Unknown resource type '{resource_type}'")
    settings = settings or get_settings()
    columns = registry.columns(trash)
    state = _CompileState()

    for term in tokens or ():
        if term.column is None:
            _compile_bare(state, term, columns)
            continue

        keyword = term.column
        if keyword in ("sort", "sort-reverse"):
            _compile_sort(state, term, keyword == "sort-reverse", resolved_type, columns, settings)
        elif keyword == "first":
            state.offset = max(0, parse_int(term.text) - 1)
        elif keyword == "rows":
            state.rows = resolve_rows(term.text, settings)
        elif keyword == "permission":
            state.permissions.append(term.text)
        elif keyword in ("tag", "tag_id"):
            state.emit(_tag_predicate(term, keyword == "tag_id", resolved_type, columns))
        elif keyword == "owner" and term.relation is Relation.EQUAL:
            if state.owner_filter is None:
                state.owner_filter = term.text
        elif not columns.allows(term.column):
            state.drop(term, "column not allowed")
        elif is_soft_reference(term.column):
            _compile_soft_reference(state, term, columns)
        else:
            _compile_column(state, term, columns)

    rows = state.rows if state.rows is not None else default_rows_per_page(settings)
    return CompiledFilter(
        where_clause=render_clause(state.clause),
        order_by=tuple(render_sql(ordering) for ordering in state.order),
        offset=state.offset,
        limit=max_rows(rows, ignore_max_rows_per_page, settings),
        permissions=tuple(state.permissions),
        owner_filter=state.owner_filter,
    )


class FilterCompiler:
    """
    Compiles filters for any resource type in a ResourceRegistry.

    Holds no per-call state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        registry: ResourceRegistry | None = None,
        settings: FilterSettings | None = None,
    ):
        """
        Initialize the compiler.

        Args:
            registry: Resource registry for column lookups.
                     Uses default registry if not provided.
            settings: Filter settings. Uses cached settings if not provided.
        """
        self._registry = registry or get_default_registry()
        self._settings = settings

    def compile(
        self,
        resource_type: ResourceType | str,
        tokens: Sequence[FilterTerm] | None,
        trash: bool = False,
        ignore_max_rows_per_page: bool = False,
    ) -> CompiledFilter:
        """Compile ``tokens`` against the registry of ``resource_type``."""
        column_registry = self._registry.get(resource_type)
        if column_registry is None:
            raise FilterCompileError(f"No column registry for '{resource_type}'")
        return compile_filter(
            resource_type,
            tokens,
            column_registry,
            trash=trash,
            ignore_max_rows_per_page=ignore_max_rows_per_page,
            settings=self._settings,
        )


# -------------------------
# Bare terms
# -------------------------


def _compile_bare(state: _CompileState, term: FilterTerm, columns: ColumnSet) -> None:
    if term.is_connective:
        word = term.text.lower()
        if word == "and":
            state.last_was_and = True
        elif word == "not":
            state.last_was_not = True
        elif word in ("re", "regexp"):
            state.last_was_re = True
        return
    if term.text == "":
        return

    negate = state.last_was_not
    # Columns whose vocabulary cannot hold the term are left out of the group.
    items = [
        _search_predicate(term, column, negate, state.last_was_re)
        for name, column in _search_columns(columns)
        if column.accepts_search(term.text, name)
    ]

    if not items:
        predicate: ColumnElement = true() if negate else false()
    elif len(items) == 1:
        predicate = items[0]
    elif negate:
        predicate = and_(*items)
    else:
        predicate = or_(*items)
    # Negation is already inside each column comparison.
    state.emit(predicate, negate=False)


def _search_columns(columns: ColumnSet) -> list[tuple[str, ColumnSpec]]:
    """Allow-listed text columns that free-text terms search."""
    found = []
    for name in columns.filter_columns:
        column = columns.resolve(name)
        if column is not None and not column.is_numeric:
            found.append((name, column))
    return found


def _search_predicate(
    term: FilterTerm, column: ColumnSpec, negate: bool, regex: bool
) -> ColumnElement:
    expression = literal_column(column.expression)
    text = cast(expression, Text)
    value = text_value(term.text)
    if term.exact:
        match = text == value
    elif regex:
        match = text.regexp_match(value)
    else:
        match = text.ilike(f"%{value}%")
    if negate:
        return or_(expression.is_(None), ~match)
    return match


# -------------------------
# Sorting
# -------------------------


def _compile_sort(
    state: _CompileState,
    term: FilterTerm,
    descending: bool,
    resource_type: ResourceType,
    columns: ColumnSet,
    settings: FilterSettings,
) -> None:
    if not columns.allows(term.text):
        logger.debug("Ignoring sort on column %r: not allowed", term.text)
        return
    if state.order:
        state.order.append(plan_later_sort(term.text, descending))
    else:
        state.order.extend(
            plan_first_sort(resource_type, term.text, columns, descending, settings)
        )


# -------------------------
# Tags
# -------------------------


def _match(relation: Relation, key: ColumnElement, text: str) -> ColumnElement:
    value = text_value(text)
    if relation is Relation.APPROX:
        return key.ilike(f"%{value}%")
    if relation is Relation.REGEX:
        return key.regexp_match(value)
    return key == value


def _tag_predicate(
    term: FilterTerm, by_uuid: bool, resource_type: ResourceType, columns: ColumnSet
) -> ColumnElement:
    """EXISTS over the readable tags attached to the listed resource."""
    tag, has_value, value = term.text.partition("=")
    key = literal_column("tags.uuid" if by_uuid else "tags.name")

    attached = (
        exists()
        .select_from(table("tag_resources"))
        .where(
            literal_column("tag_resources.resource_uuid")
            == literal_column(f"{columns.table}.uuid"),
            literal_column("tag_resources.resource_type") == resource_type.value,
            literal_column("tag_resources.tag") == literal_column("tags.id"),
        )
    )
    conditions = [
        _match(term.relation, key, tag),
        literal_column("tags.active") != 0,
        func.user_has_access_uuid(
            cast(literal("tag"), Text),
            cast(literal_column("tags.uuid"), Text),
            cast(literal("get_tags"), Text),
            literal(0),
        ),
        attached,
    ]
    if has_value:
        conditions.append(_match(term.relation, literal_column("tags.value"), value))
    return exists().select_from(table("tags")).where(*conditions)


# -------------------------
# Soft references
# -------------------------


def is_soft_reference(column: str) -> bool:
    """Whether a column name has the shape of a soft reference, "<type>_id"."""
    return (
        len(column) > 3
        and column.endswith("_id")
        and column.lower() not in SOFT_REFERENCE_EXCEPTIONS
    )


def _compile_soft_reference(
    state: _CompileState, term: FilterTerm, columns: ColumnSet
) -> None:
    """``<type>_id=<uuid>``: match the referenced resource, or no reference."""
    if term.relation is not Relation.EQUAL:
        state.drop(term, "only '=' applies to resource references")
        return
    referenced = valid_type(term.column[:-3])
    if referenced is None:
        logger.warning(
            "Filter references unknown resource type %r in column %r",
            term.column[:-3],
            term.column,
        )
        state.drop(term, "unknown resource type")
        return

    ref_table = f"{referenced.value}s"
    reference = literal_column(f"{columns.table}.{referenced.value}")
    lookup = (
        select(literal_column("id"))
        .select_from(table(ref_table))
        .where(literal_column(f"{ref_table}.uuid") == text_value(term.text))
        .scalar_subquery()
    )
    state.emit(or_(lookup == reference, reference.is_(None), reference == 0))


# -------------------------
# Column terms
# -------------------------


def _compile_column(state: _CompileState, term: FilterTerm, columns: ColumnSet) -> None:
    column = columns.resolve(term.column)
    if column is None:
        state.drop(term, "column not in registry")
        return
    state.emit(_column_predicate(term, column))


def _column_predicate(term: FilterTerm, column: ColumnSpec) -> ColumnElement:
    expression = literal_column(column.expression)

    if (
        term.kind.is_numeric
        and column.is_numeric
        and term.relation in NUMERIC_OPERATORS
        and math.isfinite(term.number)
    ):
        if KeywordType.REAL in (term.kind, column.kind):
            sql_type, value = REAL, literal(float(term.number))
        else:
            sql_type, value = BigInteger, literal(int(term.number))
        return NUMERIC_OPERATORS[term.relation](
            cast(expression, sql_type), cast(value, sql_type)
        )

    text = cast(expression, Text)
    value = text_value(term.text)
    if term.relation is Relation.EQUAL and value == "":
        return or_(text == "", expression.is_(None))
    return _text_comparison(term.relation, text, value)


def _text_comparison(relation: Relation, text: ColumnElement, value: str) -> ColumnElement:
    if relation is Relation.APPROX:
        return text.ilike(f"%{value}%")
    if relation is Relation.REGEX:
        return text.regexp_match(value)
    if relation is Relation.ABOVE:
        return text > value
    if relation is Relation.BELOW:
        return text < value
    return text == value
