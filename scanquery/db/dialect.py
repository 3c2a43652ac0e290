"""
SQL rendering for the storage engine.

Compiled filters are handed to the listing layer as SQL text, so every
expression is rendered here once, with bound values inlined as literals
by the PostgreSQL dialect.
"""

from sqlalchemy.dialects import postgresql
from sqlalchemy.sql.elements import ClauseElement

# Named paramstyle: no pyformat "%%" doubling in the rendered text.
DIALECT = postgresql.dialect(paramstyle="named")
# The server runs with standard_conforming_strings on.
DIALECT._backslash_escapes = False


def render_sql(element: ClauseElement) -> str:
    """Render an expression as PostgreSQL text with literal values inlined."""
    return str(element.compile(dialect=DIALECT, compile_kwargs={"literal_binds": True}))


def text_value(text: str) -> str:
    """User text as it can be stored: PostgreSQL text cannot hold NUL."""
    return text.replace("\x00", "")
