"""Storage-engine glue: SQL rendering and listing queries."""

from scanquery.db.dialect import DIALECT, render_sql, text_value

__all__ = ["DIALECT", "render_sql", "text_value"]
