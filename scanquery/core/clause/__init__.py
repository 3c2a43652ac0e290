"""Filter clause compilation: sort planning and the compiler."""

from .compiler import (
    CompiledFilter,
    FilterCompiler,
    Joined,
    compile_filter,
    get_join,
    render_clause,
)
from .errors import FilterCompileError
from .ordering import plan_first_sort, plan_later_sort

__all__ = [
    "CompiledFilter",
    "FilterCompileError",
    "FilterCompiler",
    "Joined",
    "compile_filter",
    "get_join",
    "plan_first_sort",
    "plan_later_sort",
    "render_clause",
]
