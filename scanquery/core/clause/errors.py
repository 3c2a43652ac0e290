"""Errors raised by the clause compiler."""


class FilterCompileError(Exception):
    """
    Raised when a filter cannot be compiled because of a programmer error.

    Bad user input never raises: offending terms are dropped. This error
    means the registry and its allow-list disagree, or the resource type
    has no registry at all.
    """

    pass
