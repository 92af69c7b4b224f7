from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when a parameter or input is outside its valid domain."""


class InvariantError(RuntimeError):
    """Internal bookkeeping went inconsistent. Always a programming error."""
