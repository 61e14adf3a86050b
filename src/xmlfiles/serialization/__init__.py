"""Serialization layer: pretty printing documents back to text."""

from .printer import (
    PrettyPrinter,
    serialize,
    write,
)

__all__ = [
    "PrettyPrinter",
    "serialize",
    "write",
]
