"""Public parsing API for xmlfiles."""

from .parser import (
    parse,
    parse_file,
    parse_string,
)

__all__ = [
    "parse",
    "parse_file",
    "parse_string",
]
