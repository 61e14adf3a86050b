"""Exception hierarchy for xmlfiles.

The parser is permissive by default, so most of these are only raised for
input that cannot produce a document at all or when strict mode is enabled.
"""

from typing import List, Optional


class XMLFilesError(Exception):
    """Base exception for all xmlfiles errors."""


class ParseError(XMLFilesError):
    """Raised when a chunk sequence cannot be turned into a document."""

    def __init__(self, message: str, chunk_index: Optional[int] = None) -> None:
        if chunk_index is not None:
            message = f"{message} (chunk {chunk_index})"
        super().__init__(message)
        self.chunk_index = chunk_index


class NoRootElementError(ParseError):
    """Raised when the input contains no root-level opening tag."""


class MismatchedTagError(ParseError):
    """Raised in strict mode when a closing tag does not match its opener."""

    def __init__(
        self,
        expected: str,
        found: str,
        chunk_index: Optional[int] = None
    ) -> None:
        super().__init__(
            f"Closing tag </{found}> does not match <{expected}>", chunk_index
        )
        self.expected = expected
        self.found = found


class ConfigError(XMLFilesError, ValueError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []
