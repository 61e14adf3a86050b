"""Shared utilities for xmlfiles.

This module provides the configuration objects, exception hierarchy and
logging helpers used across the reader, builder and serializer layers.
"""

from .config import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_INDENT,
    BuilderConfig,
    SerializerConfig,
    TokenizerConfig,
    XMLFilesConfig,
    get_default_config,
    resolve_config,
    set_default_config,
    set_indentation,
)
from .exceptions import (
    ConfigError,
    ConfigValidationError,
    MismatchedTagError,
    NoRootElementError,
    ParseError,
    XMLFilesError,
)
from .logging import (
    ComponentLogger,
    get_logger,
)

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_INDENT",
    "BuilderConfig",
    "SerializerConfig",
    "TokenizerConfig",
    "XMLFilesConfig",
    "get_default_config",
    "resolve_config",
    "set_default_config",
    "set_indentation",
    "ConfigError",
    "ConfigValidationError",
    "MismatchedTagError",
    "NoRootElementError",
    "ParseError",
    "XMLFilesError",
    "ComponentLogger",
    "get_logger",
]
