"""Configuration classes for xmlfiles.

This module provides immutable configuration objects for the chunk reader,
the tree builder and the pretty printer, plus the process-wide default that
the public API falls back to when no explicit configuration is passed.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .exceptions import ConfigValidationError

DEFAULT_BUFFER_SIZE = 8192
DEFAULT_INDENT = "  "

_COMPONENTS = ("tokenizer", "builder", "serializer")


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for splitting input into chunks."""

    buffer_size: int = DEFAULT_BUFFER_SIZE
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.buffer_size <= 0:
            raise ConfigValidationError(
                "buffer_size must be > 0", field_name="buffer_size"
            )
        if not self.encoding:
            raise ConfigValidationError(
                "encoding cannot be empty", field_name="encoding"
            )


@dataclass(frozen=True)
class BuilderConfig:
    """Configuration for tree building.

    ``strict_mode`` turns the builder's silent tolerances (mismatched or
    stray closing tags, content after the root) into :class:`ParseError`.
    """

    strict_mode: bool = False


@dataclass(frozen=True)
class SerializerConfig:
    """Configuration for the pretty printer."""

    indent: str = DEFAULT_INDENT

    def __post_init__(self) -> None:
        """Validate serializer configuration."""
        if not isinstance(self.indent, str):
            raise ConfigValidationError(
                "indent must be a string", field_name="indent"
            )
        if self.indent.strip():
            raise ConfigValidationError(
                "indent must only contain whitespace",
                field_name="indent",
                suggestions=["Use spaces or tabs, e.g. '  ' or '\\t'"],
            )
        if "\n" in self.indent or "\r" in self.indent:
            raise ConfigValidationError(
                "indent cannot contain line breaks", field_name="indent"
            )


@dataclass(frozen=True)
class XMLFilesConfig:
    """Complete configuration for reading and writing documents.

    Thread-safe due to frozen dataclass implementation; derive modified
    copies with :meth:`override`.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    builder: BuilderConfig = field(default_factory=BuilderConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def override(self, **kwargs: Any) -> "XMLFilesConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, ``component__field`` for nested ones

        Returns:
            New XMLFilesConfig instance with overrides applied

        Example:
            >>> config = XMLFilesConfig()
            >>> new_config = config.override(
            ...     serializer__indent="\\t",
            ...     builder__strict_mode=True
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        new_fields: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {', '.join(_COMPONENTS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                new_fields[key] = value

        for component, values in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **values)
            except TypeError as e:
                raise ConfigValidationError(
                    f"Invalid override for {component}: {e}", field_name=component
                ) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for field_name in self.__dataclass_fields__:
            value = getattr(self, field_name)
            if hasattr(value, "__dataclass_fields__"):
                value = {
                    name: getattr(value, name) for name in value.__dataclass_fields__
                }
            result[field_name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "XMLFilesConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        pass silently.
        """
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in cls.__dataclass_fields__:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )
            field_type = cls.__dataclass_fields__[key].type
            if hasattr(field_type, "__dataclass_fields__"):
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"{key} must be a mapping", field_name=key
                    )
                try:
                    value = field_type(**value)
                except TypeError as e:
                    raise ConfigValidationError(
                        f"Invalid {key} configuration: {e}", field_name=key
                    ) from e
            field_values[key] = value
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "XMLFilesConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def strict(cls) -> "XMLFilesConfig":
        """Create preset that rejects structurally inconsistent input."""
        return cls(
            builder=BuilderConfig(strict_mode=True),
            name="strict",
            description="Reject mismatched closing tags and content after the root",
        )

    @classmethod
    def tabbed(cls) -> "XMLFilesConfig":
        """Create preset that indents serialized output with tabs."""
        return cls(
            serializer=SerializerConfig(indent="\t"),
            name="tabbed",
            description="Serialize with one tab per nesting level",
        )


_default_config = XMLFilesConfig()


def get_default_config() -> XMLFilesConfig:
    """Return the process-wide default configuration."""
    return _default_config


def set_default_config(config: XMLFilesConfig) -> XMLFilesConfig:
    """Replace the process-wide default configuration.

    Returns:
        The previous default, so callers can restore it
    """
    global _default_config
    if not isinstance(config, XMLFilesConfig):
        raise TypeError("config must be an XMLFilesConfig instance")
    previous = _default_config
    _default_config = config
    return previous


def set_indentation(indent: str) -> XMLFilesConfig:
    """Change the indentation string used by all later serialization calls.

    The indent must be whitespace without line breaks, so that serialized
    output parses back to the same tree.

    Raises:
        ConfigValidationError: If ``indent`` is not such a string

    Returns:
        The previous default configuration
    """
    return set_default_config(_default_config.override(serializer__indent=indent))


def resolve_config(config: Optional[XMLFilesConfig] = None) -> XMLFilesConfig:
    """Return ``config`` or the process-wide default when it is None."""
    return config if config is not None else _default_config
