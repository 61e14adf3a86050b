"""Tests for the configuration system."""

import json
from dataclasses import FrozenInstanceError

import pytest

from xmlfiles.shared.config import (
    BuilderConfig,
    SerializerConfig,
    TokenizerConfig,
    XMLFilesConfig,
    get_default_config,
    resolve_config,
    set_default_config,
    set_indentation,
)
from xmlfiles.shared.exceptions import ConfigError, ConfigValidationError


@pytest.fixture
def restore_default_config():
    """Put the process-wide default back after a test changes it."""
    previous = get_default_config()
    yield
    set_default_config(previous)


class TestComponentConfigs:
    """Test suite for the per-layer configuration classes."""

    def test_default_configuration(self):
        """Test default component values."""
        assert TokenizerConfig().buffer_size == 8192
        assert TokenizerConfig().encoding == "utf-8"
        assert BuilderConfig().strict_mode is False
        assert SerializerConfig().indent == "  "

    def test_tokenizer_config_validation_failures(self):
        """Test tokenizer configuration validation failures."""
        with pytest.raises(ConfigValidationError, match="buffer_size must be > 0"):
            TokenizerConfig(buffer_size=0)

        with pytest.raises(ConfigValidationError, match="encoding cannot be empty"):
            TokenizerConfig(encoding="")

    def test_serializer_rejects_non_whitespace_indent(self):
        """Test that indentation must be whitespace."""
        with pytest.raises(ConfigValidationError) as exc_info:
            SerializerConfig(indent="--")

        assert exc_info.value.field_name == "indent"
        assert exc_info.value.suggestions

    def test_serializer_rejects_line_breaks(self):
        """Test that indentation cannot contain newlines."""
        with pytest.raises(ConfigValidationError, match="line breaks"):
            SerializerConfig(indent="\n")

    def test_serializer_accepts_empty_and_tab_indent(self):
        """Test that empty and tab indentation are valid."""
        assert SerializerConfig(indent="").indent == ""
        assert SerializerConfig(indent="\t").indent == "\t"

    def test_validation_error_is_value_error(self):
        """Test exception hierarchy for configuration errors."""
        assert issubclass(ConfigValidationError, ConfigError)
        assert issubclass(ConfigError, ValueError)

    def test_configs_are_frozen(self):
        """Test that configuration objects are immutable."""
        config = SerializerConfig()
        with pytest.raises(FrozenInstanceError):
            config.indent = "\t"  # type: ignore[misc]


class TestXMLFilesConfig:
    """Test suite for the top-level configuration."""

    def test_override_nested_fields(self):
        """Test component__field overrides create a new configuration."""
        config = XMLFilesConfig()

        new_config = config.override(
            serializer__indent="\t",
            builder__strict_mode=True,
            name="custom",
        )

        assert new_config.serializer.indent == "\t"
        assert new_config.builder.strict_mode is True
        assert new_config.name == "custom"
        assert config.serializer.indent == "  "
        assert config.builder.strict_mode is False

    def test_override_validates_values(self):
        """Test overrides go through component validation."""
        with pytest.raises(ConfigValidationError):
            XMLFilesConfig().override(tokenizer__buffer_size=-1)

    def test_override_unknown_component(self):
        """Test unknown component names are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            XMLFilesConfig().override(printer__indent="\t")

    def test_override_unknown_field(self):
        """Test unknown field names inside a component are rejected."""
        with pytest.raises(ConfigValidationError, match="Invalid override"):
            XMLFilesConfig().override(serializer__width=80)

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = XMLFilesConfig().to_dict()

        assert data["serializer"] == {"indent": "  "}
        assert data["builder"] == {"strict_mode": False}
        assert data["tokenizer"] == {"buffer_size": 8192, "encoding": "utf-8"}
        assert data["name"] is None

    def test_json_round_trip(self):
        """Test JSON serialization and deserialization."""
        config = XMLFilesConfig.strict().override(serializer__indent="\t")

        restored = XMLFilesConfig.from_json(config.to_json())

        assert restored == config
        assert json.loads(config.to_json())["builder"]["strict_mode"] is True

    def test_from_dict_partial(self):
        """Test that missing sections fall back to defaults."""
        config = XMLFilesConfig.from_dict({"serializer": {"indent": "    "}})

        assert config.serializer.indent == "    "
        assert config.builder == BuilderConfig()

    def test_from_dict_rejects_unknown_keys(self):
        """Test that unknown keys in configuration data are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration field"):
            XMLFilesConfig.from_dict({"indent": "  "})

        with pytest.raises(ConfigValidationError, match="Invalid serializer"):
            XMLFilesConfig.from_dict({"serializer": {"width": 80}})

        with pytest.raises(ConfigValidationError, match="must be a mapping"):
            XMLFilesConfig.from_dict({"builder": True})

    def test_presets(self):
        """Test preset factory methods."""
        assert XMLFilesConfig.strict().builder.strict_mode is True
        assert XMLFilesConfig.strict().name == "strict"
        assert XMLFilesConfig.tabbed().serializer.indent == "\t"


class TestDefaultConfig:
    """Test suite for the process-wide default configuration."""

    def test_resolve_prefers_explicit_config(self):
        """Test that an explicit configuration wins over the default."""
        explicit = XMLFilesConfig.tabbed()

        assert resolve_config(explicit) is explicit
        assert resolve_config(None) is get_default_config()

    def test_set_indentation(self, restore_default_config):
        """Test the indentation setter replaces the default."""
        previous = set_indentation("\t")

        assert get_default_config().serializer.indent == "\t"
        assert previous.serializer.indent == "  "

    def test_set_indentation_rejects_non_whitespace(self, restore_default_config):
        """Test a visible indent is refused and the default is kept."""
        with pytest.raises(ConfigValidationError, match="only contain whitespace"):
            set_indentation("--")

        assert get_default_config().serializer.indent == "  "

    def test_set_default_config_returns_previous(self, restore_default_config):
        """Test the default setter returns the replaced configuration."""
        original = get_default_config()

        previous = set_default_config(XMLFilesConfig.strict())

        assert previous is original
        assert get_default_config().builder.strict_mode is True

    def test_set_default_config_type_check(self):
        """Test that only XMLFilesConfig instances are accepted."""
        with pytest.raises(TypeError):
            set_default_config({"serializer": {"indent": "\t"}})  # type: ignore[arg-type]
