"""Unit tests for configuration error hints."""

import pytest

from layerconf.config.error_hints import (
    ERROR_HINTS,
    format_config_error,
    get_error_hint,
)
from layerconf.config.errors import (
    DocumentParseError,
    FileUnreadableError,
    InvalidKeyError,
    MappingError,
    TypeConversionError,
    UndefinedKeyError,
    UnsupportedFormatError,
)


class TestGetErrorHint:
    """Tests for get_error_hint."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "error",
        [
            InvalidKeyError("get"),
            UndefinedKeyError("a.b"),
            TypeConversionError("a", "int", "x"),
            FileUnreadableError("/nope.ini"),
            UnsupportedFormatError("a.json", "json", "jq"),
            DocumentParseError("a.yaml", "bad"),
            MappingError("bad mapping"),
        ],
    )
    def test_every_error_has_a_hint(self, error: Exception) -> None:
        """Test that each error code has a dedicated hint."""
        assert error.error_type in ERROR_HINTS

    @pytest.mark.unit
    def test_type_specific_hint(self) -> None:
        """Test that conversion hints depend on the requested type."""
        assert "integer" in get_error_hint("type_conversion", "int")
        assert "true/false" in get_error_hint("type_conversion", "bool")
        assert get_error_hint("type_conversion") == ERROR_HINTS["type_conversion"]

    @pytest.mark.unit
    def test_unknown_error_type(self) -> None:
        """Test the generic fallback hint."""
        assert "documentation" in get_error_hint("something_else")


class TestFormatConfigError:
    """Tests for format_config_error."""

    @pytest.mark.unit
    def test_with_hint(self) -> None:
        """Test that the hint is appended on its own line."""
        formatted = format_config_error("db.port", "bad value", "type_conversion", expected_type="int")
        assert formatted.startswith("db.port: bad value\n    Hint: ")
        assert "integer" in formatted

    @pytest.mark.unit
    def test_without_hint_or_location(self) -> None:
        """Test formatting without location and hint."""
        assert format_config_error("", "boom", "invalid_key", include_hint=False) == "boom"


class TestErrorRecords:
    """Tests for ConfigError.to_dict."""

    @pytest.mark.unit
    def test_record_shape(self) -> None:
        """Test the loc/msg/type record."""
        record = UndefinedKeyError("app.name").to_dict()
        assert record["loc"] == "app.name"
        assert record["type"] == "undefined_key"
        assert "app.name" in record["msg"]

    @pytest.mark.unit
    def test_record_without_key(self) -> None:
        """Test that errors without a key have an empty location."""
        assert InvalidKeyError("set").to_dict()["loc"] == ""
