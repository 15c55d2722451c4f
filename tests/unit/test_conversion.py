"""Unit tests for read-time type conversion."""

import pytest

from layerconf.config.conversion import convert_value, split_array
from layerconf.config.errors import TypeConversionError
from layerconf.config.models import ValueType


class TestIntConversion:
    """Tests for the int type."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["42", "-7", "0"])
    def test_valid_integers(self, value: str) -> None:
        """Test that integers pass through unchanged."""
        assert convert_value("x", value, ValueType.INT) == value

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["abc", "4.2", " 42", "+1", ""])
    def test_invalid_integers(self, value: str) -> None:
        """Test that anything outside ^-?[0-9]+$ is rejected."""
        with pytest.raises(TypeConversionError) as exc_info:
            convert_value("x", value, "int")
        assert exc_info.value.expected_type == "int"
        assert exc_info.value.key == "x"


class TestBoolConversion:
    """Tests for the bool type."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["true", "YES", "1", "On", "enabled"])
    def test_truthy(self, value: str) -> None:
        """Test truthy spellings."""
        assert convert_value("flag", value, "bool") == "true"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["false", "No", "0", "OFF", "disabled", ""])
    def test_falsy(self, value: str) -> None:
        """Test falsy spellings, including the empty string."""
        assert convert_value("flag", value, "bool") == "false"

    @pytest.mark.unit
    def test_unrecognised(self) -> None:
        """Test that other values are an error."""
        with pytest.raises(TypeConversionError):
            convert_value("flag", "maybe", "bool")


class TestPassThroughTypes:
    """Tests for string, array and unknown types."""

    @pytest.mark.unit
    def test_string(self) -> None:
        """Test that strings are returned verbatim."""
        assert convert_value("k", " spaced ", "string") == " spaced "

    @pytest.mark.unit
    def test_array_is_not_split(self) -> None:
        """Test that arrays stay a comma-separated string."""
        assert convert_value("k", "a,b,c", "array") == "a,b,c"

    @pytest.mark.unit
    def test_unknown_type_returns_raw(self) -> None:
        """Test that an unknown type tag returns the raw value."""
        assert convert_value("k", "abc", "float") == "abc"


class TestSplitArray:
    """Tests for split_array."""

    @pytest.mark.unit
    def test_split_and_trim(self) -> None:
        """Test that items are split on commas and trimmed."""
        assert split_array("a, b ,c") == ["a", "b", "c"]

    @pytest.mark.unit
    def test_empty(self) -> None:
        """Test that an empty value gives an empty list."""
        assert split_array("") == []
