"""Unit tests for key normalization and notation conversion."""

import pytest

from layerconf.config.errors import InvalidKeyError
from layerconf.config.keys import env_remainder_to_key, normalize_key, transform_key
from layerconf.config.models import KeyFormat


class TestNormalizeKey:
    """Tests for normalize_key."""

    @pytest.mark.unit
    def test_lowercases_and_strips(self) -> None:
        """Test that keys are trimmed and case-folded."""
        assert normalize_key("  Database.Host ") == "database.host"

    @pytest.mark.unit
    def test_case_folding_is_consistent(self) -> None:
        """Test that differently cased keys normalize to the same key."""
        assert normalize_key("Foo.Bar") == normalize_key("foo.bar")

    @pytest.mark.unit
    def test_idempotent(self) -> None:
        """Test that normalizing twice changes nothing."""
        once = normalize_key(" App.Name ")
        assert normalize_key(once) == once

    @pytest.mark.unit
    def test_case_sensitive_keeps_case(self) -> None:
        """Test that case-sensitive mode only strips whitespace."""
        assert normalize_key(" App.Name ", case_sensitive=True) == "App.Name"

    @pytest.mark.unit
    @pytest.mark.parametrize("key", ["", "   "])
    def test_empty_key_rejected(self, key: str) -> None:
        """Test that empty and whitespace-only keys raise."""
        with pytest.raises(InvalidKeyError):
            normalize_key(key)


class TestTransformKey:
    """Tests for transform_key."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("key", "target", "expected"),
        [
            ("database-host", "dot", "database.host"),
            ("database_host", "dot", "database.host"),
            ("database.host_name", "kebab", "database-host-name"),
            ("database.host-name", "snake", "database_host_name"),
            ("database.host-name", "env", "DATABASE_HOST_NAME"),
        ],
    )
    def test_targets(self, key: str, target: str, expected: str) -> None:
        """Test each target notation."""
        assert transform_key(key, target) == expected

    @pytest.mark.unit
    def test_enum_target_accepted(self) -> None:
        """Test that KeyFormat members work as targets."""
        assert transform_key("a.b", KeyFormat.KEBAB) == "a-b"

    @pytest.mark.unit
    def test_env_has_no_separators_left(self) -> None:
        """Test that env notation is upper-case without dots or hyphens."""
        result = transform_key("my-app.db.Max-Connections", "env")
        assert result == result.upper()
        assert "." not in result
        assert "-" not in result

    @pytest.mark.unit
    def test_unknown_target_returns_key(self) -> None:
        """Test that an unknown target leaves the key unchanged."""
        assert transform_key("a-b.c", "camel") == "a-b.c"

    @pytest.mark.unit
    def test_lossy_conversion(self) -> None:
        """Test that mixed separators collapse to dots."""
        assert transform_key("a-b.c", "dot") == "a.b.c"

    @pytest.mark.unit
    def test_empty_key_rejected(self) -> None:
        """Test that an empty key raises."""
        with pytest.raises(InvalidKeyError):
            transform_key("", "dot")


class TestEnvRemainderToKey:
    """Tests for env_remainder_to_key."""

    @pytest.mark.unit
    def test_auto_transform(self) -> None:
        """Test that underscores become dots with auto-transform on."""
        assert env_remainder_to_key("DB_HOST", auto_transform=True) == "DB.HOST"

    @pytest.mark.unit
    def test_without_auto_transform(self) -> None:
        """Test lower-casing and underscore replacement with auto-transform off."""
        assert env_remainder_to_key("DB_HOST", auto_transform=False) == "db.host"
