"""Unit tests for environment variable scanning."""

import pytest

from layerconf.config.env_scanner import scan_environment
from layerconf.config.models import MappingKind
from layerconf.config.overrides import OverrideRegistry


def default_registry() -> OverrideRegistry:
    return OverrideRegistry(
        env_prefixes=["APP_", "CONFIG_", "MYAPP_"], env_suffixes=["_CONFIG"]
    )


def scanned(environ: dict[str, str], **kwargs: object) -> dict[str, tuple[str, str]]:
    registry = kwargs.pop("registry", None) or default_registry()
    return {
        a.key: (a.value, a.source)
        for a in scan_environment(registry, environ, **kwargs)
    }


class TestPatternMatching:
    """Tests for prefix, suffix and legacy rules."""

    @pytest.mark.unit
    def test_prefix(self) -> None:
        """Test that a registered prefix is stripped and dotted."""
        result = scanned({"MYAPP_DB_HOST": "db1"})
        assert result == {"DB.HOST": ("db1", "env:MYAPP_DB_HOST")}

    @pytest.mark.unit
    def test_suffix(self) -> None:
        """Test that a registered suffix is stripped."""
        assert scanned({"CACHE_TTL_CONFIG": "60"}) == {
            "CACHE.TTL": ("60", "env:CACHE_TTL_CONFIG")
        }

    @pytest.mark.unit
    def test_legacy_patterns_without_registered_lists(self) -> None:
        """Test the APP_/CONFIG_/_CONFIG fallback with an empty registry."""
        result = scanned(
            {"APP_NAME": "demo", "CONFIG_PORT": "80", "LOG_CONFIG": "x"},
            registry=OverrideRegistry(),
        )
        assert set(result) == {"NAME", "PORT", "LOG"}

    @pytest.mark.unit
    def test_unmatched_ignored(self) -> None:
        """Test that unrelated variables are skipped."""
        assert scanned({"HOME": "/root", "PATH": "/bin"}) == {}

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["APP_", "_CONFIG"])
    def test_empty_remainder_ignored(self, name: str) -> None:
        """Test that a bare prefix or suffix produces no key."""
        assert scanned({name: "x"}) == {}

    @pytest.mark.unit
    def test_without_auto_transform(self) -> None:
        """Test lower-cased keys when auto-transform is off."""
        result = scanned({"APP_DB_HOST": "db1"}, auto_transform=False)
        assert list(result) == ["db.host"]

    @pytest.mark.unit
    def test_first_prefix_wins(self) -> None:
        """Test that prefixes are tried in registration order."""
        registry = OverrideRegistry(env_prefixes=["APP_", "APP_DB_"])
        assert list(scanned({"APP_DB_HOST": "x"}, registry=registry)) == ["DB.HOST"]


class TestExplicitMappings:
    """Tests for explicit env mappings."""

    @pytest.mark.unit
    def test_explicit_beats_pattern(self) -> None:
        """Test that an explicit mapping wins over a prefix match."""
        registry = default_registry()
        registry.define(MappingKind.ENV, "APP_DB", "database.url")
        assert scanned({"APP_DB": "pg://"}, registry=registry) == {
            "database.url": ("pg://", "env:APP_DB")
        }

    @pytest.mark.unit
    def test_explicit_without_pattern(self) -> None:
        """Test that any variable name can be mapped."""
        registry = default_registry()
        registry.define("env", "DATABASE_URL", "database.url")
        assert "database.url" in scanned({"DATABASE_URL": "pg://"}, registry=registry)


class TestOrdering:
    """Tests for deterministic ordering."""

    @pytest.mark.unit
    def test_sorted_by_variable_name(self) -> None:
        """Test that variables are visited in sorted name order."""
        registry = default_registry()
        assignments = scan_environment(
            registry, {"MYAPP_PORT": "2", "APP_PORT": "1", "CONFIG_PORT": "3"}
        )
        assert [a.source for a in assignments] == [
            "env:APP_PORT",
            "env:CONFIG_PORT",
            "env:MYAPP_PORT",
        ]

    @pytest.mark.unit
    def test_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that os.environ is scanned when no mapping is given."""
        monkeypatch.setenv("MYAPP_UNIT_MARKER", "seen")
        keys = {a.key: a.value for a in scan_environment(default_registry())}
        assert keys["UNIT.MARKER"] == "seen"
