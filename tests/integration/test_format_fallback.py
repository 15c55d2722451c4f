"""Integration tests for structured formats without a flattener."""

import json
import shutil
from pathlib import Path

import pytest

from layerconf.config.formats.flatteners import UnavailableFlattener
from layerconf.config.loader import ConfigLoader
from layerconf.config.models import FileFormat
from layerconf.config.store import ConfigStore
from layerconf.settings.engine import EngineSettings


def unavailable_loader(store: ConfigStore) -> ConfigLoader:
    return ConfigLoader(
        store,
        flatteners={
            FileFormat.JSON: UnavailableFlattener("jq", FileFormat.JSON),
            FileFormat.YAML: UnavailableFlattener("yq", FileFormat.YAML),
        },
    )


class TestIniFallback:
    """Tests for INI parsing of .json/.yaml files."""

    @pytest.mark.integration
    def test_line_based_json_file(self, tmp_path: Path) -> None:
        """Test that key=value lines in a .json file are still loaded."""
        path = tmp_path / "app.json"
        path.write_text("app.name=Fallback\n[db]\nhost=h\n")
        store = ConfigStore(EngineSettings())

        report = unavailable_loader(store).load_from_files([path])

        assert store.get("app.name") == "Fallback"
        assert store.get("db.host") == "h"
        assert report.fallbacks == [str(path)]
        assert report.files_loaded == [str(path)]

    @pytest.mark.integration
    def test_real_json_document_does_not_crash(self, tmp_path: Path) -> None:
        """Test that a nested document falls back without raising."""
        path = tmp_path / "app.json"
        path.write_text(json.dumps({"app": {"name": "x"}}, indent=2))
        other = tmp_path / "other.ini"
        other.write_text("after=1\n")
        store = ConfigStore(EngineSettings())

        report = unavailable_loader(store).load_from_files([path, other])

        assert report.ok
        assert "app.name" not in store
        assert store.get("after") == "1"

    @pytest.mark.integration
    def test_external_backend_without_tools(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the external backend degrades to INI when tools are missing."""
        monkeypatch.setattr(shutil, "which", lambda name: None)
        path = tmp_path / "app.yaml"
        path.write_text("name=from-yaml-fallback\n")
        store = ConfigStore(EngineSettings(flattener_backend="external"))

        loader = ConfigLoader(store)
        report = loader.load_from_files([path])

        assert not loader.flatteners[FileFormat.YAML].available
        assert store.get("name") == "from-yaml-fallback"
        assert report.fallbacks == [str(path)]
