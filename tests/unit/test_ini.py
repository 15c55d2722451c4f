"""Unit tests for the INI parser."""

from pathlib import Path

import pytest

from layerconf.config.formats import detect_format, parse_ini_file, parse_ini_text
from layerconf.config.models import FileFormat


class TestParseIniText:
    """Tests for parse_ini_text."""

    @pytest.mark.unit
    def test_sections(self) -> None:
        """Test top-level keys and section prefixes."""
        pairs = parse_ini_text("debug=true\n[db]\nhost=x.example.com\n")
        assert pairs == [("debug", "true"), ("db.host", "x.example.com")]

    @pytest.mark.unit
    def test_comments_and_blank_lines(self) -> None:
        """Test that comments and blank lines are skipped."""
        text = "# comment\n; other\n\n   # indented\nkey=value\n"
        assert parse_ini_text(text) == [("key", "value")]

    @pytest.mark.unit
    def test_trimming_and_quotes(self) -> None:
        """Test that keys and values are trimmed and matching quotes removed."""
        text = "  name =  \"My App\"  \nsingle='x'\nmixed=\"y'\n"
        assert parse_ini_text(text) == [
            ("name", "My App"),
            ("single", "x"),
            ("mixed", "\"y'"),
        ]

    @pytest.mark.unit
    def test_value_keeps_equals(self) -> None:
        """Test that the first = separates key and value."""
        assert parse_ini_text("url=a=b") == [("url", "a=b")]

    @pytest.mark.unit
    def test_empty_value(self) -> None:
        """Test that an empty value is kept."""
        assert parse_ini_text("blank=") == [("blank", "")]

    @pytest.mark.unit
    def test_malformed_lines_ignored(self) -> None:
        """Test that lines without = are skipped."""
        assert parse_ini_text("just text\n=novalue\nk=v") == [("k", "v")]

    @pytest.mark.unit
    def test_section_switch(self) -> None:
        """Test that a new section replaces the previous one."""
        pairs = parse_ini_text("[a]\nx=1\n[b]\nx=2\n")
        assert pairs == [("a.x", "1"), ("b.x", "2")]


class TestParseIniFile:
    """Tests for parse_ini_file."""

    @pytest.mark.unit
    def test_reads_file(self, tmp_path: Path) -> None:
        """Test reading pairs from disk."""
        path = tmp_path / "app.conf"
        path.write_text("[server]\nport=8080\n", encoding="utf-8")
        assert parse_ini_file(path) == [("server.port", "8080")]

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises OSError."""
        with pytest.raises(OSError):
            parse_ini_file(tmp_path / "missing.ini")

    @pytest.mark.unit
    def test_invalid_utf8_keeps_other_lines(self, tmp_path: Path) -> None:
        """Test that a Latin-1 byte does not drop the rest of the file."""
        path = tmp_path / "app.ini"
        path.write_bytes(b"host=db.example.com\nowner=Ren\xe9\n")

        pairs = dict(parse_ini_file(path))

        assert pairs["host"] == "db.example.com"
        assert pairs["owner"] == "Ren\ufffd"


class TestDetectFormat:
    """Tests for extension dispatch."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("a.json", FileFormat.JSON),
            ("a.JSON", FileFormat.JSON),
            ("a.yaml", FileFormat.YAML),
            ("a.Yml", FileFormat.YAML),
            ("a.ini", FileFormat.INI),
            ("a.conf", FileFormat.INI),
            ("noext", FileFormat.INI),
        ],
    )
    def test_extensions(self, name: str, expected: FileFormat) -> None:
        """Test that extensions pick the format case-insensitively."""
        assert detect_format(name) is expected
