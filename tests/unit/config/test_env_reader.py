"""Tests for EnvReader and CLI logging overrides."""

from pathlib import Path

import pytest

from ito.config.env import EnvReader
from ito.config.logging_factory import build_logging_config
from ito.config.models import LoggingConfig


class TestEnvReader:
    """Tests for typed, prefixed environment access."""

    def test_prefix(self):
        reader = EnvReader({"ITO_MODE": "fast", "MODE": "slow"})
        assert reader.name("MODE") == "ITO_MODE"
        assert reader.get_str("MODE") == "fast"

    def test_get_str_default(self):
        assert EnvReader({}).get_str("X", "fallback") == "fallback"

    def test_get_int(self):
        assert EnvReader({"ITO_X": " 42 "}).get_int("X") == 42

    def test_get_int_invalid_returns_default(self, caplog):
        assert EnvReader({"ITO_X": "many"}).get_int("X", 3) == 3
        assert "Ignoring ITO_X='many'" in caplog.text

    def test_get_bool(self):
        reader = EnvReader({"ITO_A": "TRUE", "ITO_B": "on", "ITO_C": "0"})
        assert reader.get_bool("A") is True
        assert reader.get_bool("B") is True
        assert reader.get_bool("C") is False
        assert reader.get_bool("D", True) is True

    def test_get_bool_unrecognized_keeps_default(self, caplog):
        assert EnvReader({"ITO_A": "maybe"}).get_bool("A", True) is True
        assert "expected a boolean" in caplog.text

    def test_get_choice(self):
        reader = EnvReader({"ITO_LOG_FORMAT": "JSON", "ITO_BAD": "xml"})
        assert reader.get_choice("LOG_FORMAT", ("text", "json")) == "json"
        assert reader.get_choice("BAD", ("text", "json"), "text") == "text"

    def test_get_path_missing_warns(self, temp_dir, caplog):
        reader = EnvReader({"ITO_P": str(temp_dir / "absent")})
        assert reader.get_path("P") is None
        assert "path does not exist" in caplog.text

    def test_get_path_without_existence_check(self, temp_dir):
        reader = EnvReader({"ITO_P": str(temp_dir / "absent")})
        assert reader.get_path("P", must_exist=False) == temp_dir / "absent"

    def test_custom_prefix(self):
        assert EnvReader({"X": "1"}, prefix="").get_int("X") == 1


class TestBuildLoggingConfig:
    """Tests for applying CLI overrides to LoggingConfig."""

    def test_no_overrides(self):
        base = LoggingConfig(level="debug", max_bytes=1024)
        assert build_logging_config(base) == base

    def test_overrides_applied(self):
        base = LoggingConfig(backup_count=2)
        result = build_logging_config(
            base, level="error", file=Path("/tmp/ito.log"), format="json"
        )
        assert result.level == "error"
        assert result.file == Path("/tmp/ito.log")
        assert result.format == "json"
        assert result.backup_count == 2

    def test_invalid_override_raises(self):
        with pytest.raises(ValueError, match="level"):
            build_logging_config(LoggingConfig(), level="loud")
