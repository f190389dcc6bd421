"""
Tests for settings loading.
"""

import tempfile
import shutil
from pathlib import Path
import pytest

from syncgraph.config import Settings, configure_logging, load_settings
from syncgraph.errors import ConfigError

ENV_VARS = (
    "SYNCGRAPH_CONFIG", "SYNCGRAPH_DB_URL", "SYNCGRAPH_LOG_LEVEL",
    "SYNCGRAPH_AUDIO_UPLOAD_DIR", "SYNCGRAPH_AUDIO_STATIC_DIR",
)


class TestLoadSettings:
    """Tests for load_settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        self.monkeypatch = monkeypatch

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, text):
        path = self.temp_dir / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_reads_yaml(self):
        """Test reading settings from a YAML file."""
        path = self._write(
            "db:\n"
            "  url: sqlite:///tmp/test.db\n"
            "audio:\n"
            "  upload_dir: up\n"
            "  defaults: [/audio/a.wav]\n"
            "search:\n"
            "  max_workers: 5\n"
            "social:\n"
            "  suggestion_depth: 3\n"
            "recommendations:\n"
            "  radio_size: 12\n"
            "logging:\n"
            "  level: debug\n"
        )
        settings = load_settings(path)

        assert settings.db_url == "sqlite:///tmp/test.db"
        assert settings.audio_upload_dir == "up"
        assert settings.audio_static_dir == Settings().audio_static_dir
        assert settings.default_audio == ["/audio/a.wav"]
        assert settings.search_max_workers == 5
        assert settings.suggestion_depth == 3
        assert settings.radio_size == 12
        assert settings.discovery_size == 20
        assert settings.log_level == "DEBUG"

    def test_environment_overrides_file(self):
        """Test that environment variables win over the file."""
        path = self._write("db:\n  url: sqlite:///from-file.db\n")
        self.monkeypatch.setenv("SYNCGRAPH_DB_URL", "sqlite:///from-env.db")
        self.monkeypatch.setenv("SYNCGRAPH_LOG_LEVEL", "warning")

        settings = load_settings(path)
        assert settings.db_url == "sqlite:///from-env.db"
        assert settings.log_level == "WARNING"

    def test_postgres_from_env_variables(self):
        """Test building a Postgres URL from environment variables."""
        path = self._write(
            "db:\n"
            "  driver: postgresql+psycopg2\n"
            "  host_env: T_PGHOST\n"
            "  port_env: T_PGPORT\n"
            "  user_env: T_PGUSER\n"
            "  pwd_env: T_PGPASSWORD\n"
            "  db_env: T_PGDATABASE\n"
        )
        for name, value in (("T_PGHOST", "db"), ("T_PGPORT", "5432"), ("T_PGUSER", "sync"),
                            ("T_PGPASSWORD", "secret"), ("T_PGDATABASE", "syncgraph")):
            self.monkeypatch.setenv(name, value)

        assert load_settings(path).db_url == "postgresql+psycopg2://sync:secret@db:5432/syncgraph"

        self.monkeypatch.delenv("T_PGHOST")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_missing_explicit_file(self):
        """Test that a missing config file is an error."""
        with pytest.raises(ConfigError):
            load_settings(self.temp_dir / "missing.yaml")

    def test_invalid_values(self):
        """Test rejection of invalid setting values."""
        with pytest.raises(ConfigError):
            load_settings(self._write("search:\n  max_workers: many\n"))
        with pytest.raises(ConfigError):
            load_settings(self._write("- just\n- a list\n"))
        with pytest.raises(ConfigError):
            load_settings(self._write("db: [unclosed\n"))

    def test_config_path_from_environment(self):
        """Test picking the config file from the environment."""
        path = self._write("social:\n  suggestion_depth: 4\n")
        self.monkeypatch.setenv("SYNCGRAPH_CONFIG", str(path))
        assert load_settings().suggestion_depth == 4

    def test_configure_logging_with_file(self):
        """Test logging to a file."""
        log_file = self.temp_dir / "logs" / "syncgraph.log"
        configure_logging("info", str(log_file))
        assert log_file.parent.exists()
        # Drop the file sink before the directory goes away
        configure_logging("DEBUG")


if __name__ == "__main__":
    import sys
    pytest.main([__file__, "-v"] + sys.argv[1:])
