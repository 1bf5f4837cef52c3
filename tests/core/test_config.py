"""Tests for configuration loading."""

import pytest

from score_library.core import config as config_module
from score_library.core.config import (
    Config,
    LibraryConfig,
    RemoteConfig,
    get_data_dir,
    load_config,
)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point every config location at tmp_path and clear env overrides."""
    monkeypatch.setattr(config_module, "_find_project_config", lambda: None)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    for name in ("DATABASE_URL", "STORAGE_URL", "STORAGE_SERVICE_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestLoadConfig:
    """Tests for load_config."""

    def test_creates_default_file(self, isolated_config) -> None:
        config = load_config()

        assert (isolated_config / "xdg-config" / "score-library" / "config.toml").exists()
        assert config.sync.copy_suffix == " (copy)"
        assert config.library.database_file == "score_library.db"
        assert not config.remote.enabled

    def test_default_file_round_trips(self, isolated_config) -> None:
        load_config()

        config = load_config()

        assert config.remote.sheet_bucket == "sheet-music"
        assert config.remote.request_timeout == 30
        assert config.logging.level == "INFO"
        assert config.web.allowed_origins == ["http://localhost:5173"]

    def test_reads_sections(self, isolated_config) -> None:
        (isolated_config / "config.toml").write_text(
            """
[library]
data_dir = "~/Scores"

[remote]
database_url = "postgresql://u:p@db.example/postgres"
storage_url = "https://storage.example.co"
service_key = "key"
avatar_bucket = "faces"
request_timeout = 10

[sync]
copy_suffix = " [pulled]"

[logging]
level = "debug"
""",
            encoding="utf-8",
        )

        config = load_config()

        assert config.library.data_dir.endswith("Scores")
        assert "~" not in config.library.data_dir
        assert config.remote.enabled
        assert config.remote.avatar_bucket == "faces"
        assert config.remote.request_timeout == 10
        assert config.sync.copy_suffix == " [pulled]"
        assert config.logging.level == "DEBUG"

    def test_env_overrides(self, isolated_config, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://env@db/x")
        monkeypatch.setenv("STORAGE_URL", "https://env-storage.example")
        monkeypatch.setenv("STORAGE_SERVICE_KEY", "env-key")

        config = load_config()

        assert config.remote.database_url == "postgres://env@db/x"
        assert config.remote.storage_url == "https://env-storage.example"
        assert config.remote.service_key == "env-key"
        assert config.remote.enabled

    def test_invalid_remote_falls_back_to_defaults(self, isolated_config, capsys) -> None:
        (isolated_config / "config.toml").write_text(
            '[remote]\nstorage_url = "ftp://nope"\n', encoding="utf-8"
        )

        config = load_config()

        assert config.remote == RemoteConfig()
        assert "Invalid remote configuration" in capsys.readouterr().out

    def test_broken_toml_uses_defaults(self, isolated_config, capsys) -> None:
        (isolated_config / "config.toml").write_text("[library\n", encoding="utf-8")

        config = load_config()

        assert config == Config()
        assert "Using default configuration" in capsys.readouterr().out


class TestRemoteConfig:
    """Tests for RemoteConfig.validate."""

    def test_valid(self) -> None:
        RemoteConfig(
            database_url="postgresql://localhost/db", storage_url="http://localhost:54321"
        ).validate()

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="request_timeout"):
            RemoteConfig(request_timeout=0).validate()

    def test_database_must_be_postgres(self) -> None:
        with pytest.raises(ValueError, match="PostgreSQL"):
            RemoteConfig(database_url="mysql://localhost/db").validate()


class TestDataDir:
    """Tests for get_data_dir."""

    def test_configured(self, tmp_path) -> None:
        config = Config(library=LibraryConfig(data_dir=str(tmp_path / "lib")))

        assert get_data_dir(config) == tmp_path / "lib"

    def test_xdg(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

        assert get_data_dir() == tmp_path / "score-library"
