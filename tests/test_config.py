from pathlib import Path

import pytest

from inplace_store import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "INPLACE_STORE_TEMP_DIR",
        "INPLACE_STORE_CHUNK_SIZE",
        "INPLACE_STORE_LOCK_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_config_file(tmp_path):
    settings = config.load_settings(tmp_path / "missing.toml")

    assert settings.temp_storage_dir == config.DEFAULT_TEMP_STORAGE_DIR
    assert settings.chunk_size == config.DEFAULT_CHUNK_SIZE
    assert settings.lock_timeout == config.DEFAULT_LOCK_TIMEOUT
    assert settings.dest_path_dir == config.DEFAULT_TEMP_STORAGE_DIR / "destPath"


def test_config_file_values(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        f'temp_storage_dir = "{tmp_path / "operational"}"\nchunk_size = 4096\nlock_timeout = 2.5\n'
    )

    settings = config.load_settings(path)
    assert settings.temp_storage_dir == tmp_path / "operational"
    assert settings.chunk_size == 4096
    assert settings.lock_timeout == 2.5


def test_env_overrides_config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text('temp_storage_dir = "/from/config"\nchunk_size = 4096\n')
    monkeypatch.setenv("INPLACE_STORE_TEMP_DIR", str(tmp_path / "env"))
    monkeypatch.setenv("INPLACE_STORE_CHUNK_SIZE", "128")

    settings = config.load_settings(path)
    assert settings.temp_storage_dir == tmp_path / "env"
    assert settings.chunk_size == 128


def test_invalid_number_warns_and_falls_back(tmp_path, monkeypatch):
    monkeypatch.setenv("INPLACE_STORE_CHUNK_SIZE", "lots")
    monkeypatch.setenv("INPLACE_STORE_LOCK_TIMEOUT", "-1")

    with pytest.warns(UserWarning):
        settings = config.load_settings(tmp_path / "missing.toml")

    assert settings.chunk_size == config.DEFAULT_CHUNK_SIZE
    assert settings.lock_timeout == config.DEFAULT_LOCK_TIMEOUT


def test_malformed_config_file_warns(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("temp_storage_dir = [unterminated")

    with pytest.warns(UserWarning, match="Failed to parse"):
        assert config.load_config(path) == {}


def test_settings_are_frozen():
    settings = config.Settings(temp_storage_dir=Path("/tmp/x"))
    with pytest.raises(AttributeError):
        settings.chunk_size = 1
