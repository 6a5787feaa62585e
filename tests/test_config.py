from __future__ import annotations

import pytest

from fitsync.config import DEFAULT_BASE_URL, ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("FITSYNC_API_URL", "FITSYNC_TIMEOUT", "FITSYNC_CREDENTIALS_PATH", "FITSYNC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_config()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 15.0
    assert config.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FITSYNC_API_URL", "http://localhost:3000/api/")
    monkeypatch.setenv("FITSYNC_TIMEOUT", "2.5")
    monkeypatch.setenv("FITSYNC_CREDENTIALS_PATH", "/tmp/creds.json")
    monkeypatch.setenv("FITSYNC_LOG_LEVEL", "debug")

    config = load_config()

    assert config.base_url == "http://localhost:3000/api"
    assert config.timeout == 2.5
    assert config.credentials_path == "/tmp/creds.json"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("timeout", ["abc", "0", "-1"])
def test_invalid_timeout(monkeypatch, timeout):
    monkeypatch.setenv("FITSYNC_TIMEOUT", timeout)
    with pytest.raises(ConfigError):
        load_config()


def test_invalid_base_url(monkeypatch):
    monkeypatch.setenv("FITSYNC_API_URL", "ftp://example.com")
    with pytest.raises(ConfigError):
        load_config()
