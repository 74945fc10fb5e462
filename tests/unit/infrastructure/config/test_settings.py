import logging
import os

import pytest

from layerx.domain.models.common import RetryPolicy
from layerx.infrastructure.config import settings
from layerx.infrastructure.monitoring.logger_setup import resolve_level


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, mocker):
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", False)
    mocker.patch.dict(os.environ)


def test_defaults_when_nothing_is_configured():
    assert settings.get_base_url() == settings.DEFAULT_BASE_URL
    assert settings.get_api_token() is None
    assert settings.get_retry_policy() == RetryPolicy()


def test_nested_yaml_is_flattened(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n"
        "  base_url: https://yaml.test\n"
        "  token: yaml-token\n"
        "client:\n"
        "  max_retries: 4\n"
    )

    settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert settings.get_base_url() == "https://yaml.test"
    assert settings.get_api_token() == "yaml-token"
    assert settings.get_retry_policy().max_retries == 4


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api:\n  base_url: https://yaml.test\n")
    monkeypatch.setenv("API_BASE_URL", "https://env.test")
    monkeypatch.setenv("LAYERX_TIMEOUT_SECONDS", "5.5")

    settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert settings.get_base_url() == "https://env.test"
    assert settings.get_retry_policy().timeout_per_attempt == 5.5


def test_dotenv_file_is_loaded(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("API_TOKEN=dotenv-token\n")

    settings.load_configuration(config_file=tmp_path / "none.yaml", env_file=env_file)

    assert settings.get_api_token() == "dotenv-token"


def test_invalid_yaml_is_logged_not_raised(tmp_path, caplog):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api: [unclosed\n")

    with caplog.at_level(logging.ERROR):
        settings.load_configuration(config_file=config_file, env_file=tmp_path / "missing.env")

    assert "Failed to load or parse YAML config" in caplog.text


def test_test_config_wins_over_environment(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://env.test")
    settings.set_config_for_testing({"api.base_url": "https://override.test"})

    assert settings.get_base_url() == "https://override.test"


def test_invalid_retry_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("LAYERX_MAX_RETRIES", "many")

    assert settings.get_retry_policy() == RetryPolicy()


def test_set_config_is_visible_to_get_config():
    settings.set_config("logging.level", "DEBUG")

    assert settings.get_config("logging.level") == "DEBUG"


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("False", False), ("3", 3), ("2.5", 2.5), ("text", "text")],
)
def test_environment_values_are_coerced(raw, expected):
    assert settings._coerce(raw) == expected


@pytest.mark.parametrize(
    "level, expected",
    [("debug", logging.DEBUG), (logging.INFO, logging.INFO), (None, logging.WARNING), ("nonsense", logging.WARNING)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected
