import pytest

from common.api_error import ConfigurationError
from common.config import (
    EnvLogBackends,
    get_config,
    initialize_config,
    load_app_config,
)


def test_loaded_config_from_environment():
    config = load_app_config()
    assert config.clinic_api.base_url == "http://clinic.test"
    assert config.clinic_api.timeout == 5.0
    assert config.clinic_api.verify_ssl is True
    assert config.logging.log_backend == EnvLogBackends.CONSOLE
    assert str(config.tz) == "UTC"


def test_trailing_slash_is_stripped(monkeypatch):
    monkeypatch.setenv("CLINIC_API_URL", "https://clinic.example.com/")
    assert load_app_config().clinic_api.base_url == "https://clinic.example.com"


def test_verify_ssl_flag(monkeypatch):
    monkeypatch.setenv("CLINIC_API_VERIFY_SSL", "false")
    assert load_app_config().clinic_api.verify_ssl is False

    monkeypatch.setenv("CLINIC_API_VERIFY_SSL", "maybe")
    with pytest.raises(ConfigurationError):
        load_app_config()


def test_missing_variable_fails_fast(monkeypatch):
    monkeypatch.delenv("CLINIC_API_URL")
    with pytest.raises(ConfigurationError, match="CLINIC_API_URL"):
        initialize_config()
    # the previous configuration stays in place
    assert get_config().clinic_api.base_url == "http://clinic.test"


@pytest.mark.parametrize(
    "env, message",
    [
        ({"CLINIC_API_URL": "clinic.test"}, "base_url"),
        ({"CLINIC_API_TIMEOUT": "fast"}, "must be numbers"),
        ({"APP_VERSION": "v1"}, "app_version"),
        ({"CLINIC_TIMEZONE": "Mars/Olympus"}, "Unknown time zone"),
        ({"ENVIRONMENT": "qa"}, "Invalid ENVIRONMENT"),
        ({"LOG_BACKEND": "datadog"}, "LOG_BACKEND"),
        ({"ENVIRONMENT": "production"}, "https"),
        (
            {"ENVIRONMENT": "production", "CLINIC_API_URL": "https://clinic.test", "LOG_LEVEL": "DEBUG"},
            "DEBUG",
        ),
    ],
)
def test_invalid_configuration(monkeypatch, env, message):
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError, match=message):
        initialize_config()
