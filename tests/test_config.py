import logging

import pytest

from app import create_app
from common.logging import APP_LOGGER, get_logger, set_level
from plugins.unit_converter.core import InvalidCategoryError, InvalidValueError


def _write_config(tmp_path, text: str):
    path = tmp_path / "config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(tmp_path / "absent.yml"))
    app = create_app("TestingConfig")
    assert app.config["PLUGIN_SETTINGS"] == {}
    assert app.config["MAX_CONTENT_LENGTH"] == 1024 * 1024
    response = app.test_client().post(
        "/convert",
        json={
            "value": 212,
            "from_unit": "Fahrenheit",
            "to_unit": "Celsius",
            "conversion_type": "temperature",
        },
    )
    assert response.get_json()["result"] == 100


def test_site_settings_are_applied(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path, "site:\n  name: Kitchen\n  max_content_length_kb: 2\n"
    )
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    app = create_app("TestingConfig")
    assert app.config["MAX_CONTENT_LENGTH"] == 2048
    payload = app.test_client().get("/").get_json()
    assert payload["data"]["name"] == "Kitchen"


def test_disabled_plugin_is_not_registered(tmp_path, monkeypatch):
    path = _write_config(tmp_path, "plugins:\n  unit_converter:\n    enabled: false\n")
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    app = create_app("TestingConfig")
    client = app.test_client()
    assert client.get("/categories").status_code == 404
    assert client.get("/").get_json()["data"]["plugins"] == []


def test_misconfigured_non_negative_category_fails_fast(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path,
        "plugins:\n  unit_converter:\n    non_negative_categories: [mass]\n",
    )
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    with pytest.raises(InvalidCategoryError):
        create_app("TestingConfig")


def test_default_notation_from_config(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path,
        "plugins:\n  unit_converter:\n    default_notation: scientific\n",
    )
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    client = create_app("TestingConfig").test_client()
    response = client.post(
        "/convert",
        json={
            "value": 1,
            "from_unit": "kg",
            "to_unit": "grams",
            "conversion_type": "weight",
        },
    )
    assert response.get_json()["data"]["formatted"] == "1.000000e+03"


def test_module_loggers_share_app_handler():
    logger = get_logger("engine")
    assert logger.name == f"{APP_LOGGER}.engine"
    assert get_logger(f"{APP_LOGGER}.api").name == f"{APP_LOGGER}.api"
    assert logging.getLogger(APP_LOGGER).handlers


def test_conversion_is_logged(client_with_logs):
    client, caplog = client_with_logs
    client.post(
        "/convert",
        json={
            "value": 0,
            "from_unit": "Celsius",
            "to_unit": "Fahrenheit",
            "conversion_type": "temperature",
        },
    )
    messages = [record.getMessage() for record in caplog.records]
    assert any("temperature: 0 Celsius -> 32.0 Fahrenheit" in m for m in messages)
    assert any("POST /convert -> 200" in m for m in messages)


@pytest.fixture
def client_with_logs(caplog):
    caplog.set_level(logging.INFO, logger=APP_LOGGER)
    return create_app("TestingConfig").test_client(), caplog


def test_site_settings_survive_named_config(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path, "site:\n  max_content_length_kb: 1\n  log_level: WARNING\n"
    )
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    app = create_app("TestingConfig")
    assert app.config["TESTING"] is True
    assert app.config["LOG_LEVEL"] == "WARNING"
    assert app.config["MAX_CONTENT_LENGTH"] == 1024
    assert logging.getLogger(APP_LOGGER).level == logging.WARNING
    set_level("INFO")


def test_misconfigured_default_notation_fails_fast(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path, "plugins:\n  unit_converter:\n    default_notation: bogus\n"
    )
    monkeypatch.setenv("UNIT_CONVERTER_CONFIG", str(path))
    with pytest.raises(InvalidValueError):
        create_app("TestingConfig")
