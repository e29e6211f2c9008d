import logging
import os
from pathlib import Path

import pytest

from ganjoorcli.infrastructure.config import settings
from ganjoorcli.infrastructure.monitoring.logger_setup import level_from_name, setup_logging


@pytest.fixture
def fresh_settings(monkeypatch):
    """Lets a test run load_configuration from scratch."""
    monkeypatch.setattr(settings, "_loaded", False)
    monkeypatch.setattr(settings, "_config", {})
    return settings


def test_defaults():
    assert settings.get_api_base_url() == "http://localhost:8000/api"
    assert settings.get_request_timeout() == 10.0
    assert settings.get_read_backoff() == {"max_attempts": 5, "initial_delay": 2.0, "factor": 2.0}
    assert settings.get_write_backoff() == {"max_attempts": 3, "initial_delay": 1.0, "factor": 2.0}
    assert settings.get_crawl_page_delay() == 0.2
    assert settings.get_crawl_max_pages() == 10
    assert settings.get_env_auth_token() is None


def test_env_var_name():
    assert settings.env_var_name("api.base_url") == "GANJOOR_API_BASE_URL"
    assert settings.env_var_name("retry.read.max_attempts") == "GANJOOR_RETRY_READ_MAX_ATTEMPTS"


def test_environment_values_are_coerced(monkeypatch):
    monkeypatch.setenv("GANJOOR_CRAWL_MAX_PAGES", "3")
    monkeypatch.setenv("GANJOOR_CRAWL_PAGE_DELAY", "0.05")
    monkeypatch.setenv("GANJOOR_FEATURE_ENABLED", "true")

    assert settings.get_crawl_max_pages() == 3
    assert settings.get_crawl_page_delay() == 0.05
    assert settings.get_config("feature.enabled") is True


def test_base_url_trailing_slash_is_stripped(monkeypatch):
    monkeypatch.setenv("GANJOOR_API_BASE_URL", "https://ganjoor.example/api/")
    assert settings.get_api_base_url() == "https://ganjoor.example/api"


def test_yaml_nested_sections(fresh_settings, tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "api:\n  base_url: http://yaml.test/api\n  timeout: 4\n"
        "retry:\n  read:\n    max_attempts: 2\n",
        encoding="utf-8",
    )

    fresh_settings.load_configuration(config_file=config_file, env_file=tmp_path / "absent.env")

    assert fresh_settings.get_api_base_url() == "http://yaml.test/api"
    assert fresh_settings.get_request_timeout() == 4.0
    assert fresh_settings.get_read_backoff()["max_attempts"] == 2
    assert fresh_settings.get_read_backoff()["initial_delay"] == 2.0


def test_environment_overrides_yaml(fresh_settings, tmp_path: Path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api:\n  base_url: http://yaml.test/api\n", encoding="utf-8")
    monkeypatch.setenv("GANJOOR_API_BASE_URL", "http://env.test/api")

    fresh_settings.load_configuration(config_file=config_file, env_file=tmp_path / "absent.env")

    assert fresh_settings.get_api_base_url() == "http://env.test/api"


def test_dotenv_file_is_loaded(fresh_settings, tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("GANJOOR_AUTH_TOKEN=from-dotenv\n", encoding="utf-8")
    try:
        fresh_settings.load_configuration(config_file=tmp_path / "none.yaml", env_file=env_file)
        assert fresh_settings.get_env_auth_token() == "from-dotenv"
    finally:
        os.environ.pop("GANJOOR_AUTH_TOKEN", None)


def test_invalid_yaml_is_ignored(fresh_settings, tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("api: [unclosed\n", encoding="utf-8")

    fresh_settings.load_configuration(config_file=config_file, env_file=tmp_path / "absent.env")

    assert fresh_settings.get_api_base_url() == settings.DEFAULT_API_BASE_URL


def test_test_overrides_win(monkeypatch):
    monkeypatch.setenv("GANJOOR_CRAWL_MAX_PAGES", "3")
    settings.set_config_for_testing({"crawl.max_pages": 7})

    assert settings.get_crawl_max_pages() == 7


def test_session_file_points_at_test_location(tmp_path: Path):
    assert settings.get_session_file() == tmp_path / "session.json"


@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    ("INFO", logging.INFO),
    ("nonsense", logging.WARNING),
    (None, logging.WARNING),
])
def test_level_from_name(name, expected):
    assert level_from_name(name) == expected


def test_setup_logging_quiets_http_libraries():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(logging.DEBUG)
        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_command_line_override_beats_environment(monkeypatch):
    monkeypatch.setenv("GANJOOR_API_BASE_URL", "http://env.example/api")

    settings.set_config("api.base_url", "http://flag.example/api")

    assert settings.get_api_base_url() == "http://flag.example/api"


def test_command_line_override_beats_yaml(fresh_settings, tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("crawl:\n  max_pages: 4\n", encoding="utf-8")
    fresh_settings.load_configuration(config_file=config_file, env_file=tmp_path / "absent.env")

    fresh_settings.set_config("crawl.max_pages", 2)

    assert fresh_settings.get_crawl_max_pages() == 2


@pytest.mark.parametrize("raw, expected", [
    ("true", True),
    ("False", False),
    ("18", 18),
    ("0.5", 0.5),
    ("classic", "classic"),
])
def test_coerce_value(raw, expected):
    assert settings.coerce_value(raw) == expected
