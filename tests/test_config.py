# tests/test_config.py - environment settings and strategy selection
import pytest

from utils.auth import BasicAuth, LoginAuth, TokenAuth
from utils.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, load_settings
from utils.errors import ConfigError


def test_defaults():
    settings = load_settings({})

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.debug is False
    assert settings.auth_scheme == "token"


def test_api_key_defaults_to_token():
    settings = load_settings({"FRAPPE_API_KEY": "k", "FRAPPE_API_SECRET": "s"})

    assert settings.auth() == TokenAuth("k", "s")


def test_basic_scheme():
    settings = load_settings({"FRAPPE_API_KEY": "k", "FRAPPE_API_SECRET": "s", "FRAPPE_AUTH": "Basic"})

    assert settings.auth() == BasicAuth("k", "s")


def test_api_key_wins_over_login():
    env = {"FRAPPE_API_KEY": "k", "FRAPPE_API_SECRET": "s", "FRAPPE_USER": "u", "FRAPPE_PASSWORD": "p"}

    assert isinstance(load_settings(env).auth(), TokenAuth)


def test_login_credentials():
    settings = load_settings({"FRAPPE_USER": "u", "FRAPPE_PASSWORD": ""})

    assert settings.auth() == LoginAuth("u", "")


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), (" ON ", True), ("0", False), ("", False)])
def test_debug_flag(value, expected):
    assert load_settings({"FRAPPE_DEBUG": value}).debug is expected


@pytest.mark.parametrize(
    "env",
    [
        {},
        {"FRAPPE_API_KEY": "k"},
        {"FRAPPE_USER": "u"},
        {"FRAPPE_API_KEY": "k", "FRAPPE_API_SECRET": "s", "FRAPPE_AUTH": "bearer"},
    ],
)
def test_incomplete_credentials(env):
    with pytest.raises(ConfigError):
        load_settings(env).auth()


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_bad_timeout(value):
    with pytest.raises(ConfigError):
        load_settings({"FRAPPE_TIMEOUT": value})


def test_timeout_parsed():
    assert load_settings({"FRAPPE_TIMEOUT": "2.5"}).timeout == 2.5
