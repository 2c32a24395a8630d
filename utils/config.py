# utils/config.py - environment-driven settings for building a client
import os
from dataclasses import dataclass
from typing import Optional

from utils.auth import Auth, BasicAuth, LoginAuth, TokenAuth
from utils.errors import ConfigError

DEFAULT_BASE_URL = "http://localhost:8000/"
DEFAULT_TIMEOUT = 7.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    auth_scheme: str = "token"
    username: Optional[str] = None
    password: Optional[str] = None
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def auth(self) -> Auth:
        """Pick the strategy: API key/secret first, then username/password."""
        if self.api_key:
            if not self.api_secret:
                raise ConfigError("FRAPPE_API_SECRET is required when FRAPPE_API_KEY is set")
            if self.auth_scheme == "basic":
                return BasicAuth(self.api_key, self.api_secret)
            if self.auth_scheme == "token":
                return TokenAuth(self.api_key, self.api_secret)
            raise ConfigError(f"unknown FRAPPE_AUTH scheme: {self.auth_scheme!r} (expected 'token' or 'basic')")
        if self.username:
            if self.password is None:
                raise ConfigError("FRAPPE_PASSWORD is required when FRAPPE_USER is set")
            return LoginAuth(self.username, self.password)
        raise ConfigError("no credentials: set FRAPPE_API_KEY/FRAPPE_API_SECRET or FRAPPE_USER/FRAPPE_PASSWORD")


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    timeout_raw = env.get("FRAPPE_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"FRAPPE_TIMEOUT must be a number, got {timeout_raw!r}") from None
    if timeout <= 0:
        raise ConfigError("FRAPPE_TIMEOUT must be positive")

    return Settings(
        base_url=env.get("FRAPPE_BASE_URL", DEFAULT_BASE_URL),
        api_key=env.get("FRAPPE_API_KEY") or None,
        api_secret=env.get("FRAPPE_API_SECRET") or None,
        auth_scheme=env.get("FRAPPE_AUTH", "token").strip().lower(),
        username=env.get("FRAPPE_USER") or None,
        password=env.get("FRAPPE_PASSWORD"),
        debug=env.get("FRAPPE_DEBUG", "").strip().lower() in _TRUTHY,
        timeout=timeout,
    )
