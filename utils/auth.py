# utils/auth.py - the closed set of authentication strategies
import base64
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class LoginAuth:
    """Username/password login. Sets a session cookie, sends no header."""

    username: str
    password: str

    def header(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class BasicAuth:
    """API key + secret sent as ``Authorization: Basic base64(key:secret)``."""

    api_key: str
    api_secret: str

    def header(self) -> Optional[str]:
        tk = base64.b64encode(f"{self.api_key}:{self.api_secret}".encode("utf-8")).decode("ascii")
        return f"Basic {tk}"


@dataclass(frozen=True)
class TokenAuth:
    """API key + secret sent as ``Authorization: token key:secret``."""

    api_key: str
    api_secret: str

    def header(self) -> Optional[str]:
        return f"token {self.api_key}:{self.api_secret}"


Auth = Union[LoginAuth, BasicAuth, TokenAuth]
AUTH_TYPES = (LoginAuth, BasicAuth, TokenAuth)
