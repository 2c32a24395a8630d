# api_client.py - Frappe API client bound to one base URI and one auth strategy
from requests.structures import CaseInsensitiveDict

from http_client import HTTPClient, new_session
from utils.auth import AUTH_TYPES, BasicAuth, LoginAuth, TokenAuth
from utils.config import load_settings
from utils.errors import FrappeClientError, LoginFailed
from utils.logger import get_logger

REQUEST_TIMEOUT = 7
API_METHOD_PREFIX = "api/method/"

__all__ = [
    "API_METHOD_PREFIX",
    "REQUEST_TIMEOUT",
    "BasicAuth",
    "FrappeClient",
    "LoginAuth",
    "TokenAuth",
]


class FrappeClient:
    """
    Proxy for ``{base_uri}api/method/<method>`` calls.

    The auth strategy is resolved once here: LoginAuth logs in immediately
    (the session cookie jar then carries the session), BasicAuth / TokenAuth
    yield a static Authorization header sent with every call. A session that
    expires later is not re-established automatically; call login() again.
    """

    def __init__(self, base_uri, auth, debug=False, logger=None, timeout=REQUEST_TIMEOUT):
        if not isinstance(auth, AUTH_TYPES):
            raise TypeError(f"unsupported auth strategy: {type(auth).__name__}")
        self.base_uri = base_uri
        self.auth = auth
        self.debug = debug
        self.timeout = timeout
        self.logger = logger or get_logger("frappe.client")
        self._auth_header = auth.header()
        self.set_session(new_session())

        if isinstance(auth, LoginAuth):
            self.login()

    @classmethod
    def from_env(cls, environ=None, logger=None):
        """Build a client from FRAPPE_* environment variables."""
        settings = load_settings(environ)
        return cls(settings.base_url, settings.auth(), debug=settings.debug, logger=logger,
                   timeout=settings.timeout)

    @property
    def auth_header(self):
        return self._auth_header

    @property
    def session(self):
        return self.http.session

    def set_session(self, session):
        """
        Route all calls through ``session`` (its cookie jar carries the login).

        The session's default headers are cleared: every request carries only
        the header set the transport builds.
        """
        session.headers.clear()
        self.http = HTTPClient(session, logger=self.logger, debug=self.debug, timeout=self.timeout)

    def login(self):
        """POST cmd=login/usr/pwd to the base URI; cookies land in the session jar."""
        if not isinstance(self.auth, LoginAuth):
            raise TypeError("login() requires LoginAuth")
        params = {
            "cmd": "login",
            "usr": self.auth.username,
            "pwd": self.auth.password,
        }
        try:
            self.http.do("POST", self.base_uri, params, None)
        except FrappeClientError as e:
            self.logger.error("Login failed for user %s: %s", self.auth.username, e.code)
            raise LoginFailed(f"login failed: {e.message}", reason=e.code) from None

    def method_url(self, method: str) -> str:
        return self.base_uri + API_METHOD_PREFIX + method

    def _with_auth(self, headers):
        if self._auth_header is None:
            return headers
        merged = CaseInsensitiveDict(headers or {})
        merged["Authorization"] = self._auth_header
        return merged

    def do(self, http_method, method, params=None, headers=None):
        return self.http.do(http_method, self.method_url(method), params, self._with_auth(headers))

    def do_json(self, http_method, method, params=None, headers=None, model=None):
        """Like do(), returning (response, decoded JSON or ``model`` instance)."""
        return self.http.do_json(http_method, self.method_url(method), params, self._with_auth(headers),
                                 model=model)
