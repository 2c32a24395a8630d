# http_client.py - requests-based transport used by the Frappe client
"""
Turns (verb, url, params, headers) into one HTTP request on a persistent
requests.Session and returns the raw body plus the response metadata.

Encoding rules depend only on the verb:
  - POST / PUT: params are form-encoded into the body
  - GET / DELETE: params are form-encoded into the query string, no body

All failures surface as one of the errors in utils.errors.
"""

import json
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Type
from urllib.parse import urlencode

import requests
from pydantic import BaseModel, ValidationError
from requests import Request, exceptions as req_exceptions
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from utils.errors import RequestFailed, RequestPreparationFailed, ResponseDecodeFailed, ResponseReadFailed
from utils.logger import get_logger, redact_headers

DEFAULT_TIMEOUT = 5
MAX_IDLE_CONNS_PER_HOST = 10
USER_AGENT = "frappe-api-client/0.1.0"

BODY_METHODS = ("POST", "PUT")
QUERY_METHODS = ("GET", "DELETE")
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# body bytes shown in decode-failure logs
LOG_BODY_PREVIEW = 512


@dataclass(frozen=True)
class HTTPResponse:
    """Raw response body plus the underlying requests.Response."""

    body: bytes
    response: requests.Response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self):
        return self.response.headers

    @property
    def text(self) -> str:
        return self.body.decode(self.response.encoding or "utf-8", errors="replace")


def encode_params(params: Optional[Mapping[str, Any]]) -> bytes:
    """Standard form encoding, keys sorted."""
    if not params:
        return b""
    return urlencode(sorted(params.items())).encode("ascii")


def new_session(pool_size=MAX_IDLE_CONNS_PER_HOST):
    """Keep-alive session with a bounded idle pool per host and no default headers."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    # the transport builds the complete header set for every request
    session.headers.clear()
    return session


class _Exchange(threading.Thread):
    """Sends one prepared request and reads the whole body off the caller's thread."""

    def __init__(self, session, prepared, timeout, settings):
        super().__init__(daemon=True)
        self.session = session
        self.prepared = prepared
        self.timeout = timeout
        self.settings = settings
        self.response = None
        self.content = None
        self.send_error = None
        self.read_error = None

    def run(self):
        try:
            r = self.session.send(self.prepared, timeout=(self.timeout, self.timeout), **self.settings)
        except Exception as e:
            self.send_error = e
            return
        try:
            self.content = r.content
        except req_exceptions.RequestException as e:
            self.read_error = e
        except Exception as e:
            self.send_error = e
        finally:
            r.close()
        self.response = r


class HTTPClient:
    def __init__(self, session=None, logger=None, debug=False,
                 timeout=DEFAULT_TIMEOUT):
        self.session = session if session is not None else new_session()
        self.logger = logger or get_logger("frappe.http")
        self.debug = debug
        self.timeout = timeout

    def do(self, method: str, url: str, params: Optional[Mapping[str, Any]] = None,
           headers: Optional[Mapping[str, str]] = None) -> HTTPResponse:
        """Form-encode ``params`` and execute the request."""
        try:
            body = encode_params(params)
        except (TypeError, UnicodeError) as e:
            self.logger.error("Request preparation failed: cannot encode params: %s", e)
            raise RequestPreparationFailed("request preparation failed: invalid params") from None
        return self.do_raw(method, url, body, headers)

    def do_raw(self, method: str, url: str, body: bytes = b"",
               headers: Optional[Mapping[str, str]] = None) -> HTTPResponse:
        """
        Execute a request with an already-encoded body.

        Caller headers, when given, replace the default header set (they are
        copied, never mutated). Accept is always application/json.
        """
        method = (method or "").upper()
        if method not in BODY_METHODS + QUERY_METHODS:
            self.logger.error("Request preparation failed: unsupported method %r", method)
            raise RequestPreparationFailed(f"request preparation failed: unsupported method {method!r}")

        if headers is not None:
            req_headers = CaseInsensitiveDict(headers)
        else:
            req_headers = CaseInsensitiveDict({"User-Agent": USER_AGENT})
        req_headers["Accept"] = "application/json"

        data = None
        query = None
        if method in BODY_METHODS:
            data = body or b""
            if not req_headers.get("Content-Type"):
                req_headers["Content-Type"] = FORM_CONTENT_TYPE
        elif body:
            query = body

        try:
            prepared = self.session.prepare_request(
                Request(method, url, headers=req_headers, data=data, params=query)
            )
            settings = self.session.merge_environment_settings(prepared.url, {}, None, None, None)
        except (req_exceptions.RequestException, ValueError) as e:
            self.logger.error("Request preparation failed: %s", e)
            raise RequestPreparationFailed() from None
        settings["stream"] = True

        exchange = _Exchange(self.session, prepared, self.timeout, settings)
        exchange.start()
        # requests' timeout only bounds each socket operation; this bounds the whole call
        exchange.join(self.timeout)
        if exchange.is_alive():
            self.logger.error("Request failed: %s %s: no complete response within %ss",
                              method, prepared.url, self.timeout)
            raise RequestFailed() from None

        e = exchange.send_error
        if isinstance(e, (req_exceptions.InvalidSchema, req_exceptions.InvalidURL, req_exceptions.MissingSchema)):
            # rejected before a connection was attempted
            self.logger.error("Request preparation failed: %s", e)
            raise RequestPreparationFailed() from None
        if isinstance(e, req_exceptions.RequestException):
            self.logger.error("Request failed: %s %s: %s", method, prepared.url, e)
            raise RequestFailed() from None
        if e is not None:
            raise e
        if exchange.read_error is not None:
            self.logger.error("Unable to read response: %s %s: %s", method, prepared.url, exchange.read_error)
            raise ResponseReadFailed() from None

        r = exchange.response
        if self.debug:
            self.logger.info("%s %s -- %d %s", method, prepared.url, r.status_code,
                             redact_headers(prepared.headers))

        return HTTPResponse(body=exchange.content, response=r)

    def do_json(self, method: str, url: str, params: Optional[Mapping[str, Any]] = None,
                headers: Optional[Mapping[str, str]] = None,
                model: Optional[Type[BaseModel]] = None) -> Tuple[HTTPResponse, Any]:
        """
        Execute the request and decode the body as JSON.

        Returns (response, decoded). With ``model`` the decoded JSON is
        validated into that pydantic model. On failure ResponseDecodeFailed
        is raised and still carries the response.
        """
        resp = self.do(method, url, params, headers)

        try:
            decoded = json.loads(resp.body)
            if model is not None:
                decoded = model.model_validate(decoded)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            self.logger.error("Error parsing JSON response: %s | %r", e, resp.body[:LOG_BODY_PREVIEW])
            raise ResponseDecodeFailed(resp) from None

        return resp, decoded
