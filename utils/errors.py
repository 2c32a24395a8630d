"""Error taxonomy for the Frappe client.

Every low-level failure (requests exceptions, socket errors, JSON errors) is
logged where it happens and re-raised as one of these coarse kinds:

- RequestPreparationFailed: the request could not be built, no I/O happened
- RequestFailed: network-level failure, including timeouts
- ResponseReadFailed: connected, but the body could not be read
- ResponseDecodeFailed: body read, but JSON decoding into the target failed
- LoginFailed: the session login call failed
"""


class FrappeClientError(Exception):
    """Base exception for all client errors

    Attributes:
        message: Human-readable error message
        code: Stable error code for caller-side handling
    """

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


class RequestPreparationFailed(FrappeClientError):
    """Malformed verb, URL or headers, detected before any network I/O."""

    def __init__(self, message: str = "request preparation failed"):
        super().__init__(message, "REQUEST_PREPARATION_FAILED")


class RequestFailed(FrappeClientError):
    """Connection refused, DNS or TLS failure, or timeout."""

    def __init__(self, message: str = "request failed"):
        super().__init__(message, "REQUEST_FAILED")


class ResponseReadFailed(FrappeClientError):
    def __init__(self, message: str = "error reading response"):
        super().__init__(message, "RESPONSE_READ_FAILED")


class ResponseDecodeFailed(FrappeClientError):
    """The body was read but could not be decoded.

    The envelope is still valid and is kept on ``response`` so callers can
    inspect the raw bytes (e.g. an HTML error page).
    """

    def __init__(self, response, message: str = "error parsing response"):
        self.response = response
        super().__init__(message, "RESPONSE_DECODE_FAILED")


class LoginFailed(FrappeClientError):
    """Session login failed. ``reason`` is the code of the underlying failure."""

    def __init__(self, message: str = "login failed", reason: str = ""):
        self.reason = reason
        super().__init__(message, "LOGIN_FAILED")


class ConfigError(ValueError):
    """Configuration loading/validation error."""
