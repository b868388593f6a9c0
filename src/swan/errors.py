"""Error taxonomy for the SWAN relay.

Every error is terminal for the request that raised it. The app's
exception handler turns a SwanError into a plain-text response using
``status_code``; ``kind`` tags the failure for logging and tests.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    UPSTREAM = "upstream"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    ENCODING = "encoding"


class SwanError(Exception):
    """Base class for all relay errors."""

    kind: ErrorKind = ErrorKind.CONFIGURATION
    status_code: int = 500


class AuthorizationError(SwanError):
    kind = ErrorKind.AUTHORIZATION
    status_code = 401


class ValidationError(SwanError):
    """Malformed publisher request."""

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ResultFormatError(ValidationError):
    """Decrypted payload could not be parsed into results."""

    status_code = 422

    def __init__(self, message: str):
        super().__init__("data", message)


class UpstreamError(SwanError):
    """A downstream call answered with a non-success status."""

    kind = ErrorKind.UPSTREAM
    status_code = 502

    def __init__(self, url: str, status: int, body: str):
        self.url = url
        self.status = status
        self.body = body
        super().__init__(f"API call '{url}' returned '{status}' and '{body}'")


class NetworkError(SwanError):
    """A downstream call could not be completed at the transport level."""

    kind = ErrorKind.NETWORK
    status_code = 502

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"API call '{url}' failed: {reason}")


class ConfigurationError(SwanError):
    """Operator action required: unregistered creator, uninitialised network."""

    kind = ErrorKind.CONFIGURATION
    status_code = 500


class EncodingError(SwanError):
    kind = ErrorKind.ENCODING
    status_code = 500
