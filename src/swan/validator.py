"""Validation of the common parameters a publisher sends to fetch/update."""

from __future__ import annotations

from urllib.parse import urlparse

from swan.composer import QueryValues
from swan.config import SwanConfig
from swan.errors import ConfigurationError, ValidationError

FLAGS = ("displayUserInterface", "postMessageOnComplete", "useHomeNode", "javaScript")
TEXT_FIELDS = ("title", "message")
MAX_TEXT_LENGTH = 200


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_common(config: SwanConfig, params: QueryValues) -> None:
    """Raise if the relay or the publisher's request can't start an operation.

    Checks run before the access node is resolved, so a rejected request
    never reaches the network.
    """
    if not config.network:
        raise ConfigurationError("No network configured. Set network in the [swan] section.")
    if config.scheme not in ("http", "https"):
        raise ConfigurationError(f"Scheme '{config.scheme}' must be http or https")

    return_url = params.get("returnUrl")
    if not return_url:
        raise ValidationError("returnUrl", "is required")
    if not _is_http_url(return_url):
        raise ValidationError("returnUrl", "must be an absolute http or https URL")

    for flag in FLAGS:
        value = params.get(flag)
        if value is not None and value.lower() not in ("true", "false"):
            raise ValidationError(flag, "must be 'true' or 'false'")

    for name in TEXT_FIELDS:
        value = params.get(name)
        if value is not None and len(value) > MAX_TEXT_LENGTH:
            raise ValidationError(name, f"must be at most {MAX_TEXT_LENGTH} characters")
