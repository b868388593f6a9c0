"""Results decrypted by the access node, and their expiry stamping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from swan.errors import ResultFormatError


class Result(BaseModel):
    """One key/value pair from a decrypted SWIFT blob."""

    key: str
    value: str
    expires: datetime | None = None


class _ResultDocument(BaseModel):
    values: list[Result]


_documents = TypeAdapter(Union[_ResultDocument, list[Result]])


def decode_results(raw: bytes) -> list[Result]:
    """Parse the access node's decrypt response into an ordered result list.

    Accepts ``{"values": [...]}`` or a bare array of result objects.
    """
    if not raw or not raw.strip():
        raise ResultFormatError("decrypted payload is empty")
    try:
        doc = _documents.validate_json(raw)
    except PydanticValidationError as exc:
        raise ResultFormatError(
            f"decrypted payload is not a result set ({exc.error_count()} errors)"
        ) from exc
    if isinstance(doc, _ResultDocument):
        return doc.values
    return doc


class ExpiryStamper:
    """Sets a uniform expiry of now (UTC) plus the configured timeout."""

    def __init__(self, timeout_seconds: int):
        self.timeout = timedelta(seconds=timeout_seconds)

    def expires_at(self, now: datetime | None = None) -> datetime:
        return (now or datetime.now(timezone.utc)) + self.timeout

    def stamp(self, results: list[Result], now: datetime | None = None) -> list[Result]:
        expires = self.expires_at(now)
        for result in results:
            result.expires = expires
        return results
