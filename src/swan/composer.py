"""Builds and issues "create storage operation" requests to the access node."""

from __future__ import annotations

import calendar
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Union
from urllib.parse import urlencode

from swan.resolver import AccessNodeResolver
from swan.swift import CREATE_PATH, StorageOperationClient

# Every operation the relay creates writes to the SWAN table.
TABLE = "swan"


@dataclass(frozen=True)
class CompositeKey:
    """A field name paired with the date SWIFT should expire its value."""

    field: str
    expires: date

    def __str__(self) -> str:
        return f"{self.field}<{self.expires:%Y-%m-%d}"

    @classmethod
    def parse(cls, text: str) -> CompositeKey:
        name, sep, when = text.partition("<")
        if not sep or not name:
            raise ValueError(f"'{text}' is not a composite key")
        return cls(name, date.fromisoformat(when))


Key = Union[str, CompositeKey]


class QueryValues:
    """Ordered multi-valued query parameters, like a parsed form.

    Keys may be plain strings or CompositeKeys; composite keys stay
    structured until ``encode`` renders them for the wire. A string key in
    composite form is parsed on the way in, so setting the equivalent
    CompositeKey replaces it.
    """

    def __init__(self, pairs: Iterable[tuple[Key, str]] = ()):
        self._values: dict[Key, list[str]] = {}
        for key, value in pairs:
            self.add(key, value)

    @staticmethod
    def _normalise(key: Key) -> Key:
        if isinstance(key, str) and "<" in key:
            try:
                parsed = CompositeKey.parse(key)
            except ValueError:
                return key
            if str(parsed) == key:
                return parsed
        return key

    def add(self, key: Key, value: str) -> None:
        self._values.setdefault(self._normalise(key), []).append(value)

    def set(self, key: Key, value: str) -> None:
        self._values[self._normalise(key)] = [value]

    def get(self, key: Key, default: str | None = None) -> str | None:
        values = self._values.get(self._normalise(key))
        return values[0] if values else default

    def pop(self, key: Key, default: str = "") -> str:
        values = self._values.pop(self._normalise(key), None)
        return values[0] if values else default

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (str, CompositeKey)):
            key = self._normalise(key)
        return key in self._values

    def encode(self) -> str:
        """URL-encode with keys sorted by their wire form."""
        items = sorted(self._values.items(), key=lambda kv: str(kv[0]))
        return urlencode([(str(k), v) for k, vs in items for v in vs])


Injector = Callable[[QueryValues], None]


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month."""
    index = day.month - 1 + months
    year, month = day.year + index // 12, index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last))


def default_expiry_date(now: datetime | None = None) -> date:
    """Expiry used for SWAN fields: three months from today (UTC)."""
    today = (now or datetime.now(timezone.utc)).date()
    return add_months(today, 3)


def inject_new_identity(expires: date | None = None) -> Injector:
    """Fetch flow: a fresh common browser id and blank email/allow fields."""
    expires = expires or default_expiry_date()

    def inject(q: QueryValues) -> None:
        q.set(CompositeKey("cbid", expires), str(uuid.uuid4()))
        q.set(CompositeKey("email", expires), "")
        q.set(CompositeKey("allow", expires), "")

    return inject


def inject_supplied_values(expires: date | None = None) -> Injector:
    """Update flow: move the publisher's cbid, email and allow under expiry keys."""
    expires = expires or default_expiry_date()

    def inject(q: QueryValues) -> None:
        for name in ("cbid", "email", "allow"):
            q.set(CompositeKey(name, expires), q.pop(name))

    return inject


class StorageURLComposer:
    def __init__(
        self,
        resolver: AccessNodeResolver,
        client: StorageOperationClient,
        scheme: str,
    ):
        self.resolver = resolver
        self.client = client
        self.scheme = scheme

    def build_url(self, params: QueryValues, inject: Injector) -> str:
        access_node = self.resolver.resolve()
        inject(params)
        params.set("table", TABLE)
        return f"{self.scheme}://{access_node}{CREATE_PATH}?{params.encode()}"

    def create_storage_operation_url(self, params: QueryValues, inject: Injector) -> str:
        """Return the first storage operation URL from the access node."""
        return self.client.fetch_operation_url(self.build_url(params, inject))
