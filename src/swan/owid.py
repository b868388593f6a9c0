"""OWID tokens: signed envelopes binding a payload to a creator domain.

Binary layout (little endian), base64 encoded for transport:

    version:u8 | domain utf-8 | 0x00 | minutes since 2020-01-01:u32
    | payload length:u32 | payload | Ed25519 signature (64 bytes)

The signature covers every byte before it.
"""

from __future__ import annotations

import base64
import binascii
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from swan.errors import ConfigurationError, EncodingError

OWID_VERSION = 1
SIGNATURE_LENGTH = 64
EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)


def _minutes_since_epoch(when: datetime) -> int:
    return int((when - EPOCH).total_seconds() // 60)


@dataclass
class Owid:
    domain: str
    date: datetime
    payload: bytes
    signature: bytes = b""
    version: int = OWID_VERSION

    def unsigned_bytes(self) -> bytes:
        domain = self.domain.encode("utf-8")
        return b"".join(
            [
                struct.pack("<B", self.version),
                domain,
                b"\x00",
                struct.pack("<I", _minutes_since_epoch(self.date)),
                struct.pack("<I", len(self.payload)),
                self.payload,
            ]
        )

    def as_bytes(self) -> bytes:
        if len(self.signature) != SIGNATURE_LENGTH:
            raise EncodingError(f"OWID for '{self.domain}' is not signed")
        return self.unsigned_bytes() + self.signature

    def as_base64(self) -> str:
        return base64.b64encode(self.as_bytes()).decode("ascii")

    def verify(self, verify_key: VerifyKey) -> bool:
        """True when the signature matches this OWID's content."""
        try:
            verify_key.verify(self.unsigned_bytes(), self.signature)
        except BadSignatureError:
            return False
        return True

    @classmethod
    def from_bytes(cls, data: bytes) -> Owid:
        try:
            version = data[0]
            end = data.index(b"\x00", 1)
            domain = data[1:end].decode("utf-8")
            minutes, length = struct.unpack_from("<II", data, end + 1)
            start = end + 9
            payload = data[start : start + length]
            signature = data[start + length :]
        except (IndexError, ValueError, struct.error) as exc:
            raise EncodingError(f"Malformed OWID: {exc}") from exc
        if len(payload) != length or len(signature) != SIGNATURE_LENGTH:
            raise EncodingError("Malformed OWID: truncated")
        return cls(
            domain=domain,
            date=EPOCH + timedelta(minutes=minutes),
            payload=payload,
            signature=signature,
            version=version,
        )

    @classmethod
    def from_base64(cls, token: str) -> Owid:
        try:
            data = base64.b64decode(token, validate=True)
        except binascii.Error as exc:
            raise EncodingError(f"OWID is not valid base64: {exc}") from exc
        return cls.from_bytes(data)


class Creator:
    """A domain with the key material used to sign OWIDs."""

    def __init__(self, domain: str, signing_key: SigningKey):
        self.domain = domain
        self._signing_key = signing_key

    @classmethod
    def from_seed_hex(cls, domain: str, seed_hex: str) -> Creator:
        try:
            key = SigningKey(bytes.fromhex(seed_hex.strip()))
        except (ValueError, CryptoError) as exc:
            raise ConfigurationError(
                f"Creator key for '{domain}' must be a 32 byte hex seed"
            ) from exc
        return cls(domain, key)

    @property
    def verify_key(self) -> VerifyKey:
        return self._signing_key.verify_key

    def create_owid(self, payload: bytes, now: datetime | None = None) -> Owid:
        now = now or datetime.now(timezone.utc)
        return Owid(domain=self.domain, date=now, payload=payload)

    def sign(self, owid: Owid) -> None:
        try:
            owid.signature = self._signing_key.sign(owid.unsigned_bytes()).signature
        except (CryptoError, struct.error, TypeError) as exc:
            raise EncodingError(f"Signing OWID for '{self.domain}' failed: {exc}") from exc


class CreatorRegistry(ABC):
    """Lookup of creators by domain."""

    @abstractmethod
    def get_creator(self, domain: str) -> Creator | None:
        """Return the creator registered for domain, or None."""


class InMemoryCreatorRegistry(CreatorRegistry):
    def __init__(self, creators: list[Creator] | None = None):
        self._creators = {c.domain.lower(): c for c in creators or []}

    @classmethod
    def from_seeds(cls, seeds: dict[str, str]) -> InMemoryCreatorRegistry:
        return cls([Creator.from_seed_hex(d, s) for d, s in seeds.items()])

    def get_creator(self, domain: str) -> Creator | None:
        return self._creators.get(domain.lower())


class OWIDEncoder:
    """Wrap raw values into signed, base64 OWIDs for the requesting domain."""

    def __init__(self, registry: CreatorRegistry):
        self.registry = registry

    def encode(self, value: bytes, domain: str, now: datetime | None = None) -> str:
        creator = self.registry.get_creator(domain)
        if creator is None:
            raise ConfigurationError(
                f"No creator for '{domain}'. Use http[s]://{domain}/owid/register "
                "to setup domain."
            )
        owid = creator.create_owid(value, now)
        creator.sign(owid)
        return owid.as_base64()
