"""Decode path: decrypt, parse, sign each value as an OWID, stamp expiry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from swan.owid import OWIDEncoder
from swan.resolver import AccessNodeResolver
from swan.results import ExpiryStamper, Result, decode_results
from swan.sid import SIDHasher
from swan.swift import Decryptor

logger = logging.getLogger("swan.pipeline")

EMAIL_KEY = "email"
SID_KEY = "sid"


class DecodePipeline:
    def __init__(
        self,
        resolver: AccessNodeResolver,
        decryptor: Decryptor,
        encoder: OWIDEncoder,
        hasher: SIDHasher,
        stamper: ExpiryStamper,
    ):
        self.resolver = resolver
        self.decryptor = decryptor
        self.encoder = encoder
        self.hasher = hasher
        self.stamper = stamper

    def decode(self, data: str, domain: str) -> list[Result]:
        """Turn an encrypted SWIFT blob into signed results for domain."""
        raw = self.decryptor.decrypt(self.resolver.resolve(), data)
        results = decode_results(raw)

        now = datetime.now(timezone.utc)
        expires = self.stamper.expires_at(now)
        for result in results:
            self.transform(result, domain, now)
            result.expires = expires

        logger.debug("Decoded %d values for %s", len(results), domain)
        return results

    def transform(self, result: Result, domain: str, now: datetime | None = None) -> Result:
        """Replace a result's value with a signed OWID; email becomes sid."""
        if result.key == EMAIL_KEY:
            result.key = SID_KEY
            payload = self.hasher.hash(result.value)
        else:
            payload = result.value.encode("utf-8")
        result.value = self.encoder.encode(payload, domain, now)
        return result
