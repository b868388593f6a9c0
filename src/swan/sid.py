"""SID hashing: one-way transform of an email address into a pseudonymous id.

An email address is a low-entropy quasi-identifier, so an unkeyed fast hash
can be reversed by enumerating plausible addresses. The default is therefore
HMAC-SHA256 under a server-side secret; ``scrypt`` (secret as salt) is
available where the cost of a memory-hard hash is acceptable. ``sha256`` and
``sha1`` are kept for interoperability with SIDs produced by older relays.
"""

from __future__ import annotations

import hashlib
import hmac

from swan.errors import ConfigurationError

_KEYED = {"hmac-sha256", "scrypt"}

DIGEST_SIZES = {
    "hmac-sha256": 32,
    "scrypt": 32,
    "sha256": 32,
    "sha1": 20,
}


class SIDHasher:
    """Deterministic, fixed-length hash of an email string."""

    def __init__(self, algorithm: str = "hmac-sha256", secret: str = ""):
        if algorithm not in DIGEST_SIZES:
            raise ConfigurationError(
                f"Unknown SID algorithm '{algorithm}'. "
                f"Choose one of: {', '.join(sorted(DIGEST_SIZES))}."
            )
        if algorithm in _KEYED and not secret:
            raise ConfigurationError(
                f"SID algorithm '{algorithm}' requires a secret. "
                "Set sid_secret in the [swan] section or SWAN_SID_SECRET."
            )
        self.algorithm = algorithm
        self._secret = secret.encode("utf-8")

    @property
    def digest_size(self) -> int:
        return DIGEST_SIZES[self.algorithm]

    def hash(self, email: str) -> bytes:
        data = email.encode("utf-8")
        if self.algorithm == "hmac-sha256":
            return hmac.new(self._secret, data, hashlib.sha256).digest()
        if self.algorithm == "scrypt":
            return hashlib.scrypt(
                data, salt=self._secret, n=2**14, r=8, p=1, dklen=32
            )
        return hashlib.new(self.algorithm, data).digest()
