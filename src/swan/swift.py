"""Calls into the SWIFT storage network.

The relay only needs three capabilities from the network: decrypting a
blob, asking an access node for a storage operation URL, and discovering
which host is the access node. Each is an ABC so the pipeline can run
against in-memory fakes; ``SwiftClient`` implements the first two over
HTTP with httpx.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlencode

import httpx

from swan.errors import NetworkError, UpstreamError

logger = logging.getLogger("swan.swift")

DECRYPT_PATH = "/swift/api/v1/decrypt"
CREATE_PATH = "/swift/api/v1/create"


class Decryptor(ABC):
    @abstractmethod
    def decrypt(self, access_node: str, data: str) -> bytes:
        """Return the raw decrypted bytes for an encrypted blob."""


class StorageOperationClient(ABC):
    @abstractmethod
    def fetch_operation_url(self, url: str) -> str:
        """Request a create operation URL and return the response body."""


class AccessNodeDiscovery(ABC):
    @abstractmethod
    def get_access_node(self, network: str) -> str | None:
        """Return the current access node host for network, if any."""


class StaticAccessNodeDiscovery(AccessNodeDiscovery):
    """Access nodes taken from configuration, keyed by network name."""

    def __init__(self, nodes: dict[str, str]):
        self._nodes = dict(nodes)

    def get_access_node(self, network: str) -> str | None:
        return self._nodes.get(network) or None


class SwiftClient(Decryptor, StorageOperationClient):
    """Synchronous HTTP access to SWIFT access nodes."""

    def __init__(self, http: httpx.Client, scheme: str, access_key: str):
        self.http = http
        self.scheme = scheme
        self.access_key = access_key

    def decrypt(self, access_node: str, data: str) -> bytes:
        query = urlencode({"accessKey": self.access_key, "data": data})
        url = f"{self.scheme}://{access_node}{DECRYPT_PATH}?{query}"
        return self._get(url).content

    def fetch_operation_url(self, url: str) -> str:
        return self._get(url).text

    def _get(self, url: str) -> httpx.Response:
        try:
            response = self.http.get(url)
        except httpx.HTTPError as exc:
            logger.debug("GET %s failed: %s", url, exc)
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc
        if response.status_code != 200:
            raise UpstreamError(url, response.status_code, response.text)
        return response
