"""Access node resolution with a per-instance cache.

The cached host is shared by every request the process serves. The lock
only guards the field; discovery runs outside it, so two requests racing
on an empty cache may both call discovery. Both write the same answer,
which makes first resolution safe but not exactly-once.
"""

from __future__ import annotations

import logging
import threading

import httpx

from swan.errors import ConfigurationError, SwanError
from swan.swift import AccessNodeDiscovery

logger = logging.getLogger("swan.resolver")


class AccessNodeResolver:
    def __init__(self, network: str, discovery: AccessNodeDiscovery):
        self.network = network
        self.discovery = discovery
        self._lock = threading.Lock()
        self._access_node: str | None = None

    @property
    def cached(self) -> str | None:
        with self._lock:
            return self._access_node

    def resolve(self) -> str:
        """Return the network's access node host, discovering it if needed."""
        node = self.cached
        if node:
            return node

        try:
            node = self.discovery.get_access_node(self.network)
        except (SwanError, httpx.HTTPError) as exc:
            raise self._not_initialised() from exc
        if not node:
            raise self._not_initialised()

        with self._lock:
            self._access_node = node
        logger.info("Access node for '%s' network is %s", self.network, node)
        return node

    def invalidate(self) -> None:
        with self._lock:
            self._access_node = None

    def _not_initialised(self) -> ConfigurationError:
        return ConfigurationError(
            f"An access node has not been created for the '{self.network}' "
            "network. Use http[s]://[domain]/swift/register to start the network."
        )
