"""SWAN relay FastAPI application.

Publishers send SWIFT-encrypted consent blobs here to get them back as
signed OWIDs, and ask here for the URL that starts a SWIFT storage
operation.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse

from swan.auth import make_access_checker
from swan.composer import StorageURLComposer
from swan.config import SwanConfig, load_config
from swan.errors import SwanError
from swan.owid import CreatorRegistry, InMemoryCreatorRegistry, OWIDEncoder
from swan.pipeline import DecodePipeline
from swan.resolver import AccessNodeResolver
from swan.results import ExpiryStamper
from swan.sid import SIDHasher
from swan.swift import AccessNodeDiscovery, StaticAccessNodeDiscovery, SwiftClient
from swan.routes import api

logger = logging.getLogger("swan")
audit_logger = logging.getLogger("swan.audit")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: log the network. Shutdown: close the outbound HTTP client."""
    config: SwanConfig = app.state.config
    logger.info(
        "SWAN relay ready for '%s' network (access node: %s)",
        config.network,
        config.access_node or "not configured",
    )
    yield
    app.state.http.close()
    logger.info("SWAN relay shut down")


def create_app(
    config: SwanConfig | None = None,
    *,
    http: httpx.Client | None = None,
    discovery: AccessNodeDiscovery | None = None,
    registry: CreatorRegistry | None = None,
) -> FastAPI:
    """Application factory.

    ``http``, ``discovery`` and ``registry`` default to the configured
    implementations; pass fakes to run without a storage network.
    """
    if config is None:
        config = load_config()
    if http is None:
        http = httpx.Client(timeout=config.http_timeout)
    if discovery is None:
        discovery = StaticAccessNodeDiscovery({config.network: config.access_node})
    if registry is None:
        registry = InMemoryCreatorRegistry.from_seeds(config.creators)

    app = FastAPI(
        title="SWAN",
        description="Consent relay between publishers and a SWIFT storage network",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.http = http

    client = SwiftClient(http, config.scheme, config.access_key)
    resolver = AccessNodeResolver(config.network, discovery)
    app.state.resolver = resolver
    app.state.pipeline = DecodePipeline(
        resolver=resolver,
        decryptor=client,
        encoder=OWIDEncoder(registry),
        hasher=SIDHasher(config.sid_algorithm, config.sid_secret),
        stamper=ExpiryStamper(config.timeout),
    )
    app.state.composer = StorageURLComposer(resolver, client, config.scheme)

    check_access = make_access_checker(config.api_key)

    # ── Exception handlers ────────────────────────────────────

    @app.exception_handler(SwanError)
    async def swan_error_handler(request: Request, exc: SwanError):
        if config.debug:
            logger.warning(
                "%s %s failed (%s): %s",
                request.method,
                request.url.path,
                exc.kind.value,
                exc,
            )
        return PlainTextResponse(
            str(exc) if config.debug else "",
            status_code=exc.status_code,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Cache-Control": "no-cache",
            },
        )

    # ── Audit middleware ──────────────────────────────────────

    @app.middleware("http")
    async def audit_log(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        elapsed = time.monotonic() - start
        audit_logger.info(
            "%s %s %d %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Routers ───────────────────────────────────────────────

    app.include_router(api.router, dependencies=[Depends(check_access)])

    return app
