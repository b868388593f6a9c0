"""FastAPI dependencies for SWAN routes."""

from __future__ import annotations

from fastapi import Request

from swan.composer import StorageURLComposer
from swan.config import SwanConfig
from swan.pipeline import DecodePipeline


def get_config(request: Request) -> SwanConfig:
    """Get the relay configuration from app state."""
    return request.app.state.config


def get_pipeline(request: Request) -> DecodePipeline:
    """Get the decode pipeline from app state."""
    return request.app.state.pipeline


def get_composer(request: Request) -> StorageURLComposer:
    """Get the storage URL composer from app state."""
    return request.app.state.composer
