"""SWAN API endpoints: decode-as-json, fetch, update."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from swan.composer import (
    QueryValues,
    StorageURLComposer,
    inject_new_identity,
    inject_supplied_values,
)
from swan.config import SwanConfig
from swan.deps import get_composer, get_config, get_pipeline
from swan.errors import ValidationError
from swan.pipeline import DecodePipeline
from swan.validator import validate_common

router = APIRouter(prefix="/swan/api/v1", tags=["swan"])

_NO_CACHE = {"Cache-Control": "no-cache"}


async def _form_values(request: Request) -> QueryValues:
    """Query string and form body parameters, in that order."""
    values = QueryValues(request.query_params.multi_items())
    if request.method == "POST":
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, str):
                values.add(key, value)
    return values


@router.get("/health")
def health():
    return {"status": "ok", "service": "swan"}


@router.api_route("/decode-as-json", methods=["GET", "POST"])
async def decode_as_json(
    request: Request,
    pipeline: DecodePipeline = Depends(get_pipeline),
):
    values = await _form_values(request)
    data = values.get("data")
    if not data:
        raise ValidationError("data", "is required")
    domain = request.url.hostname or ""
    results = await run_in_threadpool(pipeline.decode, data, domain)
    return JSONResponse([r.model_dump(mode="json") for r in results])


async def _storage_operation(request: Request, config: SwanConfig, composer, inject):
    values = await _form_values(request)
    validate_common(config, values)
    url = await run_in_threadpool(composer.create_storage_operation_url, values, inject)
    return PlainTextResponse(url, headers=_NO_CACHE)


@router.api_route("/fetch", methods=["GET", "POST"])
async def fetch(
    request: Request,
    config: SwanConfig = Depends(get_config),
    composer: StorageURLComposer = Depends(get_composer),
):
    return await _storage_operation(request, config, composer, inject_new_identity())


@router.api_route("/update", methods=["GET", "POST"])
async def update(
    request: Request,
    config: SwanConfig = Depends(get_config),
    composer: StorageURLComposer = Depends(get_composer),
):
    return await _storage_operation(request, config, composer, inject_supplied_values())
