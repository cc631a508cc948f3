"""FastAPI REST API for html-text-compressor."""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from html_text_compressor import (
    CompressionConfig,
    CompressionResult,
    CssMinifier,
    JavaScriptMinifier,
    compress,
    compress_with_stats,
)

logger = logging.getLogger(__name__)

__version__ = "0.1.0"


# ---------------------------------------------------------------------------
# Redis Cache
# ---------------------------------------------------------------------------

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379")
CACHE_TTL = int(os.getenv("CACHE_TTL", "3600"))  # seconds

CACHE_PREFIXES = ("html", "html_stats")

redis_client: aioredis.Redis | None = None


def _cache_key(prefix: str, payload: dict) -> str:
    """``<prefix>:<hash>`` for a request body; option order does not matter."""
    digest = hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()
    return f"{prefix}:{digest[:16]}"


async def _cache_get(key: str) -> str | None:
    if redis_client is None:
        return None
    try:
        return await redis_client.get(key)
    except RedisError as e:
        logger.warning("Cache read failed for %s: %s", key, e)
        return None


async def _cache_set(key: str, value: str) -> None:
    if redis_client is None:
        return
    try:
        await redis_client.setex(key, CACHE_TTL, value)
    except RedisError as e:
        logger.warning("Cache write failed for %s: %s", key, e)


async def _redis_alive() -> bool:
    if redis_client is None:
        return False
    try:
        await redis_client.ping()
    except RedisError as e:
        logger.warning("Redis ping failed: %s", e)
        return False
    return True


def _public_redis_url() -> str:
    # never report credentials
    return REDIS_URL.rsplit("@", 1)[-1]


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------


class CompressOptions(BaseModel):
    """Switches shared by every compression endpoint."""

    remove_comments: bool = Field(default=True, description="Drop HTML comments")
    remove_multi_spaces: bool = Field(default=True, description="Collapse whitespace runs")
    remove_intertag_spaces: bool = Field(default=False, description="Drop whitespace between tags")
    remove_quotes: bool = Field(default=False, description="Unquote simple attribute values")
    compress_javascript: bool = Field(default=False, description="Minify inline <script> with rjsmin")
    compress_css: bool = Field(default=False, description="Minify inline <style> with rcssmin")
    simple_doctype: bool = Field(default=False, description="Replace the DOCTYPE with <!DOCTYPE html>")
    remove_script_attributes: bool = False
    remove_style_attributes: bool = False
    remove_link_attributes: bool = False
    remove_form_attributes: bool = False
    remove_input_attributes: bool = False
    simple_boolean_attributes: bool = False
    remove_javascript_protocol: bool = False
    remove_http_protocol: bool = False
    remove_https_protocol: bool = False
    preserve_line_breaks: bool = False
    remove_surrounding_spaces: str | None = Field(
        default=None, description="'all', a block tag preset, or a comma separated tag list"
    )
    preserve_patterns: list[str] | None = Field(
        default=None, description="Regexes whose matches are kept verbatim"
    )


class CompressRequest(CompressOptions):
    """A single document plus options."""

    html: str = Field(..., description="Markup to compress")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "html": "<div>\n    <p>Hello   world</p>\n</div>",
                "remove_intertag_spaces": True,
            }
        ]
    }}


class CompressResponse(BaseModel):
    html: str = Field(..., description="Compressed markup")


class MetricsResponse(BaseModel):
    """Sizes of one version of the document, in characters."""

    filesize: int
    empty_chars: int
    inline_script_size: int
    inline_style_size: int
    inline_event_size: int


class CompressStatsResponse(BaseModel):
    """Compressed markup with before/after metrics."""

    html: str = Field(..., description="Compressed markup")
    original_length: int
    compressed_length: int
    ratio: float = Field(..., description="compressed_length / original_length")
    savings_pct: float = Field(..., description="Share of characters removed, in percent")
    time_ms: float = Field(..., description="Time spent compressing")
    preserved_size: int = Field(..., description="Characters passed through untouched")
    original_metrics: MetricsResponse
    compressed_metrics: MetricsResponse


class BatchItem(BaseModel):
    id: str = Field(..., description="Caller-chosen identifier, echoed back")
    html: str = Field(..., description="Markup to compress")


class BatchRequest(CompressOptions):
    """Several documents compressed with the same options."""

    items: list[BatchItem]


class BatchItemResult(BaseModel):
    id: str
    html: str
    original_length: int
    compressed_length: int
    ratio: float
    savings_pct: float


class BatchResponse(BaseModel):
    """Per-document results and totals."""

    items: list[BatchItemResult]
    total_original_length: int
    total_compressed_length: int
    overall_ratio: float
    overall_savings_pct: float


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    cache_enabled: bool = False
    redis_connected: bool = False


class CacheStatsResponse(BaseModel):
    """Cache settings and, when Redis answers, its usage."""

    enabled: bool
    connected: bool
    ttl_seconds: int
    redis_url: str
    keys_count: int | None = None
    memory_used: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_config(options: CompressOptions) -> CompressionConfig:
    """Turn request switches into a config, wiring in the minifiers."""
    values = options.model_dump(include=set(CompressOptions.model_fields))
    values["preserve_patterns"] = tuple(values["preserve_patterns"] or ())
    if options.compress_javascript:
        values["javascript_compressor"] = JavaScriptMinifier()
    if options.compress_css:
        values["css_compressor"] = CssMinifier()
    return CompressionConfig.from_options(**values)


def _stats_response(result: CompressionResult) -> CompressStatsResponse:
    stats = result.statistics
    return CompressStatsResponse(
        html=result.text,
        original_length=result.original_length,
        compressed_length=result.compressed_length,
        ratio=result.ratio,
        savings_pct=result.savings_pct,
        time_ms=stats.time,
        preserved_size=stats.preserved_size,
        original_metrics=MetricsResponse(**dataclasses.asdict(stats.original_metrics)),
        compressed_metrics=MetricsResponse(**dataclasses.asdict(stats.compressed_metrics)),
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect to Redis on startup; run without a cache if it is unreachable."""
    global redis_client
    client = aioredis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except RedisError as e:
        logger.warning("Redis at %s unavailable, caching disabled: %s", _public_redis_url(), e)
        await client.aclose()
    else:
        logger.info("Caching compression results in Redis at %s", _public_redis_url())
        redis_client = client

    yield

    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


app = FastAPI(
    title="HTML Text Compressor API",
    description=(
        "Minifies HTML: drops comments, redundant attributes and whitespace while "
        "keeping <pre>, <textarea>, scripts, styles, conditional comments and "
        "custom preserved regions intact."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health() -> HealthResponse:
    return HealthResponse(
        version=__version__,
        cache_enabled=redis_client is not None,
        redis_connected=await _redis_alive(),
    )


@app.get("/cache/stats", response_model=CacheStatsResponse, tags=["Cache"])
async def cache_stats() -> CacheStatsResponse:
    """Report cache settings, cached entry count and Redis memory usage."""
    response = CacheStatsResponse(
        enabled=redis_client is not None,
        connected=await _redis_alive(),
        ttl_seconds=CACHE_TTL,
        redis_url=_public_redis_url(),
    )
    if not response.connected:
        return response

    try:
        count = 0
        for prefix in CACHE_PREFIXES:
            async for _ in redis_client.scan_iter(match=f"{prefix}:*"):
                count += 1
        memory = await redis_client.info("memory")
    except RedisError as e:
        logger.warning("Could not read cache usage: %s", e)
        return response

    response.keys_count = count
    response.memory_used = memory.get("used_memory_human")
    return response


@app.post("/compress", response_model=CompressResponse, tags=["Compression"])
async def compress_html(req: CompressRequest) -> CompressResponse:
    """Compress one document.

    Responses are cached in Redis for ``CACHE_TTL`` seconds when it is
    available.
    """
    try:
        config = _build_config(req)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    key = _cache_key("html", req.model_dump())
    cached = await _cache_get(key)
    if cached is not None:
        return CompressResponse(html=cached)

    html = compress(req.html, config)
    await _cache_set(key, html)
    return CompressResponse(html=html)


@app.post("/compress/stats", response_model=CompressStatsResponse, tags=["Compression"])
async def compress_html_with_stats(req: CompressRequest) -> CompressStatsResponse:
    """Compress one document and report sizes before and after.

    Besides the document lengths this includes whitespace counts, inline
    script, style and event handler sizes and the size of preserved blocks.
    """
    try:
        config = _build_config(req)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    key = _cache_key("html_stats", req.model_dump())
    cached = await _cache_get(key)
    if cached is not None:
        return CompressStatsResponse.model_validate_json(cached)

    response = _stats_response(compress_with_stats(req.html, config))
    await _cache_set(key, response.model_dump_json())
    return response


@app.post("/compress/batch", response_model=BatchResponse, tags=["Compression"])
async def compress_batch(req: BatchRequest) -> BatchResponse:
    """Compress several documents with one set of options (not cached)."""
    try:
        config = _build_config(req)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    results = [(item.id, compress_with_stats(item.html, config)) for item in req.items]
    total_original = sum(r.original_length for _, r in results)
    total_compressed = sum(r.compressed_length for _, r in results)
    overall_ratio = total_compressed / total_original if total_original > 0 else 1.0

    return BatchResponse(
        items=[
            BatchItemResult(
                id=item_id,
                html=r.text,
                original_length=r.original_length,
                compressed_length=r.compressed_length,
                ratio=r.ratio,
                savings_pct=r.savings_pct,
            )
            for item_id, r in results
        ],
        total_original_length=total_original,
        total_compressed_length=total_compressed,
        overall_ratio=overall_ratio,
        overall_savings_pct=(1.0 - overall_ratio) * 100,
    )
