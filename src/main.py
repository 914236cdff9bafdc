"""FastAPI application for edit distance computation and sharing."""
import re
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, Response
from fastapi.openapi.utils import get_openapi
from pydantic import ValidationError
from contextlib import asynccontextmanager

from .config import get_settings, configure_logging
from .models.schemas import (
    DistanceRequest,
    DistanceResponse,
    LogRequest,
    LogEntry,
    LogResponse,
    EntryInfo,
    EntriesResponse,
)
from .services.edit_distance import compute, distance_only
from .services.entry_store import get_entry_store, close_entry_store, EntryStoreError
from .services.share_renderer import render_share_page, render_preview_png
from .services.page_renderer import render_calculator_page, render_about_page

logger = logging.getLogger(__name__)

BOT_UA = re.compile(
    r"bot|crawl|spider|slackbot|twitterbot|facebookexternalhit|telegrambot|discordbot|"
    r"whatsapp|linkedinbot|embedly|quora|pinterest|preview|fetcher|archive",
    re.IGNORECASE,
)


def sanitize_json_string(raw_body: str) -> str:
    """
    Sanitize raw JSON string by escaping control characters in string values.
    This allows bodies with literal newlines or tabs inside strings to be parsed
    without changing the decoded values.
    """
    # Remove BOM if present
    raw_body = raw_body.lstrip('\ufeff')

    try:
        json.loads(raw_body)
        return raw_body  # Already valid JSON
    except json.JSONDecodeError:
        pass

    result = []
    in_string = False
    escape_next = False

    for char in raw_body:
        if escape_next:
            result.append(char)
            escape_next = False
            continue

        if char == '\\':
            result.append(char)
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            result.append(char)
            continue

        if in_string:
            if char == '\n':
                result.append('\\n')
            elif char == '\r':
                result.append('\\r')
            elif char == '\t':
                result.append('\\t')
            elif ord(char) < 32:
                result.append(f'\\u{ord(char):04x}')
            else:
                result.append(char)
        else:
            result.append(char)

    return ''.join(result)


async def read_json_body(request: Request) -> dict[str, Any]:
    """Parse a JSON object body; an empty body counts as an empty object."""
    try:
        raw_body = await request.body()
        body_str = raw_body.decode('utf-8')
        if not body_str.strip():
            return {}
        data = json.loads(sanitize_json_string(body_str))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON: {str(e)}")

    if not isinstance(data, dict):
        raise HTTPException(status_code=422, detail="Request body must be a JSON object")
    return data


def check_inputs(req: DistanceRequest) -> tuple[str, str]:
    """Reject missing or oversized inputs before the engine runs."""
    if not req.has_input():
        raise HTTPException(status_code=400, detail="missing source or target")

    source = req.source or ""
    target = req.target or ""
    limit = get_settings().max_input_length
    if len(source) > limit or len(target) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"source and target must each be at most {limit} characters"
        )
    return source, target


def request_origin(request: Request) -> str:
    """Public origin of the request, honoring proxy headers."""
    host = request.headers.get("host") or settings.site_host
    proto = request.headers.get("x-forwarded-proto") or "https"
    return f"{proto}://{host}"


def client_ip(request: Request) -> str:
    """Client address: first x-forwarded-for hop, then x-real-ip, then the peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def share_response(request: Request, source: Optional[str], target: Optional[str]) -> HTMLResponse:
    """Build the crawler-facing share page for optional inputs."""
    req = DistanceRequest(source=source, target=target)
    result = None
    if req.has_input():
        source, target = check_inputs(req)
        result = compute(source, target)
    else:
        source, target = "", ""
    page = render_share_page(source, target, result, request_origin(request), settings)
    return HTMLResponse(content=page)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    configure_logging(settings)
    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"Entry Store: {settings.entry_store}")
    print(f"Max Input Length: {settings.max_input_length}")

    yield

    # Shutdown - close HTTP clients
    await close_entry_store()
    print("Shutting down...")


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""API for Levenshtein edit distance between two strings.

## Features

- **Distance**: Minimum number of single-character insertions, deletions and substitutions
- **Operations**: The minimal edit script, left to right
- **Trace**: Every intermediate string from source to target
- **Sharing**: Share pages with social preview images
""",
    lifespan=lifespan,
)

# Custom OpenAPI schema: inject request models that are referenced via $ref
# but not auto-registered because endpoints use raw Request instead of Pydantic params
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schemas = openapi_schema.setdefault("components", {}).setdefault("schemas", {})
    for model in [DistanceRequest, LogRequest]:
        model_schema = model.model_json_schema(ref_template="#/components/schemas/{model}")
        defs = model_schema.pop("$defs", {})
        for def_name, def_schema in defs.items():
            schemas.setdefault(def_name, def_schema)
        schemas[model.__name__] = model_schema
    app.openapi_schema = openapi_schema
    return openapi_schema

app.openapi = custom_openapi

# CORS middleware - origins configurable via EDIT_DISTANCE_CORS_ORIGINS env var
_cors_origins = [o.strip() for o in settings.cors_origins.split(",")] if settings.cors_origins != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Gzip compression for all responses >= 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)


@app.middleware("http")
async def crawler_share_rewrite(request: Request, call_next):
    """Answer link-preview crawlers on / with the OG-tagged share page."""
    if request.url.path != "/" or request.method != "GET":
        return await call_next(request)

    source = request.query_params.get("source")
    target = request.query_params.get("target")
    if not source and not target:
        return await call_next(request)

    ua = request.headers.get("user-agent", "")
    if not BOT_UA.search(ua):
        return await call_next(request)

    logger.info(f"Serving share page to crawler: {ua[:80]}")
    try:
        return share_response(request, source, target)
    except HTTPException as e:
        return Response(
            content=json.dumps({"detail": e.detail}),
            status_code=e.status_code,
            media_type="application/json",
        )


# ============================================================================
# Health
# ============================================================================

@app.get(
    "/health",
    summary="Health Check",
    description="Checks that the API is up and returns the current version."
)
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


# ============================================================================
# Edit Distance
# ============================================================================

@app.get(
    "/api/distance",
    response_model=DistanceResponse,
    summary="Compute edit distance (query parameters)",
    description="""Computes the Levenshtein distance, the minimal edit operations and the step-by-step trace.

## Query-Parameter

- **source**: String to transform
- **target**: String to transform into

At least one of them must be non-empty. Absent characters in `operations` are shown as `—`.
"""
)
async def distance_from_query(source: Optional[str] = None, target: Optional[str] = None):
    """Compute edit distance from query parameters."""
    source, target = check_inputs(DistanceRequest(source=source, target=target))
    start_time = time.time()
    result = compute(source, target)
    logger.info(
        f"Computed distance {result.distance} for lengths {len(source)}/{len(target)} "
        f"in {int((time.time() - start_time) * 1000)} ms"
    )
    return DistanceResponse.from_result(result)


@app.post(
    "/api/distance",
    response_model=DistanceResponse,
    summary="Compute edit distance (JSON body)",
    description="""Same as `GET /api/distance`, with `source` and `target` in a JSON body.""",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {
                    "schema": {"$ref": "#/components/schemas/DistanceRequest"},
                    "examples": {
                        "classic": {
                            "summary": "kitten -> sitting",
                            "value": {"source": "kitten", "target": "sitting"}
                        }
                    }
                }
            }
        }
    }
)
async def distance_from_body(request: Request):
    """Compute edit distance from a JSON body."""
    data = await read_json_body(request)
    try:
        req = DistanceRequest(**data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Validation error: {str(e)}")

    source, target = check_inputs(req)
    result = compute(source, target)
    logger.info(f"Computed distance {result.distance} for lengths {len(source)}/{len(target)}")
    return DistanceResponse.from_result(result)


# ============================================================================
# Sharing
# ============================================================================

@app.get(
    "/api/share",
    response_class=HTMLResponse,
    summary="Share page",
    description="HTML page with OG/Twitter meta tags that redirects visitors to the calculator."
)
async def share_page(request: Request, source: Optional[str] = None, target: Optional[str] = None):
    """Render the share page."""
    return share_response(request, source, target)


@app.get(
    "/api/og",
    summary="Social preview image",
    description="1200x630 PNG card showing the inputs, the distance and the trace.",
    responses={200: {"content": {"image/png": {}}}},
)
async def preview_image(source: Optional[str] = None, target: Optional[str] = None):
    """Render the social preview image."""
    req = DistanceRequest(source=source, target=target)
    source, target = "", ""
    if req.has_input():
        source, target = check_inputs(req)
    result = compute(source, target)
    png = render_preview_png(source, target, result, settings)
    return Response(
        content=png,
        media_type="image/png",
        headers={"cache-control": "public, max-age=86400, immutable"},
    )


# ============================================================================
# Entry Log
# ============================================================================

def _entry_store_or_503():
    try:
        return get_entry_store()
    except EntryStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.post(
    "/api/log",
    response_model=LogResponse,
    summary="Log a computation",
    description="Stores `{source, target, distance}` together with client IP, timestamp and user agent."
)
async def log_entry(request: Request):
    """Persist a log record for a computation."""
    data = await read_json_body(request)
    try:
        req = LogRequest(**data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Validation error: {str(e)}")

    source, target = check_inputs(req)
    distance = req.distance
    if distance is None:
        distance = distance_only(source, target)

    entry = LogEntry(
        source=source,
        target=target,
        distance=distance,
        ip=client_ip(request),
        ts=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        ua=request.headers.get("user-agent", ""),
    )

    store = _entry_store_or_503()
    try:
        key = await store.put(entry.model_dump())
    except EntryStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return LogResponse(ok=True, key=key)


@app.get(
    "/api/entries",
    response_model=EntriesResponse,
    summary="List logged computations",
    description="Lists stored log entries, one page at a time. Pass the returned `cursor` to get the next page."
)
async def list_entries(cursor: Optional[str] = None):
    """List stored log entries."""
    store = _entry_store_or_503()
    try:
        page = await store.list(cursor=cursor, limit=settings.entries_page_size)
    except EntryStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return EntriesResponse(
        entries=[
            EntryInfo(url=e.url, key=e.key, uploadedAt=e.uploaded_at, size=e.size)
            for e in page.entries
        ],
        cursor=page.cursor,
        hasMore=page.has_more,
    )


# ============================================================================
# Pages
# ============================================================================

@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def calculator_page(source: Optional[str] = None, target: Optional[str] = None):
    """Render the calculator page."""
    req = DistanceRequest(source=source, target=target)
    result = None
    source, target = "", ""
    if req.has_input():
        source, target = check_inputs(req)
        result = compute(source, target)
    return HTMLResponse(content=render_calculator_page(source, target, result, settings))


@app.get("/about", response_class=HTMLResponse, include_in_schema=False)
async def about_page():
    """Render the about page."""
    return HTMLResponse(content=render_about_page(settings))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
