# inventory/main.py
from __future__ import annotations

import time
import uuid
import logging
from contextlib import asynccontextmanager
from typing import Sequence, cast

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from inventory.core import metrics
from inventory.core.errors import InventoryError, ProductValidationError
from inventory.core.logging import setup_logging
from inventory.core.settings import settings
from inventory.database import init_db_if_requested, ping
from inventory.routers.observability import router as observability_router
from inventory.routers.product import router as products_router

# --- Config ---
APP_TITLE = settings.APP_TITLE
APP_VERSION = settings.APP_VERSION
ROOT_PATH = settings.ROOT_PATH
BUILD_SHA = settings.BUILD_SHA
OPENAPI_URL = None if settings.DISABLE_DOCS else "/openapi.json"
DOCS_URL = None if settings.DISABLE_DOCS else "/docs"
REDOC_URL = None if settings.DISABLE_DOCS else "/redoc"

APP_STARTED_MONO = time.monotonic()
APP_STARTED_TS = int(time.time())

# --- Logging ---
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("inventory-api")

tags_metadata = [
    {"name": "health", "description": "Liveness/Readiness checks"},
    {"name": "products", "description": "Product inventory CRUD & stock queries"},
    {"name": "observability", "description": "Metrics & runtime summary"},
]

# --- Utilitare ---
def _get_req_id_from_headers(request: Request) -> str:
    # Prefer X-Request-ID, apoi X-Correlation-ID; dacă lipsesc, generează unul.
    return (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or uuid.uuid4().hex[:12]
    )

def _error_response(request: Request, status_code: int, detail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail},
        headers={"X-Request-ID": _get_req_id_from_headers(request)},
    )

# --- Middleware func (registered after app is created) ---
async def request_context_mw(request: Request, call_next):
    """
    - Generează/propagă X-Request-ID
    - Limitează mărimea corpului când Content-Length e disponibil
    - Headers de securitate + HSTS (opțional)
    - Server-Timing / X-Process-Time + histogramă de latență pe rută
    """
    req_id = _get_req_id_from_headers(request)

    if settings.MAX_BODY_SIZE_BYTES > 0:
        cl = request.headers.get("content-length")
        if cl is not None and cl.isdigit() and int(cl) > settings.MAX_BODY_SIZE_BYTES:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"detail": "Payload too large", "max_bytes": settings.MAX_BODY_SIZE_BYTES},
                headers={"X-Request-ID": req_id},
            )

    start = time.perf_counter()
    response: Response = await call_next(request)
    elapsed = time.perf_counter() - start
    duration_ms = elapsed * 1000

    # template-ul rutei (nu path-ul concret) ca să nu explodeze cardinalitatea
    route = request.scope.get("route")
    route_path = getattr(route, "path", None) or "unmatched"
    metrics.REQUEST_LATENCY.labels(method=request.method, route=route_path).observe(elapsed)

    response.headers.setdefault("X-Request-ID", req_id)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("X-App-Version", APP_VERSION)
    if settings.ENABLE_HSTS:
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains; preload")

    response.headers.setdefault("Server-Timing", f"app;dur={duration_ms:.1f}")
    response.headers.setdefault("X-Process-Time", f"{duration_ms:.1f}ms")
    return response

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: tabele (fără migrații) + sanity check DB
    try:
        init_db_if_requested()
        ping()
        logger.info("DB startup check OK")
    except SQLAlchemyError:
        logger.exception("DB startup check FAILED")
    yield

# --- App factory (create app BEFORE registering middleware) ---
app = FastAPI(
    title=APP_TITLE,
    version=APP_VERSION,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    root_path=ROOT_PATH or "",
    docs_url=DOCS_URL,
    redoc_url=REDOC_URL,
    openapi_url=OPENAPI_URL,
)

app.middleware("http")(request_context_mw)
app.add_middleware(GZipMiddleware, minimum_size=1024)

# Trusted hosts (opțional): TRUSTED_HOSTS="localhost,127.0.0.1,.example.com"
if settings.trusted_hosts:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=cast(Sequence[str], settings.trusted_hosts))  # type: ignore[arg-type]

# CORS din env: CORS_ORIGINS="http://localhost:3000,https://example.com"
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Server-Timing", "X-Process-Time", "X-App-Version"],
    )

# --- Exception handlers: erori de domeniu → HTTP (un singur loc) ---
@app.exception_handler(ProductValidationError)
async def _product_validation_handler(request: Request, exc: ProductValidationError):
    return _error_response(request, status.HTTP_400_BAD_REQUEST, exc.errors)

@app.exception_handler(InventoryError)
async def _inventory_error_handler(request: Request, exc: InventoryError):
    return _error_response(request, exc.status_code, exc.message)

@app.exception_handler(IntegrityError)
async def _integrity_handler(request: Request, exc: IntegrityError):
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    msg = str(orig or exc).upper()
    mapping = {
        "23505": (status.HTTP_409_CONFLICT, "Unique constraint violated."),
        "23514": (status.HTTP_400_BAD_REQUEST, "Check constraint violated."),
        "23502": (status.HTTP_400_BAD_REQUEST, "Not-null constraint violated."),
        "22P02": (status.HTTP_400_BAD_REQUEST, "Invalid text representation."),
    }
    if pgcode not in mapping:
        # SQLite nu are SQLSTATE; deducem din mesaj
        if "UNIQUE" in msg:
            pgcode = "23505"
        elif "CHECK" in msg:
            pgcode = "23514"
        elif "NOT NULL" in msg:
            pgcode = "23502"
    logger.warning("Integrity error (%s): %s", pgcode, orig or exc)
    if pgcode in mapping:
        code, detail = mapping[pgcode]
        return _error_response(request, code, detail)
    return _error_response(request, status.HTTP_400_BAD_REQUEST, "Integrity error.")

@app.exception_handler(RequestValidationError)
async def _validation_handler(request: Request, exc: RequestValidationError):
    # payload invalid (tipuri, câmpuri lipsă, id non-numeric) → 400
    return _error_response(request, status.HTTP_400_BAD_REQUEST, jsonable_encoder(exc.errors()))

# Prinde 404/405 Starlette și răspunde JSON unitar
@app.exception_handler(StarletteHTTPException)
async def _starlette_http_exc_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    headers.setdefault("X-Request-ID", _get_req_id_from_headers(request))
    detail = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        detail = {"message": "Not Found", "path": str(request.url.path)}
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        detail = {"message": "Method Not Allowed", "path": str(request.url.path)}
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)

@app.exception_handler(Exception)
async def _unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

# --- Routes: health ---
@app.get("/", tags=["health"])
def root():
    payload = {"name": APP_TITLE, "version": APP_VERSION}
    if BUILD_SHA:
        payload["build_sha"] = BUILD_SHA
    return payload

@app.get("/__version__", tags=["health"])
def version_meta():
    payload = {"app_version": APP_VERSION, "started_at": APP_STARTED_TS}
    if BUILD_SHA:
        payload["build_sha"] = BUILD_SHA
    return payload

@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

@app.get("/health/uptime", tags=["health"])
def health_uptime():
    return {"uptime_seconds": round(time.monotonic() - APP_STARTED_MONO, 3), "started_at": APP_STARTED_TS}

@app.get("/health/db", tags=["health"])
def health_db():
    try:
        ping()
    except SQLAlchemyError:
        logger.exception("DB health check failed")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="DB not ready")
    return {"status": "ok", "db": "up"}

# --- Routers ---
app.include_router(products_router)
app.include_router(observability_router)
