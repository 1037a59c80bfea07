from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from core import config, log
from core.keys import InvalidKeySegment
from core.kv_store import KVStore, MemoryKVStore, PostgresKVStore
from core.supabase import SupabaseAuth
from feedback import router as feedback_router
from universities import router as universities_router
from users import router as users_router

logger = logging.getLogger("busnav.api")

INTERNAL_ERROR = "Internal server error"


async def open_kv_store() -> KVStore:
    backend = config.kv_backend()
    if backend == "memory":
        logger.warning("kv_backend=memory records are not persisted")
        return MemoryKVStore()
    if backend != "postgres":
        raise RuntimeError(f"Unknown KV_BACKEND: {backend!r}")

    store = await PostgresKVStore.connect(config.database_url(), config.kv_table())
    if config.kv_auto_create():
        await store.ensure_table()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.configure_logging(config.log_level())
    # One store and one provider client per process, shared by all requests.
    app.state.identity_provider = SupabaseAuth(
        base_url=config.supabase_url(),
        service_key=config.supabase_service_key(),
        timeout_s=config.supabase_timeout_s(),
    )
    app.state.kv_store = await open_kv_store()
    try:
        yield
    finally:
        await app.state.kv_store.close()
        await app.state.identity_provider.aclose()


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        # Anything not handled by an exception handler becomes a generic JSON 500.
        logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": INTERNAL_ERROR},
        )
    logger.info(
        "request method=%s path=%s status=%s duration_ms=%.1f",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# Mobile and web clients call from arbitrary origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            messages.append("Request body is not valid JSON")
            continue
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body") or "body"
        if error.get("type") == "missing":
            messages.append(f"{field} is required")
        else:
            messages.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(messages) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 with the offending fields named."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_errors(exc)},
    )


@app.exception_handler(InvalidKeySegment)
async def key_segment_exception_handler(request: Request, exc: InvalidKeySegment) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


prefix = config.api_prefix()

app.include_router(auth_router.router, prefix=prefix, tags=["auth"])
app.include_router(users_router.router, prefix=prefix, tags=["users"])
app.include_router(feedback_router.router, prefix=prefix, tags=["feedback"])
app.include_router(universities_router.router, prefix=prefix, tags=["universities"])


@app.get(f"{prefix}/health")
def health() -> dict:
    return {"status": "ok"}
