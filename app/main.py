"""
FastAPI application for the directory admin backend.

Mounts the revenue API under ``/api/v1``, tags every request with an id and
timing headers, and turns errors into ``{"success": false, ...}`` bodies so
the dashboard handles them the same way as a failed revenue report.
"""
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import api_router
from app.database import Base, SessionLocal, engine
from app.models import db as _db_models  # noqa: F401  (registers models on Base.metadata)
from app.utils import get_logger, setup_logging

setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_file=os.getenv("LOG_FILE", "logs/app.log"),
)

logger = get_logger(__name__)

SERVICE_NAME = "directory-admin-backend"
SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Revenue backend started", service=SERVICE_NAME, version=SERVICE_VERSION)
    yield
    logger.info("Revenue backend stopped")


app = FastAPI(
    title="Directory Admin API",
    description=(
        "Revenue reporting for the local-business directory: period-scoped plan "
        "revenue, lifetime district leaderboard and persisted snapshots. "
        "Authenticate with `Authorization: Bearer <admin api key>`."
    ),
    version=SERVICE_VERSION,
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Attach a request id, time the request and log one line per response."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.time()

    response = await call_next(request)

    elapsed_ms = round((time.time() - started) * 1000, 2)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(elapsed_ms)
    response.headers["X-Content-Type-Options"] = "nosniff"
    logger.info(
        "Request handled",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        elapsed_ms=elapsed_ms,
        request_id=request_id,
    )
    return response


def _error_body(request: Request, message, **extra) -> dict:
    return {
        "success": False,
        "message": message,
        "request_id": getattr(request.state, "request_id", None),
        **extra,
    }


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception objects that json can't encode
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_errors(exc)
    logger.warning("Request validation failed", path=request.url.path, errors=errors)
    return JSONResponse(status_code=422, content=_error_body(request, "Request validation failed", details=errors))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTP error", path=request.url.path, status_code=exc.status_code, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        exc_info=True,
    )
    return JSONResponse(status_code=500, content=_error_body(request, "Internal server error"))


@app.get("/health", tags=["health"])
async def health_check():
    """Liveness plus a database round trip."""
    database = "healthy"
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except Exception as exc:
        database = f"unhealthy: {exc}"
    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "database": database,
    }


app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, reload_dirs=["app"])
