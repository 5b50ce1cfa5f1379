import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from pos_checklist.config import get_settings
from pos_checklist.database import init_db, close_db
from pos_checklist.logging_config import (
    logger,
    setup_logging,
    set_request_id,
    generate_request_id,
)
from pos_checklist.routers import auth as auth_router
from pos_checklist.routers.submissions import configuration_router, form_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)
    await init_db()
    logger.info("POS checklist service started")
    yield
    await close_db()


app = FastAPI(
    title="POS Checklist Service",
    description="Capture and review restaurant POS configuration checklists",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Responses carry credentials, so nothing may be cached."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs method, path, status and duration."""
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        if request.url.path != "/api/health":
            logger.info(
                "HTTP %s %s - %s (%.2fms)",
                request.method, request.url.path, response.status_code, duration_ms,
            )
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(NoCacheMiddleware)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query strings are client errors: 400, naming the field."""
    errors = exc.errors()
    loc = errors[0].get("loc", ()) if errors else ()
    field = ".".join(str(part) for part in loc if part not in ("body", "query"))
    detail = f"Invalid value for {field}" if field else "Invalid request body"
    return JSONResponse(status_code=400, content={"detail": detail, "field": field})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(configuration_router, prefix="/api/configuration", tags=["Configuration"])
app.include_router(form_router, prefix="/api/form", tags=["Form"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "pos-checklist"}
