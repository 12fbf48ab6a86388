import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from axotl.adapters.render.mpl_pdf import check_font_assets
from axotl.adapters.sqlite.migrator import SQLiteMigrator
from axotl.api.deps import close_gateway, get_rules, get_settings, init_gateway
from axotl.domain.errors import AxotlError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()

    # Fail fast: rules, fonts and schema must all be usable before serving
    try:
        rules = get_rules()
        logger.info("Rules loaded from %s", settings.rules_path)
        check_font_assets(rules.render.fonts)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
        if applied:
            logger.info("Applied migrations: %s", ", ".join(applied))
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    init_gateway(settings.db_path)
    yield
    close_gateway()


app = FastAPI(
    title="Axotl Press API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# --- Error handlers ---
@app.exception_handler(AxotlError)
async def axotl_error_handler(request: Request, exc: AxotlError) -> JSONResponse:
    payload = exc.to_dict()
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%r)", request.method, request.url.path, exc, exc.detail)
    if get_settings().is_development and exc.detail is not None:
        payload["detail"] = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    payload: dict[str, Any] = {
        "status": "error",
        "code": "validation_error",
        "message": "Datos de entrada no válidos",
    }
    if get_settings().is_development:
        payload["detail"] = str(exc.errors())
    return JSONResponse(status_code=400, content=payload)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    payload: dict[str, Any] = {
        "status": "error",
        "code": "internal_error",
        "message": "Error interno del servidor",
    }
    if get_settings().is_development:
        payload["detail"] = str(exc)
    return JSONResponse(status_code=500, content=payload)


# --- Routers ---
from axotl.api.routes import (  # noqa: E402
    auth,
    downloads,
    editor,
    engagement,
    notifications,
    publications,
    review,
    users,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(publications.router, prefix="/api/publications", tags=["Publications"])
app.include_router(engagement.router, prefix="/api", tags=["Engagement"])
app.include_router(editor.router, prefix="/api/editor", tags=["Editor"])
app.include_router(review.router, prefix="/api/management", tags=["Management"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(downloads.router, prefix="/api/downloads", tags=["Downloads"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
