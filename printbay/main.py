# printbay/main.py
from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from printbay.config.settings import Settings, get_settings
from printbay.core.exceptions import PrintBayError, UploadRejected
from printbay.dependencies import Integrations, build_integrations
from printbay.logging_config import configure_logging, startup_banner
from printbay.routes import files, health, models, notifications, orders, payments, pricing, shipping

logger = logging.getLogger("uvicorn")

ALLOWED_METHODS: Sequence[str] = ["GET", "POST", "PUT", "OPTIONS"]
ALLOWED_HEADERS: Sequence[str] = ["Content-Type"]
CORS_MAX_AGE = 86400  # 24h


# ──────────────────────────────────────────────────────────────────────────────
# Unique operationId generator (orders-status/shipping-track share paths)
# ──────────────────────────────────────────────────────────────────────────────
def generate_unique_id(route: APIRoute) -> str:
    method = sorted(route.methods)[0].lower() if route.methods else "get"
    safe_path = route.path.replace("/", "_").replace("{", "").replace("}", "").replace("-", "_")
    return f"{method}{safe_path}"


def _cors_headers_for_request(request: Request, origins: Sequence[str]) -> dict:
    # Errors raised past CORSMiddleware still need ACAO
    origin = request.headers.get("origin")
    if "*" in origins:
        return {"Access-Control-Allow-Origin": "*"}
    if origin and origin in origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)


# ──────────────────────────────────────────────────────────────────────────────
# Lifespan
# ──────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    integrations: Integrations = app.state.integrations
    logger.info("✅ CORS origins: %s", integrations.settings.cors_origins)

    await integrations.initialize_all()
    startup_banner(integrations.modes())
    logger.info("✅ Backend is up and ready to accept requests")
    try:
        yield
    finally:
        await integrations.close_all()
        logger.info("👋 Integrations closed")


# ──────────────────────────────────────────────────────────────────────────────
# App factory
# ──────────────────────────────────────────────────────────────────────────────
def create_app(settings: Optional[Settings] = None, integrations: Optional[Integrations] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="The Printed Bay API",
        version=settings.app_version,
        description="3D-printing storefront: uploads, quotes, orders, payments, shipping",
        generate_unique_id_function=generate_unique_id,
        lifespan=lifespan,
    )
    app.state.integrations = integrations or build_integrations(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=list(ALLOWED_METHODS),
        allow_headers=list(ALLOWED_HEADERS),
        max_age=CORS_MAX_AGE,
    )

    # ─── Exception handlers ───────────────────────────────────
    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        resp = _error(exc.status_code, message)
        if exc.headers:
            resp.headers.update(exc.headers)
        return resp

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body", details=jsonable_encoder(exc.errors()))

    @app.exception_handler(UploadRejected)
    async def upload_rejected_handler(request: Request, exc: UploadRejected):
        return _error(exc.status_code, exc.message, **exc.details)

    @app.exception_handler(PrintBayError)
    async def app_error_handler(request: Request, exc: PrintBayError):
        logger.error("❌ %s %s: %s", request.method, request.url.path, exc)
        return _error(500, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        headers = _cors_headers_for_request(request, settings.cors_origins)
        body = {"success": False, "error": "Internal server error"}
        if settings.env.lower() != "production":
            body["details"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(body, status_code=500, headers=headers)

    # ─── Routers ──────────────────────────────────────────────
    for module, tags in (
        (files, ["files"]),
        (models, ["models"]),
        (pricing, ["pricing"]),
        (orders, ["orders"]),
        (payments, ["payments"]),
        (shipping, ["shipping"]),
        (notifications, ["notifications"]),
    ):
        app.include_router(module.router, prefix="/api", tags=tags)
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()


def run() -> None:
    import uvicorn

    s = get_settings()
    uvicorn.run("printbay.main:app", host=s.host, port=s.port, log_level=s.log_level.lower())


if __name__ == "__main__":
    run()
