from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ingestion.settings import get_settings
from ingestion.utils.logging import configure_logging

from .database import init_db
from .routes import functions_router, router


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_enabled=settings.log_json)

    app = FastAPI(title="SportsPulse Pipeline API", version="0.1.0")
    init_db()

    # Preflight OPTIONS requests are answered here, before any route runs
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.include_router(functions_router)
    app.include_router(router)

    @app.get("/healthz", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app
