"""Web portal: FastAPI app serving the desktop frontend and its API."""

from __future__ import annotations

import logging
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from portal.errors import register_error_handlers
from portal.routers import auth, files, health, settings, share
from portal.services.disk import ensure_upload_dir
from shared.config import get_settings
from shared.database import dispose_engine, get_engine
from shared.models import Base

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(get_settings().log_level.upper())
    ),
)

logger = structlog.get_logger()

app = FastAPI(title="RetroDesk", version="1.0.0")

register_error_handlers(app)

# --------------- Routers ---------------

app.include_router(auth.router)
app.include_router(files.router)
app.include_router(share.router)
app.include_router(settings.router)
app.include_router(health.router)


@app.on_event("startup")
async def startup() -> None:
    ensure_upload_dir()
    if get_settings().auto_create_tables:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("tables_created")
    logger.info("portal_startup_complete")


@app.on_event("shutdown")
async def shutdown() -> None:
    await dispose_engine()


# --------------- Static files (desktop SPA) ---------------

STATIC_DIR = Path(__file__).parent / "static" / "dist"

if STATIC_DIR.exists():
    app.mount(
        "/assets",
        StaticFiles(directory=STATIC_DIR / "assets"),
        name="assets",
    )

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str) -> FileResponse:
        """Serve the SPA. Non-API routes (including /share/<token>) return index.html."""
        if full_path.startswith("api/"):
            return FileResponse(STATIC_DIR / "index.html", status_code=404)
        file_path = STATIC_DIR / full_path
        if file_path.is_file():
            return FileResponse(file_path)
        return FileResponse(STATIC_DIR / "index.html")
