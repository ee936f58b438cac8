"""Liveness endpoint with a database probe."""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.database import get_engine
from shared.schemas.common import HealthResponse

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["health"])


async def _check_db() -> bool:
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("health_db_check_failed", error=str(e))
        return False


@router.get("/health", response_model=HealthResponse)
async def health() -> JSONResponse:
    db_ok = await _check_db()
    body = HealthResponse(status="ok" if db_ok else "fail", database=db_ok)
    return JSONResponse(status_code=200 if db_ok else 503, content=body.model_dump())
