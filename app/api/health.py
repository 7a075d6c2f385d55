"""
Liveness plus a database ping. Answers JSON {"status", "db"} instead of a
plain-text "OK" body.
"""

import logging
from fastapi import APIRouter, Request
from sqlalchemy import text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["core"])


@router.get("/health")
async def health_check(request: Request):
    engine = getattr(request.app.state, "engine", None)
    db_status = "error"
    if engine is not None:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "ok"
        except Exception as exc:
            logger.warning("database health check failed: %s", exc)

    return {"status": "ok", "db": db_status}
