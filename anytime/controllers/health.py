import logging
from typing import Any

from fastapi import APIRouter

from anytime import db, state
from anytime.db.schema import get_schema_info

logger = logging.getLogger("anytime.health")
router = APIRouter()


@router.get("/health")
async def health() -> dict[str, Any]:
    redis_status = "disconnected"
    if state.redis_client:
        try:
            await state.redis_client.ping()
            redis_status = "healthy"
        except Exception:
            redis_status = "unhealthy"

    database: dict[str, Any] = {"enabled": state.db_enabled}
    if state.db_enabled:
        database.update(db.get_pool_stats())
        try:
            database["schema"] = await get_schema_info()
        except Exception as e:
            logger.warning("Schema lookup failed: %s", e)
            database["schema"] = None

    return {"status": "ok", "redis": redis_status, "database": database}
