from fastapi import APIRouter, Request, status
from sqlalchemy import text

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter()

@router.get("/health", tags=["health"])
async def health_check(request: Request):
    database_status = "connected"
    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}")
        database_status = "unavailable"

    providers = request.app.state.providers
    return api_response(
        data={
            "status": "ok",
            "service": "AccessSight",
            "database": database_status,
            "ai_providers": {
                "gemini": providers.gemini is not None,
                "openai": providers.openai is not None,
            },
        },
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
    )
