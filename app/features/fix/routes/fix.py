import asyncio

from fastapi import APIRouter, Depends

from app.features.fix.dependencies.fix import get_fix_engine
from app.features.fix.schemas.fix import FixRequest, FixResponse
from app.features.fix.services.fix_engine import FixSuggestionEngine
from app.platform.errors import AppError, FixSuggestionFailed, InvalidInput
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/fix", tags=["fix"])


@router.post("")
async def suggest_fix(
    payload: FixRequest,
    engine: FixSuggestionEngine = Depends(get_fix_engine),
):
    if not payload.html or payload.issue is None:
        raise InvalidInput("Missing html or issue")

    try:
        suggestion = await asyncio.to_thread(engine.suggest, payload.html, payload.issue)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Fix suggestion error for issue {payload.issue.code}: {e}")
        raise FixSuggestionFailed(details={"issue_code": payload.issue.code}) from e

    return api_response(
        data=FixResponse(fix=suggestion.text, source_provider=suggestion.source_provider),
        message="Fix suggestion generated",
    )
