import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scan.dependencies.scan import get_scan_orchestrator
from app.features.scan.schemas.scan import ScanRecord, ScanRequest
from app.features.scan.services.orchestration.history import (
    get_scan_record,
    list_scan_history,
    save_scan_record,
)
from app.features.scan.services.scan.orchestrator import ScanOrchestrator
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.errors import InvalidInput, ScanDeadlineExceeded
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/scan", tags=["scan"])


async def run_scan(orchestrator: ScanOrchestrator, url: str, user_id: Optional[str]) -> ScanRecord:
    """
    Run the blocking scan off the event loop.

    When SCAN_DEADLINE_SECONDS is set the request fails fast past it; the
    worker thread still finishes and releases its browser.
    """
    work = asyncio.to_thread(orchestrator.scan, url, user_id)
    deadline = settings.SCAN_DEADLINE_SECONDS
    if not deadline:
        return await work

    try:
        return await asyncio.wait_for(work, timeout=deadline)
    except asyncio.TimeoutError:
        logger.error(f"Scan of {url} exceeded the {deadline}s request deadline")
        raise ScanDeadlineExceeded(
            f"Scan exceeded the {deadline} second request deadline for URL: {url}",
            details={"url": url},
        )


@router.post("")
async def start_scan(
    payload: ScanRequest,
    db: AsyncSession = Depends(get_db),
    orchestrator: ScanOrchestrator = Depends(get_scan_orchestrator),
):
    if not payload.url:
        raise InvalidInput("Missing URL")

    logger.info(f"Scan request: url={payload.url}, user_id={payload.user_id}")
    record = await run_scan(orchestrator, payload.url, payload.user_id)
    saved = await save_scan_record(db, record)

    return api_response(
        data=saved,
        message="Scan completed",
        status_code=status.HTTP_200_OK,
    )


@router.get("/history")
async def scan_history(
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    records = await list_scan_history(db, user_id=user_id)
    return api_response(data=records, message=f"Found {len(records)} scans")


@router.get("/{scan_id}")
async def get_scan(
    scan_id: str,
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    record = await get_scan_record(db, scan_id, user_id=user_id)
    return api_response(data=record, message="Scan retrieved")
