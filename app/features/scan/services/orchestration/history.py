from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scan.models.scan_result import ScanResult
from app.features.scan.schemas.scan import Issue, ScanRecord
from app.platform.config import settings
from app.platform.errors import AccessDenied, ScanNotFound
from app.platform.logger import get_logger

logger = get_logger(__name__)


def to_scan_record(row: ScanResult) -> ScanRecord:
    return ScanRecord(
        id=row.id,
        url=row.url,
        issues=[Issue(**issue) for issue in row.issues or []],
        document_title=row.document_title,
        page_url=row.page_url,
        score=row.score,
        has_form=row.has_form,
        created_at=row.created_at,
        owning_user=row.user_id,
    )


async def save_scan_record(db: AsyncSession, record: ScanRecord) -> ScanRecord:
    """Persist a completed scan and return it with its assigned id."""
    row = ScanResult(
        url=record.url,
        issues=[issue.model_dump(mode="json") for issue in record.issues],
        document_title=record.document_title,
        page_url=record.page_url,
        score=record.score,
        has_form=record.has_form,
        user_id=record.owning_user,
        created_at=record.created_at,
    )
    try:
        db.add(row)
        await db.commit()
        await db.refresh(row)
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to save scan result for {record.url}: {str(e)}")
        raise

    logger.info(f"Saved scan {row.id} for {record.url} (score={record.score})")
    return record.model_copy(update={"id": row.id})


async def get_scan_record(db: AsyncSession, scan_id: str, user_id: Optional[str] = None) -> ScanRecord:
    row = await db.get(ScanResult, scan_id)
    if row is None:
        raise ScanNotFound(details={"scan_id": scan_id})

    # Owned scans are only visible to their owner
    if user_id and row.user_id and row.user_id != user_id:
        logger.warning(f"User {user_id} denied access to scan {scan_id}")
        raise AccessDenied(details={"scan_id": scan_id})

    return to_scan_record(row)


async def list_scan_history(
    db: AsyncSession, user_id: Optional[str] = None, limit: Optional[int] = None
) -> List[ScanRecord]:
    """Most recent scans first; only the caller's own when ``user_id`` is given."""
    query = select(ScanResult).order_by(desc(ScanResult.created_at)).limit(limit or settings.HISTORY_LIMIT)
    if user_id:
        query = query.where(ScanResult.user_id == user_id)

    result = await db.execute(query)
    rows = result.scalars().all()
    logger.info(f"Found {len(rows)} scans for user {user_id or 'anonymous'}")
    return [to_scan_record(row) for row in rows]
