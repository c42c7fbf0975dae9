from sqlalchemy import Boolean, Column, Integer, JSON, String, Text, Index

from app.platform.db.base import BaseModel


class ScanResult(BaseModel):
    """
    Persisted outcome of one page scan.

    ``issues`` holds the ordered issue list exactly as it was scored,
    including any synthetic advisory notices.
    """
    __tablename__ = "scan_results"

    url = Column(Text, nullable=False)
    issues = Column(JSON, nullable=False, default=list)
    document_title = Column(String(512), nullable=True)
    page_url = Column(Text, nullable=True)
    score = Column(Integer, nullable=False)
    has_form = Column(Boolean, nullable=False, default=False)

    # Owning user, if the scan was requested by an authenticated caller
    user_id = Column(String, nullable=True, index=True)

    __table_args__ = (
        Index('idx_scan_results_user_created', 'user_id', 'created_at'),
    )
