"""
Scan Schemas

Issue and scan-record models shared by the scan pipeline and the API.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IssueType(str, Enum):
    """Severity reported by the accessibility engine."""
    error = "error"
    warning = "warning"
    notice = "notice"


class Issue(BaseModel):
    """One accessibility defect. Never mutated once produced."""
    model_config = ConfigDict(frozen=True)

    type: IssueType
    code: str = ""
    message: str = ""
    selector: Optional[str] = None
    context: Optional[str] = None


class ScanRequest(BaseModel):
    """Request to scan a single page."""
    url: Optional[str] = None
    user_id: Optional[str] = None  # For authenticated callers

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com",
            }
        }
    )


class ScanRecord(BaseModel):
    """Result of one complete scan; serialized with camelCase keys."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    url: str
    issues: List[Issue] = Field(default_factory=list)
    document_title: Optional[str] = None
    page_url: Optional[str] = None
    score: int = Field(ge=0, le=100)
    has_form: bool = False
    created_at: datetime
    owning_user: Optional[str] = None
