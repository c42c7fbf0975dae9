from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.features.scan.schemas.scan import Issue, IssueType


class FixSource(str, Enum):
    """Which stage of the fallback chain produced a suggestion."""
    primary_ai = "primary-ai"
    secondary_ai = "secondary-ai"
    rule_based = "rule-based"
    generic = "generic"


class FixRequest(BaseModel):
    """Both fields are required; missing ones are rejected with a 400."""
    html: Optional[str] = None
    issue: Optional[Issue] = None

    @field_validator("issue", mode="before")
    @classmethod
    def default_issue_type(cls, value):
        # Clients may omit the severity; treat it as an error
        if isinstance(value, dict) and not value.get("type"):
            return {**value, "type": IssueType.error.value}
        return value

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "html": "<img src=\"logo.png\">",
                "issue": {
                    "type": "error",
                    "code": "image-alt",
                    "message": "Images must have alternate text",
                    "selector": "img",
                },
            }
        }
    )


class FixSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    source_provider: FixSource


class FixResponse(BaseModel):
    fix: str
    source_provider: FixSource
