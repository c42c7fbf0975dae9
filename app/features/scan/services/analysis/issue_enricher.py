from typing import List, Sequence

from app.features.scan.schemas.scan import Issue, IssueType
from app.platform.logger import get_logger

logger = get_logger(__name__)

FORM_TOKENS = ("form", "input", "select", "label")

FORM_DETECTED_NOTICE = Issue(
    type=IssueType.notice,
    code="WCAG2AA.info.form-detected",
    message="Form elements detected on page. Ensure all forms are fully accessible.",
    selector="form",
    context="<form>...</form>",
)


def _references_form(issue: Issue) -> bool:
    haystacks = ((issue.selector or "").lower(), (issue.message or "").lower())
    return any(token in text for text in haystacks for token in FORM_TOKENS)


def enrich(issues: Sequence[Issue], has_form: bool) -> List[Issue]:
    """
    Append a form-detected notice when the page has forms but no reported
    issue touches them. Existing issues are kept in order and never changed.

    The notice itself references ``form``, so enriching twice is a no-op.
    """
    enriched = list(issues)
    if not has_form:
        return enriched

    if any(_references_form(issue) for issue in enriched):
        return enriched

    logger.info("Forms detected with no form-related issues; adding advisory notice")
    enriched.append(FORM_DETECTED_NOTICE)
    return enriched
