import math
from collections import Counter
from typing import Any, Sequence

from app.features.scan.schemas.scan import Issue, IssueType

BASE_SCORE = 100

# Deduction per issue. Errors weigh 6x a notice, warnings 2x.
TYPE_WEIGHTS = {
    IssueType.error: 3.0,
    IssueType.warning: 1.0,
    IssueType.notice: 0.5,
}

# Beyond this many issues, deductions are scaled down so very noisy pages
# don't all collapse to the same floor.
SCALE_THRESHOLD = 50


def _issue_type(issue: Any):
    if isinstance(issue, Issue):
        raw = issue.type
    elif isinstance(issue, dict):
        raw = issue.get("type")
    else:
        return None
    try:
        return IssueType(raw)
    except ValueError:
        return None


def calculate_score(issues: Sequence[Any]) -> int:
    """
    Reduce an issue list to a 0-100 score.

    Accepts Issue models or plain dicts with a ``type`` key. Anything that
    isn't a list/tuple scores 100.
    """
    if not isinstance(issues, (list, tuple)):
        return BASE_SCORE

    counts = Counter(_issue_type(issue) for issue in issues)
    total = sum(counts[issue_type] for issue_type in TYPE_WEIGHTS)
    if total == 0:
        return BASE_SCORE

    scale_factor = SCALE_THRESHOLD / total if total > SCALE_THRESHOLD else 1

    deduction = sum(
        counts[issue_type] * weight * scale_factor
        for issue_type, weight in TYPE_WEIGHTS.items()
    )

    raw = min(BASE_SCORE, max(0.0, BASE_SCORE - deduction))
    # Half-up rounding; round() would send 92.5 to 92
    return int(math.floor(raw + 0.5))
