import re
from typing import Optional, Pattern, Tuple

# Opening tags of interactive form elements. Only tag presence matters,
# nesting is not validated.
FORM_ELEMENT_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(rf"<{tag}(?=[\s/>])[^>]*>", re.IGNORECASE)
    for tag in ("form", "input", "select", "textarea", "button", "label")
)


def has_form_elements(html: Optional[str]) -> bool:
    """Return True if the HTML contains any interactive form element."""
    if not html:
        return False
    return any(pattern.search(html) for pattern in FORM_ELEMENT_PATTERNS)
