"""
Canned remediation text used when no AI provider can answer.

Rule templates are matched on the issue message; the generic advisory is
keyed only by severity and always produces text.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from app.features.scan.schemas.scan import Issue, IssueType


@dataclass(frozen=True)
class RuleTemplate:
    name: str
    # Matches when every keyword of any one group appears in the message
    triggers: Tuple[Tuple[str, ...], ...]
    text: str

    def matches(self, message: str) -> bool:
        return any(all(keyword in message for keyword in group) for group in self.triggers)


ALT_TEXT_FIX = """It appears there's an image missing alt text. Add descriptive alt attributes to your images:

```html
<!-- Before -->
<img src="image.jpg">

<!-- After -->
<img src="image.jpg" alt="Descriptive text about the image content">
```

For decorative images that don't convey information, use an empty alt attribute:
```html
<img src="decorative.jpg" alt="">
```"""

FORM_LABEL_FIX = """Form inputs should be associated with labels:

```html
<!-- Before -->
<input type="text" name="username">

<!-- After -->
<label for="username">Username:</label>
<input type="text" name="username" id="username">
```

Or you can wrap the input with the label:
```html
<label>
  Username:
  <input type="text" name="username">
</label>
```"""

COLOR_CONTRAST_FIX = """This appears to be a color contrast issue. Ensure text has sufficient contrast with its background:

1. For normal text (under 18pt), the contrast ratio should be at least 4.5:1
2. For large text (18pt+), the contrast ratio should be at least 3:1

Consider using a color contrast checker to verify your colors meet accessibility standards."""

# Checked in order; first match wins
RULE_TEMPLATES: Tuple[RuleTemplate, ...] = (
    RuleTemplate("alt-text", (("alt",), ("image", "text")), ALT_TEXT_FIX),
    RuleTemplate("form-label", (("label",), ("form",)), FORM_LABEL_FIX),
    RuleTemplate("color-contrast", (("contrast",), ("color",)), COLOR_CONTRAST_FIX),
)

GENERAL_RECOMMENDATIONS = {
    IssueType.error: "This is a critical accessibility issue that should be fixed immediately. Consider consulting the WCAG guidelines.",
    IssueType.warning: "This is a potential accessibility issue that may affect some users. Review the element against WCAG guidelines.",
    IssueType.notice: "This is a minor accessibility concern that could be improved for better user experience.",
}

RATE_LIMITED_REASON = "Unable to generate fix suggestion due to API rate limits."
PROVIDER_ERROR_REASON = "Could not generate AI-powered fix due to API errors."
NO_PROVIDER_REASON = "No AI provider keys available."


def match_rule_template(issue: Issue) -> Optional[RuleTemplate]:
    message = (issue.message or "").lower()
    for template in RULE_TEMPLATES:
        if template.matches(message):
            return template
    return None


def general_recommendation(issue: Issue) -> str:
    return GENERAL_RECOMMENDATIONS[issue.type]


def generic_advisory(issue: Issue, reason: str = NO_PROVIDER_REASON) -> str:
    return f"{reason}\n\nGeneral recommendation: {general_recommendation(issue)}"
