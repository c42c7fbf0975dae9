import pytest

from app.features.fix.services.templates import (
    ALT_TEXT_FIX,
    COLOR_CONTRAST_FIX,
    FORM_LABEL_FIX,
    GENERAL_RECOMMENDATIONS,
    RATE_LIMITED_REASON,
    generic_advisory,
    match_rule_template,
)
from app.features.scan.schemas.scan import Issue, IssueType


def issue(message, issue_type=IssueType.error):
    return Issue(type=issue_type, code="rule", message=message)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Images must have alternate text", ALT_TEXT_FIX),
        ("Image is missing descriptive text", ALT_TEXT_FIX),
        ("Form elements must have labels", FORM_LABEL_FIX),
        ("This form field has no accessible name", FORM_LABEL_FIX),
        ("Elements must meet minimum color contrast ratio thresholds", COLOR_CONTRAST_FIX),
        ("Foreground COLOR too close to background", COLOR_CONTRAST_FIX),
    ],
)
def test_rule_template_matches_message(message, expected):
    template = match_rule_template(issue(message))
    assert template is not None
    assert template.text == expected


def test_alt_text_is_checked_before_form_label():
    template = match_rule_template(issue("Image button in form has no alt attribute"))
    assert template.name == "alt-text"


def test_form_label_is_checked_before_contrast():
    template = match_rule_template(issue("Label colour contrast is too low"))
    assert template.name == "form-label"


@pytest.mark.parametrize("message", ["Heading levels should only increase by one", "", None])
def test_no_template_for_unrelated_message(message):
    assert match_rule_template(Issue(type=IssueType.notice, message=message or "")) is None


@pytest.mark.parametrize("issue_type", list(IssueType))
def test_generic_advisory_is_keyed_by_type(issue_type):
    text = generic_advisory(issue("anything", issue_type), RATE_LIMITED_REASON)

    assert text == f"{RATE_LIMITED_REASON}\n\nGeneral recommendation: {GENERAL_RECOMMENDATIONS[issue_type]}"
