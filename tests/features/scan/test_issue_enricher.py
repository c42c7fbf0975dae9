from app.features.scan.schemas.scan import Issue, IssueType
from app.features.scan.services.analysis.issue_enricher import FORM_DETECTED_NOTICE, enrich


def contrast_issue():
    return Issue(
        type=IssueType.error,
        code="color-contrast",
        message="Elements must meet minimum color contrast ratio thresholds",
        selector="p.lead",
        context="<p class=\"lead\">Hi</p>",
    )


class TestEnrich:

    def test_appends_notice_when_forms_have_no_issues(self):
        issues = [contrast_issue()]
        enriched = enrich(issues, has_form=True)

        assert enriched[:-1] == issues
        notice = enriched[-1]
        assert notice.type is IssueType.notice
        assert notice.code == "WCAG2AA.info.form-detected"
        assert notice.selector == "form"

    def test_appends_notice_to_empty_list(self):
        assert enrich([], has_form=True) == [FORM_DETECTED_NOTICE]

    def test_no_forms_returns_input_unchanged(self):
        issues = [contrast_issue()]
        assert enrich(issues, has_form=False) == issues
        assert enrich([], has_form=False) == []

    def test_selector_reference_suppresses_notice(self):
        issues = [Issue(type=IssueType.error, code="x", message="Bad", selector="#signup > INPUT")]
        assert enrich(issues, has_form=True) == issues

    def test_message_reference_suppresses_notice(self):
        issues = [Issue(type=IssueType.warning, code="label", message="Form elements must have LABELS")]
        assert enrich(issues, has_form=True) == issues

    def test_input_list_is_not_mutated(self):
        issues = [contrast_issue()]
        enrich(issues, has_form=True)
        assert issues == [contrast_issue()]

    def test_enriching_twice_adds_a_single_notice(self):
        once = enrich([contrast_issue()], has_form=True)
        twice = enrich(once, has_form=True)

        assert twice == once
        assert sum(1 for issue in twice if issue.code == "WCAG2AA.info.form-detected") == 1

    def test_existing_order_preserved(self):
        issues = [
            Issue(type=IssueType.notice, code="a"),
            Issue(type=IssueType.error, code="b"),
            Issue(type=IssueType.warning, code="c"),
        ]
        enriched = enrich(issues, has_form=True)
        assert [issue.code for issue in enriched] == ["a", "b", "c", "WCAG2AA.info.form-detected"]
