"""
Accessibility engine adapter.

Runs axe-core inside an already-navigated Selenium browser and maps its
results onto the error/warning/notice issue model used for scoring.
"""
import json
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from axe_selenium_python import Axe
from selenium.common.exceptions import TimeoutException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from app.features.scan.schemas.scan import Issue, IssueType
from app.platform.config import settings
from app.platform.errors import EngineFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)


class RuleSet(str, Enum):
    structural = "structural-rules"
    semantic = "semantic-rules"


# axe-core tags evaluated for each rule set
RULE_SET_TAGS: Dict[RuleSet, Tuple[str, ...]] = {
    RuleSet.structural: ("wcag2a", "wcag2aa"),
    RuleSet.semantic: ("wcag21a", "wcag21aa", "best-practice", "cat.aria", "cat.forms", "cat.name-role-value"),
}

DEFAULT_INTERACTION_ACTIONS: Tuple[str, ...] = (
    "click element html",
    "wait for element body to be visible",
)

IMPACT_TO_TYPE: Dict[Optional[str], IssueType] = {
    "critical": IssueType.error,
    "serious": IssueType.error,
    "moderate": IssueType.warning,
    "minor": IssueType.notice,
}

CONTEXT_MAX_LENGTH = 300


@dataclass(frozen=True)
class EngineOptions:
    include_notices: bool = True
    include_warnings: bool = True
    settle_wait_ms: int = field(default_factory=lambda: settings.ENGINE_SETTLE_WAIT_MS)
    timeout_ms: int = field(default_factory=lambda: settings.ENGINE_TIMEOUT_MS)
    interaction_actions: Tuple[str, ...] = DEFAULT_INTERACTION_ACTIONS
    rule_sets: FrozenSet[RuleSet] = frozenset({RuleSet.structural})

    @classmethod
    def for_page(cls, has_form: bool, **overrides: Any) -> "EngineOptions":
        """Semantic/ARIA rules only run when the page has interactive elements."""
        rule_sets = {RuleSet.structural, RuleSet.semantic} if has_form else {RuleSet.structural}
        return cls(rule_sets=frozenset(rule_sets), **overrides)

    def axe_options(self) -> Dict[str, Any]:
        tags = [tag for rule_set in RuleSet if rule_set in self.rule_sets for tag in RULE_SET_TAGS[rule_set]]
        return {
            "runOnly": {"type": "tag", "values": tags},
            "resultTypes": ["violations", "incomplete"],
        }


@dataclass(frozen=True)
class EngineResult:
    issues: List[Issue]
    document_title: Optional[str] = None
    page_url: Optional[str] = None


# ============================================================================
# Scripted interaction actions
# ============================================================================

def _click(driver: WebDriver, match: "re.Match", timeout: float) -> None:
    element = driver.find_element(By.CSS_SELECTOR, match["selector"])
    # JS click: the target may be a non-interactable container such as <html>
    driver.execute_script("arguments[0].click();", element)


def _set_field(driver: WebDriver, match: "re.Match", timeout: float) -> None:
    element = driver.find_element(By.CSS_SELECTOR, match["selector"])
    element.clear()
    element.send_keys(match["value"])


def _wait_for_element(driver: WebDriver, match: "re.Match", timeout: float) -> None:
    locator = (By.CSS_SELECTOR, match["selector"])
    state = match["state"]
    if state == "visible":
        condition = EC.visibility_of_element_located(locator)
    elif state == "hidden":
        condition = EC.invisibility_of_element_located(locator)
    elif state == "added":
        condition = EC.presence_of_element_located(locator)
    else:
        condition = lambda d: not d.find_elements(*locator)
    WebDriverWait(driver, timeout).until(condition)


INTERACTION_ACTIONS: Tuple[Tuple["re.Pattern", Callable[[WebDriver, "re.Match", float], None]], ...] = (
    (re.compile(r"^wait for element (?P<selector>.+?) to be (?P<state>visible|hidden|added|removed)$", re.I), _wait_for_element),
    (re.compile(r"^set field (?P<selector>.+?) to (?P<value>.+)$", re.I), _set_field),
    (re.compile(r"^click(?: element)? (?P<selector>.+)$", re.I), _click),
)


def run_interaction_action(driver: WebDriver, action: str, timeout: float) -> None:
    for pattern, handler in INTERACTION_ACTIONS:
        match = pattern.match(action.strip())
        if match:
            handler(driver, match, timeout)
            return
    raise EngineFailure(f"Unsupported interaction action: {action!r}")


# ============================================================================
# Result mapping
# ============================================================================

def _selector(target: Any) -> Optional[str]:
    if not target:
        return None
    first = target[0]
    # iframe / shadow DOM targets are nested selector paths
    if isinstance(first, list):
        return " ".join(str(part) for part in first)
    return str(first)


def _context(html: Optional[str]) -> Optional[str]:
    if not html:
        return None
    return html if len(html) <= CONTEXT_MAX_LENGTH else html[:CONTEXT_MAX_LENGTH] + "..."


def _issues_for_rule(rule: Dict[str, Any], issue_type: IssueType) -> Iterator[Issue]:
    help_text = rule.get("help") or rule.get("description") or rule.get("id", "")
    message = f"{help_text} ({rule['helpUrl']})" if rule.get("helpUrl") else help_text
    for node in rule.get("nodes") or [{}]:
        yield Issue(
            type=issue_type,
            code=rule.get("id") or "unknown",
            message=message,
            selector=_selector(node.get("target")),
            context=_context(node.get("html")),
        )


def map_axe_results(raw: Any, options: EngineOptions) -> List[Issue]:
    """Flatten axe-core output into one Issue per affected node."""
    if not isinstance(raw, dict):
        raise EngineFailure("Accessibility engine returned no results")

    issues: List[Issue] = []
    for rule in raw.get("violations") or []:
        issue_type = IMPACT_TO_TYPE.get(rule.get("impact"), IssueType.error)
        issues.extend(_issues_for_rule(rule, issue_type))
    for rule in raw.get("incomplete") or []:
        issues.extend(_issues_for_rule(rule, IssueType.warning))

    return [
        issue for issue in issues
        if (issue.type is not IssueType.warning or options.include_warnings)
        and (issue.type is not IssueType.notice or options.include_notices)
    ]


class AccessibilityEngineAdapter:
    def __init__(
        self,
        axe_factory: Callable[[WebDriver], Axe] = Axe,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._axe_factory = axe_factory
        self._clock = clock
        self._sleep = sleep

    def run(self, url: str, driver: WebDriver, options: EngineOptions) -> EngineResult:
        """
        Evaluate the page currently loaded in ``driver``.

        The whole evaluation (settle wait, interaction actions, axe run) is
        bounded by ``options.timeout_ms``.

        Raises:
            EngineFailure: on any failure or when the time budget runs out
        """
        timeout_s = options.timeout_ms / 1000
        deadline = self._clock() + timeout_s
        rule_sets = sorted(rule_set.value for rule_set in options.rule_sets)
        logger.info(f"Running accessibility engine on {url} (rule_sets={rule_sets})")

        try:
            if options.settle_wait_ms:
                self._sleep(options.settle_wait_ms / 1000)

            for action in options.interaction_actions:
                run_interaction_action(driver, action, self._remaining(deadline, url))

            # axe only gets what is left of the overall budget
            driver.set_script_timeout(self._remaining(deadline, url))
            axe = self._axe_factory(driver)
            axe.inject()
            raw = axe.run(options=json.dumps(options.axe_options()))

            document_title = driver.title or None
            page_url = driver.current_url or url
        except EngineFailure:
            raise
        except TimeoutException as e:
            logger.error(f"Accessibility engine timed out on {url}")
            raise EngineFailure(
                f"Accessibility evaluation timed out after {options.timeout_ms // 1000} seconds for URL: {url}",
                details={"url": url},
            ) from e
        except Exception as e:
            logger.error(f"Accessibility engine failed on {url}: {e}")
            raise EngineFailure(
                f"Accessibility engine failed for URL {url}: {e}",
                details={"url": url},
            ) from e

        self._remaining(deadline, url)

        issues = map_axe_results(raw, options)
        logger.info(f"Accessibility engine found {len(issues)} issues on {url}")
        return EngineResult(issues=issues, document_title=document_title, page_url=page_url)

    def _remaining(self, deadline: float, url: str) -> float:
        remaining = deadline - self._clock()
        if remaining <= 0:
            logger.error(f"Accessibility engine exceeded its time budget on {url}")
            raise EngineFailure(
                f"Accessibility evaluation exceeded its time budget for URL: {url}",
                details={"url": url},
            )
        return remaining
