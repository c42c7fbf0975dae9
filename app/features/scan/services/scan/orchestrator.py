from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from app.features.scan.schemas.scan import ScanRecord
from app.features.scan.services.analysis.engine_adapter import AccessibilityEngineAdapter, EngineOptions
from app.features.scan.services.analysis.form_detector import has_form_elements
from app.features.scan.services.analysis.issue_enricher import enrich
from app.features.scan.services.analysis.score_calculator import calculate_score
from app.features.scan.services.browser.browser_session import BrowserSession
from app.platform.config import settings
from app.platform.errors import AppError, ScanFailed
from app.platform.logger import get_logger
from app.platform.utils.url_validator import require_valid_url

logger = get_logger(__name__)


class ScanState(str, Enum):
    """Single-page scan state machine"""
    idle = "idle"
    browser_opening = "browser_opening"
    navigating = "navigating"
    detecting = "detecting"
    testing = "testing"
    enriching = "enriching"
    scoring = "scoring"
    complete = "complete"
    failed = "failed"


class ScanOrchestrator:
    """
    Runs one scan: launch -> navigate -> detect -> test -> enrich -> score.

    One instance per request. The browser is released before any result or
    error is handed back, and a failed step fails the whole scan (no retries,
    no partial records).
    """

    def __init__(
        self,
        browser_factory: Callable[[], BrowserSession] = BrowserSession,
        engine: Optional[AccessibilityEngineAdapter] = None,
        navigation_timeout_ms: Optional[int] = None,
    ):
        self.browser_factory = browser_factory
        self.engine = engine or AccessibilityEngineAdapter()
        self.navigation_timeout_ms = navigation_timeout_ms or settings.NAVIGATION_TIMEOUT_MS

        self.state = ScanState.idle
        self.transitions: List[ScanState] = []
        self.failure: Optional[AppError] = None

    def scan(self, url: Optional[str], owning_user: Optional[str] = None) -> ScanRecord:
        """
        Raises:
            InvalidInput: missing or malformed URL; no browser is started
            NavigationTimeout / NavigationError: page could not be loaded
            EngineFailure: accessibility evaluation failed or timed out
            ScanFailed: anything else
        """
        url = require_valid_url(url)

        try:
            record = self._run(url, owning_user)
        except AppError as e:
            self._fail(url, e)
            raise
        except Exception as e:
            error = ScanFailed(f"Scan failed for URL {url}: {e}", details={"url": url})
            self._fail(url, error)
            raise error from e

        self._transition(ScanState.complete, url)
        logger.info(f"Scan complete for {url}: score={record.score}, issues={len(record.issues)}")
        return record

    def _run(self, url: str, owning_user: Optional[str]) -> ScanRecord:
        self._transition(ScanState.browser_opening, url)
        with self.browser_factory() as session:
            self._transition(ScanState.navigating, url)
            page = session.navigate(session.driver, url, self.navigation_timeout_ms)

            self._transition(ScanState.detecting, url)
            has_form = has_form_elements(page.html)

            self._transition(ScanState.testing, url)
            result = self.engine.run(url, session.driver, EngineOptions.for_page(has_form))

        self._transition(ScanState.enriching, url)
        issues = enrich(result.issues, has_form)

        self._transition(ScanState.scoring, url)
        score = calculate_score(issues)

        return ScanRecord(
            url=url,
            issues=issues,
            document_title=result.document_title or page.title,
            page_url=result.page_url or page.final_url,
            score=score,
            has_form=has_form,
            created_at=datetime.now(timezone.utc),
            owning_user=owning_user,
        )

    def _transition(self, state: ScanState, url: str) -> None:
        self.state = state
        self.transitions.append(state)
        logger.info(f"[scan] {url} -> {state.value}")

    def _fail(self, url: str, error: AppError) -> None:
        failed_step = self.state.value
        self.failure = error
        self.state = ScanState.failed
        self.transitions.append(ScanState.failed)
        logger.error(f"[scan] {url} failed during {failed_step}: {type(error).__name__}: {error.message}")
