from dataclasses import dataclass
from typing import Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.remote.webdriver import WebDriver

from app.platform.config import settings
from app.platform.errors import NavigationError, NavigationTimeout
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NavigationResult:
    html: str
    ok: bool
    title: Optional[str] = None
    final_url: Optional[str] = None


class BrowserSession:
    """
    One headless Chrome per scan request.

    Use as a context manager so the driver is quit exactly once however the
    scan ends:

        with BrowserSession() as session:
            page = session.navigate(session.driver, url)
    """

    def __init__(
        self,
        chromedriver_path: Optional[str] = None,
        driver_factory: Optional[Callable[[], WebDriver]] = None,
    ):
        self.chromedriver_path = chromedriver_path or settings.CHROMEDRIVER_PATH
        self._driver_factory = driver_factory or self._build_driver
        self.driver: Optional[WebDriver] = None
        self.closed = False

    def _build_driver(self) -> webdriver.Chrome:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-setuid-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")

        if self.chromedriver_path:
            driver_service = Service(executable_path=self.chromedriver_path)
            return webdriver.Chrome(service=driver_service, options=chrome_options)
        return webdriver.Chrome(options=chrome_options)

    def open(self) -> WebDriver:
        if self.closed:
            raise RuntimeError("BrowserSession cannot be reopened after close()")
        if self.driver is None:
            self.driver = self._driver_factory()
            logger.info("Headless browser started")
        return self.driver

    def navigate(
        self, driver: WebDriver, url: str, timeout_ms: Optional[int] = None
    ) -> NavigationResult:
        """
        Load ``url`` and return the rendered HTML.

        Raises:
            NavigationTimeout: page load exceeded ``timeout_ms``
            NavigationError: any other driver failure while loading
        """
        timeout_ms = timeout_ms or settings.NAVIGATION_TIMEOUT_MS

        try:
            driver.set_page_load_timeout(timeout_ms / 1000)
            logger.info(f"Navigating to {url}")
            driver.get(url)

            html = driver.page_source or ""
            title = driver.title or None
            final_url = driver.current_url
        except TimeoutException as e:
            logger.error(f"Page load timeout after {timeout_ms}ms for {url}")
            raise NavigationTimeout(
                f"Page load timeout after {timeout_ms // 1000} seconds for URL: {url}",
                details={"url": url},
            ) from e
        except WebDriverException as e:
            logger.error(f"WebDriver error loading {url}: {e.msg or e}")
            raise NavigationError(
                f"WebDriver error loading URL {url}: {e.msg or e}",
                details={"url": url},
            ) from e

        return NavigationResult(
            html=html,
            ok=bool(html),
            title=title,
            final_url=final_url,
        )

    def close(self) -> None:
        """Quit the driver. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True

        driver, self.driver = self.driver, None
        if driver is None:
            return
        try:
            driver.quit()
            logger.info("Headless browser closed")
        except WebDriverException as e:
            logger.warning(f"Browser did not quit cleanly: {e.msg or e}")

    def __enter__(self) -> "BrowserSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
