import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from app.features.scan.services.browser.browser_session import BrowserSession
from app.platform.errors import NavigationError, NavigationTimeout


class TestBrowserSession:

    def test_navigate_returns_rendered_page(self, fake_driver):
        fake_driver.page_source = "<html><body><form></form></body></html>"
        session = BrowserSession(driver_factory=lambda: fake_driver)

        with session:
            page = session.navigate(session.driver, "https://example.com")

        assert page.ok is True
        assert page.html == "<html><body><form></form></body></html>"
        assert page.title == "Example Domain"
        assert page.final_url == "https://example.com/"
        assert fake_driver.visited == ["https://example.com"]

    def test_default_navigation_timeout_is_sixty_seconds(self, fake_driver):
        with BrowserSession(driver_factory=lambda: fake_driver) as session:
            session.navigate(session.driver, "https://example.com")
        assert fake_driver.page_load_timeout == 60

    def test_custom_navigation_timeout(self, fake_driver):
        with BrowserSession(driver_factory=lambda: fake_driver) as session:
            session.navigate(session.driver, "https://example.com", timeout_ms=5000)
        assert fake_driver.page_load_timeout == 5

    def test_timeout_raises_navigation_timeout(self, make_driver):
        driver = make_driver(get_error=TimeoutException("timed out"))

        with pytest.raises(NavigationTimeout) as exc_info:
            with BrowserSession(driver_factory=lambda: driver) as session:
                session.navigate(session.driver, "https://slow.example.com")

        assert "https://slow.example.com" in exc_info.value.message
        assert driver.quit_calls == 1

    def test_driver_error_raises_navigation_error(self, make_driver):
        driver = make_driver(get_error=WebDriverException("net::ERR_NAME_NOT_RESOLVED"))

        with pytest.raises(NavigationError):
            with BrowserSession(driver_factory=lambda: driver) as session:
                session.navigate(session.driver, "https://nowhere.invalid")

        assert driver.quit_calls == 1

    def test_driver_quit_once_on_unrelated_failure(self, fake_driver):
        with pytest.raises(RuntimeError):
            with BrowserSession(driver_factory=lambda: fake_driver):
                raise RuntimeError("analysis blew up")

        assert fake_driver.quit_calls == 1

    def test_close_is_idempotent(self, fake_driver):
        session = BrowserSession(driver_factory=lambda: fake_driver)
        session.open()
        session.close()
        session.close()

        assert fake_driver.quit_calls == 1
        assert session.driver is None
        assert session.closed is True

    def test_close_without_open_does_nothing(self):
        session = BrowserSession(driver_factory=lambda: pytest.fail("driver should not start"))
        session.close()
        assert session.closed is True

    def test_cannot_reopen_after_close(self, fake_driver):
        session = BrowserSession(driver_factory=lambda: fake_driver)
        session.open()
        session.close()
        with pytest.raises(RuntimeError):
            session.open()

    def test_quit_failure_is_contained(self, fake_driver):
        def broken_quit():
            fake_driver.quit_calls += 1
            raise WebDriverException("chrome already gone")

        fake_driver.quit = broken_quit
        session = BrowserSession(driver_factory=lambda: fake_driver)
        session.open()
        session.close()

        assert fake_driver.quit_calls == 1
        assert session.closed is True

    def test_driver_crash_after_load_is_navigation_error(self, make_driver):
        class CrashedTabDriver(type(make_driver())):
            @property
            def page_source(self):
                raise WebDriverException("tab crashed")

            @page_source.setter
            def page_source(self, value):
                pass

        driver = CrashedTabDriver()

        with pytest.raises(NavigationError):
            with BrowserSession(driver_factory=lambda: driver) as session:
                session.navigate(session.driver, "https://example.com")

        assert driver.quit_calls == 1
