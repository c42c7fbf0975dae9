"""
Test configuration and fixtures for the AccessSight API.

Environment is pinned before the app is imported: a throwaway sqlite
database, no AI credentials, and no settle wait in the accessibility engine.
Browser and engine collaborators are replaced with in-memory fakes.
"""

import os
import tempfile
from typing import Any, Dict, Generator, List, Optional

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

load_dotenv()

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    test_db_path = tempfile.mktemp(suffix=".db")
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"

os.environ["GOOGLE_GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["ENGINE_SETTLE_WAIT_MS"] = "0"


class FakeElement:
    def __init__(self, selector: str):
        self.selector = selector
        self.keys: List[str] = []
        self.cleared = False

    def is_displayed(self) -> bool:
        return True

    def clear(self) -> None:
        self.cleared = True

    def send_keys(self, value: str) -> None:
        self.keys.append(value)


class FakeDriver:
    """Stands in for a selenium Chrome driver."""

    def __init__(
        self,
        page_source: str = "<html><head><title>Example</title></head><body><p>Hello</p></body></html>",
        title: str = "Example Domain",
        current_url: str = "https://example.com/",
        get_error: Optional[Exception] = None,
    ):
        self.page_source = page_source
        self.title = title
        self.current_url = current_url
        self.get_error = get_error
        self.visited: List[str] = []
        self.scripts: List[str] = []
        self.elements: Dict[str, FakeElement] = {}
        self.page_load_timeout: Optional[float] = None
        self.script_timeout: Optional[float] = None
        self.quit_calls = 0

    def set_page_load_timeout(self, seconds: float) -> None:
        self.page_load_timeout = seconds

    def set_script_timeout(self, seconds: float) -> None:
        self.script_timeout = seconds

    def get(self, url: str) -> None:
        self.visited.append(url)
        if self.get_error is not None:
            raise self.get_error

    def find_element(self, by: str, value: str) -> FakeElement:
        return self.elements.setdefault(value, FakeElement(value))

    def find_elements(self, by: str, value: str) -> List[FakeElement]:
        return [self.find_element(by, value)]

    def execute_script(self, script: str, *args: Any) -> None:
        self.scripts.append(script)

    def quit(self) -> None:
        self.quit_calls += 1


class FakeAxe:
    """Stands in for axe_selenium_python.Axe."""

    def __init__(self, results: Any = None, run_error: Optional[Exception] = None):
        self.results = {"violations": [], "incomplete": []} if results is None else results
        self.run_error = run_error
        self.injected = False
        self.options: Optional[str] = None

    def __call__(self, driver: Any) -> "FakeAxe":
        self.driver = driver
        return self

    def inject(self) -> None:
        self.injected = True

    def run(self, context: Any = None, options: Optional[str] = None) -> Any:
        self.options = options
        if self.run_error is not None:
            raise self.run_error
        return self.results


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def make_driver():
    """Factory for FakeDriver instances with custom page state."""
    return FakeDriver


@pytest.fixture
def make_axe():
    """Factory for FakeAxe instances with canned results."""
    return FakeAxe


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Test client per test function; entering it runs the lifespan, which
    builds the database and AI client pools.
    """
    with TestClient(test_app) as test_client:
        yield test_client
