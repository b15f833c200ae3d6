import pytest

from fakes import FakePage
from mercari_e2e.config import reset_settings
from mercari_e2e.page_context import page_session


pytest_plugins = ["mercari_e2e.pytest_plugin", "pytester"]

E2E_ENV_VARS = (
    "URL",
    "E2E_HEADLESS",
    "E2E_BROWSER",
    "E2E_LOAD_STATE",
    "E2E_TEST_ID_ATTRIBUTE",
    "E2E_EXPECT_TIMEOUT",
    "E2E_USERNAME",
    "E2E_PASSWORD",
    "E2E_TOTP_SECRET",
    "E2E_TIMEOUT_INSTANT",
    "E2E_TIMEOUT_SMALL",
    "E2E_TIMEOUT_STANDARD",
    "E2E_TIMEOUT_ACTION",
    "E2E_TIMEOUT_NAVIGATION",
    "E2E_TIMEOUT_TEST",
    "E2E_SCREENSHOT_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(request, monkeypatch):
    """Unit tests run against default settings; live specs keep the caller's environment."""
    if request.node.get_closest_marker("live") is None:
        for name in E2E_ENV_VARS:
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def session(fake_page):
    with page_session(fake_page) as bound:
        yield bound
