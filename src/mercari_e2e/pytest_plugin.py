import os
import re
from pathlib import Path

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from .config import BROWSERS, get_settings
from .log import configure_logging, get_logger
from .page_context import page_session
from .reporter import SCREENSHOT_PROPERTY, RunReporter


REPORTER_NAME = "mercari-e2e-reporter"

logger = get_logger("plugin")


def pytest_addoption(parser):
    group = parser.getgroup("mercari-e2e")
    group.addoption("--e2e-live", action="store_true", default=False, help="Run specs against the live site")
    group.addoption("--e2e-headed", action="store_true", default=False, help="Show the browser window")
    group.addoption("--e2e-browser", default=None, choices=BROWSERS, help="chromium, firefox or webkit")


def pytest_configure(config):
    config.addinivalue_line("markers", "live: drives a real browser against the site under test")
    config.addinivalue_line("markers", "smoke: quick checks of the main flows")
    config.addinivalue_line("markers", "reg: regression scenarios")
    if not any(isinstance(p, RunReporter) for p in config.pluginmanager.get_plugins()):
        config.pluginmanager.register(RunReporter(), REPORTER_NAME)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    # Fixtures read item.rep_setup / item.rep_call during teardown.
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def live_enabled(config) -> bool:
    if config.getoption("--e2e-live"):
        return True
    return os.environ.get("E2E_LIVE", "").lower() in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    if live_enabled(config):
        return
    skip_live = pytest.mark.skip(reason="live specs need --e2e-live or E2E_LIVE=1")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


def sanitize_for_filename(text: str) -> str:
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "_", text)
    return text.strip("_").lower()[:100]


def screenshot_path(directory: str | Path, nodeid: str) -> Path:
    return Path(directory) / f"failure_{sanitize_for_filename(nodeid) or 'test'}.png"


def failed(item) -> bool:
    return any(
        getattr(item, f"rep_{when}", None) is not None and getattr(item, f"rep_{when}").failed
        for when in ("setup", "call")
    )


async def capture_failure_screenshot(page, item, directory: str | Path) -> Path | None:
    """Save a full-page screenshot when ``item`` failed; records the path in ``item.user_properties``."""
    if not failed(item):
        return None
    shot = screenshot_path(directory, item.nodeid)
    try:
        shot.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(shot), full_page=True)
    except Exception as exc:
        logger.warning(f"Could not save failure screenshot for {item.nodeid}: {exc}")
        return None
    item.user_properties.append((SCREENSHOT_PROPERTY, str(shot)))
    logger.info(f"Failure screenshot saved: {shot}")
    return shot


@pytest.fixture(scope="session")
def settings():
    configure_logging()
    return get_settings()


@pytest_asyncio.fixture
async def browser(settings, pytestconfig):
    name = pytestconfig.getoption("--e2e-browser") or settings.browser
    headless = settings.headless and not pytestconfig.getoption("--e2e-headed")
    async with async_playwright() as p:
        p.selectors.set_test_id_attribute(settings.test_id_attribute)
        browser = await getattr(p, name).launch(headless=headless)
        yield browser
        await browser.close()


@pytest_asyncio.fixture
async def browser_context(browser, settings):
    context = await browser.new_context(
        base_url=settings.base_url,
        viewport=settings.viewport,
        ignore_https_errors=True,
        accept_downloads=True,
    )
    yield context
    await context.close()


@pytest_asyncio.fixture
async def page(browser_context, settings, request):
    page = await browser_context.new_page()
    page.set_default_timeout(settings.timeouts.action)
    page.set_default_navigation_timeout(settings.timeouts.navigation)
    yield page
    await capture_failure_screenshot(page, request.node, settings.screenshot_dir)
    await page.close()


@pytest.fixture
def bound_page(page):
    """Binds ``page`` as the current page for the helper functions during one test."""
    with page_session(page) as session:
        yield session
