import asyncio
import logging
from dataclasses import asdict, dataclass

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .log import GREEN, RESET, YELLOW, configure_logging


PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"
TIMED_OUT = "timed_out"

SCREENSHOT_PROPERTY = "screenshot"


@dataclass(frozen=True)
class CaseResult:
    """Outcome of one test case as seen by the reporter."""

    title: str
    nodeid: str
    status: str
    error: str | None = None
    duration: float = 0.0
    screenshot: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class _Pending:
    title: str
    status: str = PASSED
    error: str | None = None
    duration: float = 0.0


def screenshot_of(report) -> str | None:
    for name, value in getattr(report, "user_properties", None) or []:
        if name == SCREENSHOT_PROPERTY:
            return value
    return None


def title_of(nodeid: str) -> str:
    return nodeid.split("::")[-1]


def _is_timeout(report) -> bool:
    return bool(getattr(report, "timed_out", False))


class RunReporter:
    """pytest plugin that logs test lifecycle events.

    Failed tests are not logged; pytest reports them in its own output.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger
        self.records: list[CaseResult] = []
        self._pending: dict[str, _Pending] = {}

    @property
    def log(self) -> logging.Logger:
        if self.logger is None:
            self.logger = configure_logging()
        return self.logger

    # Lifecycle events

    def on_test_begin(self, title: str) -> None:
        self.log.info(f"Starting Test Case: {title}")

    def on_test_end(self, result: CaseResult) -> None:
        self.records.append(result)
        if result.status == PASSED:
            self.log.info(f"{GREEN}Test Case Passed: {result.title}{RESET}")
        elif result.status == SKIPPED:
            self.log.info(f"{YELLOW}Test Case Skipped: {result.title}{RESET}")

    def on_error(self, message: str) -> None:
        self.log.error(message)

    # pytest hooks

    @pytest.hookimpl(hookwrapper=True)
    def pytest_runtest_makereport(self, item, call):
        outcome = yield
        report = outcome.get_result()
        if call.excinfo is not None:
            report.timed_out = call.excinfo.errisinstance((TimeoutError, asyncio.TimeoutError, PlaywrightTimeoutError))

    def pytest_runtest_logstart(self, nodeid, location):
        self._pending[nodeid] = _Pending(title=title_of(nodeid))
        self.on_test_begin(title_of(nodeid))

    def pytest_runtest_logreport(self, report):
        pending = self._pending.get(report.nodeid)
        if pending is None:
            return
        pending.duration += getattr(report, "duration", 0.0) or 0.0
        if pending.status == PASSED:
            if report.skipped:
                pending.status = SKIPPED
            elif report.failed:
                pending.status = TIMED_OUT if _is_timeout(report) else FAILED
                pending.error = getattr(report, "longreprtext", None) or str(report.longrepr)
        if report.when == "teardown":
            del self._pending[report.nodeid]
            self.on_test_end(
                CaseResult(
                    title=pending.title,
                    nodeid=report.nodeid,
                    status=pending.status,
                    error=pending.error,
                    duration=round(pending.duration, 3),
                    screenshot=screenshot_of(report),
                )
            )

    def pytest_collectreport(self, report):
        if report.failed:
            self.on_error(f"Collection failed for {report.nodeid}: {report.longreprtext}")

    def pytest_internalerror(self, excrepr, excinfo):
        self.on_error(str(excrepr))

    def summary(self) -> dict:
        counts = {PASSED: 0, FAILED: 0, SKIPPED: 0, TIMED_OUT: 0}
        for record in self.records:
            counts[record.status] = counts.get(record.status, 0) + 1
        counts["total"] = len(self.records)
        return counts
