import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://jp.mercari.com/"
DEFAULT_LOAD_STATE = "domcontentloaded"
LOAD_STATES = ("load", "domcontentloaded", "networkidle", "commit")
BROWSERS = ("chromium", "firefox", "webkit")

POLL_INTERVAL_MS = 100

INSTANT_TIMEOUT = 1000
SMALL_TIMEOUT = 5 * 1000
STANDARD_TIMEOUT = 15 * 1000
ACTION_TIMEOUT = 20 * 1000
NAVIGATION_TIMEOUT = 30 * 1000
TEST_TIMEOUT = 2 * 60 * 1000


@dataclass(frozen=True)
class Timeouts:
    """Named wait budgets in milliseconds.

    The budgets must satisfy instant < small < standard < action <= navigation <= test.
    """

    instant: int = INSTANT_TIMEOUT
    small: int = SMALL_TIMEOUT
    standard: int = STANDARD_TIMEOUT
    action: int = ACTION_TIMEOUT
    navigation: int = NAVIGATION_TIMEOUT
    test: int = TEST_TIMEOUT

    def __post_init__(self):
        if not (0 < self.instant < self.small < self.standard < self.action):
            raise ValueError(
                f"Timeouts must satisfy 0 < instant < small < standard < action, got "
                f"{self.instant}/{self.small}/{self.standard}/{self.action}"
            )
        if not (self.action <= self.navigation <= self.test):
            raise ValueError(
                f"Timeouts must satisfy action <= navigation <= test, got "
                f"{self.action}/{self.navigation}/{self.test}"
            )


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    headless: bool = True
    browser: str = "chromium"
    load_state: str = DEFAULT_LOAD_STATE
    test_id_attribute: str = "data-testid"
    viewport: dict = field(default_factory=lambda: {"width": 1600, "height": 1000})
    timeouts: Timeouts = field(default_factory=Timeouts)
    expect_timeout: int = STANDARD_TIMEOUT
    log_file: str = "logs/info.log"
    log_level: str = "INFO"
    screenshot_dir: str = "logs/screenshots"
    username: str | None = None
    password: str | None = None
    totp_secret: str | None = None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: str | Path | None = ".env") -> Settings:
    """Build settings from the environment, loading ``env_file`` first when it exists."""
    if env_file and Path(env_file).exists():
        load_dotenv(env_file)

    timeouts = Timeouts(
        instant=_env_int("E2E_TIMEOUT_INSTANT", INSTANT_TIMEOUT),
        small=_env_int("E2E_TIMEOUT_SMALL", SMALL_TIMEOUT),
        standard=_env_int("E2E_TIMEOUT_STANDARD", STANDARD_TIMEOUT),
        action=_env_int("E2E_TIMEOUT_ACTION", ACTION_TIMEOUT),
        navigation=_env_int("E2E_TIMEOUT_NAVIGATION", NAVIGATION_TIMEOUT),
        test=_env_int("E2E_TIMEOUT_TEST", TEST_TIMEOUT),
    )

    load_state = os.environ.get("E2E_LOAD_STATE", DEFAULT_LOAD_STATE)
    if load_state not in LOAD_STATES or load_state == "commit":
        load_state = DEFAULT_LOAD_STATE

    browser = os.environ.get("E2E_BROWSER", "chromium").strip().lower() or "chromium"
    if browser not in BROWSERS:
        raise ValueError(f"E2E_BROWSER must be one of {', '.join(BROWSERS)}, got {browser!r}")

    return Settings(
        base_url=os.environ.get("URL") or DEFAULT_BASE_URL,
        headless=_env_bool("E2E_HEADLESS", True),
        browser=browser,
        load_state=load_state,
        test_id_attribute=os.environ.get("E2E_TEST_ID_ATTRIBUTE", "data-testid"),
        timeouts=timeouts,
        expect_timeout=_env_int("E2E_EXPECT_TIMEOUT", timeouts.standard),
        log_file=os.environ.get("E2E_LOG_FILE", "logs/info.log"),
        log_level=os.environ.get("E2E_LOG_LEVEL", "INFO").upper(),
        screenshot_dir=os.environ.get("E2E_SCREENSHOT_DIR") or "logs/screenshots",
        username=os.environ.get("E2E_USERNAME") or None,
        password=os.environ.get("E2E_PASSWORD") or None,
        totp_secret=os.environ.get("E2E_TOTP_SECRET") or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def reset_settings() -> None:
    get_settings.cache_clear()


def timeouts() -> Timeouts:
    return get_settings().timeouts
