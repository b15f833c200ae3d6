import re

import pyotp

from ..actions import click_and_navigate, fill, goto_url
from ..config import get_settings, timeouts
from ..elements import is_element_visible
from ..errors import E2EError, ElementNotFoundError
from ..log import get_logger
from ..queries import ByLabel, ByRole, QueryLike, Selector


logger = get_logger("pages.login")

LOGIN_PATH = "signin"

EMAIL_CANDIDATES = [
    ByLabel(re.compile(r"(email|メールアドレス|電話番号)", re.I)),
    Selector("input[type='email']"),
    Selector("input[name='emailOrPhone']"),
    Selector("input[name='email']"),
]
PASSWORD_CANDIDATES = [
    ByLabel(re.compile(r"(password|パスワード)", re.I)),
    Selector("input[type='password']"),
    Selector("input[name='password']"),
]
SUBMIT_CANDIDATES = [
    ByRole("button", name=re.compile(r"^(ログイン|sign\s*in|log\s*in|次へ|continue)$", re.I)),
    Selector("button[type='submit']"),
]
OTP_CANDIDATES = [
    ByLabel(re.compile(r"(認証|確認|one[- ]?time|verification).*(コード|code)", re.I)),
    Selector("input[autocomplete='one-time-code']"),
    Selector("input[name*='code']"),
]


async def _first_visible(candidates: list[QueryLike], timeout: int) -> QueryLike | None:
    for candidate in candidates:
        if await is_element_visible(candidate, timeout=timeout):
            return candidate
    return None


async def _fill_first(candidates: list[QueryLike], value: str, what: str) -> None:
    target = await _first_visible(candidates, timeouts().small)
    if target is None:
        raise ElementNotFoundError(f"Unable to find the {what} field")
    await fill(target, value)
    logger.debug(f"filled {what} via {target}")


async def _submit() -> None:
    target = await _first_visible(SUBMIT_CANDIDATES, timeouts().small)
    if target is None:
        raise ElementNotFoundError("Unable to find the submit button")
    await click_and_navigate(target, timeout=timeouts().navigation)


async def open_login_page() -> None:
    await goto_url(get_settings().base_url.rstrip("/") + "/" + LOGIN_PATH)


async def fill_credentials_and_submit(username: str, password: str) -> None:
    await _fill_first(EMAIL_CANDIDATES, username, "email")
    await _fill_first(PASSWORD_CANDIDATES, password, "password")
    await _submit()


async def submit_one_time_code(secret: str) -> None:
    """Fill the current TOTP code for ``secret``; retries once with a fresh code."""
    for attempt in range(2):
        code = pyotp.TOTP(secret).now()
        logger.info(f"Submitting one-time code (attempt {attempt + 1})")
        try:
            await _fill_first(OTP_CANDIDATES, code, "one-time code")
            await _submit()
            return
        except E2EError as exc:
            if attempt == 1:
                raise
            logger.warning(f"One-time code attempt failed: {exc}")


async def login(username: str | None = None, password: str | None = None, totp_secret: str | None = None) -> None:
    settings = get_settings()
    username = username or settings.username
    password = password or settings.password
    totp_secret = totp_secret or settings.totp_secret
    if not username or not password:
        raise ValueError("Login needs E2E_USERNAME and E2E_PASSWORD")

    await open_login_page()
    await fill_credentials_and_submit(username, password)
    if totp_secret:
        await submit_one_time_code(totp_secret)
