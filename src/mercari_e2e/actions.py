import asyncio
from contextlib import asynccontextmanager
from typing import Awaitable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import get_settings, timeouts
from .errors import ActionFailureError, ActionTimeoutError, NavigationTimeoutError
from .log import get_logger
from .locators import locate
from .page_context import get_page
from .queries import QueryLike, describe


logger = get_logger("actions")


def _load_state(wait_until: str | None = None) -> str:
    if wait_until and wait_until != "commit":
        return wait_until
    return get_settings().load_state


@asynccontextmanager
async def _dispatch(action: str, query: QueryLike):
    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise ActionTimeoutError(action, describe(query), exc) from exc
    except PlaywrightError as exc:
        raise ActionFailureError(action, describe(query), exc) from exc


async def _join_navigation(page: Page, trigger: Awaitable, name: str, timeout: int):
    """Run ``trigger`` while waiting for the next ``framenavigated`` event.

    The waiter starts first so a fast navigation is not missed. If the trigger
    fails the waiter is cancelled and awaited before the error propagates.
    """
    navigated = asyncio.ensure_future(page.wait_for_event("framenavigated", timeout=timeout))
    try:
        result = await trigger
    except BaseException as exc:
        navigated.cancel()
        await asyncio.gather(navigated, return_exceptions=True)
        if isinstance(exc, PlaywrightTimeoutError):
            raise NavigationTimeoutError(name, timeout, exc) from exc
        raise
    try:
        await navigated
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeoutError(name, timeout, exc) from exc
    return result


# Navigation


async def goto_url(path: str, wait_until: str | None = None, timeout: int | None = None) -> Response | None:
    timeout = timeout or timeouts().navigation
    try:
        return await get_page().goto(path, wait_until=_load_state(wait_until), timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeoutError(f"goto {path}", timeout, exc) from exc


async def wait_for_page_load_state(wait_until: str | None = None, timeout: int | None = None) -> None:
    timeout = timeout or timeouts().navigation
    state = _load_state(wait_until)
    try:
        await get_page().wait_for_load_state(state, timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeoutError(f"load state '{state}'", timeout, exc) from exc


async def reload_page(wait_until: str | None = None, timeout: int | None = None) -> None:
    page = get_page()
    timeout = timeout or timeouts().navigation
    await _join_navigation(page, page.reload(timeout=timeout), "reload", timeout)
    await wait_for_page_load_state(wait_until, timeout=timeout)


async def go_back(wait_until: str | None = None, timeout: int | None = None) -> None:
    page = get_page()
    timeout = timeout or timeouts().navigation
    await _join_navigation(page, page.go_back(timeout=timeout), "go back", timeout)
    await wait_for_page_load_state(wait_until, timeout=timeout)


# Element actions


async def click(query: QueryLike, timeout: int | None = None, **options) -> None:
    async with _dispatch("click", query):
        locator = await locate(query)
        await locator.click(timeout=timeout, **options)


async def click_and_navigate(
    query: QueryLike,
    timeout: int | None = None,
    load_state: str | None = None,
    **options,
) -> None:
    """Click ``query`` and wait for the navigation it triggers to settle."""
    page = get_page()
    timeout = timeout or timeouts().standard
    await _join_navigation(page, click(query, timeout=timeout, **options), f"click on {describe(query)}", timeout)
    state = _load_state(load_state)
    try:
        await page.wait_for_load_state(state, timeout=timeout)
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeoutError(f"click on {describe(query)}", timeout, exc) from exc
    logger.debug(f"navigated to {page.url} after clicking {describe(query)}")


async def fill(query: QueryLike, value: str, timeout: int | None = None, **options) -> None:
    async with _dispatch("fill", query):
        locator = await locate(query)
        await locator.fill(value, timeout=timeout, **options)


async def clear(query: QueryLike, timeout: int | None = None, **options) -> None:
    async with _dispatch("clear", query):
        locator = await locate(query)
        await locator.clear(timeout=timeout, **options)


async def check(query: QueryLike, timeout: int | None = None, **options) -> None:
    async with _dispatch("check", query):
        locator = await locate(query)
        await locator.check(timeout=timeout, **options)


async def uncheck(query: QueryLike, timeout: int | None = None, **options) -> None:
    async with _dispatch("uncheck", query):
        locator = await locate(query)
        await locator.uncheck(timeout=timeout, **options)


async def hover(query: QueryLike, timeout: int | None = None, **options) -> None:
    async with _dispatch("hover", query):
        locator = await locate(query)
        await locator.hover(timeout=timeout, **options)


async def select_by_value(query: QueryLike, value: str, timeout: int | None = None) -> list[str]:
    async with _dispatch("select by value", query):
        locator = await locate(query)
        return await locator.select_option(value=value, timeout=timeout)


async def select_by_values(query: QueryLike, values: list[str], timeout: int | None = None) -> list[str]:
    async with _dispatch("select by values", query):
        locator = await locate(query)
        return await locator.select_option(value=values, timeout=timeout)


async def select_by_text(query: QueryLike, text: str, timeout: int | None = None) -> list[str]:
    async with _dispatch("select by text", query):
        locator = await locate(query)
        return await locator.select_option(label=text, timeout=timeout)


async def select_by_index(query: QueryLike, index: int, timeout: int | None = None) -> list[str]:
    async with _dispatch("select by index", query):
        locator = await locate(query)
        return await locator.select_option(index=index, timeout=timeout)
