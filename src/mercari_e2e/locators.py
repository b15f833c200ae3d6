import json
import re

from playwright.async_api import FrameLocator, Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import timeouts
from .errors import FrameNotFoundError
from .log import get_logger
from .page_context import get_page
from .queries import (
    ByLabel,
    ByPlaceholder,
    ByRole,
    ByTestId,
    ByText,
    Handle,
    InFrame,
    Query,
    QueryLike,
    Selector,
    TextLike,
    as_query,
)


logger = get_logger("locators")


def _exact(query) -> dict:
    return {"exact": query.exact} if query.exact is not None else {}


def _resolve_on(scope: Page | FrameLocator, query: Query, in_frame: bool = False) -> Locator:
    if isinstance(query, Handle):
        if in_frame:
            return scope.locator(query.locator)
        return query.locator
    if isinstance(query, Selector):
        if query.has_text is not None:
            return scope.locator(query.selector, has_text=query.has_text)
        return scope.locator(query.selector)
    if isinstance(query, ByRole):
        return scope.get_by_role(query.role, **query.options())
    if isinstance(query, ByText):
        return scope.get_by_text(query.text, **_exact(query))
    if isinstance(query, ByLabel):
        return scope.get_by_label(query.text, **_exact(query))
    if isinstance(query, ByPlaceholder):
        return scope.get_by_placeholder(query.text, **_exact(query))
    if isinstance(query, ByTestId):
        if query.attribute:
            if isinstance(query.test_id, re.Pattern):
                raise ValueError("A custom test id attribute only supports string ids")
            value = json.dumps(query.test_id, ensure_ascii=False)
            return scope.locator(f"[{query.attribute}={value}]")
        return scope.get_by_test_id(query.test_id)
    if isinstance(query, InFrame):
        return _resolve_on(scope.frame_locator(query.frame), query.target, in_frame=True)
    raise TypeError(f"Unsupported query type: {type(query).__name__}")


def resolve(query: QueryLike, page: Page | None = None) -> Locator:
    """Return a fresh locator for ``query``.

    Locators are lazy: nothing is looked up until an action or check runs, and
    resolving the same query twice yields two independent locators.
    """
    return _resolve_on(page or get_page(), as_query(query))


async def resolve_all(query: QueryLike, page: Page | None = None) -> list[Locator]:
    """One locator per matching element, in document order. Empty when nothing matches."""
    return await resolve(query, page).all()


async def ensure_frame(query: QueryLike, timeout: int | None = None, page: Page | None = None) -> None:
    query = as_query(query)
    if not isinstance(query, InFrame):
        return
    page = page or get_page()
    timeout = timeout or timeouts().small
    try:
        await page.locator(query.frame).first.wait_for(state="attached", timeout=timeout)
    except PlaywrightTimeoutError as exc:
        logger.debug(f"frame {query.frame!r} not attached: {exc}")
        raise FrameNotFoundError(query.frame, timeout) from exc
    # Nested frames are checked from inside their parent frame.
    if isinstance(query.target, InFrame):
        parent = page.frame_locator(query.frame)
        try:
            await parent.locator(query.target.frame).first.wait_for(state="attached", timeout=timeout)
        except PlaywrightTimeoutError as exc:
            raise FrameNotFoundError(query.target.frame, timeout) from exc


async def locate(query: QueryLike, timeout: int | None = None, page: Page | None = None) -> Locator:
    """Resolve ``query``, failing with FrameNotFoundError when its frame never attaches."""
    await ensure_frame(query, timeout=timeout, page=page)
    return resolve(query, page)


def get_locator(selector: QueryLike, has_text: TextLike | None = None) -> Locator:
    if isinstance(selector, str) and has_text is not None:
        return resolve(Selector(selector, has_text=has_text))
    return resolve(selector)


def get_locator_by_test_id(test_id: TextLike, attribute: str | None = None) -> Locator:
    return resolve(ByTestId(test_id, attribute=attribute))


def get_locator_by_text(text: TextLike, exact: bool | None = None) -> Locator:
    return resolve(ByText(text, exact=exact))


def get_locator_by_role(role: str, name: TextLike | None = None, exact: bool | None = None) -> Locator:
    return resolve(ByRole(role, name=name, exact=exact))


def get_locator_by_label(text: TextLike, exact: bool | None = None) -> Locator:
    return resolve(ByLabel(text, exact=exact))


def get_locator_by_placeholder(text: TextLike, exact: bool | None = None) -> Locator:
    return resolve(ByPlaceholder(text, exact=exact))


async def get_all_locators(selector: QueryLike) -> list[Locator]:
    return await resolve_all(selector)


def get_frame_locator(frame: str | FrameLocator) -> FrameLocator:
    if isinstance(frame, str):
        return get_page().frame_locator(frame)
    return frame


def get_locator_in_frame(frame: str | FrameLocator, target: QueryLike) -> Locator:
    if isinstance(frame, str):
        return resolve(InFrame(frame, as_query(target)))
    return _resolve_on(frame, as_query(target), in_frame=True)
