"""Polling assertions on elements and on the page.

Every assertion retries until the condition holds or the expectation timeout
(``E2E_EXPECT_TIMEOUT``, overridable per call) runs out. A failing hard
assertion raises ``ExpectationError``; with ``soft=True`` the error is
recorded on the current page session instead, and surfaces only when
``assert_all_soft_assertions()`` is called.

Expected text, attribute, URL and title values may be an exact string, a
substring (for the ``contain`` forms) or a compiled regular expression, which
is searched. ``contain`` forms also accept a list of alternatives.
"""

import re
import time
from enum import Enum
from typing import Any, Sequence

from playwright.async_api import Locator

from .config import POLL_INTERVAL_MS, get_settings
from .elements import poll_condition
from .errors import ExpectationError, SoftAssertionsError
from .log import get_logger
from .locators import resolve
from .page_context import get_page, soft_errors
from .queries import QueryLike, TextLike, describe


logger = get_logger("assertions")

SELECTED_VALUES_SCRIPT = "el => Array.from(el.selectedOptions || []).map(option => option.value)"
EDITABLE_VALUE_SCRIPT = (
    "el => ['INPUT', 'TEXTAREA', 'SELECT'].includes(el.tagName) ? el.value : (el.textContent || '')"
)


class Condition(str, Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"
    ATTACHED = "attached"
    IN_VIEWPORT = "in_viewport"
    CHECKED = "checked"
    DISABLED = "disabled"
    ENABLED = "enabled"
    EDITABLE = "editable"
    TEXT = "text"
    CONTAIN_TEXT = "contain_text"
    VALUE = "value"
    VALUES = "values"
    EMPTY = "empty"
    ATTRIBUTE = "attribute"
    CONTAIN_ATTRIBUTE = "contain_attribute"
    COUNT = "count"


class PageCondition(str, Enum):
    URL = "url"
    CONTAIN_URL = "contain_url"
    TITLE = "title"


def _normalize(text: str) -> str:
    return " ".join(text.split())


def text_matches(
    actual: str | None,
    expected: TextLike,
    contains: bool = False,
    ignore_case: bool = False,
    normalize: bool = True,
) -> bool:
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        if ignore_case and not expected.flags & re.IGNORECASE:
            expected = re.compile(expected.pattern, expected.flags | re.IGNORECASE)
        return expected.search(actual) is not None
    if normalize:
        actual, expected = _normalize(actual), _normalize(expected)
    if ignore_case:
        actual, expected = actual.casefold(), expected.casefold()
    return expected in actual if contains else actual == expected


def any_matches(actual: str | None, expected: TextLike | Sequence[TextLike], **kwargs) -> bool:
    alternatives = expected if isinstance(expected, (list, tuple)) else [expected]
    return any(text_matches(actual, alt, **kwargs) for alt in alternatives)


def _all_match(actual: list[str], expected: Sequence[TextLike], **kwargs) -> bool:
    if len(actual) != len(expected):
        return False
    return all(text_matches(a, e, **kwargs) for a, e in zip(actual, expected))


def _sample_timeout(deadline: float) -> int:
    """Per-sample budget for getters that auto-wait; never 0, which Playwright reads as "no timeout"."""
    remaining = int((deadline - time.monotonic()) * 1000)
    return max(1, min(POLL_INTERVAL_MS, remaining))


async def _text_of(locator: Locator, options: dict, timeout: int) -> str | None:
    if options.get("use_inner_text"):
        return await locator.inner_text(timeout=timeout)
    return await locator.text_content(timeout=timeout)


async def _texts_of(locator: Locator, options: dict) -> list[str]:
    if options.get("use_inner_text"):
        return await locator.all_inner_texts()
    return await locator.all_text_contents()


async def _in_viewport(locator: Locator, timeout: int) -> bool:
    box = await locator.bounding_box(timeout=timeout)
    if not box:
        return False
    viewport = locator.page.viewport_size
    if not viewport:
        return True
    return (
        box["x"] < viewport["width"]
        and box["x"] + box["width"] > 0
        and box["y"] < viewport["height"]
        and box["y"] + box["height"] > 0
    )


async def _sample_condition(
    locator: Locator,
    condition: Condition,
    expected: Any,
    options: dict,
    timeout: int = POLL_INTERVAL_MS,
) -> tuple[bool, Any]:
    """Take one sample of ``condition``; returns (holds, received value).

    Getters that wait for the element are capped at ``timeout`` ms so a
    missing element costs one short sample, not the page default timeout.
    """
    ignore_case = bool(options.get("ignore_case"))

    if condition is Condition.VISIBLE:
        visible = await locator.is_visible()
        return visible, "visible" if visible else "hidden"
    if condition is Condition.HIDDEN:
        hidden = await locator.is_hidden()
        return hidden, "hidden" if hidden else "visible"
    if condition is Condition.ATTACHED:
        count = await locator.count()
        return count > 0, "attached" if count else "detached"
    if condition is Condition.COUNT:
        count = await locator.count()
        return count == expected, count
    if condition is Condition.TEXT and isinstance(expected, (list, tuple)):
        texts = await _texts_of(locator, options)
        return _all_match(texts, expected, ignore_case=ignore_case), texts

    if await locator.count() == 0:
        return False, None

    if condition is Condition.IN_VIEWPORT:
        inside = await _in_viewport(locator, timeout)
        return inside, "in viewport" if inside else "outside viewport"
    if condition is Condition.CHECKED:
        checked = await locator.is_checked(timeout=timeout)
        return checked, "checked" if checked else "unchecked"
    if condition is Condition.DISABLED:
        disabled = await locator.is_disabled(timeout=timeout)
        return disabled, "disabled" if disabled else "enabled"
    if condition is Condition.ENABLED:
        enabled = await locator.is_enabled(timeout=timeout)
        return enabled, "enabled" if enabled else "disabled"
    if condition is Condition.EDITABLE:
        editable = await locator.is_editable(timeout=timeout)
        return editable, "editable" if editable else "read-only"
    if condition is Condition.TEXT:
        text = await _text_of(locator, options, timeout)
        return text_matches(text, expected, ignore_case=ignore_case), text
    if condition is Condition.CONTAIN_TEXT:
        text = await _text_of(locator, options, timeout)
        return any_matches(text, expected, contains=True, ignore_case=ignore_case), text
    if condition is Condition.VALUE:
        value = await locator.input_value(timeout=timeout)
        return text_matches(value, expected, normalize=False), value
    if condition is Condition.VALUES:
        values = await locator.evaluate(SELECTED_VALUES_SCRIPT, timeout=timeout)
        return _all_match(values, expected, normalize=False), values
    if condition is Condition.EMPTY:
        value = await locator.evaluate(EDITABLE_VALUE_SCRIPT, timeout=timeout)
        return value == "", value
    if condition is Condition.ATTRIBUTE:
        value = await locator.get_attribute(options["name"], timeout=timeout)
        return text_matches(value, expected, normalize=False, ignore_case=ignore_case), value
    if condition is Condition.CONTAIN_ATTRIBUTE:
        value = await locator.get_attribute(options["name"], timeout=timeout)
        return any_matches(value, expected, contains=True, normalize=False, ignore_case=ignore_case), value
    raise ValueError(f"Unknown condition: {condition}")


def _report(error: ExpectationError, soft: bool) -> None:
    if not soft:
        raise error
    soft_errors().append(error)
    logger.warning(f"Soft assertion failed: {str(error).splitlines()[0]}")


async def assert_condition(
    query: QueryLike,
    condition: Condition | str,
    expected: Any = None,
    *,
    negate: bool = False,
    soft: bool = False,
    timeout: int | None = None,
    message: str | None = None,
    **options,
) -> None:
    """Poll ``condition`` on the element(s) matched by ``query`` until it holds."""
    condition = Condition(condition)
    timeout = timeout or get_settings().expect_timeout
    received = []
    deadline = time.monotonic() + timeout / 1000

    async def sample() -> bool:
        # Re-resolved on every sample so a re-rendered element is picked up.
        holds, value = await _sample_condition(resolve(query), condition, expected, options, _sample_timeout(deadline))
        received[:] = [value]
        return holds != negate

    result = await poll_condition(sample, timeout)
    if result.satisfied:
        return
    name = f"not {condition.value}" if negate else condition.value
    if condition in (Condition.ATTRIBUTE, Condition.CONTAIN_ATTRIBUTE):
        name = f"{name} [{options['name']}]"
    actual = received[0] if received else f"<error: {result.last_error}>"
    _report(ExpectationError(name, describe(query), expected, actual, timeout, message), soft)


async def assert_page_condition(
    condition: PageCondition | str,
    expected: TextLike,
    *,
    negate: bool = False,
    soft: bool = False,
    timeout: int | None = None,
    message: str | None = None,
    ignore_case: bool = False,
) -> None:
    condition = PageCondition(condition)
    timeout = timeout or get_settings().expect_timeout
    page = get_page()
    received = []

    async def sample() -> bool:
        if condition is PageCondition.TITLE:
            value = await page.title()
            holds = text_matches(value, expected, ignore_case=ignore_case)
        else:
            value = page.url
            holds = text_matches(
                value,
                expected,
                contains=condition is PageCondition.CONTAIN_URL,
                normalize=False,
                ignore_case=ignore_case,
            )
        received[:] = [value]
        return holds != negate

    result = await poll_condition(sample, timeout)
    if result.satisfied:
        return
    name = f"not {condition.value}" if negate else condition.value
    actual = received[0] if received else f"<error: {result.last_error}>"
    _report(ExpectationError(name, "page", expected, actual, timeout, message), soft)


def assert_all_soft_assertions() -> None:
    """Fail once with every soft assertion error collected so far in this test."""
    errors = soft_errors()
    if errors:
        raise SoftAssertionsError(errors)


# Locator assertions


async def expect_element_to_be_visible(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.VISIBLE, **options)


async def expect_element_to_be_hidden(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.HIDDEN, **options)


async def expect_element_to_be_attached(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.ATTACHED, **options)


async def expect_element_to_be_in_viewport(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.IN_VIEWPORT, **options)


async def expect_element_to_be_checked(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.CHECKED, **options)


async def expect_element_not_to_be_checked(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.CHECKED, negate=True, **options)


async def expect_element_to_be_disabled(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.DISABLED, **options)


async def expect_element_to_be_enabled(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.ENABLED, **options)


async def expect_element_to_be_editable(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.EDITABLE, **options)


async def expect_element_to_have_text(query: QueryLike, text, **options) -> None:
    await assert_condition(query, Condition.TEXT, text, **options)


async def expect_element_not_to_have_text(query: QueryLike, text, **options) -> None:
    await assert_condition(query, Condition.TEXT, text, negate=True, **options)


async def expect_element_to_contain_text(query: QueryLike, text, **options) -> None:
    await assert_condition(query, Condition.CONTAIN_TEXT, text, **options)


async def expect_element_not_to_contain_text(query: QueryLike, text, **options) -> None:
    await assert_condition(query, Condition.CONTAIN_TEXT, text, negate=True, **options)


async def expect_element_to_have_value(query: QueryLike, value: TextLike, **options) -> None:
    await assert_condition(query, Condition.VALUE, value, **options)


async def expect_element_to_have_values(query: QueryLike, values: list[TextLike], **options) -> None:
    await assert_condition(query, Condition.VALUES, values, **options)


async def expect_element_value_to_be_empty(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.EMPTY, **options)


async def expect_element_value_not_to_be_empty(query: QueryLike, **options) -> None:
    await assert_condition(query, Condition.EMPTY, negate=True, **options)


async def expect_element_to_have_attribute(query: QueryLike, attribute: str, value: TextLike, **options) -> None:
    await assert_condition(query, Condition.ATTRIBUTE, value, name=attribute, **options)


async def expect_element_to_contain_attribute(query: QueryLike, attribute: str, value, **options) -> None:
    await assert_condition(query, Condition.CONTAIN_ATTRIBUTE, value, name=attribute, **options)


async def expect_element_to_have_count(query: QueryLike, count: int, **options) -> None:
    await assert_condition(query, Condition.COUNT, count, **options)


# Page assertions


async def expect_page_to_have_url(url: TextLike, **options) -> None:
    await assert_page_condition(PageCondition.URL, url, **options)


async def expect_page_to_contain_url(url: str, **options) -> None:
    await assert_page_condition(PageCondition.CONTAIN_URL, url, **options)


async def expect_page_to_have_title(title: TextLike, **options) -> None:
    await assert_page_condition(PageCondition.TITLE, title, **options)
