import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .config import POLL_INTERVAL_MS, get_settings, timeouts
from .log import get_logger
from .locators import locate, resolve, resolve_all
from .page_context import get_page
from .queries import QueryLike


logger = get_logger("elements")

Predicate = Callable[[], bool | Awaitable[bool]]


@dataclass
class PollResult:
    satisfied: bool
    samples: int
    elapsed_ms: float
    last_error: BaseException | None = None


async def _sample(predicate: Predicate) -> bool:
    result = predicate()
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def poll_condition(
    predicate: Predicate,
    timeout: int,
    interval: int = POLL_INTERVAL_MS,
) -> PollResult:
    """Sample ``predicate`` every ``interval`` ms until it holds or ``timeout`` ms pass.

    A sample that raises counts as false; the last error is kept on the result
    so callers can tell "never became true" from "kept failing".
    """
    start = time.monotonic()
    deadline = start + timeout / 1000
    samples = 0
    last_error = None
    while True:
        samples += 1
        try:
            if await _sample(predicate):
                return PollResult(True, samples, (time.monotonic() - start) * 1000, last_error)
        except Exception as exc:
            last_error = exc
            logger.debug(f"poll sample {samples} raised {type(exc).__name__}: {exc}")
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return PollResult(False, samples, (time.monotonic() - start) * 1000, last_error)
        await asyncio.sleep(min(interval / 1000, remaining))


async def wait_for_condition(predicate: Predicate, timeout: int) -> bool:
    """True as soon as ``predicate`` holds, False once ``timeout`` ms have elapsed. Never raises."""
    result = await poll_condition(predicate, timeout)
    return result.satisfied


# Retrieval


async def get_text(query: QueryLike, timeout: int | None = None) -> str:
    locator = await locate(query)
    return await locator.inner_text(timeout=timeout)


async def get_all_texts(query: QueryLike) -> list[str]:
    locator = await locate(query)
    return await locator.all_inner_texts()


async def get_input_value(query: QueryLike, timeout: int | None = None) -> str:
    locator = await locate(query)
    return await locator.input_value(timeout=timeout)


async def get_all_input_values(query: QueryLike, timeout: int | None = None) -> list[str]:
    locators = await resolve_all(query)
    return list(await asyncio.gather(*(loc.input_value(timeout=timeout) for loc in locators)))


async def get_attribute(query: QueryLike, name: str, timeout: int | None = None) -> str | None:
    locator = await locate(query)
    return await locator.get_attribute(name, timeout=timeout)


async def save_storage_state(path: str | None = None) -> dict:
    return await get_page().context.storage_state(path=path)


async def get_url(wait_until: str = "load") -> str:
    try:
        state = wait_until if wait_until != "commit" else get_settings().load_state
        await get_page().wait_for_load_state(state)
        return get_page().url
    except Exception as exc:
        logger.debug(f"get_url - {exc}")
        return ""


async def get_locator_count(query: QueryLike, timeout: int | None = None) -> int:
    timeout = timeout or timeouts().instant
    if await is_element_attached(query, timeout=timeout):
        return len(await resolve_all(query))
    return 0


async def get_checkbox_states(label_selector: str) -> list[dict[str, Any]]:
    """Text and checked state of every checkbox wrapped in a label matching ``label_selector``."""
    return await get_page().eval_on_selector_all(
        label_selector,
        """labels => labels.map(label => {
            const box = label.querySelector('input[type="checkbox"]');
            return { text: label.innerText.trim(), isChecked: box ? box.checked : false };
        })""",
    )


# Conditions. All of them return False instead of raising.


async def is_element_attached(query: QueryLike, timeout: int | None = None) -> bool:
    timeout = timeout or timeouts().small
    try:
        await resolve(query).first.wait_for(state="attached", timeout=timeout)
        return True
    except Exception as exc:
        logger.debug(f"is_element_attached - {exc}")
        return False


async def is_element_visible(query: QueryLike, timeout: int | None = None) -> bool:
    timeout = timeout or timeouts().small
    return await wait_for_condition(lambda: resolve(query).is_visible(), timeout)


async def is_element_hidden(query: QueryLike, timeout: int | None = None) -> bool:
    timeout = timeout or timeouts().small
    return await wait_for_condition(lambda: resolve(query).is_hidden(), timeout)


async def is_element_checked(query: QueryLike, timeout: int | None = None) -> bool:
    try:
        if await is_element_visible(query, timeout=timeout):
            return await resolve(query).is_checked(timeout=timeouts().instant)
    except Exception as exc:
        logger.debug(f"is_element_checked - {exc}")
    return False
