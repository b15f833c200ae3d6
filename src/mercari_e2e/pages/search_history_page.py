from ..actions import click
from ..assertions import expect_element_to_be_visible
from ..config import get_settings, timeouts
from ..elements import wait_for_condition
from ..errors import ExpectationError
from ..locators import get_locator_by_test_id
from ..queries import describe


def history_entries():
    return get_locator_by_test_id("search-history").locator("//p")


async def get_search_history() -> list[str]:
    # History is written asynchronously after a search; wait for the first entry.
    await wait_for_condition(lambda: history_entries().first.is_visible(), timeouts().small)
    await expect_element_to_be_visible(history_entries().first)
    return await history_entries().all_text_contents()


async def verify_recent_history(expected: str) -> None:
    history = await get_search_history()
    if not history or history[0] != expected:
        received = history[0] if history else None
        timeout = get_settings().expect_timeout
        raise ExpectationError(
            "most recent search",
            describe(history_entries().first),
            expected,
            received,
            timeout,
            message=None if history else "Search history is empty",
        )


async def click_on_recent_history() -> None:
    await expect_element_to_be_visible(history_entries().first)
    await click(history_entries().first)
