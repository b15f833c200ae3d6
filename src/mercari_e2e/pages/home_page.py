from ..actions import click, fill, goto_url
from ..assertions import expect_element_to_be_visible
from ..config import get_settings
from ..locators import get_locator_by_test_id


def logo():
    return get_locator_by_test_id("mercari-logo")


def search_bar():
    return get_locator_by_test_id("search-autocomplete")


def search_icon():
    return search_bar().locator("//div[@data-location='search_top:body']//button")


def search_input():
    return search_bar().locator("//input")


async def navigate_to_home_page() -> None:
    await goto_url(get_settings().base_url)


async def navigate_to_home_from_anywhere() -> None:
    await expect_element_to_be_visible(logo())
    await click(logo())


async def click_on_search_bar() -> None:
    await expect_element_to_be_visible(search_input())
    await click(search_bar())


async def type_to_search(value: str) -> None:
    """Type ``value`` into the search bar and submit it with the search icon."""
    await expect_element_to_be_visible(search_input())
    await fill(search_input(), value)
    await click(search_icon())
