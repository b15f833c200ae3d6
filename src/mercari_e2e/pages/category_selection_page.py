from ..actions import click
from ..assertions import expect_element_to_be_visible, expect_element_to_contain_text
from ..config import get_settings
from ..elements import get_checkbox_states, wait_for_condition
from ..errors import ExpectationError
from ..locators import get_locator, get_locator_by_test_id
from ..translations import (
    BookCategory,
    BooksMusicGamesSubCategory,
    CdDvdCategory,
    Category,
    DvdCategory,
    SearchMenu,
)


CONTAINER_TEST_ID = "merListItem-container"
CATEGORY_SELECT = "//select[@class='merInputNode select__da4764db medium__da4764db']"
CHECKBOX_LABEL = "label.merCheckboxLabel"


def _menu_link(text: str):
    return get_locator_by_test_id(CONTAINER_TEST_ID).locator(f"//a[text()='{text}']")


def category_menu():
    return get_locator_by_test_id(CONTAINER_TEST_ID).locator(f"//p[text()='{SearchMenu.CATEGORY.value}']")


def selected_category():
    return get_locator(CATEGORY_SELECT).first


def selected_sub_category():
    return get_locator(CATEGORY_SELECT).last


async def _open(link) -> None:
    await expect_element_to_be_visible(link)
    await click(link)


async def select_category() -> None:
    await _open(category_menu())


async def select_sub_category_books() -> None:
    await _open(_menu_link(Category.BOOKS_MUSIC_GAMES.value))


async def select_books() -> None:
    await _open(_menu_link(BooksMusicGamesSubCategory.BOOKS.value))


async def select_it_category() -> None:
    await _open(_menu_link(BookCategory.COMPUTERS_TECHNOLOGY.value))


async def select_sub_category_dvd() -> None:
    await _open(_menu_link(Category.CD_DVD.value))


async def select_dvd() -> None:
    await _open(_menu_link(CdDvdCategory.DVD.value))


async def select_tv_category() -> None:
    await _open(_menu_link(DvdCategory.TV.value))


async def category_selected(category: str) -> None:
    await expect_element_to_be_visible(selected_category())
    await expect_element_to_contain_text(selected_category(), category)


async def sub_category_selected(sub_category: str) -> None:
    await expect_element_to_be_visible(selected_sub_category())
    await expect_element_to_contain_text(selected_sub_category(), sub_category)


async def checked_checkbox_texts() -> list[str]:
    states = await get_checkbox_states(CHECKBOX_LABEL)
    return [state["text"] for state in states if state["isChecked"]]


async def check_checkboxes(expected_checked: list[str], timeout: int | None = None) -> None:
    """Wait until exactly ``expected_checked`` are the ticked checkbox labels, in page order."""
    timeout = timeout or get_settings().expect_timeout
    expected = list(expected_checked)
    checked: list[str] = []

    async def matches() -> bool:
        nonlocal checked
        checked = await checked_checkbox_texts()
        return checked == expected

    if not await wait_for_condition(matches, timeout):
        raise ExpectationError("checked checkboxes", f"locator({CHECKBOX_LABEL!r})", expected, checked, timeout)


async def generate_search_history_with_dvd() -> None:
    await select_category()
    await select_sub_category_dvd()
    await select_dvd()
    await select_tv_category()


async def generate_search_history_with_books_it() -> None:
    await select_category()
    await select_sub_category_books()
    await select_books()
    await select_it_category()
